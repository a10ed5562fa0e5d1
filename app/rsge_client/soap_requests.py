"""
Requests tipados del WayBillService (uno por método remoto)

Cada request expone METHOD (nombre del método SOAP) y to_params(), que
devuelve el mapa ordenado de parámetros que serializa xml_codec.build_params.
"""
from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Dict, Union

from .models import Credentials, InvoiceInput, WaybillInput
from .xml_codec import ParamValue, RawXml, build_element, build_list

DateLike = Union[date, str]

Params = Dict[str, ParamValue]


@dataclass(frozen=True)
class SoapRequest:
    METHOD: ClassVar[str] = ""

    def to_params(self) -> Params:
        raise NotImplementedError


@dataclass(frozen=True)
class AuthenticatedRequest(SoapRequest):
    """Request que viaja con su/sp"""
    credentials: Credentials

    def _auth_params(self) -> Params:
        return {"su": self.credentials.su, "sp": self.credentials.sp}


# ---------------------------------------------------------------------
# Guías (waybills)
# ---------------------------------------------------------------------
def goods_list_xml(waybill: WaybillInput) -> RawXml:
    goods = [
        build_element("GOOD", {
            "ID": 0,
            "W_NAME": good.name,
            "UNIT_ID": good.unit_id,
            "QUANTITY": good.quantity,
            "PRICE": good.price,
            "BAR_CODE": good.bar_code,
            "A_ID": 0,
        })
        for good in waybill.goods
    ]
    return build_list("GOODS_LIST", goods)


@dataclass(frozen=True)
class SaveWaybillRequest(AuthenticatedRequest):
    METHOD: ClassVar[str] = "save_waybill"

    waybill: WaybillInput

    def to_params(self) -> Params:
        waybill = self.waybill
        params = self._auth_params()
        params.update({
            "TYPE": waybill.type,
            "STATUS": waybill.status,
            "BUYER_TIN": waybill.buyer_tin,
            "BUYER_NAME": waybill.buyer_name,
            "START_ADDRESS": waybill.start_address,
            "END_ADDRESS": waybill.end_address,
            "DRIVER_TIN": waybill.driver_tin,
            "CAR_NUMBER": waybill.car_number,
            # Nombre del parámetro tal cual lo define el servicio
            "TRANSPORT_COAST": waybill.transportation_cost,
            "GOODS_LIST": goods_list_xml(waybill),
        })
        return params


@dataclass(frozen=True)
class WaybillIdRequest(AuthenticatedRequest):
    waybill_id: str

    def to_params(self) -> Params:
        params = self._auth_params()
        params["ID"] = self.waybill_id
        return params


@dataclass(frozen=True)
class SendWaybillRequest(WaybillIdRequest):
    METHOD: ClassVar[str] = "send_waybill"


@dataclass(frozen=True)
class DeleteWaybillRequest(WaybillIdRequest):
    METHOD: ClassVar[str] = "del_waybill"


@dataclass(frozen=True)
class CloseWaybillRequest(WaybillIdRequest):
    METHOD: ClassVar[str] = "close_waybill"


@dataclass(frozen=True)
class GetWaybillsRequest(AuthenticatedRequest):
    METHOD: ClassVar[str] = "get_waybills"

    date_from: DateLike
    date_to: DateLike
    # 0 = todos los tipos, -1 = todos los estados
    waybill_type: int = 0
    waybill_status: int = -1

    def to_params(self) -> Params:
        params = self._auth_params()
        params.update({
            "DT_F": self.date_from,
            "DT_T": self.date_to,
            "ITYPE": self.waybill_type,
            "ISTATUS": self.waybill_status,
        })
        return params


@dataclass(frozen=True)
class GetWaybillUnitsRequest(AuthenticatedRequest):
    METHOD: ClassVar[str] = "get_waybill_units"

    def to_params(self) -> Params:
        return self._auth_params()


# ---------------------------------------------------------------------
# Facturas (VAT invoices)
# ---------------------------------------------------------------------
def items_list_xml(invoice: InvoiceInput) -> RawXml:
    items = [
        build_element("INVOICE_ITEM", {
            "NAME": item.name,
            "QUANTITY": item.quantity,
            "PRICE": item.price,
            "VAT_RATE": item.vat_rate,
            "UNIT_ID": item.unit_id,
        })
        for item in invoice.items
    ]
    return build_list("ITEMS_LIST", items)


@dataclass(frozen=True)
class SaveInvoiceRequest(AuthenticatedRequest):
    METHOD: ClassVar[str] = "save_invoice"

    invoice: InvoiceInput

    def to_params(self) -> Params:
        params = self._auth_params()
        params.update({
            "BUYER_TIN": self.invoice.buyer_tin,
            "BUYER_NAME": self.invoice.buyer_name,
            "COMMENT": self.invoice.comment,
            "ITEMS_LIST": items_list_xml(self.invoice),
        })
        return params


@dataclass(frozen=True)
class GetInvoicesRequest(AuthenticatedRequest):
    METHOD: ClassVar[str] = "get_invoices"

    date_from: DateLike
    date_to: DateLike

    def to_params(self) -> Params:
        params = self._auth_params()
        params.update({"DT_F": self.date_from, "DT_T": self.date_to})
        return params


# ---------------------------------------------------------------------
# Contribuyentes (consultas públicas, sin su/sp)
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class TinRequest(SoapRequest):
    tin: str

    def to_params(self) -> Params:
        return {"tin": self.tin}


@dataclass(frozen=True)
class GetNameFromTinRequest(TinRequest):
    METHOD: ClassVar[str] = "get_name_from_tin"


@dataclass(frozen=True)
class IsVatPayerRequest(TinRequest):
    METHOD: ClassVar[str] = "is_vat_payer"
