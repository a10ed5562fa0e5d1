"""
Modelos de datos para rs.ge
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .exceptions import NotConfiguredError

Number = Union[int, float, Decimal]


class WaybillType(IntEnum):
    INTERNAL = 1
    EXPORT = 2
    IMPORT = 3
    RETURN = 4


class WaybillStatus(IntEnum):
    """Estados de guía en rs.ge (los listados los devuelven como texto)"""
    DELETED = -1
    SAVED = 0
    ACTIVE = 1
    COMPLETED = 2


@dataclass(frozen=True, repr=False)
class Credentials:
    """Usuario/contraseña de servicio (su/sp); nunca se persisten en el cliente"""
    su: str
    sp: str

    def __post_init__(self):
        if not (self.su or "").strip() or not self.sp:
            raise NotConfiguredError("Credenciales rs.ge incompletas: su y sp son obligatorios")

    def __repr__(self) -> str:
        return f"Credentials(su={self.su!r}, sp='***')"


# ---------------------------------------------------------------------
# Helpers para payloads JSON (camelCase, como los envía el formulario)
# ---------------------------------------------------------------------
def _require_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None or not str(value).strip():
        raise ValueError(f"Campo obligatorio faltante: {key}")
    return str(value).strip()


def _optional_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    return "" if value is None else str(value).strip()


def _to_decimal(value: Any, key: str) -> Decimal:
    if isinstance(value, bool):
        raise ValueError(f"Valor numérico inválido en {key}: {value!r}")
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError(f"Valor numérico inválido en {key}: {value!r}")


def _to_int(value: Any, key: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Entero inválido en {key}: {value!r}")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"Entero inválido en {key}: {value!r}")


def _require_list(payload: Mapping[str, Any], key: str) -> list:
    value = payload.get(key)
    if not isinstance(value, list):
        raise ValueError(f"{key} debe ser una lista")
    return value


# ---------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class WaybillGood:
    name: str
    quantity: Number
    price: Number
    unit_id: int
    bar_code: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WaybillGood":
        return cls(
            name=_require_str(payload, "name"),
            quantity=_to_decimal(payload.get("quantity"), "quantity"),
            price=_to_decimal(payload.get("price"), "price"),
            unit_id=_to_int(payload.get("unitId"), "unitId"),
            bar_code=_optional_str(payload, "barCode"),
        )


@dataclass(frozen=True)
class WaybillInput:
    buyer_tin: str
    buyer_name: str
    start_address: str
    end_address: str
    goods: Tuple[WaybillGood, ...]
    type: WaybillType = WaybillType.INTERNAL
    status: WaybillStatus = WaybillStatus.SAVED
    transportation_cost: Number = 0
    driver_tin: str = ""
    car_number: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "WaybillInput":
        """Construye la guía desde el JSON del formulario (buyerTin, goods, ...)"""
        goods = tuple(WaybillGood.from_payload(g) for g in _require_list(payload, "goods"))
        cost = payload.get("transportationCost")
        return cls(
            buyer_tin=_require_str(payload, "buyerTin"),
            buyer_name=_optional_str(payload, "buyerName"),
            start_address=_optional_str(payload, "startAddress"),
            end_address=_optional_str(payload, "endAddress"),
            goods=goods,
            type=WaybillType(_to_int(payload.get("type", WaybillType.INTERNAL.value), "type")),
            status=WaybillStatus(_to_int(payload.get("status", WaybillStatus.SAVED.value), "status")),
            transportation_cost=_to_decimal(cost, "transportationCost") if cost not in (None, "") else 0,
            driver_tin=_optional_str(payload, "driverPin") or _optional_str(payload, "driverTin"),
            car_number=_optional_str(payload, "carNumber"),
        )


@dataclass(frozen=True)
class InvoiceItem:
    """Línea de factura; la tasa de IVA la decide el llamador"""
    name: str
    quantity: Number
    price: Number
    vat_rate: Number
    unit_id: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "InvoiceItem":
        return cls(
            name=_require_str(payload, "name"),
            quantity=_to_decimal(payload.get("quantity"), "quantity"),
            price=_to_decimal(payload.get("price"), "price"),
            vat_rate=_to_decimal(payload.get("vatRate"), "vatRate"),
            unit_id=_to_int(payload.get("unitId"), "unitId"),
        )


@dataclass(frozen=True)
class InvoiceInput:
    buyer_tin: str
    buyer_name: str
    items: Tuple[InvoiceItem, ...]
    comment: str = ""

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "InvoiceInput":
        return cls(
            buyer_tin=_require_str(payload, "buyerTin"),
            buyer_name=_optional_str(payload, "buyerName"),
            items=tuple(InvoiceItem.from_payload(i) for i in _require_list(payload, "items")),
            comment=_optional_str(payload, "comment"),
        )


# ---------------------------------------------------------------------
# Resultados
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class WaybillSaveResult:
    waybill_id: str
    waybill_number: str

    def to_dict(self) -> Dict[str, Any]:
        return {"waybillId": self.waybill_id, "waybillNumber": self.waybill_number}


@dataclass(frozen=True)
class WaybillListItem:
    id: int
    number: str
    create_date: str
    buyer_tin: str
    buyer_name: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "createDate": self.create_date,
            "buyerTin": self.buyer_tin,
            "buyerName": self.buyer_name,
            "status": self.status,
        }


@dataclass(frozen=True)
class WaybillUnit:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class InvoiceSaveResult:
    invoice_id: str
    invoice_number: str

    def to_dict(self) -> Dict[str, Any]:
        return {"invoiceId": self.invoice_id, "invoiceNumber": self.invoice_number}


@dataclass(frozen=True)
class InvoiceListItem:
    id: int
    number: str
    create_date: str
    buyer_tin: str
    buyer_name: str
    total_amount: Optional[Decimal]
    vat_amount: Optional[Decimal]
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "number": self.number,
            "createDate": self.create_date,
            "buyerTin": self.buyer_tin,
            "buyerName": self.buyer_name,
            "totalAmount": None if self.total_amount is None else str(self.total_amount),
            "vatAmount": None if self.vat_amount is None else str(self.vat_amount),
            "status": self.status,
        }


@dataclass(frozen=True)
class TinLookupResult:
    tin: str
    name: str
    is_vat_payer: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"tin": self.tin, "name": self.name, "isVatPayer": self.is_vat_payer}
