"""
Operaciones de dominio sobre el WayBillService de rs.ge

Cada operación es un round-trip sin estado: arma el request tipado, lo envía
por el transporte SOAP y extrae los campos con el codec. Los errores del
transporte se propagan sin capturar.
"""
import asyncio
import logging
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from .exceptions import MissingFieldError
from .models import (
    Credentials,
    InvoiceInput,
    InvoiceListItem,
    InvoiceSaveResult,
    TinLookupResult,
    WaybillInput,
    WaybillListItem,
    WaybillSaveResult,
    WaybillUnit,
)
from .soap_client import SoapTransport
from .soap_requests import (
    CloseWaybillRequest,
    DateLike,
    DeleteWaybillRequest,
    GetInvoicesRequest,
    GetNameFromTinRequest,
    GetWaybillsRequest,
    GetWaybillUnitsRequest,
    IsVatPayerRequest,
    SaveInvoiceRequest,
    SaveWaybillRequest,
    SendWaybillRequest,
)
from .xml_codec import extract_blocks, extract_text, extract_value

logger = logging.getLogger(__name__)


def _required(method: str, xml: str, tag: str) -> str:
    value = extract_value(xml, tag)
    if not value:
        raise MissingFieldError(method, tag)
    return value


def _required_int(method: str, xml: str, tag: str) -> int:
    value = _required(method, xml, tag)
    try:
        return int(value)
    except ValueError:
        raise MissingFieldError(method, tag, value)


def _optional_decimal(method: str, xml: str, tag: str) -> Optional[Decimal]:
    value = extract_value(xml, tag)
    if not value:
        return None
    try:
        return Decimal(value)
    except InvalidOperation:
        raise MissingFieldError(method, tag, value)


def decode_vat_flag(text: str) -> bool:
    """Solo el literal "true" es True; "TRUE", "1", "" y cualquier otro valor son False"""
    return text == "true"


def _parse_waybill_item(block: str) -> WaybillListItem:
    method = GetWaybillsRequest.METHOD
    return WaybillListItem(
        id=_required_int(method, block, "ID"),
        number=extract_value(block, "WAYBILL_NUMBER"),
        create_date=extract_value(block, "CREATE_DATE"),
        buyer_tin=extract_value(block, "BUYER_TIN"),
        buyer_name=extract_value(block, "BUYER_NAME"),
        status=extract_value(block, "STATUS"),
    )


def _parse_invoice_item(block: str) -> InvoiceListItem:
    method = GetInvoicesRequest.METHOD
    return InvoiceListItem(
        id=_required_int(method, block, "ID"),
        number=extract_value(block, "INVOICE_NUMBER"),
        create_date=extract_value(block, "CREATE_DATE"),
        buyer_tin=extract_value(block, "BUYER_TIN"),
        buyer_name=extract_value(block, "BUYER_NAME"),
        total_amount=_optional_decimal(method, block, "TOTAL_AMOUNT"),
        vat_amount=_optional_decimal(method, block, "VAT_AMOUNT"),
        status=extract_value(block, "STATUS"),
    )


class RsGeClient:
    """Operaciones de guías, facturas y consulta de contribuyentes"""

    def __init__(self, transport: SoapTransport):
        self.transport = transport

    # -----------------------------------------------------------------
    # Guías
    # -----------------------------------------------------------------
    async def save_waybill(self, credentials: Credentials, waybill: WaybillInput) -> WaybillSaveResult:
        """
        Registra una guía (save_waybill)

        No valida reglas de negocio (IVA, montos); eso queda del lado del llamador.

        Raises:
            MissingFieldError: Si la respuesta no trae ID o WAYBILL_NUMBER
        """
        method = SaveWaybillRequest.METHOD
        inner = await self.transport.send(SaveWaybillRequest(credentials, waybill))
        result = WaybillSaveResult(
            waybill_id=_required(method, inner, "ID"),
            waybill_number=_required(method, inner, "WAYBILL_NUMBER"),
        )
        logger.info(f"Guía guardada: id={result.waybill_id} número={result.waybill_number}")
        return result

    async def send_waybill(self, credentials: Credentials, waybill_id: str) -> bool:
        await self.transport.send(SendWaybillRequest(credentials, str(waybill_id)))
        return True

    async def delete_waybill(self, credentials: Credentials, waybill_id: str) -> bool:
        await self.transport.send(DeleteWaybillRequest(credentials, str(waybill_id)))
        return True

    async def close_waybill(self, credentials: Credentials, waybill_id: str) -> bool:
        await self.transport.send(CloseWaybillRequest(credentials, str(waybill_id)))
        return True

    async def get_waybills(
        self,
        credentials: Credentials,
        date_from: DateLike,
        date_to: DateLike,
    ) -> List[WaybillListItem]:
        """Guías del rango de fechas; sin resultados devuelve lista vacía"""
        inner = await self.transport.send(GetWaybillsRequest(credentials, date_from, date_to))
        return [_parse_waybill_item(block) for block in extract_blocks(inner, "WAYBILL")]

    async def get_waybill_units(self, credentials: Credentials) -> List[WaybillUnit]:
        method = GetWaybillUnitsRequest.METHOD
        inner = await self.transport.send(GetWaybillUnitsRequest(credentials))
        return [
            WaybillUnit(id=_required(method, block, "ID"), name=extract_value(block, "NAME"))
            for block in extract_blocks(inner, "UNIT")
        ]

    # -----------------------------------------------------------------
    # Facturas
    # -----------------------------------------------------------------
    async def save_invoice(self, credentials: Credentials, invoice: InvoiceInput) -> InvoiceSaveResult:
        method = SaveInvoiceRequest.METHOD
        inner = await self.transport.send(SaveInvoiceRequest(credentials, invoice))
        result = InvoiceSaveResult(
            invoice_id=_required(method, inner, "ID"),
            invoice_number=_required(method, inner, "INVOICE_NUMBER"),
        )
        logger.info(f"Factura guardada: id={result.invoice_id} número={result.invoice_number}")
        return result

    async def get_invoices(
        self,
        credentials: Credentials,
        date_from: DateLike,
        date_to: DateLike,
    ) -> List[InvoiceListItem]:
        inner = await self.transport.send(GetInvoicesRequest(credentials, date_from, date_to))
        return [_parse_invoice_item(block) for block in extract_blocks(inner, "INVOICE")]

    # -----------------------------------------------------------------
    # Contribuyentes (sin credenciales)
    # -----------------------------------------------------------------
    async def get_name_from_tin(self, tin: str) -> str:
        inner = await self.transport.send(GetNameFromTinRequest(tin))
        name = extract_text(inner)
        if not name:
            raise MissingFieldError(GetNameFromTinRequest.METHOD, "get_name_from_tinResult")
        return name

    async def is_vat_payer(self, tin: str) -> bool:
        inner = await self.transport.send(IsVatPayerRequest(tin))
        return decode_vat_flag(extract_text(inner))

    async def lookup_tin(self, tin: str) -> TinLookupResult:
        """
        Nombre y condición de IVA del contribuyente, consultados en paralelo

        Si una de las dos consultas falla, la otra se cancela y se propaga el
        primer error.
        """
        name_task = asyncio.ensure_future(self.get_name_from_tin(tin))
        vat_task = asyncio.ensure_future(self.is_vat_payer(tin))
        tasks = [name_task, vat_task]

        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        for task in tasks:
            if task in done and task.exception() is not None:
                raise task.exception()

        return TinLookupResult(tin=tin, name=name_task.result(), is_vat_payer=vat_task.result())
