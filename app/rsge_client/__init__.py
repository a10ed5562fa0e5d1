"""
Módulo cliente para integración con rs.ge (Servicio de Ingresos de Georgia)
WayBillService: guías electrónicas, facturas con IVA y consulta de contribuyentes
"""
from .config import RsGeConfig, get_rsge_config
from .client import RsGeClient, decode_vat_flag
from .credentials import CredentialStore, EnvCredentialStore, StaticCredentialStore
from .soap_client import SoapTransport, build_soap_envelope, parse_soap_response
from .models import (
    Credentials,
    InvoiceInput,
    InvoiceItem,
    InvoiceListItem,
    InvoiceSaveResult,
    TinLookupResult,
    WaybillGood,
    WaybillInput,
    WaybillListItem,
    WaybillSaveResult,
    WaybillStatus,
    WaybillType,
    WaybillUnit,
)
from .exceptions import (
    RsGeException,
    TransportError,
    SoapFaultError,
    ParseError,
    MissingFieldError,
    ApplicationError,
    NotConfiguredError,
    ConfigurationError,
)

__all__ = [
    'RsGeConfig',
    'get_rsge_config',
    'RsGeClient',
    'decode_vat_flag',
    'CredentialStore',
    'EnvCredentialStore',
    'StaticCredentialStore',
    'SoapTransport',
    'build_soap_envelope',
    'parse_soap_response',
    'Credentials',
    'InvoiceInput',
    'InvoiceItem',
    'InvoiceListItem',
    'InvoiceSaveResult',
    'TinLookupResult',
    'WaybillGood',
    'WaybillInput',
    'WaybillListItem',
    'WaybillSaveResult',
    'WaybillStatus',
    'WaybillType',
    'WaybillUnit',
    'RsGeException',
    'TransportError',
    'SoapFaultError',
    'ParseError',
    'MissingFieldError',
    'ApplicationError',
    'NotConfiguredError',
    'ConfigurationError',
]
