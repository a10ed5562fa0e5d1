"""
Cliente SOAP 1.1 para el WayBillService de rs.ge

Requisitos:
- SOAP 1.1 (text/xml + header SOAPAction)
- Un único endpoint para todos los métodos
- Dos capas de error: SOAP Fault primero, luego error_code dentro de <metodoResult>

Notas importantes:
- Un solo intento por llamada (sin reintentos).
- Timeout y conexión se distinguen en TransportError.reason.
"""
import asyncio
import logging
from typing import Any, Mapping, Optional, Union

import httpx

from .config import DEFAULT_ENDPOINT_URL, DEFAULT_SOAP_NAMESPACE, RsGeConfig
from .exceptions import ApplicationError, ParseError, SoapFaultError, TransportError
from .soap_requests import SoapRequest
from .xml_codec import (
    ParamValue,
    build_params,
    element_text,
    find_named,
    inner_xml,
    parse_fragment,
)

logger = logging.getLogger(__name__)

SOAP11_NS = "http://schemas.xmlsoap.org/soap/envelope/"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSD_NS = "http://www.w3.org/2001/XMLSchema"


def soap_action(method: str, namespace: str = DEFAULT_SOAP_NAMESPACE) -> str:
    return f"{namespace.rstrip('/')}/{method}"


def soap_headers(method: str, namespace: str = DEFAULT_SOAP_NAMESPACE) -> dict:
    """Headers HTTP SOAP 1.1 para el método remoto"""
    return {
        "Content-Type": "text/xml; charset=utf-8",
        "Accept": "text/xml, */*",
        "SOAPAction": soap_action(method, namespace),
    }


def build_soap_envelope(
    method: str,
    params: Mapping[str, ParamValue],
    namespace: str = DEFAULT_SOAP_NAMESPACE,
) -> bytes:
    """
    Construye el envelope SOAP 1.1 para un método del servicio

    Los parámetros van como hijos sin prefijo del elemento <method xmlns="namespace">.
    Los fragmentos RawXml (GOODS_LIST, ITEMS_LIST) se insertan sin re-escapar.
    """
    envelope = (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<soap:Envelope xmlns:xsi="{XSI_NS}" xmlns:xsd="{XSD_NS}" xmlns:soap="{SOAP11_NS}">'
        "<soap:Body>"
        f'<{method} xmlns="{namespace}">{build_params(params)}</{method}>'
        "</soap:Body>"
        "</soap:Envelope>"
    )
    return envelope.encode("utf-8")


def _fault_message(fault: Any) -> str:
    # SOAP 1.1: <faultstring>; SOAP 1.2: <Reason><Text>
    for tag in ("faultstring", "Reason"):
        node = find_named(fault, tag)
        if node is not None:
            text = element_text(node)
            if text:
                return text
    return "SOAP Fault"


def _is_zero_code(code: str) -> bool:
    try:
        return int(code) == 0
    except ValueError:
        return False


def parse_soap_response(body: Union[bytes, str], method: str) -> str:
    """
    Clasifica la respuesta de rs.ge y devuelve el XML interno de <methodResult>

    Orden de verificación:
    1. SOAP Fault -> SoapFaultError (antes de mirar el resultado)
    2. Falta <methodResult> -> ParseError
    3. error_code distinto de cero -> ApplicationError
    """
    root = parse_fragment(body)
    if root is None or len(root) == 0:
        raise ParseError(f"{method}: la respuesta no es XML")

    fault = find_named(root, "Fault")
    if fault is not None:
        raise SoapFaultError(_fault_message(fault))

    result = find_named(root, f"{method}Result")
    if result is None:
        raise ParseError(f"{method}: respuesta sin <{method}Result>")

    code_node = find_named(result, "error_code")
    if code_node is not None:
        code = element_text(code_node)
        if code and not _is_zero_code(code):
            text_node = find_named(result, "error_text")
            message = element_text(text_node) if text_node is not None else ""
            raise ApplicationError(code, message or f"Error rs.ge código {code}", method=method)

    return inner_xml(result)


class SoapTransport:
    """Transporte SOAP sin estado hacia el endpoint de rs.ge"""

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        *,
        namespace: str = DEFAULT_SOAP_NAMESPACE,
        timeout: float = 30.0,
        connect_timeout: float = 10.0,
        max_concurrency: int = 0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            endpoint_url: URL del servicio .asmx
            namespace: Namespace de los métodos (también base del SOAPAction)
            timeout: Timeout total por request, en segundos
            connect_timeout: Timeout de conexión, en segundos
            max_concurrency: Máximo de requests simultáneos (0 = sin límite)
            http_client: Cliente httpx inyectado (tests, pools compartidos).
                Si es None, el transporte crea y cierra el suyo.
        """
        self.endpoint_url = endpoint_url
        self.namespace = namespace
        self.timeout = timeout
        self._timeout = httpx.Timeout(timeout, connect=connect_timeout)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=self._timeout, verify=True)
        self._semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    @classmethod
    def from_config(
        cls,
        config: RsGeConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "SoapTransport":
        return cls(
            config.endpoint_url,
            namespace=config.soap_namespace,
            timeout=config.request_timeout,
            connect_timeout=config.connect_timeout,
            max_concurrency=config.max_concurrency,
            http_client=http_client,
        )

    async def _post(self, method: str, envelope: bytes) -> bytes:
        logger.info(f"Enviando SOAP {method} a endpoint: {self.endpoint_url}")
        try:
            response = await self._client.post(
                self.endpoint_url,
                content=envelope,
                headers=soap_headers(method, self.namespace),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout en {method} después de {self.timeout}s: {e!r}")
            raise TransportError(
                f"Timeout: {method} excedió {self.timeout} segundos",
                reason=TransportError.REASON_TIMEOUT,
            ) from e
        except httpx.RequestError as e:
            logger.warning(f"Error de conexión en {method}: {e!r}")
            raise TransportError(
                f"Error de conexión en {method}: {e}",
                reason=TransportError.REASON_CONNECTION,
            ) from e

        if not response.is_success:
            details = response.text[:500]
            logger.warning(f"HTTP {response.status_code} en {method}: {details}")
            raise TransportError(
                f"Error HTTP {response.status_code} en {method}",
                reason=TransportError.REASON_HTTP_STATUS,
                http_status=response.status_code,
                details=details,
            )
        return response.content

    async def call(self, method: str, params: Mapping[str, ParamValue]) -> str:
        """
        Ejecuta un método remoto y devuelve el XML interno de <methodResult>

        Raises:
            TransportError, SoapFaultError, ParseError, ApplicationError
        """
        envelope = build_soap_envelope(method, params, self.namespace)
        if self._semaphore is None:
            body = await self._post(method, envelope)
        else:
            async with self._semaphore:
                body = await self._post(method, envelope)

        try:
            return parse_soap_response(body, method)
        except ApplicationError as e:
            logger.warning(f"rs.ge rechazó {method}: código={e.code} mensaje={e.message}")
            raise

    async def send(self, request: SoapRequest) -> str:
        """Punto de entrada tipado: call(request.METHOD, request.to_params())"""
        return await self.call(request.METHOD, request.to_params())

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
