"""Helpers de tests: transporte httpx simulado que responde por método SOAP."""
from pathlib import Path
import sys
from typing import Any, Dict, List

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.rsge_client.client import RsGeClient  # noqa: E402
from app.rsge_client.soap_client import SoapTransport  # noqa: E402

FIXTURES = Path(__file__).resolve().parent / "fixtures"
TEST_ENDPOINT = "https://rsge.test/WayBillService/WayBillService.asmx"


def fixture_text(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def soap_response(method: str, inner: str) -> str:
    """Envelope SOAP 1.1 como lo devuelve el servicio ASMX"""
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
        'xmlns:xsd="http://www.w3.org/2001/XMLSchema">'
        "<soap:Body>"
        f'<{method}Response xmlns="http://tempuri.org/">'
        f"<{method}Result>{inner}</{method}Result>"
        f"</{method}Response>"
        "</soap:Body>"
        "</soap:Envelope>"
    )


def soap_fault(message: str) -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
        "<soap:Body>"
        "<soap:Fault>"
        "<faultcode>soap:Server</faultcode>"
        f"<faultstring>{message}</faultstring>"
        "</soap:Fault>"
        "</soap:Body>"
        "</soap:Envelope>"
    )


class StubHandler:
    """
    Handler para httpx.MockTransport

    responses: {método: body | (status, body) | Exception | callable(request)}
    """

    def __init__(self, responses: Dict[str, Any]):
        self.responses = responses
        self.requests: List[httpx.Request] = []

    def methods(self) -> List[str]:
        return [r.headers["SOAPAction"].rsplit("/", 1)[-1] for r in self.requests]

    def body_of(self, method: str) -> str:
        for request in self.requests:
            if request.headers["SOAPAction"].endswith("/" + method):
                return request.content.decode("utf-8")
        raise AssertionError(f"No se envió {method}")

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        method = request.headers["SOAPAction"].rsplit("/", 1)[-1]
        response = self.responses[method]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(request)
        status, body = response if isinstance(response, tuple) else (200, response)
        return httpx.Response(
            status,
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/xml; charset=utf-8"},
        )


def make_http_client(handler: StubHandler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def make_transport(handler: StubHandler, **kwargs) -> SoapTransport:
    return SoapTransport(TEST_ENDPOINT, http_client=make_http_client(handler), **kwargs)


def make_client(responses: Dict[str, Any], **kwargs):
    handler = StubHandler(responses)
    return RsGeClient(make_transport(handler, **kwargs)), handler
