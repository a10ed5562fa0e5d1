"""
Excepciones del cliente rs.ge

Dos capas de error conviven en las respuestas del servicio:
- SOAP Fault (el servicio rechazó el envelope)
- error_code dentro de <metodoResult> (la lógica de negocio rechazó el pedido)
"""
from typing import Any, Dict, Optional


class RsGeException(Exception):
    """Excepción base para errores rs.ge"""
    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Representación para logs y respuestas JSON"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }


class TransportError(RsGeException):
    """Error de red/HTTP (status no 2xx, timeout, conexión rechazada)"""

    REASON_HTTP_STATUS = "http_status"
    REASON_TIMEOUT = "timeout"
    REASON_CONNECTION = "connection"

    _CODES = {
        REASON_HTTP_STATUS: "HTTP_ERROR",
        REASON_TIMEOUT: "TIMEOUT",
        REASON_CONNECTION: "CONNECTION_ERROR",
    }

    def __init__(
        self,
        message: str,
        reason: str = REASON_HTTP_STATUS,
        http_status: Optional[int] = None,
        details: Optional[str] = None,
    ):
        self.reason = reason
        self.http_status = http_status
        self.details = details
        super().__init__(message, self._CODES.get(reason, "HTTP_ERROR"))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["reason"] = self.reason
        data["http_status"] = self.http_status
        data["details"] = self.details
        return data


class SoapFaultError(RsGeException):
    """El servicio devolvió <soap:Fault>; el mensaje es el faultstring tal cual"""
    def __init__(self, message: str):
        super().__init__(message, "SOAP_FAULT")


class ParseError(RsGeException):
    """La respuesta no tiene la forma esperada (falta <metodoResult>, body no XML)"""
    def __init__(self, message: str, code: str = "PARSE_ERROR"):
        super().__init__(message, code)


class MissingFieldError(ParseError):
    """Campo obligatorio vacío o con formato inválido en la respuesta"""
    def __init__(self, method: str, field: str, value: str = ""):
        self.method = method
        self.field = field
        self.value = value
        if value:
            message = f"{method}: valor inválido en campo obligatorio {field}: {value!r}"
        else:
            message = f"{method}: falta campo obligatorio {field} en la respuesta"
        super().__init__(message, "MISSING_FIELD")


class ApplicationError(RsGeException):
    """error_code distinto de cero devuelto por la lógica de negocio de rs.ge"""
    def __init__(self, code: str, message: str, method: Optional[str] = None):
        self.method = method
        super().__init__(message, code)


class NotConfiguredError(RsGeException):
    """No hay credenciales de servicio (su/sp) para el llamador actual"""
    def __init__(self, message: str = "Credenciales rs.ge no configuradas"):
        super().__init__(message, "NOT_CONFIGURED")


class ConfigurationError(RsGeException, ValueError):
    """Valor inválido en la configuración del entorno (RSGE_*)"""
    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR")
