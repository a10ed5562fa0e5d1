"""
Configuración para cliente rs.ge (WayBillService)
"""
import os
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

load_dotenv()


# Endpoint único del servicio de guías/facturas (SOAP 1.1, ASMX)
DEFAULT_ENDPOINT_URL = "https://services.rs.ge/WayBillService/WayBillService.asmx"
DEFAULT_SOAP_NAMESPACE = "http://tempuri.org/"


def _env_float(name: str, default: str) -> float:
    raw = (os.getenv(name) or default).strip()
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} inválido: {raw!r} (se esperaba número de segundos)")
    if value <= 0:
        raise ConfigurationError(f"{name} debe ser mayor que cero, recibido: {raw!r}")
    return value


def _env_int(name: str, default: str) -> int:
    raw = (os.getenv(name) or default).strip()
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} inválido: {raw!r} (se esperaba entero)")
    if value < 0:
        raise ConfigurationError(f"{name} no puede ser negativo, recibido: {raw!r}")
    return value


class RsGeConfig:
    """Configuración del cliente rs.ge leída del entorno"""

    def __init__(self):
        self.endpoint_url = (os.getenv("RSGE_ENDPOINT_URL") or DEFAULT_ENDPOINT_URL).strip()
        self.soap_namespace = (os.getenv("RSGE_SOAP_NAMESPACE") or DEFAULT_SOAP_NAMESPACE).strip()

        self.request_timeout = _env_float("RSGE_REQUEST_TIMEOUT", "30")
        self.connect_timeout = _env_float("RSGE_CONNECT_TIMEOUT", "10")

        # 0 = sin límite de requests simultáneos
        self.max_concurrency = _env_int("RSGE_MAX_CONCURRENCY", "0")

        # Credenciales de servicio para despliegues de un solo usuario
        self.service_user: Optional[str] = (os.getenv("RSGE_SERVICE_USER") or "").strip() or None
        self.service_password: Optional[str] = os.getenv("RSGE_SERVICE_PASSWORD") or None

    @property
    def has_service_credentials(self) -> bool:
        return bool(self.service_user and self.service_password)

    def __repr__(self) -> str:
        return (
            f"RsGeConfig(endpoint_url={self.endpoint_url!r}, "
            f"request_timeout={self.request_timeout}, "
            f"max_concurrency={self.max_concurrency}, "
            f"service_user={'***' if self.service_user else None})"
        )


def get_rsge_config() -> RsGeConfig:
    """
    Obtiene la configuración rs.ge desde variables de entorno (.env incluido)

    Returns:
        Configuración rs.ge

    Raises:
        ConfigurationError: Si algún valor numérico es inválido
    """
    return RsGeConfig()
