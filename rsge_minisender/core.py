from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from app.rsge_client.credentials import CredentialStore
from app.rsge_client.exceptions import (
    ApplicationError,
    NotConfiguredError,
    RsGeException,
    SoapFaultError,
)
from app.rsge_client.models import Credentials

logger = logging.getLogger(__name__)

# Textos visibles para el usuario (UI en georgiano)
MSG_NOT_CONFIGURED = "rs.ge პარამეტრები არ არის კონფიგურირებული"
MSG_SYSTEM_ERROR = "დაფიქსირდა სისტემური შეცდომა"
MSG_INVALID_REQUEST = "არასწორი მოთხოვნა"


def _serialize(data: Any) -> Any:
    if hasattr(data, "to_dict"):
        return data.to_dict()
    if isinstance(data, (list, tuple)):
        return [_serialize(item) for item in data]
    return data


def ok_result(data: Any = None) -> dict:
    result = {"ok": True, "success": True, "http_status": 200}
    if data is not None:
        result["data"] = _serialize(data)
    return result


def error_result(exc: BaseException) -> dict:
    """
    Traduce cualquier error a {"success": False, "code", "message", ...}

    - ApplicationError / SoapFaultError: se muestra el mensaje de rs.ge (422)
    - NotConfiguredError: texto "no configurado" (401)
    - ValueError: payload inválido (400)
    - Transporte / parseo / configuración / inesperados: mensaje genérico (500); el detalle
      solo va al log
    El code original se conserva siempre.
    """
    code: Optional[str] = getattr(exc, "code", None)

    if isinstance(exc, NotConfiguredError):
        status, message = 401, MSG_NOT_CONFIGURED
        logger.info(f"rs.ge sin configurar: {exc.message}")
    elif isinstance(exc, (ApplicationError, SoapFaultError)):
        status, message = 422, exc.message
        logger.warning(f"Error rs.ge: {exc.to_dict()}")
    elif isinstance(exc, RsGeException):
        status, message = 500, MSG_SYSTEM_ERROR
        logger.error(f"Error de sistema rs.ge: {exc.to_dict()}", exc_info=exc)
    elif isinstance(exc, ValueError):
        status, message, code = 400, f"{MSG_INVALID_REQUEST}: {exc}", "INVALID_REQUEST"
        logger.info(f"Request rs.ge inválido: {exc}")
    else:
        status, message, code = 500, MSG_SYSTEM_ERROR, "INTERNAL_ERROR"
        logger.error("Error inesperado en operación rs.ge", exc_info=exc)

    return {
        "ok": False,
        "success": False,
        "code": code,
        "message": message,
        "http_status": status,
        "meta": {"error_type": type(exc).__name__},
    }


async def run_public(operation: Callable[[], Awaitable[Any]]) -> dict:
    """Ejecuta una operación sin credenciales (consultas de TIN)"""
    try:
        data = await operation()
    except Exception as exc:
        return error_result(exc)
    return ok_result(data)


async def run_with_credentials(
    store: CredentialStore,
    caller_id: Optional[str],
    operation: Callable[[Credentials], Awaitable[Any]],
) -> dict:
    """
    Resuelve credenciales y ejecuta la operación

    Sin credenciales no se intenta ninguna llamada remota.
    """
    try:
        credentials = store.resolve(caller_id)
        data = await operation(credentials)
    except Exception as exc:
        return error_result(exc)
    return ok_result(data)
