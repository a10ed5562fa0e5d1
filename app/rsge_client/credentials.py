"""
Resolución de credenciales de servicio (su/sp) por llamador
"""
import logging
from typing import Mapping, Optional, Tuple

from .config import RsGeConfig, get_rsge_config
from .exceptions import NotConfiguredError
from .models import Credentials

logger = logging.getLogger(__name__)


class CredentialStore:
    """Interfaz: resolve(caller_id) -> Credentials o NotConfiguredError"""

    def resolve(self, caller_id: Optional[str] = None) -> Credentials:
        raise NotImplementedError


class EnvCredentialStore(CredentialStore):
    """
    Credenciales únicas tomadas de RSGE_SERVICE_USER / RSGE_SERVICE_PASSWORD

    Ignora caller_id: pensado para despliegues de un solo contribuyente.
    """

    def __init__(self, config: Optional[RsGeConfig] = None):
        # Sin config explícita se lee el entorno en cada resolve()
        self.config = config

    def resolve(self, caller_id: Optional[str] = None) -> Credentials:
        config = self.config or get_rsge_config()
        if not config.has_service_credentials:
            raise NotConfiguredError(
                "Faltan RSGE_SERVICE_USER y/o RSGE_SERVICE_PASSWORD en el entorno"
            )
        return Credentials(config.service_user, config.service_password)


class StaticCredentialStore(CredentialStore):
    """Credenciales por llamador a partir de un mapa {caller_id: (su, sp)}"""

    def __init__(self, entries: Mapping[str, Tuple[str, str]]):
        self._entries = dict(entries)

    def resolve(self, caller_id: Optional[str] = None) -> Credentials:
        if caller_id is None or caller_id not in self._entries:
            logger.info(f"Sin credenciales rs.ge para el usuario {caller_id!r}")
            raise NotConfiguredError(f"Credenciales rs.ge no configuradas para el usuario {caller_id!r}")
        su, sp = self._entries[caller_id]
        return Credentials(su, sp)
