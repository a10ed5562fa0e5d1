from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.rsge_client.config import get_rsge_config  # noqa: E402
from app.rsge_client.credentials import EnvCredentialStore, StaticCredentialStore  # noqa: E402
from app.rsge_client.exceptions import NotConfiguredError  # noqa: E402
from app.rsge_client.models import Credentials  # noqa: E402


@pytest.mark.parametrize("su, sp", [("", "secret"), ("user", ""), ("   ", "secret")])
def test_credentials_require_both_values(su, sp):
    with pytest.raises(NotConfiguredError):
        Credentials(su, sp)


def test_credentials_repr_masks_password():
    creds = Credentials("svc-user", "s3cr3t")
    assert "s3cr3t" not in repr(creds)
    assert "svc-user" in repr(creds)


def test_env_store_reads_service_credentials(monkeypatch):
    monkeypatch.setenv("RSGE_SERVICE_USER", "svc-user")
    monkeypatch.setenv("RSGE_SERVICE_PASSWORD", "svc-pass")

    creds = EnvCredentialStore(get_rsge_config()).resolve("anyone")

    assert creds == Credentials("svc-user", "svc-pass")


def test_env_store_without_password_is_not_configured(monkeypatch):
    monkeypatch.setenv("RSGE_SERVICE_USER", "svc-user")
    monkeypatch.delenv("RSGE_SERVICE_PASSWORD", raising=False)

    with pytest.raises(NotConfiguredError):
        EnvCredentialStore(get_rsge_config()).resolve()


def test_static_store_resolves_per_caller():
    store = StaticCredentialStore({"u-1": ("alice", "pw-1"), "u-2": ("bob", "pw-2")})

    assert store.resolve("u-1").su == "alice"
    assert store.resolve("u-2").sp == "pw-2"


@pytest.mark.parametrize("caller_id", [None, "u-3"])
def test_static_store_unknown_caller_is_not_configured(caller_id):
    store = StaticCredentialStore({"u-1": ("alice", "pw-1")})

    with pytest.raises(NotConfiguredError) as exc_info:
        store.resolve(caller_id)
    assert exc_info.value.code == "NOT_CONFIGURED"


def test_static_store_with_incomplete_entry_is_not_configured():
    store = StaticCredentialStore({"u-1": ("alice", "")})

    with pytest.raises(NotConfiguredError):
        store.resolve("u-1")
