import asyncio
import logging
import os
from typing import Any, Awaitable, Callable, Optional

from flask import Flask, jsonify, request

from app.rsge_client.client import RsGeClient
from app.rsge_client.config import get_rsge_config
from app.rsge_client.credentials import CredentialStore, EnvCredentialStore
from app.rsge_client.exceptions import ConfigurationError
from app.rsge_client.models import Credentials, InvoiceInput, WaybillInput
from app.rsge_client.soap_client import SoapTransport
from rsge_minisender.core import error_result, run_public, run_with_credentials

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Inyectables (tests / despliegues multiusuario):
# - RSGE_CREDENTIAL_STORE: CredentialStore; por defecto credenciales del entorno
# - RSGE_HTTP_CLIENT_FACTORY: callable sin args que devuelve un httpx.AsyncClient
app.config.setdefault("RSGE_CREDENTIAL_STORE", None)
app.config.setdefault("RSGE_HTTP_CLIENT_FACTORY", None)

CALLER_HEADER = "X-User-Id"


def _credential_store() -> CredentialStore:
    return app.config.get("RSGE_CREDENTIAL_STORE") or EnvCredentialStore()


def _caller_id() -> Optional[str]:
    return (request.headers.get(CALLER_HEADER) or "").strip() or None


def _payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _require_waybill_id(payload: dict) -> str:
    waybill_id = str(payload.get("waybillId") or "").strip()
    if not waybill_id:
        raise ValueError("Campo obligatorio faltante: waybillId")
    return waybill_id


def _respond(operation: Callable[[RsGeClient], Awaitable[dict]]):
    """Ejecuta la operación con un transporte nuevo por request y arma la respuesta JSON"""

    async def runner() -> dict:
        try:
            config = get_rsge_config()
        except ConfigurationError as exc:
            return error_result(exc)
        factory = app.config.get("RSGE_HTTP_CLIENT_FACTORY")
        http_client = factory() if factory else None
        transport = SoapTransport.from_config(config, http_client=http_client)
        try:
            return await operation(RsGeClient(transport))
        finally:
            await transport.aclose()
            if http_client is not None:
                await http_client.aclose()

    result = asyncio.run(runner())
    status = result.pop("http_status", 200)
    return jsonify(result), status


def _with_credentials(
    call: Callable[[RsGeClient, Credentials], Awaitable[Any]],
) -> Callable[[RsGeClient], Awaitable[dict]]:
    store = _credential_store()
    caller_id = _caller_id()
    return lambda client: run_with_credentials(store, caller_id, lambda creds: call(client, creds))


@app.route("/health")
@app.route("/healthz")
def health():
    return jsonify({"ok": True})


@app.route("/api/rs-ge/tin/<tin>")
def tin_lookup(tin: str):
    return _respond(lambda client: run_public(lambda: client.lookup_tin(tin)))


@app.route("/api/rs-ge/waybill/save", methods=["POST"])
def waybill_save():
    payload = _payload()
    return _respond(_with_credentials(
        lambda client, creds: client.save_waybill(creds, WaybillInput.from_payload(payload))
    ))


@app.route("/api/rs-ge/waybill/send", methods=["POST"])
def waybill_send():
    payload = _payload()
    return _respond(_with_credentials(
        lambda client, creds: client.send_waybill(creds, _require_waybill_id(payload))
    ))


@app.route("/api/rs-ge/waybill", methods=["DELETE"])
def waybill_delete():
    payload = _payload()
    return _respond(_with_credentials(
        lambda client, creds: client.delete_waybill(creds, _require_waybill_id(payload))
    ))


@app.route("/api/rs-ge/waybill", methods=["PUT"])
def waybill_close():
    payload = _payload()
    return _respond(_with_credentials(
        lambda client, creds: client.close_waybill(creds, _require_waybill_id(payload))
    ))


@app.route("/api/rs-ge/waybill", methods=["GET"])
def waybill_list():
    date_from = request.args.get("from", "")
    date_to = request.args.get("to", "")
    return _respond(_with_credentials(
        lambda client, creds: client.get_waybills(creds, date_from, date_to)
    ))


@app.route("/api/rs-ge/units")
def waybill_units():
    return _respond(_with_credentials(lambda client, creds: client.get_waybill_units(creds)))


@app.route("/api/rs-ge/invoice", methods=["POST"])
def invoice_save():
    payload = _payload()
    return _respond(_with_credentials(
        lambda client, creds: client.save_invoice(creds, InvoiceInput.from_payload(payload))
    ))


@app.route("/api/rs-ge/invoice", methods=["GET"])
def invoice_list():
    date_from = request.args.get("from", "")
    date_to = request.args.get("to", "")
    return _respond(_with_credentials(
        lambda client, creds: client.get_invoices(creds, date_from, date_to)
    ))


if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("RSGE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.run(host="127.0.0.1", port=int(os.getenv("WEBUI_PORT", "5055")), debug=False, use_reloader=False)
