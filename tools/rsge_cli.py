#!/usr/bin/env python3
"""
CLI para consultas manuales contra rs.ge

Ejemplos:
    python -m tools.rsge_cli tin 123456789
    python -m tools.rsge_cli waybills --from 2026-01-01 --to 2026-01-31
    python -m tools.rsge_cli invoices --from 2026-01-01 --to 2026-01-31
    python -m tools.rsge_cli units

Las credenciales se leen de RSGE_SERVICE_USER / RSGE_SERVICE_PASSWORD (.env incluido).
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app.rsge_client.client import RsGeClient  # noqa: E402
from app.rsge_client.config import get_rsge_config  # noqa: E402
from app.rsge_client.credentials import EnvCredentialStore  # noqa: E402
from app.rsge_client.exceptions import ConfigurationError  # noqa: E402
from app.rsge_client.models import Credentials  # noqa: E402
from app.rsge_client.soap_client import SoapTransport  # noqa: E402
from rsge_minisender.core import error_result, run_public, run_with_credentials  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Consultas rs.ge WayBillService")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log DEBUG")
    sub = parser.add_subparsers(dest="command", required=True)

    tin = sub.add_parser("tin", help="Nombre y condición de IVA de un contribuyente")
    tin.add_argument("tin")

    for name, help_text in (("waybills", "Listar guías"), ("invoices", "Listar facturas")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--from", dest="date_from", required=True, help="Fecha desde (YYYY-MM-DD)")
        cmd.add_argument("--to", dest="date_to", required=True, help="Fecha hasta (YYYY-MM-DD)")

    sub.add_parser("units", help="Unidades de medida de guías")
    return parser


def _operation(args: argparse.Namespace) -> Callable[[RsGeClient], Awaitable[dict]]:
    if args.command == "tin":
        return lambda client: run_public(lambda: client.lookup_tin(args.tin))

    async def call(client: RsGeClient, creds: Credentials) -> Any:
        if args.command == "waybills":
            return await client.get_waybills(creds, args.date_from, args.date_to)
        if args.command == "invoices":
            return await client.get_invoices(creds, args.date_from, args.date_to)
        return await client.get_waybill_units(creds)

    store = EnvCredentialStore()
    return lambda client: run_with_credentials(store, None, lambda creds: call(client, creds))


async def _run(operation: Callable[[RsGeClient], Awaitable[dict]]) -> dict:
    try:
        config = get_rsge_config()
    except ConfigurationError as exc:
        return error_result(exc)
    async with SoapTransport.from_config(config) as transport:
        return await operation(RsGeClient(transport))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    result: Any = asyncio.run(_run(_operation(args)))
    result.pop("http_status", None)
    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    raise SystemExit(main())
