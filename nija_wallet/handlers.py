"""
Transaction Boundary — aiohttp endpoint that signs with an explicit vault.

``POST /api/send-transaction``::

    {"vault": <wire form, text or object>,
     "password": "...",
     "request": {"chain": "ethereum", ...}}

The wallet storage collaborator supplies the vault; this endpoint never
reads or writes storage and never returns key material.

Security Note:
    Never log the request body, the password, the vault or any plaintext.
    Only chain names, addresses and error categories are logged.
"""
import logging
from typing import Any

import orjson
from aiohttp import web
from pydantic import ValidationError

from .exceptions import (
    CryptoUnavailable,
    FormatError,
    InvalidKeyMaterial,
    TransactionSigningError,
    WrongPasswordOrCorruptVault,
)
from .signing.boundary import sign_async
from .signing.models import parse_signing_request
from .vault.config import VaultConfig
from .vault.crypto import CryptoProvider, default_provider
from .vault.record import EncryptedVault
from .version import __version__

logger = logging.getLogger("nija_wallet.api")

CONFIG_KEY = web.AppKey("nija_wallet.config", VaultConfig)
PROVIDER_KEY = web.AppKey("nija_wallet.provider", CryptoProvider)


def _dumps(obj: Any) -> str:
    return orjson.dumps(obj).decode("utf-8")


def _error(status: int, message: str, **extra: Any) -> web.Response:
    return web.json_response({"error": message, **extra}, status=status, dumps=_dumps)


def _validation_problems(err: ValidationError) -> list[str]:
    """Summarize pydantic errors without echoing input values."""
    return [
        f"{'.'.join(str(p) for p in e['loc']) or 'request'}: {e['msg']}"
        for e in err.errors()
    ]


async def send_transaction(request: web.Request) -> web.Response:
    """Sign one transaction with the vault and password from the body."""
    try:
        body = await request.json(loads=orjson.loads)
    except ValueError:
        return _error(400, "request body must be valid JSON")
    if not isinstance(body, dict):
        return _error(400, "request body must be a JSON object")

    password = body.get("password")
    if not isinstance(password, str) or not password:
        return _error(400, "password is required")
    for field in ("vault", "request"):
        if field not in body:
            return _error(400, f"{field} is required")

    try:
        vault = EncryptedVault.deserialize(body["vault"])
    except FormatError as err:
        logger.warning("Rejected vault: %s", err)
        return _error(400, f"corrupted vault data: {err}")
    try:
        tx = parse_signing_request(body["request"])
    except ValidationError as err:
        return _error(
            400, "invalid signing request", details=_validation_problems(err),
        )

    try:
        signed = await sign_async(
            vault,
            password,
            tx,
            request.app[PROVIDER_KEY],
            request.app[CONFIG_KEY],
        )
    except WrongPasswordOrCorruptVault as err:
        return _error(401, str(err))
    except (InvalidKeyMaterial, TransactionSigningError) as err:
        logger.warning("Signing rejected: chain=%s reason=%s", tx.chain, err)
        return _error(422, str(err))
    except CryptoUnavailable as err:
        logger.error("Crypto primitive unavailable: %s", err)
        return _error(500, "cryptographic backend unavailable")

    return web.json_response(
        {"signedTransaction": signed.to_dict()}, dumps=_dumps,
    )


async def health(request: web.Request) -> web.Response:
    return web.json_response({"status": "ok", "version": __version__}, dumps=_dumps)


def setup_routes(app: web.Application) -> None:
    app.router.add_get("/api/health", health)
    app.router.add_post("/api/send-transaction", send_transaction)


def create_app(
    config: VaultConfig | None = None,
    provider: CryptoProvider | None = None,
) -> web.Application:
    """Build the aiohttp application for the transaction boundary."""
    app = web.Application()
    app[CONFIG_KEY] = config or VaultConfig()
    app[PROVIDER_KEY] = provider or default_provider
    setup_routes(app)
    return app
