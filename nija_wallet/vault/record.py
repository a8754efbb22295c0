"""
Encrypted Vault Record — Persisted form of a wallet secret and its wire codec.

Wire form is a JSON object (orjson) with independently base64-encoded
fields:

    {"v": 1, "ciphertext": "<b64>", "iv": "<b64>", "salt": "<b64>",
     "kdf": {"algorithm": "pbkdf2", "hash": "sha256",
             "iterations": 100000, "length": 32}}

Records written by the browser wallet (``{ciphertext, iv, salt}`` without
``kdf``) decode with the default PBKDF2-SHA256/100000 parameters.

Security Note:
    Never log ciphertext values. The vault holds no plaintext.
"""
import base64
import binascii
import logging
from typing import Any

import orjson
from pydantic import BaseModel, ValidationError, field_validator

from ..exceptions import FormatError
from ..secret import SecretBuffer
from .config import KdfParams
from .crypto import (
    CryptoProvider,
    DEFAULT_KDF,
    IV_SIZE,
    SALT_SIZE,
    default_provider,
)

logger = logging.getLogger("nija_wallet.vault")

WIRE_VERSION = 1

_BYTE_FIELDS = ("ciphertext", "iv", "salt")
_KNOWN_FIELDS = frozenset(_BYTE_FIELDS + ("kdf", "v"))


def _b64decode(name: str, value: Any) -> bytes:
    if not isinstance(value, str):
        raise FormatError(f"vault field '{name}' must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        raise FormatError(f"vault field '{name}' is not valid base64") from None


class EncryptedVault(BaseModel):
    """Immutable encrypted record of one wallet secret."""

    ciphertext: bytes
    iv: bytes
    salt: bytes
    kdf: KdfParams = DEFAULT_KDF

    model_config = {"frozen": True}

    @field_validator("iv")
    @classmethod
    def validate_iv(cls, v: bytes) -> bytes:
        if len(v) != IV_SIZE:
            raise ValueError(f"iv must be {IV_SIZE} bytes, got {len(v)}")
        return v

    @field_validator("salt")
    @classmethod
    def validate_salt(cls, v: bytes) -> bytes:
        if len(v) != SALT_SIZE:
            raise ValueError(f"salt must be {SALT_SIZE} bytes, got {len(v)}")
        return v

    def __repr__(self) -> str:
        return (
            f"<EncryptedVault [{len(self.ciphertext)} bytes, "
            f"pbkdf2-{self.kdf.hash}/{self.kdf.iterations}]>"
        )

    __str__ = __repr__

    # ------------------------------------------------------------------
    # Wire codec
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-compatible wire mapping."""
        return {
            "v": WIRE_VERSION,
            "ciphertext": base64.b64encode(self.ciphertext).decode("ascii"),
            "iv": base64.b64encode(self.iv).decode("ascii"),
            "salt": base64.b64encode(self.salt).decode("ascii"),
            "kdf": self.kdf.model_dump(),
        }

    def serialize(self) -> str:
        """Encode the vault as a JSON text wire form."""
        return orjson.dumps(self.to_dict()).decode("utf-8")

    @classmethod
    def deserialize(cls, wire: str | bytes | dict) -> "EncryptedVault":
        """Decode a wire form into an EncryptedVault.

        Args:
            wire: JSON text/bytes from ``serialize`` or an already parsed
                mapping (e.g. the ``vault`` member of a request body).

        Returns:
            The decoded vault.

        Raises:
            FormatError: On invalid JSON, missing or unknown fields,
                invalid base64, wrong field sizes or unsupported KDF params.
        """
        if isinstance(wire, dict):
            payload = wire
        elif isinstance(wire, (str, bytes)):
            try:
                payload = orjson.loads(wire)
            except orjson.JSONDecodeError:
                raise FormatError("vault wire form is not valid JSON") from None
        else:
            raise FormatError(
                f"vault wire form must be str, bytes or dict, not {type(wire).__name__}"
            )
        if not isinstance(payload, dict):
            raise FormatError("vault wire form must be a JSON object")

        unknown = set(payload) - _KNOWN_FIELDS
        if unknown:
            raise FormatError(f"unknown vault fields: {sorted(unknown)}")
        missing = [name for name in _BYTE_FIELDS if name not in payload]
        if missing:
            raise FormatError(f"missing vault fields: {missing}")
        version = payload.get("v", WIRE_VERSION)
        if type(version) is not int or version != WIRE_VERSION:
            raise FormatError(f"unsupported vault wire version: {version!r}")

        fields = {name: _b64decode(name, payload[name]) for name in _BYTE_FIELDS}
        if payload.get("kdf") is not None:
            fields["kdf"] = payload["kdf"]
        try:
            return cls(**fields)
        except ValidationError as err:
            problems = ", ".join(
                ".".join(str(p) for p in e["loc"]) or "vault" for e in err.errors()
            )
            raise FormatError(f"invalid vault fields: {problems}") from None


# ---------------------------------------------------------------------------
# Sealing
# ---------------------------------------------------------------------------

def seal_secret(
    secret: bytes | bytearray | str,
    password: str,
    params: KdfParams | None = None,
    provider: CryptoProvider | None = None,
) -> EncryptedVault:
    """Encrypt a wallet secret under a password-derived key.

    A fresh salt and IV are drawn from the provider on every call.

    Args:
        secret: Mnemonic phrase or private key (text or raw bytes).
        password: User password.
        params: KDF parameters, defaults to PBKDF2-SHA256/100000.
        provider: Crypto capability, defaults to the module provider.

    Returns:
        New EncryptedVault.
    """
    provider = provider or default_provider
    params = params or DEFAULT_KDF
    if isinstance(secret, str):
        secret = secret.encode("utf-8")
    salt = provider.new_salt()
    with SecretBuffer(provider.derive_key(password, salt, params)) as key:
        ciphertext, iv = provider.encrypt(secret, key.data)
    logger.debug(
        "Vault sealed: kdf=pbkdf2-%s iterations=%d", params.hash, params.iterations,
    )
    return EncryptedVault(ciphertext=ciphertext, iv=iv, salt=salt, kdf=params)


def open_vault(
    vault: EncryptedVault,
    password: str,
    provider: CryptoProvider | None = None,
) -> bytes:
    """Decrypt a vault and return the plaintext secret.

    Callers should move the result into a ``SecretBuffer`` right away.

    Raises:
        AuthenticationFailed: Wrong password or corrupted/tampered vault.
    """
    provider = provider or default_provider
    with SecretBuffer(provider.derive_key(password, vault.salt, vault.kdf)) as key:
        return provider.decrypt(vault.ciphertext, vault.iv, key.data)
