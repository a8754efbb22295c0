"""
Vault Configuration — Key-derivation parameters and validated settings.

Reads optional overrides from environment variables:
    NIJA_VAULT_KDF_ITERATIONS = <integer, default 100000>
    NIJA_VAULT_KDF_HASH = sha256 | sha512
    NIJA_WALLET_API_HOST = <bind address, default 127.0.0.1>
    NIJA_WALLET_API_PORT = <integer, default 5177>

Security Note:
    Passwords and secrets are never configuration. They always arrive as
    explicit arguments of a single operation.
"""
import os
import re
import logging
from typing import Literal

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("nija_wallet.vault")

DEFAULT_ITERATIONS = 100_000
MAX_ITERATIONS = 10_000_000
KEY_LENGTH = 32  # AES-256

_HARDENED_PATH = re.compile(r"^m(/\d+')+$")
_BIP44_PATH = re.compile(r"^m(/\d+'?)+$")


class KdfParams(BaseModel):
    """Parameters stored next to every vault so it can be re-derived."""

    algorithm: Literal["pbkdf2"] = "pbkdf2"
    hash: Literal["sha256", "sha512"] = "sha256"
    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1000, le=MAX_ITERATIONS)
    length: Literal[32] = KEY_LENGTH

    model_config = {"frozen": True, "extra": "forbid"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class VaultConfig(BaseModel):
    """Validated vault and signing configuration."""

    kdf_iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1000, le=MAX_ITERATIONS)
    kdf_hash: str = Field(default="sha256")
    eth_derivation_path: str = Field(default="m/44'/60'/0'/0/0")
    sol_derivation_path: str = Field(default="m/44'/501'/0'/0'")
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=5177, ge=1, le=65535)

    @field_validator("kdf_hash")
    @classmethod
    def validate_hash(cls, v: str) -> str:
        """Validate the KDF hash is supported."""
        v = v.lower()
        if v not in ("sha256", "sha512"):
            raise ValueError(f"Unsupported KDF hash: {v}")
        return v

    @field_validator("eth_derivation_path")
    @classmethod
    def validate_eth_path(cls, v: str) -> str:
        if not _BIP44_PATH.match(v):
            raise ValueError(f"Invalid derivation path: {v}")
        return v

    @field_validator("sol_derivation_path")
    @classmethod
    def validate_sol_path(cls, v: str) -> str:
        """Ed25519 (SLIP-10) only supports hardened derivation."""
        if not _HARDENED_PATH.match(v):
            raise ValueError(
                f"Solana derivation path must be fully hardened: {v}"
            )
        return v

    def kdf_params(self) -> KdfParams:
        """Return the KDF parameters new vaults are sealed with."""
        return KdfParams(hash=self.kdf_hash, iterations=self.kdf_iterations)

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        config = cls(
            kdf_iterations=_env_int("NIJA_VAULT_KDF_ITERATIONS", DEFAULT_ITERATIONS),
            kdf_hash=os.environ.get("NIJA_VAULT_KDF_HASH", "sha256"),
            api_host=os.environ.get("NIJA_WALLET_API_HOST", "127.0.0.1"),
            api_port=_env_int("NIJA_WALLET_API_PORT", 5177),
        )
        logger.debug(
            "Loaded vault config: kdf=pbkdf2-%s iterations=%d",
            config.kdf_hash, config.kdf_iterations,
        )
        return config
