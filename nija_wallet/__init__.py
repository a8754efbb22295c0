"""Nija Wallet Vault.

Encrypts wallet secrets (mnemonics or private keys) under a password and
signs transactions with them without persisting plaintext.
"""
from .version import __version__
from .exceptions import (
    VaultError,
    CryptoUnavailable,
    AuthenticationFailed,
    FormatError,
    SigningError,
    WrongPasswordOrCorruptVault,
    InvalidKeyMaterial,
    TransactionSigningError,
)
from .secret import SecretBuffer
from .vault import (
    CryptoProvider,
    EncryptedVault,
    KdfParams,
    VaultConfig,
    open_vault,
    rotate_password,
    seal_secret,
)
from .signing import (
    SigningBoundary,
    SignedTransaction,
    parse_signing_request,
    sign,
    sign_async,
)

__all__ = [
    "__version__",
    "VaultError",
    "CryptoUnavailable",
    "AuthenticationFailed",
    "FormatError",
    "SigningError",
    "WrongPasswordOrCorruptVault",
    "InvalidKeyMaterial",
    "TransactionSigningError",
    "SecretBuffer",
    "CryptoProvider",
    "EncryptedVault",
    "KdfParams",
    "VaultConfig",
    "open_vault",
    "rotate_password",
    "seal_secret",
    "SigningBoundary",
    "SignedTransaction",
    "parse_signing_request",
    "sign",
    "sign_async",
]
