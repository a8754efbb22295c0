"""Wallet Vault — Password-based encryption of wallet secrets at rest.

Security Note (Threat Model):
    Plaintext secrets and derived keys exist in process memory only during
    a single seal, open or sign operation. Copies owned by this package are
    zeroed on release; copies made by third-party libraries are reclaimed
    by the garbage collector. Protection against a memory dump of a live
    process requires an HSM/secure enclave and is out of scope.
"""

from .config import KdfParams, VaultConfig
from .crypto import CryptoProvider, derive_key, encrypt, decrypt
from .record import EncryptedVault, seal_secret, open_vault
from .rotation import rotate_password, upgrade_vaults

__all__ = [
    "KdfParams",
    "VaultConfig",
    "CryptoProvider",
    "derive_key",
    "encrypt",
    "decrypt",
    "EncryptedVault",
    "seal_secret",
    "open_vault",
    "rotate_password",
    "upgrade_vaults",
]
