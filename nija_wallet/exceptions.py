"""
Vault Exceptions — Error taxonomy for the vault and signing boundary.

Security Note:
    Messages never carry passwords, plaintext secrets or key bytes.
"""


class VaultError(Exception):
    """Base class for every vault and signing error."""


class CryptoUnavailable(VaultError):
    """The platform lacks a required cryptographic primitive."""


class AuthenticationFailed(VaultError):
    """The AEAD tag did not verify: wrong password, corruption or tampering."""

    def __init__(self, message: str = "incorrect password or corrupted data"):
        super().__init__(message)


class FormatError(VaultError):
    """Malformed vault wire form or field of the wrong size."""


class SigningError(VaultError):
    """Base class for failures of the signing boundary."""


class WrongPasswordOrCorruptVault(SigningError):
    """Unlock failed; ``__cause__`` is the underlying AuthenticationFailed."""

    def __init__(self, message: str = "incorrect password or corrupted data"):
        super().__init__(message)


class InvalidKeyMaterial(SigningError):
    """Decrypted secret does not match the target chain's key format."""


class TransactionSigningError(SigningError):
    """The transaction fields could not be signed."""
