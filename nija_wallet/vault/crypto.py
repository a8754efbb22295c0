"""
Vault Crypto Core — Password key derivation and authenticated encryption.

Implements the at-rest protection of wallet secrets:
- Key derivation: PBKDF2-HMAC(password, salt 16B, 100000 rounds, SHA-256) → 32B key
- Encryption: AES-256-GCM, random 96-bit IV per call, 128-bit tag appended

The randomness source is injected through ``CryptoProvider`` so tests can
pin salts and IVs. Module-level helpers use a shared default provider,
which holds no key material.

Security Note:
    Never log plaintext, derived keys or ciphertext values.
    A wrong password is detected only through AEAD tag failure.
"""
import os
import logging
from typing import Callable

from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import AuthenticationFailed, CryptoUnavailable, FormatError
from .config import KdfParams, KEY_LENGTH

logger = logging.getLogger("nija_wallet.vault")

SALT_SIZE = 16
IV_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # 128-bit GCM tag

_HASHES = {
    "sha256": hashes.SHA256,
    "sha512": hashes.SHA512,
}

DEFAULT_KDF = KdfParams()


class CryptoProvider:
    """Explicit cryptographic capability for key derivation and AEAD.

    Args:
        random_source: Callable returning ``n`` cryptographically secure
            random bytes. Defaults to ``os.urandom``.
    """

    def __init__(self, random_source: Callable[[int], bytes] | None = None):
        self._random = random_source or os.urandom

    def random_bytes(self, size: int) -> bytes:
        data = self._random(size)
        if len(data) != size:
            raise CryptoUnavailable(
                f"random source returned {len(data)} bytes, expected {size}"
            )
        return data

    def new_salt(self) -> bytes:
        """Generate a fresh 16-byte salt."""
        return self.random_bytes(SALT_SIZE)

    # ------------------------------------------------------------------
    # Key derivation
    # ------------------------------------------------------------------

    def derive_key(
        self,
        password: str,
        salt: bytes,
        params: KdfParams = DEFAULT_KDF,
    ) -> bytes:
        """Derive a 32-byte encryption key from a password using PBKDF2.

        Deterministic for fixed (password, salt, params).

        Args:
            password: User password.
            salt: 16-byte random salt stored with the vault.
            params: KDF parameters (hash and iteration count).

        Returns:
            32-byte derived key.

        Raises:
            FormatError: If the salt is not 16 bytes.
            CryptoUnavailable: If the backend lacks PBKDF2 or the hash.
        """
        if len(salt) != SALT_SIZE:
            raise FormatError(
                f"salt must be {SALT_SIZE} bytes, got {len(salt)}"
            )
        try:
            kdf = PBKDF2HMAC(
                algorithm=_HASHES[params.hash](),
                length=KEY_LENGTH,
                salt=bytes(salt),
                iterations=params.iterations,
            )
            return kdf.derive(password.encode("utf-8"))
        except UnsupportedAlgorithm as err:
            raise CryptoUnavailable(
                f"PBKDF2-{params.hash} is not available: {err}"
            ) from err

    # ------------------------------------------------------------------
    # Authenticated encryption
    # ------------------------------------------------------------------

    def _cipher(self, key: bytes | bytearray) -> AESGCM:
        try:
            return AESGCM(key)
        except UnsupportedAlgorithm as err:
            raise CryptoUnavailable(f"AES-GCM is not available: {err}") from err

    def encrypt(self, plaintext: bytes, key: bytes | bytearray) -> tuple[bytes, bytes]:
        """Encrypt plaintext with AES-256-GCM under a fresh random IV.

        Format of ciphertext: [encrypted_payload][GCM_tag 16B]

        Args:
            plaintext: Data to encrypt (may be empty).
            key: 32-byte derived key.

        Returns:
            Tuple of (ciphertext, iv).
        """
        iv = self.random_bytes(IV_SIZE)
        ct = self._cipher(key).encrypt(iv, plaintext, None)
        return ct, iv

    def decrypt(self, ciphertext: bytes, iv: bytes, key: bytes | bytearray) -> bytes:
        """Decrypt and authenticate AES-256-GCM ciphertext.

        Args:
            ciphertext: Encrypted payload with the 16-byte tag appended.
            iv: 12-byte IV used at encryption.
            key: 32-byte derived key.

        Returns:
            Decrypted plaintext bytes.

        Raises:
            FormatError: If the IV is not 12 bytes.
            AuthenticationFailed: If the tag does not verify.
        """
        if len(iv) != IV_SIZE:
            raise FormatError(f"iv must be {IV_SIZE} bytes, got {len(iv)}")
        if len(ciphertext) < TAG_SIZE:
            raise AuthenticationFailed()
        try:
            return self._cipher(key).decrypt(bytes(iv), bytes(ciphertext), None)
        except InvalidTag:
            raise AuthenticationFailed() from None


default_provider = CryptoProvider()


def derive_key(password: str, salt: bytes, params: KdfParams = DEFAULT_KDF) -> bytes:
    """Derive a key with the default provider."""
    return default_provider.derive_key(password, salt, params)


def encrypt(plaintext: bytes, key: bytes | bytearray) -> tuple[bytes, bytes]:
    """Encrypt with the default provider. Returns (ciphertext, iv)."""
    return default_provider.encrypt(plaintext, key)


def decrypt(ciphertext: bytes, iv: bytes, key: bytes | bytearray) -> bytes:
    """Decrypt with the default provider."""
    return default_provider.decrypt(ciphertext, iv, key)
