"""
SigningBoundary — Unlock a vault, sign one transaction, lock again.

State machine::

    LOCKED --unlock(password)--> UNLOCKED --exit/error/lock--> LOCKED

The plaintext secret exists only inside ``unlocked()``: it lives in a
SecretBuffer that is zero-filled on every exit path. The boundary performs
no network I/O and never reads or writes storage; the vault and password
always arrive as explicit arguments.

Security Note:
    There is no decrypted-secret cache. Concurrent callers each derive
    their own key and hold their own plaintext; ``sign()`` builds a fresh
    boundary per call.
"""
import asyncio
import enum
import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..exceptions import AuthenticationFailed, WrongPasswordOrCorruptVault
from ..secret import SecretBuffer
from ..vault.config import VaultConfig
from ..vault.crypto import CryptoProvider
from ..vault.record import EncryptedVault, open_vault
from .models import EthereumTransaction, SignedTransaction, SolanaTransaction
from .signers import load_signer

logger = logging.getLogger("nija_wallet.signing")


class BoundaryState(str, enum.Enum):
    LOCKED = "locked"
    UNLOCKED = "unlocked"


class SigningBoundary:
    """Signing boundary bound to one encrypted vault.

    Args:
        vault: The encrypted wallet secret.
        provider: Crypto capability; defaults to the module provider.
        config: Derivation paths; defaults to ``VaultConfig()``.
    """

    def __init__(
        self,
        vault: EncryptedVault,
        provider: CryptoProvider | None = None,
        config: VaultConfig | None = None,
    ):
        self._vault = vault
        self._provider = provider
        self._config = config or VaultConfig()
        self._state = BoundaryState.LOCKED
        self._lock = threading.Lock()

    @property
    def state(self) -> BoundaryState:
        return self._state

    @property
    def locked(self) -> bool:
        return self._state is BoundaryState.LOCKED

    @contextmanager
    def unlocked(self, password: str) -> Iterator[SecretBuffer]:
        """Decrypt the vault for the duration of a ``with`` block.

        Yields:
            SecretBuffer holding the plaintext secret.

        Raises:
            WrongPasswordOrCorruptVault: If authentication fails; the
                boundary stays LOCKED.
        """
        with self._lock:
            try:
                plaintext = open_vault(self._vault, password, self._provider)
            except AuthenticationFailed as err:
                logger.warning("Vault unlock failed: authentication tag mismatch")
                raise WrongPasswordOrCorruptVault() from err
            secret = SecretBuffer(plaintext)
            del plaintext
            self._state = BoundaryState.UNLOCKED
            try:
                yield secret
            finally:
                secret.wipe()
                self._state = BoundaryState.LOCKED

    def sign(
        self,
        password: str,
        request: EthereumTransaction | SolanaTransaction,
    ) -> SignedTransaction:
        """Unlock, build the chain signer, sign and lock again.

        Args:
            password: Vault password.
            request: Chain-specific unsigned transaction.

        Returns:
            The signed transaction.

        Raises:
            WrongPasswordOrCorruptVault: Wrong password or corrupted vault.
            InvalidKeyMaterial: Secret does not fit the target chain.
            TransactionSigningError: Transaction fields could not be signed.
        """
        with self.unlocked(password) as secret:
            with load_signer(request.chain, secret.data, self._config) as signer:
                signed = signer.sign(request)
        logger.info(
            "Transaction signed: chain=%s address=%s", signed.chain, signed.address,
        )
        return signed


def sign(
    vault: EncryptedVault,
    password: str,
    request: EthereumTransaction | SolanaTransaction,
    provider: CryptoProvider | None = None,
    config: VaultConfig | None = None,
) -> SignedTransaction:
    """Sign ``request`` with the secret sealed in ``vault``."""
    return SigningBoundary(vault, provider, config).sign(password, request)


async def sign_async(
    vault: EncryptedVault,
    password: str,
    request: EthereumTransaction | SolanaTransaction,
    provider: CryptoProvider | None = None,
    config: VaultConfig | None = None,
) -> SignedTransaction:
    """Run ``sign`` on a worker thread so key derivation does not block the loop."""
    return await asyncio.to_thread(sign, vault, password, request, provider, config)
