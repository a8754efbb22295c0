"""
Chain Signers — Build Ethereum and Solana signers from raw secret bytes.

Accepted secret formats:
- Ethereum: BIP-39 mnemonic (BIP-44 path, account 0), hex private key
  with or without ``0x``, or 32 raw bytes.
- Solana: BIP-39 mnemonic (SLIP-10 Ed25519, hardened path), base58
  secret key, comma-separated or JSON byte array, or a 32-byte seed.

Security Note:
    Errors raised while parsing key material are re-raised ``from None``
    so third-party messages cannot carry the secret. Never log secrets,
    only addresses.
"""
import re
import logging
from abc import ABC, abstractmethod

import base58
import orjson
from bip_utils import Bip32Slip10Ed25519
from eth_account import Account
from mnemonic import Mnemonic
from solders.hash import Hash
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from ..exceptions import InvalidKeyMaterial, TransactionSigningError
from ..secret import SecretBuffer
from .models import EthereumTransaction, SignedTransaction, SolanaTransaction

# Required to use mnemonic derivation in eth-account
Account.enable_unaudited_hdwallet_features()

logger = logging.getLogger("nija_wallet.signing")

_WORDLIST = Mnemonic("english")
_MNEMONIC_LENGTHS = (12, 15, 18, 21, 24)
_HEX_KEY = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")
_BYTE_LIST = re.compile(r"^\[?\s*\d+(\s*,\s*\d+)+\s*\]?$")
_ED25519_PATH = re.compile(r"^m(/\d+')*$")


def _as_text(secret: bytes | bytearray) -> str | None:
    try:
        return bytes(secret).decode("utf-8").strip()
    except UnicodeDecodeError:
        return None


def _mnemonic_phrase(text: str) -> str | None:
    """Return the normalized phrase if ``text`` is a valid BIP-39 mnemonic."""
    words = text.lower().split()
    if len(words) not in _MNEMONIC_LENGTHS:
        return None
    phrase = " ".join(words)
    try:
        return phrase if _WORDLIST.check(phrase) else None
    except (ValueError, LookupError):
        return None


def ed25519_seed(seed: bytes, path: str) -> bytes:
    """Derive an Ed25519 private seed along a hardened SLIP-10 path.

    Args:
        seed: BIP-39 seed (64 bytes).
        path: Fully hardened path such as ``m/44'/501'/0'/0'``.

    Returns:
        32-byte Ed25519 seed.
    """
    if not _ED25519_PATH.match(path):
        raise ValueError("Ed25519 derivation requires hardened indexes")
    ctx = Bip32Slip10Ed25519.FromSeed(seed)
    if path != "m":
        ctx = ctx.DerivePath(path)
    return ctx.PrivateKey().Raw().ToBytes()


class _Signer(ABC):
    """Holds chain key material for the duration of one signing scope."""

    chain: str = ""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def close(self) -> None:
        """Drop the reference to the key material."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Public address of the signing key."""

    @abstractmethod
    def sign(self, request) -> SignedTransaction:
        """Sign one chain-specific request."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [{self.chain}]>"


def _y_parity(v: int) -> int:
    """Recovery bit from a legacy (27/28), EIP-155 or typed-transaction ``v``."""
    if v >= 35:
        return (v - 35) % 2
    if v >= 27:
        return v - 27
    return v


class EthereumSigner(_Signer):
    """ECDSA secp256k1 signer backed by an eth_account LocalAccount."""

    chain = "ethereum"

    def __init__(self, account):
        self._account = account

    @property
    def address(self) -> str:
        return self._account.address

    def close(self) -> None:
        self._account = None

    def sign(self, request: EthereumTransaction) -> SignedTransaction:
        """Sign an Ethereum transaction (EIP-155 legacy or EIP-1559).

        Raises:
            TransactionSigningError: If eth_account rejects the fields.
        """
        if self._account is None:
            raise TransactionSigningError("signer has been closed")
        try:
            signed = self._account.sign_transaction(request.to_tx_dict())
        except Exception as err:
            raise TransactionSigningError(
                f"could not sign Ethereum transaction: {err}"
            ) from err
        return SignedTransaction(
            chain="ethereum",
            address=self._account.address,
            raw=bytes(signed.raw_transaction),
            signature=f"0x{signed.r:064x}{signed.s:064x}{27 + _y_parity(signed.v):02x}",
            tx_hash="0x" + bytes(signed.hash).hex(),
        )


class SolanaSigner(_Signer):
    """Ed25519 signer backed by a solders Keypair."""

    chain = "solana"

    def __init__(self, keypair: Keypair):
        self._keypair = keypair

    @property
    def address(self) -> str:
        return str(self._keypair.pubkey())

    def close(self) -> None:
        self._keypair = None

    def _message(self, request: SolanaTransaction) -> Message:
        raw = request.message_bytes()
        if raw is not None:
            return Message.from_bytes(raw)
        payer = self._keypair.pubkey()
        instruction = transfer(
            TransferParams(
                from_pubkey=payer,
                to_pubkey=Pubkey.from_string(request.to),
                lamports=request.lamports,
            )
        )
        return Message.new_with_blockhash(
            [instruction], payer, Hash.from_string(request.recent_blockhash),
        )

    def sign(self, request: SolanaTransaction) -> SignedTransaction:
        """Sign a Solana transaction with the wallet as fee payer.

        Raises:
            TransactionSigningError: If the message is malformed or does
                not name the wallet as a signer.
        """
        if self._keypair is None:
            raise TransactionSigningError("signer has been closed")
        try:
            message = self._message(request)
        except Exception as err:
            raise TransactionSigningError(
                f"could not sign Solana transaction: {err}"
            ) from err
        # Transaction() panics with a BaseException on a signer mismatch
        keys = message.account_keys
        if (
            message.header.num_required_signatures != 1
            or not keys
            or keys[0] != self._keypair.pubkey()
        ):
            raise TransactionSigningError(
                "message must name the wallet as its only signer and fee payer"
            )
        try:
            tx = Transaction([self._keypair], message, message.recent_blockhash)
        except Exception as err:
            raise TransactionSigningError(
                f"could not sign Solana transaction: {err}"
            ) from err
        signature = str(tx.signatures[0])
        return SignedTransaction(
            chain="solana",
            address=self.address,
            raw=bytes(tx),
            signature=signature,
            tx_hash=signature,
        )


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def ethereum_signer(
    secret: bytes | bytearray,
    derivation_path: str = "m/44'/60'/0'/0/0",
) -> EthereumSigner:
    """Build an Ethereum signer from a mnemonic or private key.

    Raises:
        InvalidKeyMaterial: If the secret is empty or not a usable key.
    """
    if not secret:
        raise InvalidKeyMaterial("secret is empty")
    text = _as_text(secret)
    phrase = _mnemonic_phrase(text) if text else None
    try:
        if phrase is not None:
            account = Account.from_mnemonic(phrase, account_path=derivation_path)
        elif text and _HEX_KEY.match(text):
            account = Account.from_key(text if text.startswith("0x") else "0x" + text)
        elif len(secret) == 32:
            account = Account.from_key(bytes(secret))
        else:
            account = None
    except Exception:
        raise InvalidKeyMaterial(
            "secret is not a valid Ethereum private key or mnemonic"
        ) from None
    if account is None:
        raise InvalidKeyMaterial(
            "secret is not a valid Ethereum private key or mnemonic"
        )
    return EthereumSigner(account)


def _solana_key_bytes(text: str | None, secret: bytes | bytearray) -> bytes | None:
    if text:
        if _BYTE_LIST.match(text):
            return bytes(orjson.loads(text if text.startswith("[") else f"[{text}]"))
        try:
            return base58.b58decode(text)
        except ValueError:
            pass
    if len(secret) in (32, 64):
        return bytes(secret)
    return None


def solana_signer(
    secret: bytes | bytearray,
    derivation_path: str = "m/44'/501'/0'/0'",
) -> SolanaSigner:
    """Build a Solana signer from a mnemonic, secret key or seed.

    Raises:
        InvalidKeyMaterial: If the secret is empty or not a usable key.
    """
    if not secret:
        raise InvalidKeyMaterial("secret is empty")
    text = _as_text(secret)
    phrase = _mnemonic_phrase(text) if text else None
    keypair = None
    try:
        if phrase is not None:
            seed = Mnemonic.to_seed(phrase, passphrase="")
            keypair = Keypair.from_seed(ed25519_seed(seed, derivation_path))
        else:
            with SecretBuffer(_solana_key_bytes(text, secret) or b"") as key:
                if len(key) == 64:
                    keypair = Keypair.from_bytes(bytes(key.data))
                elif len(key) == 32:
                    keypair = Keypair.from_seed(bytes(key.data))
    except Exception:
        raise InvalidKeyMaterial(
            "secret is not a valid Solana secret key or mnemonic"
        ) from None
    if keypair is None:
        raise InvalidKeyMaterial(
            "secret is not a valid Solana secret key or mnemonic"
        )
    return SolanaSigner(keypair)


def load_signer(chain: str, secret: bytes | bytearray, config=None) -> _Signer:
    """Build the signer for ``chain`` using the configured derivation paths."""
    if chain == "ethereum":
        if config is not None:
            signer = ethereum_signer(secret, config.eth_derivation_path)
        else:
            signer = ethereum_signer(secret)
    elif chain == "solana":
        if config is not None:
            signer = solana_signer(secret, config.sol_derivation_path)
        else:
            signer = solana_signer(secret)
    else:
        raise InvalidKeyMaterial(f"unsupported chain: {chain}")
    logger.debug("Signer ready: chain=%s address=%s", chain, signer.address)
    return signer
