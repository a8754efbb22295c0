"""Signing Boundary — Sign Ethereum and Solana transactions from a vault."""

from .boundary import BoundaryState, SigningBoundary, sign, sign_async
from .models import (
    EthereumTransaction,
    SolanaTransaction,
    SignedTransaction,
    SigningRequest,
    parse_signing_request,
)

__all__ = [
    "BoundaryState",
    "SigningBoundary",
    "sign",
    "sign_async",
    "EthereumTransaction",
    "SolanaTransaction",
    "SignedTransaction",
    "SigningRequest",
    "parse_signing_request",
]
