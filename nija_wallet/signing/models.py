"""
Signing Models — Unsigned transaction requests and signed results.

Requests are discriminated on ``chain``. Field names accept both
snake_case and the camelCase used by ethers/web3 clients
(``chainId``, ``gasPrice``, ``maxFeePerGas`` ...).
"""
import re
import base64
import binascii
from typing import Annotated, Any, Literal, Union

from eth_utils import is_address, to_checksum_address
from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel
from solders.hash import Hash
from solders.pubkey import Pubkey

_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")
_HEX_DATA = re.compile(r"^0x([0-9a-fA-F]{2})*$")

_REQUEST_CONFIG = {
    "extra": "forbid",
    "frozen": True,
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class EthereumTransaction(BaseModel):
    """Unsigned Ethereum transaction (legacy/EIP-155 or EIP-1559)."""

    chain: Literal["ethereum"]
    chain_id: int = Field(ge=1)
    nonce: int = Field(ge=0)
    to: str
    value: int = Field(default=0, ge=0)
    gas: int = Field(gt=0, validation_alias=AliasChoices("gas", "gasLimit", "gas_limit"))
    gas_price: int | None = Field(default=None, ge=0)
    max_fee_per_gas: int | None = Field(default=None, ge=0)
    max_priority_fee_per_gas: int | None = Field(default=None, ge=0)
    data: str = "0x"

    model_config = _REQUEST_CONFIG

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: str) -> str:
        if not _ADDRESS.match(v):
            raise ValueError("to must be a 0x-prefixed 20-byte hex address")
        # mixed-case input must carry a valid EIP-55 checksum
        if not is_address(v):
            raise ValueError("to has an invalid EIP-55 checksum")
        return to_checksum_address(v)

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: str) -> str:
        if not _HEX_DATA.match(v):
            raise ValueError("data must be 0x-prefixed hex")
        return v

    @model_validator(mode="after")
    def validate_fees(self) -> "EthereumTransaction":
        """Require either gas_price or both EIP-1559 fee fields."""
        dynamic = (self.max_fee_per_gas, self.max_priority_fee_per_gas)
        if self.gas_price is not None:
            if any(fee is not None for fee in dynamic):
                raise ValueError(
                    "gas_price cannot be combined with EIP-1559 fee fields"
                )
        elif any(fee is None for fee in dynamic):
            raise ValueError(
                "either gas_price or max_fee_per_gas and "
                "max_priority_fee_per_gas are required"
            )
        return self

    def to_tx_dict(self) -> dict[str, Any]:
        """Return the transaction dict in eth_account's expected shape."""
        tx: dict[str, Any] = {
            "chainId": self.chain_id,
            "nonce": self.nonce,
            "to": self.to,
            "value": self.value,
            "gas": self.gas,
            "data": self.data,
        }
        if self.gas_price is not None:
            tx["gasPrice"] = self.gas_price
        else:
            tx["maxFeePerGas"] = self.max_fee_per_gas
            tx["maxPriorityFeePerGas"] = self.max_priority_fee_per_gas
        return tx


class SolanaTransaction(BaseModel):
    """Unsigned Solana transaction.

    Either a native SOL transfer (``to``, ``lamports``, ``recent_blockhash``)
    or a pre-built ``message`` (base64 of a serialized legacy message whose
    fee payer is the wallet).
    """

    chain: Literal["solana"]
    to: str | None = None
    lamports: int | None = Field(default=None, ge=0)
    recent_blockhash: str | None = None
    message: str | None = None

    model_config = _REQUEST_CONFIG

    @field_validator("to")
    @classmethod
    def validate_to(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                Pubkey.from_string(v)
            except Exception:
                raise ValueError("to must be a base58 Solana address") from None
        return v

    @field_validator("recent_blockhash")
    @classmethod
    def validate_blockhash(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                Hash.from_string(v)
            except Exception:
                raise ValueError("recent_blockhash must be a base58 hash") from None
        return v

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str | None) -> str | None:
        if v is not None:
            try:
                base64.b64decode(v, validate=True)
            except binascii.Error:
                raise ValueError("message must be base64") from None
        return v

    @model_validator(mode="after")
    def validate_shape(self) -> "SolanaTransaction":
        transfer = (self.to, self.lamports, self.recent_blockhash)
        if self.message is not None:
            if any(field is not None for field in transfer):
                raise ValueError("message cannot be combined with transfer fields")
        elif any(field is None for field in transfer):
            raise ValueError(
                "either message or to, lamports and recent_blockhash are required"
            )
        return self

    def message_bytes(self) -> bytes | None:
        return base64.b64decode(self.message) if self.message is not None else None


SigningRequest = Annotated[
    Union[EthereumTransaction, SolanaTransaction],
    Field(discriminator="chain"),
]

_REQUEST_ADAPTER = TypeAdapter(SigningRequest)


def parse_signing_request(data: Any) -> EthereumTransaction | SolanaTransaction:
    """Validate a mapping into a chain-specific signing request.

    Raises:
        pydantic.ValidationError: If the request is malformed.
    """
    return _REQUEST_ADAPTER.validate_python(data)


class SignedTransaction(BaseModel):
    """Fully signed transaction, ready for an external broadcaster."""

    chain: Literal["ethereum", "solana"]
    address: str
    raw: bytes
    signature: str
    tx_hash: str

    model_config = {"frozen": True}

    @property
    def raw_encoded(self) -> str:
        """``0x`` hex for Ethereum, base64 for Solana (RPC conventions)."""
        if self.chain == "ethereum":
            return "0x" + self.raw.hex()
        return base64.b64encode(self.raw).decode("ascii")

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain": self.chain,
            "address": self.address,
            "rawTransaction": self.raw_encoded,
            "signature": self.signature,
            "hash": self.tx_hash,
        }
