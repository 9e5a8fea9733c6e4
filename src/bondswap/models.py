"""Value types passed between the router, the executor and the chain adapters."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union

from bondswap.errors import OrderError


class OrderKind(str, Enum):
    """Direction of an order relative to the base token."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class CommandPayload:
    """Arguments of a /buy or /sell command."""

    token: str
    amount: Optional[Decimal] = None


@dataclass(frozen=True)
class TokenBalance:
    """A fungible token balance held by an account (smallest unit)."""

    identifier: str
    balance: int
    decimals: int

    @property
    def ticker(self) -> str:
        """Identifier without the random suffix (ONE-f9954f -> ONE)."""
        return self.identifier.split("-")[0]

    @property
    def amount(self) -> Decimal:
        """Balance in whole-token units."""
        return Decimal(self.balance) / (Decimal(10) ** self.decimals)


@dataclass(frozen=True)
class BondingMetadata:
    """A bonding registry entry mapping a token to its trading contract."""

    first_token_id: str
    contract_address: str
    extra: dict = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class SwapParams:
    """Everything needed to submit one swap call."""

    contract_address: str
    token_to_send: str
    token_to_receive: str
    amount_to_send: int
    min_amount_to_receive: int


@dataclass(frozen=True)
class TokenTransferSpec:
    """A fungible token attached to a contract call."""

    identifier: str
    amount: int
    nonce: int = 0


@dataclass(frozen=True)
class ContractCall:
    """A contract call to be signed and sent by a wallet.

    String arguments are encoded as strings, integers as unsigned big integers.
    """

    contract_address: str
    function: str
    gas_limit: int
    arguments: list[Union[str, int]] = field(default_factory=list)
    token_transfers: list[TokenTransferSpec] = field(default_factory=list)


@dataclass(frozen=True)
class TransactionResult:
    """Outcome of a submitted transaction."""

    tx_hash: str
    explorer_url: Optional[str] = None


@dataclass
class OrderResult:
    """Result of a buy or sell order: either a transaction or an error."""

    kind: OrderKind
    token: str
    transaction: Optional[TransactionResult] = None
    error: Optional[OrderError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.transaction is not None

    @classmethod
    def ok(cls, kind: OrderKind, token: str, transaction: TransactionResult) -> "OrderResult":
        return cls(kind=kind, token=token, transaction=transaction)

    @classmethod
    def failed(cls, kind: OrderKind, token: str, error: OrderError) -> "OrderResult":
        return cls(kind=kind, token=token, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for logging."""
        return {
            "kind": self.kind.value,
            "token": self.token,
            "success": self.success,
            "tx_hash": self.transaction.tx_hash if self.transaction else None,
            "error": str(self.error) if self.error else None,
        }
