"""Interfaces of the ledger collaborators used by the order flow.

The order executor and the command router only talk to these abstractions;
the MultiversX-backed implementations live next to this module and tests
substitute in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from bondswap.models import ContractCall, TokenBalance, TransactionResult


class QueryClient(ABC):
    """Executes read-only smart contract queries."""

    @abstractmethod
    async def query(
        self, contract_address: str, function: str, args: Sequence[Any] = ()
    ) -> list[Any]:
        """Run a view function and return its decoded output values.

        Raises:
            RemoteCallFailure: on empty/invalid address, network or decode errors
        """


class BalanceClient(ABC):
    """Looks up fungible token balances of an account."""

    @abstractmethod
    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        """Get all token balances of an account.

        Raises:
            RemoteCallFailure: on network or decode errors
        """

    async def get_token_balance(self, address: str, identifier: str) -> Optional[TokenBalance]:
        """Get a single token balance, or None if the account does not hold it."""
        for balance in await self.get_token_balances(address):
            if balance.identifier == identifier:
                return balance
        return None


class Wallet(ABC):
    """A loaded signing identity."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Bech32 address of the wallet."""

    @abstractmethod
    async def submit(self, call: ContractCall) -> TransactionResult:
        """Sign and broadcast a contract call.

        Raises:
            RemoteCallFailure: if the transaction cannot be built or sent
        """


class WalletProvider(ABC):
    """Loads the bot wallet from encrypted storage."""

    @abstractmethod
    async def load(self) -> Wallet:
        """Load (or return the already loaded) wallet.

        Raises:
            WalletUnavailable: if the keystore cannot be decrypted
        """
