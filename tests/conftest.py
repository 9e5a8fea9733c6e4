"""Pytest configuration and fixtures."""

import asyncio
import os
from types import SimpleNamespace
from typing import Any, Optional, Sequence
from unittest.mock import AsyncMock

import pytest

# Set test environment
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_CHATS_IDS"] = ""
os.environ["WALLET_PASSWORD"] = ""

from bondswap.bot.router import CommandRouter
from bondswap.models import ContractCall, TokenBalance, TransactionResult
from bondswap.multiversx.base import BalanceClient, QueryClient, Wallet, WalletProvider
from bondswap.notifications.telegram import TelegramNotifier
from bondswap.orders.executor import OrderExecutor
from bondswap.utils.locks import clear_wallet_locks

WALLET_ADDRESS = "erd1wallet00000000000000000000000000000000000000000000000000xyz"
MASTER_CONTRACT = "erd1qqqqqqqqqqqqqpgqg0sshhkwaxz8fxu47z4svrmp48mzydjlptzsdhxjpd"
TKN_CONTRACT = "erd1qqqqqqqqqqqqqpgqtkn1contract0000000000000000000000000abc"
BASE_TOKEN = "ONE-f9954f"


def bonding_entry(token_id: str, address: str) -> SimpleNamespace:
    """A decoded bonding metadata struct as returned by the ABI decoder."""
    return SimpleNamespace(first_token_id=token_id, address=address, second_token_id=BASE_TOKEN)


class FakeQueryClient(QueryClient):
    def __init__(self, entries: Optional[list] = None, error: Optional[Exception] = None):
        self.entries = entries or []
        self.error = error
        self.calls: list[tuple[str, str, tuple]] = []

    async def query(self, contract_address: str, function: str, args: Sequence[Any] = ()):
        self.calls.append((contract_address, function, tuple(args)))
        if self.error:
            raise self.error
        return [list(self.entries)]


class FakeBalanceClient(BalanceClient):
    def __init__(self, balances: Optional[list[TokenBalance]] = None, error: Optional[Exception] = None):
        self.balances = balances or []
        self.error = error
        self.calls: list[str] = []

    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        self.calls.append(address)
        if self.error:
            raise self.error
        return list(self.balances)


class FakeWallet(Wallet):
    def __init__(self, address: str = WALLET_ADDRESS, error: Optional[Exception] = None, delay: float = 0):
        self._address = address
        self.error = error
        self.delay = delay
        self.submitted: list[ContractCall] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def address(self) -> str:
        return self._address

    async def submit(self, call: ContractCall) -> TransactionResult:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error:
                raise self.error
            self.submitted.append(call)
            tx_hash = f"{len(self.submitted):064x}"
            return TransactionResult(
                tx_hash=tx_hash,
                explorer_url=f"https://explorer.multiversx.com/transactions/{tx_hash}",
            )
        finally:
            self.in_flight -= 1


class FakeWalletProvider(WalletProvider):
    def __init__(self, wallet: Optional[FakeWallet] = None, error: Optional[Exception] = None):
        self.wallet = wallet or FakeWallet()
        self.error = error
        self.loads = 0

    async def load(self) -> FakeWallet:
        self.loads += 1
        if self.error:
            raise self.error
        return self.wallet


def sent_texts(bot: AsyncMock) -> list[str]:
    """All message texts sent through a mocked aiogram Bot."""
    return [call.kwargs["text"] for call in bot.send_message.call_args_list]


@pytest.fixture(autouse=True)
def reset_locks():
    """Clear wallet locks before each test."""
    clear_wallet_locks()
    yield
    clear_wallet_locks()


@pytest.fixture
def bot() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def notifier(bot) -> TelegramNotifier:
    return TelegramNotifier(bot)


@pytest.fixture
def query_client() -> FakeQueryClient:
    return FakeQueryClient(entries=[bonding_entry("TKN-1", TKN_CONTRACT)])


@pytest.fixture
def balance_client() -> FakeBalanceClient:
    return FakeBalanceClient(
        balances=[
            TokenBalance(identifier=BASE_TOKEN, balance=50 * 10**18, decimals=18),
            TokenBalance(identifier="TKN-1", balance=1_000_000, decimals=6),
        ]
    )


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def wallet_provider(wallet) -> FakeWalletProvider:
    return FakeWalletProvider(wallet)


@pytest.fixture
def executor(query_client, balance_client, wallet_provider, notifier) -> OrderExecutor:
    return OrderExecutor(
        query_client=query_client,
        balance_client=balance_client,
        wallet_provider=wallet_provider,
        notifier=notifier,
        master_contract_address=MASTER_CONTRACT,
        base_token=BASE_TOKEN,
    )


@pytest.fixture
def make_router(executor, notifier, wallet_provider, balance_client):
    """Build a CommandRouter with the given allow-list."""

    def _make(authorized=()):
        return CommandRouter(
            authorized_chat_ids=authorized,
            executor=executor,
            notifier=notifier,
            wallet_provider=wallet_provider,
            balance_client=balance_client,
        )

    return _make

