"""Order execution: token -> bonding contract -> trade size -> swap call.

Each stage raises a typed OrderError. ``OrderExecutor.execute`` is the only
boundary: it reports progress to the chat, converts any failure into an
``OrderResult`` and never lets an exception escape to the bot.
"""

import logging
from decimal import Decimal
from typing import Optional

from bondswap.config import Settings
from bondswap.errors import (
    BalanceNotFoundError,
    ContractNotFoundError,
    InvalidAmountError,
    OrderError,
    RemoteCallFailure,
)
from bondswap.models import (
    BondingMetadata,
    CommandPayload,
    ContractCall,
    OrderKind,
    OrderResult,
    SwapParams,
    TokenBalance,
    TokenTransferSpec,
    TransactionResult,
)
from bondswap.multiversx.base import BalanceClient, QueryClient, WalletProvider
from bondswap.multiversx.query import parse_bonding_metadata
from bondswap.notifications.telegram import TelegramNotifier
from bondswap.utils.locks import LockTimeoutError, wallet_lock

logger = logging.getLogger(__name__)

BONDING_METADATA_FUNCTION = "getAllBondingMetadata"
SWAP_FUNCTION = "swap"
DEFAULT_BALANCE_FRACTION = Decimal("0.98")


def find_contract(entries: list[BondingMetadata], token_id: str) -> Optional[str]:
    """Return the contract of the first entry whose first token matches."""
    for entry in entries:
        if entry.first_token_id == token_id:
            return entry.contract_address
    return None


# Amounts outside 10**-60 .. 10**60 are rejected
MAX_AMOUNT_EXPONENT = 60


def _ratio(value: Decimal) -> tuple[int, int]:
    if not value.is_finite():
        raise InvalidAmountError()
    exponent = value.as_tuple().exponent
    if value.adjusted() > MAX_AMOUNT_EXPONENT or exponent < -MAX_AMOUNT_EXPONENT:
        raise InvalidAmountError()
    return value.as_integer_ratio()


def _to_smallest_unit(amount: Decimal, decimals: int) -> int:
    """Exact floor of ``amount * 10**decimals``."""
    numerator, denominator = _ratio(amount)
    return numerator * 10**decimals // denominator


def _fraction_of(balance: int, fraction: Decimal) -> int:
    """Exact floor of ``balance * fraction``."""
    numerator, denominator = _ratio(fraction)
    return balance * numerator // denominator


def _checked_amount(amount: int) -> int:
    if amount <= 0:
        raise InvalidAmountError()
    return amount


def compute_buy_amount(
    payload: CommandPayload,
    wallet_balance: TokenBalance,
    base_decimals: int = 18,
    fraction: Decimal = DEFAULT_BALANCE_FRACTION,
) -> int:
    """Amount of base token to pay, in its smallest unit.

    An explicit amount is in whole base-token units; otherwise a fraction of
    the wallet's base-token balance is used.

    Raises:
        InvalidAmountError: if the result is not a positive integer
    """
    if payload.amount is not None:
        return _checked_amount(_to_smallest_unit(payload.amount, base_decimals))
    return _checked_amount(_fraction_of(wallet_balance.balance, fraction))


def compute_sell_amount(
    payload: CommandPayload,
    token_balance: TokenBalance,
    fraction: Decimal = DEFAULT_BALANCE_FRACTION,
) -> int:
    """Amount of the sold token to send, scaled by the token's own decimals.

    Raises:
        InvalidAmountError: if the result is not a positive integer
    """
    if payload.amount is not None:
        return _checked_amount(_to_smallest_unit(payload.amount, token_balance.decimals))
    return _checked_amount(_fraction_of(token_balance.balance, fraction))


class OrderExecutor:
    """Runs buy and sell orders against the bonding contracts."""

    def __init__(
        self,
        query_client: QueryClient,
        balance_client: BalanceClient,
        wallet_provider: WalletProvider,
        notifier: TelegramNotifier,
        master_contract_address: str,
        base_token: str = "ONE-f9954f",
        base_token_decimals: int = 18,
        gas_limit: int = 10_000_000,
        min_amount_to_receive: int = 1,
        balance_fraction: Decimal = DEFAULT_BALANCE_FRACTION,
        serialize_submissions: bool = True,
    ):
        self.query_client = query_client
        self.balance_client = balance_client
        self.wallet_provider = wallet_provider
        self.notifier = notifier
        self.master_contract_address = master_contract_address
        self.base_token = base_token
        self.base_token_decimals = base_token_decimals
        self.gas_limit = gas_limit
        self.min_amount_to_receive = min_amount_to_receive
        self.balance_fraction = balance_fraction
        self.serialize_submissions = serialize_submissions

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        query_client: QueryClient,
        balance_client: BalanceClient,
        wallet_provider: WalletProvider,
        notifier: TelegramNotifier,
    ) -> "OrderExecutor":
        """Create an executor configured from application settings."""
        return cls(
            query_client=query_client,
            balance_client=balance_client,
            wallet_provider=wallet_provider,
            notifier=notifier,
            master_contract_address=settings.master_contract_address,
            base_token=settings.base_token,
            base_token_decimals=settings.base_token_decimals,
            gas_limit=settings.swap_gas_limit,
            min_amount_to_receive=settings.min_amount_to_receive,
            balance_fraction=settings.balance_fraction,
            serialize_submissions=settings.serialize_submissions,
        )

    async def resolve_contract(self, token_id: str) -> str:
        """Find the trading contract for a token.

        Metadata is fetched on every call. If several entries share the same
        first token, the first one returned by the registry wins.

        Raises:
            ContractNotFoundError: no entry for the token
            RemoteCallFailure: the registry query failed
        """
        try:
            values = await self.query_client.query(
                self.master_contract_address, BONDING_METADATA_FUNCTION
            )
        except RemoteCallFailure as e:
            logger.error(f"Error finding contract address for {token_id}: {e}")
            raise RemoteCallFailure(f"Failed to find contract for token {token_id}: {e}") from e

        address = find_contract(parse_bonding_metadata(values), token_id)
        if address is None:
            raise ContractNotFoundError(token_id)
        return address

    async def _require_balance(self, address: str, identifier: str) -> TokenBalance:
        balance = await self.balance_client.get_token_balance(address, identifier)
        if balance is None:
            raise BalanceNotFoundError(identifier)
        return balance

    async def execute_swap(self, params: SwapParams) -> TransactionResult:
        """Load the wallet and submit the swap call."""
        wallet = await self.wallet_provider.load()
        call = ContractCall(
            contract_address=params.contract_address,
            function=SWAP_FUNCTION,
            gas_limit=self.gas_limit,
            arguments=[params.token_to_receive, params.min_amount_to_receive],
            token_transfers=[
                TokenTransferSpec(identifier=params.token_to_send, amount=params.amount_to_send, nonce=0)
            ],
        )

        if not self.serialize_submissions:
            return await wallet.submit(call)

        try:
            async with wallet_lock(wallet.address, operation=f"swap {params.token_to_send}"):
                return await wallet.submit(call)
        except LockTimeoutError as e:
            raise RemoteCallFailure(str(e)) from e

    async def _run(self, chat_id: int, kind: OrderKind, payload: CommandPayload) -> TransactionResult:
        contract_address = await self.resolve_contract(payload.token)
        await self.notifier.contract_found(chat_id, contract_address)

        wallet = await self.wallet_provider.load()

        if kind is OrderKind.BUY:
            balance = await self._require_balance(wallet.address, self.base_token)
            amount = compute_buy_amount(
                payload, balance, self.base_token_decimals, self.balance_fraction
            )
            params = SwapParams(
                contract_address=contract_address,
                token_to_send=self.base_token,
                token_to_receive=payload.token,
                amount_to_send=amount,
                min_amount_to_receive=self.min_amount_to_receive,
            )
        else:
            balance = await self._require_balance(wallet.address, payload.token)
            amount = compute_sell_amount(payload, balance, self.balance_fraction)
            params = SwapParams(
                contract_address=contract_address,
                token_to_send=payload.token,
                token_to_receive=self.base_token,
                amount_to_send=amount,
                min_amount_to_receive=self.min_amount_to_receive,
            )

        await self.notifier.submitting(chat_id)
        return await self.execute_swap(params)

    async def execute(self, chat_id: int, kind: OrderKind, payload: CommandPayload) -> OrderResult:
        """Run an order end to end and report every stage to the chat."""
        await self.notifier.order_started(chat_id, kind, payload.token)

        try:
            transaction = await self._run(chat_id, kind, payload)
        except OrderError as e:
            logger.error(f"Error in {kind.value} order for {payload.token}: {e}")
            result = OrderResult.failed(kind, payload.token, e)
        except Exception as e:
            logger.exception(f"Unexpected error in {kind.value} order for {payload.token}")
            result = OrderResult.failed(kind, payload.token, RemoteCallFailure(str(e)))
        else:
            result = OrderResult.ok(kind, payload.token, transaction)

        if result.success:
            await self.notifier.order_succeeded(chat_id, result.transaction)
        else:
            await self.notifier.order_failed(chat_id, result.error)

        logger.info(f"Order finished: {result.to_dict()}")
        return result
