"""Command router: authorization gate and dispatch to the order flow."""

import logging
from typing import Iterable

from bondswap.bot.commands import (
    Address,
    Buy,
    ChatId,
    Help,
    Invalid,
    ParsedCommand,
    Sell,
    Start,
    parse_command,
)
from bondswap.errors import BondswapError, UnauthorizedAccess
from bondswap.multiversx.base import BalanceClient, WalletProvider
from bondswap.notifications.telegram import TelegramNotifier, format_balances
from bondswap.orders.executor import OrderExecutor

logger = logging.getLogger(__name__)

UNAUTHORIZED_TEXT = "⛔ Unauthorized access. This bot is private."

HELP_TEXT = """Available commands:
• /buy <token> [amount] - Buy tokens (amount optional)
• /sell <token> [amount] - Sell tokens (amount optional)
• /address - Show wallet address and balances
• /chatid - Show this chat's ID
• /start - Show the welcome message

Without an amount, 98% of the wallet balance is traded.

Examples:
/buy TOKEN-123 100
/sell TOKEN-abc"""

WELCOME_TEXT = """Welcome to the Trading Bot! 🤖

This bot allows you to buy and sell tokens using simple commands.
Your associated wallet address is: {address}

Use /help to see available commands.
Use /address to see your current token balances."""

WELCOME_FALLBACK_TEXT = (
    "Welcome to the Trading Bot! An error occurred while fetching your wallet "
    "address. Please try /address later."
)

CHAT_ID_TEXT = (
    "Your Chat ID is: {chat_id}\n\n"
    "To authorize this chat, add this ID to the TELEGRAM_CHATS_IDS environment variable."
)


class CommandRouter:
    """Authorizes chats and routes parsed commands to their handlers."""

    def __init__(
        self,
        authorized_chat_ids: Iterable[int],
        executor: OrderExecutor,
        notifier: TelegramNotifier,
        wallet_provider: WalletProvider,
        balance_client: BalanceClient,
    ):
        self.authorized_chat_ids = frozenset(authorized_chat_ids)
        self.executor = executor
        self.notifier = notifier
        self.wallet_provider = wallet_provider
        self.balance_client = balance_client

    def authorize(self, chat_id: int) -> bool:
        """Check a chat against the allow-list (an empty list allows everyone)."""
        if not self.authorized_chat_ids:
            logger.warning(
                "No authorized chat IDs configured. Bot is currently accessible to everyone."
            )
            return True
        return chat_id in self.authorized_chat_ids

    def check_access(self, chat_id: int) -> None:
        """Raise UnauthorizedAccess if the chat is not allowed."""
        if not self.authorize(chat_id):
            raise UnauthorizedAccess(chat_id)

    async def handle(self, chat_id: int, text: str) -> None:
        """Handle one inbound chat message."""
        command = parse_command(text)
        if command is None:
            return

        # /chatid is what an operator uses to fill the allow-list
        if not isinstance(command, ChatId):
            try:
                self.check_access(chat_id)
            except UnauthorizedAccess:
                logger.warning(f"Rejected command from unauthorized chat {chat_id}: {text!r}")
                await self.notifier.send_message(chat_id, UNAUTHORIZED_TEXT)
                return

        await self.dispatch(chat_id, command)

    async def dispatch(self, chat_id: int, command: ParsedCommand) -> None:
        if isinstance(command, Help):
            await self.notifier.send_message(chat_id, HELP_TEXT)
        elif isinstance(command, Start):
            await self.cmd_start(chat_id)
        elif isinstance(command, Address):
            await self.cmd_address(chat_id)
        elif isinstance(command, ChatId):
            await self.notifier.send_message(chat_id, CHAT_ID_TEXT.format(chat_id=chat_id))
        elif isinstance(command, (Buy, Sell)):
            await self.executor.execute(chat_id, command.kind, command.payload)
        elif isinstance(command, Invalid):
            await self.notifier.send_message(chat_id, command.reason)
        else:
            raise TypeError(f"Unhandled command: {command!r}")

    async def cmd_start(self, chat_id: int) -> None:
        """Greet and show the wallet address."""
        try:
            wallet = await self.wallet_provider.load()
        except BondswapError as e:
            logger.error(f"Cannot load wallet for /start: {e}")
            await self.notifier.send_message(chat_id, WELCOME_FALLBACK_TEXT)
            return

        await self.notifier.send_message(chat_id, WELCOME_TEXT.format(address=wallet.address))

    async def cmd_address(self, chat_id: int) -> None:
        """Show the wallet address and every token balance."""
        try:
            wallet = await self.wallet_provider.load()
            balances = await self.balance_client.get_token_balances(wallet.address)
        except BondswapError as e:
            logger.error(f"Error fetching address and balances: {e}")
            await self.notifier.send_message(chat_id, "Error fetching address and balances.")
            return

        await self.notifier.send_message(
            chat_id,
            f"Wallet Address: {wallet.address}\nBalances:\n{format_balances(balances)}",
        )
