"""Telegram notification service.

Sends command replies and order progress messages back to the chat that
issued the command.
"""

import logging
from typing import Iterable, Optional

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramForbiddenError

from bondswap.models import OrderKind, TokenBalance, TransactionResult

logger = logging.getLogger(__name__)

URL_NOT_AVAILABLE = "Transaction submitted (URL not available)"


def short_address(address: str) -> str:
    """Shorten an address for display: first 8 and last 4 characters."""
    if len(address) <= 12:
        return address
    return f"{address[:8]}...{address[-4:]}"


def format_balances(balances: Iterable[TokenBalance]) -> str:
    """One line per token, ``TICKER: 12.34``."""
    return "\n".join(f"{b.ticker}: {b.amount:.2f}" for b in balances)


class TelegramNotifier:
    """Service for sending Telegram messages to chats."""

    def __init__(self, bot: Bot):
        self._bot = bot

    async def send_message(
        self,
        chat_id: int,
        message: str,
        parse_mode: Optional[str] = None,
    ) -> bool:
        """Send a message to a chat.

        Delivery errors are logged and reported through the return value only;
        they never interrupt the caller.

        Returns:
            True if message was sent successfully
        """
        try:
            await self._bot.send_message(
                chat_id=chat_id,
                text=message,
                parse_mode=parse_mode,
            )
            return True
        except TelegramForbiddenError:
            logger.warning(f"Chat {chat_id} has blocked the bot")
            return False
        except TelegramAPIError as e:
            logger.error(f"Failed to send message to {chat_id}: {e}")
            return False

    async def order_started(self, chat_id: int, kind: OrderKind, token: str) -> bool:
        return await self.send_message(
            chat_id, f"🔍 Processing {kind.value} order for token: {token}..."
        )

    async def contract_found(self, chat_id: int, contract_address: str) -> bool:
        return await self.send_message(
            chat_id, f"✅ Found trading contract: {short_address(contract_address)}"
        )

    async def submitting(self, chat_id: int) -> bool:
        return await self.send_message(chat_id, "💫 Submitting transaction to blockchain...")

    async def order_succeeded(self, chat_id: int, result: TransactionResult) -> bool:
        url = result.explorer_url or URL_NOT_AVAILABLE
        return await self.send_message(
            chat_id, f"✅ Transaction successful!\n\nView on explorer: {url}"
        )

    async def order_failed(self, chat_id: int, error: Exception) -> bool:
        return await self.send_message(chat_id, f"❌ Transaction failed: {error}")
