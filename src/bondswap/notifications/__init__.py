"""Chat notifications."""

from bondswap.notifications.telegram import TelegramNotifier, format_balances, short_address

__all__ = ["TelegramNotifier", "format_balances", "short_address"]
