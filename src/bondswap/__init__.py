"""Telegram command relay for MultiversX bonding-curve swaps."""

__version__ = "0.1.0"
