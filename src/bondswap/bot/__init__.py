"""Telegram bot: command parsing, authorization and dispatch."""
