"""Telegram message handlers."""

from aiogram import F, Router
from aiogram.types import Message

from bondswap.bot.router import CommandRouter

router = Router()


@router.message(F.text.startswith("/"))
async def handle_command(message: Message, command_router: CommandRouter) -> None:
    """Pass every slash command to the command router."""
    await command_router.handle(message.chat.id, message.text)
