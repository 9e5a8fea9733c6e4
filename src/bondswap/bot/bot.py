"""Bot initialization and runner."""

import asyncio
import logging
from typing import Optional

from aiogram import Bot, Dispatcher
from aiogram.types import BotCommand

from bondswap.bot.handlers import router
from bondswap.bot.router import CommandRouter
from bondswap.config import Settings, get_settings
from bondswap.multiversx.accounts import AccountsClient
from bondswap.multiversx.query import ContractQueryClient
from bondswap.multiversx.wallet import KeystoreWalletProvider
from bondswap.notifications.telegram import TelegramNotifier
from bondswap.orders.executor import OrderExecutor

logger = logging.getLogger(__name__)

BOT_COMMANDS = [
    BotCommand(command="buy", description="Buy a token: /buy <token> [amount]"),
    BotCommand(command="sell", description="Sell a token: /sell <token> [amount]"),
    BotCommand(command="address", description="Wallet address and balances"),
    BotCommand(command="chatid", description="Show this chat's ID"),
    BotCommand(command="help", description="List commands"),
]


def build_command_router(bot: Bot, settings: Settings) -> CommandRouter:
    """Wire the ledger adapters, the executor and the notifier together."""
    notifier = TelegramNotifier(bot)
    query_client = ContractQueryClient(
        gateway_url=settings.gateway_url,
        abi_path=settings.bonding_abi_path,
        chain_id=settings.chain_id,
        timeout=settings.query_timeout,
    )
    balance_client = AccountsClient(base_url=settings.api_url, timeout=settings.api_timeout)
    wallet_provider = KeystoreWalletProvider(
        wallet_path=settings.wallet_path,
        password=settings.wallet_password,
        gateway_url=settings.gateway_url,
        chain_id=settings.chain_id,
        explorer_url=settings.explorer_url,
        timeout=settings.query_timeout,
    )
    executor = OrderExecutor.from_settings(
        settings, query_client, balance_client, wallet_provider, notifier
    )
    return CommandRouter(
        authorized_chat_ids=settings.authorized_chat_ids,
        executor=executor,
        notifier=notifier,
        wallet_provider=wallet_provider,
        balance_client=balance_client,
    )


def create_bot(settings: Optional[Settings] = None) -> tuple[Bot, Dispatcher]:
    """Create bot and dispatcher instances."""
    settings = settings or get_settings()

    if not settings.telegram_bot_token:
        raise ValueError("TELEGRAM_BOT_TOKEN must be provided")

    # Plain text replies: token identifiers would break Markdown
    bot = Bot(token=settings.telegram_bot_token)

    # Handlers receive the router through aiogram's workflow data
    dp = Dispatcher(command_router=build_command_router(bot, settings))
    dp.include_router(router)

    return bot, dp


def log_startup_warnings(settings: Settings) -> None:
    if not settings.authorized_chat_ids:
        logger.warning(
            "TELEGRAM_CHATS_IDS is empty: every chat can trade with this wallet. "
            "Use /chatid to find the IDs to allow."
        )
    if settings.min_amount_to_receive <= 1:
        logger.warning(
            f"MIN_AMOUNT_TO_RECEIVE={settings.min_amount_to_receive}: "
            "swaps are sent without slippage protection"
        )
    if not settings.wallet_password:
        logger.warning("WALLET_PASSWORD is not set: orders will fail until it is configured")


async def run_bot() -> None:
    """Run the bot in polling mode."""
    settings = get_settings()

    # Configure logging - reduce noise from libraries
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("aiogram").setLevel(logging.INFO)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("multiversx_sdk").setLevel(logging.WARNING)

    logger.info("Starting trading bot...")
    logger.info(f"Configuration: {settings.get_safe_dict()}")
    log_startup_warnings(settings)

    bot, dp = create_bot(settings)

    try:
        await bot.set_my_commands(BOT_COMMANDS)
        # Delete webhook if any and start polling
        await bot.delete_webhook(drop_pending_updates=True)
        logger.info("Bot is running...")
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


def main() -> None:
    """Entry point for the bot."""
    asyncio.run(run_bot())


if __name__ == "__main__":
    main()
