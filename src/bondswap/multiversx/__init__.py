"""MultiversX ledger adapters: contract queries, balances and the bot wallet."""

from bondswap.multiversx.base import BalanceClient, QueryClient, Wallet, WalletProvider

__all__ = [
    "BalanceClient",
    "QueryClient",
    "Wallet",
    "WalletProvider",
]
