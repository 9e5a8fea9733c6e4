"""Utility modules."""

from bondswap.utils.locks import LockTimeoutError, clear_wallet_locks, wallet_lock

__all__ = ["LockTimeoutError", "clear_wallet_locks", "wallet_lock"]
