"""Concurrency control for transaction submission.

Provides per-wallet locking so that two orders from different chats do not
race for the same account nonce.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)

# Global lock registry: wallet address -> asyncio.Lock
_wallet_locks: dict[str, asyncio.Lock] = {}


class LockTimeoutError(Exception):
    """Raised when a lock cannot be acquired within the timeout period."""


def get_wallet_lock(address: str) -> asyncio.Lock:
    """Get or create the submission lock for a wallet address."""
    lock = _wallet_locks.get(address)
    if lock is None:
        lock = _wallet_locks[address] = asyncio.Lock()
    return lock


@asynccontextmanager
async def wallet_lock(
    address: str,
    timeout: Optional[float] = 60.0,
    operation: str = "submit",
):
    """Hold exclusive submission rights for a wallet.

    Args:
        address: Wallet address
        timeout: Maximum time to wait for the lock (None = wait forever)
        operation: Description for logging

    Example:
        async with wallet_lock(wallet.address, operation="swap"):
            await wallet.submit(call)
    """
    lock = get_wallet_lock(address)

    try:
        if timeout:
            await asyncio.wait_for(lock.acquire(), timeout=timeout)
        else:
            await lock.acquire()
    except asyncio.TimeoutError:
        logger.warning(f"Lock timeout for wallet {address} after {timeout}s: {operation}")
        raise LockTimeoutError(
            f"Could not acquire lock for wallet {address} within {timeout}s"
        )

    logger.debug(f"Lock acquired for wallet {address}: {operation}")
    try:
        yield
    finally:
        lock.release()
        logger.debug(f"Lock released for wallet {address}: {operation}")


def clear_wallet_locks() -> None:
    """Clear all wallet locks (useful for testing)."""
    _wallet_locks.clear()
