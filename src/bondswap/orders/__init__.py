"""Buy and sell order execution."""

from bondswap.orders.executor import (
    OrderExecutor,
    compute_buy_amount,
    compute_sell_amount,
    find_contract,
)

__all__ = [
    "OrderExecutor",
    "compute_buy_amount",
    "compute_sell_amount",
    "find_contract",
]
