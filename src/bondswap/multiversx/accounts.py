"""Token balance lookups through the MultiversX public API."""

import logging
from typing import Optional

import httpx

from bondswap.errors import RemoteCallFailure
from bondswap.models import TokenBalance
from bondswap.multiversx.base import BalanceClient

logger = logging.getLogger(__name__)


class AccountsClient(BalanceClient):
    """Reads ESDT balances from ``GET /accounts/{address}/tokens``."""

    def __init__(
        self,
        base_url: str = "https://api.multiversx.com",
        timeout: float = 40.0,
        page_size: int = 100,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self._transport = transport

    async def get_token_balances(self, address: str) -> list[TokenBalance]:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    f"/accounts/{address}/tokens",
                    params={"size": self.page_size},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Balance lookup failed for {address}: {e}")
            raise RemoteCallFailure(f"Balance lookup failed: {e}") from e
        except ValueError as e:
            raise RemoteCallFailure(f"Invalid balance response: {e}") from e

        if not isinstance(data, list):
            raise RemoteCallFailure("Invalid balance response: expected a list of tokens")

        balances = []
        for item in data:
            try:
                balances.append(
                    TokenBalance(
                        identifier=item["identifier"],
                        balance=int(item["balance"]),
                        decimals=int(item.get("decimals", 0)),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise RemoteCallFailure(f"Invalid balance entry {item!r}: {e}") from e

        logger.debug(f"Fetched {len(balances)} token balances for {address}")
        return balances
