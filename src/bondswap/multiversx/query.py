"""Smart contract queries through the MultiversX proxy gateway."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

from multiversx_sdk import (
    Address,
    NetworkProviderConfig,
    ProxyNetworkProvider,
    SmartContractController,
)
from multiversx_sdk.abi import Abi

from bondswap.errors import RemoteCallFailure
from bondswap.models import BondingMetadata
from bondswap.multiversx.base import QueryClient

logger = logging.getLogger(__name__)

ADDRESS_HRP = "erd"


def address_to_bech32(value: Any) -> str:
    """Convert a decoded address value (Address, raw public key or string) to bech32."""
    if isinstance(value, Address):
        return value.to_bech32()
    if isinstance(value, (bytes, bytearray)):
        return Address(bytes(value), ADDRESS_HRP).to_bech32()
    if isinstance(value, str):
        return value
    raise ValueError(f"Cannot convert {type(value).__name__} to an address")


def _fields(item: Any) -> dict:
    if isinstance(item, dict):
        return dict(item)
    return dict(vars(item))


def parse_bonding_metadata(values: list[Any]) -> list[BondingMetadata]:
    """Map the decoded output of getAllBondingMetadata to BondingMetadata entries.

    The endpoint returns a single list value; every struct must carry
    ``first_token_id`` and ``address`` fields.
    """
    if not values:
        return []

    entries = values[0] or []
    result = []
    for item in entries:
        fields = _fields(item)
        try:
            token_id = fields.pop("first_token_id")
            address = address_to_bech32(fields.pop("address"))
        except (KeyError, ValueError) as e:
            raise RemoteCallFailure(f"Malformed bonding metadata entry: {e}") from e

        if isinstance(token_id, bytes):
            token_id = token_id.decode()
        result.append(
            BondingMetadata(first_token_id=str(token_id), contract_address=address, extra=fields)
        )
    return result


class ContractQueryClient(QueryClient):
    """Query client decoding results with the master contract ABI."""

    def __init__(
        self,
        gateway_url: str,
        abi_path: str,
        chain_id: str = "1",
        timeout: float = 10.0,
    ):
        self.gateway_url = gateway_url
        self.abi_path = abi_path
        self.chain_id = chain_id
        self.timeout = timeout
        self._controller: Optional[SmartContractController] = None

    @property
    def controller(self) -> SmartContractController:
        """Lazy load the controller (reads the ABI file on first use)."""
        if self._controller is None:
            config = NetworkProviderConfig(requests_options={"timeout": self.timeout})
            provider = ProxyNetworkProvider(self.gateway_url, config=config)
            abi = Abi.load(Path(self.abi_path))
            self._controller = SmartContractController(
                chain_id=self.chain_id,
                network_provider=provider,
                abi=abi,
            )
        return self._controller

    async def query(
        self, contract_address: str, function: str, args: Sequence[Any] = ()
    ) -> list[Any]:
        if not contract_address:
            raise RemoteCallFailure(f"Cannot query {function}: empty contract address")

        try:
            contract = Address.new_from_bech32(contract_address)
        except Exception as e:
            raise RemoteCallFailure(f"Invalid contract address {contract_address}: {e}") from e

        try:
            controller = self.controller
        except (OSError, ValueError) as e:
            raise RemoteCallFailure(f"Cannot load ABI from {self.abi_path}: {e}") from e

        try:
            return await asyncio.to_thread(
                controller.query,
                contract=contract,
                function=function,
                arguments=list(args),
            )
        except Exception as e:
            logger.error(f"Query error for {function}: {e}")
            raise RemoteCallFailure(f"Query {function} failed: {e}") from e
