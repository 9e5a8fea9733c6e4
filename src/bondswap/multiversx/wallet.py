"""Keystore-backed wallet that signs and broadcasts contract calls."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from multiversx_sdk import (
    Account,
    Address,
    NetworkProviderConfig,
    ProxyNetworkProvider,
    SmartContractTransactionsFactory,
    Token,
    TokenTransfer,
    TransactionsFactoryConfig,
)
from multiversx_sdk.abi import BigUIntValue, StringValue

from bondswap.errors import RemoteCallFailure, WalletUnavailable
from bondswap.models import ContractCall, TransactionResult
from bondswap.multiversx.base import Wallet, WalletProvider

logger = logging.getLogger(__name__)


def _encode_argument(value):
    # bool is an int subclass and has no meaning for the swap endpoint
    if isinstance(value, bool):
        raise TypeError("Boolean contract arguments are not supported")
    if isinstance(value, str):
        return StringValue(value)
    if isinstance(value, int):
        return BigUIntValue(value)
    raise TypeError(f"Unsupported contract argument type: {type(value).__name__}")


class MultiversXWallet(Wallet):
    """Signs with a local account and sends through the proxy gateway.

    The nonce is read from the network once and then tracked locally, so
    back-to-back submissions do not reuse a nonce that is still pending.
    A failed send forces a resync on the next submission.
    """

    def __init__(
        self,
        account: Account,
        provider: ProxyNetworkProvider,
        chain_id: str,
        explorer_url: str,
    ):
        self._account = account
        self._provider = provider
        self._factory = SmartContractTransactionsFactory(TransactionsFactoryConfig(chain_id=chain_id))
        self._explorer_url = explorer_url.rstrip("/")
        self._nonce_synced = False

    @property
    def address(self) -> str:
        return self._account.address.to_bech32()

    def __str__(self) -> str:
        return self.address

    async def submit(self, call: ContractCall) -> TransactionResult:
        try:
            tx_hash = await asyncio.to_thread(self._sign_and_send, call)
        except (TypeError, ValueError) as e:
            raise RemoteCallFailure(f"Cannot build transaction: {e}") from e
        except Exception as e:
            logger.error(f"Failed to send {call.function} to {call.contract_address}: {e}")
            raise RemoteCallFailure(f"Transaction submission failed: {e}") from e

        logger.info(f"Sent {call.function} to {call.contract_address}: {tx_hash}")
        return TransactionResult(
            tx_hash=tx_hash,
            explorer_url=f"{self._explorer_url}/transactions/{tx_hash}",
        )

    def _sign_and_send(self, call: ContractCall) -> str:
        transaction = self._factory.create_transaction_for_execute(
            sender=self._account.address,
            contract=Address.new_from_bech32(call.contract_address),
            function=call.function,
            gas_limit=call.gas_limit,
            arguments=[_encode_argument(arg) for arg in call.arguments],
            token_transfers=[
                TokenTransfer(Token(transfer.identifier, transfer.nonce), transfer.amount)
                for transfer in call.token_transfers
            ],
        )

        if not self._nonce_synced:
            self._account.nonce = self._provider.get_account(self._account.address).nonce
            self._nonce_synced = True

        transaction.nonce = self._account.get_nonce_then_increment()
        transaction.signature = self._account.sign_transaction(transaction)

        try:
            tx_hash = self._provider.send_transaction(transaction)
        except Exception:
            self._nonce_synced = False
            raise

        return tx_hash.hex() if isinstance(tx_hash, (bytes, bytearray)) else str(tx_hash)


class KeystoreWalletProvider(WalletProvider):
    """Decrypts the keystore on first use and keeps the account in memory."""

    def __init__(
        self,
        wallet_path: str,
        password: Optional[str],
        gateway_url: str,
        chain_id: str = "1",
        explorer_url: str = "https://explorer.multiversx.com",
        timeout: float = 10.0,
    ):
        self.wallet_path = wallet_path
        self._password = password
        self.gateway_url = gateway_url
        self.chain_id = chain_id
        self.explorer_url = explorer_url
        self.timeout = timeout
        self._wallet: Optional[MultiversXWallet] = None
        self._load_lock = asyncio.Lock()

    async def load(self) -> MultiversXWallet:
        if self._wallet is not None:
            return self._wallet

        async with self._load_lock:
            if self._wallet is not None:
                return self._wallet

            if not self._password:
                raise WalletUnavailable("WALLET_PASSWORD is not set")

            try:
                # Keystore decryption (scrypt) is CPU bound
                account = await asyncio.to_thread(
                    Account.new_from_keystore,
                    file_path=Path(self.wallet_path),
                    password=self._password,
                )
            except Exception as e:
                logger.error(f"Failed to load wallet from {self.wallet_path}: {e}")
                raise WalletUnavailable(f"Cannot load wallet from {self.wallet_path}: {e}") from e

            config = NetworkProviderConfig(requests_options={"timeout": self.timeout})
            provider = ProxyNetworkProvider(self.gateway_url, config=config)
            self._wallet = MultiversXWallet(account, provider, self.chain_id, self.explorer_url)
            logger.info(f"Wallet loaded: {self._wallet.address}")
            return self._wallet
