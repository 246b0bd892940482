"""
Wallet RPC client.

Same envelope and transport as the full node client, different catalog.
Wallet infos, balances and transaction records are plain JSON objects.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from chia_rpc.client import RpcClient
from chia_rpc.config import DEFAULT_WALLET_PORT, ClientConfig
from chia_rpc.envelope import BOOLEAN, INTEGER, OBJECT, OBJECT_ARRAY, Endpoint, pick
from chia_rpc.models import Coin, PendingPayment, WalletSync

JsonDict = dict[str, Any]

# =========================================================================
# Endpoint descriptors
# =========================================================================

LOG_IN: Endpoint[int] = Endpoint("log_in", {"fingerprint": INTEGER}, pick("fingerprint"))
LOG_IN_AND_SKIP: Endpoint[int] = Endpoint(
    "log_in_and_skip", {"fingerprint": INTEGER}, pick("fingerprint")
)
GET_WALLETS: Endpoint[list[JsonDict]] = Endpoint(
    "get_wallets", {"wallets": OBJECT_ARRAY}, pick("wallets")
)
GET_WALLET_BALANCE: Endpoint[list[JsonDict]] = Endpoint(
    "get_wallet_balance", {"wallets": OBJECT_ARRAY}, pick("wallets")
)
GET_SYNC_STATUS: Endpoint[WalletSync] = Endpoint(
    "get_sync_status",
    {"genesis_initialized": BOOLEAN, "synced": BOOLEAN, "syncing": BOOLEAN},
    WalletSync.from_dict,
)
SEND_TRANSACTION: Endpoint[JsonDict] = Endpoint(
    "send_transaction", {"transaction": OBJECT}, pick("transaction")
)
SEND_TRANSACTION_MULTI: Endpoint[JsonDict] = Endpoint(
    "send_transaction_multi", {"transaction": OBJECT}, pick("transaction")
)
GET_TRANSACTION: Endpoint[JsonDict] = Endpoint(
    "get_transaction", {"transaction": OBJECT}, pick("transaction")
)
CREATE_SIGNED_TRANSACTION: Endpoint[JsonDict] = Endpoint(
    "create_signed_transaction", {"signed_tx": OBJECT}, pick("signed_tx")
)


def _coin_dict(coin: Coin | JsonDict) -> JsonDict:
    return coin.to_dict() if isinstance(coin, Coin) else coin


def _payment_dict(payment: PendingPayment | JsonDict) -> JsonDict:
    return payment.to_dict() if isinstance(payment, PendingPayment) else payment


class WalletClient(RpcClient):
    """Async client for the wallet RPC service."""

    default_port = DEFAULT_WALLET_PORT

    async def log_in(self, wallet_fingerprint: int) -> int:
        """Log in to the key with ``wallet_fingerprint``; returns the fingerprint."""
        return await self.call(LOG_IN, {"wallet_fingerprint": wallet_fingerprint})

    async def log_in_and_skip(self, wallet_fingerprint: int) -> int:
        """Log in without waiting for the initial backup import."""
        return await self.call(LOG_IN_AND_SKIP, {"wallet_fingerprint": wallet_fingerprint})

    async def get_wallets(self) -> list[JsonDict]:
        return await self.call(GET_WALLETS)

    async def get_wallet_balance(self, wallet_id: int) -> list[JsonDict]:
        return await self.call(GET_WALLET_BALANCE, {"wallet_id": wallet_id})

    async def get_sync_status(self) -> WalletSync:
        return await self.call(GET_SYNC_STATUS)

    async def send_transaction(
        self, wallet_id: int, amount: int, address: str, fee: int
    ) -> JsonDict:
        """Send ``amount`` to ``address``; returns the transaction record."""
        return await self.call(
            SEND_TRANSACTION,
            {"wallet_id": wallet_id, "amount": amount, "address": address, "fee": fee},
        )

    async def send_transaction_multi(
        self,
        wallet_id: int,
        additions: Sequence[PendingPayment | JsonDict],
        fee: int,
    ) -> JsonDict:
        return await self.call(
            SEND_TRANSACTION_MULTI,
            {
                "wallet_id": wallet_id,
                "additions": [_payment_dict(a) for a in additions],
                "fee": fee,
            },
        )

    async def get_transaction(self, wallet_id: int, transaction_id: str) -> JsonDict:
        return await self.call(
            GET_TRANSACTION, {"wallet_id": wallet_id, "transaction_id": transaction_id}
        )

    async def create_signed_transaction(
        self,
        wallet_id: int,
        additions: Sequence[Coin | JsonDict],
        coins: Sequence[Coin | JsonDict],
        fee: int,
    ) -> JsonDict:
        """Build and sign a transaction without pushing it.

        Args:
            wallet_id: Wallet to spend from.
            additions: Outputs to create.
            coins: Coins to spend. Empty lets the wallet choose.
            fee: Fee in mojos.
        """
        return await self.call(
            CREATE_SIGNED_TRANSACTION,
            {
                "wallet_id": wallet_id,
                "additions": [_coin_dict(c) for c in additions],
                "coins": [_coin_dict(c) for c in coins],
                "fee": fee,
            },
        )


def create_wallet_client(**config: Any) -> WalletClient:
    """Create a WalletClient from keyword configuration; ``port`` defaults to 9256."""
    return WalletClient.from_config(ClientConfig.from_dict(config))
