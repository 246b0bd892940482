"""
chia-rpc: typed async clients for the full node and wallet RPC services.

Public API:

    Clients:
        - ``FullNodeClient``: chain state, blocks, coins, mempool, push_tx.
        - ``WalletClient``: login, wallets, balances, transactions.
        - ``create_fullnode_client()`` / ``create_wallet_client()``:
          factories taking keyword configuration.

    Core:
        - ``load_credentials()``: mutual-TLS credentials from an SSL directory.
        - ``build_url()``: ``https://{host}:{port}/{endpoint}``.
        - ``JsonTransport`` / ``HttpxTransport``: the exchange seam.
        - ``Endpoint`` / ``decode_envelope()``: envelope decoding.

    Errors:
        - ``RpcError`` and its subclasses, see ``chia_rpc.errors``.
"""

__version__ = "0.1.0"

from chia_rpc.client import RpcClient
from chia_rpc.config import (
    DEFAULT_FULLNODE_PORT,
    DEFAULT_WALLET_PORT,
    ClientConfig,
    ConfigError,
)
from chia_rpc.credentials import TransportCredentials, load_credentials
from chia_rpc.envelope import Endpoint, decode_envelope
from chia_rpc.errors import (
    BadStatusError,
    CredentialError,
    CredentialFormatError,
    CredentialIOError,
    DecodeError,
    InvalidArgumentError,
    JsonParseError,
    NetworkError,
    RemoteOperationFailedError,
    ResponseTooLargeError,
    RpcError,
    TransportError,
)
from chia_rpc.fullnode import FullNodeClient, create_fullnode_client
from chia_rpc.models import (
    Coin,
    NetworkInfo,
    PendingPayment,
    SignagePointOrEOS,
    TxStatus,
    WalletSync,
)
from chia_rpc.transport import HttpxTransport, JsonTransport, build_url
from chia_rpc.wallet import WalletClient, create_wallet_client

__all__ = [
    "DEFAULT_FULLNODE_PORT",
    "DEFAULT_WALLET_PORT",
    "BadStatusError",
    "ClientConfig",
    "Coin",
    "ConfigError",
    "CredentialError",
    "CredentialFormatError",
    "CredentialIOError",
    "DecodeError",
    "Endpoint",
    "FullNodeClient",
    "HttpxTransport",
    "InvalidArgumentError",
    "JsonParseError",
    "JsonTransport",
    "NetworkError",
    "NetworkInfo",
    "PendingPayment",
    "RemoteOperationFailedError",
    "ResponseTooLargeError",
    "RpcClient",
    "RpcError",
    "SignagePointOrEOS",
    "TransportCredentials",
    "TransportError",
    "TxStatus",
    "WalletClient",
    "WalletSync",
    "build_url",
    "create_fullnode_client",
    "create_wallet_client",
    "decode_envelope",
    "load_credentials",
]
