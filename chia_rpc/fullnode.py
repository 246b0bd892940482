"""
Full node RPC client.

Each method names an endpoint, builds its parameters and returns the
declared field of the response envelope. Blocks, block records, coin
records, spend bundles and mempool items are plain JSON objects.

Derived methods (``get_all_blocks``, ``get_network_space_by_height``,
``get_coin_spend``) compose other endpoints; their sub-calls run one
after another and the first failure aborts the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from chia_rpc.client import RpcClient
from chia_rpc.config import DEFAULT_FULLNODE_PORT, ClientConfig
from chia_rpc.envelope import (
    BOOLEAN,
    INTEGER,
    NULLABLE_OBJECT,
    NUMBER,
    OBJECT,
    OBJECT_ARRAY,
    OBJECT_MAP,
    STRING,
    STRING_ARRAY,
    Endpoint,
    pick,
)
from chia_rpc.errors import InvalidArgumentError
from chia_rpc.models import Coin, NetworkInfo, SignagePointOrEOS, TxStatus

log = logging.getLogger(__name__)

JsonDict = dict[str, Any]


def _with_optional(params: JsonDict, **optional: Any) -> JsonDict:
    """``params`` plus each optional parameter that is not None."""
    return {**params, **{k: v for k, v in optional.items() if v is not None}}


BLOCK_RECORD: dict[str, Any] = {
    "type": "object",
    "required": ["header_hash"],
    "properties": {"header_hash": STRING},
}

# =========================================================================
# Endpoint descriptors
# =========================================================================

GET_BLOCKCHAIN_STATE: Endpoint[JsonDict] = Endpoint(
    "get_blockchain_state", {"blockchain_state": OBJECT}, pick("blockchain_state")
)
GET_BLOCK: Endpoint[JsonDict] = Endpoint("get_block", {"block": OBJECT}, pick("block"))
GET_BLOCKS: Endpoint[list[JsonDict]] = Endpoint(
    "get_blocks", {"blocks": OBJECT_ARRAY}, pick("blocks")
)
GET_BLOCK_RECORD_BY_HEIGHT: Endpoint[JsonDict] = Endpoint(
    "get_block_record_by_height", {"block_record": BLOCK_RECORD}, pick("block_record")
)
GET_BLOCK_RECORD: Endpoint[JsonDict] = Endpoint(
    "get_block_record", {"block_record": BLOCK_RECORD}, pick("block_record")
)
GET_BLOCK_RECORDS: Endpoint[list[JsonDict]] = Endpoint(
    "get_block_records",
    {"block_records": {"type": "array", "items": BLOCK_RECORD}},
    pick("block_records"),
)
GET_UNFINISHED_BLOCK_HEADERS: Endpoint[list[JsonDict]] = Endpoint(
    "get_unfinished_block_headers", {"headers": OBJECT_ARRAY}, pick("headers")
)
GET_NETWORK_SPACE: Endpoint[int] = Endpoint(
    "get_network_space", {"space": INTEGER}, pick("space")
)
GET_ADDITIONS_AND_REMOVALS: Endpoint[tuple[list[JsonDict], list[JsonDict]]] = Endpoint(
    "get_additions_and_removals",
    {"additions": OBJECT_ARRAY, "removals": OBJECT_ARRAY},
    lambda data: (data["additions"], data["removals"]),
)
GET_INITIAL_FREEZE_PERIOD: Endpoint[int] = Endpoint(
    "get_initial_freeze_period",
    {"initial_freeze_end_timestamp": INTEGER},
    pick("initial_freeze_end_timestamp"),
)
GET_NETWORK_INFO: Endpoint[NetworkInfo] = Endpoint(
    "get_network_info",
    {"network_name": STRING, "network_prefix": STRING},
    NetworkInfo.from_dict,
)
GET_RECENT_SIGNAGE_POINT_OR_EOS: Endpoint[SignagePointOrEOS] = Endpoint(
    "get_recent_signage_point_or_eos",
    {"time_received": NUMBER, "reverted": BOOLEAN},
    SignagePointOrEOS.from_dict,
    optional={"signage_point": NULLABLE_OBJECT, "eos": NULLABLE_OBJECT},
)
GET_COIN_RECORDS_BY_PUZZLE_HASH: Endpoint[list[JsonDict]] = Endpoint(
    "get_coin_records_by_puzzle_hash", {"coin_records": OBJECT_ARRAY}, pick("coin_records")
)
GET_COIN_RECORDS_BY_PUZZLE_HASHES: Endpoint[list[JsonDict]] = Endpoint(
    "get_coin_records_by_puzzle_hashes", {"coin_records": OBJECT_ARRAY}, pick("coin_records")
)
GET_COIN_RECORDS_BY_PARENT_IDS: Endpoint[list[JsonDict]] = Endpoint(
    "get_coin_records_by_parent_ids", {"coin_records": OBJECT_ARRAY}, pick("coin_records")
)
# success == false means "no such coin" for this endpoint.
GET_COIN_RECORD_BY_NAME: Endpoint[JsonDict | None] = Endpoint(
    "get_coin_record_by_name",
    {},
    lambda data: data.get("coin_record"),
    absent_on_failure=True,
    optional={"coin_record": NULLABLE_OBJECT},
)
PUSH_TX: Endpoint[TxStatus] = Endpoint(
    "push_tx",
    {"status": {"enum": [status.value for status in TxStatus]}},
    lambda data: TxStatus(data["status"]),
)
GET_PUZZLE_AND_SOLUTION: Endpoint[JsonDict] = Endpoint(
    "get_puzzle_and_solution", {"coin_solution": OBJECT}, pick("coin_solution")
)
GET_ALL_MEMPOOL_TX_IDS: Endpoint[list[str]] = Endpoint(
    "get_all_mempool_tx_ids", {"tx_ids": STRING_ARRAY}, pick("tx_ids")
)
GET_ALL_MEMPOOL_ITEMS: Endpoint[dict[str, JsonDict]] = Endpoint(
    "get_all_mempool_items", {"mempool_items": OBJECT_MAP}, pick("mempool_items")
)
GET_MEMPOOL_ITEM_BY_TX_ID: Endpoint[JsonDict] = Endpoint(
    "get_mempool_item_by_tx_id", {"mempool_item": OBJECT}, pick("mempool_item")
)


class FullNodeClient(RpcClient):
    """Async client for the full node RPC service.

    Example:
        >>> async with FullNodeClient("localhost", 8555, "~/.chia/mainnet/config/ssl") as node:
        ...     state = await node.get_blockchain_state()
    """

    default_port = DEFAULT_FULLNODE_PORT

    # -----------------------------------------------------------------
    # Chain state and blocks
    # -----------------------------------------------------------------

    async def get_blockchain_state(self) -> JsonDict:
        return await self.call(GET_BLOCKCHAIN_STATE)

    async def get_block(self, header_hash: str) -> JsonDict:
        return await self.call(GET_BLOCK, {"header_hash": header_hash})

    async def get_blocks(
        self, start: int, end: int, exclude_header_hash: bool = False
    ) -> list[JsonDict]:
        """Full blocks with heights in ``[start, end)``.

        ``exclude_header_hash`` leaves the ``header_hash`` field out of
        each returned block.
        """
        return await self.call(
            GET_BLOCKS,
            {"start": start, "end": end, "exclude_header_hash": exclude_header_hash},
        )

    async def get_all_blocks(self, start: int, end: int) -> list[JsonDict]:
        return await self.get_blocks(start, end, exclude_header_hash=True)

    async def get_block_record_by_height(self, height: int) -> JsonDict:
        return await self.call(GET_BLOCK_RECORD_BY_HEIGHT, {"height": height})

    async def get_block_record(self, header_hash: str) -> JsonDict:
        return await self.call(GET_BLOCK_RECORD, {"header_hash": header_hash})

    async def get_block_records(self, start: int, end: int) -> list[JsonDict]:
        """Block records with heights in ``[start, end)``."""
        return await self.call(GET_BLOCK_RECORDS, {"start": start, "end": end})

    async def get_unfinished_block_headers(self) -> list[JsonDict]:
        return await self.call(GET_UNFINISHED_BLOCK_HEADERS)

    async def get_additions_and_removals(
        self, header_hash: str
    ) -> tuple[list[JsonDict], list[JsonDict]]:
        """Coin records created and spent by the block, as (additions, removals)."""
        return await self.call(GET_ADDITIONS_AND_REMOVALS, {"header_hash": header_hash})

    # -----------------------------------------------------------------
    # Network
    # -----------------------------------------------------------------

    async def get_network_space(
        self, older_block_header_hash: str, newer_block_header_hash: str
    ) -> int:
        """Estimated network space in bytes between two blocks."""
        return await self.call(
            GET_NETWORK_SPACE,
            {
                "older_block_header_hash": older_block_header_hash,
                "newer_block_header_hash": newer_block_header_hash,
            },
        )

    async def get_network_space_by_height(
        self, older_block_height: int, newer_block_height: int
    ) -> int:
        """Resolve both heights to header hashes, then query network space.

        Three sequential round trips; any failure aborts the operation.
        """
        older = await self.get_block_record_by_height(older_block_height)
        newer = await self.get_block_record_by_height(newer_block_height)
        return await self.get_network_space(older["header_hash"], newer["header_hash"])

    async def get_initial_freeze_period(self) -> int:
        return await self.call(GET_INITIAL_FREEZE_PERIOD)

    async def get_network_info(self) -> NetworkInfo:
        return await self.call(GET_NETWORK_INFO)

    async def get_recent_signage_point_or_eos(
        self,
        sp_hash: str | None = None,
        challenge_hash: str | None = None,
    ) -> SignagePointOrEOS:
        """Look up a signage point by ``sp_hash`` or an end of subslot by
        ``challenge_hash``.

        Raises:
            InvalidArgumentError: Both or neither identifier given. No
                request is sent.
        """
        if (sp_hash is None) == (challenge_hash is None):
            raise InvalidArgumentError(
                "get_recent_signage_point_or_eos: exactly one of sp_hash or "
                "challenge_hash must be given"
            )
        return await self.call(
            GET_RECENT_SIGNAGE_POINT_OR_EOS,
            _with_optional({}, sp_hash=sp_hash, challenge_hash=challenge_hash),
        )

    # -----------------------------------------------------------------
    # Coins
    # -----------------------------------------------------------------

    async def get_coin_records_by_puzzle_hash(
        self,
        puzzle_hash: str,
        include_spent_coins: bool = False,
        start_height: int | None = None,
        end_height: int | None = None,
    ) -> list[JsonDict]:
        return await self.call(
            GET_COIN_RECORDS_BY_PUZZLE_HASH,
            _with_optional(
                {"puzzle_hash": puzzle_hash, "include_spent_coins": include_spent_coins},
                start_height=start_height,
                end_height=end_height,
            ),
        )

    async def get_coin_records_by_puzzle_hashes(
        self,
        puzzle_hashes: Sequence[str],
        include_spent_coins: bool = False,
        start_height: int | None = None,
        end_height: int | None = None,
    ) -> list[JsonDict]:
        return await self.call(
            GET_COIN_RECORDS_BY_PUZZLE_HASHES,
            _with_optional(
                {"puzzle_hashes": list(puzzle_hashes), "include_spent_coins": include_spent_coins},
                start_height=start_height,
                end_height=end_height,
            ),
        )

    async def get_coin_records_by_parent_ids(
        self,
        parent_ids: Sequence[str],
        include_spent_coins: bool = False,
        start_height: int | None = None,
        end_height: int | None = None,
    ) -> list[JsonDict]:
        return await self.call(
            GET_COIN_RECORDS_BY_PARENT_IDS,
            _with_optional(
                {"parent_ids": list(parent_ids), "include_spent_coins": include_spent_coins},
                start_height=start_height,
                end_height=end_height,
            ),
        )

    async def get_coin_record_by_name(self, name: str) -> JsonDict | None:
        """Coin record for the coin id ``name``, or None if the node has none."""
        return await self.call(GET_COIN_RECORD_BY_NAME, {"name": name})

    async def get_puzzle_and_solution(self, coin_id: str, height: int) -> JsonDict:
        return await self.call(GET_PUZZLE_AND_SOLUTION, {"coin_id": coin_id, "height": height})

    async def get_coin_spend(self, coin_record: JsonDict) -> JsonDict:
        """Puzzle and solution that spent the coin in ``coin_record``.

        Raises:
            InvalidArgumentError: The record lacks a valid ``coin`` or an
                integer ``spent_block_index``. No request is sent.
        """
        try:
            coin_id = Coin.from_dict(coin_record["coin"]).name()
            height = coin_record["spent_block_index"]
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgumentError(f"get_coin_spend: malformed coin record: {e!r}") from e
        if not isinstance(height, int) or isinstance(height, bool):
            raise InvalidArgumentError(
                f"get_coin_spend: spent_block_index must be an integer, got {height!r}"
            )
        return await self.get_puzzle_and_solution(coin_id, height)

    # -----------------------------------------------------------------
    # Transactions and mempool
    # -----------------------------------------------------------------

    async def push_tx(self, spend_bundle: JsonDict) -> TxStatus:
        """Submit a signed spend bundle.

        No deduplication is done; submitting the same bundle twice sends
        it twice.
        """
        status = await self.call(PUSH_TX, {"spend_bundle": spend_bundle})
        log.debug("push_tx: %s", status)
        return status

    async def get_all_mempool_tx_ids(self) -> list[str]:
        return await self.call(GET_ALL_MEMPOOL_TX_IDS)

    async def get_all_mempool_items(self) -> dict[str, JsonDict]:
        return await self.call(GET_ALL_MEMPOOL_ITEMS)

    async def get_mempool_item_by_tx_id(self, tx_id: str) -> JsonDict:
        return await self.call(GET_MEMPOOL_ITEM_BY_TX_ID, {"tx_id": tx_id})


def create_fullnode_client(**config: Any) -> FullNodeClient:
    """Create a FullNodeClient from keyword configuration.

    Keys follow ``chia_rpc.config.CONFIG_SCHEMA``; ``port`` defaults to
    8555.

    Raises:
        ConfigError: Invalid configuration.
    """
    return FullNodeClient.from_config(ClientConfig.from_dict(config))
