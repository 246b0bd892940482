"""
Payload types the clients assemble or inspect themselves.

Blocks, block records, coin records, spend bundles, mempool items and
transaction records are passed through as plain JSON objects; their
schemas belong to the services. The types here cover the few shapes the
clients build from envelope fields, send as parameters, or need to read
(e.g. computing a coin id).

Hash-like values (bytes32) travel as ``0x``-prefixed hex strings and are
kept in that form.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TxStatus(StrEnum):
    """Mempool inclusion status returned by ``push_tx``."""

    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    FAILED = "FAILED"


def hexstr_to_bytes(value: str) -> bytes:
    """Decode a hex string, with or without the ``0x`` prefix."""
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def int_to_bytes(value: int) -> bytes:
    """Minimal big-endian two's-complement encoding; zero is empty."""
    if value == 0:
        return b""
    encoded = value.to_bytes((value.bit_length() + 8) >> 3, "big", signed=True)
    while len(encoded) > 1 and encoded[0] == (0xFF if encoded[1] & 0x80 else 0):
        encoded = encoded[1:]
    return encoded


@dataclass(frozen=True)
class Coin:
    parent_coin_info: str
    puzzle_hash: str
    amount: int

    def name(self) -> str:
        """Coin id: sha256(parent_coin_info + puzzle_hash + amount)."""
        digest = hashlib.sha256(
            hexstr_to_bytes(self.parent_coin_info)
            + hexstr_to_bytes(self.puzzle_hash)
            + int_to_bytes(self.amount)
        )
        return f"0x{digest.hexdigest()}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "parent_coin_info": self.parent_coin_info,
            "puzzle_hash": self.puzzle_hash,
            "amount": self.amount,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Coin:
        return cls(
            parent_coin_info=data["parent_coin_info"],
            puzzle_hash=data["puzzle_hash"],
            amount=int(data["amount"]),
        )


@dataclass(frozen=True)
class PendingPayment:
    """One output of a multi-output wallet send."""

    puzzle_hash: str
    amount: int

    def to_dict(self) -> dict[str, Any]:
        return {"puzzle_hash": self.puzzle_hash, "amount": self.amount}


@dataclass(frozen=True)
class NetworkInfo:
    network_name: str
    network_prefix: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> NetworkInfo:
        return cls(network_name=data["network_name"], network_prefix=data["network_prefix"])


@dataclass(frozen=True)
class WalletSync:
    genesis_initialized: bool
    synced: bool
    syncing: bool

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WalletSync:
        return cls(
            genesis_initialized=data["genesis_initialized"],
            synced=data["synced"],
            syncing=data["syncing"],
        )


@dataclass(frozen=True)
class SignagePointOrEOS:
    """A recent signage point or end-of-subslot bundle.

    Exactly one of ``signage_point`` and ``eos`` is set, depending on
    which identifier was queried.

    Attributes:
        signage_point: Signage point object, or None.
        eos: End-of-subslot bundle, or None.
        time_received: Unix time the node received it.
        reverted: Whether it was reverted by a reorg.
    """

    signage_point: dict[str, Any] | None
    eos: dict[str, Any] | None
    time_received: float
    reverted: bool

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignagePointOrEOS:
        return cls(
            signage_point=data.get("signage_point"),
            eos=data.get("eos"),
            time_received=float(data["time_received"]),
            reverted=data["reverted"],
        )
