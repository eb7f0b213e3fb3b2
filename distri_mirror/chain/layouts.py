"""Borsh layouts of the program's events and accounts."""

from __future__ import annotations

import hashlib

from borsh_construct import Bool, CStruct, I64, String, U8, U32, U64
from construct import Bytes, ExprAdapter
from solders.pubkey import Pubkey

from distri_mirror.chain.constants import DISCRIMINATOR_SIZE

# Field adapters: public keys <-> base58, 16-byte ids <-> hex
PUBKEY = ExprAdapter(
    Bytes(32),
    lambda obj, _ctx: str(Pubkey.from_bytes(obj)),
    lambda obj, _ctx: bytes(Pubkey.from_string(obj)),
)
ID16 = ExprAdapter(
    Bytes(16),
    lambda obj, _ctx: obj.hex(),
    lambda obj, _ctx: bytes.fromhex(obj),
)


def _sighash(namespace: str, name: str) -> bytes:
    return hashlib.sha256(f"{namespace}:{name}".encode("utf-8")).digest()[:DISCRIMINATOR_SIZE]


def event_discriminator(name: str) -> bytes:
    return _sighash("event", name)


def account_discriminator(name: str) -> bytes:
    # Anchor discriminator = first 8 bytes of sha256(b"account:" + name)
    return _sighash("account", name)


def layout_fields(layout: CStruct) -> list[str]:
    return [sc.name for sc in layout.subcons]


# ---------- events ----------
MACHINE_EVENT = CStruct(
    "owner" / PUBKEY,
    "uuid" / ID16,
)

ORDER_EVENT = CStruct(
    "order_id" / ID16,
    "buyer" / PUBKEY,
    "seller" / PUBKEY,
    "machine_id" / ID16,
)

TASK_EVENT = CStruct(
    "period" / U32,
    "owner" / PUBKEY,
    "machine_id" / ID16,
)

REWARD_EVENT = CStruct(
    "period" / U32,
    "owner" / PUBKEY,
    "machine_id" / ID16,
)

# ---------- accounts ----------
MACHINE_ACCOUNT = CStruct(
    "owner" / PUBKEY,
    "uuid" / ID16,
    "metadata" / String,
    "status" / U8,
    "price" / U64,
    "max_duration" / U32,
    "disk" / U32,
    "completed_count" / U32,
    "failed_count" / U32,
    "score" / U8,
    "claimed_periods" / U32,
    "order_pda" / PUBKEY,
)

ORDER_ACCOUNT = CStruct(
    "order_id" / ID16,
    "buyer" / PUBKEY,
    "seller" / PUBKEY,
    "machine_id" / ID16,
    "price" / U64,
    "duration" / U32,
    "total" / U64,
    "metadata" / String,
    "status" / U8,
    "order_time" / I64,
    "start_time" / I64,
    "refund_time" / I64,
)

REWARD_ACCOUNT = CStruct(
    "period" / U32,
    "start_time" / I64,
    "pool" / U64,
    "machine_num" / U32,
    "task_num" / U32,
)

REWARD_MACHINE_ACCOUNT = CStruct(
    "period" / U32,
    "owner" / PUBKEY,
    "machine_id" / ID16,
    "task_num" / U32,
    "claimed" / Bool,
)
