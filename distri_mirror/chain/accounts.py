"""Program account decoding for the bootstrap snapshot and per-event refreshes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Type

from borsh_construct import CStruct
from construct import ConstructError
from pydantic import BaseModel, ValidationError

from distri_mirror.chain.constants import DISCRIMINATOR_SIZE
from distri_mirror.chain.layouts import (
    MACHINE_ACCOUNT,
    ORDER_ACCOUNT,
    REWARD_ACCOUNT,
    REWARD_MACHINE_ACCOUNT,
    account_discriminator,
    layout_fields,
)
from distri_mirror.core.errors import DecodeError
from distri_mirror.core.logging import log
from distri_mirror.models.mirror import Machine, Order, Reward, RewardMachine

MACHINE = "Machine"
ORDER = "Order"
REWARD = "Reward"
REWARD_MACHINE = "RewardMachine"

ACCOUNT_TYPES: Dict[str, Tuple[CStruct, Type[BaseModel]]] = {
    MACHINE: (MACHINE_ACCOUNT, Machine),
    ORDER: (ORDER_ACCOUNT, Order),
    REWARD: (REWARD_ACCOUNT, Reward),
    REWARD_MACHINE: (REWARD_MACHINE_ACCOUNT, RewardMachine),
}

_BY_DISC: Dict[bytes, str] = {account_discriminator(name): name for name in ACCOUNT_TYPES}


@dataclass(frozen=True)
class ProgramAccount:
    address: str
    data: bytes


def account_kind(data: bytes) -> Optional[str]:
    return _BY_DISC.get(bytes(data[:DISCRIMINATOR_SIZE]))


def decode_account(kind: str, data: bytes, address: str = "") -> BaseModel:
    layout, model = ACCOUNT_TYPES[kind]
    if account_kind(data) != kind:
        raise DecodeError(f"account {address or '<unknown>'} is not a {kind}")
    try:
        parsed = layout.parse(bytes(data[DISCRIMINATOR_SIZE:]))
        return model(address=address, **{name: getattr(parsed, name) for name in layout_fields(layout)})
    except (ConstructError, ValidationError, ValueError) as exc:
        raise DecodeError(f"cannot decode {kind} account {address}: {exc}") from exc


def encode_account(record: BaseModel) -> bytes:
    """Inverse of :func:`decode_account`; the address is not part of the data."""
    for kind, (layout, model) in ACCOUNT_TYPES.items():
        if isinstance(record, model):
            values = {name: getattr(record, name) for name in layout_fields(layout)}
            return account_discriminator(kind) + layout.build(values)
    raise TypeError(f"not an account model: {type(record)!r}")


def decode_machine(data: bytes, address: str = "") -> Machine:
    return decode_account(MACHINE, data, address)  # type: ignore[return-value]


def decode_order(data: bytes, address: str = "") -> Order:
    return decode_account(ORDER, data, address)  # type: ignore[return-value]


def decode_reward(data: bytes, address: str = "") -> Reward:
    return decode_account(REWARD, data, address)  # type: ignore[return-value]


def decode_reward_machine(data: bytes, address: str = "") -> RewardMachine:
    return decode_account(REWARD_MACHINE, data, address)  # type: ignore[return-value]


def split_accounts(snapshot: Iterable[ProgramAccount]) -> Dict[str, List[BaseModel]]:
    """Group a ``getProgramAccounts`` snapshot by account type.

    Accounts with an unknown discriminator (config accounts, vaults) are
    ignored; known accounts that fail to decode are logged and dropped.
    """
    out: Dict[str, List[BaseModel]] = {kind: [] for kind in ACCOUNT_TYPES}
    for acc in snapshot:
        kind = account_kind(acc.data)
        if kind is None:
            continue
        try:
            out[kind].append(decode_account(kind, acc.data, acc.address))
        except DecodeError as e:
            log.warning(f"Skipping account: {e}", source="Accounts")
    return out


__all__ = [
    "MACHINE",
    "ORDER",
    "REWARD",
    "REWARD_MACHINE",
    "ProgramAccount",
    "account_kind",
    "decode_account",
    "encode_account",
    "decode_machine",
    "decode_order",
    "decode_reward",
    "decode_reward_machine",
    "split_accounts",
]
