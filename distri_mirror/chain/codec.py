"""Decode ``Program data:`` payloads into typed events.

Every payload is base64 of ``discriminator(8) || borsh(body)``. The
discriminator is skipped, not checked: the instruction name picked by the
classifier already decides which layout applies.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import asdict, fields
from typing import Dict, Type, TypeVar

from borsh_construct import CStruct
from construct import ConstructError

from distri_mirror.chain.constants import DISCRIMINATOR_SIZE
from distri_mirror.chain.layouts import (
    MACHINE_EVENT,
    ORDER_EVENT,
    REWARD_EVENT,
    TASK_EVENT,
    event_discriminator,
)
from distri_mirror.core.errors import DecodeError, MalformedPayload, PayloadTooShort
from distri_mirror.models.events import Event, MachineEvent, OrderEvent, RewardEvent, TaskEvent

E = TypeVar("E", MachineEvent, TaskEvent, RewardEvent, OrderEvent)

EVENT_LAYOUTS: Dict[type, CStruct] = {
    MachineEvent: MACHINE_EVENT,
    OrderEvent: ORDER_EVENT,
    TaskEvent: TASK_EVENT,
    RewardEvent: REWARD_EVENT,
}


def _layout_for(kind: type) -> CStruct:
    try:
        return EVENT_LAYOUTS[kind]
    except KeyError:
        raise TypeError(f"not an event kind: {kind!r}") from None


def decode_payload(payload: str) -> bytes:
    """base64 -> raw bytes, at least one discriminator long."""
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise MalformedPayload(f"payload is not valid base64: {exc}") from exc
    if len(raw) < DISCRIMINATOR_SIZE:
        raise PayloadTooShort(f"payload has {len(raw)} bytes, need at least {DISCRIMINATOR_SIZE}")
    return raw


def decode_event(kind: Type[E], payload: str) -> E:
    layout = _layout_for(kind)
    raw = decode_payload(payload)
    try:
        parsed = layout.parse(raw[DISCRIMINATOR_SIZE:])
    except (ConstructError, ValueError) as exc:
        raise DecodeError(f"cannot decode {kind.__name__}: {exc}") from exc
    return kind(**{f.name: getattr(parsed, f.name) for f in fields(kind)})


def encode_event(event: Event) -> str:
    layout = _layout_for(type(event))
    body = layout.build(asdict(event))
    return base64.b64encode(event_discriminator(type(event).__name__) + body).decode("ascii")


__all__ = ["decode_event", "decode_payload", "encode_event", "EVENT_LAYOUTS"]
