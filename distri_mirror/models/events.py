"""Typed events emitted by the program through ``Program data:`` log lines.

Public keys are carried as base58 strings and the 16-byte machine/order
identifiers as lowercase hex, the same representation the mirror tables use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class MachineEvent:
    owner: str
    uuid: str


@dataclass(frozen=True)
class TaskEvent:
    period: int
    owner: str
    machine_id: str


@dataclass(frozen=True)
class RewardEvent:
    period: int
    owner: str
    machine_id: str


@dataclass(frozen=True)
class OrderEvent:
    order_id: str
    buyer: str
    seller: str
    machine_id: str


Event = Union[MachineEvent, TaskEvent, RewardEvent, OrderEvent]

__all__ = ["MachineEvent", "TaskEvent", "RewardEvent", "OrderEvent", "Event"]
