"""Route (instruction, payload) pairs to mirror-store mutations."""

from __future__ import annotations

from typing import Callable, Dict, Protocol, Tuple, Type

from distri_mirror.chain import constants as ix
from distri_mirror.chain.codec import decode_event
from distri_mirror.core.errors import UnknownInstruction
from distri_mirror.models.events import Event, MachineEvent, OrderEvent, RewardEvent, TaskEvent


class MirrorStore(Protocol):
    """Idempotent mutations keyed by the entities' natural identifiers."""

    def add_machine(self, owner: str, uuid: str) -> None: ...

    def remove_machine(self, owner: str, uuid: str) -> None: ...

    def refresh_machine(self, owner: str, uuid: str) -> None: ...

    def add_order(self, order_id: str, buyer: str) -> None: ...

    def refresh_order(self, order_id: str, buyer: str) -> None: ...

    def remove_order(self, order_id: str) -> None: ...

    def add_reward(self, period: int) -> None: ...

    def add_reward_machine(self, period: int, owner: str, machine_id: str) -> None: ...


Handler = Callable[[MirrorStore, Event], None]


def _add_machine(store: MirrorStore, e: MachineEvent) -> None:
    store.add_machine(e.owner, e.uuid)


def _remove_machine(store: MirrorStore, e: MachineEvent) -> None:
    store.remove_machine(e.owner, e.uuid)


def _refresh_machine(store: MirrorStore, e: MachineEvent) -> None:
    store.refresh_machine(e.owner, e.uuid)


def _submit_task(store: MirrorStore, e: TaskEvent) -> None:
    store.add_reward(e.period)
    store.add_reward_machine(e.period, e.owner, e.machine_id)


def _claim(store: MirrorStore, e: RewardEvent) -> None:
    store.refresh_machine(e.owner, e.machine_id)
    store.add_reward_machine(e.period, e.owner, e.machine_id)


def _place_order(store: MirrorStore, e: OrderEvent) -> None:
    store.refresh_machine(e.seller, e.machine_id)
    store.add_order(e.order_id, e.buyer)


def _renew_order(store: MirrorStore, e: OrderEvent) -> None:
    store.refresh_order(e.order_id, e.buyer)


def _settle_order(store: MirrorStore, e: OrderEvent) -> None:
    store.refresh_machine(e.seller, e.machine_id)
    store.refresh_order(e.order_id, e.buyer)


def _remove_order(store: MirrorStore, e: OrderEvent) -> None:
    store.remove_order(e.order_id)


ROUTES: Dict[str, Tuple[Type, Handler]] = {
    ix.ADD_MACHINE: (MachineEvent, _add_machine),
    ix.REMOVE_MACHINE: (MachineEvent, _remove_machine),
    ix.MAKE_OFFER: (MachineEvent, _refresh_machine),
    ix.CANCEL_OFFER: (MachineEvent, _refresh_machine),
    ix.SUBMIT_TASK: (TaskEvent, _submit_task),
    ix.CLAIM: (RewardEvent, _claim),
    ix.PLACE_ORDER: (OrderEvent, _place_order),
    ix.RENEW_ORDER: (OrderEvent, _renew_order),
    ix.REFUND_ORDER: (OrderEvent, _settle_order),
    ix.ORDER_COMPLETED: (OrderEvent, _settle_order),
    ix.ORDER_FAILED: (OrderEvent, _settle_order),
    ix.REMOVE_ORDER: (OrderEvent, _remove_order),
}

if set(ROUTES) != ix.KNOWN_INSTRUCTIONS:  # pragma: no cover - import-time guard
    raise RuntimeError("dispatcher routes out of sync with KNOWN_INSTRUCTIONS")


class EventDispatcher:
    def __init__(self, store: MirrorStore) -> None:
        self.store = store

    def dispatch(self, instruction: str, payload: str) -> Event:
        """
        Decode ``payload`` for ``instruction`` and apply its mutations in order.

        Raises ``DecodeError`` before any mutation if the payload is bad.
        """
        try:
            kind, handler = ROUTES[instruction]
        except KeyError:
            raise UnknownInstruction(instruction) from None
        event = decode_event(kind, payload)
        handler(self.store, event)
        return event


__all__ = ["EventDispatcher", "MirrorStore", "ROUTES"]
