# distri_mirror/services/mirror_service.py
"""
Applies dispatched events to the mirror.

Events only name the accounts they touched; the current account state is
re-read from chain by PDA and written with an upsert, so replays and
out-of-order delivery converge on whatever the chain holds now.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence, TypeVar

from solders.pubkey import Pubkey

from distri_mirror.chain import pdas
from distri_mirror.chain.accounts import (
    decode_machine,
    decode_order,
    decode_reward,
    decode_reward_machine,
)
from distri_mirror.core.logging import log
from distri_mirror.data.data_locker import DataLocker
from distri_mirror.models.mirror import Machine, Order, Reward, RewardMachine

SOURCE = "MirrorService"

T = TypeVar("T")


class AccountReader(Protocol):
    program_id: Pubkey

    def get_account_data(self, address: Pubkey) -> Optional[bytes]: ...


class MirrorService:
    def __init__(self, locker: DataLocker, chain: AccountReader) -> None:
        self.locker = locker
        self.chain = chain

    def _load(self, address: Pubkey, decode: Callable[[bytes, str], T], what: str) -> Optional[T]:
        data = self.chain.get_account_data(address)
        if data is None:
            log.warning(f"{what} account {address} not found on chain", source=SOURCE)
            return None
        return decode(data, str(address))

    # ------------------------------------------------------------------
    # Machines
    # ------------------------------------------------------------------
    def _load_machine(self, owner: str, uuid: str) -> Optional[Machine]:
        return self._load(pdas.machine_pda(self.chain.program_id, owner, uuid), decode_machine, "Machine")

    def add_machine(self, owner: str, uuid: str) -> None:
        machine = self._load_machine(owner, uuid)
        if machine is not None:
            self.locker.machines.upsert_machine(machine)

    def remove_machine(self, owner: str, uuid: str) -> None:
        self.locker.machines.delete_machine(owner, uuid)

    def refresh_machine(self, owner: str, uuid: str) -> None:
        machine = self._load_machine(owner, uuid)
        if machine is not None and not self.locker.machines.update_machine(machine):
            log.debug(f"Machine {owner}/{uuid} not mirrored; refresh ignored", source=SOURCE)

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------
    def _load_order(self, order_id: str, buyer: str) -> Optional[Order]:
        return self._load(pdas.order_pda(self.chain.program_id, buyer, order_id), decode_order, "Order")

    def add_order(self, order_id: str, buyer: str) -> None:
        order = self._load_order(order_id, buyer)
        if order is not None:
            self.locker.orders.upsert_order(order)

    def refresh_order(self, order_id: str, buyer: str) -> None:
        order = self._load_order(order_id, buyer)
        if order is not None and not self.locker.orders.update_order(order):
            log.debug(f"Order {order_id} not mirrored; refresh ignored", source=SOURCE)

    def remove_order(self, order_id: str) -> None:
        self.locker.orders.delete_order(order_id)

    # ------------------------------------------------------------------
    # Rewards
    # ------------------------------------------------------------------
    def add_reward(self, period: int) -> None:
        reward = self._load(pdas.reward_pda(self.chain.program_id, period), decode_reward, "Reward")
        if reward is not None:
            self.locker.rewards.upsert_reward(reward)

    def add_reward_machine(self, period: int, owner: str, machine_id: str) -> None:
        address = pdas.reward_machine_pda(self.chain.program_id, period, owner, machine_id)
        rm = self._load(address, decode_reward_machine, "RewardMachine")
        if rm is not None:
            self.locker.rewards.upsert_reward_machine(rm)

    # ------------------------------------------------------------------
    # Bootstrap reconciliation
    # ------------------------------------------------------------------
    def reconcile_machines(self, machines: Sequence[Machine]) -> int:
        written = sum(1 for m in machines if self.locker.machines.upsert_machine(m))
        pruned = self.locker.machines.prune_machines((m.owner, m.uuid) for m in machines)
        if pruned:
            log.info(f"Pruned {pruned} machines missing on chain", source=SOURCE)
        return written

    def reconcile_orders(self, orders: Sequence[Order]) -> int:
        written = sum(1 for o in orders if self.locker.orders.upsert_order(o))
        pruned = self.locker.orders.prune_orders(o.order_id for o in orders)
        if pruned:
            log.info(f"Pruned {pruned} orders missing on chain", source=SOURCE)
        return written

    def reconcile_rewards(self, rewards: Sequence[Reward]) -> int:
        written = sum(1 for r in rewards if self.locker.rewards.upsert_reward(r))
        pruned = self.locker.rewards.prune_rewards(r.period for r in rewards)
        if pruned:
            log.info(f"Pruned {pruned} rewards missing on chain", source=SOURCE)
        return written

    def reconcile_reward_machines(self, reward_machines: Sequence[RewardMachine]) -> int:
        written = sum(1 for rm in reward_machines if self.locker.rewards.upsert_reward_machine(rm))
        pruned = self.locker.rewards.prune_reward_machines(
            (rm.period, rm.owner, rm.machine_id) for rm in reward_machines
        )
        if pruned:
            log.info(f"Pruned {pruned} reward machines missing on chain", source=SOURCE)
        return written


__all__ = ["MirrorService"]
