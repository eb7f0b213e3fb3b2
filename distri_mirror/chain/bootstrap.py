from __future__ import annotations

from typing import Callable, List, Protocol, Sequence, Tuple

from pydantic import BaseModel
from solana.rpc.commitment import Finalized

from distri_mirror.chain.accounts import (
    MACHINE,
    ORDER,
    REWARD,
    REWARD_MACHINE,
    ProgramAccount,
    split_accounts,
)
from distri_mirror.core.errors import TransportError
from distri_mirror.core.logging import log

SOURCE = "Bootstrap"


class Reconciler(Protocol):
    def reconcile_machines(self, machines: Sequence[BaseModel]) -> int: ...

    def reconcile_orders(self, orders: Sequence[BaseModel]) -> int: ...

    def reconcile_rewards(self, rewards: Sequence[BaseModel]) -> int: ...

    def reconcile_reward_machines(self, reward_machines: Sequence[BaseModel]) -> int: ...


class AccountFetcher(Protocol):
    def fetch_all_program_accounts(self, commitment=None) -> List[ProgramAccount]: ...


class BootstrapScanner:
    """One-shot full snapshot of the program's accounts, run before live events."""

    def __init__(self, chain: AccountFetcher, mirror: Reconciler) -> None:
        self.chain = chain
        self.mirror = mirror

    def _passes(self) -> Tuple[Tuple[str, str, Callable[[Sequence[BaseModel]], int]], ...]:
        return (
            ("machines", MACHINE, self.mirror.reconcile_machines),
            ("orders", ORDER, self.mirror.reconcile_orders),
            ("rewards", REWARD, self.mirror.reconcile_rewards),
            ("reward machines", REWARD_MACHINE, self.mirror.reconcile_reward_machines),
        )

    def bootstrap(self) -> bool:
        """
        Fetch every program account at ``finalized`` and reconcile the mirror.

        Returns ``False`` if the fetch or any pass failed. A failed fetch
        leaves the mirror untouched and is not retried.
        """
        log.banner("Bootstrapping mirror", source=SOURCE)
        log.start_timer("bootstrap")
        try:
            snapshot = self.chain.fetch_all_program_accounts(Finalized)
        except TransportError as e:
            log.error(f"GetProgramAccounts error: {e}", source=SOURCE)
            return False

        groups = split_accounts(snapshot)
        ok = True
        for label, kind, reconcile in self._passes():
            try:
                written = reconcile(groups[kind])
            except Exception as e:
                ok = False
                log.error(f"Reconciling {label} failed: {e!r}", source=SOURCE)
                continue
            log.success(f"Reconciled {written} {label}", source=SOURCE)
        log.end_timer("bootstrap", source=SOURCE)
        return ok


__all__ = ["BootstrapScanner"]
