# dl_rewards.py
"""
Module: DLRewardManager
Description:
    Mirror rows for Reward (per period) and RewardMachine (per period, owner,
    machine) accounts.
"""

from typing import Iterable, List, Optional, Tuple

from distri_mirror.core.logging import log
from distri_mirror.data.database import build_upsert, row_params
from distri_mirror.models.mirror import Reward, RewardMachine

REWARD_UPSERT_SQL = build_upsert("rewards", list(Reward.model_fields), ["period"])
REWARD_MACHINE_KEYS = ["period", "owner", "machine_id"]
REWARD_MACHINE_UPSERT_SQL = build_upsert("reward_machines", list(RewardMachine.model_fields), REWARD_MACHINE_KEYS)


class DLRewardManager:
    def __init__(self, db):
        self.db = db
        log.debug("DLRewardManager initialized.", source="DLRewardManager")

    def _write(self, sql: str, params, what: str) -> bool:
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error(f"DB unavailable for {what}", source="DLRewardManager")
                    return False
                cursor.execute(sql, params)
                self.db.commit()
                return cursor.rowcount > 0
        except Exception as e:
            log.error(f"Failed {what}: {e}", source="DLRewardManager")
            return False

    def _select(self, sql: str, params=()) -> list:
        try:
            cursor = self.db.get_cursor()
            if cursor is None:
                log.error("DB unavailable while reading rewards", source="DLRewardManager")
                return []
            cursor.execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]
        except Exception as e:
            log.error(f"Failed to read rewards: {e}", source="DLRewardManager")
            return []

    # ---------- rewards ----------
    def upsert_reward(self, reward: Reward) -> bool:
        return self._write(REWARD_UPSERT_SQL, row_params(reward, ("pool",)), f"reward upsert {reward.period}")

    def delete_reward(self, period: int) -> bool:
        return self._write("DELETE FROM rewards WHERE period = ?", (period,), f"reward delete {period}")

    def get_reward(self, period: int) -> Optional[Reward]:
        rows = self._select("SELECT * FROM rewards WHERE period = ?", (period,))
        return Reward(**rows[0]) if rows else None

    def list_rewards(self) -> List[Reward]:
        return [Reward(**row) for row in self._select("SELECT * FROM rewards ORDER BY period")]

    def prune_rewards(self, keep: Iterable[int]) -> int:
        keep = set(keep)
        stale = [r.period for r in self.list_rewards() if r.period not in keep]
        for period in stale:
            self.delete_reward(period)
        return len(stale)

    # ---------- reward machines ----------
    def upsert_reward_machine(self, rm: RewardMachine) -> bool:
        return self._write(
            REWARD_MACHINE_UPSERT_SQL,
            rm.model_dump(mode="json"),
            f"reward machine upsert {rm.period}/{rm.owner}/{rm.machine_id}",
        )

    def delete_reward_machine(self, period: int, owner: str, machine_id: str) -> bool:
        return self._write(
            "DELETE FROM reward_machines WHERE period = ? AND owner = ? AND machine_id = ?",
            (period, owner, machine_id),
            f"reward machine delete {period}/{owner}/{machine_id}",
        )

    def get_reward_machine(self, period: int, owner: str, machine_id: str) -> Optional[RewardMachine]:
        rows = self._select(
            "SELECT * FROM reward_machines WHERE period = ? AND owner = ? AND machine_id = ?",
            (period, owner, machine_id),
        )
        return RewardMachine(**rows[0]) if rows else None

    def list_reward_machines(self, period: Optional[int] = None) -> List[RewardMachine]:
        if period is None:
            rows = self._select("SELECT * FROM reward_machines ORDER BY period, owner, machine_id")
        else:
            rows = self._select(
                "SELECT * FROM reward_machines WHERE period = ? ORDER BY owner, machine_id", (period,)
            )
        return [RewardMachine(**row) for row in rows]

    def prune_reward_machines(self, keep: Iterable[Tuple[int, str, str]]) -> int:
        keep = set(keep)
        stale = [
            (rm.period, rm.owner, rm.machine_id)
            for rm in self.list_reward_machines()
            if (rm.period, rm.owner, rm.machine_id) not in keep
        ]
        for key in stale:
            self.delete_reward_machine(*key)
        return len(stale)
