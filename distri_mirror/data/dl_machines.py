# dl_machines.py
"""
Module: DLMachineManager
Description:
    Mirror rows for Machine accounts, keyed by (owner, uuid).
"""

from typing import Iterable, List, Optional, Tuple

from distri_mirror.core.logging import log
from distri_mirror.data.database import build_update, build_upsert, row_params
from distri_mirror.models.mirror import Machine

COLUMNS = list(Machine.model_fields)
KEYS = ["owner", "uuid"]
U64_COLUMNS = ("price",)
UPSERT_SQL = build_upsert("machines", COLUMNS, KEYS)
UPDATE_SQL = build_update("machines", COLUMNS, KEYS)


class DLMachineManager:
    def __init__(self, db):
        self.db = db
        log.debug("DLMachineManager initialized.", source="DLMachineManager")

    def upsert_machine(self, machine: Machine) -> bool:
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error("DB unavailable for machine upsert", source="DLMachineManager")
                    return False
                cursor.execute(UPSERT_SQL, row_params(machine, U64_COLUMNS))
                self.db.commit()
            log.debug(f"Machine upserted: {machine.owner}/{machine.uuid}", source="DLMachineManager")
            return True
        except Exception as e:
            log.error(f"Failed to upsert machine {machine.owner}/{machine.uuid}: {e}", source="DLMachineManager")
            return False

    def update_machine(self, machine: Machine) -> bool:
        """Overwrite an existing row; returns ``False`` when there is none."""
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error("DB unavailable while updating machine", source="DLMachineManager")
                    return False
                cursor.execute(UPDATE_SQL, row_params(machine, U64_COLUMNS))
                self.db.commit()
                return cursor.rowcount > 0
        except Exception as e:
            log.error(f"Failed to update machine {machine.owner}/{machine.uuid}: {e}", source="DLMachineManager")
            return False

    def delete_machine(self, owner: str, uuid: str) -> bool:
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error("DB unavailable, cannot delete machine", source="DLMachineManager")
                    return False
                cursor.execute("DELETE FROM machines WHERE owner = ? AND uuid = ?", (owner, uuid))
                self.db.commit()
                deleted = cursor.rowcount > 0
            if deleted:
                log.info(f"Machine deleted: {owner}/{uuid}", source="DLMachineManager")
            return deleted
        except Exception as e:
            log.error(f"Failed to delete machine {owner}/{uuid}: {e}", source="DLMachineManager")
            return False

    def get_machine(self, owner: str, uuid: str) -> Optional[Machine]:
        try:
            cursor = self.db.get_cursor()
            if cursor is None:
                log.error("DB unavailable while fetching machine", source="DLMachineManager")
                return None
            cursor.execute("SELECT * FROM machines WHERE owner = ? AND uuid = ?", (owner, uuid))
            row = cursor.fetchone()
            return Machine(**dict(row)) if row else None
        except Exception as e:
            log.error(f"Failed to fetch machine {owner}/{uuid}: {e}", source="DLMachineManager")
            return None

    def list_machines(self) -> List[Machine]:
        try:
            cursor = self.db.get_cursor()
            if cursor is None:
                log.error("DB unavailable while listing machines", source="DLMachineManager")
                return []
            cursor.execute("SELECT * FROM machines ORDER BY owner, uuid")
            return [Machine(**dict(row)) for row in cursor.fetchall()]
        except Exception as e:
            log.error(f"Failed to list machines: {e}", source="DLMachineManager")
            return []

    def prune_machines(self, keep: Iterable[Tuple[str, str]]) -> int:
        """Delete every machine whose (owner, uuid) is not in ``keep``."""
        keep = set(keep)
        stale = [(m.owner, m.uuid) for m in self.list_machines() if (m.owner, m.uuid) not in keep]
        for owner, uuid in stale:
            self.delete_machine(owner, uuid)
        return len(stale)
