# data_locker.py
"""
Module: DataLocker
Description:
    Composes the DL*Manager modules over one SQLite file and owns the mirror
    schema. Tables are keyed by the natural identifiers of the on-chain
    accounts so every write can be an idempotent upsert.

Dependencies:
    - DatabaseManager (SQLite wrapper)
    - DLMachineManager, DLOrderManager, DLRewardManager
"""

from distri_mirror.core.logging import log
from distri_mirror.data.database import DatabaseManager
from distri_mirror.data.dl_machines import DLMachineManager
from distri_mirror.data.dl_orders import DLOrderManager
from distri_mirror.data.dl_rewards import DLRewardManager

TABLE_DEFS = {
    "machines": """
        CREATE TABLE IF NOT EXISTS machines (
            owner TEXT NOT NULL,
            uuid TEXT NOT NULL,
            address TEXT DEFAULT '',
            metadata TEXT DEFAULT '',
            status INTEGER DEFAULT 0,
            price TEXT DEFAULT '0',
            max_duration INTEGER DEFAULT 0,
            disk INTEGER DEFAULT 0,
            completed_count INTEGER DEFAULT 0,
            failed_count INTEGER DEFAULT 0,
            score INTEGER DEFAULT 0,
            claimed_periods INTEGER DEFAULT 0,
            order_pda TEXT DEFAULT '',
            PRIMARY KEY (owner, uuid)
        )
    """,
    "orders": """
        CREATE TABLE IF NOT EXISTS orders (
            order_id TEXT PRIMARY KEY,
            buyer TEXT NOT NULL,
            seller TEXT NOT NULL,
            machine_id TEXT NOT NULL,
            address TEXT DEFAULT '',
            price TEXT DEFAULT '0',
            duration INTEGER DEFAULT 0,
            total TEXT DEFAULT '0',
            metadata TEXT DEFAULT '',
            status INTEGER DEFAULT 0,
            order_time INTEGER DEFAULT 0,
            start_time INTEGER DEFAULT 0,
            refund_time INTEGER DEFAULT 0
        )
    """,
    "rewards": """
        CREATE TABLE IF NOT EXISTS rewards (
            period INTEGER PRIMARY KEY,
            address TEXT DEFAULT '',
            start_time INTEGER DEFAULT 0,
            pool TEXT DEFAULT '0',
            machine_num INTEGER DEFAULT 0,
            task_num INTEGER DEFAULT 0
        )
    """,
    "reward_machines": """
        CREATE TABLE IF NOT EXISTS reward_machines (
            period INTEGER NOT NULL,
            owner TEXT NOT NULL,
            machine_id TEXT NOT NULL,
            address TEXT DEFAULT '',
            task_num INTEGER DEFAULT 0,
            claimed BOOLEAN DEFAULT 0,
            PRIMARY KEY (period, owner, machine_id)
        )
    """,
}

INDEX_DEFS = (
    "CREATE INDEX IF NOT EXISTS idx_orders_buyer ON orders(buyer)",
    "CREATE INDEX IF NOT EXISTS idx_orders_seller ON orders(seller)",
    "CREATE INDEX IF NOT EXISTS idx_reward_machines_owner ON reward_machines(owner)",
)


class DataLocker:
    """Access point for all mirror managers over one SQLite file."""

    def __init__(self, db_path: str):
        self.db = DatabaseManager(db_path)
        self.machines = DLMachineManager(self.db)
        self.orders = DLOrderManager(self.db)
        self.rewards = DLRewardManager(self.db)
        self.initialize_database()

    def initialize_database(self):
        """
        Creates all mirror tables if they do not exist.
        This method can be run safely and repeatedly.
        """
        cursor = self.db.get_cursor()
        if cursor is None:
            log.error("❌ Unable to obtain DB cursor during init", source="DataLocker")
            return
        with self.db._lock:
            for name, ddl in TABLE_DEFS.items():
                cursor.execute(ddl)
                log.debug(f"Table ready: {name}", source="DataLocker")
            for ddl in INDEX_DEFS:
                cursor.execute(ddl)
            self.db.commit()
        log.info("🔧 Mirror schema ready", source="DataLocker")

    def counts(self) -> dict:
        out = {}
        cursor = self.db.get_cursor()
        if cursor is None:
            return out
        for name in TABLE_DEFS:
            cursor.execute(f"SELECT COUNT(*) FROM {name}")
            out[name] = cursor.fetchone()[0]
        return out

    def close(self):
        self.db.close()
