# database.py
"""
Module: DatabaseManager
Description:
    Thin SQLite wrapper shared by every DL*Manager. One connection per
    locker, guarded by a re-entrant lock so the supervisor thread and the
    foreground can both reach the same file.
"""

import os
import sqlite3
import threading
from typing import List

from distri_mirror.core.logging import log


class DatabaseManager:
    def __init__(self, db_path: str):
        self.db_path = str(db_path)
        self.conn = None
        self._lock = threading.RLock()
        self.connect()

    def connect(self):
        if self.conn is not None:
            return self.conn
        folder = os.path.dirname(os.path.abspath(self.db_path))
        os.makedirs(folder, exist_ok=True)
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA journal_mode=WAL;")
            self.conn.execute("PRAGMA synchronous=NORMAL;")
            log.debug(f"Connected to {self.db_path}", source="DatabaseManager")
        except sqlite3.Error as e:
            log.error(f"❌ Cannot open database {self.db_path}: {e}", source="DatabaseManager")
            self.conn = None
        return self.conn

    def get_cursor(self):
        conn = self.connect()
        return conn.cursor() if conn else None

    def commit(self):
        if self.conn:
            self.conn.commit()

    def fetch_all(self, table: str) -> List[dict]:
        cursor = self.get_cursor()
        if cursor is None:
            return []
        cursor.execute(f"SELECT * FROM {table}")
        return [dict(row) for row in cursor.fetchall()]

    def close(self):
        if self.conn:
            self.conn.close()
            self.conn = None
            log.debug("Database connection closed.", source="DatabaseManager")


def build_upsert(table: str, columns: List[str], keys: List[str]) -> str:
    """INSERT ... ON CONFLICT(keys) DO UPDATE for named-parameter execution."""
    cols = ", ".join(columns)
    params = ", ".join(f":{c}" for c in columns)
    updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c not in keys)
    return (
        f"INSERT INTO {table} ({cols}) VALUES ({params}) "
        f"ON CONFLICT({', '.join(keys)}) DO UPDATE SET {updates}"
    )


def build_update(table: str, columns: List[str], keys: List[str]) -> str:
    sets = ", ".join(f"{c} = :{c}" for c in columns if c not in keys)
    where = " AND ".join(f"{k} = :{k}" for k in keys)
    return f"UPDATE {table} SET {sets} WHERE {where}"


def row_params(model, text_columns=()) -> dict:
    """Named parameters for ``model``; u64 amounts go in as TEXT, past SQLite's signed INTEGER range."""
    params = model.model_dump(mode="json")
    for column in text_columns:
        params[column] = str(params[column])
    return params
