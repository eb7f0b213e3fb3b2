# dl_orders.py
"""
Module: DLOrderManager
Description:
    Mirror rows for Order accounts, keyed by order_id.
"""

from typing import Iterable, List, Optional

from distri_mirror.core.logging import log
from distri_mirror.data.database import build_update, build_upsert, row_params
from distri_mirror.models.mirror import Order

COLUMNS = list(Order.model_fields)
KEYS = ["order_id"]
U64_COLUMNS = ("price", "total")
UPSERT_SQL = build_upsert("orders", COLUMNS, KEYS)
UPDATE_SQL = build_update("orders", COLUMNS, KEYS)


class DLOrderManager:
    def __init__(self, db):
        self.db = db
        log.debug("DLOrderManager initialized.", source="DLOrderManager")

    def upsert_order(self, order: Order) -> bool:
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error("DB unavailable for order upsert", source="DLOrderManager")
                    return False
                cursor.execute(UPSERT_SQL, row_params(order, U64_COLUMNS))
                self.db.commit()
            log.debug(f"Order upserted: {order.order_id}", source="DLOrderManager")
            return True
        except Exception as e:
            log.error(f"Failed to upsert order {order.order_id}: {e}", source="DLOrderManager")
            return False

    def update_order(self, order: Order) -> bool:
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error("DB unavailable while updating order", source="DLOrderManager")
                    return False
                cursor.execute(UPDATE_SQL, row_params(order, U64_COLUMNS))
                self.db.commit()
                return cursor.rowcount > 0
        except Exception as e:
            log.error(f"Failed to update order {order.order_id}: {e}", source="DLOrderManager")
            return False

    def delete_order(self, order_id: str) -> bool:
        try:
            with self.db._lock:
                cursor = self.db.get_cursor()
                if cursor is None:
                    log.error("DB unavailable, cannot delete order", source="DLOrderManager")
                    return False
                cursor.execute("DELETE FROM orders WHERE order_id = ?", (order_id,))
                self.db.commit()
                deleted = cursor.rowcount > 0
            if deleted:
                log.info(f"Order deleted: {order_id}", source="DLOrderManager")
            return deleted
        except Exception as e:
            log.error(f"Failed to delete order {order_id}: {e}", source="DLOrderManager")
            return False

    def get_order(self, order_id: str) -> Optional[Order]:
        try:
            cursor = self.db.get_cursor()
            if cursor is None:
                log.error("DB unavailable while fetching order", source="DLOrderManager")
                return None
            cursor.execute("SELECT * FROM orders WHERE order_id = ?", (order_id,))
            row = cursor.fetchone()
            return Order(**dict(row)) if row else None
        except Exception as e:
            log.error(f"Failed to fetch order {order_id}: {e}", source="DLOrderManager")
            return None

    def list_orders(self, buyer: Optional[str] = None) -> List[Order]:
        try:
            cursor = self.db.get_cursor()
            if cursor is None:
                log.error("DB unavailable while listing orders", source="DLOrderManager")
                return []
            if buyer:
                cursor.execute("SELECT * FROM orders WHERE buyer = ? ORDER BY order_id", (buyer,))
            else:
                cursor.execute("SELECT * FROM orders ORDER BY order_id")
            return [Order(**dict(row)) for row in cursor.fetchall()]
        except Exception as e:
            log.error(f"Failed to list orders: {e}", source="DLOrderManager")
            return []

    def prune_orders(self, keep: Iterable[str]) -> int:
        keep = set(keep)
        stale = [o.order_id for o in self.list_orders() if o.order_id not in keep]
        for order_id in stale:
            self.delete_order(order_id)
        return len(stale)
