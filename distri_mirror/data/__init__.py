from .data_locker import DataLocker
from .database import DatabaseManager

__all__ = ["DataLocker", "DatabaseManager"]
