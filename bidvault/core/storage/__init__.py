"""
Persistent Storage Module.

Bucketed key-value backends for contract state:
- SQLiteAdapter: durable, file-backed
- MemoryAdapter: in-process, for tests and demos

Both enumerate keys in ascending order and support atomic transaction()
scopes.
"""

from bidvault.core.storage.memory_adapter import MemoryAdapter
from bidvault.core.storage.sqlite_adapter import SQLiteAdapter

__all__ = ["MemoryAdapter", "SQLiteAdapter"]
