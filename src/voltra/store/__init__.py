"""Position and cache persistence."""

from voltra.store.base import Store
from voltra.store.memory import InMemoryStore
from voltra.store.sql import SqlStore

__all__ = ["InMemoryStore", "SqlStore", "Store"]
