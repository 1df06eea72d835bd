# Path: core/store/__init__.py
# Purpose: Package initializer for persistent storage.
# Layer: core/store.
# Details: Exposes the SQLite clip store and its statement/result types.

from .sqlite_store import MEMORY_PATH, ClipStore, Result, Statement

__all__ = ["MEMORY_PATH", "ClipStore", "Result", "Statement"]
