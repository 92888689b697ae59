"""Shared per-request memory log."""

from .store import ActionType, MemoryEntry, MemoryQuery, MemoryStore

__all__ = [
    "ActionType",
    "MemoryEntry",
    "MemoryQuery",
    "MemoryStore",
]
