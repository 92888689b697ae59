"""Per-request memory log.

Append-only record of everything the agents did while handling one request.
Later phases (other agents, the validator) read context from here instead of
re-prompting with the full history.
"""

import enum
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

EntityId = Union[str, Tuple[str, ...]]


class ActionType(str, enum.Enum):
    """Actions that can be recorded in memory."""
    PAGE_CREATED = "page_created"
    PAGE_SWITCHED = "page_switched"
    PAGE_DELETED = "page_deleted"
    COMPONENT_CREATED = "component_created"
    COMPONENT_UPDATED = "component_updated"
    COMPONENT_DELETED = "component_deleted"
    COMPONENT_MOVED = "component_moved"
    VALIDATION_PASSED = "validation_passed"
    VALIDATION_FAILED = "validation_failed"
    ERROR = "error"


@dataclass(frozen=True)
class MemoryEntry:
    """A single immutable record in the memory log."""

    id: str
    timestamp: float
    agent: str
    action: ActionType
    entity_id: Optional[EntityId] = None
    entity_type: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)
    parent_action: Optional[str] = None

    def matches_entity(self, entity_id: str) -> bool:
        if self.entity_id is None:
            return False
        if isinstance(self.entity_id, tuple):
            return entity_id in self.entity_id
        return self.entity_id == entity_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "agent": self.agent,
            "action": self.action.value,
            "entity_id": list(self.entity_id) if isinstance(self.entity_id, tuple) else self.entity_id,
            "entity_type": self.entity_type,
            "details": dict(self.details),
            "parent_action": self.parent_action,
        }


@dataclass
class MemoryQuery:
    """Search filters. All provided filters must match (AND)."""

    action: Optional[Union[ActionType, str]] = None
    agent: Optional[str] = None
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None
    since: Optional[float] = None
    latest: bool = False


def _normalize_entity_id(entity_id: Union[str, Sequence[str], None]) -> Optional[EntityId]:
    if entity_id is None or isinstance(entity_id, str):
        return entity_id
    return tuple(str(item) for item in entity_id)


class MemoryStore:
    """In-memory, append-only log of agent actions.

    Searches are plain linear scans; a request produces at most a few hundred
    entries.
    """

    def __init__(self):
        self._entries: List[MemoryEntry] = []

    def write(
        self,
        agent: str,
        action: Union[ActionType, str],
        entity_id: Union[str, Sequence[str], None] = None,
        entity_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        parent_action: Optional[str] = None,
    ) -> MemoryEntry:
        """Append a new entry, generating its id and timestamp."""
        entry = MemoryEntry(
            id=f"mem-{uuid.uuid4().hex[:16]}",
            timestamp=time.time(),
            agent=agent,
            action=ActionType(action),
            entity_id=_normalize_entity_id(entity_id),
            entity_type=entity_type,
            details=dict(details or {}),
            parent_action=parent_action,
        )
        self._entries.append(entry)
        return entry

    def search(self, query: Optional[MemoryQuery] = None, **filters: Any) -> List[MemoryEntry]:
        """Search memory with filters.

        Accepts either a MemoryQuery or the same fields as keyword arguments.
        With ``latest=True`` only the most recent match is returned.
        """
        if query is None:
            query = MemoryQuery(**filters)

        action = ActionType(query.action) if query.action is not None else None

        results = []
        for entry in self._entries:
            if action is not None and entry.action != action:
                continue
            if query.agent is not None and entry.agent != query.agent:
                continue
            if query.entity_id is not None and not entry.matches_entity(query.entity_id):
                continue
            if query.entity_type is not None and entry.entity_type != query.entity_type:
                continue
            if query.since is not None and entry.timestamp <= query.since:
                continue
            results.append(entry)

        if query.latest and results:
            return [results[-1]]
        return results

    def get(self, entry_id: str) -> Optional[MemoryEntry]:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def get_all(self) -> List[MemoryEntry]:
        """All entries in write order."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries = []

    def __len__(self) -> int:
        return len(self._entries)
