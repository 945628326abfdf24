"""
Version history for the graph store.

The VersionHistoryManager listens to the store and appends one immutable
record per committed mutation. Each record keeps a copy of the graph as it was
after the mutation, so reverting to a version restores real node and edge
content rather than just a version label.
"""

import logging
import uuid
from collections import deque
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Deque, Dict, List, Optional

from .constants import DEFAULT_AUTHOR, DEFAULT_HISTORY_LIMIT
from .events import ChangeSet, GraphChange, GraphEvent
from .exceptions import GraphOperationError, ValidationError, VersionNotFoundError
from .models import GraphSnapshot

logger = logging.getLogger(__name__)


def increment_version(version: str) -> str:
    """
    Return ``version`` with its patch component incremented.

    Raises:
        ValidationError: If the version is not a three-part numeric version
    """
    parts = version.split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ValidationError(f"version must look like 'major.minor.patch', got {version!r}")
    major, minor, patch = (int(part) for part in parts)
    return f"{major}.{minor}.{patch + 1}"


class HistoryState(Enum):
    """Recording state of the history manager."""

    IDLE = "idle"
    RECORDING = "recording"


@dataclass(frozen=True)
class VersionRecord:
    """
    Immutable history entry for one mutation.

    Attributes:
        id (str): Generated record id
        version (str): Version created by the mutation
        parent_version (Optional[str]): Version the mutation started from
        timestamp (datetime): When the mutation was committed
        author (str): Who made the change
        message (str): Free-text summary
        changes (ChangeSet): Added, modified and removed ids
        revision (int): Store revision after the mutation
        snapshot (Optional[GraphSnapshot]): Graph content after the mutation
    """

    id: str
    version: str
    parent_version: Optional[str]
    timestamp: datetime
    author: str
    message: str
    changes: ChangeSet
    revision: int = 0
    snapshot: Optional[GraphSnapshot] = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "version": self.version,
            "parentVersion": self.parent_version,
            "timestamp": self.timestamp.isoformat(),
            "author": self.author,
            "message": self.message,
            "changes": self.changes.to_dict(),
        }


class VersionHistoryManager:
    """
    Linear, bounded history of graph mutations.

    Records are appended synchronously from the store's change notification
    (IDLE → RECORDING → IDLE). Only the most recent ``limit`` records are kept;
    older ones are evicted silently.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT, author: str = DEFAULT_AUTHOR):
        if limit < 1:
            raise ValidationError("history limit must be a positive integer")
        self.limit = limit
        self.author = author
        self._records: Deque[VersionRecord] = deque(maxlen=limit)
        self._state = HistoryState.IDLE

    @property
    def state(self) -> HistoryState:
        return self._state

    def __len__(self) -> int:
        return len(self._records)

    def on_state_change(self, event: GraphEvent, change: GraphChange) -> None:
        """Store listener entry point."""
        if event is GraphEvent.GRAPH_RESET:
            self.clear()
            return
        self.record(change)

    def record(self, change: GraphChange) -> VersionRecord:
        """
        Append a record for a committed change.

        Raises:
            GraphOperationError: If called while another record is being written
        """
        if self._state is HistoryState.RECORDING:
            raise GraphOperationError("history is already recording a change")
        self._state = HistoryState.RECORDING
        try:
            record = VersionRecord(
                id=f"version-{uuid.uuid4().hex[:12]}",
                version=change.version,
                parent_version=change.parent_version,
                timestamp=change.timestamp,
                author=self.author,
                message=change.message,
                changes=change.changes,
                revision=change.revision,
                snapshot=deepcopy(change.snapshot),
            )
            if len(self._records) == self.limit:
                logger.debug("Evicting version %s from history", self._records[0].version)
            self._records.append(record)
            return record
        finally:
            self._state = HistoryState.IDLE

    def get_version_history(self) -> List[VersionRecord]:
        """Return the records in chronological order."""
        return list(self._records)

    def get_record(self, version_id: str) -> VersionRecord:
        """
        Look up a record by id.

        Raises:
            VersionNotFoundError: If no retained record has that id
        """
        for record in self._records:
            if record.id == version_id:
                return record
        raise VersionNotFoundError(f"Version {version_id} not found")

    def find_by_version(self, version: str) -> Optional[VersionRecord]:
        return next((r for r in self._records if r.version == version), None)

    def latest(self) -> Optional[VersionRecord]:
        return self._records[-1] if self._records else None

    def clear(self) -> None:
        self._records.clear()
