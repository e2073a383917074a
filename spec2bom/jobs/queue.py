"""In-memory queue of launched generation jobs."""

import time
from collections.abc import Callable
from dataclasses import dataclass

from spec2bom.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueueEntry:
    """A launched job awaiting its BOM."""

    job_id: str
    display_name: str
    start_time: float  # epoch seconds


@dataclass(frozen=True)
class QueueSnapshotItem:
    """A queue entry with its elapsed time at snapshot time."""

    job_id: str
    display_name: str
    start_time: float
    elapsed_minutes: int


class JobQueue:
    """Job id to display entry mapping.

    The queue is display state only. Whether a BOM exists is decided by the
    authoritative object list, which resolves entries through the reconciler.
    Entries older than ``ttl_seconds`` are dropped by :meth:`evict_expired`
    (``0`` disables eviction).
    """

    def __init__(
        self,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, QueueEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._entries

    def entries(self) -> list[QueueEntry]:
        return list(self._entries.values())

    def enqueue(self, job_id: str, display_name: str) -> QueueEntry:
        """Insert a job, time-stamped with the current clock."""
        entry = QueueEntry(job_id, display_name, self._clock())
        self._entries[job_id] = entry
        logger.debug("job_enqueued", job_id=job_id, display_name=display_name)
        return entry

    def resolve(self, job_id: str) -> QueueEntry | None:
        """Remove a job whose result has appeared; unknown ids are ignored."""
        entry = self._entries.pop(job_id, None)
        if entry is not None:
            logger.info("job_resolved", job_id=job_id, display_name=entry.display_name)
        return entry

    def evict_expired(self, now: float | None = None) -> list[QueueEntry]:
        """Drop entries older than the TTL and return them."""
        if not self.ttl_seconds:
            return []
        now = self._clock() if now is None else now
        expired = [
            entry
            for entry in self._entries.values()
            if now - entry.start_time >= self.ttl_seconds
        ]
        for entry in expired:
            del self._entries[entry.job_id]
            logger.warning(
                "job_expired", job_id=entry.job_id, display_name=entry.display_name
            )
        return expired

    def snapshot(self, now: float | None = None) -> list[QueueSnapshotItem]:
        """Current entries in insertion order with floored elapsed minutes."""
        now = self._clock() if now is None else now
        return [
            QueueSnapshotItem(
                job_id=entry.job_id,
                display_name=entry.display_name,
                start_time=entry.start_time,
                elapsed_minutes=int(max(0.0, now - entry.start_time) // 60),
            )
            for entry in self._entries.values()
        ]

    def placeholder_id(self, now: float | None = None) -> str:
        """A local job id, unique among current entries."""
        now = self._clock() if now is None else now
        base = f"local-{int(now * 1000)}"
        candidate = base
        suffix = 1
        while candidate in self._entries:
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate
