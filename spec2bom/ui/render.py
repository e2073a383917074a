"""Declarative rendering of object lists into view data."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from spec2bom.client.models import StoredObject
from spec2bom.jobs.queue import QueueSnapshotItem


class ListKind(str, Enum):
    """Panels the page shows."""

    CATALOG = "catalog"
    BOM = "bom"
    QUEUE = "queue"


EMPTY_MESSAGES: dict[ListKind, str] = {
    ListKind.CATALOG: "No catalogue items yet",
    ListKind.BOM: "No BOMs generated yet",
    ListKind.QUEUE: "Nothing queued",
}

BADGES: dict[ListKind, str] = {
    ListKind.CATALOG: "Catalog",
    ListKind.BOM: "BOM",
    ListKind.QUEUE: "Processing",
}

ROW_ACTIONS = ("view", "download", "delete")


@dataclass(frozen=True)
class RowAction:
    name: str
    object_id: str


@dataclass(frozen=True)
class ListRow:
    id: str
    name: str
    badge: str
    meta: str = ""
    actions: tuple[RowAction, ...] = ()


@dataclass(frozen=True)
class ListView:
    """A rendered panel: either rows or the empty-state message."""

    kind: ListKind
    rows: tuple[ListRow, ...] = field(default_factory=tuple)
    empty_message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.rows


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(obj: StoredObject) -> datetime:
    created = obj.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


def _object_row(obj: StoredObject, kind: ListKind) -> ListRow:
    date = obj.created_at.date().isoformat() if obj.created_at else ""
    return ListRow(
        id=obj.id,
        name=obj.name or "Unnamed",
        badge=BADGES[kind],
        meta=date,
        actions=tuple(RowAction(action, obj.id) for action in ROW_ACTIONS),
    )


def render_list(objects: Sequence[StoredObject], kind: ListKind | str) -> ListView:
    """Render catalogue items or BOMs.

    BOMs are ordered newest first by ``created_at``; catalogue items keep
    the order they were fetched in.
    """
    kind = ListKind(kind)
    if not objects:
        return ListView(kind=kind, empty_message=EMPTY_MESSAGES[kind])

    ordered = list(objects)
    if kind is ListKind.BOM:
        ordered.sort(key=_sort_key, reverse=True)
    return ListView(kind=kind, rows=tuple(_object_row(obj, kind) for obj in ordered))


def render_queue(snapshot: Sequence[QueueSnapshotItem]) -> ListView:
    """Render the local job queue."""
    if not snapshot:
        return ListView(
            kind=ListKind.QUEUE, empty_message=EMPTY_MESSAGES[ListKind.QUEUE]
        )
    rows = tuple(
        ListRow(
            id=item.job_id,
            name=item.display_name,
            badge=BADGES[ListKind.QUEUE],
            meta=f"{item.elapsed_minutes}m elapsed",
        )
        for item in snapshot
    )
    return ListView(kind=ListKind.QUEUE, rows=rows)
