"""Tests for list rendering."""

from datetime import datetime, timezone

import pytest

from spec2bom.client.models import StoredObject
from spec2bom.jobs.queue import QueueSnapshotItem
from spec2bom.ui.render import ListKind, render_list, render_queue


def obj(object_id: str, created: str | None, name: str | None = "item") -> StoredObject:
    created_at = (
        datetime.fromisoformat(created).replace(tzinfo=timezone.utc) if created else None
    )
    return StoredObject(id=object_id, name=name, created_at=created_at)


def test_boms_sorted_newest_first() -> None:
    objects = [
        obj("jan", "2024-01-01"),
        obj("mar", "2024-03-01"),
        obj("feb", "2024-02-01"),
    ]

    view = render_list(objects, "bom")

    assert [row.id for row in view.rows] == ["mar", "feb", "jan"]
    assert [row.meta for row in view.rows] == ["2024-03-01", "2024-02-01", "2024-01-01"]


def test_boms_without_date_sort_last() -> None:
    view = render_list([obj("undated", None), obj("dated", "2024-01-01")], ListKind.BOM)

    assert [row.id for row in view.rows] == ["dated", "undated"]


def test_catalogue_keeps_fetched_order() -> None:
    objects = [obj("jan", "2024-01-01"), obj("mar", "2024-03-01")]

    view = render_list(objects, ListKind.CATALOG)

    assert [row.id for row in view.rows] == ["jan", "mar"]
    assert {row.badge for row in view.rows} == {"Catalog"}


@pytest.mark.parametrize(
    "kind,message",
    [
        (ListKind.CATALOG, "No catalogue items yet"),
        (ListKind.BOM, "No BOMs generated yet"),
    ],
)
def test_empty_list_renders_placeholder(kind: ListKind, message: str) -> None:
    view = render_list([], kind)

    assert view.is_empty
    assert view.empty_message == message


def test_rows_carry_actions_bound_to_id() -> None:
    view = render_list([obj("obj-7", "2024-01-01", name=None)], ListKind.BOM)

    row = view.rows[0]
    assert row.name == "Unnamed"
    assert row.badge == "BOM"
    assert [(a.name, a.object_id) for a in row.actions] == [
        ("view", "obj-7"),
        ("download", "obj-7"),
        ("delete", "obj-7"),
    ]


def test_render_queue() -> None:
    empty = render_queue([])
    assert empty.empty_message == "Nothing queued"

    view = render_queue(
        [QueueSnapshotItem("run-1", "pump.pdf", start_time=0.0, elapsed_minutes=3)]
    )

    assert view.rows[0].name == "pump.pdf"
    assert view.rows[0].badge == "Processing"
    assert view.rows[0].meta == "3m elapsed"
    assert view.rows[0].actions == ()
