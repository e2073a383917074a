"""Application state and the pure reducer that updates it."""

from collections.abc import Sequence
from dataclasses import dataclass, replace

from spec2bom.client.models import FileUpload, StoredObject
from spec2bom.jobs.queue import QueueSnapshotItem
from spec2bom.ui.render import ListKind, ListView, render_list, render_queue


@dataclass(frozen=True)
class AppState:
    catalogue: tuple[StoredObject, ...] = ()
    boms: tuple[StoredObject, ...] = ()
    selected_specs: tuple[FileUpload, ...] = ()
    is_processing: bool = False


# Actions


@dataclass(frozen=True)
class ObjectsLoaded:
    kind: ListKind
    objects: tuple[StoredObject, ...]


@dataclass(frozen=True)
class ObjectDeleted:
    object_id: str


@dataclass(frozen=True)
class SpecsSelected:
    files: tuple[FileUpload, ...]


@dataclass(frozen=True)
class SelectionCleared:
    pass


@dataclass(frozen=True)
class ProcessingChanged:
    is_processing: bool


Action = ObjectsLoaded | ObjectDeleted | SpecsSelected | SelectionCleared | ProcessingChanged


def reduce(state: AppState, action: Action) -> AppState:
    """Return the state that results from applying ``action``.

    Loaded lists replace the previous ones wholesale, so the last load to
    complete wins.
    """
    if isinstance(action, ObjectsLoaded):
        if action.kind is ListKind.CATALOG:
            return replace(state, catalogue=tuple(action.objects))
        if action.kind is ListKind.BOM:
            return replace(state, boms=tuple(action.objects))
        raise ValueError(f"Cannot load objects into the {action.kind.value} panel")
    if isinstance(action, ObjectDeleted):
        return replace(
            state,
            catalogue=tuple(o for o in state.catalogue if o.id != action.object_id),
            boms=tuple(o for o in state.boms if o.id != action.object_id),
        )
    if isinstance(action, SpecsSelected):
        return replace(state, selected_specs=tuple(action.files))
    if isinstance(action, SelectionCleared):
        return replace(state, selected_specs=())
    if isinstance(action, ProcessingChanged):
        return replace(state, is_processing=action.is_processing)
    raise TypeError(f"Unknown action: {action!r}")


def can_start_generation(state: AppState) -> bool:
    return bool(state.selected_specs) and not state.is_processing


@dataclass(frozen=True)
class AppView:
    """Everything the page shows, as plain data."""

    catalogue: ListView
    boms: ListView
    queue: ListView
    start_enabled: bool


def render_app(state: AppState, queue: Sequence[QueueSnapshotItem]) -> AppView:
    return AppView(
        catalogue=render_list(state.catalogue, ListKind.CATALOG),
        boms=render_list(state.boms, ListKind.BOM),
        queue=render_queue(queue),
        start_enabled=can_start_generation(state),
    )
