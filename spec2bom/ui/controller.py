"""Application controller driving uploads, generation and list reloads."""

import asyncio
from collections.abc import Callable, Iterable
from pathlib import Path

from spec2bom.client.launcher import JobLauncher
from spec2bom.client.models import FileUpload, ObjectKind, StoredObject
from spec2bom.client.store import ObjectStoreClient
from spec2bom.client.uploader import Uploader
from spec2bom.core.config import Settings
from spec2bom.core.config import settings as default_settings
from spec2bom.core.errors import Spec2BomError, UserCancelled
from spec2bom.core.logging import get_logger
from spec2bom.jobs.queue import JobQueue
from spec2bom.jobs.reconciler import ListReconciler, ReconcilerState
from spec2bom.ui.notifications import Notifier
from spec2bom.ui.render import ListKind
from spec2bom.ui.state import (
    Action,
    AppState,
    AppView,
    ObjectDeleted,
    ObjectsLoaded,
    ProcessingChanged,
    SelectionCleared,
    SpecsSelected,
    can_start_generation,
    reduce,
    render_app,
)

logger = get_logger(__name__)

Confirm = Callable[[], bool]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


class SpecToBomApp:
    """Headless counterpart of the Spec-to-BOM page.

    Each public action catches its own errors, logs them and raises a
    notification instead of propagating. State changes go through
    :func:`spec2bom.ui.state.reduce`; :meth:`view` renders the current
    state as plain data.
    """

    def __init__(
        self,
        store: ObjectStoreClient,
        settings: Settings | None = None,
        queue: JobQueue | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.settings = settings or default_settings
        self.store = store
        self.queue = queue or JobQueue(ttl_seconds=self.settings.QUEUE_ENTRY_TTL_SECONDS)
        self.notifier = notifier or Notifier(self.settings.NOTIFICATION_TTL_SECONDS)
        self.uploader = Uploader(store)
        self.launcher = JobLauncher(
            store,
            self.queue,
            interaction=self.settings.SPEC_TO_BOM_INTERACTION,
            environment=self.settings.VERTESIA_ENV_ID,
            model=self.settings.VERTESIA_MODEL,
        )
        self.reconciler = ListReconciler(
            self._refresh_lists,
            self.queue,
            interval=self.settings.RECONCILE_INTERVAL_SECONDS,
            max_idle_ticks=self.settings.RECONCILE_MAX_IDLE_TICKS,
            on_error=self._on_reconcile_error,
        )
        self.state = AppState()
        self._boms_loaded = False

    def dispatch(self, action: Action) -> AppState:
        self.state = reduce(self.state, action)
        return self.state

    def view(self, now: float | None = None) -> AppView:
        return render_app(self.state, self.queue.snapshot(now))

    # Loading

    async def _fetch(self, kind: ObjectKind, limit: int) -> list[StoredObject]:
        return await self.store.list_objects({"properties.kind": kind.value}, limit=limit)

    async def load_catalogue(self) -> None:
        try:
            items = await self._fetch(
                ObjectKind.CATALOG_ITEM, self.settings.CATALOGUE_LIST_LIMIT
            )
        except Exception as e:
            logger.error("catalogue_load_failed", error=str(e))
            items = []
            self.notifier.error("Failed to load catalogue items")
        self.dispatch(ObjectsLoaded(ListKind.CATALOG, tuple(items)))

    async def load_boms(self) -> None:
        try:
            items = await self._fetch(ObjectKind.BOM, self.settings.BOM_LIST_LIMIT)
            self._boms_loaded = True
        except Exception as e:
            logger.error("bom_load_failed", error=str(e))
            items = []
            self._boms_loaded = False
            self.notifier.error("Failed to load past generations")
        self.dispatch(ObjectsLoaded(ListKind.BOM, tuple(items)))

    async def load_initial_data(self) -> None:
        await asyncio.gather(self.load_catalogue(), self.load_boms())

    async def _refresh_lists(self) -> list[StoredObject]:
        catalogue, boms = await asyncio.gather(
            self._fetch(ObjectKind.CATALOG_ITEM, self.settings.CATALOGUE_LIST_LIMIT),
            self._fetch(ObjectKind.BOM, self.settings.BOM_LIST_LIMIT),
        )
        self.dispatch(ObjectsLoaded(ListKind.CATALOG, tuple(catalogue)))
        self.dispatch(ObjectsLoaded(ListKind.BOM, tuple(boms)))
        self._boms_loaded = True
        return boms

    def _on_reconcile_error(self, error: Exception) -> None:
        self.notifier.error("Failed to refresh generated BOMs")

    # Generation

    def select_specs(self, files: Iterable[FileUpload]) -> None:
        selected = tuple(files)
        self.dispatch(SpecsSelected(selected))
        if selected:
            self.notifier.success(f"{_plural(len(selected), 'spec file')} selected")

    async def start_generation(self) -> list[str]:
        """Upload every selected spec and launch a generation job for each.

        Returns:
            Ids of the jobs launched, possibly partial if a step failed
        """
        if not can_start_generation(self.state):
            return []

        self.dispatch(ProcessingChanged(True))
        launched: list[str] = []
        try:
            for file in self.state.selected_specs:
                stored = await self.uploader.upload(
                    file, {"kind": ObjectKind.SPEC.value}
                )
                if stored.content is None or not stored.content.source:
                    raise Spec2BomError(
                        f"Object {stored.id} has no content reference to generate from"
                    )
                job_id = await self.launcher.launch(stored.content.source, file.name)
                launched.append(job_id)

            self.dispatch(SelectionCleared())
            self.notifier.success(
                f"Started generation for {_plural(len(launched), 'file')}"
            )
        except Exception as e:
            logger.error("generation_failed", error=str(e), launched=len(launched))
            self.notifier.error("Failed to start generation")
        finally:
            self.dispatch(ProcessingChanged(False))

        if launched:
            self.start_monitoring()
        return launched

    def start_monitoring(self) -> None:
        """Begin polling for results, or restart the idle budget if polling."""
        if self.reconciler.state is ReconcilerState.IDLE and self._boms_loaded:
            self.reconciler.prime(self.state.boms)
        self.reconciler.start()

    async def close(self) -> None:
        await self.reconciler.stop()

    # Catalogue

    async def upload_catalog_files(self, files: Iterable[FileUpload]) -> list[StoredObject]:
        files = list(files)
        if not files:
            return []
        try:
            stored = await self.uploader.upload_many(
                files, {"kind": ObjectKind.CATALOG_ITEM.value}
            )
        except Exception as e:
            logger.error("catalogue_upload_failed", error=str(e))
            self.notifier.error("Failed to upload to catalogue")
            return []

        await self.load_catalogue()
        self.notifier.success(f"{_plural(len(files), 'file')} uploaded to catalogue")
        return stored

    # Item actions

    async def view_item(self, object_id: str) -> str | None:
        """Return a signed download URL for an object's content."""
        try:
            item = await self.store.get_object(object_id)
            if item.content is None:
                raise Spec2BomError(f"Object {object_id} has no content")
            return await self.store.request_download_url(item.content.source)
        except Exception as e:
            logger.error("view_item_failed", object_id=object_id, error=str(e))
            self.notifier.error("Failed to view item")
            return None

    async def download_item(
        self, object_id: str, destination: Path | None = None
    ) -> str | None:
        """Return the download URL, or write the bytes to ``destination``."""
        url = await self.view_item(object_id)
        if url is None or destination is None:
            return url
        try:
            data = await self.store.fetch_bytes(url)
            destination.write_bytes(data)
        except Exception as e:
            logger.error("download_item_failed", object_id=object_id, error=str(e))
            self.notifier.error("Failed to download item")
            return None
        return str(destination)

    async def delete_item(self, object_id: str, confirm: Confirm | None = None) -> bool:
        """Delete an object after confirmation and reload both lists."""
        try:
            if confirm is not None and not confirm():
                raise UserCancelled(object_id)
            await self.store.delete_object(object_id)
            self.dispatch(ObjectDeleted(object_id))
            await self.load_initial_data()
        except UserCancelled:
            logger.debug("delete_cancelled", object_id=object_id)
            return False
        except Exception as e:
            logger.error("delete_item_failed", object_id=object_id, error=str(e))
            self.notifier.error("Failed to delete item")
            return False

        self.notifier.success("Item deleted successfully")
        return True
