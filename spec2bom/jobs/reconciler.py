"""Periodic reconciliation of the local job queue against the object list."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from enum import Enum
from pathlib import PurePath

from spec2bom.client.models import StoredObject
from spec2bom.core.logging import get_logger
from spec2bom.jobs.queue import JobQueue, QueueEntry

logger = get_logger(__name__)

BomLoader = Callable[[], Awaitable[Sequence[StoredObject]]]
ErrorHandler = Callable[[Exception], None]
TickHandler = Callable[[], None]


STEM_SEPARATORS = "_- ."


def _is_stem_boundary(name: str, end: int) -> bool:
    return end == len(name) or name[end] in STEM_SEPARATORS


class ReconcilerState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"


def match_job(bom: StoredObject, entries: Iterable[QueueEntry]) -> QueueEntry | None:
    """Find the queued job a newly listed BOM belongs to.

    A BOM carrying ``job_id`` or ``run_id`` in its properties matches that
    job exactly. Otherwise the oldest job whose spec file stem prefixes the
    BOM name, followed by a separator or the end of the name, matches.
    """
    entries = list(entries)
    ref = bom.properties.get("job_id") or bom.properties.get("run_id")
    if ref:
        return next((e for e in entries if e.job_id == str(ref)), None)

    name = (bom.name or "").lower()
    if not name:
        return None
    candidates = []
    for entry in entries:
        stem = PurePath(entry.display_name).stem.lower()
        if stem and name.startswith(stem) and _is_stem_boundary(name, len(stem)):
            candidates.append(entry)
    return min(candidates, key=lambda e: e.start_time, default=None)


class ListReconciler:
    """Re-fetch the authoritative BOM list on a fixed interval.

    Polling starts with :meth:`start` and ends on its own once the job queue
    is empty or after ``max_idle_ticks`` consecutive ticks without a new BOM.
    A failing tick is reported through ``on_error`` and counts as an idle
    tick; it never stops the loop by itself. :meth:`stop` cancels the
    scheduled task.
    """

    def __init__(
        self,
        load_boms: BomLoader,
        queue: JobQueue,
        interval: float = 5.0,
        max_idle_ticks: int = 120,
        on_error: ErrorHandler | None = None,
        on_tick: TickHandler | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be greater than 0")
        if max_idle_ticks < 1:
            raise ValueError("max_idle_ticks must be at least 1")
        self._load_boms = load_boms
        self.queue = queue
        self.interval = interval
        self.max_idle_ticks = max_idle_ticks
        self._on_error = on_error
        self._on_tick = on_tick
        self._seen: set[str] | None = None
        self._task: asyncio.Task[None] | None = None
        self.idle_ticks = 0
        self.ticks = 0

    @property
    def state(self) -> ReconcilerState:
        if self._task is not None and not self._task.done():
            return ReconcilerState.POLLING
        return ReconcilerState.IDLE

    def prime(self, boms: Iterable[StoredObject]) -> None:
        """Record BOMs that already existed so they are not seen as new."""
        self._seen = {bom.id for bom in boms}

    async def tick(self) -> list[StoredObject]:
        """Run one reconciliation cycle and return the newly seen BOMs."""
        self.ticks += 1
        boms = await self._load_boms()

        if self._seen is None:
            self.prime(boms)
            new: list[StoredObject] = []
        else:
            new = [bom for bom in boms if bom.id not in self._seen]
            self._seen.update(bom.id for bom in new)

        for bom in new:
            entry = match_job(bom, self.queue.entries())
            if entry is not None:
                self.queue.resolve(entry.job_id)

        self.queue.evict_expired()
        self.idle_ticks = 0 if new else self.idle_ticks + 1

        logger.debug(
            "reconcile_tick",
            tick=self.ticks,
            new_boms=len(new),
            queued=len(self.queue),
            idle_ticks=self.idle_ticks,
        )
        if self._on_tick is not None:
            self._on_tick()
        return new

    def _should_stop(self) -> bool:
        return len(self.queue) == 0 or self.idle_ticks >= self.max_idle_ticks

    async def _run(self) -> None:
        logger.info("reconcile_started", interval=self.interval)
        try:
            while True:
                await asyncio.sleep(self.interval)
                try:
                    await self.tick()
                except Exception as e:
                    self.idle_ticks += 1
                    logger.error("reconcile_tick_failed", error=str(e), tick=self.ticks)
                    if self._on_error is not None:
                        self._on_error(e)
                if self._should_stop():
                    break
        finally:
            logger.info(
                "reconcile_stopped",
                ticks=self.ticks,
                queued=len(self.queue),
                idle_ticks=self.idle_ticks,
            )

    def start(self) -> asyncio.Task[None]:
        """Enter polling and restart the idle budget.

        Returns the running task if already polling.
        """
        self.idle_ticks = 0
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        """Cancel polling and wait for the task to finish."""
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def wait(self) -> None:
        """Wait until polling stops on its own."""
        if self._task is not None:
            await self._task
