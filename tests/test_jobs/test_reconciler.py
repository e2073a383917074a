"""Tests for the list reconciler."""

import asyncio
from collections.abc import Sequence

import pytest

from spec2bom.client.models import StoredObject
from spec2bom.jobs.queue import JobQueue
from spec2bom.jobs.reconciler import ListReconciler, ReconcilerState, match_job


def bom(object_id: str, name: str, **properties: str) -> StoredObject:
    return StoredObject(id=object_id, name=name, properties={"kind": "bom", **properties})


class BomList:
    """Loader returning a mutable list, optionally failing a number of times."""

    def __init__(self, *boms: StoredObject) -> None:
        self.boms = list(boms)
        self.failures = 0
        self.calls = 0

    async def __call__(self) -> Sequence[StoredObject]:
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise RuntimeError("list failed")
        return list(self.boms)


def test_match_by_job_id_property() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    queue.enqueue("run-2", "valve.pdf")

    entry = match_job(bom("b1", "whatever", job_id="run-2"), queue.entries())

    assert entry is not None and entry.job_id == "run-2"


def test_match_by_spec_stem() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "Pump Spec.pdf")

    entry = match_job(bom("b1", "pump spec_BOM"), queue.entries())

    assert entry is not None and entry.job_id == "run-1"
    assert match_job(bom("b2", "unrelated_BOM"), queue.entries()) is None


def test_match_by_spec_stem_requires_separator() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "p.pdf")

    assert match_job(bom("b1", "pressure_BOM"), queue.entries()) is None
    entry = match_job(bom("b2", "p_BOM"), queue.entries())
    assert entry is not None and entry.job_id == "run-1"


def test_match_with_unknown_job_id_does_not_fall_back() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")

    assert match_job(bom("b1", "pump_BOM", job_id="run-9"), queue.entries()) is None


async def test_tick_resolves_job_for_new_bom() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    loader = BomList(bom("old", "legacy_BOM"))
    reconciler = ListReconciler(loader, queue)
    reconciler.prime(loader.boms)

    assert await reconciler.tick() == []
    assert reconciler.idle_ticks == 1

    loader.boms.append(bom("new", "pump_BOM", job_id="run-1"))
    new = await reconciler.tick()

    assert [b.id for b in new] == ["new"]
    assert len(queue) == 0
    assert reconciler.idle_ticks == 0


async def test_first_tick_without_prime_is_baseline() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    reconciler = ListReconciler(BomList(bom("b", "pump_BOM")), queue)

    assert await reconciler.tick() == []
    assert "run-1" in queue


async def test_polling_stops_when_queue_empties() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    loader = BomList()
    reconciler = ListReconciler(loader, queue, interval=0.01)
    reconciler.prime([])

    reconciler.start()
    assert reconciler.state is ReconcilerState.POLLING

    await asyncio.sleep(0.03)
    loader.boms.append(bom("b", "pump_BOM", job_id="run-1"))
    await asyncio.wait_for(reconciler.wait(), timeout=2)

    assert reconciler.state is ReconcilerState.IDLE
    assert len(queue) == 0


async def test_failed_tick_does_not_stop_polling() -> None:
    """Test a failing reload is reported and later ticks still run."""
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    loader = BomList(bom("b", "pump_BOM", job_id="run-1"))
    loader.failures = 2
    errors: list[Exception] = []
    reconciler = ListReconciler(loader, queue, interval=0.01, on_error=errors.append)
    reconciler.prime([])

    reconciler.start()
    await asyncio.wait_for(reconciler.wait(), timeout=2)

    assert len(errors) == 2
    assert loader.calls == 3
    assert len(queue) == 0


async def test_polling_stops_after_idle_ticks() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    loader = BomList()
    reconciler = ListReconciler(loader, queue, interval=0.01, max_idle_ticks=3)

    reconciler.start()
    await asyncio.wait_for(reconciler.wait(), timeout=2)

    assert loader.calls == 3
    assert "run-1" in queue
    assert reconciler.state is ReconcilerState.IDLE


async def test_restart_while_polling_resets_idle_budget() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    loader = BomList()
    restarted: list[asyncio.Task[None]] = []

    def launch_late() -> None:
        if reconciler.ticks == 3:
            queue.enqueue("run-2", "valve.pdf")
            restarted.append(reconciler.start())

    reconciler = ListReconciler(
        loader, queue, interval=0.01, max_idle_ticks=4, on_tick=launch_late
    )

    task = reconciler.start()
    await asyncio.wait_for(reconciler.wait(), timeout=2)

    assert restarted == [task]
    # three ticks before the second launch, then a fresh budget of four
    assert loader.calls == 7
    assert "run-2" in queue


async def test_stop_cancels_polling() -> None:
    queue = JobQueue()
    queue.enqueue("run-1", "pump.pdf")
    loader = BomList()
    reconciler = ListReconciler(loader, queue, interval=60)

    task = reconciler.start()
    assert reconciler.start() is task

    await reconciler.stop()

    assert task.cancelled()
    assert reconciler.state is ReconcilerState.IDLE
    assert loader.calls == 0


async def test_tick_evicts_expired_entries() -> None:
    now = [0.0]
    queue = JobQueue(ttl_seconds=60, clock=lambda: now[0])
    queue.enqueue("run-1", "pump.pdf")
    reconciler = ListReconciler(BomList(), queue)
    now[0] = 61.0

    await reconciler.tick()

    assert len(queue) == 0


@pytest.mark.parametrize("interval,max_idle", [(0, 5), (-1, 5), (1, 0)])
def test_invalid_configuration(interval: float, max_idle: int) -> None:
    with pytest.raises(ValueError):
        ListReconciler(BomList(), JobQueue(), interval=interval, max_idle_ticks=max_idle)
