"""Local job queue and list reconciliation."""

from spec2bom.jobs.queue import JobQueue, QueueEntry, QueueSnapshotItem
from spec2bom.jobs.reconciler import ListReconciler, ReconcilerState

__all__ = [
    "JobQueue",
    "ListReconciler",
    "QueueEntry",
    "QueueSnapshotItem",
    "ReconcilerState",
]
