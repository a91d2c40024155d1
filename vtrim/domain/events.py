"""Domain events for the trimming pipeline.

Events flow through the EventBus, decoupling the pipeline from the console
reporter. See `infrastructure/event_bus.py` for the pub/sub mechanism.

Events are published from the traversal thread and from worker threads, so
subscribers must be thread-safe.
"""

from pathlib import Path
from typing import Dict
from pydantic import BaseModel, Field
from .models import RunSummary, SkipReason, TrimJob


class Event(BaseModel):
    """Base class for all domain events."""

    pass


class JobEvent(Event):
    """Base class for events related to a specific trim job."""

    job: TrimJob
    worker: str = ""


class JobQueued(JobEvent):
    """Emitted by traversal after a job is enqueued."""

    pass


class JobStarted(JobEvent):
    """Emitted when a worker hands a job to the external tool."""

    pass


class JobCompleted(JobEvent):
    """Emitted when the external tool exits successfully."""

    elapsed_seconds: float = 0.0


class JobFailed(JobEvent):
    """Emitted when the external tool fails; the run is aborted."""

    error_message: str


class DiscoveryStarted(Event):
    directory: Path
    output_dir: Path


class DiscoveryFinished(Event):
    """Emitted after traversal returns without a fatal error."""

    files_found: int
    jobs_queued: int = 0
    skipped: Dict[SkipReason, int] = Field(default_factory=dict)


class ProcessingFinished(Event):
    """Emitted when all workers have exited after a successful run."""

    summary: RunSummary


class RunFailed(Event):
    error_message: str
