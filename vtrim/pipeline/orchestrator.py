"""Pipeline orchestrator for one trimming run.

Wires the bounded queue, the worker pool and the traversal together:

- Validate the external tool and create the output root
- Spawn the workers (idle until jobs arrive)
- Run traversal on the calling thread, feeding the queue
- Close the queue exactly once, whatever traversal did
- Join every worker, then raise the first fatal error or return a summary

There is no partial-success result: either every queued job completed or
`run` raises.
"""

import logging
import threading
import time
from pathlib import Path
from typing import List, Optional
from vtrim.config.models import AppConfig
from vtrim.domain.errors import RunAborted, TraversalError, VtrimError
from vtrim.domain.events import DiscoveryFinished, DiscoveryStarted, ProcessingFinished, RunFailed
from vtrim.domain.models import RunSummary, ScanStats
from vtrim.infrastructure.event_bus import EventBus
from vtrim.infrastructure.job_queue import JobQueue
from vtrim.infrastructure.media_scanner import MediaScanner
from vtrim.infrastructure.vlc import VlcAdapter
from vtrim.pipeline.worker_pool import WorkerPool


class Orchestrator:
    """Trimming pipeline coordinator.

    Args:
        config: AppConfig with worker count, queue factor and paths.
        event_bus: EventBus for publishing lifecycle events.
        media_scanner: MediaScanner that walks the input root.
        vlc_adapter: VlcAdapter that runs the external tool per job.
    """

    def __init__(
        self,
        config: AppConfig,
        event_bus: EventBus,
        media_scanner: MediaScanner,
        vlc_adapter: VlcAdapter,
    ):
        self.config = config
        self.event_bus = event_bus
        self.media_scanner = media_scanner
        self.vlc_adapter = vlc_adapter
        self.logger = logging.getLogger(__name__)

    def run(self, input_dir: Optional[Path] = None, output_dir: Optional[Path] = None) -> RunSummary:
        input_dir = Path(input_dir if input_dir is not None else self.config.paths.input_dir)
        output_dir = Path(output_dir if output_dir is not None else self.config.paths.output_dir)
        start_time = time.monotonic()

        tool = self.vlc_adapter.locate()
        self.logger.info(f"Tool located: {tool}")

        # Same-directory input and output is rejected before any thread starts
        self.media_scanner.resolve_roots(input_dir, output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        cancel_event = threading.Event()

        job_queue = JobQueue(self.config.queue_capacity)
        pool = WorkerPool(
            processor=self.vlc_adapter,
            job_queue=job_queue,
            workers=self.config.general.workers,
            event_bus=self.event_bus,
            cancel_event=cancel_event,
        )
        pool.start()
        self.logger.info(
            f"Workers started: {self.config.general.workers} (queue capacity {job_queue.capacity})"
        )

        self.event_bus.publish(DiscoveryStarted(directory=input_dir, output_dir=output_dir))
        errors: List[Exception] = []
        stats = ScanStats()
        try:
            stats = self.media_scanner.feed(input_dir, output_dir, job_queue, cancel_event)
        except Exception as e:
            # Workers must still be joined, so nothing escapes before pool.join()
            error = e
            if not isinstance(e, VtrimError):
                error = TraversalError(f"Traversal failed: {e}")
                error.__cause__ = e
            self.logger.error(f"Traversal aborted: {error}")
            errors.append(error)
            cancel_event.set()
        finally:
            job_queue.close()

        if not errors:
            skipped = ", ".join(f"{reason.value}={count}" for reason, count in stats.skipped.items())
            self.logger.info(
                f"Discovery finished: found={stats.files_found}, queued={stats.jobs_queued}, skipped: {skipped}"
            )
            self.event_bus.publish(DiscoveryFinished(
                files_found=stats.files_found,
                jobs_queued=stats.jobs_queued,
                skipped=stats.skipped,
            ))

        pool.join()
        errors.extend(pool.errors)

        if errors:
            error = errors[0] if len(errors) == 1 else RunAborted(errors)
            self.event_bus.publish(RunFailed(error_message=str(error)))
            raise error

        summary = RunSummary(
            files_found=stats.files_found,
            jobs_queued=stats.jobs_queued,
            jobs_completed=pool.completed,
            skipped=stats.skipped,
            elapsed_seconds=time.monotonic() - start_time,
        )
        self.logger.info(
            f"All jobs processed: completed={summary.jobs_completed} elapsed={summary.elapsed_seconds:.2f}s"
        )
        self.event_bus.publish(ProcessingFinished(summary=summary))
        return summary
