"""Fixed pool of worker threads draining the job queue.

Each worker handles one job at a time and exits only after the queue is
closed and empty. The first failure sets the shared cancel event; from then
on workers keep draining the queue without starting new jobs, so the
producer can always finish and close it.
"""

import logging
import threading
import time
from typing import List, Optional, Protocol
from vtrim.domain.events import JobCompleted, JobFailed, JobStarted
from vtrim.domain.models import TrimJob
from vtrim.infrastructure.event_bus import EventBus
from vtrim.infrastructure.job_queue import JobQueue


class JobProcessor(Protocol):
    def trim(self, job: TrimJob) -> str: ...


class WorkerPool:
    def __init__(
        self,
        processor: JobProcessor,
        job_queue: JobQueue,
        workers: int,
        event_bus: Optional[EventBus] = None,
        cancel_event: Optional[threading.Event] = None,
    ):
        if workers < 1:
            raise ValueError(f"workers must be positive, got {workers}")
        self.processor = processor
        self.job_queue = job_queue
        self.workers = workers
        self.event_bus = event_bus
        self.cancel_event = cancel_event or threading.Event()
        self.logger = logging.getLogger(__name__)

        self._threads: List[threading.Thread] = []
        self._lock = threading.Lock()
        self._errors: List[Exception] = []
        self._completed = 0

    @property
    def errors(self) -> List[Exception]:
        with self._lock:
            return list(self._errors)

    @property
    def completed(self) -> int:
        with self._lock:
            return self._completed

    def start(self):
        if self._threads:
            raise RuntimeError("worker pool already started")
        for index in range(self.workers):
            thread = threading.Thread(target=self._worker, name=f"worker-{index + 1}", daemon=True)
            thread.start()
            self._threads.append(thread)

    def join(self):
        """Blocks until every worker has exited."""
        for thread in self._threads:
            thread.join()

    def _publish(self, event):
        if self.event_bus:
            self.event_bus.publish(event)

    def _worker(self):
        name = threading.current_thread().name
        self.logger.info("Worker started")
        try:
            while True:
                job = self.job_queue.get()
                if job is None:
                    break
                if self.cancel_event.is_set():
                    self.logger.debug(f"Dropping {job.input_path} (run cancelled)")
                    continue
                self._process(job, name)
        finally:
            self.logger.info("Worker finished")

    def _process(self, job: TrimJob, name: str):
        start_time = time.monotonic()
        self.logger.info(f"Processing: {job.input_path} -> {job.output_path}")
        try:
            self._publish(JobStarted(job=job, worker=name))
            self.processor.trim(job)
            elapsed = time.monotonic() - start_time
            with self._lock:
                self._completed += 1
            self.logger.info(f"Done: {job.output_path} elapsed={elapsed:.2f}s")
            self._publish(JobCompleted(job=job, worker=name, elapsed_seconds=elapsed))
        except Exception as e:
            # Any failure aborts the run; the thread itself stays alive to drain
            self.logger.error(f"FAILED: {job.input_path}: {e}")
            with self._lock:
                self._errors.append(e)
            self.cancel_event.set()
            self._publish(JobFailed(job=job, worker=name, error_message=str(e)))
