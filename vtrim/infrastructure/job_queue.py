import queue
import threading
from typing import Optional
from vtrim.domain.errors import QueueClosedError
from vtrim.domain.models import TrimJob

# Close marker. Whoever takes it puts it back so every consumer sees it.
_CLOSED = object()


class JobQueue:
    """Bounded hand-off buffer between one producer and many consumers.

    `put` blocks while the queue holds `capacity` jobs. `get` blocks while the
    queue is empty and open, and returns None once it is closed and drained.
    """

    def __init__(self, capacity: int, poll_interval: float = 0.1):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._poll_interval = poll_interval
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=capacity)
        self._closed = False
        self._close_lock = threading.Lock()

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        """Approximate number of pending jobs."""
        size = self._queue.qsize()
        return max(0, size - 1) if self._closed else size

    def put(self, job: TrimJob, cancel_event: Optional[threading.Event] = None) -> bool:
        """Blocks until the job is enqueued. Returns False if cancelled first."""
        if self._closed:
            raise QueueClosedError("put() on a closed queue")
        while True:
            if cancel_event is not None and cancel_event.is_set():
                return False
            try:
                self._queue.put(job, timeout=self._poll_interval)
                return True
            except queue.Full:
                continue

    def get(self) -> Optional[TrimJob]:
        item = self._queue.get()
        if item is _CLOSED:
            # Nothing is put after the marker, so this never blocks
            self._queue.put(_CLOSED)
            return None
        return item

    def close(self):
        """Marks the end of the stream. Must be called exactly once by the producer."""
        with self._close_lock:
            if self._closed:
                raise QueueClosedError("queue already closed")
            self._closed = True
        self._queue.put(_CLOSED)
