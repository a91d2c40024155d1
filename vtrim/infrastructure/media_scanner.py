import logging
import os
import stat
import threading
from pathlib import Path
from typing import Dict, Generator, Iterable, List, Optional, Tuple
from vtrim.config.models import DEFAULT_DENYLIST
from vtrim.domain.errors import ConfigError, TraversalError
from vtrim.domain.events import JobQueued
from vtrim.domain.models import ScanStats, SkipReason, TrimJob
from vtrim.infrastructure.event_bus import EventBus
from vtrim.infrastructure.job_queue import JobQueue


def _extension(name: str) -> str:
    """Everything from the last dot of the base name, or '' if there is none."""
    index = name.rfind(".")
    return name[index:] if index >= 0 else ""


def _raise_walk_error(error: OSError):
    raise TraversalError(f"Cannot read {error.filename}: {error.strerror or error}") from error


class MediaScanner:
    """Recursively walks a root directory and turns media files into TrimJobs.

    Filter rules, in order, per entry:
    unreadable entry (fatal), directory, extension mismatch, inside the
    output tree, output already exists, output already claimed by an earlier
    entry in this scan. Everything else becomes a job.
    """

    def __init__(
        self,
        extension: str = ".mp4",
        denylist: Optional[Iterable[str]] = None,
        trim_offset_seconds: int = 7,
        event_bus: Optional[EventBus] = None,
    ):
        self.extension = extension
        self.denylist = list(DEFAULT_DENYLIST if denylist is None else denylist)
        self.trim_offset_seconds = trim_offset_seconds
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    def sanitize(self, relative: Path) -> Path:
        """Strips denylisted characters from every component of a relative path."""
        table = str.maketrans("", "", "".join(self.denylist))
        parts = [part.translate(table) or "_" for part in relative.parts]
        return Path(*parts) if parts else relative

    def resolve_roots(self, root_dir: Path, output_dir: Path) -> Tuple[Path, Path]:
        """Returns (absolute root, output root relative to it)."""
        root_abs = Path(os.path.abspath(root_dir))
        output_abs = Path(os.path.abspath(output_dir))
        if root_abs == output_abs:
            raise ConfigError(f"Output directory must differ from input directory: {root_abs}")
        try:
            output_rel = Path(os.path.relpath(output_abs, root_abs))
        except ValueError as exc:
            raise TraversalError(f"Cannot relate output {output_abs} to root {root_abs}: {exc}") from exc
        return root_abs, output_rel

    @staticmethod
    def _is_inside(relative: Path, output_rel: Path) -> bool:
        if output_rel.parts and output_rel.parts[0] == os.pardir:
            return False
        return relative.parts[:len(output_rel.parts)] == output_rel.parts

    def scan(self, root_dir: Path, output_dir: Path, stats: Optional[ScanStats] = None) -> Generator[TrimJob, None, None]:
        """Walks root_dir and yields a TrimJob per qualifying file.

        Raises TraversalError on the first unreadable entry or unresolvable path.
        """
        stats = stats if stats is not None else ScanStats()
        root_abs, output_rel = self.resolve_roots(root_dir, output_dir)
        output_abs = Path(os.path.normpath(root_abs / output_rel))
        claimed: Dict[Path, Path] = {}

        for root, dirs, files in os.walk(str(root_abs), onerror=_raise_walk_error):
            root_path = Path(root)

            # Deterministic order; the output tree holds no candidates
            kept: List[str] = []
            for name in sorted(dirs):
                if root_path / name == output_abs:
                    stats.skip(SkipReason.OUTPUT_TREE)
                    continue
                stats.skip(SkipReason.DIRECTORY)
                kept.append(name)
            dirs[:] = kept

            for file_name in sorted(files):
                file_path = root_path / file_name
                try:
                    mode = file_path.lstat().st_mode
                except OSError as exc:
                    raise TraversalError(f"Cannot read {file_path}: {exc}") from exc

                if stat.S_ISDIR(mode):
                    stats.skip(SkipReason.DIRECTORY)
                    continue

                stats.files_found += 1

                if _extension(file_name) != self.extension:
                    stats.skip(SkipReason.EXTENSION)
                    continue

                try:
                    relative = Path(os.path.relpath(file_path, root_abs))
                except ValueError as exc:
                    raise TraversalError(f"Cannot relate {file_path} to root {root_abs}: {exc}") from exc

                if self._is_inside(relative, output_rel):
                    stats.skip(SkipReason.OUTPUT_TREE)
                    continue

                output_path = output_rel / self.sanitize(relative)
                if (root_abs / output_path).exists():
                    stats.skip(SkipReason.EXISTS)
                    continue

                # Two inputs may sanitize to one output; the first in walk order wins
                if output_path in claimed:
                    self.logger.warning(
                        f"Skipping {relative}: output {output_path} already claimed by {claimed[output_path]}"
                    )
                    stats.skip(SkipReason.COLLISION)
                    continue
                claimed[output_path] = relative

                yield TrimJob(
                    work_dir=root_abs,
                    input_path=relative,
                    output_path=output_path,
                    trim_offset_seconds=self.trim_offset_seconds,
                )

    def feed(
        self,
        root_dir: Path,
        output_dir: Path,
        job_queue: JobQueue,
        cancel_event: Optional[threading.Event] = None,
    ) -> ScanStats:
        """Runs the scan and publishes every job to the queue.

        Blocks while the queue is full. Stops early once cancel_event is set.
        Does not close the queue.
        """
        stats = ScanStats()
        for job in self.scan(root_dir, output_dir, stats):
            if not job_queue.put(job, cancel_event):
                self.logger.info("Traversal cancelled, no more jobs will be queued")
                break
            stats.jobs_queued += 1
            self.logger.info(f"Added {job.input_path}")
            if self.event_bus:
                self.event_bus.publish(JobQueued(job=job))
        return stats
