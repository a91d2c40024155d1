import threading
from typing import Optional
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from vtrim.infrastructure.event_bus import EventBus
from vtrim.domain.events import (
    DiscoveryStarted, DiscoveryFinished,
    JobQueued, JobStarted, JobCompleted, JobFailed,
    ProcessingFinished, RunFailed,
)
from vtrim.domain.models import RunSummary, SkipReason

SKIP_LABELS = {
    SkipReason.DIRECTORY: "Directories",
    SkipReason.EXTENSION: "Other extensions",
    SkipReason.OUTPUT_TREE: "Output tree",
    SkipReason.EXISTS: "Already trimmed",
    SkipReason.COLLISION: "Name collisions",
}

class ConsoleReporter:
    """Subscribes to EventBus and prints progress lines to the terminal."""

    def __init__(self, bus: EventBus, console: Optional[Console] = None, verbose: bool = False):
        self.bus = bus
        self.console = console or Console(highlight=False)
        self.verbose = verbose
        self._lock = threading.Lock()
        self.queued = 0
        self.started = 0
        self.completed = 0
        self.failed = 0
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DiscoveryStarted, self.on_discovery_started)
        self.bus.subscribe(DiscoveryFinished, self.on_discovery_finished)
        self.bus.subscribe(JobQueued, self.on_job_queued)
        self.bus.subscribe(JobStarted, self.on_job_started)
        self.bus.subscribe(JobCompleted, self.on_job_completed)
        self.bus.subscribe(JobFailed, self.on_job_failed)
        self.bus.subscribe(ProcessingFinished, self.on_processing_finished)
        self.bus.subscribe(RunFailed, self.on_run_failed)

    def on_discovery_started(self, event: DiscoveryStarted):
        self.console.print(f"[bold]Scanning[/bold] {escape(str(event.directory))} -> {escape(str(event.output_dir))}")

    def on_discovery_finished(self, event: DiscoveryFinished):
        self.console.print(
            f"[bold]Discovery finished:[/bold] {event.files_found} files, {event.jobs_queued} queued"
        )

    def on_job_queued(self, event: JobQueued):
        with self._lock:
            self.queued += 1
        if self.verbose:
            self.console.print(f"[dim]Added {escape(str(event.job.input_path))}[/dim]")

    def on_job_started(self, event: JobStarted):
        with self._lock:
            self.started += 1
        self.console.print(f"[cyan]{event.worker}[/cyan] {escape(str(event.job.input_path))} -> {escape(str(event.job.output_path))}")

    def on_job_completed(self, event: JobCompleted):
        with self._lock:
            self.completed += 1
            done, queued = self.completed, self.queued
        self.console.print(
            f"[green]✓[/green] {escape(str(event.job.output_path))} ({event.elapsed_seconds:.1f}s) ({done}/{queued})"
        )

    def on_job_failed(self, event: JobFailed):
        with self._lock:
            self.failed += 1
        self.console.print(f"[red]✗ {escape(str(event.job.input_path))}: {escape(str(event.error_message))}[/red]")

    def on_processing_finished(self, event: ProcessingFinished):
        self.console.print(self.build_summary_table(event.summary))

    def on_run_failed(self, event: RunFailed):
        self.console.print(f"[red]Run aborted after {self.completed} completed jobs[/red]")

    @staticmethod
    def build_summary_table(summary: RunSummary) -> Table:
        table = Table(title="vtrim summary", show_header=False)
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Files found", str(summary.files_found))
        table.add_row("Jobs queued", str(summary.jobs_queued))
        table.add_row("Jobs completed", str(summary.jobs_completed))
        for reason, label in SKIP_LABELS.items():
            table.add_row(f"Skipped: {label}", str(summary.skipped.get(reason, 0)))
        table.add_row("Elapsed", f"{summary.elapsed_seconds:.1f}s")
        return table
