"""File discovery and the worker pool that converts a batch of files."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from tqdm import tqdm

from .base import ProcessingError, ProcessingResult, ProcessingStatus
from .media import Action
from .stats import ConversionStats, StatsSnapshot

if TYPE_CHECKING:
    from pathlib import Path

    from .base import MediaProcessor

LOG = logging.getLogger(__name__)

# Enqueued once per worker after the last file; closes the queue for that worker
_CLOSED = object()


@dataclass
class RunReport:
    """Everything a finished run produced."""

    stats: StatsSnapshot
    results: list[ProcessingResult] = field(default_factory=list)
    workers: int = 0
    cancelled: bool = False

    @property
    def failures(self) -> list[ProcessingResult]:
        return [result for result in self.results if result.failed]

    def action_for(self, file_path: Path) -> Action | None:
        """Classification recorded for a file, if it got that far."""
        return next((r.action for r in self.results if r.source_file == file_path), None)


def discover_media_files(processor: MediaProcessor, path: Path, *, recursive: bool = True) -> list[Path]:
    """Find all files under ``path`` the processor can handle; ``path`` may itself be a file."""
    if not path.exists():
        msg = f"Path does not exist: {path}"
        raise ProcessingError(msg, file_path=path)

    LOG.info("Scanning for media files in: %s (recursive: %s)", path, recursive)

    if path.is_file():
        files = [path] if processor.can_process(path) else []
    else:
        pattern = "**/*" if recursive else "*"
        files = sorted(f for f in path.glob(pattern) if f.is_file() and processor.can_process(f))

    for file_path in files:
        LOG.debug("Found media file: %s", file_path)
    LOG.info("Found %d media file(s)", len(files))
    return files


def format_result_line(result: ProcessingResult) -> str:
    """Console line announcing how one file ended."""
    name = result.source_file.name
    if result.status is ProcessingStatus.FAILED:
        return f"✗ Error: {name}: {result.message}"
    if result.status is ProcessingStatus.SKIPPED:
        return f"✓ Skipped: {name} (already compatible)"
    label = result.action.label if result.action else "convert"
    if result.dry_run:
        return f"🔍 Would process: {name} ({label})"
    if result.action is Action.REWRAP:
        return f"↻ Rewrapped: {name}"
    return f"→ Processed: {name} ({label})"


def _update_progress_description(progress_bar: tqdm, result: ProcessingResult) -> None:
    """Update progress bar description based on result status."""
    name = result.source_file.name
    if result.status is ProcessingStatus.SUCCESS:
        progress_bar.set_description(f"✓ Completed {name}")
    elif result.status is ProcessingStatus.SKIPPED:
        progress_bar.set_description(f"⏭ Skipped {name}")
    else:
        progress_bar.set_description(f"✗ Error {name}")


def _run_job(processor: MediaProcessor, file_path: Path) -> ProcessingResult:
    """Process one file; anything escaping the processor still becomes a failed result."""
    try:
        return processor.process_file(file_path)
    except Exception as e:
        processor.logger.exception("Error processing %s", file_path)
        return ProcessingResult(
            source_file=file_path,
            status=ProcessingStatus.FAILED,
            message=f"Unexpected error: {e}",
        )


def _worker(
    processor: MediaProcessor,
    jobs: queue.Queue,
    stats: ConversionStats,
    results: list[ProcessingResult],
    cancel_event: threading.Event,
    progress_bar: tqdm,
) -> None:
    """Drain the shared queue until this worker's close marker arrives."""
    while True:
        file_path = jobs.get()
        try:
            if file_path is _CLOSED:
                return

            if cancel_event.is_set():
                result = ProcessingResult(
                    source_file=file_path,
                    status=ProcessingStatus.FAILED,
                    message="Cancelled before processing",
                )
            else:
                result = _run_job(processor, file_path)

            stats.record(result)
            results.append(result)

            _update_progress_description(progress_bar, result)
            progress_bar.update(1)
            tqdm.write(format_result_line(result))
        finally:
            jobs.task_done()


def _join_all(threads: list[threading.Thread]) -> None:
    for thread in threads:
        thread.join()


def process_paths(
    processor: MediaProcessor,
    files: list[Path],
    max_workers: int,
    *,
    show_progress: bool = True,
) -> RunReport:
    """
    Run the processor over a batch of files with a fixed pool of worker threads.

    The queue is filled completely and closed before the workers start.
    Results are recorded in the shared stats as they finish; the stats are
    read only after every worker has been joined.

    Args:
        processor: Handles one file per call
        files: Files to process, in queue order
        max_workers: Pool size; capped at the number of files
        show_progress: Render a tqdm progress bar

    Returns:
        Final statistics and the per-file results

    """
    stats = ConversionStats(total=len(files))

    if not files:
        LOG.info("No files to process")
        return RunReport(stats=stats.snapshot())

    worker_count = max(1, min(max_workers, len(files)))
    jobs: queue.Queue = queue.Queue(maxsize=len(files) + worker_count)
    for file_path in files:
        jobs.put_nowait(file_path)
    for _ in range(worker_count):
        jobs.put_nowait(_CLOSED)

    cancel_event = threading.Event()
    per_worker_results: list[list[ProcessingResult]] = [[] for _ in range(worker_count)]

    progress_bar = tqdm(
        total=len(files),
        desc="Converting",
        unit="file",
        disable=not show_progress,
        bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}, {rate_fmt}]",
    )

    LOG.info("Processing %d files with %d workers", len(files), worker_count)

    threads = [
        threading.Thread(
            target=_worker,
            args=(processor, jobs, stats, per_worker_results[index], cancel_event, progress_bar),
            name=f"convert-worker-{index}",
        )
        for index in range(worker_count)
    ]

    cancelled = False
    try:
        for thread in threads:
            thread.start()
        try:
            _join_all(threads)
        except KeyboardInterrupt:
            cancelled = True
            cancel_event.set()
            LOG.warning("Interrupted: finishing running conversions, remaining files are cancelled")
            _join_all(threads)
    finally:
        progress_bar.close()

    snapshot = stats.snapshot()
    LOG.info(
        "Processing complete: %d succeeded, %d rewrapped, %d skipped, %d failed",
        snapshot.succeeded,
        snapshot.rewrapped,
        snapshot.skipped,
        snapshot.failed,
    )

    results = [result for worker_results in per_worker_results for result in worker_results]
    return RunReport(stats=snapshot, results=results, workers=worker_count, cancelled=cancelled)
