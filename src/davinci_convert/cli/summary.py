"""Console header, run summary and failure table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config.constants import ERROR_MESSAGE_TRUNCATE_LENGTH

if TYPE_CHECKING:
    from ..core import ConversionConfig, ProcessingResult
    from ..core.directory_processor import RunReport

# Constants for table formatting
RULE_WIDTH = 40
TABLE_WIDTH = 80
MAX_FILENAME_LENGTH = 37
FILENAME_TRUNCATE_LENGTH = 34


def print_header(config: ConversionConfig) -> None:
    """Print the run banner with the effective settings."""
    print("=" * RULE_WIDTH)
    print("  DaVinci Converter")
    print("=" * RULE_WIDTH)
    print(config.describe())

    if config.output_dir:
        print(f"Output directory: {config.output_dir}")
    if config.dry_run:
        print("🔍 DRY RUN MODE - No files will be converted")
    if config.force:
        print("⚠️  Force mode enabled - existing files will be overwritten")

    print("-" * RULE_WIDTH)


def format_duration(seconds: float) -> str:
    """Render elapsed wall-clock time, e.g. ``1h 02m 03s`` or ``4.2s``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes, secs = divmod(int(round(seconds)), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def print_summary(report: RunReport) -> None:
    """Print the final counts; shown even when nothing was found or everything failed."""
    stats = report.stats
    print("\n" + "=" * RULE_WIDTH)
    if report.cancelled:
        print(f"⚠️  Interrupted after {format_duration(stats.elapsed)}")
    else:
        print(f"✓ Completed in {format_duration(stats.elapsed)}")
    print(
        f"Total: {stats.total} | Success: {stats.succeeded} | Rewrapped: {stats.rewrapped} | "
        f"Skipped: {stats.skipped} | Failed: {stats.failed}"
    )
    print("=" * RULE_WIDTH)


def print_failure_table(failed_results: list[ProcessingResult]) -> None:
    """
    Print a simple table showing conversion failures.

    Args:
        failed_results: ProcessingResult objects with FAILED status

    """
    if not failed_results:
        return

    print("\n" + "=" * TABLE_WIDTH)
    print(f"{'CONVERSION FAILURES':^{TABLE_WIDTH}}")
    print("=" * TABLE_WIDTH)
    print(f"Total failed: {len(failed_results)} files\n")

    print(f"{'FILE':<40} | {'ERROR':<35}")
    print("-" * TABLE_WIDTH)

    for result in sorted(failed_results, key=lambda r: str(r.source_file)):
        filename = result.source_file.name
        if len(filename) > MAX_FILENAME_LENGTH:
            filename = filename[:FILENAME_TRUNCATE_LENGTH] + "..."

        # First line only; ffmpeg details follow on later lines
        error_msg = (result.message or "Unknown error").splitlines()[0]
        if len(error_msg) > ERROR_MESSAGE_TRUNCATE_LENGTH:
            error_msg = error_msg[: ERROR_MESSAGE_TRUNCATE_LENGTH - 3] + "..."

        print(f"{filename:<40} | {error_msg}")

    print("\n💡 TIP: Check FFmpeg codecs, free disk space, or rerun with -v for ffmpeg output\n")
