"""End-to-end tests for discovery, the conversion pipeline and the worker pool."""

import queue
import threading
from collections.abc import Iterator
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from conftest import build_config, probe_of

from davinci_convert.core import (
    Action,
    DirectoryCreationError,
    MediaProcessor,
    ProbeError,
    ProcessingError,
    ProcessingResult,
    ProcessingStatus,
)
from davinci_convert.core.directory_processor import (
    _CLOSED,
    _worker,
    discover_media_files,
    format_result_line,
    process_paths,
)
from davinci_convert.core.ffmpeg import ExternalExecutionError
from davinci_convert.core.file_manager import FileManager
from davinci_convert.core.stats import ConversionStats
from davinci_convert.processors import ConvertProcessor

# Stream layouts keyed by the file stem's first word
PROBES = {
    "ready": probe_of(("video", "dnxhd"), ("audio", "pcm_s16le")),
    "wrapped": probe_of(("video", "dnxhd"), ("audio", "pcm_s24le")),
    "camera": probe_of(("video", "h264"), ("audio", "pcm_s16le")),
    "phone": probe_of(("video", "hevc"), ("audio", "aac")),
    "recorder": probe_of(("video", "dnxhd"), ("audio", "mp3")),
    "voice": probe_of(("audio", "aac")),
}


def _probe_for(file_path: Path):
    kind = file_path.stem.split("_")[0]
    if kind == "corrupt":
        msg = f"ffprobe failed for {file_path}: Invalid data found"
        raise ProbeError(msg, file_path=file_path)
    return PROBES[kind]


@pytest.fixture
def ffmpeg_mocks() -> Iterator[SimpleNamespace]:
    """Replace ffprobe and ffmpeg for every processor built inside the test."""
    with (
        patch("davinci_convert.processors.convert_processor.FFmpegProbe") as mock_probe,
        patch("davinci_convert.processors.convert_processor.FFmpegProcessor") as mock_processor_class,
    ):
        mock_probe.probe_streams.side_effect = _probe_for
        yield SimpleNamespace(probe=mock_probe, run=mock_processor_class.return_value.run_command)


def _touch(directory: Path, *names: str) -> list[Path]:
    paths = []
    for name in names:
        path = directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"\x00")
        paths.append(path)
    return paths


def _run(config, path: Path):
    return ConvertProcessor(config).process_directory(path, show_progress=False)


def test_scenario_skip(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    """A file already in the target format is skipped without running ffmpeg."""
    (source,) = _touch(media_dir, "ready.mov")

    report = _run(build_config(), media_dir)

    assert report.action_for(source) is Action.SKIP
    assert (report.stats.total, report.stats.skipped) == (1, 1)
    assert report.stats.completed == 1
    ffmpeg_mocks.run.assert_not_called()


def test_scenario_rewrap(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    """Matching streams in another container are copied into the target container."""
    (source,) = _touch(media_dir, "wrapped.mxf")

    report = _run(build_config(), media_dir)

    assert report.action_for(source) is Action.REWRAP
    assert report.stats.rewrapped == 1
    assert report.stats.succeeded == 0

    command = ffmpeg_mocks.run.call_args.args[0]
    assert command[command.index("-c") + 1] == "copy"
    assert command[command.index("-map_metadata") + 1] == "0"
    assert "-c:v" not in command
    assert command[-1] == str(media_dir / "wrapped_converted.mov")


def test_scenario_convert_video(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    (source,) = _touch(media_dir, "camera.mp4")

    report = _run(build_config(), media_dir)

    assert report.action_for(source) is Action.CONVERT_VIDEO
    assert report.stats.succeeded == 1

    command = ffmpeg_mocks.run.call_args.args[0]
    assert command[command.index("-c:v") + 1] == "dnxhd"
    assert command[command.index("-c:a") + 1] == "copy"


def test_scenario_no_files(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    """An empty input finishes cleanly without starting workers."""
    _touch(media_dir, "notes.txt")

    with patch("davinci_convert.core.directory_processor.threading.Thread") as mock_thread:
        report = _run(build_config(workers=4), media_dir)

    mock_thread.assert_not_called()
    assert report.workers == 0
    assert report.results == []
    assert report.stats.total == 0
    assert report.stats.completed == 0
    ffmpeg_mocks.probe.probe_streams.assert_not_called()


def test_scenario_destination_conflict(
    tmp_path: Path, media_dir: Path, ffmpeg_mocks: SimpleNamespace
) -> None:
    """An existing output fails the file before anything is created, probed or run."""
    (source,) = _touch(media_dir, "camera.mp4")
    _touch(tmp_path / "out", "camera_converted.mov")

    with patch.object(FileManager, "ensure_output_dir") as mock_mkdir:
        report = _run(build_config(output_dir=tmp_path / "out"), media_dir)

    assert report.stats.failed == 1
    assert "Destination exists" in report.failures[0].message
    assert report.failures[0].source_file == source
    mock_mkdir.assert_not_called()
    ffmpeg_mocks.probe.probe_streams.assert_not_called()
    ffmpeg_mocks.run.assert_not_called()


def test_force_overwrites_existing_destination(
    tmp_path: Path, media_dir: Path, ffmpeg_mocks: SimpleNamespace
) -> None:
    _touch(media_dir, "camera.mp4")
    _touch(tmp_path / "out", "camera_converted.mov")

    report = _run(build_config(force=True, output_dir=tmp_path / "out"), media_dir)

    assert report.stats.succeeded == 1
    assert "-y" in ffmpeg_mocks.run.call_args.args[0]


def test_unsupported_counts_as_failed(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    (source,) = _touch(media_dir, "voice.mov")

    report = _run(build_config(), media_dir)

    assert report.action_for(source) is Action.UNSUPPORTED
    assert report.stats.failed == 1
    assert report.failures[0].message == "No video stream found"
    ffmpeg_mocks.run.assert_not_called()


def test_probe_failure_does_not_stop_the_batch(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    _touch(media_dir, "corrupt.mov", "phone.mov")

    report = _run(build_config(workers=2), media_dir)

    assert report.stats.failed == 1
    assert report.stats.succeeded == 1
    assert "Invalid data found" in report.failures[0].message


def test_ffmpeg_failure_removes_partial_output(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    (source,) = _touch(media_dir, "phone.mkv")
    output = media_dir / "phone_converted.mov"

    def fail_halfway(command: list[str], file_path: Path) -> None:
        output.write_bytes(b"partial")
        msg = "ffmpeg failed with return code 1: Conversion failed!"
        raise ExternalExecutionError(msg, command=command, return_code=1, file_path=file_path)

    ffmpeg_mocks.run.side_effect = fail_halfway

    report = _run(build_config(), media_dir)

    assert report.stats.failed == 1
    assert report.action_for(source) is Action.FULL_CONVERT
    assert report.failures[0].command is not None
    assert not output.exists()


def test_dry_run_plans_without_side_effects(tmp_path: Path, media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    _touch(media_dir, "ready.mov", "wrapped.mxf", "phone.mp4")
    output_dir = tmp_path / "out"

    report = _run(build_config(dry_run=True, output_dir=output_dir), media_dir)

    assert (report.stats.skipped, report.stats.rewrapped, report.stats.succeeded) == (1, 1, 1)
    assert all(result.dry_run for result in report.results if result.status is ProcessingStatus.SUCCESS)
    assert not output_dir.exists()
    ffmpeg_mocks.run.assert_not_called()


def test_output_dir_is_created(tmp_path: Path, media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    _touch(media_dir, "phone.mp4")
    output_dir = tmp_path / "out" / "day1"

    report = _run(build_config(output_dir=output_dir), media_dir)

    assert output_dir.is_dir()
    assert report.results[0].output_file == output_dir / "phone_converted.mov"


def _write_unless_exists(command: list[str], file_path: Path) -> None:
    """Stand-in for ffmpeg -n: refuses an existing output, otherwise writes it."""
    output = Path(command[-1])
    if output.exists() and "-y" not in command:
        msg = f"ffmpeg failed with return code 1: File '{output}' already exists. Exiting."
        raise ExternalExecutionError(msg, command=command, return_code=1, file_path=file_path)
    output.write_bytes(b"converted")


@pytest.mark.parametrize("workers", [1, 2])
def test_same_stem_sources_keep_one_owner(media_dir: Path, ffmpeg_mocks: SimpleNamespace, workers: int) -> None:
    """Sources that map to the same output: the first in queue order converts, the other fails untouched."""
    first, second = _touch(media_dir, "camera.mkv", "camera.mp4")
    output = media_dir / "camera_converted.mov"
    ffmpeg_mocks.run.side_effect = _write_unless_exists

    report = _run(build_config(workers=workers), media_dir)

    assert (report.stats.succeeded, report.stats.failed) == (1, 1)
    assert report.failures[0].source_file == second
    assert "already written by camera.mkv" in report.failures[0].message
    assert ffmpeg_mocks.run.call_count == 1
    assert output.read_bytes() == b"converted"
    for result in report.results:
        if result.status is ProcessingStatus.SUCCESS:
            assert result.source_file == first
            assert result.output_file.exists()


def test_same_stem_sources_with_force_write_once(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    _touch(media_dir, "camera.mkv", "camera.mp4")

    report = _run(build_config(workers=2, force=True), media_dir)

    assert (report.stats.succeeded, report.stats.failed) == (1, 1)
    assert ffmpeg_mocks.run.call_count == 1


def test_failed_run_keeps_output_it_did_not_create(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    """An output that appears after the destination check belongs to someone else and survives the failure."""
    (source,) = _touch(media_dir, "phone.mkv")
    output = media_dir / "phone_converted.mov"

    def probe_then_other_writer(file_path: Path):
        output.write_bytes(b"someone else")
        return _probe_for(file_path)

    ffmpeg_mocks.probe.probe_streams.side_effect = probe_then_other_writer
    ffmpeg_mocks.run.side_effect = _write_unless_exists

    report = _run(build_config(), media_dir)

    assert report.failures[0].source_file == source
    assert "already exists" in report.failures[0].message
    assert output.read_bytes() == b"someone else"


def test_directory_creation_failure_fails_only_that_file(
    tmp_path: Path, media_dir: Path, ffmpeg_mocks: SimpleNamespace
) -> None:
    _touch(media_dir, "phone.mp4", "ready.mov")
    error = DirectoryCreationError("Failed to create output directory out: Permission denied")

    with patch.object(FileManager, "ensure_output_dir", side_effect=error) as mock_mkdir:
        report = _run(build_config(output_dir=tmp_path / "out"), media_dir)

    assert report.stats.failed == 1
    assert report.stats.skipped == 1
    assert report.failures[0].source_file.name == "phone.mp4"
    assert "Permission denied" in report.failures[0].message
    mock_mkdir.assert_called_once()
    ffmpeg_mocks.run.assert_not_called()


def test_output_dir_untouched_when_nothing_converts(
    tmp_path: Path, media_dir: Path, ffmpeg_mocks: SimpleNamespace
) -> None:
    """Skipped, unsupported and unreadable files leave no empty output directory behind."""
    _touch(media_dir, "ready.mov", "voice.mov", "corrupt.mov")
    output_dir = tmp_path / "out"

    report = _run(build_config(output_dir=output_dir), media_dir)

    assert (report.stats.skipped, report.stats.failed) == (1, 2)
    assert not output_dir.exists()


def _mixed_batch(directory: Path) -> list[Path]:
    names = ["ready", "wrapped", "camera", "phone", "recorder", "voice", "corrupt"]
    extensions = ["mov", "mp4", "mxf"]
    return _touch(directory, *[f"{name}_{i}.{extensions[i % 3]}" for i in range(4) for name in names])


@pytest.mark.parametrize("workers", [1, 2, 3, 8, 64])
def test_outcomes_add_up_for_any_worker_count(media_dir: Path, ffmpeg_mocks: SimpleNamespace, workers: int) -> None:
    files = _mixed_batch(media_dir)

    report = _run(build_config(workers=workers), media_dir)

    assert report.stats.total == len(files)
    assert report.stats.completed == len(files)
    assert len(report.results) == len(files)
    assert report.workers == min(workers, len(files))


def test_parallelism_does_not_change_outcomes(media_dir: Path, ffmpeg_mocks: SimpleNamespace) -> None:
    files = _mixed_batch(media_dir)

    serial = _run(build_config(workers=1), media_dir)
    parallel = _run(build_config(workers=len(files)), media_dir)

    assert {f: serial.action_for(f) for f in files} == {f: parallel.action_for(f) for f in files}
    for field_name in ("total", "succeeded", "skipped", "failed", "rewrapped"):
        assert getattr(serial.stats, field_name) == getattr(parallel.stats, field_name)


class _ExplodingProcessor(MediaProcessor):
    """Processor that breaks its own contract for one file."""

    def __init__(self) -> None:
        super().__init__("Exploding")

    def can_process(self, file_path: Path) -> bool:
        return True

    def process_file(self, file_path: Path) -> ProcessingResult:
        if file_path.name == "bad.mov":
            msg = "boom"
            raise RuntimeError(msg)
        return ProcessingResult(source_file=file_path, status=ProcessingStatus.SUCCESS, action=Action.FULL_CONVERT)


def test_unexpected_exception_becomes_failure() -> None:
    files = [Path("a.mov"), Path("bad.mov"), Path("c.mov")]

    report = process_paths(_ExplodingProcessor(), files, 2, show_progress=False)

    assert report.stats.failed == 1
    assert report.stats.succeeded == 2
    assert report.failures[0].message == "Unexpected error: boom"


def test_cancelled_worker_fails_remaining_files() -> None:
    """Once cancellation is requested, queued files are recorded without being processed."""
    processor = _ExplodingProcessor()
    jobs: queue.Queue = queue.Queue()
    for name in ("a.mov", "b.mov"):
        jobs.put(Path(name))
    jobs.put(_CLOSED)

    stats = ConversionStats(total=2)
    results: list[ProcessingResult] = []
    cancel_event = threading.Event()
    cancel_event.set()

    with patch.object(processor, "process_file") as mock_process, patch(
        "davinci_convert.core.directory_processor.tqdm"
    ) as mock_tqdm:
        _worker(processor, jobs, stats, results, cancel_event, mock_tqdm.return_value)

    mock_process.assert_not_called()
    assert [r.message for r in results] == ["Cancelled before processing"] * 2
    assert stats.snapshot().failed == 2
    assert jobs.unfinished_tasks == 0


def test_discover_filters_and_recurses(media_dir: Path) -> None:
    _touch(media_dir, "a.MOV", "notes.txt", "nested/b.mxf", "nested/deeper/c.mp4")
    processor = ConvertProcessor(build_config())

    found = discover_media_files(processor, media_dir)
    flat = discover_media_files(processor, media_dir, recursive=False)

    assert [p.name for p in found] == ["a.MOV", "b.mxf", "c.mp4"]
    assert [p.name for p in flat] == ["a.MOV"]


def test_discover_single_file(media_dir: Path) -> None:
    (clip,) = _touch(media_dir, "clip.mts")
    processor = ConvertProcessor(build_config())

    assert discover_media_files(processor, clip) == [clip]


def test_discover_missing_path(tmp_path: Path) -> None:
    with pytest.raises(ProcessingError, match="does not exist"):
        discover_media_files(ConvertProcessor(build_config()), tmp_path / "nope")


@pytest.mark.parametrize(
    ("status", "action", "dry_run", "expected"),
    [
        (ProcessingStatus.FAILED, None, False, "✗ Error: x.mov: oops"),
        (ProcessingStatus.SKIPPED, Action.SKIP, False, "✓ Skipped: x.mov (already compatible)"),
        (ProcessingStatus.SUCCESS, Action.CONVERT_AUDIO, True, "🔍 Would process: x.mov (convert audio)"),
        (ProcessingStatus.SUCCESS, Action.REWRAP, False, "↻ Rewrapped: x.mov"),
        (ProcessingStatus.SUCCESS, Action.FULL_CONVERT, False, "→ Processed: x.mov (full convert)"),
    ],
)
def test_format_result_line(status: ProcessingStatus, action: Action, dry_run: bool, expected: str) -> None:
    result = ProcessingResult(Path("x.mov"), status, action=action, message="oops", dry_run=dry_run)
    assert format_result_line(result) == expected
