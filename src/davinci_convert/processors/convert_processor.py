"""Per-file conversion pipeline: probe, classify, pre-check, build, execute."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from ..core import (
    Action,
    FFmpegError,
    FFmpegProbe,
    FFmpegProcessor,
    FileManager,
    MediaProcessor,
    ProcessingError,
    ProcessingResult,
    ProcessingStatus,
    UnsupportedInputError,
)
from ..core.directory_processor import RunReport, discover_media_files, process_paths
from ..core.media import ProbeResult
from ..core.video_analysis import classify
from ..video.transcode import ffmpeg_cmd

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.config import ConversionConfig


class ConvertProcessor(MediaProcessor):
    """Brings video files to the configured editing or export format."""

    def __init__(self, config: ConversionConfig) -> None:
        super().__init__("ConvertProcessor")
        self.config = config
        self.ffmpeg = FFmpegProcessor(timeout=config.timeout, verbose=config.verbose)
        self.file_manager = FileManager(config)

    def can_process(self, file_path: Path) -> bool:
        """Check if file has one of the configured media extensions."""
        return file_path.suffix.lower() in self.config.extensions

    def probe(self, file_path: Path) -> ProbeResult:
        return FFmpegProbe.probe_streams(file_path)

    def analyze(self, file_path: Path) -> Action:
        """Probe and classify a file without touching anything."""
        return classify(self.probe(file_path), file_path, self.config)

    def process_file(self, file_path: Path) -> ProcessingResult:
        """Process a single file; every per-file error becomes a FAILED result."""
        start_time = time.time()
        output_path = self.file_manager.output_path_for(file_path)
        action: Action | None = None
        command: list[str] | None = None

        try:
            self.file_manager.claim_output(file_path, output_path)
            self.file_manager.check_destination(output_path)

            action = self.analyze(file_path)

            if action is Action.UNSUPPORTED:
                msg = "No video stream found"
                raise UnsupportedInputError(msg, file_path=file_path)

            if action is Action.SKIP:
                self.logger.info("Skipping %s: already compatible", file_path.name)
                return ProcessingResult(
                    source_file=file_path,
                    status=ProcessingStatus.SKIPPED,
                    action=action,
                    message="Already compatible",
                    processing_time=time.time() - start_time,
                )

            command = ffmpeg_cmd(file_path, output_path, action, self.config)

            if self.config.dry_run:
                self.logger.info("Dry run, would run: %s", " ".join(command))
                return ProcessingResult(
                    source_file=file_path,
                    status=ProcessingStatus.SUCCESS,
                    action=action,
                    message=f"Would {action.label}",
                    output_file=output_path,
                    processing_time=time.time() - start_time,
                    command=command,
                    dry_run=True,
                )

            self.file_manager.ensure_output_dir(output_path)
            self._execute(command, file_path, output_path)

            return ProcessingResult(
                source_file=file_path,
                status=ProcessingStatus.SUCCESS,
                action=action,
                message=f"{action.label.capitalize()} to {output_path.name}",
                output_file=output_path,
                processing_time=time.time() - start_time,
                command=command,
            )

        except ProcessingError as e:
            self.logger.error("Failed to process %s: %s", file_path.name, e)
            return ProcessingResult(
                source_file=file_path,
                status=ProcessingStatus.FAILED,
                action=action,
                message=str(e),
                output_file=output_path,
                processing_time=time.time() - start_time,
                command=command,
            )

    def _execute(self, command: list[str], file_path: Path, output_path: Path) -> None:
        """Run ffmpeg, deleting the partial output if it fails."""
        # Without --force ffmpeg runs with -n and never writes over a file that was already there
        created_here = self.config.force or not output_path.exists()
        try:
            self.ffmpeg.run_command(command, file_path)
        except FFmpegError:
            if created_here:
                self.file_manager.remove_partial_output(output_path)
            raise

    def process_directory(self, path: Path, *, recursive: bool = True, show_progress: bool = True) -> RunReport:
        """Discover media files under ``path`` and convert them with the worker pool."""
        files = discover_media_files(self, path, recursive=recursive)
        if not files:
            self.logger.warning("No media files found in %s", path)
        return self.process_files(files, show_progress=show_progress)

    def process_files(self, files: list[Path], *, show_progress: bool = True) -> RunReport:
        """Convert an explicit list of files with the worker pool."""
        self.file_manager.reserve_outputs(files)
        return process_paths(self, files, self.config.workers, show_progress=show_progress)
