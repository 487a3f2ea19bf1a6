"""Conversion CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ...config.profiles import ConversionMode, EditingCodec
from ...core import ConfigurationError, FFmpegError, FFmpegProbe, ProcessingError
from ..summary import print_failure_table, print_header, print_summary

if TYPE_CHECKING:
    import argparse

    from ...core import ConfigManager

LOG = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


class ConvertCommands:
    """Convert command handler."""

    def __init__(self, config_manager: ConfigManager) -> None:
        """Initialize convert command handler."""
        self.config_manager = config_manager

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """Add convert arguments to parser."""
        parser.add_argument("path", type=Path, help="Input file or directory to process")
        parser.add_argument(
            "--output-dir",
            "-o",
            type=Path,
            metavar="DIR",
            help="Output directory for converted files (defaults to each input's directory)",
        )
        parser.add_argument(
            "--mode",
            choices=[mode.value for mode in ConversionMode],
            help="editing: DNxHR/ProRes for DaVinci Resolve; export: H.264 for universal playback",
        )
        parser.add_argument(
            "--codec",
            choices=[codec.value for codec in EditingCodec],
            help="Intermediate codec for editing mode",
        )
        parser.add_argument(
            "--quality",
            "-q",
            help="Quality tier for editing: dnxhr lb|sq|hq|hqx|444, prores proxy|lt|standard|hq",
        )
        parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing output files")
        parser.add_argument("--workers", "-w", type=int, metavar="N", help="Number of parallel conversions")
        parser.add_argument("--timeout", type=float, metavar="SECONDS", help="Abort a single conversion after SECONDS")
        parser.add_argument(
            "--no-recursive",
            dest="recursive",
            action="store_false",
            help="Only look at files directly inside the input directory",
        )
        parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")

    def handle_command(self, args: argparse.Namespace) -> int:
        """Handle convert command execution."""
        try:
            config = self.config_manager.build_conversion_config()
        except ConfigurationError as e:
            LOG.error("%s", e)
            return EXIT_USAGE

        try:
            FFmpegProbe.check_availability()
        except FFmpegError:
            return EXIT_FAILURES

        from ...processors import ConvertProcessor

        print_header(config)
        processor = ConvertProcessor(config)

        try:
            report = processor.process_directory(
                args.path,
                recursive=getattr(args, "recursive", True),
                show_progress=not getattr(args, "no_progress", False),
            )
        except ProcessingError as e:
            LOG.error("Error accessing path: %s", e)
            return EXIT_FAILURES

        if report.stats.total == 0:
            print("⚠️  Warning: No media files found")

        print_summary(report)
        print_failure_table(report.failures)

        if report.cancelled:
            return EXIT_INTERRUPTED
        return EXIT_OK if report.stats.failed == 0 else EXIT_FAILURES
