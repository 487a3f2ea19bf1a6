"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ..core import ConfigManager, ProcessingOptions, with_config_overrides
from .commands import ConvertCommands, UtilityCommands
from .commands.convert import EXIT_INTERRUPTED

LOG = logging.getLogger(__name__)


class ConverterCLI:
    """Argument parsing and dispatch for davinci-convert."""

    def __init__(self, config_path: Path | None = None) -> None:
        self.config_manager = ConfigManager(config_path)
        self.convert_commands = ConvertCommands(self.config_manager)
        self.utility_commands = UtilityCommands(self.config_manager)

    @staticmethod
    def setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
        """Setup logging based on verbosity level; ``default_level`` applies without -v."""
        base_level = logging.getLevelName(default_level.upper())
        level_map = {
            0: base_level if isinstance(base_level, int) else logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG,
        }

        level = level_map.get(verbosity, logging.DEBUG)

        log_format = "%(levelname)s: %(name)s: %(message)s" if verbosity >= 2 else "%(levelname)s: %(message)s"

        logging.basicConfig(level=level, format=log_format, handlers=[logging.StreamHandler(sys.stderr)], force=True)

        # Full command lines only at -vv
        ffmpeg_logger = logging.getLogger("davinci_convert.core.ffmpeg")
        ffmpeg_logger.setLevel(logging.WARNING if verbosity < 2 else logging.NOTSET)

    def build_parser(self) -> argparse.ArgumentParser:
        """Assemble the top-level parser and its subcommands."""
        parser = argparse.ArgumentParser(
            prog="davinci-convert",
            description="Universal converter for DaVinci Resolve editing and video export",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Modes:
  editing - Converts to DNxHR/ProRes for editing
  export  - Exports to H.264 for universal compatibility

Examples:
  # Prepare a card dump for editing
  davinci-convert convert /path/to/footage --codec prores --quality hq

  # Export finished renders next to each other
  davinci-convert convert renders/ --mode export -o delivery/

  # See what would happen without converting
  davinci-convert convert /path/to/footage --dry-run
            """,
        )

        # Global options
        parser.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Increase verbosity (-v for info and ffmpeg output, -vv for debug)",
        )

        parser.add_argument("--config", type=Path, help="Path to configuration file")

        subparsers = parser.add_subparsers(dest="command", required=True, help="Available commands")

        convert_parser = subparsers.add_parser("convert", help="Convert media files")
        convert_parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Analyze files and show what would be done without converting",
        )
        self.convert_commands.add_arguments(convert_parser)

        info_parser = subparsers.add_parser("info", help="Show configuration and system info")
        self.utility_commands.add_arguments(info_parser)

        return parser

    @staticmethod
    def create_processing_options(args: argparse.Namespace) -> ProcessingOptions:
        """Collect the overrides the chosen subcommand defines; absent options stay None."""
        return ProcessingOptions(
            mode=getattr(args, "mode", None),
            codec=getattr(args, "codec", None),
            quality=getattr(args, "quality", None),
            output_dir=getattr(args, "output_dir", None),
            workers=getattr(args, "workers", None),
            timeout=getattr(args, "timeout", None),
            force=getattr(args, "force", False),
            dry_run=getattr(args, "dry_run", False),
            verbose=getattr(args, "verbose", 0) > 0,
        )

    def run(self, args: list[str] | None = None) -> int:
        """Parse arguments, configure logging and dispatch; returns the process exit code."""
        parser = self.build_parser()
        parsed_args = parser.parse_args(args)

        # --config replaces whatever config.yaml the working directory holds
        if getattr(parsed_args, "config", None):
            self.config_manager = ConfigManager(parsed_args.config)
            self.convert_commands.config_manager = self.config_manager
            self.utility_commands.config_manager = self.config_manager

        self.setup_logging(parsed_args.verbose, self.config_manager.config.global_.log_level)

        processing_options = self.create_processing_options(parsed_args)

        try:
            # Overrides only live for this invocation
            with with_config_overrides(self.config_manager) as config_mgr:
                config_mgr.apply_processing_options(processing_options)

                if parsed_args.command == "convert":
                    return self.convert_commands.handle_command(parsed_args)
                if parsed_args.command == "info":
                    return self.utility_commands.handle_command(parsed_args)
                parser.error(f"Unknown command: {parsed_args.command}")

        except KeyboardInterrupt:
            LOG.info("Interrupted by user")
            return EXIT_INTERRUPTED
        except Exception as e:
            LOG.exception("Unexpected error: %s", e)
            return 1

        return 0


def main() -> int:
    """Console script entry point."""
    cli = ConverterCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
