"""Utility CLI commands."""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

from ...config.constants import REQUIRED_EXECUTABLES
from ...config.profiles import ConversionMode, EditingCodec, get_target_profile, valid_qualities
from ...core.workers import describe_system

if TYPE_CHECKING:
    import argparse

    from ...core import ConfigManager

LOG = logging.getLogger(__name__)


class UtilityCommands:
    """Utility command handlers."""

    def __init__(self, config_manager: ConfigManager) -> None:
        """Initialize utility commands handler."""
        self.config_manager = config_manager

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        """The info command takes no arguments of its own."""

    def handle_command(self, args: argparse.Namespace) -> int:
        """Show tool availability, configuration and host information."""
        return self._handle_info(args)

    def _handle_info(self, _args: argparse.Namespace) -> int:
        """Handle info display."""
        missing = False
        print("External tools:")
        for exe in REQUIRED_EXECUTABLES:
            path = shutil.which(exe)
            if path:
                print(f"  ✓ {exe}: {path}")
            else:
                missing = True
                print(f"  ✗ {exe}: not found in PATH")

        settings = self.config_manager.config
        print("\nConfiguration:")
        print(f"  File: {settings.source or 'built-in defaults'}")
        defaults = settings.global_
        print(f"  Default mode: {defaults.mode} | codec: {defaults.codec} | quality: {defaults.quality}")
        for mode in ConversionMode:
            codecs = ", ".join(settings.profile_settings(mode).acceptable_audio_codecs) or "none"
            print(f"  Acceptable audio ({mode.value}): {codecs}")

        print("\nQuality tiers:")
        for codec in EditingCodec:
            profile = get_target_profile(ConversionMode.EDITING, codec)
            tiers = ", ".join(valid_qualities(ConversionMode.EDITING, codec))
            print(f"  {profile.name}: {tiers} (default {profile.default_quality})")

        system = describe_system()
        if system:
            print("\nSystem:")
            print(f"  CPU cores: {system['physical_cores']} physical, {system['logical_cores']} logical")
            print(f"  Memory: {system['memory_total_gb']:.1f} GB ({system['memory_percent']:.0f}% used)")

        if missing:
            LOG.error("ffmpeg is not fully installed; conversions will not run")
            return 1
        return 0
