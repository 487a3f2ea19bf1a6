"""Decide what a probed file needs to reach the target format."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .media import Action

if TYPE_CHECKING:
    from pathlib import Path

    from .config import ConversionConfig
    from .media import ProbeResult

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompatibilityCheck:
    """Which parts of a file already match the target."""

    video_match: bool
    audio_match: bool
    container_match: bool

    def action(self) -> Action:
        """
        Apply the decision table.

        Container correctness only matters when both streams match: any
        re-encode writes the target container anyway.
        """
        if self.video_match and self.audio_match:
            return Action.SKIP if self.container_match else Action.REWRAP
        if self.video_match:
            return Action.CONVERT_AUDIO
        if self.audio_match:
            return Action.CONVERT_VIDEO
        return Action.FULL_CONVERT


def container_extension(file_path: Path) -> str:
    """Lowercase extension without the dot."""
    return file_path.suffix.lower().lstrip(".")


def check_compatibility(probe: ProbeResult, file_path: Path, config: ConversionConfig) -> CompatibilityCheck | None:
    """Compare a probed file against the target; None when it has no video stream."""
    video = probe.video
    if video is None:
        return None

    audio = probe.audio
    return CompatibilityCheck(
        video_match=video.codec_name.lower() == config.target_video_codec,
        audio_match=audio is None or audio.codec_name.lower() in config.acceptable_audio_codecs,
        container_match=container_extension(file_path) == config.target_container_ext,
    )


def classify(probe: ProbeResult, file_path: Path, config: ConversionConfig) -> Action:
    """Classify a file into the action that brings it to the target format."""
    check = check_compatibility(probe, file_path, config)
    if check is None:
        LOG.debug("%s: no video stream", file_path.name)
        return Action.UNSUPPORTED

    action = check.action()
    LOG.debug("Analysis result for %s: %s (%s)", file_path.name, action.name, check)
    return action
