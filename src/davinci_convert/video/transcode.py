"""FFmpeg command construction for each conversion action."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config.constants import EVEN_DIMENSIONS_FILTER
from ..core.media import Action

if TYPE_CHECKING:
    from pathlib import Path

    from ..core.config import ConversionConfig

LOG = logging.getLogger(__name__)

STREAM_SELECTION = ["-map", "0:v:0", "-map", "0:a?", "-map_metadata", "0"]


def ffmpeg_cmd(input_path: Path, output_path: Path, action: Action, config: ConversionConfig) -> list[str]:
    """
    Generate the FFmpeg command that performs an action.

    Args:
        input_path: Source media file
        output_path: File to write
        action: Classification result; SKIP and UNSUPPORTED have no command
        config: Run configuration selecting encoders

    Returns:
        FFmpeg command as list of strings

    """
    if not action.needs_ffmpeg:
        msg = f"No ffmpeg command for action {action.name}"
        raise ValueError(msg)

    cmd = ["ffmpeg", "-hide_banner", "-y" if config.force else "-n", "-i", str(input_path)]

    if action is Action.REWRAP:
        # Every stream and the global metadata move over untouched
        cmd.extend(["-map", "0", "-c", "copy", "-map_metadata", "0"])
    else:
        cmd.extend(STREAM_SELECTION)

        if action.reencodes_video:
            cmd.extend(config.video_encoding.to_args())
            cmd.extend(["-vf", EVEN_DIMENSIONS_FILTER])
        else:
            cmd.extend(["-c:v", "copy"])

        if action.reencodes_audio:
            cmd.extend(config.audio_encoding.to_args())
        else:
            cmd.extend(["-c:a", "copy"])

    cmd.extend(["-movflags", "+faststart", str(output_path)])
    return cmd
