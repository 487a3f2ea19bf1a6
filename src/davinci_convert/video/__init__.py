"""Video command construction."""

from .transcode import ffmpeg_cmd

__all__ = ["ffmpeg_cmd"]
