"""Probed stream metadata and the actions derived from it."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any


class CodecType(Enum):
    """Elementary stream kinds the classifier distinguishes."""

    VIDEO = "video"
    AUDIO = "audio"
    OTHER = "other"

    @classmethod
    def from_ffprobe(cls, value: object) -> CodecType:
        """Map an ffprobe ``codec_type`` onto the closed set; subtitles, data etc. become OTHER."""
        if isinstance(value, str):
            normalized = value.lower()
            if normalized == "video":
                return cls.VIDEO
            if normalized == "audio":
                return cls.AUDIO
        return cls.OTHER


class Action(Enum):
    """What has to happen to a file to reach the target format."""

    SKIP = "skip"
    REWRAP = "rewrap"
    CONVERT_AUDIO = "convert_audio"
    CONVERT_VIDEO = "convert_video"
    FULL_CONVERT = "full_convert"
    UNSUPPORTED = "unsupported"

    @property
    def needs_ffmpeg(self) -> bool:
        """Whether the action runs an ffmpeg job."""
        return self not in (Action.SKIP, Action.UNSUPPORTED)

    @property
    def reencodes_video(self) -> bool:
        return self in (Action.CONVERT_VIDEO, Action.FULL_CONVERT)

    @property
    def reencodes_audio(self) -> bool:
        return self in (Action.CONVERT_AUDIO, Action.FULL_CONVERT)

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class StreamInfo:
    """One elementary stream of a probed file."""

    codec_name: str
    codec_type: CodecType


@dataclass(frozen=True)
class ProbeResult:
    """Ordered streams of one probed file."""

    streams: tuple[StreamInfo, ...] = ()

    @classmethod
    def from_streams(cls, streams: Iterable[StreamInfo]) -> ProbeResult:
        return cls(tuple(streams))

    @classmethod
    def from_ffprobe(cls, data: dict[str, Any]) -> ProbeResult:
        """
        Build a result from ffprobe's ``-show_streams`` JSON.

        Raises:
            ValueError: if the document does not have the expected shape

        """
        if not isinstance(data, dict):
            msg = "ffprobe output is not a JSON object"
            raise ValueError(msg)

        raw_streams = data.get("streams")
        if not isinstance(raw_streams, list):
            msg = "ffprobe output has no 'streams' list"
            raise ValueError(msg)

        streams = []
        for index, raw in enumerate(raw_streams):
            if not isinstance(raw, dict):
                msg = f"stream #{index} is not a JSON object"
                raise ValueError(msg)

            codec_name = raw.get("codec_name", "")
            if not isinstance(codec_name, str):
                msg = f"stream #{index} has a non-string codec_name"
                raise ValueError(msg)

            streams.append(
                StreamInfo(
                    codec_name=codec_name.lower(),
                    codec_type=CodecType.from_ffprobe(raw.get("codec_type")),
                )
            )

        return cls(tuple(streams))

    def first_of(self, codec_type: CodecType) -> StreamInfo | None:
        """Return the first stream of a kind, wherever it sits in the file."""
        return next((stream for stream in self.streams if stream.codec_type is codec_type), None)

    @property
    def video(self) -> StreamInfo | None:
        return self.first_of(CodecType.VIDEO)

    @property
    def audio(self) -> StreamInfo | None:
        return self.first_of(CodecType.AUDIO)

    def __iter__(self) -> Iterator[StreamInfo]:
        return iter(self.streams)

    def __len__(self) -> int:
        return len(self.streams)
