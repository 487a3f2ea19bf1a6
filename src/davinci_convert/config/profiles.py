"""Target delivery profiles and their encoder lookup tables."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class ConversionMode(Enum):
    """What the converted footage is for."""

    EDITING = "editing"
    EXPORT = "export"

    @classmethod
    def parse(cls, value: str) -> ConversionMode:
        """Parse a mode name, accepting the short ``edit`` alias."""
        normalized = value.strip().lower()
        if normalized == "edit":
            normalized = "editing"
        try:
            return cls(normalized)
        except ValueError:
            msg = f"Invalid mode '{value}'. Use 'editing' or 'export'"
            raise ValueError(msg) from None


class EditingCodec(Enum):
    """Intermediate codecs DaVinci Resolve edits natively."""

    DNXHR = "dnxhr"
    PRORES = "prores"

    @classmethod
    def parse(cls, value: str) -> EditingCodec:
        """Parse a codec name; ``dnxhd`` is accepted as an alias for DNxHR."""
        normalized = value.strip().lower()
        if normalized == "dnxhd":
            normalized = "dnxhr"
        try:
            return cls(normalized)
        except ValueError:
            msg = f"Invalid codec '{value}'. Use 'dnxhr' or 'prores'"
            raise ValueError(msg) from None


@dataclass(frozen=True)
class VideoEncoding:
    """Video encoder arguments for one quality tier."""

    args: tuple[str, ...]
    pix_fmt: str

    def to_args(self) -> list[str]:
        """Return the ffmpeg arguments selecting this encoding."""
        return [*self.args, "-pix_fmt", self.pix_fmt]


@dataclass(frozen=True)
class AudioEncoding:
    """Audio encoder arguments used whenever audio has to be re-encoded."""

    codec: str
    bitrate: str | None = None

    def to_args(self) -> list[str]:
        """Return the ffmpeg arguments selecting this encoding."""
        args = ["-c:a", self.codec]
        if self.bitrate:
            args.extend(["-b:a", self.bitrate])
        return args


@dataclass(frozen=True)
class TargetProfile:
    """Everything that defines one deliverable format."""

    name: str
    video_codec: str  # codec_name as reported by ffprobe
    container_ext: str
    output_suffix: str
    audio_encoding: AudioEncoding
    qualities: Mapping[str, VideoEncoding] = field(default_factory=dict)
    default_quality: str | None = None
    fixed_encoding: VideoEncoding | None = None

    @property
    def has_quality_tiers(self) -> bool:
        """Whether the quality option selects anything for this profile."""
        return bool(self.qualities)

    def video_encoding(self, quality: str | None) -> VideoEncoding:
        """Resolve the video encoding for a quality tier."""
        if not self.has_quality_tiers:
            if self.fixed_encoding is None:
                msg = f"Profile '{self.name}' defines no video encoding"
                raise ValueError(msg)
            return self.fixed_encoding

        tier = (quality or self.default_quality or "").lower()
        if tier not in self.qualities:
            msg = f"Invalid quality '{quality}' for {self.name}. Valid options: {', '.join(self.qualities)}"
            raise ValueError(msg)
        return self.qualities[tier]


PCM_AUDIO = AudioEncoding(codec="pcm_s16le")
AAC_AUDIO = AudioEncoding(codec="aac", bitrate="320k")

DNXHR_QUALITIES: Mapping[str, VideoEncoding] = MappingProxyType(
    {
        "lb": VideoEncoding(("-c:v", "dnxhd", "-profile:v", "dnxhr_lb"), "yuv422p"),
        "sq": VideoEncoding(("-c:v", "dnxhd", "-profile:v", "dnxhr_sq"), "yuv422p"),
        "hq": VideoEncoding(("-c:v", "dnxhd", "-profile:v", "dnxhr_hq"), "yuv422p"),
        "hqx": VideoEncoding(("-c:v", "dnxhd", "-profile:v", "dnxhr_hqx"), "yuv422p10le"),
        "444": VideoEncoding(("-c:v", "dnxhd", "-profile:v", "dnxhr_444"), "yuv444p10le"),
    }
)

PRORES_QUALITIES: Mapping[str, VideoEncoding] = MappingProxyType(
    {
        "proxy": VideoEncoding(("-c:v", "prores_ks", "-profile:v", "0", "-vendor", "ap10"), "yuv422p10le"),
        "lt": VideoEncoding(("-c:v", "prores_ks", "-profile:v", "1", "-vendor", "ap10"), "yuv422p10le"),
        "standard": VideoEncoding(("-c:v", "prores_ks", "-profile:v", "2", "-vendor", "ap10"), "yuv422p10le"),
        "hq": VideoEncoding(("-c:v", "prores_ks", "-profile:v", "3", "-vendor", "ap10"), "yuv422p10le"),
    }
)

DNXHR_PROFILE = TargetProfile(
    name="DNxHR",
    video_codec="dnxhd",
    container_ext="mov",
    output_suffix="_converted",
    audio_encoding=PCM_AUDIO,
    qualities=DNXHR_QUALITIES,
    default_quality="hq",
)

PRORES_PROFILE = TargetProfile(
    name="ProRes",
    video_codec="prores",
    container_ext="mov",
    output_suffix="_converted",
    audio_encoding=PCM_AUDIO,
    qualities=PRORES_QUALITIES,
    default_quality="hq",
)

EXPORT_PROFILE = TargetProfile(
    name="H.264 export",
    video_codec="h264",
    container_ext="mp4",
    output_suffix="_export",
    audio_encoding=AAC_AUDIO,
    fixed_encoding=VideoEncoding(("-c:v", "libx264", "-preset", "slow", "-crf", "18"), "yuv420p"),
)

DEFAULT_ACCEPTABLE_AUDIO: Mapping[ConversionMode, tuple[str, ...]] = MappingProxyType(
    {
        ConversionMode.EDITING: ("pcm_s16le", "pcm_s24le", "pcm_s32le"),
        ConversionMode.EXPORT: ("aac",),
    }
)


def get_target_profile(mode: ConversionMode, codec: EditingCodec) -> TargetProfile:
    """Return the delivery profile for a mode/codec combination."""
    if mode is ConversionMode.EXPORT:
        return EXPORT_PROFILE
    if codec is EditingCodec.PRORES:
        return PRORES_PROFILE
    return DNXHR_PROFILE


def valid_qualities(mode: ConversionMode, codec: EditingCodec) -> tuple[str, ...]:
    """List the quality tiers accepted for a mode/codec combination."""
    return tuple(get_target_profile(mode, codec).qualities)
