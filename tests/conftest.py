"""Shared fixtures for the converter tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from davinci_convert.config.constants import DEFAULT_MEDIA_EXTENSIONS
from davinci_convert.config.profiles import (
    DEFAULT_ACCEPTABLE_AUDIO,
    ConversionMode,
    EditingCodec,
    get_target_profile,
)
from davinci_convert.core import CodecType, ConversionConfig, ProbeResult, StreamInfo


def build_config(
    mode: str = "editing",
    codec: str = "dnxhr",
    quality: str = "hq",
    **overrides: object,
) -> ConversionConfig:
    """Build a run configuration without touching config files or psutil."""
    conversion_mode = ConversionMode.parse(mode)
    editing_codec = EditingCodec.parse(codec)
    profile = get_target_profile(conversion_mode, editing_codec)
    values: dict = {
        "mode": conversion_mode,
        "codec": editing_codec,
        "quality": quality if profile.has_quality_tiers else "",
        "profile": profile,
        "video_encoding": profile.video_encoding(quality),
        "acceptable_audio_codecs": frozenset(DEFAULT_ACCEPTABLE_AUDIO[conversion_mode]),
        "extensions": frozenset(DEFAULT_MEDIA_EXTENSIONS),
        "workers": 1,
    }
    values.update(overrides)
    return ConversionConfig(**values)


def probe_of(*streams: tuple[str, str]) -> ProbeResult:
    """Build a probe result from ``(codec_type, codec_name)`` pairs."""
    return ProbeResult.from_streams(
        StreamInfo(codec_name=name, codec_type=CodecType.from_ffprobe(kind)) for kind, name in streams
    )


@pytest.fixture
def make_config() -> Callable[..., ConversionConfig]:
    return build_config


@pytest.fixture
def media_dir(tmp_path: Path) -> Path:
    """Directory for fake source clips."""
    directory = tmp_path / "footage"
    directory.mkdir()
    return directory
