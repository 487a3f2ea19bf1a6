"""Run configuration: settings file plus command-line overrides, frozen for the run."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import ConverterSettings
from ..config import get_config as _get_global_config
from ..config.profiles import (
    AudioEncoding,
    ConversionMode,
    EditingCodec,
    TargetProfile,
    VideoEncoding,
    get_target_profile,
)
from .base import ConfigurationError
from .workers import resolve_worker_count

LOG = logging.getLogger(__name__)


@dataclass
class ProcessingOptions:
    """Command-line values that take precedence over config.yaml."""

    mode: str | None = None
    codec: str | None = None
    quality: str | None = None
    output_dir: Path | None = None
    workers: int | None = None
    timeout: float | None = None
    force: bool = False
    dry_run: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class ConversionConfig:
    """Immutable configuration shared by every worker of one run."""

    mode: ConversionMode
    codec: EditingCodec
    quality: str
    profile: TargetProfile
    video_encoding: VideoEncoding
    acceptable_audio_codecs: frozenset[str]
    extensions: frozenset[str]
    workers: int = 1
    output_dir: Path | None = None
    force: bool = False
    dry_run: bool = False
    verbose: bool = False
    timeout: float | None = None

    @property
    def target_video_codec(self) -> str:
        return self.profile.video_codec

    @property
    def target_container_ext(self) -> str:
        return self.profile.container_ext

    @property
    def output_suffix(self) -> str:
        return self.profile.output_suffix

    @property
    def audio_encoding(self) -> AudioEncoding:
        return self.profile.audio_encoding

    def describe(self) -> str:
        """One-line description for the run header."""
        if self.mode is ConversionMode.EXPORT:
            return f"Mode: Export | Workers: {self.workers}"
        return f"Mode: Editing | Codec: {self.profile.name} | Quality: {self.quality} | Workers: {self.workers}"


class ConfigManager:
    """Configuration manager with override support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """
        Initialize configuration manager.

        Args:
            config_path: YAML settings file; None uses ./config.yaml when present

        """
        self._config = ConverterSettings.load_from_file(config_path) if config_path else _get_global_config()
        self._overrides: dict[str, Any] = {}
        self._context_stack: list[dict[str, Any]] = []

    @property
    def config(self) -> ConverterSettings:
        """Settings as loaded, without overrides."""
        return self._config

    def get_value(self, key_path: str, default: object = None) -> object:
        """Look up a dotted key such as ``global_.quality``, overrides first."""
        if key_path in self._overrides:
            return self._overrides[key_path]

        try:
            value: object = self._config
            for part in key_path.split("."):
                value = getattr(value, part)
        except AttributeError:
            return default
        else:
            return value

    def set_override(self, key_path: str, value: object) -> None:
        """Override one dotted key until the enclosing layer is popped."""
        self._overrides[key_path] = value

    def push_context(self, overrides: dict[str, Any]) -> None:
        """Start a new override layer on top of the current one."""
        self._context_stack.append(self._overrides.copy())
        self._overrides.update(overrides)

    def pop_context(self) -> None:
        """Drop the innermost override layer."""
        if self._context_stack:
            self._overrides = self._context_stack.pop()

    def apply_processing_options(self, options: ProcessingOptions) -> None:
        """Layer command-line options over the loaded settings; unset options keep the file values."""
        overrides: dict[str, Any] = {
            "run.output_dir": options.output_dir,
            "run.force": options.force,
            "run.dry_run": options.dry_run,
            "run.verbose": options.verbose,
        }

        if options.mode is not None:
            overrides["global_.mode"] = options.mode
        if options.codec is not None:
            overrides["global_.codec"] = options.codec
        if options.quality is not None:
            overrides["global_.quality"] = options.quality
        if options.workers is not None:
            overrides["global_.default_workers"] = options.workers
        if options.timeout is not None:
            overrides["global_.timeout"] = options.timeout

        for key, value in overrides.items():
            self.set_override(key, value)

    def build_conversion_config(self) -> ConversionConfig:
        """
        Validate the effective settings and freeze them for a run.

        Raises:
            ConfigurationError: on an unknown mode, codec or quality tier, or a bad worker count

        """
        try:
            mode = ConversionMode.parse(str(self.get_value("global_.mode", "editing")))
            codec = EditingCodec.parse(str(self.get_value("global_.codec", "dnxhr")))
            profile = get_target_profile(mode, codec)
            quality = str(self.get_value("global_.quality", profile.default_quality or "")).lower()
            video_encoding = profile.video_encoding(quality)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        workers = self.get_value("global_.default_workers")
        if workers is not None:
            try:
                workers = int(str(workers))
            except ValueError as e:
                msg = f"Invalid worker count '{workers}'"
                raise ConfigurationError(msg) from e
            if workers < 1:
                msg = f"Worker count must be at least 1, got {workers}"
                raise ConfigurationError(msg)

        timeout = self.get_value("global_.timeout")
        if timeout is not None and float(str(timeout)) <= 0:
            msg = f"Timeout must be positive, got {timeout}"
            raise ConfigurationError(msg)

        output_dir = self.get_value("run.output_dir")
        audio_codecs = self._config.profile_settings(mode).acceptable_audio_codecs
        extensions = self.get_value("global_.extensions", [])

        config = ConversionConfig(
            mode=mode,
            codec=codec,
            quality=quality if profile.has_quality_tiers else "",
            profile=profile,
            video_encoding=video_encoding,
            acceptable_audio_codecs=frozenset(codec_name.lower() for codec_name in audio_codecs),
            extensions=frozenset(str(ext).lower() for ext in extensions),  # type: ignore[union-attr]
            workers=resolve_worker_count(workers),
            output_dir=Path(str(output_dir)) if output_dir else None,
            force=bool(self.get_value("run.force", False)),
            dry_run=bool(self.get_value("run.dry_run", False)),
            verbose=bool(self.get_value("run.verbose", False)),
            timeout=float(str(timeout)) if timeout is not None else None,
        )
        LOG.debug("Effective configuration: %s", config)
        return config


class ConfigContext:
    """Scopes a set of overrides to a ``with`` block."""

    def __init__(self, config_manager: ConfigManager, overrides: dict[str, Any]) -> None:
        self.config_manager = config_manager
        self.overrides = overrides

    def __enter__(self) -> ConfigManager:
        """Activate the overrides."""
        self.config_manager.push_context(self.overrides)
        return self.config_manager

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Restore the overrides that were active before."""
        self.config_manager.pop_context()


def with_config_overrides(config_manager: ConfigManager, **overrides: object) -> ConfigContext:
    """Scope ``overrides`` (dotted keys) to a ``with`` block."""
    return ConfigContext(config_manager, overrides)
