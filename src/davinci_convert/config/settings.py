"""YAML-backed settings for davinci-convert."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .constants import DEFAULT_MEDIA_EXTENSIONS
from .profiles import DEFAULT_ACCEPTABLE_AUDIO, ConversionMode

LOG = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "config.yaml"


# Configuration singleton
class _ConfigSingleton:
    """Process-wide cache of the settings read from the working directory."""

    _instance: ConverterSettings | None = None

    @classmethod
    def get_instance(cls) -> ConverterSettings:
        """Load ./config.yaml on first use, or fall back to defaults."""
        if cls._instance is None:
            config_path = Path.cwd() / DEFAULT_CONFIG_FILENAME
            if config_path.exists():
                cls._instance = ConverterSettings.load_from_file(config_path)
            else:
                cls._instance = ConverterSettings()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the cached settings so the next call reloads them."""
        cls._instance = None


_config_singleton = _ConfigSingleton()


@dataclass
class ProfileSettings:
    """Per-mode settings."""

    acceptable_audio_codecs: list[str] = field(default_factory=list)


@dataclass
class GlobalConfig:
    """The ``global`` section: run defaults shared by both modes."""

    default_workers: int | None = None
    log_level: str = "WARNING"
    mode: str = "editing"
    codec: str = "dnxhr"
    quality: str = "hq"
    timeout: float | None = None
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_MEDIA_EXTENSIONS))


@dataclass
class ConverterSettings:
    """Everything config.yaml can set."""

    global_: GlobalConfig = field(default_factory=GlobalConfig)
    editing: ProfileSettings = field(
        default_factory=lambda: ProfileSettings(list(DEFAULT_ACCEPTABLE_AUDIO[ConversionMode.EDITING]))
    )
    export: ProfileSettings = field(
        default_factory=lambda: ProfileSettings(list(DEFAULT_ACCEPTABLE_AUDIO[ConversionMode.EXPORT]))
    )
    source: Path | None = None

    @classmethod
    def load_from_file(cls, config_path: Path) -> ConverterSettings:
        """Read a YAML settings file; unreadable files log a warning and yield defaults."""
        try:
            with config_path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}

            if not isinstance(data, dict):
                LOG.warning("Ignoring config %s: top level must be a mapping", config_path)
                return cls()

            settings = cls._from_dict(data)
        except (OSError, yaml.YAMLError) as e:
            LOG.warning("Failed to load config from %s: %s", config_path, e)
            return cls()
        else:
            settings.source = config_path
            return settings

    def profile_settings(self, mode: ConversionMode) -> ProfileSettings:
        """Get the settings section for a conversion mode."""
        return self.export if mode is ConversionMode.EXPORT else self.editing

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> ConverterSettings:
        """Build settings from the parsed YAML mapping."""
        global_config = cls._parse_global_config(data.get("global") or {})
        editing = cls._parse_profile_settings(data.get("editing") or {}, ConversionMode.EDITING)
        export = cls._parse_profile_settings(data.get("export") or {}, ConversionMode.EXPORT)

        return cls(global_=global_config, editing=editing, export=export)

    @classmethod
    def _parse_profile_settings(cls, profile_data: dict[str, Any], mode: ConversionMode) -> ProfileSettings:
        """Parse a per-mode section."""
        codecs = profile_data.get("acceptable_audio_codecs")
        if codecs is None:
            return ProfileSettings(list(DEFAULT_ACCEPTABLE_AUDIO[mode]))

        if isinstance(codecs, str):
            codecs = [codecs]
        if not isinstance(codecs, list):
            LOG.warning("Invalid acceptable_audio_codecs for %s mode; using defaults", mode.value)
            return ProfileSettings(list(DEFAULT_ACCEPTABLE_AUDIO[mode]))

        return ProfileSettings([str(codec).lower() for codec in codecs])

    @classmethod
    def _parse_global_config(cls, global_data: dict[str, Any]) -> GlobalConfig:
        """Parse the ``global`` section, normalizing extensions and timeout."""
        extensions = global_data.get("extensions", list(DEFAULT_MEDIA_EXTENSIONS))
        normalized_extensions = [
            (ext if str(ext).startswith(".") else f".{ext}").lower() for ext in extensions
        ]

        timeout = global_data.get("timeout")
        if timeout is not None:
            try:
                timeout = float(timeout)
            except (TypeError, ValueError):
                LOG.warning("Invalid timeout '%s'. Running ffmpeg without a timeout", timeout)
                timeout = None

        return GlobalConfig(
            default_workers=global_data.get("default_workers"),
            log_level=str(global_data.get("log_level", "WARNING")).upper(),
            mode=str(global_data.get("mode", "editing")),
            codec=str(global_data.get("codec", "dnxhr")),
            quality=str(global_data.get("quality", "hq")),
            timeout=timeout,
            extensions=normalized_extensions,
        )


def get_config() -> ConverterSettings:
    """Settings from ./config.yaml, loaded once per process."""
    return _config_singleton.get_instance()
