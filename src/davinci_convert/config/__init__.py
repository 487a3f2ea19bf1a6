"""Configuration management for the converter."""

from __future__ import annotations

from .constants import *  # noqa: F403, F401
from .profiles import ConversionMode, EditingCodec, TargetProfile, get_target_profile, valid_qualities
from .settings import ConverterSettings, get_config

__all__ = [
    "ConversionMode",
    "ConverterSettings",
    "EditingCodec",
    "TargetProfile",
    "get_config",
    "get_target_profile",
    "valid_qualities",
]
