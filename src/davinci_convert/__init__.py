"""DaVinci Convert - batch conversion of footage for DaVinci Resolve editing and export."""

from __future__ import annotations

__version__ = "0.1.0"
__description__ = "Batch converter that prepares footage for DaVinci Resolve editing or universal export"

# Public API exports
from .config import ConversionMode, ConverterSettings, EditingCodec, get_config
from .core import (
    Action,
    CodecType,
    ConfigManager,
    ConfigurationError,
    ConversionConfig,
    ConversionStats,
    DestinationConflictError,
    DirectoryCreationError,
    ExternalExecutionError,
    FFmpegError,
    FFmpegProbe,
    FFmpegProcessor,
    ProbeError,
    ProbeResult,
    ProcessingError,
    ProcessingOptions,
    ProcessingResult,
    ProcessingStatus,
    StatsSnapshot,
    StreamInfo,
    UnsupportedInputError,
    classify,
    with_config_overrides,
)
from .processors import ConvertProcessor
from .video import ffmpeg_cmd

__all__ = [
    # Configuration
    "ConfigManager",
    "ConversionConfig",
    "ConversionMode",
    "ConverterSettings",
    "EditingCodec",
    "ProcessingOptions",
    "get_config",
    "with_config_overrides",
    # Core functionality
    "ConvertProcessor",
    "FFmpegProbe",
    "FFmpegProcessor",
    "classify",
    "ffmpeg_cmd",
    # Enums and data classes
    "Action",
    "CodecType",
    "ConversionStats",
    "ProbeResult",
    "ProcessingResult",
    "ProcessingStatus",
    "StatsSnapshot",
    "StreamInfo",
    # Exceptions
    "ConfigurationError",
    "DestinationConflictError",
    "DirectoryCreationError",
    "ExternalExecutionError",
    "FFmpegError",
    "ProbeError",
    "ProcessingError",
    "UnsupportedInputError",
]
