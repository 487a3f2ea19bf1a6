"""Core abstractions and utilities for the converter."""

from .base import (
    ConfigurationError,
    DestinationConflictError,
    DirectoryCreationError,
    MediaProcessor,
    ProcessingError,
    ProcessingResult,
    ProcessingStatus,
    UnsupportedInputError,
)
from .config import ConfigManager, ConversionConfig, ProcessingOptions, with_config_overrides
from .ffmpeg import ExternalExecutionError, FFmpegError, FFmpegProbe, FFmpegProcessor, ProbeError
from .file_manager import FileManager
from .media import Action, CodecType, ProbeResult, StreamInfo
from .stats import ConversionStats, StatsSnapshot
from .video_analysis import classify

__all__ = [
    "Action",
    "CodecType",
    "ConfigManager",
    "ConfigurationError",
    "ConversionConfig",
    "ConversionStats",
    "DestinationConflictError",
    "DirectoryCreationError",
    "ExternalExecutionError",
    "FFmpegError",
    "FFmpegProbe",
    "FFmpegProcessor",
    "FileManager",
    "MediaProcessor",
    "ProbeError",
    "ProbeResult",
    "ProcessingError",
    "ProcessingOptions",
    "ProcessingResult",
    "ProcessingStatus",
    "StatsSnapshot",
    "StreamInfo",
    "UnsupportedInputError",
    "classify",
    "with_config_overrides",
]
