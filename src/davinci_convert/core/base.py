"""Per-file results, the error hierarchy and the processor interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from .media import Action

LOG = logging.getLogger(__name__)


class ProcessingStatus(Enum):
    """How one file ended."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ProcessingResult:
    """Result of processing one file."""

    source_file: Path
    status: ProcessingStatus
    action: Action | None = None
    message: str = ""
    output_file: Path | None = None
    processing_time: float = 0.0
    command: list[str] | None = None
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        return self.status is ProcessingStatus.FAILED


class ProcessingError(Exception):
    """A per-file failure; the file is counted as failed and the run continues."""

    def __init__(
        self,
        message: str,
        file_path: Path | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.file_path = file_path
        self.cause = cause


class ConfigurationError(ProcessingError):
    """Invalid run configuration, detected before any file is touched."""


class DestinationConflictError(ProcessingError):
    """The output file already exists and overwriting was not requested."""


class DirectoryCreationError(ProcessingError):
    """The output directory could not be created."""


class UnsupportedInputError(ProcessingError):
    """The file has nothing the converter can work with (no video stream)."""


class MediaProcessor(ABC):
    """Per-file worker that the directory pool drives."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    def can_process(self, file_path: Path) -> bool:
        """Whether the file is one this processor picks up during discovery."""

    @abstractmethod
    def process_file(self, file_path: Path) -> ProcessingResult:
        """Process a single file; never raises for per-file problems."""
