"""Output path planning and filesystem pre-checks."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from .base import DestinationConflictError, DirectoryCreationError

if TYPE_CHECKING:
    from .config import ConversionConfig

LOG = logging.getLogger(__name__)


class FileManager:
    """
    Decides where converted files go and what may be written there.

    Each output path belongs to at most one source per run. Sources whose
    names differ only by extension (``clip.mp4``, ``clip.mkv``) map to the
    same output; the first one claimed keeps it and the others fail.
    """

    def __init__(self, config: ConversionConfig) -> None:
        self.config = config
        self._owners: dict[Path, Path] = {}
        self._lock = threading.Lock()

    def output_path_for(self, source_path: Path) -> Path:
        """Destination for a source file: ``<dir>/<stem><suffix>.<ext>``."""
        directory = self.config.output_dir or source_path.parent
        name = f"{source_path.stem}{self.config.output_suffix}.{self.config.target_container_ext}"
        return Path(directory) / name

    def reserve_outputs(self, sources: list[Path]) -> None:
        """Claim outputs in queue order before the workers start."""
        with self._lock:
            for source in sources:
                self._owners.setdefault(self.output_path_for(source), source)

    def claim_output(self, source_path: Path, output_path: Path) -> None:
        """Take ownership of an output path, or fail if another source of this run owns it."""
        with self._lock:
            owner = self._owners.setdefault(output_path, source_path)

        if owner != source_path:
            msg = f"Destination {output_path.name} is already written by {owner.name} in this run"
            raise DestinationConflictError(msg, file_path=output_path)

    def check_destination(self, output_path: Path) -> None:
        """Refuse to touch an existing output unless overwriting was requested."""
        if self.config.force or not output_path.exists():
            return

        msg = f"Destination exists: {output_path.name} (use --force to overwrite)"
        raise DestinationConflictError(msg, file_path=output_path)

    def ensure_output_dir(self, output_path: Path) -> None:
        """Create the destination directory and its parents."""
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Failed to create output directory {output_path.parent}: {e}"
            raise DirectoryCreationError(msg, file_path=output_path, cause=e) from e

    def remove_partial_output(self, output_path: Path) -> bool:
        """Delete whatever a failed ffmpeg run left behind."""
        try:
            if output_path.exists():
                output_path.unlink()
                LOG.info("Removed partial output: %s", output_path)
                return True
        except OSError as e:
            LOG.warning("Failed to remove partial output %s: %s", output_path, e)
        return False
