"""Subprocess wrappers around ffprobe and ffmpeg."""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
import time
from typing import TYPE_CHECKING, Any

from ..config.constants import FFPROBE_TIMEOUT_SECONDS, REQUIRED_EXECUTABLES, STDERR_TAIL_LINES
from .base import ProcessingError
from .media import ProbeResult

if TYPE_CHECKING:
    from pathlib import Path

LOG = logging.getLogger(__name__)


def _stderr_tail(stderr: str | None) -> str:
    """Keep the last few lines of tool output; ffmpeg puts the actual error at the end."""
    if not stderr:
        return ""
    lines = [line for line in stderr.strip().splitlines() if line.strip()]
    return "\n".join(lines[-STDERR_TAIL_LINES:])


class FFmpegError(ProcessingError):
    """An ffprobe or ffmpeg invocation failed."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        return_code: int | None = None,
        stderr: str | None = None,
        file_path: Path | None = None,
    ) -> None:
        """Keep the command, exit status and stderr for the failure report."""
        super().__init__(message, file_path=file_path)
        self.command = command
        self.return_code = return_code
        self.stderr = stderr


class ProbeError(FFmpegError):
    """ffprobe could not run, failed, or produced output we cannot read."""


class ExternalExecutionError(FFmpegError):
    """The ffmpeg conversion process failed."""


class FFmpegProbe:
    """ffprobe wrapper producing stream metadata."""

    @staticmethod
    def check_availability() -> None:
        """Fail fast when ffmpeg or ffprobe is not on PATH."""
        missing = [exe for exe in REQUIRED_EXECUTABLES if not shutil.which(exe)]

        if missing:
            error_msg = f"Missing FFmpeg executables: {', '.join(missing)}. Please install ffmpeg."
            LOG.error(error_msg)
            raise FFmpegError(error_msg)

    @staticmethod
    def build_probe_command(file_path: Path) -> list[str]:
        """Build the ffprobe command listing all streams as JSON."""
        return [
            "ffprobe",
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_streams",
            str(file_path),
        ]

    @classmethod
    def probe_media(cls, file_path: Path) -> dict[str, Any]:
        """Run ffprobe and return its decoded JSON report."""
        cmd = cls.build_probe_command(file_path)
        LOG.debug("Probing file: %s", file_path)

        try:
            result = subprocess.run(  # noqa: S603
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=FFPROBE_TIMEOUT_SECONDS,
                encoding="utf-8",
                errors="replace",
            )

            probe_data = json.loads(result.stdout)
        except subprocess.CalledProcessError as e:
            error_details = _stderr_tail(e.stderr) or f"exit status {e.returncode}"
            msg = f"ffprobe failed for {file_path}: {error_details}"
            raise ProbeError(
                msg,
                command=cmd,
                return_code=e.returncode,
                file_path=file_path,
                stderr=e.stderr,
            ) from e
        except subprocess.TimeoutExpired as e:
            msg = f"ffprobe timed out for {file_path}"
            raise ProbeError(msg, command=cmd, file_path=file_path) from e
        except OSError as e:
            msg = f"Failed to run ffprobe: {e}"
            raise ProbeError(msg, command=cmd, file_path=file_path) from e
        except json.JSONDecodeError as e:
            msg = f"Invalid JSON from ffprobe for {file_path}: {e}"
            raise ProbeError(msg, command=cmd, file_path=file_path) from e
        else:
            return probe_data

    @classmethod
    def probe_streams(cls, file_path: Path) -> ProbeResult:
        """Probe a file and return its typed stream list."""
        data = cls.probe_media(file_path)

        try:
            probe = ProbeResult.from_ffprobe(data)
        except ValueError as e:
            msg = f"Unexpected ffprobe output for {file_path}: {e}"
            raise ProbeError(msg, command=cls.build_probe_command(file_path), file_path=file_path) from e

        LOG.debug(
            "Probed %s: %s",
            file_path.name,
            ", ".join(f"{s.codec_type.value}:{s.codec_name}" for s in probe) or "no streams",
        )
        return probe


class FFmpegProcessor:
    """Runs conversion commands built by the transcode module."""

    def __init__(self, timeout: float | None = None, *, verbose: bool = False) -> None:
        """
        Initialize FFmpeg processor.

        Args:
            timeout: Seconds before a conversion is abandoned, None to wait indefinitely
            verbose: Let ffmpeg write its own output to the terminal

        """
        self.timeout = timeout
        self.verbose = verbose

    def run_command(self, command: list[str], file_path: Path | None = None) -> subprocess.CompletedProcess:
        """Run one conversion; anything but a clean exit raises ExternalExecutionError."""
        LOG.info("ffmpeg: %s", " ".join(command))
        start_time = time.time()

        try:
            if self.verbose:
                result = subprocess.run(  # noqa: S603
                    command,
                    timeout=self.timeout,
                    check=False,
                )
            else:
                result = subprocess.run(  # noqa: S603
                    command,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,  # exit status checked below
                    encoding="utf-8",
                    errors="replace",
                )

            LOG.debug("FFmpeg command completed in %.2fs", time.time() - start_time)

            if result.returncode != 0:
                self._handle_ffmpeg_error(result, command, file_path)
        except subprocess.TimeoutExpired as e:
            msg = f"ffmpeg timed out after {self.timeout}s"
            raise ExternalExecutionError(msg, command=command, file_path=file_path) from e
        except OSError as e:
            msg = f"Failed to run ffmpeg: {e}"
            raise ExternalExecutionError(msg, command=command, file_path=file_path) from e
        else:
            return result

    def _handle_ffmpeg_error(
        self, result: subprocess.CompletedProcess, command: list[str], file_path: Path | None
    ) -> None:
        """Turn a non-zero exit status into ExternalExecutionError."""
        error_msg = f"ffmpeg failed with return code {result.returncode}"
        details = _stderr_tail(result.stderr if isinstance(result.stderr, str) else None)
        if details:
            error_msg += f": {details}"

        raise ExternalExecutionError(
            error_msg,
            command=command,
            return_code=result.returncode,
            stderr=result.stderr if isinstance(result.stderr, str) else None,
            file_path=file_path,
        )
