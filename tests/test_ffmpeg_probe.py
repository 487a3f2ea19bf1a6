"""Tests for the ffprobe and ffmpeg wrappers."""

import json
import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from davinci_convert.core import CodecType, FFmpegError, FFmpegProbe, FFmpegProcessor, ProbeError
from davinci_convert.core.ffmpeg import ExternalExecutionError

SAMPLE = Path("clip.mxf")


def _completed(stdout: str = "", stderr: str = "", returncode: int = 0) -> Mock:
    result = Mock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


def test_probe_command() -> None:
    assert FFmpegProbe.build_probe_command(SAMPLE) == [
        "ffprobe",
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-show_streams",
        "clip.mxf",
    ]


def test_probe_streams_parses_output() -> None:
    payload = {
        "streams": [
            {"index": 0, "codec_name": "DNXHD", "codec_type": "video"},
            {"index": 1, "codec_name": "pcm_s24le", "codec_type": "audio"},
            {"index": 2, "codec_type": "data"},
        ]
    }
    with patch("davinci_convert.core.ffmpeg.subprocess.run") as mock_run:
        mock_run.return_value = _completed(stdout=json.dumps(payload))
        probe = FFmpegProbe.probe_streams(SAMPLE)

    assert len(probe) == 3
    assert probe.video.codec_name == "dnxhd"
    assert probe.audio.codec_name == "pcm_s24le"
    assert probe.streams[2].codec_type is CodecType.OTHER
    assert probe.streams[2].codec_name == ""

    kwargs = mock_run.call_args.kwargs
    assert kwargs["timeout"] == 30
    assert kwargs["check"] is True


def test_probe_non_zero_exit() -> None:
    error = subprocess.CalledProcessError(1, ["ffprobe"], stderr="clip.mxf: Invalid data found\n")
    with patch("davinci_convert.core.ffmpeg.subprocess.run", side_effect=error):
        with pytest.raises(ProbeError, match="Invalid data found") as exc_info:
            FFmpegProbe.probe_streams(SAMPLE)

    assert exc_info.value.return_code == 1
    assert exc_info.value.file_path == SAMPLE


def test_probe_timeout() -> None:
    with patch(
        "davinci_convert.core.ffmpeg.subprocess.run",
        side_effect=subprocess.TimeoutExpired(["ffprobe"], 30),
    ):
        with pytest.raises(ProbeError, match="timed out"):
            FFmpegProbe.probe_streams(SAMPLE)


def test_probe_missing_binary() -> None:
    with patch("davinci_convert.core.ffmpeg.subprocess.run", side_effect=FileNotFoundError("ffprobe")):
        with pytest.raises(ProbeError, match="Failed to run ffprobe"):
            FFmpegProbe.probe_streams(SAMPLE)


@pytest.mark.parametrize(
    "stdout",
    [
        "not json",
        "[]",
        '{"format": {}}',
        '{"streams": ["video"]}',
        '{"streams": [{"codec_name": 5, "codec_type": "video"}]}',
    ],
)
def test_probe_unreadable_output(stdout: str) -> None:
    with patch("davinci_convert.core.ffmpeg.subprocess.run") as mock_run:
        mock_run.return_value = _completed(stdout=stdout)
        with pytest.raises(ProbeError):
            FFmpegProbe.probe_streams(SAMPLE)


def test_check_availability_reports_missing_tools() -> None:
    with patch("davinci_convert.core.ffmpeg.shutil.which", side_effect=lambda exe: None if exe == "ffprobe" else exe):
        with pytest.raises(FFmpegError, match="ffprobe"):
            FFmpegProbe.check_availability()


def test_check_availability_passes() -> None:
    with patch("davinci_convert.core.ffmpeg.shutil.which", return_value="/usr/bin/tool"):
        FFmpegProbe.check_availability()


def test_run_command_failure_keeps_stderr_tail() -> None:
    stderr = "\n".join(f"line {i}" for i in range(20)) + "\nConversion failed!\n"
    with patch("davinci_convert.core.ffmpeg.subprocess.run") as mock_run:
        mock_run.return_value = _completed(stderr=stderr, returncode=1)
        with pytest.raises(ExternalExecutionError) as exc_info:
            FFmpegProcessor().run_command(["ffmpeg", "-i", "x"], SAMPLE)

    message = str(exc_info.value)
    assert message.startswith("ffmpeg failed with return code 1")
    assert "Conversion failed!" in message
    assert "line 0" not in message
    assert exc_info.value.return_code == 1


def test_run_command_passes_timeout() -> None:
    with patch("davinci_convert.core.ffmpeg.subprocess.run") as mock_run:
        mock_run.return_value = _completed()
        FFmpegProcessor(timeout=12.5).run_command(["ffmpeg"])

    assert mock_run.call_args.kwargs["timeout"] == 12.5
    assert mock_run.call_args.kwargs["capture_output"] is True


def test_run_command_verbose_does_not_capture() -> None:
    with patch("davinci_convert.core.ffmpeg.subprocess.run") as mock_run:
        mock_run.return_value = _completed()
        FFmpegProcessor(verbose=True).run_command(["ffmpeg"])

    assert "capture_output" not in mock_run.call_args.kwargs


def test_run_command_timeout() -> None:
    with patch(
        "davinci_convert.core.ffmpeg.subprocess.run",
        side_effect=subprocess.TimeoutExpired(["ffmpeg"], 5),
    ):
        with pytest.raises(ExternalExecutionError, match="timed out after 5"):
            FFmpegProcessor(timeout=5).run_command(["ffmpeg"])
