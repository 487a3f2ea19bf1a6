"""
System constants that should never change.

These are technical/system limits, not user preferences.
User-configurable values should go in config.yaml instead.
"""

# External tool limits
FFPROBE_TIMEOUT_SECONDS = 30  # ffprobe only reads container headers
REQUIRED_EXECUTABLES = ("ffmpeg", "ffprobe")

# Media discovery
DEFAULT_MEDIA_EXTENSIONS = (
    ".mov",
    ".mp4",
    ".mxf",
    ".avi",
    ".mkv",
    ".wmv",
    ".flv",
    ".m4v",
    ".webm",
    ".mpg",
    ".mpeg",
    ".m2ts",
    ".mts",
)

# Even-dimension scale filter required by DNxHR, ProRes and yuv420p H.264
EVEN_DIMENSIONS_FILTER = "scale=trunc(iw/2)*2:trunc(ih/2)*2"

# Console output
ERROR_MESSAGE_TRUNCATE_LENGTH = 100  # Maximum length for error message display
STDERR_TAIL_LINES = 5  # ffmpeg stderr lines kept in error messages
