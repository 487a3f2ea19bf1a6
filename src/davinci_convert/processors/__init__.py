"""Media processors."""

from .convert_processor import ConvertProcessor

__all__ = ["ConvertProcessor"]
