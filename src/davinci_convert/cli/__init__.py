"""CLI module for the converter."""

from .commands import ConvertCommands, UtilityCommands
from .main import ConverterCLI

__all__ = [
    "ConverterCLI",
    "ConvertCommands",
    "UtilityCommands",
]
