from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ContextorError(Exception):
    """Base exception for errors in the contextor package."""


@dataclass(frozen=True)
class ScanFailedError(ContextorError):
    """Raised when a background scan ends without delivering its records."""

    root: Path
    reason: str = ""
    message: str = "Scan failed."


@dataclass(frozen=True)
class InvalidMaxFileSizeError(ContextorError):
    """Raised when the maximum file size is not a positive byte count."""

    value: object
    message: str = "Invalid file size. Enter a positive number."


@dataclass(frozen=True)
class ConfigFileError(ContextorError):
    """Raised when a YAML configuration file cannot be loaded."""

    path: Path
    reason: str = ""
    message: str = "The configuration file could not be loaded."
