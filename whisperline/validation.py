"""
whisperline.validation - Dependency checks and input validation.

Validates the environment and input files before transcription.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from importlib.util import find_spec
from pathlib import Path

from whisperline.exceptions import DependencyError, ValidationError


def check_faster_whisper() -> str:
    """Check that faster-whisper is importable and return its version.

    Raises:
        DependencyError: If faster-whisper is not installed
    """
    if find_spec("faster_whisper") is None:
        raise DependencyError(
            "faster-whisper",
            "faster_whisper module not found",
            "Install with: pip install faster-whisper",
        )
    try:
        return version("faster-whisper")
    except PackageNotFoundError:
        return "unknown"


def validate_audio_file(path: Path) -> Path:
    """Validate an audio file exists and is a regular file.

    Raises:
        ValidationError: If the path is missing or not a file
    """
    if not path.exists():
        raise ValidationError(f"Audio file not found: {path}")
    if not path.is_file():
        raise ValidationError(f"Not a file: {path}")
    return path
