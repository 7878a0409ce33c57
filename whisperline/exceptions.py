"""
whisperline.exceptions - Custom exception classes.

All Whisperline-specific exceptions inherit from WhisperlineError.
"""


class WhisperlineError(Exception):
    """Base exception for all Whisperline errors."""

    pass


class ConfigError(WhisperlineError):
    """Configuration loading or validation error."""

    pass


class TranscriptionError(WhisperlineError):
    """Transcription error.

    Every failure on the transcription path surfaces as this type (or one of
    its subclasses). The message carries the description of the underlying
    script error.
    """

    pass


class ModelConstructionError(TranscriptionError):
    """Script loading, entry-point lookup or model construction failed."""

    pass


class InferenceError(TranscriptionError):
    """The inference entry point raised."""

    pass


class SegmentDecodeError(TranscriptionError):
    """Inference returned a value that does not match the segment tuple shape."""

    pass


class ValidationError(WhisperlineError):
    """Input validation error."""

    pass


class DependencyError(WhisperlineError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
