"""
whisperline.transcribe - Transcription sessions over the embedded inference script.

Marshals WhisperConfig into the script's positional call convention, runs
inference under the process-wide execution context, and decodes the
returned tuples into Segment records.
"""

from __future__ import annotations

from whisperline.transcribe.engine import WhisperModel, WhisperTranscriber
from whisperline.transcribe.segments import Segment, Segments

__all__ = ["Segment", "Segments", "WhisperModel", "WhisperTranscriber"]
