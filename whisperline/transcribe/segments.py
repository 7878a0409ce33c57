"""
whisperline.transcribe.segments - Segment records and tuple decoding.

The inference script returns one positional tuple per segment:

    (id, seek, start, end, text, temperature, avg_logprob,
     compression_ratio, no_speech_prob)

decode_segments() checks every tuple against that layout before building
Segment records, so a script returning the wrong shape fails loudly instead
of producing a partial transcript.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, computed_field

from whisperline.exceptions import SegmentDecodeError

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

SEGMENT_FIELDS: tuple[tuple[str, type], ...] = (
    ("id", int),
    ("seek", int),
    ("start", float),
    ("end", float),
    ("text", str),
    ("temperature", float),
    ("avg_logprob", float),
    ("compression_ratio", float),
    ("no_speech_prob", float),
)


class Segment(BaseModel):
    """One transcribed span of speech."""

    model_config = ConfigDict(frozen=True)

    id: int
    seek: int
    start: float
    end: float
    text: str
    temperature: float
    avg_logprob: float
    compression_ratio: float
    no_speech_prob: float


class Segments(BaseModel):
    """Ordered segments of one transcription, plus their joined text."""

    model_config = ConfigDict(frozen=True)

    segments: tuple[Segment, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def text(self) -> str:
        return "".join(segment.text for segment in self.segments)

    def __str__(self) -> str:
        return self.text

    def __len__(self) -> int:
        return len(self.segments)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready dict with text and segments."""
        return self.model_dump(mode="json")


def _decode_field(index: int, name: str, expected: type, value: Any) -> Any:
    if isinstance(value, bool):
        raise SegmentDecodeError(f"segment {index}: field '{name}' expected {expected.__name__}, got bool")

    if expected is int:
        if not isinstance(value, int):
            raise SegmentDecodeError(
                f"segment {index}: field '{name}' expected int, got {type(value).__name__}"
            )
        if not INT32_MIN <= value <= INT32_MAX:
            raise SegmentDecodeError(f"segment {index}: field '{name}' out of 32-bit range: {value}")
        return value

    if expected is float:
        if not isinstance(value, (int, float)):
            raise SegmentDecodeError(
                f"segment {index}: field '{name}' expected float, got {type(value).__name__}"
            )
        try:
            return float(value)
        except OverflowError as e:
            raise SegmentDecodeError(f"segment {index}: field '{name}' out of float range") from e

    if not isinstance(value, str):
        raise SegmentDecodeError(
            f"segment {index}: field '{name}' expected str, got {type(value).__name__}"
        )
    return value


def decode_segment(index: int, raw: Any) -> Segment:
    """Decode one raw segment tuple."""
    if not isinstance(raw, tuple):
        raise SegmentDecodeError(f"segment {index}: expected tuple, got {type(raw).__name__}")
    if len(raw) != len(SEGMENT_FIELDS):
        raise SegmentDecodeError(
            f"segment {index}: expected {len(SEGMENT_FIELDS)} fields, got {len(raw)}"
        )

    values = {
        name: _decode_field(index, name, expected, value)
        for (name, expected), value in zip(SEGMENT_FIELDS, raw)
    }
    return Segment(**values)


def decode_segments(raw: Any) -> Segments:
    """Decode the inference return value into Segments, preserving order.

    Raises:
        SegmentDecodeError: If raw is not a sequence of 9-field segment tuples
    """
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise SegmentDecodeError(f"expected a sequence of segment tuples, got {type(raw).__name__}")

    return Segments(segments=tuple(decode_segment(i, item) for i, item in enumerate(raw)))
