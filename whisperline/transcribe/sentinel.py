"""
whisperline.transcribe.sentinel - Optional-value encoding for script calls.

The inference script receives optional arguments as text and treats the
literal string "None" as absent. A present value whose text is "None" is
indistinguishable from absent; that collision is left as-is.
"""

from __future__ import annotations

from typing import Any

SENTINEL = "None"


def encode_optional(value: Any | None) -> str:
    """Render an optional value as text, or SENTINEL when absent."""
    if value is None:
        return SENTINEL
    return str(value)
