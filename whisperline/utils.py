"""
whisperline.utils - Shared formatting helpers.
"""

from __future__ import annotations


def format_timestamp(seconds: float) -> str:
    """Format seconds as MM:SS.mmm or H:MM:SS.mmm.

    Args:
        seconds: Offset in seconds

    Returns:
        Formatted string (hours shown only when >= 1 hour)
    """
    millis = int(round(seconds * 1000))
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}.{millis:03d}"
    return f"{minutes:02d}:{secs:02d}.{millis:03d}"
