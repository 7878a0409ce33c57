"""
whisperline.scripts - Bundled inference script source.

The script is shipped as package data and loaded as source text, never
imported as a regular module.
"""

from __future__ import annotations

from pathlib import Path

from whisperline.io import read_text

SCRIPTS_DIR = Path(__file__).parent
SCRIPT_FILENAME = "whisper.py"
SCRIPT_MODULE_NAME = "Whisper"


def get_script() -> str:
    """Return the source text of the bundled inference script."""
    return read_text(SCRIPTS_DIR / SCRIPT_FILENAME)
