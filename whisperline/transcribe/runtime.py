"""
whisperline.transcribe.runtime - Script loading and the shared execution context.

The inference script runs in its own module namespace built from source
text. Every call into it (loading, model construction, inference) must
happen while holding the execution context: one process-wide lock shared
by all transcribers and threads. The lock is not reentrant.
"""

from __future__ import annotations

import contextlib
import logging
import threading
import time
import types
from collections.abc import Iterator
from typing import Any

from whisperline.exceptions import ModelConstructionError, TranscriptionError

logger = logging.getLogger("whisperline.runtime")

_EXECUTION_LOCK = threading.Lock()


@contextlib.contextmanager
def execution_context() -> Iterator[None]:
    """Hold the process-wide execution context for the duration of the block.

    Blocks until any other holder releases it. Released on every exit path,
    including exceptions.
    """
    started = time.monotonic()
    _EXECUTION_LOCK.acquire()
    logger.debug(
        "Acquired execution context on %s after %.3fs",
        threading.current_thread().name,
        time.monotonic() - started,
    )
    try:
        yield
    finally:
        _EXECUTION_LOCK.release()
        logger.debug("Released execution context on %s", threading.current_thread().name)


def execution_context_held() -> bool:
    """Return True if some thread currently holds the execution context."""
    return _EXECUTION_LOCK.locked()


def load_script_module(
    source: str,
    filename: str = "whisper.py",
    name: str = "Whisper",
) -> types.ModuleType:
    """Compile and execute script source into a fresh module.

    Must be called while holding the execution context.

    Raises:
        ModelConstructionError: If the source fails to compile or execute
    """
    module = types.ModuleType(name)
    module.__file__ = filename
    try:
        code = compile(source, filename, "exec")
        exec(code, module.__dict__)
    except Exception as e:
        raise ModelConstructionError(f"Failed to load script {filename}: {type(e).__name__}: {e}") from e

    logger.debug("Loaded script module %s from %s", name, filename)
    return module


def call_entry_point(
    module: types.ModuleType,
    name: str,
    *args: Any,
    error: type[TranscriptionError] = TranscriptionError,
) -> Any:
    """Look up and call an entry point defined by the script module.

    Must be called while holding the execution context.

    Raises:
        TranscriptionError: The given subclass, if the entry point is missing
            or raises
    """
    entry_point = getattr(module, name, None)
    if entry_point is None or not callable(entry_point):
        raise error(f"Script {module.__name__} has no callable entry point '{name}'")

    try:
        return entry_point(*args)
    except Exception as e:
        raise error(f"{name} failed: {type(e).__name__}: {e}") from e
