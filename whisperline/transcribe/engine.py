"""
whisperline.transcribe.engine - Whisper transcription sessions.

Two session lifecycles share one marshalling path:

- WhisperTranscriber loads the script and builds a fresh model on every
  call, holding no script objects between calls.
- WhisperModel loads the script and builds the model once, keeping both
  for its lifetime; each call re-acquires the execution context only for
  inference.

Both produce identical Segments for identical inputs.
"""

from __future__ import annotations

import logging
import time
import types
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from whisperline.config import VadConfig, WhisperConfig
from whisperline.exceptions import (
    InferenceError,
    ModelConstructionError,
    TranscriptionError,
)
from whisperline.scripts import SCRIPT_FILENAME, SCRIPT_MODULE_NAME, get_script
from whisperline.transcribe.runtime import call_entry_point, execution_context, load_script_module
from whisperline.transcribe.segments import Segments, decode_segments
from whisperline.transcribe.sentinel import encode_optional

logger = logging.getLogger("whisperline.engine")

NEW_MODEL = "new_model"
TRANSCRIBE_AUDIO = "transcribe_audio"

DEFAULT_MODEL = "base.en"
DEFAULT_DEVICE = "cpu"
DEFAULT_COMPUTE_TYPE = "int8"


class ModelProvider(Protocol):
    """Supplies the script module and model handle for one inference call.

    Both methods are only called while holding the execution context.
    """

    def provide_module_reference(self) -> types.ModuleType: ...

    def provide_model_handle(self, module: types.ModuleType) -> Any: ...


def build_vad_args(vad: VadConfig) -> tuple[bool, float, int, str, int, int]:
    """Build the VAD tuple passed to transcribe_audio."""
    return (
        vad.active,
        vad.threshold,
        vad.min_speech_duration,
        encode_optional(vad.max_speech_duration),
        vad.min_silence_duration,
        vad.padding_duration,
    )


def build_inference_args(config: WhisperConfig, model: Any, path: str | Path) -> tuple[Any, ...]:
    """Build the positional arguments for transcribe_audio."""
    return (
        model,
        str(path),
        encode_optional(config.starting_prompt),
        encode_optional(config.prefix),
        encode_optional(config.language),
        config.beam_size,
        config.best_of,
        config.patience,
        config.length_penalty,
        encode_optional(config.chunk_length),
        build_vad_args(config.vad),
    )


def construct_model(
    module: types.ModuleType,
    model: str,
    device: str,
    compute_type: str,
) -> Any:
    """Call the script's new_model entry point.

    Must be called while holding the execution context.
    """
    started = time.monotonic()
    handle = call_entry_point(module, NEW_MODEL, model, device, compute_type, error=ModelConstructionError)
    logger.info(
        "Constructed %s model on %s (%s) in %.2fs",
        model,
        device,
        compute_type,
        time.monotonic() - started,
    )
    return handle


def run_inference(provider: ModelProvider, config: WhisperConfig, path: str | Path) -> Segments:
    """Run one transcription through the provider's module and model.

    Holds the execution context from module lookup until the result is
    decoded.
    """
    with execution_context():
        module = provider.provide_module_reference()
        model = provider.provide_model_handle(module)

        started = time.monotonic()
        raw = call_entry_point(
            module,
            TRANSCRIBE_AUDIO,
            *build_inference_args(config, model, path),
            error=InferenceError,
        )
        result = decode_segments(raw)

    logger.info(
        "Transcribed %s: %d segments in %.2fs",
        path,
        len(result),
        time.monotonic() - started,
    )
    return result


class WhisperTranscriber:
    """Transcriber that loads the script and model fresh on every call.

    Construction does not touch the script runtime. Each transcribe() call
    loads the script, builds the model, runs inference and decodes the
    result within a single hold of the execution context.
    """

    def __init__(
        self,
        model: str,
        device: str,
        compute_type: str,
        config: WhisperConfig | None = None,
        script_source: Callable[[], str] | None = None,
    ) -> None:
        self.model = model
        self.device = device
        self.compute_type = compute_type
        self.config = config if config is not None else WhisperConfig()
        self._script_source = script_source or get_script

    def __repr__(self) -> str:
        return (
            f"WhisperTranscriber(model={self.model!r}, device={self.device!r}, "
            f"compute_type={self.compute_type!r})"
        )

    def provide_module_reference(self) -> types.ModuleType:
        return load_script_module(self._script_source(), SCRIPT_FILENAME, SCRIPT_MODULE_NAME)

    def provide_model_handle(self, module: types.ModuleType) -> Any:
        return construct_model(module, self.model, self.device, self.compute_type)

    def transcribe(self, path: str | Path) -> Segments:
        """Transcribe the audio file at path.

        Raises:
            TranscriptionError: If loading, model construction, inference or
                decoding fails
        """
        logger.debug("Ephemeral transcription of %s with %s", path, self.model)
        return run_inference(self, self.config, path)


class WhisperModel:
    """Transcriber that keeps one loaded script and model for its lifetime.

    The script module and model handle belong to this instance alone and
    are only touched while holding the execution context.
    """

    def __init__(
        self,
        model: str,
        device: str,
        compute_type: str,
        config: WhisperConfig | None = None,
        script_source: Callable[[], str] | None = None,
    ) -> None:
        """Load the script and construct the model.

        Raises:
            ModelConstructionError: If the script fails to load or new_model fails
        """
        self.model = model
        self.device = device
        self.compute_type = compute_type
        self.config = config if config is not None else WhisperConfig()

        source = (script_source or get_script)()
        with execution_context():
            module = load_script_module(source, SCRIPT_FILENAME, SCRIPT_MODULE_NAME)
            handle = construct_model(module, model, device, compute_type)

        self._module: types.ModuleType | None = module
        self._handle: Any = handle

    @classmethod
    def default(cls) -> WhisperModel:
        """Build a base.en/cpu/int8 model with default config, or exit.

        Unlike the constructor, a construction failure here is not
        returned to the caller: it is logged and raised as SystemExit.
        """
        try:
            return cls(DEFAULT_MODEL, DEFAULT_DEVICE, DEFAULT_COMPUTE_TYPE, WhisperConfig())
        except (TranscriptionError, OSError) as e:
            logger.critical("Cannot construct default model: %s", e)
            raise SystemExit(f"whisperline: cannot construct default model: {e}") from e

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"WhisperModel(model={self.model!r}, device={self.device!r}, "
            f"compute_type={self.compute_type!r}, {state})"
        )

    def __enter__(self) -> WhisperModel:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._module is None

    def close(self) -> None:
        """Release the script module and model handle."""
        if self.closed:
            return
        with execution_context():
            self._module = None
            self._handle = None
        logger.debug("Closed %r", self)

    def provide_module_reference(self) -> types.ModuleType:
        if self._module is None:
            raise TranscriptionError(f"{self.model} model handle is closed")
        return self._module

    def provide_model_handle(self, module: types.ModuleType) -> Any:
        return self._handle

    def transcribe(self, path: str | Path) -> Segments:
        """Transcribe the audio file at path with the retained model.

        Raises:
            TranscriptionError: If the handle is closed, or inference or
                decoding fails
        """
        logger.debug("Persistent transcription of %s with %s", path, self.model)
        return run_inference(self, self.config, path)
