"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import sys
import threading
import types
from collections.abc import Callable
from pathlib import Path

import pytest

PROBE_MODULE = "whisperline_probe"

FAKE_SCRIPT = '''
import time

import whisperline_probe as probe
from whisperline.transcribe.runtime import execution_context_held


class FakeModel:
    def __init__(self, name, device, compute_type):
        self.name = name
        self.device = device
        self.compute_type = compute_type


def _enter(name):
    with probe.guard:
        probe.active += 1
        probe.max_active = max(probe.max_active, probe.active)
        probe.calls.append(name)
        probe.held.append(execution_context_held())
    if probe.delay:
        time.sleep(probe.delay)


def _leave():
    with probe.guard:
        probe.active -= 1


def new_model(model_name, device, compute_type):
    _enter("new_model")
    try:
        if model_name in probe.fail_models:
            raise ValueError(f"unknown model {model_name}")
        return FakeModel(model_name, device, compute_type)
    finally:
        _leave()


def transcribe_audio(model, path, *args):
    _enter("transcribe_audio")
    try:
        probe.inference_args.append((model, path) + args)
        if probe.inference_error:
            raise RuntimeError(probe.inference_error)
        return probe.segments
    finally:
        _leave()
'''

SAMPLE_SEGMENTS = [
    (0, 0, 0.0, 1.5, " The quick", 0.0, -0.21, 1.12, 0.01),
    (1, 0, 1.5, 2.4, " brown fox", 0.0, -0.35, 1.2, 0.02),
    (2, 240, 2.4, 3.0, " jumps.", 0.2, -0.5, 0.9, 0.1),
]


@pytest.fixture
def probe(monkeypatch: pytest.MonkeyPatch) -> types.SimpleNamespace:
    """Instrumentation shared with the fake inference script."""
    state = types.SimpleNamespace(
        guard=threading.Lock(),
        active=0,
        max_active=0,
        calls=[],
        held=[],
        delay=0.0,
        fail_models=set(),
        inference_error=None,
        inference_args=[],
        segments=list(SAMPLE_SEGMENTS),
    )
    monkeypatch.setitem(sys.modules, PROBE_MODULE, state)
    return state


@pytest.fixture
def fake_script(probe: types.SimpleNamespace) -> Callable[[], str]:
    """Script source provider returning the instrumented fake script."""
    return lambda: FAKE_SCRIPT


@pytest.fixture
def default_fake_script(monkeypatch: pytest.MonkeyPatch, probe: types.SimpleNamespace) -> None:
    """Make the fake script the default script source for new transcribers."""
    monkeypatch.setattr("whisperline.transcribe.engine.get_script", lambda: FAKE_SCRIPT)


@pytest.fixture
def audio_file(tmp_path: Path) -> Path:
    """Create a placeholder audio file."""
    path = tmp_path / "sample.wav"
    path.write_bytes(b"RIFF0000WAVE")
    return path


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a sample whisperline.yaml mapping."""
    return {
        "model": "small",
        "device": "cpu",
        "compute_type": "int8",
        "persistent": True,
        "preset": "default",
        "transcription": {
            "language": "en",
            "beam_size": 3,
            "vad": {
                "active": True,
                "threshold": 0.6,
            },
        },
    }


@pytest.fixture
def sample_segments() -> list[tuple]:
    """Raw segment tuples as the inference script returns them."""
    return list(SAMPLE_SEGMENTS)
