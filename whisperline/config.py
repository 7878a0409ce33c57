"""
whisperline.config - Transcription settings, YAML loading, preset merging.

Defines the immutable configuration passed to transcribers and handles
loading whisperline.yaml with built-in preset defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from whisperline.exceptions import ConfigError

CONFIG_FILENAME = "whisperline.yaml"

VALID_DEVICES = {"cpu", "cuda", "auto"}
VALID_COMPUTE_TYPES = {
    "default",
    "auto",
    "int8",
    "int8_float16",
    "int8_float32",
    "int8_bfloat16",
    "int16",
    "float16",
    "float32",
    "bfloat16",
}


class VadConfig(BaseModel):
    """Voice activity detection settings.

    Durations are in milliseconds except max_speech_duration, which is in
    seconds.
    """

    model_config = ConfigDict(frozen=True)

    active: bool = False
    threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    min_speech_duration: int = Field(default=250, ge=0)
    max_speech_duration: int | None = Field(default=None, gt=0)
    min_silence_duration: int = Field(default=2000, ge=0)
    padding_duration: int = Field(default=400, ge=0)


class WhisperConfig(BaseModel):
    """Decoding parameters for one transcriber."""

    model_config = ConfigDict(frozen=True)

    starting_prompt: str | None = None
    prefix: str | None = None
    language: str | None = None

    beam_size: int = Field(default=5, ge=1)
    best_of: int = Field(default=5, ge=1)
    patience: float = Field(default=1.0, gt=0.0)
    length_penalty: float = 1.0

    chunk_length: int | None = Field(default=None, gt=0)

    vad: VadConfig = Field(default_factory=VadConfig)


class WhisperlineConfig(BaseModel):
    """Resolved contents of a whisperline.yaml file."""

    model: str = "base.en"
    device: str = "cpu"
    compute_type: str = "int8"
    persistent: bool = False
    preset: str = "default"

    transcription: WhisperConfig = Field(default_factory=WhisperConfig)

    config_path: Path | None = None

    @field_validator("device")
    @classmethod
    def validate_device(cls, v: str) -> str:
        if v not in VALID_DEVICES:
            raise ValueError(f"device must be one of: {VALID_DEVICES}")
        return v

    @field_validator("compute_type")
    @classmethod
    def validate_compute_type(cls, v: str) -> str:
        if v not in VALID_COMPUTE_TYPES:
            raise ValueError(f"compute_type must be one of: {VALID_COMPUTE_TYPES}")
        return v

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, v: str) -> str:
        if v not in BUILTIN_PRESETS:
            raise ValueError(f"preset must be one of: {set(BUILTIN_PRESETS)}")
        return v


BUILTIN_PRESETS: dict[str, dict[str, Any]] = {
    "default": {},
    "fast": {
        "beam_size": 1,
        "best_of": 1,
    },
    "accurate": {
        "beam_size": 10,
        "best_of": 10,
        "patience": 2.0,
    },
    "vad": {
        "vad": {
            "active": True,
            "min_silence_duration": 500,
        },
    },
}


def load_preset(name: str) -> dict[str, Any]:
    """Return the transcription defaults for a built-in preset."""
    if name not in BUILTIN_PRESETS:
        raise ConfigError(f"Unknown preset: {name}")
    preset = BUILTIN_PRESETS[name]
    return {key: (dict(value) if isinstance(value, dict) else value) for key, value in preset.items()}


def merge_config(overrides: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Merge transcription overrides onto defaults. Overrides take precedence."""
    merged = {key: (dict(value) if isinstance(value, dict) else value) for key, value in defaults.items()}
    for key, value in overrides.items():
        if key == "vad" and isinstance(value, dict):
            merged.setdefault("vad", {})
            merged["vad"].update(value)
        elif value is not None:
            merged[key] = value
    return merged


def build_config(raw_config: dict[str, Any]) -> WhisperlineConfig:
    """Validate a raw config mapping, applying its preset under the transcription section."""
    raw_config = dict(raw_config)
    preset_name = raw_config.get("preset") or "default"
    raw_config["preset"] = preset_name
    transcription = raw_config.get("transcription") or {}
    if not isinstance(transcription, dict):
        raise ConfigError("transcription section must be a mapping")

    raw_config["transcription"] = merge_config(transcription, load_preset(preset_name))

    try:
        return WhisperlineConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Path, preset: str | None = None) -> WhisperlineConfig:
    """Load and validate configuration from a file or a directory holding whisperline.yaml.

    Args:
        path: Config file, or directory containing whisperline.yaml
        preset: Preset name overriding the one named in the file
    """
    config_file = path / CONFIG_FILENAME if path.is_dir() else path
    if not config_file.exists():
        raise FileNotFoundError(f"No {CONFIG_FILENAME} found at {path}")

    try:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {config_file}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    if preset is not None:
        raw_config["preset"] = preset
    raw_config["config_path"] = config_file
    return build_config(raw_config)


def create_default_config(preset: str = "default") -> dict[str, Any]:
    """Create a default config mapping for a new whisperline.yaml."""
    defaults: dict[str, Any] = {
        "model": "base.en",
        "device": "cpu",
        "compute_type": "int8",
        "persistent": False,
        "preset": preset,
    }
    defaults["transcription"] = merge_config({}, load_preset(preset))
    return defaults


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
