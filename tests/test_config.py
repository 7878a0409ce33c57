"""Tests for whisperline.config module."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from whisperline.config import (
    VadConfig,
    WhisperConfig,
    WhisperlineConfig,
    build_config,
    create_default_config,
    load_config,
    load_preset,
    merge_config,
    write_config,
)
from whisperline.exceptions import ConfigError


class TestVadConfig:
    def test_defaults(self) -> None:
        vad = VadConfig()
        assert vad.active is False
        assert vad.threshold == 0.5
        assert vad.min_speech_duration == 250
        assert vad.max_speech_duration is None
        assert vad.min_silence_duration == 2000
        assert vad.padding_duration == 400

    def test_invalid_threshold_raises(self) -> None:
        with pytest.raises(ValueError):
            VadConfig(threshold=1.5)

    def test_negative_duration_raises(self) -> None:
        with pytest.raises(ValueError):
            VadConfig(padding_duration=-1)


class TestWhisperConfig:
    def test_defaults(self) -> None:
        config = WhisperConfig()
        assert config.starting_prompt is None
        assert config.prefix is None
        assert config.language is None
        assert config.beam_size == 5
        assert config.best_of == 5
        assert config.patience == 1.0
        assert config.length_penalty == 1.0
        assert config.chunk_length is None
        assert config.vad == VadConfig()

    def test_immutable(self) -> None:
        config = WhisperConfig()
        with pytest.raises(ValueError):
            config.beam_size = 1

    def test_numeric_fields_not_optional(self) -> None:
        with pytest.raises(ValueError):
            WhisperConfig(beam_size=None)

    def test_invalid_beam_size_raises(self) -> None:
        with pytest.raises(ValueError):
            WhisperConfig(beam_size=0)

    def test_invalid_chunk_length_raises(self) -> None:
        with pytest.raises(ValueError):
            WhisperConfig(chunk_length=0)

    def test_nested_vad_from_dict(self) -> None:
        config = WhisperConfig(vad={"active": True, "max_speech_duration": 30})
        assert config.vad.active is True
        assert config.vad.max_speech_duration == 30


class TestWhisperlineConfig:
    def test_defaults(self) -> None:
        config = WhisperlineConfig()
        assert config.model == "base.en"
        assert config.device == "cpu"
        assert config.compute_type == "int8"
        assert config.persistent is False

    def test_invalid_device_raises(self) -> None:
        with pytest.raises(ValueError):
            WhisperlineConfig(device="tpu")

    def test_invalid_compute_type_raises(self) -> None:
        with pytest.raises(ValueError):
            WhisperlineConfig(compute_type="int4")

    def test_invalid_preset_raises(self) -> None:
        with pytest.raises(ValueError):
            WhisperlineConfig(preset="turbo")


class TestPresets:
    def test_load_preset(self) -> None:
        assert load_preset("fast") == {"beam_size": 1, "best_of": 1}

    def test_load_preset_returns_copy(self) -> None:
        preset = load_preset("vad")
        preset["vad"]["active"] = False
        assert load_preset("vad")["vad"]["active"] is True

    def test_unknown_preset_raises(self) -> None:
        with pytest.raises(ConfigError):
            load_preset("turbo")


class TestMergeConfig:
    def test_overrides_take_precedence(self) -> None:
        merged = merge_config({"beam_size": 3}, {"beam_size": 1, "best_of": 1})
        assert merged == {"beam_size": 3, "best_of": 1}

    def test_none_does_not_override(self) -> None:
        merged = merge_config({"beam_size": None}, {"beam_size": 1})
        assert merged["beam_size"] == 1

    def test_vad_merged_per_key(self) -> None:
        merged = merge_config(
            {"vad": {"threshold": 0.7}},
            {"vad": {"active": True, "min_silence_duration": 500}},
        )
        assert merged["vad"] == {"active": True, "min_silence_duration": 500, "threshold": 0.7}

    def test_defaults_not_mutated(self) -> None:
        defaults = {"vad": {"active": True}}
        merge_config({"vad": {"active": False}}, defaults)
        assert defaults["vad"]["active"] is True


class TestLoadConfig:
    def test_load_from_directory(self, tmp_path: Path, sample_config_dict: dict) -> None:
        write_config(sample_config_dict, tmp_path / "whisperline.yaml")
        config = load_config(tmp_path)

        assert config.model == "small"
        assert config.persistent is True
        assert config.transcription.language == "en"
        assert config.transcription.beam_size == 3
        assert config.transcription.vad.active is True
        assert config.transcription.vad.threshold == 0.6
        assert config.config_path == tmp_path / "whisperline.yaml"

    def test_preset_applied_under_file_values(self, tmp_path: Path) -> None:
        write_config(
            {"preset": "fast", "transcription": {"best_of": 4}},
            tmp_path / "whisperline.yaml",
        )
        config = load_config(tmp_path)
        assert config.transcription.beam_size == 1
        assert config.transcription.best_of == 4

    def test_preset_argument_overrides_file(self, tmp_path: Path) -> None:
        write_config({"preset": "fast"}, tmp_path / "whisperline.yaml")
        config = load_config(tmp_path, preset="accurate")
        assert config.preset == "accurate"
        assert config.transcription.beam_size == 10

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path)

    def test_invalid_values_raise_config_error(self, tmp_path: Path) -> None:
        write_config({"transcription": {"beam_size": 0}}, tmp_path / "whisperline.yaml")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_malformed_yaml_raises_config_error(self, tmp_path: Path) -> None:
        (tmp_path / "whisperline.yaml").write_text("model: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_non_mapping_raises_config_error(self, tmp_path: Path) -> None:
        (tmp_path / "whisperline.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "whisperline.yaml").write_text("")
        config = load_config(tmp_path)
        assert config.transcription == WhisperConfig()

    def test_empty_preset_means_default(self, tmp_path: Path) -> None:
        (tmp_path / "whisperline.yaml").write_text("preset:\nmodel: small\n")
        config = load_config(tmp_path)
        assert config.preset == "default"
        assert config.model == "small"
        assert config.transcription == WhisperConfig()


class TestBuildConfig:
    def test_non_mapping_transcription_raises(self) -> None:
        with pytest.raises(ConfigError):
            build_config({"transcription": ["beam_size"]})


class TestCreateDefaultConfig:
    def test_round_trips_through_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "whisperline.yaml"
        write_config(create_default_config("vad"), path)

        with open(path) as f:
            raw = yaml.safe_load(f)
        assert raw["preset"] == "vad"
        assert raw["transcription"]["vad"]["active"] is True

        config = load_config(path)
        assert config.transcription.vad.min_silence_duration == 500
