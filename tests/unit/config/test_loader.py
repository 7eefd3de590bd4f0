"""Tests for config models and loader."""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError
import pytest

from assetforge.core.agents.assets.models import AccountTier
from assetforge.core.config.loader import detect_format, load_app_config, load_config
from assetforge.core.config.models import AppConfig, SessionConfig


@pytest.fixture(autouse=True)
def _no_env_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


class TestDetectFormat:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [("config.json", "json"), ("config.yaml", "yaml"), ("config.yml", "yaml")],
    )
    def test_known_extensions(self, name: str, expected: str) -> None:
        assert detect_format(name) == expected

    def test_unknown_extension(self) -> None:
        with pytest.raises(ValueError):
            detect_format("config.toml")


class TestLoadConfig:
    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"output_dir": "out"}))
        assert load_config(path) == {"output_dir": "out"}

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("session:\n  initial_credits: 10\n")
        assert load_config(path) == {"session": {"initial_credits": 10}}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.json")


class TestLoadAppConfig:
    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = load_app_config(tmp_path / "config.json")

        assert config.session.initial_tier == AccountTier.FREE
        assert config.session.initial_credits == 5
        assert config.session.enforce_credits is True
        assert config.llm.api_key is None
        assert config.image.enabled is True

    def test_values_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "output_dir: build\n"
            "llm:\n  model: gpt-4.1\n"
            "session:\n  initial_tier: pro\n  initial_credits: 2\n"
        )

        config = load_app_config(path)

        assert config.output_dir == "build"
        assert config.llm.model == "gpt-4.1"
        assert config.session.initial_tier == AccountTier.PRO
        assert config.session.initial_credits == 2

    def test_env_key_fills_missing_keys(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        config = load_app_config(tmp_path / "config.json")

        assert config.llm.api_key == "env-key"
        assert config.image.api_key == "env-key"

    def test_file_key_wins_over_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"llm": {"api_key": "file-key"}}))

        config = load_app_config(path)

        assert config.llm.api_key == "file-key"
        assert config.image.api_key == "env-key"

    def test_invalid_values_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"session": {"initial_credits": -1}}))
        with pytest.raises(ValidationError):
            load_app_config(path)


class TestModels:
    def test_api_key_not_in_repr(self) -> None:
        config = AppConfig.model_validate({"llm": {"api_key": "secret"}})
        assert "secret" not in repr(config)

    def test_unknown_top_level_keys_ignored(self) -> None:
        assert AppConfig.model_validate({"future_option": True}).output_dir == "artifacts"

    def test_session_config_forbids_unknown_keys(self) -> None:
        with pytest.raises(ValidationError):
            SessionConfig.model_validate({"max_credits": 10})

    def test_image_size_validated(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig.model_validate({"image": {"size": "512x512"}})
