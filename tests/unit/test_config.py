"""Unit tests for settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

from src.config.loader import _deep_merge, load_config
from src.config.settings import Settings


def _settings(**overrides) -> Settings:
    defaults = {"openai_api_key": "", "anthropic_api_key": ""}
    defaults.update(overrides)
    return Settings(**defaults)


class TestSettings:
    def test_available_providers(self) -> None:
        assert _settings().get_available_llm_providers() == []
        assert _settings(openai_api_key="sk", anthropic_api_key="ak").get_available_llm_providers() == [
            "openai",
            "anthropic",
        ]

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("ADVISORY_DEDUP_THRESHOLD", "1.0")
        monkeypatch.setenv("FORMS_TRANSFORM_MANUAL_EDITS", "true")
        settings = Settings()
        assert settings.advisory_dedup_threshold == 1.0
        assert settings.forms_transform_manual_edits is True


class TestLoadConfig:
    def test_yaml_and_settings_merged(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "assistant:\n  temperature: 0.2\nforms:\n  session_max: 5\n  extra: kept\n"
        )
        config = load_config(str(config_file), settings=_settings(form_session_max=7))
        assert config["assistant"]["temperature"] == 0.2
        assert config["forms"]["session_max"] == 7
        assert config["forms"]["extra"] == "kept"
        assert config["llm"]["available_providers"] == []

    def test_missing_file(self, tmp_path: Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"), settings=_settings())
        assert config["advisory"]["max_lines"] == 3

    def test_repo_defaults(self, project_root: Path) -> None:
        config = load_config(str(project_root / "config" / "config.yaml"), settings=_settings())
        assert config["translation"]["temperature"] == 0.1


def test_deep_merge_nested() -> None:
    base = {"a": {"b": 1, "c": 2}, "d": 3}
    _deep_merge(base, {"a": {"b": 10}, "e": 4})
    assert base == {"a": {"b": 10, "c": 2}, "d": 3, "e": 4}
