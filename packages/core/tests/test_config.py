"""Tests for configuration loading."""

import pytest

from adolens_core.config import api_key_env_var, build_settings, load_config


@pytest.fixture(autouse=True)
def _no_api_keys(monkeypatch):
    for var in ("GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["provider"] == "gemini"
    assert config["model"] is None
    assert config["review_depth"] == "standard"
    assert config["max_retries"] == 1
    assert config["request_timeout"] == 30.0
    assert config["model_timeout"] == 120.0
    assert config["store"] == "noop"
    assert config["focus"]["bugs"] is True
    assert config["focus"]["naming"] is False


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".adolens.yml"
    cfg.write_text("provider: openai\nreview_depth: quick\n")
    config = load_config(config_path=str(cfg))
    assert config["provider"] == "openai"
    assert config["review_depth"] == "quick"


def test_focus_merges_key_by_key(tmp_path):
    cfg = tmp_path / ".adolens.yml"
    cfg.write_text("focus:\n  naming: true\n  style: false\n")
    config = load_config(config_path=str(cfg))
    assert config["focus"]["naming"] is True
    assert config["focus"]["style"] is False
    assert config["focus"]["bugs"] is True


def test_default_focus_not_mutated(tmp_path):
    cfg = tmp_path / ".adolens.yml"
    cfg.write_text("focus:\n  bugs: false\n")
    load_config(config_path=str(cfg))
    assert load_config(config_path=str(tmp_path / "missing.yml"))["focus"]["bugs"] is True


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".adolens.yml"
    cfg.write_text("provider: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"provider": "anthropic"})
    assert config["provider"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".adolens.yml"
    cfg.write_text("provider: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"provider": None})
    assert config["provider"] == "openai"


def test_api_keys_read_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    config = load_config(config_path=str(tmp_path / "missing.yml"))
    assert config["gemini_api_key"] == "g-key"
    assert config["openai_api_key"] is None


def test_api_key_env_var():
    assert api_key_env_var("gemini") == "GEMINI_API_KEY"
    assert api_key_env_var("anthropic") == "ANTHROPIC_API_KEY"


class TestBuildSettings:
    def test_builds_from_config(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        config = load_config(config_path=str(tmp_path / "missing.yml"), cli_overrides={"model": "gemini-2.5-pro"})
        settings = build_settings(config)
        assert settings.api_key == "g-key"
        assert settings.model_id == "gemini-2.5-pro"
        assert settings.focus_areas == frozenset({"bugs", "security", "performance", "style"})

    def test_unknown_provider(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "missing.yml"), cli_overrides={"provider": "bard"})
        with pytest.raises(ValueError, match="Unknown model provider"):
            build_settings(config)

    def test_unknown_depth(self, tmp_path):
        config = load_config(config_path=str(tmp_path / "missing.yml"), cli_overrides={"review_depth": "deep"})
        with pytest.raises(ValueError, match="Unknown review depth"):
            build_settings(config)
