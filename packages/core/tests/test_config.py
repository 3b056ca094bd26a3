"""Tests for configuration loading."""

import pytest

from prwatch_core.config import load_config


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["source"] == "gh"
    assert config["repo"] is None
    assert config["remote"] == "origin"
    assert config["refresh_interval"] == 15
    assert config["tick_interval"] == 0.075
    assert config["draft"] is True
    assert config["create"] is True


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prwatch.yml"
    cfg.write_text("source: api\nrepo: octo/repo\nrefresh_interval: 30\n")
    config = load_config(config_path=str(cfg))
    assert config["source"] == "api"
    assert config["repo"] == "octo/repo"
    assert config["refresh_interval"] == 30


def test_empty_config_file_uses_defaults(tmp_path):
    cfg = tmp_path / ".prwatch.yml"
    cfg.write_text("")
    config = load_config(config_path=str(cfg))
    assert config["source"] == "gh"


def test_draft_loaded(tmp_path):
    cfg = tmp_path / ".prwatch.yml"
    cfg.write_text("draft: false\n")
    config = load_config(config_path=str(cfg))
    assert config["draft"] is False


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prwatch.yml"
    cfg.write_text("source: api\n")
    config = load_config(config_path=str(cfg), cli_overrides={"source": "gh"})
    assert config["source"] == "gh"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prwatch.yml"
    cfg.write_text("refresh_interval: 60\n")
    config = load_config(config_path=str(cfg), cli_overrides={"refresh_interval": None})
    assert config["refresh_interval"] == 60


def test_zero_refresh_interval_allowed(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"), cli_overrides={"refresh_interval": 0})
    assert config["refresh_interval"] == 0


def test_unknown_source_raises(tmp_path):
    cfg = tmp_path / ".prwatch.yml"
    cfg.write_text("source: gitlab\n")
    with pytest.raises(ValueError, match="gitlab"):
        load_config(config_path=str(cfg))


@pytest.mark.parametrize("overrides", [{"refresh_interval": -1}, {"tick_interval": 0}])
def test_invalid_intervals_raise(tmp_path, overrides):
    with pytest.raises(ValueError):
        load_config(config_path=str(tmp_path / "nonexistent.yml"), cli_overrides=overrides)


def test_github_token_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-token")
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] == "gh-token"


def test_github_token_none_without_env(monkeypatch, tmp_path):
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["github_token"] is None


def test_configs_are_independent(tmp_path):
    config_a = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_b = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    config_a["remote"] = "upstream"
    assert config_b["remote"] == "origin"
