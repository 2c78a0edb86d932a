"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from adpub.config import load_config
from adpub.core.models import PreamblePolicy


@pytest.fixture(autouse=True)
def chdir_tmp(tmp_path, monkeypatch):
    """Keep a developer's config.yaml out of the way."""
    monkeypatch.chdir(tmp_path)


def test_load_config_defaults():
    """Settings defaults apply when no config.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.parse_level == 2
    assert settings.author_key == ""
    assert settings.preamble is PreamblePolicy.discard
    assert settings.output_dir == "dist"


def test_load_config_uses_env_author_key(monkeypatch):
    """ADPUB_AUTHOR_KEY env var is picked up by load_config."""
    monkeypatch.setenv("ADPUB_AUTHOR_KEY", "npub-env")
    assert load_config().author_key == "npub-env"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """ADPUB_PARSE_LEVEL takes precedence over config.yaml parse_level."""
    (tmp_path / "config.yaml").write_text("parse_level: 4\n")
    monkeypatch.setenv("ADPUB_PARSE_LEVEL", "3")
    assert load_config().parse_level == 3


def test_load_config_reads_config_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("preamble: first-child\noutput_dir: out\n")
    settings = load_config()
    assert settings.preamble is PreamblePolicy.first_child
    assert settings.output_dir == "out"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("ADPUB_PARSE_LEVEL", "3")
    assert load_config(overrides={"parse_level": 5}).parse_level == 5
    assert load_config(overrides={"parse_level": None}).parse_level == 3


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


@pytest.mark.parametrize("level", ["1", "6"])
def test_load_config_parse_level_range(monkeypatch, level):
    monkeypatch.setenv("ADPUB_PARSE_LEVEL", level)
    with pytest.raises(ValidationError):
        load_config()


def test_load_config_invalid_preamble(monkeypatch):
    monkeypatch.setenv("ADPUB_PREAMBLE", "sideways")
    with pytest.raises(ValidationError):
        load_config()
