"""Unit tests for config.py"""

import pytest

from mdfolio.config import load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run every test in an empty directory without MDFOLIO_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in ("LANGUAGE", "TOC_DEPTH", "SCENE_BREAK_THRESHOLD", "OUTPUT_DIR"):
        monkeypatch.delenv(f"MDFOLIO_{name}", raising=False)


def test_load_config_defaults():
    """Settings defaults apply when no config.yaml, env var, or override exists."""
    settings = load_config()
    assert settings.language == "es"
    assert settings.toc_title == "Índice"
    assert settings.toc_depth == 1
    assert settings.scene_break_threshold == 2
    assert settings.output_dir == "dist"


def test_load_config_reads_config_yaml(tmp_path):
    """config.yaml values are applied."""
    (tmp_path / "config.yaml").write_text("language: fr\ntoc_depth: 2\n")
    settings = load_config()
    assert settings.language == "fr"
    assert settings.toc_depth == 2


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDFOLIO_LANGUAGE takes precedence over config.yaml language."""
    (tmp_path / "config.yaml").write_text("language: fr\n")
    monkeypatch.setenv("MDFOLIO_LANGUAGE", "ca")
    assert load_config().language == "ca"


def test_load_config_env_is_coerced(monkeypatch):
    """MDFOLIO_SCENE_BREAK_THRESHOLD env var is coerced to int."""
    monkeypatch.setenv("MDFOLIO_SCENE_BREAK_THRESHOLD", "3")
    assert load_config().scene_break_threshold == 3


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDFOLIO_OUTPUT_DIR", "env-out")
    assert load_config(overrides={"output_dir": "cli-out"}).output_dir == "cli-out"
    assert load_config(overrides={"output_dir": None}).output_dir == "env-out"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_rejects_out_of_range_depth():
    """toc_depth outside 1..3 fails validation (pydantic errors are ValueErrors)."""
    with pytest.raises(ValueError):
        load_config(overrides={"toc_depth": 5})


def test_load_config_explicit_path(tmp_path):
    """A config file outside the working directory can be named explicitly."""
    path = tmp_path / "conf" / "book.yaml"
    path.parent.mkdir()
    path.write_text("toc_title: Contenido\n", encoding="utf-8")
    assert load_config(path=path).toc_title == "Contenido"


def test_load_config_rejects_non_mapping(tmp_path):
    """A config file holding a list instead of a mapping is rejected."""
    (tmp_path / "config.yaml").write_text("- language\n- es\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()
