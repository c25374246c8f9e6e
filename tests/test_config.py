"""Tests for schemascope.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from schemascope.config import (
    ConfigError,
    SchemascopeConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def _clear_token_env(monkeypatch) -> None:
    monkeypatch.delenv("SCHEMASCOPE_GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SchemascopeConfig)
    assert config.root == tmp_path.resolve()
    assert config.selector.extensions == [".js", ".ts", ".mjs", ".cjs"]
    assert config.selector.strong_limit == 30
    assert config.selector.weak_limit == 40
    assert "node_modules" in config.selector.exclude_patterns
    assert config.extraction.lookback == 200
    assert config.fetch.workers == 8
    assert config.fetch.timeout is None
    assert config.github.api_url == "https://api.github.com"
    assert config.github.token is None
    assert config.exclude_paths == []


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".schemascope.yml"
    config_file.write_text(
        """
selector:
  extensions: [js, ".TS"]
  extra_exclude_patterns:
    - "fixtures/"
  model_dirs: ["/domain/"]
  strong_limit: 10
  weak_limit: "5"
extraction:
  lookback: 400
fetch:
  workers: 4
  timeout: 12.5
github:
  api_url: "https://github.example.com/api/v3/"
  token: "file-token"
  request_timeout: 60
exclude_paths:
  - "sandbox/"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.selector.extensions == [".js", ".ts"]
    assert config.selector.exclude_patterns[-1] == "fixtures/"
    assert "node_modules" in config.selector.exclude_patterns
    assert config.selector.model_dirs == ["/domain/"]
    assert config.selector.filename_hints == ["model", "schema", "entity"]
    assert config.selector.strong_limit == 10
    assert config.selector.weak_limit == 5
    assert config.extraction.lookback == 400
    assert config.fetch.workers == 4
    assert config.fetch.timeout == 12.5
    assert config.github.api_url == "https://github.example.com/api/v3"
    assert config.github.token == "file-token"
    assert config.github.request_timeout == 60.0
    assert config.exclude_paths == ["sandbox/"]


def test_invalid_limits_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".schemascope.yml").write_text(
        "selector:\n  strong_limit: 0\n  weak_limit: lots\nfetch:\n  workers: true\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.selector.strong_limit == 30
    assert config.selector.weak_limit == 40
    assert config.fetch.workers == 8


def test_token_falls_back_to_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", "generic")
    assert load_config(tmp_path).github.token == "generic"

    monkeypatch.setenv("SCHEMASCOPE_GITHUB_TOKEN", "specific")
    assert load_config(tmp_path).github.token == "specific"

    (tmp_path / ".schemascope.yml").write_text("github:\n  token: from-file\n", encoding="utf-8")
    assert load_config(tmp_path).github.token == "from-file"


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".schemascope.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.selector.weak_limit == 40


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    (tmp_path / ".schemascope.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_reports_yaml_errors(tmp_path: Path) -> None:
    (tmp_path / ".schemascope.yml").write_text("selector: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError) as excinfo:
        load_config(tmp_path)

    assert ".schemascope.yml" in str(excinfo.value)
