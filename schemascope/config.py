"""Configuration loading for schemascope (.schemascope.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".schemascope.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


DEFAULT_EXTENSIONS = [".js", ".ts", ".mjs", ".cjs"]
DEFAULT_EXCLUDE_PATTERNS = [
    "node_modules",
    ".test.",
    ".spec.",
    "__tests__",
    "__mocks__",
    ".d.ts",
    "migrations",
    "seeders",
    "dist/",
    "build/",
    ".next/",
    ".git/",
]
DEFAULT_MODEL_DIRS = [
    "/models/",
    "/model/",
    "/schemas/",
    "/schema/",
    "/entities/",
    "/entity/",
    "/collections/",
    "/db/",
    "/database/",
]
DEFAULT_MODEL_FILENAME_HINTS = ["model", "schema", "entity"]


@dataclass
class SelectorConfig:
    """Candidate file selection rules."""

    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    model_dirs: List[str] = field(default_factory=lambda: list(DEFAULT_MODEL_DIRS))
    filename_hints: List[str] = field(default_factory=lambda: list(DEFAULT_MODEL_FILENAME_HINTS))
    strong_limit: int = 30
    weak_limit: int = 40


@dataclass
class ExtractionConfig:
    """Schema extraction tuning."""

    lookback: int = 200


@dataclass
class FetchConfig:
    """Content fetch concurrency and batch timeout."""

    workers: int = 8
    timeout: Optional[float] = None


@dataclass
class GitHubConfig:
    """GitHub API access settings."""

    api_url: str = "https://api.github.com"
    token: Optional[str] = None
    request_timeout: float = 30.0


@dataclass
class SchemascopeConfig:
    """Represents the settings defined in .schemascope.yml."""

    root: Path
    selector: SelectorConfig = field(default_factory=SelectorConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    exclude_paths: List[str] = field(default_factory=list)


ENV_TOKEN_KEYS = ("SCHEMASCOPE_GITHUB_TOKEN", "GITHUB_TOKEN")


def load_config(config_path: Path) -> SchemascopeConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        config = SchemascopeConfig(root=root)
        config.github.token = _first_env_value(ENV_TOKEN_KEYS)
        return config

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    selector = SelectorConfig()
    selector_data = _as_dict(data.get("selector"))
    if selector_data:
        extensions = _as_str_list(selector_data.get("extensions"))
        if extensions:
            selector.extensions = [_normalise_extension(ext) for ext in extensions]
        exclude = _as_str_list(selector_data.get("exclude_patterns"))
        if exclude:
            selector.exclude_patterns = exclude
        selector.exclude_patterns.extend(_as_str_list(selector_data.get("extra_exclude_patterns")))
        model_dirs = _as_str_list(selector_data.get("model_dirs"))
        if model_dirs:
            selector.model_dirs = model_dirs
        hints = _as_str_list(selector_data.get("filename_hints"))
        if hints:
            selector.filename_hints = hints
        selector.strong_limit = _as_positive_int(selector_data.get("strong_limit"), selector.strong_limit)
        selector.weak_limit = _as_positive_int(selector_data.get("weak_limit"), selector.weak_limit)

    extraction = ExtractionConfig()
    extraction_data = _as_dict(data.get("extraction"))
    if extraction_data:
        extraction.lookback = _as_positive_int(extraction_data.get("lookback"), extraction.lookback)

    fetch = FetchConfig()
    fetch_data = _as_dict(data.get("fetch"))
    if fetch_data:
        fetch.workers = _as_positive_int(fetch_data.get("workers"), fetch.workers)
        fetch.timeout = _as_float(fetch_data.get("timeout"))

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.api_url = (_as_str(github_data.get("api_url")) or github.api_url).rstrip("/")
        github.token = _as_str(github_data.get("token"))
        github.request_timeout = _as_float(github_data.get("request_timeout")) or github.request_timeout
    if not github.token:
        github.token = _first_env_value(ENV_TOKEN_KEYS)

    return SchemascopeConfig(
        root=root,
        selector=selector,
        extraction=extraction,
        fetch=fetch,
        github=github,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip().lower()
    return value if value.startswith(".") else f".{value}"


def _first_env_value(keys: Sequence[str]) -> Optional[str]:
    for key in keys:
        value = os.getenv(key)
        if value:
            return value
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_positive_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value if value > 0 else default
    if isinstance(value, str):
        try:
            parsed = int(value)
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "ExtractionConfig",
    "FetchConfig",
    "GitHubConfig",
    "SchemascopeConfig",
    "SelectorConfig",
    "load_config",
]
