"""Runtime settings: API endpoint, timeouts, cache TTL and the GitHub token.

Resolution order is defaults, then an optional YAML file, then environment
variables. A missing token is fatal at startup.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

import yaml

from doc_quality.errors import ConfigError
from doc_quality.scoring.checks import DEFAULT_INSTALL_KEYWORDS

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_USER_AGENT = "doc-quality"

CONFIG_PATH_ENV = "DOC_QUALITY_CONFIG"

# env var -> (settings field, parser)
_ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "DOC_QUALITY_API_BASE": ("api_base", str),
    "DOC_QUALITY_TIMEOUT": ("timeout_seconds", float),
    "DOC_QUALITY_CACHE_TTL": ("cache_ttl_seconds", float),
}

_FILE_KEYS: dict[str, type] = {
    "api_base": str,
    "timeout_seconds": float,
    "file_timeout_seconds": float,
    "cache_ttl_seconds": float,
    "batch_concurrency": int,
    "user_agent": str,
}


@dataclass(frozen=True, slots=True)
class Settings:
    token: str
    token_source: str = "env"  # env | gh_cli
    api_base: str = DEFAULT_API_BASE
    timeout_seconds: float = 10.0
    file_timeout_seconds: float = 10.0
    cache_ttl_seconds: float = 600.0
    batch_concurrency: int = 5
    install_keywords: tuple[str, ...] = DEFAULT_INSTALL_KEYWORDS
    user_agent: str = DEFAULT_USER_AGENT


def load_settings(
    environ: Mapping[str, str] | None = None,
    config_path: Path | str | None = None,
) -> Settings:
    """Build Settings from the environment and an optional YAML file.

    Raises:
        ConfigError: If no token can be resolved, the config file is
            unreadable or malformed, or an override is not a valid number.
    """
    env = os.environ if environ is None else environ

    token, source = resolve_token(env)
    if not token:
        raise ConfigError(
            "No GitHub token found. Set GITHUB_TOKEN or log in with `gh auth login`."
        )
    settings = Settings(token=token, token_source=source)

    path = config_path or env.get(CONFIG_PATH_ENV, "").strip()
    if path:
        settings = _apply_file(settings, Path(path))

    for var, (attr, parse) in _ENV_OVERRIDES.items():
        raw = env.get(var, "").strip()
        if not raw:
            continue
        settings = replace(settings, **{attr: _coerce(raw, parse, var)})

    _validate(settings)
    return settings


def resolve_token(env: Mapping[str, str]) -> tuple[str | None, str]:
    """Resolve auth token: env first, then `gh auth token` fallback."""
    env_token = env.get("GITHUB_TOKEN", "").strip()
    if env_token:
        return env_token, "env"

    gh_token = _resolve_gh_cli_token()
    if gh_token:
        logger.info("Using GitHub token from `gh auth token` fallback.")
        return gh_token, "gh_cli"
    return None, "none"


def _resolve_gh_cli_token() -> str | None:
    """Try to read a token from local GitHub CLI auth context."""
    try:
        completed = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            timeout=2,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        return None

    if completed.returncode != 0:
        return None
    token = completed.stdout.strip()
    return token or None


def _apply_file(settings: Settings, path: Path) -> Settings:
    """Overlay values from a YAML mapping file onto *settings*."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to parse config file '{path}': {exc}") from exc

    if data is None:
        return settings
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config format in {path}: expected a YAML mapping.")

    updates: dict[str, object] = {}
    for key, parse in _FILE_KEYS.items():
        if key in data and data[key] is not None:
            updates[key] = _coerce(data[key], parse, f"{path}:{key}")

    if "install_keywords" in data:
        keywords = data["install_keywords"]
        if not isinstance(keywords, list) or not all(isinstance(k, str) for k in keywords):
            raise ConfigError(
                f"Invalid config format in {path}: 'install_keywords' must be a list of strings."
            )
        updates["install_keywords"] = tuple(k.strip() for k in keywords if k.strip())

    unknown = set(data) - set(_FILE_KEYS) - {"install_keywords"}
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(sorted(unknown)))

    return replace(settings, **updates)


def _coerce(value: object, parse: type, source: str) -> object:
    try:
        return parse(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {source}: {value!r}") from exc


def _validate(settings: Settings) -> None:
    if settings.timeout_seconds <= 0 or settings.file_timeout_seconds <= 0:
        raise ConfigError("Timeouts must be positive numbers of seconds.")
    if settings.cache_ttl_seconds < 0:
        raise ConfigError("cache_ttl_seconds must not be negative.")
    if settings.batch_concurrency < 1:
        raise ConfigError("batch_concurrency must be at least 1.")
    if not settings.api_base.startswith(("http://", "https://")):
        raise ConfigError(f"api_base must be an http(s) URL, got {settings.api_base!r}.")
