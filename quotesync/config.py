from __future__ import annotations

import json
import os
import re
import warnings
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/quotesync/config.json").expanduser()
DEFAULT_SERVER_URL = "https://jsonplaceholder.typicode.com/posts"

CONFIG_ENV_OVERRIDES = {
    "server_url": "QUOTESYNC_SERVER_URL",
    "http_timeout_s": "QUOTESYNC_HTTP_TIMEOUT_S",
    "sync_interval_s": "QUOTESYNC_SYNC_INTERVAL_S",
    "post_new_quotes": "QUOTESYNC_POST_NEW_QUOTES",
    "log_level": "QUOTESYNC_LOG_LEVEL",
}

_TRAILING_COMMA_RE = re.compile(r",(\s*[}\]])")


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("QUOTESYNC_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def strip_json_comments(text: str) -> str:
    """Drop // and /* */ comments outside of string literals."""

    result: list[str] = []
    in_string = False
    escape_next = False
    i = 0
    while i < len(text):
        char = text[i]
        if in_string:
            result.append(char)
            if escape_next:
                escape_next = False
            elif char == "\\":
                escape_next = True
            elif char == '"':
                in_string = False
            i += 1
            continue
        if char == '"':
            in_string = True
            result.append(char)
            i += 1
            continue
        if text.startswith("//", i):
            end = text.find("\n", i)
            i = len(text) if end == -1 else end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = len(text) if end == -1 else end + 2
            continue
        result.append(char)
        i += 1
    return "".join(result)


def _parse_config_text(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        cleaned = _TRAILING_COMMA_RE.sub(r"\1", strip_json_comments(raw))
        return json.loads(cleaned)


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = _parse_config_text(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class QuoteSyncConfig:
    server_url: str = DEFAULT_SERVER_URL
    http_timeout_s: float = 5.0
    sync_interval_s: int = 30
    post_new_quotes: bool = True
    log_level: str = "WARNING"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    if value.lower() in {"1", "true", "yes", "on"}:
        return True
    if value.lower() in {"0", "false", "off", "no"}:
        return False
    return default


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default


def _parse_float(value: object, default: float, *, key: str) -> float:
    if value is None:
        return default
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default


def _coerce_bool(value: object, default: bool, *, key: str) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return _parse_bool(value, default)
    warnings.warn(f"Invalid bool for {key}: {value!r}", RuntimeWarning, stacklevel=2)
    return default


def load_config(path: Path | None = None) -> QuoteSyncConfig:
    cfg = QuoteSyncConfig()
    try:
        data = read_config_file(path)
    except ValueError as exc:
        warnings.warn(f"Ignoring config file: {exc}", RuntimeWarning, stacklevel=2)
        data = {}
    cfg = _apply_dict(cfg, data)
    cfg = _apply_env(cfg)
    return cfg


def coerce_config_value(key: str, value: object, default: Any) -> Any:
    if key == "sync_interval_s":
        return _parse_int(value, default, key=key)
    if key == "http_timeout_s":
        return _parse_float(value, default, key=key)
    if key == "post_new_quotes":
        return _coerce_bool(value, default, key=key)
    if value is None:
        return default
    return str(value)


def _apply_dict(cfg: QuoteSyncConfig, data: dict[str, Any]) -> QuoteSyncConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        setattr(cfg, key, coerce_config_value(key, value, getattr(cfg, key)))
    return cfg


def _apply_env(cfg: QuoteSyncConfig) -> QuoteSyncConfig:
    cfg.server_url = os.getenv("QUOTESYNC_SERVER_URL", cfg.server_url)
    cfg.http_timeout_s = _parse_float(
        os.getenv("QUOTESYNC_HTTP_TIMEOUT_S"), cfg.http_timeout_s, key="http_timeout_s"
    )
    cfg.sync_interval_s = _parse_int(
        os.getenv("QUOTESYNC_SYNC_INTERVAL_S"), cfg.sync_interval_s, key="sync_interval_s"
    )
    cfg.post_new_quotes = _parse_bool(
        os.getenv("QUOTESYNC_POST_NEW_QUOTES"), cfg.post_new_quotes
    )
    cfg.log_level = os.getenv("QUOTESYNC_LOG_LEVEL", cfg.log_level)
    return cfg
