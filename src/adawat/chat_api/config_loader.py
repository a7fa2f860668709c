from __future__ import annotations

import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Callable

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]

from .config import ApiConfig

CONFIG_FILE_ENV = "ADAWAT_CONFIG_FILE"
ENV_PREFIX = "ADAWAT_"
DEFAULT_CONFIG_PATH = Path("configs/chat_api.toml")

_SECTION_MAP: dict[str, list[str]] = {
    "server": ["host", "port", "environment", "https_redirect"],
    "ollama": ["ollama_base_url", "default_model", "request_timeout_ms"],
    "logging": ["log_path", "max_log_bytes", "log_requests"],
}


def _field_types() -> dict[str, Any]:
    return {f.name: f.type for f in fields(ApiConfig)}


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _coerce_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("boolean is not an integer setting")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return int(str(value))


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


# Field annotations are strings under ``from __future__ import annotations``.
_CASTERS: dict[str, Callable[[Any], Any]] = {
    "bool": _coerce_bool,
    "int": _coerce_int,
    "str": _coerce_str,
}


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        data = tomllib.load(fh)

    out: dict[str, Any] = {}
    for section, keys in _SECTION_MAP.items():
        section_values = data.get(section, {})
        if not isinstance(section_values, dict):
            continue
        for key in keys:
            if key in section_values:
                out[key] = section_values[key]
    return out


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    env = os.environ

    def env_bool(name: str, current: bool) -> bool:
        val = env.get(name)
        if val is None:
            return current
        return val.lower() in {"1", "true", "yes", "on"}

    def env_int(name: str, current: int) -> int:
        val = env.get(name)
        if val is None:
            return current
        try:
            return int(val)
        except ValueError:
            return current

    def env_str(name: str, current: str) -> str:
        val = env.get(name)
        if val is None:
            return current
        return val

    overrides = {
        "host": env_str("ADAWAT_HOST", config["host"]),
        "port": env_int("ADAWAT_PORT", config["port"]),
        "environment": env_str("ADAWAT_ENVIRONMENT", config["environment"]),
        "https_redirect": env_bool("ADAWAT_HTTPS_REDIRECT", config["https_redirect"]),
        "ollama_base_url": env_str(
            "ADAWAT_OLLAMA_BASE_URL", config["ollama_base_url"]
        ),
        "default_model": env_str("ADAWAT_DEFAULT_MODEL", config["default_model"]),
        "request_timeout_ms": env_int(
            "ADAWAT_REQUEST_TIMEOUT_MS", config["request_timeout_ms"]
        ),
        "log_path": env_str("ADAWAT_LOG_PATH", config["log_path"]),
        "max_log_bytes": env_int("ADAWAT_MAX_LOG_BYTES", config["max_log_bytes"]),
        "log_requests": env_bool("ADAWAT_LOG_REQUESTS", config["log_requests"]),
    }
    config.update(overrides)
    return config


def _default_config_dict() -> dict[str, Any]:
    data = asdict(ApiConfig())
    data.pop("config_file_path", None)
    return data


def _normalize(config: dict[str, Any]) -> dict[str, Any]:
    field_types = _field_types()
    normalized = {}
    for key, default_value in _default_config_dict().items():
        value = config.get(key, default_value)
        caster = _CASTERS.get(str(field_types.get(key)))
        if caster is None:
            normalized[key] = value
            continue
        try:
            normalized[key] = caster(value)
        except (TypeError, ValueError):
            normalized[key] = default_value
    return normalized


def config_file_path() -> Path:
    return Path(os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_PATH)).expanduser()


def load_file_config() -> dict[str, Any]:
    """Return defaults merged with the config file, ignoring the environment."""
    base = _default_config_dict()
    base.update(_read_config_file(config_file_path()))
    return _normalize(base)


def load_api_config() -> ApiConfig:
    candidate = config_file_path()
    normalized = _normalize(_read_config_file(candidate))
    normalized = _apply_env_overrides(normalized)
    cfg = ApiConfig(**normalized)
    cfg.config_file_path = str(candidate)
    return cfg


def list_env_overrides() -> dict[str, str]:
    return {
        key: value for key, value in os.environ.items() if key.startswith(ENV_PREFIX)
    }
