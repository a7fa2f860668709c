"""Centralised logging utilities for Adawat services."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

__all__ = ["configure_logging"]

_MANAGED_HANDLER_FLAG = "_adawat_managed_handler"


def _default_log_directory() -> Path:
    """Return the default directory for Adawat log files."""

    env_override = os.environ.get("ADAWAT_LOG_DIR")
    if env_override:
        return Path(env_override).expanduser()

    module_path = Path(__file__).resolve()
    for candidate in module_path.parents:
        if (candidate / "pyproject.toml").exists() or (candidate / ".git").exists():
            return candidate / "logs"

    return Path.cwd() / "logs"


def _remove_managed_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _MANAGED_HANDLER_FLAG, False):
            logger.removeHandler(handler)
            handler.close()


def _resolve_level(level: Optional[int]) -> int:
    """Explicit level, else ``ADAWAT_LOG_LEVEL`` (name or number), else INFO."""
    if level is not None:
        return level
    raw = os.environ.get("ADAWAT_LOG_LEVEL", "").strip()
    if raw.isdigit():
        return int(raw)
    named = logging.getLevelName(raw.upper()) if raw else None
    return named if isinstance(named, int) else logging.INFO


def configure_logging(
    log_name: str,
    *,
    level: Optional[int] = None,
    log_dir: Optional[Path] = None,
    include_console: bool = True,
) -> Path:
    """Configure root logging to write to a named file inside the log directory.

    Calling it again replaces the handlers installed by the previous call.
    """

    target_directory = (
        Path(log_dir).expanduser() if log_dir else _default_log_directory()
    )
    target_directory.mkdir(parents=True, exist_ok=True)
    log_path = target_directory / f"{log_name}.log"

    root_logger = logging.getLogger()
    level = _resolve_level(level)
    root_logger.setLevel(level)
    _remove_managed_handlers(root_logger)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    setattr(file_handler, _MANAGED_HANDLER_FLAG, True)
    root_logger.addHandler(file_handler)

    if include_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        setattr(console_handler, _MANAGED_HANDLER_FLAG, True)
        root_logger.addHandler(console_handler)

    logging.captureWarnings(True)
    # httpx logs every Ollama request at INFO.
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return log_path
