from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class ApiConfig:
    host: str = "127.0.0.1"
    port: int = 8200
    # "development" exposes the interactive docs (/docs, /openapi.json)
    environment: str = "production"
    https_redirect: bool = False
    ollama_base_url: str = "http://localhost:11434"
    default_model: str = "llama3"
    request_timeout_ms: int = 300_000
    log_path: str = "logs/chat_api.jsonl"
    max_log_bytes: int = 25_000_000
    log_requests: bool = True
    config_file_path: Optional[str] = None

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() == "development"

    @classmethod
    def load(cls) -> "ApiConfig":
        from .config_loader import load_api_config

        return load_api_config()
