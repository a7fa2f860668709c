from __future__ import annotations

import json
import os
import time
from typing import Any, Dict


class JsonlLogger:
    """Append-only JSONL log with one record per chat request.

    The active file is renamed to ``<path>.<timestamp>`` once it grows past
    ``max_bytes``. Write failures are ignored so logging never fails a request.
    """

    def __init__(self, path: str, max_bytes: int = 25_000_000, enabled: bool = True):
        self.path = path
        self.max_bytes = max_bytes
        self.enabled = enabled
        log_dir = os.path.dirname(path)
        if enabled and log_dir:
            try:
                os.makedirs(log_dir, exist_ok=True)
            except OSError:
                pass

    def _rotate_if_needed(self):
        try:
            if (
                os.path.exists(self.path)
                and os.path.getsize(self.path) > self.max_bytes
            ):
                ts = time.strftime("%Y%m%d-%H%M%S")
                os.rename(self.path, f"{self.path}.{ts}")
        except OSError:
            pass

    def log(self, record: Dict[str, Any]):
        if not self.enabled:
            return
        record.setdefault("ts", time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime()))
        self._rotate_if_needed()
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, ensure_ascii=False) + "\n")
        except OSError:
            pass

    def log_chat(
        self,
        *,
        model: str,
        started_at: float,
        response_chars: int,
        status: str,
        stream: bool,
        history_len: int = 0,
    ):
        self.log(
            {
                "model": model,
                "history_len": history_len,
                "response_chars": response_chars,
                "duration_ms": round((time.time() - started_at) * 1000, 1),
                "stream": stream,
                "status": status,
            }
        )
