"""Typer CLI for running and inspecting the chat API."""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict
from typing import Optional

import typer

from .config import ApiConfig
from .config_loader import list_env_overrides, load_file_config
from .ollama_client import OllamaApiClient, OllamaError

app = typer.Typer(help="Chat API forwarding to a local Ollama server")


@app.command("serve")
def cmd_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port"),
):  # pragma: no cover - starts a server
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from ..logging_utils import configure_logging
    from .app import _cfg, app as api_app

    configure_logging("chat_api")
    uvicorn.run(api_app, host=host or _cfg.host, port=port or _cfg.port)


@app.command("models")
def cmd_models(
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Ollama server (defaults to configured URL)"
    ),
):
    """Print the models installed on the Ollama server as JSON."""
    cfg = ApiConfig.load()

    async def _run() -> list[dict]:
        client = OllamaApiClient(
            base_url or cfg.ollama_base_url,
            selected_model=cfg.default_model,
            timeout=cfg.request_timeout_ms / 1000,
        )
        try:
            return await client.list_local_models()
        finally:
            await client.aclose()

    try:
        models = asyncio.run(_run())
    except OllamaError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(json.dumps(models, indent=2))


@app.command("config")
def cmd_config():
    """Show the effective configuration and where it came from."""
    runtime = asdict(ApiConfig.load())
    config_path = runtime.pop("config_file_path", None)
    typer.echo(
        json.dumps(
            {
                "runtime": runtime,
                "file": load_file_config(),
                "config_file_path": config_path,
                "env_overrides": list_env_overrides(),
            },
            indent=2,
        )
    )


if __name__ == "__main__":  # pragma: no cover
    app()
