import json
import os

import httpx
import pytest
from typer.testing import CliRunner

from adawat.chat_api import ollama_client as client_module
from adawat.chat_api.cli import app as cli_app
from fakes import FakeResponse

runner = CliRunner()


@pytest.fixture(autouse=True)
def missing_config_file(tmp_path, monkeypatch):
    monkeypatch.setenv("ADAWAT_CONFIG_FILE", str(tmp_path / "chat_api.toml"))


def test_cli_models_prints_json(monkeypatch):
    seen = {}

    async def fake_get(self, url):
        seen["url"] = url
        return FakeResponse(payload={"models": [{"name": "llama3:latest"}]})

    monkeypatch.setattr(client_module.httpx.AsyncClient, "get", fake_get)

    res = runner.invoke(cli_app, ["models", "--base-url", "http://gpu-box:11434"])

    assert res.exit_code == 0
    assert json.loads(res.stdout) == [{"name": "llama3:latest"}]
    assert seen["url"] == "http://gpu-box:11434/api/tags"


def test_cli_models_reports_unreachable_server(monkeypatch):
    async def fake_get(self, url):
        raise httpx.ConnectError("Connection refused")

    monkeypatch.setattr(client_module.httpx.AsyncClient, "get", fake_get)

    res = runner.invoke(cli_app, ["models"])

    assert res.exit_code == 1


def test_cli_config_shows_env_overrides(monkeypatch):
    monkeypatch.setenv("ADAWAT_DEFAULT_MODEL", "gemma2")

    res = runner.invoke(cli_app, ["config"])

    assert res.exit_code == 0
    data = json.loads(res.stdout)
    assert data["runtime"]["default_model"] == "gemma2"
    assert data["file"]["default_model"] == "llama3"
    assert data["env_overrides"]["ADAWAT_DEFAULT_MODEL"] == "gemma2"
    assert data["config_file_path"] == os.environ["ADAWAT_CONFIG_FILE"]
