import pytest
from typer.testing import CliRunner

import config
from main import cli

runner = CliRunner()


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("LINEAR_MCP_ENV_FILE", raising=False)
    config.load_env_once.cache_clear()
    yield
    config.load_env_once.cache_clear()


def test_missing_api_key_exits_non_zero(monkeypatch):
    monkeypatch.delenv("LINEAR_API_KEY", raising=False)
    result = runner.invoke(cli, ["run"])
    assert result.exit_code == 1
    assert "LINEAR_API_KEY" in result.output


def test_unknown_transport_is_rejected(monkeypatch):
    monkeypatch.setenv("LINEAR_API_KEY", "key")
    result = runner.invoke(cli, ["run", "--transport", "carrier-pigeon"])
    assert result.exit_code == 2
    assert "carrier-pigeon" in result.output
