"""Tests for the click CLI."""

import json

from click.testing import CliRunner

from shopcatalog.cli.app import cli
from shopcatalog.core.config import set_core_config
from shopcatalog.modules.catalog.weeks import current_week_token, previous_token


def teardown_function():
    set_core_config(None)


def test_week_command():
    result = CliRunner().invoke(cli, ["week", "-n", "2"])
    assert result.exit_code == 0, result.output
    tokens = json.loads(result.output)
    assert len(tokens) == 3
    assert tokens[0] == current_week_token()
    assert tokens[1] == previous_token(tokens[0])


def test_missing_content_store_config(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SANITY_PROJECT_ID", raising=False)
    monkeypatch.delenv("SHOPCATALOG_CORE_CONFIG_PATH", raising=False)
    result = CliRunner().invoke(cli, ["featured"])
    assert result.exit_code != 0
    assert "Sanity project id not configured" in result.output
