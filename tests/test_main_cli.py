from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from strategy_profiles.main import cli


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: pytest.TempPathFactory) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TRADING_STRATEGY", raising=False)
    monkeypatch.delenv("MAX_LEVERAGE", raising=False)


def test_list_shows_every_profile() -> None:
    result = CliRunner().invoke(cli, ["list", "--max-leverage", "25"])
    assert result.exit_code == 0
    for name in ("ultra-short", "conservative", "balanced", "aggressive", "swing-trend"):
        assert name in result.output
    assert "22-25" in result.output


def test_show_json() -> None:
    result = CliRunner().invoke(cli, ["show", "ultra-short", "--max-leverage", "25", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["leverage_min"] == 13
    assert data["leverage_max"] == 19
    assert data["enable_code_level_protection"] is False


def test_show_uses_configured_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRADING_STRATEGY", "swing-trend")
    monkeypatch.setenv("MAX_LEVERAGE", "10")
    result = CliRunner().invoke(cli, ["show"])
    assert result.exit_code == 0
    assert "swing-trend" in result.output
    assert "2-5x" in result.output


def test_show_unknown_profile_fails() -> None:
    result = CliRunner().invoke(cli, ["show", "nonexistent"])
    assert result.exit_code == 1
    assert "nonexistent" in result.output


def test_prompt_includes_runtime_context() -> None:
    result = CliRunner().invoke(
        cli, ["prompt", "aggressive", "--max-leverage", "25", "--open-positions", "2"]
    )
    assert result.exit_code == 0
    assert "- Open positions: 2/5" in result.output
    assert "You must NOT call closePosition" in result.output


def test_selftest_passes() -> None:
    result = CliRunner().invoke(cli, ["selftest"])
    assert result.exit_code == 0
    assert "All self-tests passed" in result.output
