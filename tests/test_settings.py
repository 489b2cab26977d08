from __future__ import annotations

import pytest

from strategy_profiles.config.settings import Settings


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: pytest.TempPathFactory) -> None:
    # keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    for key in ("TRADING_STRATEGY", "MAX_LEVERAGE", "MAX_POSITIONS", "MONITOR_INTERVAL_SEC"):
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    settings = Settings()
    assert settings.trading_strategy == "balanced"
    assert settings.max_leverage == 10
    assert settings.monitor_interval_sec == 10


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRADING_STRATEGY", "swing-trend")
    monkeypatch.setenv("MAX_LEVERAGE", "25")
    settings = Settings()
    assert settings.trading_strategy == "swing-trend"
    assert settings.max_leverage == 25


def test_load_safe_falls_back_on_invalid_leverage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MAX_LEVERAGE", "0")
    settings = Settings.load_safe()
    assert settings.max_leverage == 1
    assert settings.trading_strategy == "balanced"


def test_prompt_context_from_settings() -> None:
    ctx = Settings().prompt_context(open_positions=1)
    assert ctx.interval_minutes == 5
    assert ctx.open_positions == 1
    assert ctx.max_positions == 5
    assert ctx.monitor_interval_sec == 10
    assert ctx.symbols == ("BTC/USDT", "ETH/USDT")


def test_fractional_leverage_keeps_configured_profile(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRADING_STRATEGY", "aggressive")
    monkeypatch.setenv("MAX_LEVERAGE", "12.5")
    settings = Settings.load_safe()
    assert settings.trading_strategy == "aggressive"
    assert settings.max_leverage == 12.5
