"""Tests for the instruction renderer."""

from __future__ import annotations

import pytest

from strategy_profiles.core.errors import ConfigurationError
from strategy_profiles.core.models import ProfileId, StrategyPromptContext
from strategy_profiles.strategy.profiles import AGGRESSIVE
from strategy_profiles.strategy.prompts import (
    CLOSE_POSITION_TOOL,
    fmt_number,
    render_profile_instructions,
)
from strategy_profiles.strategy.registry import derive_strategy, render_instructions


def _full_context() -> StrategyPromptContext:
    return StrategyPromptContext(
        interval_minutes=5,
        open_positions=2,
        max_positions=5,
        max_holding_hours=36,
        extreme_stop_loss_pct=30,
        monitor_interval_sec=10,
        symbols=("BTC/USDT", "ETH/USDT"),
    )


def test_fmt_number() -> None:
    assert fmt_number(20.0) == "20"
    assert fmt_number(-2.5) == "-2.5"
    assert fmt_number(7) == "7"


@pytest.mark.parametrize("profile_id", list(ProfileId))
def test_rendering_is_idempotent(profile_id: ProfileId) -> None:
    params = derive_strategy(profile_id, 25)
    ctx = _full_context()
    assert render_instructions(params, ctx) == render_instructions(params, ctx)


@pytest.mark.parametrize("profile_id", list(ProfileId))
def test_rendering_does_not_mutate_params(profile_id: ProfileId) -> None:
    params = derive_strategy(profile_id, 25)
    before = params.model_dump()
    render_instructions(params, _full_context())
    assert params.model_dump() == before


@pytest.mark.parametrize("context", [None, {}, StrategyPromptContext(), {"interval_minutes": -1}])
@pytest.mark.parametrize("profile_id", list(ProfileId))
def test_missing_context_does_not_crash(profile_id: ProfileId, context: object) -> None:
    text = render_instructions(derive_strategy(profile_id, 25), context)  # type: ignore[arg-type]
    assert "[Runtime]" not in text
    assert "Target monthly return" in text


# ---------------------------------------------------------------------------
# Enforcement mode wording
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("profile_id", [ProfileId.SWING_TREND, ProfileId.AGGRESSIVE])
def test_automated_profiles_forbid_ai_closing(profile_id: ProfileId) -> None:
    text = render_instructions(derive_strategy(profile_id, 25), _full_context())
    assert f"You must NOT call {CLOSE_POSITION_TOOL}" in text
    assert "[Automated protection - active]" in text
    assert "checked every 10 seconds" in text
    assert f"must call {CLOSE_POSITION_TOOL} yourself" not in text


@pytest.mark.parametrize(
    "profile_id", [ProfileId.ULTRA_SHORT, ProfileId.CONSERVATIVE, ProfileId.BALANCED]
)
def test_advisory_profiles_make_ai_responsible(profile_id: ProfileId) -> None:
    text = render_instructions(derive_strategy(profile_id, 25), _full_context())
    assert f"must call {CLOSE_POSITION_TOOL} yourself" in text
    assert f"must NOT call {CLOSE_POSITION_TOOL}" not in text
    assert "Monitor stop-loss" not in text
    assert "Monitor trailing stop" not in text


def test_monitor_interval_omitted_when_unknown() -> None:
    text = render_instructions(derive_strategy("aggressive", 25), None)
    assert "checked every" not in text
    assert "[Automated protection - active]" in text


# ---------------------------------------------------------------------------
# Interpolated thresholds
# ---------------------------------------------------------------------------


def test_swing_trend_thresholds_interpolated() -> None:
    params = derive_strategy("swing-trend", 25)
    text = render_instructions(params, _full_context())
    assert "- 5-8x leverage: stop out at -9%" in text
    assert "- 9-11x leverage: stop out at -7.5%" in text
    assert "- 12-13x leverage: stop out at -5.5%" in text
    assert "- Level 1: once profit peaks at 15%, close if it falls back to 8%" in text
    assert "- Level 3: once profit peaks at 50%, close if it falls back to 35%" in text


def test_single_value_leverage_range_renders_one_bucket() -> None:
    text = render_instructions(derive_strategy("aggressive", 1), None)
    assert "- 1x leverage: stop out at -6%" in text
    assert "stop out at -8%" not in text


def test_target_return_and_reward_risk() -> None:
    text = render_instructions(derive_strategy("conservative", 25), None)
    assert "**Target monthly return**: 10-20%" in text
    assert "**Reward/risk target**: >= 2:1" in text


def test_regime_sizing_follows_record() -> None:
    params = derive_strategy("aggressive", 25)
    text = render_instructions(params, None)
    assert "larger position (28-30% to 30-32%)" in text
    assert "higher leverage (24-25x)" in text
    assert "reduce to the minimum position (25%)" in text
    assert "lower leverage (22-24x)" in text


def test_standard_leverage_lists_tiers() -> None:
    text = render_instructions(derive_strategy("balanced", 25), None)
    assert "by signal strength (15x normal, 19x good, 22x strong)" in text


def test_ultra_short_quick_profit_rules() -> None:
    text = render_instructions(derive_strategy("ultra-short", 25), None)
    assert "[Ultra-short rules]" in text
    assert "above 2% and below 4%" in text
    assert "30-minute rule" in text


def test_runtime_section() -> None:
    text = render_instructions(derive_strategy("balanced", 25), _full_context())
    assert "[Runtime]" in text
    assert "- Decision cycle: every 5 minutes" in text
    assert "- Open positions: 2/5" in text
    assert "- Maximum holding time: 36 hours" in text
    assert "- Account emergency stop: -30%" in text
    assert "- Symbols: BTC/USDT, ETH/USDT" in text


def test_runtime_section_partial_context() -> None:
    text = render_instructions(derive_strategy("balanced", 25), {"max_positions": 3})
    assert "- Position cap: 3" in text
    assert "Decision cycle" not in text


def test_renderer_rejects_mismatched_profile() -> None:
    params = derive_strategy("balanced", 25)
    with pytest.raises(ConfigurationError):
        render_profile_instructions(AGGRESSIVE, params, None)


@pytest.mark.parametrize(
    ("profile_id", "drawdown"),
    [(ProfileId.ULTRA_SHORT, "20"), (ProfileId.CONSERVATIVE, "25"), (ProfileId.BALANCED, "30")],
)
def test_advisory_block_names_only_values_it_carries(profile_id: ProfileId, drawdown: str) -> None:
    text = render_instructions(derive_strategy(profile_id, 25), None)
    assert "those thresholds" not in text
    assert f"retraces {drawdown} percentage points from its peak" in text
