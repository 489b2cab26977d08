"""Strategy profile definitions.

Each profile is one data record of the shared ``StrategyProfile`` schema:
- Leverage scaling (two fractions of the system ceiling, each with a floor)
- Constant risk tables (position size, stop-loss, trailing stop,
  partial take-profit, peak drawdown, volatility factors)
- Enforcement mode (code-level protection on/off)
- Prompt playbook for trending and range-bound markets

Adding a profile means adding a record here; derivation and rendering are
generic over the schema.
"""

from __future__ import annotations

import dataclasses
from enum import Enum

from strategy_profiles.core.models import (
    PartialTakeProfitStages,
    PositionSizeRecommendation,
    ProfileId,
    QuickProfitLock,
    StopLossTable,
    TakeProfitStage,
    TargetReturn,
    TrailingStopLevel,
    TrailingStopLevels,
    VolatilityAdjustment,
    VolatilityFactors,
)


class Sizing(str, Enum):
    """How a regime guide picks position size and leverage from the record."""

    MINIMUM = "minimum"
    LOWER = "lower"
    STANDARD = "standard"
    UPPER = "upper"


@dataclasses.dataclass(frozen=True, slots=True)
class LeverageScaling:
    low_fraction: float
    high_fraction: float
    floor_min: int
    floor_max: int
    # None: good tier is the rounded-up midpoint of min and max
    good_fraction: float | None = None
    good_floor: int = 1
    pin_max_to_ceiling: bool = False


@dataclasses.dataclass(frozen=True, slots=True)
class RegimeGuide:
    entry: str
    position: Sizing
    leverage: Sizing
    notes: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class Playbook:
    overview: str
    reward_risk_note: str
    trending: RegimeGuide
    ranging: RegimeGuide
    rules_title: str
    rules: tuple[str, ...] = ()


@dataclasses.dataclass(frozen=True, slots=True)
class StrategyProfile:
    profile_id: ProfileId
    name: str
    description: str
    leverage: LeverageScaling
    position_size_min: float
    position_size_max: float
    position_size_recommend: PositionSizeRecommendation
    stop_loss: StopLossTable
    trailing_stop: TrailingStopLevels
    partial_take_profit: PartialTakeProfitStages
    peak_drawdown_protection: float
    volatility_adjustment: VolatilityAdjustment
    entry_condition: str
    risk_tolerance: str
    trading_style: str
    target_monthly_return: TargetReturn
    min_reward_risk_ratio: float
    enable_code_level_protection: bool
    playbook: Playbook
    quick_profit_lock: QuickProfitLock | None = None


def _trailing(*levels: tuple[float, float]) -> TrailingStopLevels:
    l1, l2, l3 = (TrailingStopLevel(trigger=t, stop_at=s) for t, s in levels)
    return TrailingStopLevels(level1=l1, level2=l2, level3=l3)


def _stages(*stages: tuple[float, float]) -> PartialTakeProfitStages:
    s1, s2, s3 = (TakeProfitStage(trigger=t, close_percent=c) for t, c in stages)
    return PartialTakeProfitStages(stage1=s1, stage2=s2, stage3=s3)


def _volatility(high: tuple[float, float], low: tuple[float, float]) -> VolatilityAdjustment:
    return VolatilityAdjustment(
        high_volatility=VolatilityFactors(leverage_factor=high[0], position_factor=high[1]),
        normal_volatility=VolatilityFactors(leverage_factor=1.0, position_factor=1.0),
        low_volatility=VolatilityFactors(leverage_factor=low[0], position_factor=low[1]),
    )


_LONG_PLUS_TWO_MEDIUM = (
    "at least 1 long timeframe (30m or 1h) and 2 medium timeframes (5m, 15m) agree on direction"
)
_RANGE_STRICT_ENTRY = (
    "at least 3-4 timeframes agree and the long timeframe shows no ranging structure"
)
_LAYERED_TIMEFRAMES = (
    "Use timeframes in layers: long timeframes judge the trend, medium ones confirm "
    "the signal, short ones time the entry"
)


ULTRA_SHORT = StrategyProfile(
    profile_id=ProfileId.ULTRA_SHORT,
    name="Ultra-short",
    description="Very short holding periods with a 5-minute cycle, built for high-frequency trading",
    leverage=LeverageScaling(
        low_fraction=0.5,
        high_fraction=0.75,
        floor_min=3,
        floor_max=5,
        good_fraction=0.625,
        good_floor=4,
    ),
    position_size_min=18,
    position_size_max=25,
    position_size_recommend=PositionSizeRecommendation(
        normal="18-20%", good="20-23%", strong="23-25%"
    ),
    stop_loss=StopLossTable(low=-2.5, mid=-2, high=-1.5),
    trailing_stop=_trailing((4, 1.5), (8, 4), (15, 8)),
    partial_take_profit=_stages((15, 50), (25, 50), (35, 100)),
    peak_drawdown_protection=20,
    volatility_adjustment=_volatility(high=(0.7, 0.8), low=(1.1, 1.0)),
    entry_condition="At least 2 timeframes agree, with priority on the 1-5 minute charts",
    risk_tolerance="Keep each trade inside the profile's position range and exit quickly",
    trading_style=(
        "Ultra-short trading on a 5-minute cycle that captures short swings and applies "
        "the cycle profit lock and holding-time rules strictly"
    ),
    target_monthly_return=TargetReturn(low=20, high=30),
    min_reward_risk_ratio=2,
    enable_code_level_protection=False,
    quick_profit_lock=QuickProfitLock(min_profit_pct=2, max_profit_pct=4, hold_minutes=30),
    playbook=Playbook(
        overview="The ultra-short profile focuses on capturing short-term swings quickly.",
        reward_risk_note="let winners run and cut losing trades fast",
        trending=RegimeGuide(
            entry=_LONG_PLUS_TWO_MEDIUM,
            position=Sizing.STANDARD,
            leverage=Sizing.STANDARD,
        ),
        ranging=RegimeGuide(
            entry="stay on the sidelines unless the setup is unambiguous",
            position=Sizing.MINIMUM,
            leverage=Sizing.MINIMUM,
        ),
        rules_title="Ultra-short rules",
        rules=("Capture short-term swings quickly and apply the profit lock rules strictly",),
    ),
)


CONSERVATIVE = StrategyProfile(
    profile_id=ProfileId.CONSERVATIVE,
    name="Conservative",
    description="Low risk and low leverage with strict entry conditions, for capital-first investors",
    leverage=LeverageScaling(low_fraction=0.3, high_fraction=0.6, floor_min=1, floor_max=2),
    position_size_min=15,
    position_size_max=22,
    position_size_recommend=PositionSizeRecommendation(
        normal="15-17%", good="17-20%", strong="20-22%"
    ),
    stop_loss=StopLossTable(low=-3.5, mid=-3, high=-2.5),
    trailing_stop=_trailing((6, 2), (12, 6), (20, 12)),
    partial_take_profit=_stages((20, 50), (30, 50), (40, 100)),
    peak_drawdown_protection=25,
    volatility_adjustment=_volatility(high=(0.6, 0.7), low=(1.0, 1.0)),
    entry_condition="At least 3 key timeframes agree, 4 or more is better",
    risk_tolerance="Keep each trade inside the profile's position range and control drawdown strictly",
    trading_style="Trade cautiously, prefer missing a move over taking a risk, protect capital first",
    target_monthly_return=TargetReturn(low=10, high=20),
    min_reward_risk_ratio=2,
    enable_code_level_protection=False,
    playbook=Playbook(
        overview="The conservative profile only enters on high-certainty opportunities.",
        reward_risk_note="let winners run and cut losing trades fast",
        trending=RegimeGuide(
            entry=_LONG_PLUS_TWO_MEDIUM,
            position=Sizing.STANDARD,
            leverage=Sizing.LOWER,
        ),
        ranging=RegimeGuide(
            entry=_RANGE_STRICT_ENTRY,
            position=Sizing.MINIMUM,
            leverage=Sizing.MINIMUM,
            notes=("Trade frequency: prefer waiting on the sidelines",),
        ),
        rules_title="Conservative summary",
        rules=(
            _LAYERED_TIMEFRAMES,
            "Take trending markets decisively and let profits run while the long timeframe trends",
            "Defend in ranging markets and avoid frequent trades while the long timeframe is choppy",
            "Wait patiently for high-quality setups; stay out when the long timeframe has no trend",
            "Missing an opportunity is better than taking a risk",
        ),
    ),
)


BALANCED = StrategyProfile(
    profile_id=ProfileId.BALANCED,
    name="Balanced",
    description="Moderate risk and leverage with reasonable entry conditions, for most investors",
    leverage=LeverageScaling(low_fraction=0.6, high_fraction=0.85, floor_min=2, floor_max=3),
    position_size_min=20,
    position_size_max=27,
    position_size_recommend=PositionSizeRecommendation(
        normal="20-23%", good="23-25%", strong="25-27%"
    ),
    stop_loss=StopLossTable(low=-3, mid=-2.5, high=-2),
    trailing_stop=_trailing((8, 3), (15, 8), (25, 15)),
    partial_take_profit=_stages((30, 50), (40, 50), (50, 100)),
    peak_drawdown_protection=30,
    volatility_adjustment=_volatility(high=(0.7, 0.8), low=(1.1, 1.0)),
    entry_condition="At least 2 key timeframes agree, 3 or more is better",
    risk_tolerance="Keep each trade inside the profile's position range, balancing risk and return",
    trading_style="Take opportunities actively while risk stays under control, aim for steady growth",
    target_monthly_return=TargetReturn(low=20, high=40),
    min_reward_risk_ratio=2,
    enable_code_level_protection=False,
    playbook=Playbook(
        overview=(
            "The balanced profile participates actively in trending markets "
            "and defends in ranging markets."
        ),
        reward_risk_note="let winners run and cut losing trades fast",
        trending=RegimeGuide(
            entry=_LONG_PLUS_TWO_MEDIUM,
            position=Sizing.STANDARD,
            leverage=Sizing.STANDARD,
        ),
        ranging=RegimeGuide(
            entry=_RANGE_STRICT_ENTRY,
            position=Sizing.MINIMUM,
            leverage=Sizing.MINIMUM,
        ),
        rules_title="Balanced summary",
        rules=(
            _LAYERED_TIMEFRAMES,
            "Take trending markets decisively and let profits run while the long timeframe trends",
            "Defend in ranging markets and avoid frequent trades while the long timeframe is choppy",
            "Identify the market regime first, starting from the long timeframe",
            "Wait patiently for high-quality setups; stay out when the long timeframe has no trend",
        ),
    ),
)


AGGRESSIVE = StrategyProfile(
    profile_id=ProfileId.AGGRESSIVE,
    name="Aggressive",
    description="High risk and high leverage with loose entry conditions, for aggressive investors",
    leverage=LeverageScaling(
        low_fraction=0.85,
        high_fraction=1.0,
        floor_min=3,
        floor_max=1,
        pin_max_to_ceiling=True,
    ),
    position_size_min=25,
    position_size_max=32,
    position_size_recommend=PositionSizeRecommendation(
        normal="25-28%", good="28-30%", strong="30-32%"
    ),
    # Wider stops at higher leverage; literal values, not a formula.
    stop_loss=StopLossTable(low=-6, mid=-8, high=-10),
    trailing_stop=_trailing((10, 4), (18, 10), (30, 18)),
    partial_take_profit=_stages((25, 40), (40, 60), (60, 100)),
    peak_drawdown_protection=25,
    volatility_adjustment=_volatility(high=(0.8, 0.85), low=(1.2, 1.1)),
    entry_condition="At least 2 key timeframes agree",
    risk_tolerance="Each trade may use the full position range in pursuit of high returns",
    trading_style="Act decisively, capture market moves quickly and maximise returns",
    target_monthly_return=TargetReturn(low=30, high=50),
    min_reward_risk_ratio=2,
    enable_code_level_protection=True,
    playbook=Playbook(
        overview=(
            "The aggressive profile attacks in trending markets and defends strictly "
            "in ranging markets."
        ),
        reward_risk_note=(
            "frequent small wins compensate for a moderately lower ratio through a higher win rate"
        ),
        trending=RegimeGuide(
            entry=(
                "[required] at least 1 long timeframe (30m or 1h) shows a clear trend and "
                "at least 1 medium timeframe (5m or 15m) agrees with it"
            ),
            position=Sizing.UPPER,
            leverage=Sizing.UPPER,
            notes=(
                "Trending markets are the main source of profit, but only when the long "
                "timeframe confirms them",
            ),
        ),
        ranging=RegimeGuide(
            entry=(
                "[required] at least 1 long timeframe (30m or 1h) and 2 medium timeframes "
                "(5m, 15m) agree completely"
            ),
            position=Sizing.MINIMUM,
            leverage=Sizing.LOWER,
            notes=(
                "[mandatory] Do not open positions frequently in ranging markets; "
                "this is the main source of losses",
                "Frequent trading in a range means frequent stop-outs plus fees",
            ),
        ),
        rules_title="Aggressive reminders",
        rules=(
            _LAYERED_TIMEFRAMES,
            "Attack in trends: clear long-timeframe trend, large position, high leverage",
            "Defend in ranges: choppy long timeframe, small position, low leverage, high bar",
            "Opening on short timeframes (1m, 3m) alone leads to repeated stop-outs",
            "Never open on a short-timeframe signal while the long timeframes (30m, 1h) have no trend",
        ),
    ),
)


SWING_TREND = StrategyProfile(
    profile_id=ProfileId.SWING_TREND,
    name="Swing trend",
    description="Medium-term swing trading on a 20-minute cycle that captures trends for steady growth",
    leverage=LeverageScaling(
        low_fraction=0.2,
        high_fraction=0.5,
        floor_min=2,
        floor_max=5,
        good_fraction=0.35,
        good_floor=3,
    ),
    position_size_min=20,
    position_size_max=35,
    position_size_recommend=PositionSizeRecommendation(
        normal="20-25%", good="25-30%", strong="30-35%"
    ),
    stop_loss=StopLossTable(low=-9, mid=-7.5, high=-5.5),
    trailing_stop=_trailing((15, 8), (30, 20), (50, 35)),
    partial_take_profit=_stages((50, 40), (80, 60), (120, 100)),
    peak_drawdown_protection=35,
    volatility_adjustment=_volatility(high=(0.5, 0.6), low=(1.2, 1.1)),
    entry_condition=(
        "The 1m, 3m, 5m and 15m timeframes must all agree strongly, "
        "with MACD, RSI and EMA pointing the same way"
    ),
    risk_tolerance="Keep each trade inside the profile's position range, favour trend quality over frequency",
    trading_style=(
        "Swing trend trading on a 20-minute cycle that waits for high-quality trends "
        "and holds for up to several days"
    ),
    target_monthly_return=TargetReturn(low=20, high=30),
    min_reward_risk_ratio=2,
    enable_code_level_protection=True,
    playbook=Playbook(
        overview=(
            "The swing trend profile captures medium-term trends; positions may be held for days."
        ),
        reward_risk_note="let winners run and cut losing trades fast",
        trending=RegimeGuide(
            entry="the 1m, 3m, 5m and 15m timeframes must all agree strongly",
            position=Sizing.STANDARD,
            leverage=Sizing.STANDARD,
            notes=("Hold patiently and let profits run",),
        ),
        ranging=RegimeGuide(
            entry="raise the entry bar and defend strictly",
            position=Sizing.MINIMUM,
            leverage=Sizing.MINIMUM,
        ),
        rules_title="Swing trend summary",
        rules=(
            "Wait patiently for high-quality trend signals; holding for days is normal",
            "Judge trend quality, not trade frequency",
            "Let profits run and do not rush to exit",
        ),
    ),
)


PROFILES: tuple[StrategyProfile, ...] = (
    ULTRA_SHORT,
    CONSERVATIVE,
    BALANCED,
    AGGRESSIVE,
    SWING_TREND,
)
