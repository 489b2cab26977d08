"""Domain enums and models for strategy profiles.

This module is the single source of truth for the parameter record consumed by
the position monitor and the prompt renderer. Every model is frozen: a record
is built once per derivation and never mutated afterwards.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator


class ProfileId(str, Enum):
    ULTRA_SHORT = "ultra-short"
    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"
    SWING_TREND = "swing-trend"


class SignalTier(str, Enum):
    NORMAL = "normal"
    GOOD = "good"
    STRONG = "strong"


class LeverageBucket(str, Enum):
    LOW = "low"
    MID = "mid"
    HIGH = "high"


class VolatilityRegime(str, Enum):
    HIGH = "high_volatility"
    NORMAL = "normal_volatility"
    LOW = "low_volatility"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


_PCT_RANGE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*-\s*(\d+(?:\.\d+)?)\s*%\s*$")


def parse_pct_range(text: str) -> tuple[float, float]:
    """Parse ``"18-20%"`` into ``(18.0, 20.0)``."""
    match = _PCT_RANGE.match(text)
    if match is None:
        raise ValueError(f"invalid percentage range: {text!r}")
    low, high = float(match.group(1)), float(match.group(2))
    if low > high:
        raise ValueError(f"percentage range is descending: {text!r}")
    return low, high


class LeverageRecommendation(_Frozen):
    normal: int = Field(ge=1)
    good: int = Field(ge=1)
    strong: int = Field(ge=1)

    def for_tier(self, tier: SignalTier) -> int:
        return int(getattr(self, tier.value))


class PositionSizeRecommendation(_Frozen):
    normal: str
    good: str
    strong: str

    @model_validator(mode="after")
    def _validate_ranges(self) -> "PositionSizeRecommendation":
        ranges = [parse_pct_range(text) for text in (self.normal, self.good, self.strong)]
        for (_, prev_high), (next_low, _) in zip(ranges, ranges[1:]):
            if next_low < prev_high:
                raise ValueError("position size ranges must ascend without overlapping")
        return self

    def for_tier(self, tier: SignalTier) -> str:
        return str(getattr(self, tier.value))


class StopLossTable(_Frozen):
    """Stop-loss percent per leverage bucket.

    The ordering across buckets is a property of the profile: risk-averse
    profiles tighten as leverage rises, the aggressive one widens.
    """

    low: float = Field(lt=0)
    mid: float = Field(lt=0)
    high: float = Field(lt=0)

    def for_bucket(self, bucket: LeverageBucket) -> float:
        return float(getattr(self, bucket.value))


class TrailingStopLevel(_Frozen):
    trigger: float = Field(gt=0)
    stop_at: float

    @model_validator(mode="after")
    def _validate_floor(self) -> "TrailingStopLevel":
        if self.stop_at >= self.trigger:
            raise ValueError("stop_at must be below trigger")
        return self


class TrailingStopLevels(_Frozen):
    level1: TrailingStopLevel
    level2: TrailingStopLevel
    level3: TrailingStopLevel

    @model_validator(mode="after")
    def _validate_escalation(self) -> "TrailingStopLevels":
        levels = self.as_tuple()
        for prev, nxt in zip(levels, levels[1:]):
            if nxt.trigger <= prev.trigger:
                raise ValueError("trailing stop triggers must strictly increase")
            if nxt.stop_at <= prev.stop_at:
                raise ValueError("trailing stop floors must strictly increase")
        return self

    def as_tuple(self) -> tuple[TrailingStopLevel, TrailingStopLevel, TrailingStopLevel]:
        return (self.level1, self.level2, self.level3)


class TakeProfitStage(_Frozen):
    trigger: float = Field(gt=0)
    close_percent: float = Field(gt=0, le=100)


class PartialTakeProfitStages(_Frozen):
    """Three staged closes; stage 3 always closes whatever remains."""

    stage1: TakeProfitStage
    stage2: TakeProfitStage
    stage3: TakeProfitStage

    @model_validator(mode="after")
    def _validate_stages(self) -> "PartialTakeProfitStages":
        stages = self.as_tuple()
        for prev, nxt in zip(stages, stages[1:]):
            if nxt.trigger <= prev.trigger:
                raise ValueError("take-profit triggers must strictly increase")
        if self.stage3.close_percent != 100:
            raise ValueError("final take-profit stage must close 100% of the remainder")
        return self

    def as_tuple(self) -> tuple[TakeProfitStage, TakeProfitStage, TakeProfitStage]:
        return (self.stage1, self.stage2, self.stage3)


class VolatilityFactors(_Frozen):
    leverage_factor: float = Field(gt=0)
    position_factor: float = Field(gt=0)


class VolatilityAdjustment(_Frozen):
    high_volatility: VolatilityFactors
    normal_volatility: VolatilityFactors
    low_volatility: VolatilityFactors

    @model_validator(mode="after")
    def _validate_identity(self) -> "VolatilityAdjustment":
        normal = self.normal_volatility
        if normal.leverage_factor != 1.0 or normal.position_factor != 1.0:
            raise ValueError("normal volatility factors must be 1.0")
        return self

    def for_regime(self, regime: VolatilityRegime) -> VolatilityFactors:
        factors: VolatilityFactors = getattr(self, regime.value)
        return factors


class TargetReturn(_Frozen):
    low: float = Field(gt=0)
    high: float = Field(gt=0)

    @model_validator(mode="after")
    def _validate_order(self) -> "TargetReturn":
        if self.high < self.low:
            raise ValueError("target return high must be >= low")
        return self


class QuickProfitLock(_Frozen):
    """Advisory exit rules a numeric monitor cannot express.

    Close inside a cycle when profit sits between ``min_profit_pct`` and
    ``max_profit_pct``; close conservatively after ``hold_minutes`` once
    profit covers fees.
    """

    min_profit_pct: float = Field(gt=0)
    max_profit_pct: float = Field(gt=0)
    hold_minutes: int = Field(gt=0)

    @model_validator(mode="after")
    def _validate_band(self) -> "QuickProfitLock":
        if self.max_profit_pct <= self.min_profit_pct:
            raise ValueError("max_profit_pct must be above min_profit_pct")
        return self


class StrategyParams(_Frozen):
    """Complete risk configuration for one profile at one leverage ceiling."""

    profile_id: ProfileId
    name: str
    description: str

    leverage_min: int = Field(ge=1)
    leverage_max: int = Field(ge=1)
    leverage_recommend: LeverageRecommendation

    position_size_min: float = Field(gt=0, le=100)
    position_size_max: float = Field(gt=0, le=100)
    position_size_recommend: PositionSizeRecommendation

    stop_loss: StopLossTable
    trailing_stop: TrailingStopLevels
    partial_take_profit: PartialTakeProfitStages
    peak_drawdown_protection: float = Field(gt=0)
    volatility_adjustment: VolatilityAdjustment

    entry_condition: str
    risk_tolerance: str
    trading_style: str

    target_monthly_return: TargetReturn
    min_reward_risk_ratio: float = Field(gt=0)
    quick_profit_lock: QuickProfitLock | None = None

    enable_code_level_protection: bool

    @model_validator(mode="after")
    def _validate_invariants(self) -> "StrategyParams":
        if self.leverage_min > self.leverage_max:
            raise ValueError("leverage_min must be <= leverage_max")

        rec = self.leverage_recommend
        if rec.normal != self.leverage_min:
            raise ValueError("normal leverage must equal leverage_min")
        if rec.strong != self.leverage_max:
            raise ValueError("strong leverage must equal leverage_max")
        if not self.leverage_min <= rec.good <= self.leverage_max:
            raise ValueError("good leverage must lie within [leverage_min, leverage_max]")

        if self.position_size_min >= self.position_size_max:
            raise ValueError("position_size_min must be below position_size_max")
        return self


class StrategyPromptContext(BaseModel):
    """Runtime values interpolated into the instruction text.

    Every field is optional; the renderer omits segments whose value is unset.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    interval_minutes: int | None = Field(default=None, gt=0)
    open_positions: int | None = Field(default=None, ge=0)
    max_positions: int | None = Field(default=None, gt=0)
    max_holding_hours: float | None = Field(default=None, gt=0)
    extreme_stop_loss_pct: float | None = Field(default=None, gt=0)
    monitor_interval_sec: int | None = Field(default=None, gt=0)
    symbols: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, object] | None) -> "StrategyPromptContext":
        """Build a context, dropping any field whose value does not validate."""
        if not data:
            return cls()
        values: dict[str, object] = {}
        for key in cls.model_fields:
            if key not in data or data[key] is None:
                continue
            try:
                cls.model_validate({key: data[key]})
            except ValidationError:
                continue
            values[key] = data[key]
        return cls.model_validate(values)
