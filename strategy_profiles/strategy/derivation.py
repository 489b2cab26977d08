"""Parameter derivation - one generic routine over the profile schema.

Only the leverage bounds and their tier recommendations scale with the system
ceiling. Every other table is copied from the profile record. All scaling
rounds up, and every floor wins over a smaller scaled value.
"""

from __future__ import annotations

import dataclasses
import math
from decimal import ROUND_CEILING, Decimal

from strategy_profiles.core.errors import ConfigurationError
from strategy_profiles.core.models import (
    LeverageBucket,
    LeverageRecommendation,
    StrategyParams,
    VolatilityRegime,
)
from strategy_profiles.logging.logger import get_logger
from strategy_profiles.strategy.profiles import StrategyProfile

logger = get_logger("derivation")

LOW_BUCKET_CUT = Decimal("0.33")
MID_BUCKET_CUT = Decimal("0.67")


def _as_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def ceil_scaled(value: float | int | Decimal, fraction: float | Decimal) -> int:
    """``ceil(value * fraction)`` in exact decimal arithmetic."""
    product = _as_decimal(value) * _as_decimal(fraction)
    return int(product.to_integral_value(rounding=ROUND_CEILING))


def validate_leverage_ceiling(system_max_leverage: object) -> float | int:
    if isinstance(system_max_leverage, bool) or not isinstance(
        system_max_leverage, (int, float, Decimal)
    ):
        raise ConfigurationError(
            f"system max leverage must be a number, got {system_max_leverage!r}",
            value=system_max_leverage,
        )
    if not math.isfinite(float(system_max_leverage)) or system_max_leverage <= 0:
        raise ConfigurationError(
            f"system max leverage must be a positive finite number, got {system_max_leverage!r}",
            value=system_max_leverage,
        )
    if isinstance(system_max_leverage, Decimal):
        return float(system_max_leverage)
    return system_max_leverage


def derive_params(profile: StrategyProfile, system_max_leverage: float) -> StrategyParams:
    """Build the complete parameter record for ``profile`` at the given ceiling."""
    ceiling = validate_leverage_ceiling(system_max_leverage)
    scaling = profile.leverage

    if scaling.pin_max_to_ceiling:
        leverage_max = max(scaling.floor_max, math.floor(ceiling))
    else:
        leverage_max = max(scaling.floor_max, ceil_scaled(ceiling, scaling.high_fraction))
    leverage_min = max(scaling.floor_min, ceil_scaled(ceiling, scaling.low_fraction))
    # A floor above a tiny pinned ceiling must not invert the range.
    leverage_min = min(leverage_min, leverage_max)

    if scaling.good_fraction is None:
        good = ceil_scaled(leverage_min + leverage_max, Decimal("0.5"))
    else:
        good = max(scaling.good_floor, ceil_scaled(ceiling, scaling.good_fraction))
    good = min(max(good, leverage_min), leverage_max)

    params = StrategyParams(
        profile_id=profile.profile_id,
        name=profile.name,
        description=profile.description,
        leverage_min=leverage_min,
        leverage_max=leverage_max,
        leverage_recommend=LeverageRecommendation(
            normal=leverage_min, good=good, strong=leverage_max
        ),
        position_size_min=profile.position_size_min,
        position_size_max=profile.position_size_max,
        position_size_recommend=profile.position_size_recommend,
        stop_loss=profile.stop_loss,
        trailing_stop=profile.trailing_stop,
        partial_take_profit=profile.partial_take_profit,
        peak_drawdown_protection=profile.peak_drawdown_protection,
        volatility_adjustment=profile.volatility_adjustment,
        entry_condition=profile.entry_condition,
        risk_tolerance=profile.risk_tolerance,
        trading_style=profile.trading_style,
        target_monthly_return=profile.target_monthly_return,
        min_reward_risk_ratio=profile.min_reward_risk_ratio,
        quick_profit_lock=profile.quick_profit_lock,
        enable_code_level_protection=profile.enable_code_level_protection,
    )
    logger.debug(
        "strategy_derived",
        profile=profile.profile_id.value,
        system_max_leverage=ceiling,
        leverage_min=leverage_min,
        leverage_max=leverage_max,
        code_level_protection=profile.enable_code_level_protection,
    )
    return params


@dataclasses.dataclass(frozen=True, slots=True)
class LeverageBuckets:
    """Inclusive leverage sub-ranges for the stop-loss buckets.

    ``mid`` and ``high`` are None when the range is too narrow to hold them.
    """

    low: tuple[int, int]
    mid: tuple[int, int] | None
    high: tuple[int, int] | None

    def items(self) -> list[tuple[LeverageBucket, tuple[int, int]]]:
        out: list[tuple[LeverageBucket, tuple[int, int]]] = [(LeverageBucket.LOW, self.low)]
        if self.mid is not None:
            out.append((LeverageBucket.MID, self.mid))
        if self.high is not None:
            out.append((LeverageBucket.HIGH, self.high))
        return out

    def bucket_for(self, leverage: int) -> LeverageBucket:
        if leverage <= self.low[1]:
            return LeverageBucket.LOW
        if self.mid is not None and leverage <= self.mid[1]:
            return LeverageBucket.MID
        if self.high is not None:
            return LeverageBucket.HIGH
        return LeverageBucket.MID if self.mid is not None else LeverageBucket.LOW


def leverage_buckets(params: StrategyParams) -> LeverageBuckets:
    """Split ``[leverage_min, leverage_max]`` at the 33% and 67% cut points, rounded up."""
    lo, hi = params.leverage_min, params.leverage_max
    span = hi - lo

    low_end = min(hi, lo + ceil_scaled(span, LOW_BUCKET_CUT))
    mid_end = min(hi, lo + ceil_scaled(span, MID_BUCKET_CUT))

    mid: tuple[int, int] | None = None
    if low_end + 1 <= mid_end:
        mid = (low_end + 1, mid_end)
    last_end = mid[1] if mid is not None else low_end

    high: tuple[int, int] | None = None
    if last_end + 1 <= hi:
        high = (last_end + 1, hi)
    return LeverageBuckets(low=(lo, low_end), mid=mid, high=high)


def stop_loss_for_leverage(params: StrategyParams, leverage: int) -> float:
    """Stop-loss percent the monitor applies to a position opened at ``leverage``."""
    bucket = leverage_buckets(params).bucket_for(leverage)
    return params.stop_loss.for_bucket(bucket)


def _require_positive(label: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ConfigurationError(f"{label} must be a number, got {value!r}", value=value)
    if not math.isfinite(float(value)) or value <= 0:
        raise ConfigurationError(f"{label} must be positive, got {value!r}", value=value)


@dataclasses.dataclass(frozen=True, slots=True)
class AdjustedSizing:
    leverage: int
    position_pct: float


def apply_volatility_adjustment(
    params: StrategyParams,
    regime: VolatilityRegime,
    leverage: int,
    position_pct: float,
    system_max_leverage: float,
) -> AdjustedSizing:
    """Scale a chosen leverage and position size by the regime's factors.

    Leverage rounds up and stays within ``[1, system_max_leverage]``; position
    size stays within ``(0, 100]``. Non-positive inputs raise
    ``ConfigurationError``.
    """
    ceiling = validate_leverage_ceiling(system_max_leverage)
    _require_positive("leverage", leverage)
    _require_positive("position size", position_pct)
    factors = params.volatility_adjustment.for_regime(regime)

    adjusted_leverage = ceil_scaled(leverage, factors.leverage_factor)
    adjusted_leverage = min(max(1, adjusted_leverage), max(1, math.floor(ceiling)))

    position = _as_decimal(position_pct) * _as_decimal(factors.position_factor)
    adjusted_position = min(float(position), 100.0)
    return AdjustedSizing(leverage=adjusted_leverage, position_pct=adjusted_position)
