"""Instruction text for the AI decision engine.

Every number in the output is interpolated from the parameter record or the
runtime context. The enforcement-mode section must match
``enable_code_level_protection`` exactly: with automated protection the AI is
forbidden from closing positions, without it the AI owns every exit.
"""

from __future__ import annotations

from collections.abc import Mapping

from strategy_profiles.core.errors import ConfigurationError
from strategy_profiles.core.models import StrategyParams, StrategyPromptContext
from strategy_profiles.logging.logger import get_logger
from strategy_profiles.strategy.derivation import leverage_buckets
from strategy_profiles.strategy.profiles import RegimeGuide, Sizing, StrategyProfile

logger = get_logger("prompts")

CLOSE_POSITION_TOOL = "closePosition"

PromptContextInput = StrategyPromptContext | Mapping[str, object] | None


def fmt_number(value: float | int) -> str:
    """Render ``20.0`` as ``20`` and ``-2.5`` as ``-2.5``."""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def _coerce_context(context: PromptContextInput) -> StrategyPromptContext:
    if isinstance(context, StrategyPromptContext):
        return context
    return StrategyPromptContext.from_mapping(context)


def _position_text(params: StrategyParams, sizing: Sizing) -> str:
    rec = params.position_size_recommend
    if sizing == Sizing.MINIMUM:
        return f"reduce to the minimum position ({fmt_number(params.position_size_min)}%)"
    if sizing == Sizing.LOWER:
        return f"smaller position ({rec.normal})"
    if sizing == Sizing.UPPER:
        return f"larger position ({rec.good} to {rec.strong}) to ride the trend"
    return (
        f"standard position ({fmt_number(params.position_size_min)}-"
        f"{fmt_number(params.position_size_max)}%)"
    )


def _leverage_text(params: StrategyParams, sizing: Sizing) -> str:
    rec = params.leverage_recommend
    if sizing == Sizing.MINIMUM:
        return f"lowest leverage ({params.leverage_min}x)"
    if sizing == Sizing.LOWER:
        return f"lower leverage ({params.leverage_min}-{rec.good}x)"
    if sizing == Sizing.UPPER:
        return f"higher leverage ({rec.good}-{params.leverage_max}x)"
    return (
        f"by signal strength ({rec.normal}x normal, {rec.good}x good, {rec.strong}x strong)"
    )


def _regime_lines(title: str, params: StrategyParams, guide: RegimeGuide) -> list[str]:
    lines = [
        f"{title}:",
        f"- Entry: {guide.entry}",
        f"- Position size: {_position_text(params, guide.position)}",
        f"- Leverage: {_leverage_text(params, guide.leverage)}",
    ]
    lines.extend(f"- {note}" for note in guide.notes)
    return lines


def _runtime_lines(ctx: StrategyPromptContext) -> list[str]:
    lines: list[str] = []
    if ctx.interval_minutes is not None:
        lines.append(f"- Decision cycle: every {ctx.interval_minutes} minutes")
    if ctx.open_positions is not None and ctx.max_positions is not None:
        lines.append(f"- Open positions: {ctx.open_positions}/{ctx.max_positions}")
    elif ctx.open_positions is not None:
        lines.append(f"- Open positions: {ctx.open_positions}")
    elif ctx.max_positions is not None:
        lines.append(f"- Position cap: {ctx.max_positions}")
    if ctx.max_holding_hours is not None:
        lines.append(f"- Maximum holding time: {fmt_number(ctx.max_holding_hours)} hours")
    if ctx.extreme_stop_loss_pct is not None:
        lines.append(
            f"- Account emergency stop: -{fmt_number(ctx.extreme_stop_loss_pct)}% "
            "(enforced by the system regardless of profile)"
        )
    if ctx.symbols:
        lines.append(f"- Symbols: {', '.join(ctx.symbols)}")
    if not lines:
        return []
    return ["[Runtime]", *lines, ""]


def _automated_lines(params: StrategyParams, ctx: StrategyPromptContext) -> list[str]:
    cadence = (
        f" (checked every {ctx.monitor_interval_sec} seconds)"
        if ctx.monitor_interval_sec is not None
        else ""
    )
    lines = [
        "[Automated protection - active]",
        f"The position monitor enforces stop-loss and trailing-stop exits{cadence}:",
        "- You are responsible only for opening positions and market analysis",
        "- Every close and partial close is executed by the position monitor",
        f"- You must NOT call {CLOSE_POSITION_TOOL}",
        "",
        "Monitor stop-loss by leverage:",
    ]

    buckets = leverage_buckets(params)
    for bucket, (lo, hi) in buckets.items():
        span = f"{lo}x" if lo == hi else f"{lo}-{hi}x"
        threshold = fmt_number(params.stop_loss.for_bucket(bucket))
        lines.append(f"- {span} leverage: stop out at {threshold}%")

    lines.append("")
    lines.append("Monitor trailing stop (3 levels):")
    for idx, level in enumerate(params.trailing_stop.as_tuple(), start=1):
        lines.append(
            f"- Level {idx}: once profit peaks at {fmt_number(level.trigger)}%, "
            f"close if it falls back to {fmt_number(level.stop_at)}%"
        )

    lines.extend(
        [
            "",
            "[Your responsibilities]",
            "- Focus on market analysis and opening decisions",
            "- Track open positions and describe their state in your report",
            "- Assess technical indicators and trend health",
            "- Leave every exit to the position monitor",
            "",
        ]
    )
    return lines


def _advisory_lines(params: StrategyParams) -> list[str]:
    return [
        "[Risk control - your responsibility]",
        "No automated monitor closes positions for this profile:",
        "- Review the unrealized P&L of every open position each cycle",
        "- When a position's risk is no longer acceptable, you must call "
        f"{CLOSE_POSITION_TOOL} yourself",
        f"- Close or strongly consider closing once profit retraces "
        f"{fmt_number(params.peak_drawdown_protection)} percentage points from its peak",
        "",
    ]


def _quick_lock_lines(params: StrategyParams) -> list[str]:
    lock = params.quick_profit_lock
    if lock is None:
        return []
    return [
        f"- Cycle profit lock: within a cycle, close immediately when profit is above "
        f"{fmt_number(lock.min_profit_pct)}% and below {fmt_number(lock.max_profit_pct)}%",
        f"- {lock.hold_minutes}-minute rule: after holding for more than {lock.hold_minutes} "
        "minutes with profit above fee cost, close conservatively if the trailing-stop "
        "line has not been reached",
    ]


def render_profile_instructions(
    profile: StrategyProfile,
    params: StrategyParams,
    context: PromptContextInput = None,
) -> str:
    """Render ``params`` with the playbook of ``profile``.

    The registry always pairs a record with its own profile. A direct call that
    pairs a record with another profile raises ``ConfigurationError``.
    """
    if params.profile_id != profile.profile_id:
        raise ConfigurationError(
            f"parameters for profile {params.profile_id.value!r} cannot be rendered "
            f"as {profile.profile_id.value!r}",
            value=params.profile_id.value,
        )

    ctx = _coerce_context(context)
    playbook = profile.playbook
    target = params.target_monthly_return

    lines: list[str] = [
        f"**Target monthly return**: {fmt_number(target.low)}-{fmt_number(target.high)}%",
        f"**Reward/risk target**: >= {fmt_number(params.min_reward_risk_ratio)}:1 "
        f"({playbook.reward_risk_note})",
        "",
        f"[Market regimes - {params.name}]",
        "",
        playbook.overview,
        "",
        *_regime_lines("Trending market", params, playbook.trending),
        "",
        *_regime_lines("Ranging market", params, playbook.ranging),
        "",
    ]

    lines.extend(_runtime_lines(ctx))

    if params.enable_code_level_protection:
        lines.extend(_automated_lines(params, ctx))
    else:
        lines.extend(_advisory_lines(params))

    rules = [*_quick_lock_lines(params), *(f"- {rule}" for rule in playbook.rules)]
    if rules:
        lines.append(f"[{playbook.rules_title}]")
        lines.extend(rules)

    text = "\n".join(lines).rstrip() + "\n"
    logger.debug(
        "instructions_rendered",
        profile=params.profile_id.value,
        code_level_protection=params.enable_code_level_protection,
        chars=len(text),
    )
    return text
