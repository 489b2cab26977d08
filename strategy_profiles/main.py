"""Strategy Profiles - leverage-scaled risk configuration for an AI trading agent.

CLI entrypoint.
Usage:
    strategy-profiles list [--max-leverage N]
    strategy-profiles show [PROFILE] [--max-leverage N] [--json]
    strategy-profiles prompt [PROFILE] [--max-leverage N] [--open-positions N]
    strategy-profiles selftest
"""

from __future__ import annotations

import json
import sys

import click

from strategy_profiles.config.settings import Settings
from strategy_profiles.core.errors import ConfigurationError
from strategy_profiles.core.models import StrategyParams
from strategy_profiles.logging.logger import setup_logging
from strategy_profiles.strategy.derivation import leverage_buckets
from strategy_profiles.strategy.prompts import fmt_number
from strategy_profiles.strategy.registry import (
    REGISTRY,
    available_profiles,
    derive_strategy,
    render_instructions,
)


def _load(profile: str | None, max_leverage: float | None) -> tuple[Settings, str, float]:
    settings = Settings.load_safe()
    setup_logging(log_level=settings.log_level)
    return (
        settings,
        profile if profile is not None else settings.trading_strategy,
        max_leverage if max_leverage is not None else settings.max_leverage,
    )


def _derive_or_exit(profile: str, max_leverage: float) -> StrategyParams:
    try:
        return derive_strategy(profile, max_leverage)
    except ConfigurationError as e:
        click.echo(f"ERROR: {e}")
        sys.exit(1)


def _describe(params: StrategyParams) -> list[str]:
    mode = "automated monitor" if params.enable_code_level_protection else "AI advisory"
    rec = params.leverage_recommend
    lines = [
        f"{params.name} ({params.profile_id.value}) - {params.description}",
        f"  Enforcement:    {mode}",
        f"  Leverage:       {params.leverage_min}-{params.leverage_max}x "
        f"(normal {rec.normal}x, good {rec.good}x, strong {rec.strong}x)",
        f"  Position size:  {fmt_number(params.position_size_min)}-"
        f"{fmt_number(params.position_size_max)}%",
    ]
    for bucket, (lo, hi) in leverage_buckets(params).items():
        lines.append(
            f"  Stop-loss {bucket.value:<4} {lo}-{hi}x: "
            f"{fmt_number(params.stop_loss.for_bucket(bucket))}%"
        )
    for idx, level in enumerate(params.trailing_stop.as_tuple(), start=1):
        lines.append(
            f"  Trailing L{idx}:    +{fmt_number(level.trigger)}% -> {fmt_number(level.stop_at)}%"
        )
    for idx, stage in enumerate(params.partial_take_profit.as_tuple(), start=1):
        lines.append(
            f"  Take-profit S{idx}: +{fmt_number(stage.trigger)}% close "
            f"{fmt_number(stage.close_percent)}%"
        )
    lines.append(f"  Peak drawdown:  {fmt_number(params.peak_drawdown_protection)} pts")
    return lines


@click.group()
def cli() -> None:
    """Strategy Profiles - leverage-scaled risk configuration."""
    pass


@cli.command("list")
@click.option("--max-leverage", type=float, default=None, help="System leverage ceiling")
def list_profiles(max_leverage: float | None) -> None:
    """List every profile with its derived leverage range."""
    _, _, ceiling = _load(None, max_leverage)
    for profile_id in available_profiles():
        params = _derive_or_exit(profile_id.value, ceiling)
        mode = "auto" if params.enable_code_level_protection else "ai"
        click.echo(
            f"{profile_id.value:<13} {params.leverage_min:>4}-{params.leverage_max:<4}x  "
            f"[{mode}]  {REGISTRY[profile_id].profile.description}"
        )


@cli.command()
@click.argument("profile", required=False)
@click.option("--max-leverage", type=float, default=None, help="System leverage ceiling")
@click.option("--json", "as_json", is_flag=True, help="Print the parameter record as JSON")
def show(profile: str | None, max_leverage: float | None, as_json: bool) -> None:
    """Show the derived parameter record for a profile."""
    _, profile_id, ceiling = _load(profile, max_leverage)
    params = _derive_or_exit(profile_id, ceiling)
    if as_json:
        click.echo(json.dumps(params.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return
    for line in _describe(params):
        click.echo(line)


@cli.command()
@click.argument("profile", required=False)
@click.option("--max-leverage", type=float, default=None, help="System leverage ceiling")
@click.option("--open-positions", type=int, default=None, help="Current open position count")
def prompt(profile: str | None, max_leverage: float | None, open_positions: int | None) -> None:
    """Print the AI instruction block for a profile."""
    settings, profile_id, ceiling = _load(profile, max_leverage)
    params = _derive_or_exit(profile_id, ceiling)
    click.echo(render_instructions(params, settings.prompt_context(open_positions)), nl=False)


@cli.command()
def selftest() -> None:
    """Derive and render every profile across a range of ceilings."""
    setup_logging(log_level=Settings.load_safe().log_level)
    click.echo("Running self-test...")
    errors: list[str] = []

    for profile_id in available_profiles():
        try:
            for ceiling in (1, 2, 25, 100, 1_000_000):
                params = derive_strategy(profile_id, ceiling)
                assert 1 <= params.leverage_min <= params.leverage_max
                text = render_instructions(params, None)
                assert text == render_instructions(params, None), "rendering not idempotent"
            click.echo(f"  [OK] {profile_id.value}")
        except Exception as e:
            errors.append(f"{profile_id.value}: {e}")

    try:
        derive_strategy("nonexistent", 25)
        errors.append("Registry: unknown profile accepted")
    except ConfigurationError:
        click.echo("  [OK] Unknown profile rejected")

    if errors:
        click.echo(f"\nFAILED - {len(errors)} error(s):")
        for err in errors:
            click.echo(f"  - {err}")
        sys.exit(1)
    else:
        click.echo("\nOK - All self-tests passed.")
        sys.exit(0)


if __name__ == "__main__":
    cli()
