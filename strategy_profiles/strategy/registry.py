"""Profile registry - immutable lookup from profile id to (derive, render)."""

from __future__ import annotations

import dataclasses
import functools
from collections.abc import Callable, Mapping
from types import MappingProxyType

from strategy_profiles.core.errors import ConfigurationError
from strategy_profiles.core.models import ProfileId, StrategyParams
from strategy_profiles.logging.logger import get_logger
from strategy_profiles.strategy.derivation import derive_params
from strategy_profiles.strategy.profiles import PROFILES, StrategyProfile
from strategy_profiles.strategy.prompts import PromptContextInput, render_profile_instructions

logger = get_logger("registry")


@dataclasses.dataclass(frozen=True, slots=True)
class ProfileEntry:
    profile: StrategyProfile
    derive: Callable[[float], StrategyParams]
    render: Callable[[StrategyParams, PromptContextInput], str]


def _entry(profile: StrategyProfile) -> ProfileEntry:
    return ProfileEntry(
        profile=profile,
        derive=functools.partial(derive_params, profile),
        render=functools.partial(render_profile_instructions, profile),
    )


REGISTRY: Mapping[ProfileId, ProfileEntry] = MappingProxyType(
    {profile.profile_id: _entry(profile) for profile in PROFILES}
)


def resolve_profile_id(profile_id: str | ProfileId) -> ProfileId:
    """Accept ``"swing-trend"``, ``"swing_trend"`` or ``"Swing-Trend"``."""
    if isinstance(profile_id, ProfileId):
        return profile_id
    normalized = str(profile_id).strip().lower().replace("_", "-")
    try:
        return ProfileId(normalized)
    except ValueError:
        logger.warning("profile_unknown", profile=profile_id)
        known = ", ".join(p.value for p in REGISTRY)
        raise ConfigurationError(
            f"unknown strategy profile {profile_id!r} (expected one of: {known})",
            value=profile_id,
        ) from None


def get_entry(profile_id: str | ProfileId) -> ProfileEntry:
    return REGISTRY[resolve_profile_id(profile_id)]


def available_profiles() -> list[ProfileId]:
    return list(REGISTRY)


def derive_strategy(profile_id: str | ProfileId, system_max_leverage: float) -> StrategyParams:
    return get_entry(profile_id).derive(system_max_leverage)


def render_instructions(params: StrategyParams, context: PromptContextInput = None) -> str:
    return get_entry(params.profile_id).render(params, context)
