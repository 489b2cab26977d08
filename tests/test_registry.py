from __future__ import annotations

import pytest

from strategy_profiles.core.errors import ConfigurationError
from strategy_profiles.core.models import ProfileId
from strategy_profiles.strategy.registry import (
    REGISTRY,
    available_profiles,
    derive_strategy,
    get_entry,
    resolve_profile_id,
)


def test_registry_covers_every_profile() -> None:
    assert set(REGISTRY) == set(ProfileId)
    assert available_profiles() == list(ProfileId)


def test_registry_is_read_only() -> None:
    with pytest.raises(TypeError):
        REGISTRY[ProfileId.BALANCED] = REGISTRY[ProfileId.AGGRESSIVE]  # type: ignore[index]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("swing-trend", ProfileId.SWING_TREND),
        ("swing_trend", ProfileId.SWING_TREND),
        (" Ultra-Short ", ProfileId.ULTRA_SHORT),
        (ProfileId.BALANCED, ProfileId.BALANCED),
    ],
)
def test_resolve_profile_id(raw: str, expected: ProfileId) -> None:
    assert resolve_profile_id(raw) == expected


def test_unknown_profile_raises_configuration_error() -> None:
    with pytest.raises(ConfigurationError) as exc_info:
        derive_strategy("nonexistent", 25)
    assert "nonexistent" in str(exc_info.value)
    assert exc_info.value.value == "nonexistent"


def test_configuration_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        get_entry("scalping")


def test_entry_pairs_bind_the_same_profile() -> None:
    for profile_id, entry in REGISTRY.items():
        assert entry.profile.profile_id == profile_id
        params = entry.derive(25)
        assert params.profile_id == profile_id
        assert entry.render(params, None)
