"""Permissions-Policy, Client-Hints and Critical-CH value formatting."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ..constants import (
    BASIC_PERMISSIONS_FEATURES,
    SELF,
    STRICT_PERMISSIONS_FEATURES,
)
from ..profiles import SecurityProfile, parse_profile


def default_permissions_policies(profile: SecurityProfile | str) -> dict[str, list[str]]:
    """Strict denies every sensitive feature; Basic limits a few to same-origin."""
    profile = parse_profile(profile)
    if profile is SecurityProfile.STRICT:
        return {feature: [] for feature in STRICT_PERMISSIONS_FEATURES}
    return {feature: [SELF] for feature in BASIC_PERMISSIONS_FEATURES}


def format_permissions_policy(policies: Mapping[str, Sequence[str]]) -> str:
    """Render ``feature=()`` / ``feature=(a b)`` entries joined by ``, ``."""
    entries = [f"{feature}=({' '.join(allow_list)})" for feature, allow_list in policies.items()]
    return ", ".join(entries)


def format_client_hints(hints: Mapping[str, str]) -> str:
    """Render Client-Hints entries as unquoted ``name=value`` pairs."""
    return ", ".join(f"{hint}={value}" for hint, value in hints.items())


def format_critical_ch(hints: Iterable[str]) -> str:
    """Sort hints lexicographically and join them with ``, ``."""
    return ", ".join(sorted(hints))
