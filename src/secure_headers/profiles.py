"""Security profiles: named bundles of default policy choices."""

from __future__ import annotations

from enum import Enum

from .errors import InvalidConfiguration


class SecurityProfile(str, Enum):
    """Basic is permissive, Strict is restrictive."""

    BASIC = "basic"
    STRICT = "strict"


def parse_profile(level: SecurityProfile | str) -> SecurityProfile:
    """Coerce a profile member or its string value.

    Raises:
        InvalidConfiguration: If ``level`` names no known profile.
    """
    if isinstance(level, SecurityProfile):
        return level
    try:
        return SecurityProfile(level)
    except ValueError:
        raise InvalidConfiguration(f"Invalid security level: {level}") from None
