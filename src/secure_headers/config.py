"""Configuration for secure-headers, loaded from environment variables."""

import os
from dataclasses import dataclass, field

from .constants import (
    DEFAULT_CRITICAL_CH,
    DEFAULT_HOST,
    DEFAULT_HSTS_MAX_AGE,
    DEFAULT_PORT,
    DEFAULT_REFERRER_POLICY,
    DEFAULT_SECURITY_LEVEL,
    DEFAULT_X_FRAME_OPTIONS,
    REFERRER_POLICIES,
    X_FRAME_OPTIONS_CHOICES,
)
from .errors import InvalidConfiguration
from .profiles import SecurityProfile, parse_profile


def _parse_bool(raw: str) -> bool:
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_hints(raw: str) -> dict[str, str]:
    """Parse ``ch-ua=*,ch-ua-platform=self`` into a mapping."""
    hints: dict[str, str] = {}
    for item in _parse_list(raw):
        name, sep, value = item.partition("=")
        if not sep or not name.strip():
            raise InvalidConfiguration(f"Invalid client hint entry: {item}")
        hints[name.strip()] = value.strip()
    return hints


@dataclass
class SecureHeadersConfig:
    """Header policy configuration loaded from environment variables."""

    # Profile
    security_level: SecurityProfile = SecurityProfile(DEFAULT_SECURITY_LEVEL)

    # Strict-Transport-Security
    hsts_max_age: int = DEFAULT_HSTS_MAX_AGE
    hsts_include_subdomains: bool = True
    hsts_preload: bool = False

    # Single-value headers
    frame_options: str = DEFAULT_X_FRAME_OPTIONS
    referrer_policy: str = DEFAULT_REFERRER_POLICY

    # Client hints
    client_hints: dict[str, str] = field(default_factory=dict)
    critical_ch: list[str] = field(default_factory=lambda: list(DEFAULT_CRITICAL_CH))

    # HTML rewriting in the middleware
    inject_nonces: bool = True
    detect_resources: bool = False

    # Demo server
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    def __post_init__(self) -> None:
        """Validate config values."""
        self.security_level = parse_profile(self.security_level)

        if self.hsts_max_age < 0:
            raise InvalidConfiguration(f"hsts_max_age must be non-negative, got {self.hsts_max_age}")

        if self.frame_options not in X_FRAME_OPTIONS_CHOICES:
            raise InvalidConfiguration(f"Invalid X-Frame-Options value: {self.frame_options}")

        if self.referrer_policy not in REFERRER_POLICIES:
            raise InvalidConfiguration(f"Invalid Referrer-Policy value: {self.referrer_policy}")

        if not 1 <= self.port <= 65535:
            raise InvalidConfiguration(f"port must be between 1 and 65535, got {self.port}")

    @classmethod
    def from_env(cls) -> "SecureHeadersConfig":
        """Create config from ``SECURE_HEADERS_*`` environment variables."""
        env = os.environ

        try:
            hsts_max_age = int(env.get("SECURE_HEADERS_HSTS_MAX_AGE", str(DEFAULT_HSTS_MAX_AGE)))
            port = int(env.get("SECURE_HEADERS_PORT", str(DEFAULT_PORT)))
        except ValueError as e:
            raise InvalidConfiguration(f"Invalid integer setting: {e}") from e

        return cls(
            security_level=env.get("SECURE_HEADERS_LEVEL", DEFAULT_SECURITY_LEVEL),  # type: ignore[arg-type]
            hsts_max_age=hsts_max_age,
            hsts_include_subdomains=_parse_bool(env.get("SECURE_HEADERS_HSTS_INCLUDE_SUBDOMAINS", "true")),
            hsts_preload=_parse_bool(env.get("SECURE_HEADERS_HSTS_PRELOAD", "false")),
            frame_options=env.get("SECURE_HEADERS_FRAME_OPTIONS", DEFAULT_X_FRAME_OPTIONS),
            referrer_policy=env.get("SECURE_HEADERS_REFERRER_POLICY", DEFAULT_REFERRER_POLICY),
            client_hints=_parse_hints(env.get("SECURE_HEADERS_CLIENT_HINTS", "")),
            critical_ch=_parse_list(env.get("SECURE_HEADERS_CRITICAL_CH", "")) or list(DEFAULT_CRITICAL_CH),
            inject_nonces=_parse_bool(env.get("SECURE_HEADERS_INJECT_NONCES", "true")),
            detect_resources=_parse_bool(env.get("SECURE_HEADERS_DETECT_RESOURCES", "false")),
            host=env.get("SECURE_HEADERS_HOST", DEFAULT_HOST),
            port=port,
        )
