"""Error types raised by secure-headers."""

from __future__ import annotations


class InvalidConfiguration(ValueError):
    """A policy input was rejected.

    Raised for an unknown security level, X-Frame-Options value,
    Referrer-Policy token, hash algorithm or out-of-range setting. The
    message names the offending value and no state is changed.
    """
