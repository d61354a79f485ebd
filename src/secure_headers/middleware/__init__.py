"""HTTP framework adapters."""

from .security import SecurityHeadersMiddleware, merge_detected_policies

__all__ = [
    "SecurityHeadersMiddleware",
    "merge_detected_policies",
]
