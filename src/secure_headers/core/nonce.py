"""CSP nonce generation and the per-lifetime nonce holder."""

from __future__ import annotations

import base64
import logging
import secrets

from ..constants import NONCE_BYTES

logger = logging.getLogger(__name__)


class NonceSource:
    """Produces base64-encoded random tokens from the ``secrets`` CSPRNG."""

    def __init__(self, num_bytes: int = NONCE_BYTES):
        self.num_bytes = num_bytes

    def generate(self) -> str:
        """Return a fresh nonce (24 characters for the default 16 bytes)."""
        return base64.b64encode(secrets.token_bytes(self.num_bytes)).decode("ascii")


class NonceCell:
    """Holds the single nonce shared by a header set and its CSP builders.

    The value is created on first use and reused until :meth:`reset`.
    """

    def __init__(self, source: NonceSource | None = None):
        self._source = source or NonceSource()
        self._value: str | None = None

    def get(self) -> str | None:
        return self._value

    def ensure(self) -> str:
        """Return the current nonce, generating it if needed."""
        if self._value is None:
            self._value = self._source.generate()
            logger.debug("Generated CSP nonce")
        return self._value

    def reset(self) -> None:
        self._value = None
