"""The security header policy engine.

A :class:`SecurityHeaderSet` holds a security profile, the per-lifetime CSP
nonce and the finalized ``header name -> value`` map. Each ``enable_*``
method computes one header family and stores it, replacing any previous
value. Writing the map onto a response is left to the caller (see
:meth:`SecurityHeaderSet.apply` and the Starlette middleware).

Instances are per request: the nonce and header map are unsynchronized
mutable state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from typing import TYPE_CHECKING

from .constants import (
    CRITICAL_CH_HEADER,
    CSP_HEADER,
    DATA_SCHEME,
    DEFAULT_CRITICAL_CH,
    DEFAULT_HSTS_MAX_AGE,
    DEFAULT_REFERRER_POLICY,
    DEFAULT_X_FRAME_OPTIONS,
    HSTS_HEADER,
    IMG_SRC,
    IMG_SRC_BUILTIN_TOKENS,
    PERMISSIONS_POLICY_HEADER,
    REFERRER_POLICIES,
    REFERRER_POLICY_HEADER,
    SCRIPT_SRC,
    SELF,
    STRICT_DYNAMIC,
    X_CONTENT_TYPE_OPTIONS_HEADER,
    X_CONTENT_TYPE_OPTIONS_VALUE,
    X_FRAME_OPTIONS_CHOICES,
    X_FRAME_OPTIONS_HEADER,
    X_XSS_PROTECTION_HEADER,
    X_XSS_PROTECTION_VALUE,
)
from .core.builder import CSPBuilder
from .core.directives import CSPDirectiveSet, build_csp_string, default_csp_policies
from .core.nonce import NonceCell, NonceSource
from .core.permissions import (
    default_permissions_policies,
    format_client_hints,
    format_critical_ch,
    format_permissions_policy,
)
from .errors import InvalidConfiguration
from .profiles import SecurityProfile, parse_profile

if TYPE_CHECKING:
    from .config import SecureHeadersConfig

logger = logging.getLogger(__name__)


class SecurityHeaderSet:
    """Builds security response headers for one request/response lifecycle.

    Args:
        level: Security profile, a :class:`SecurityProfile` or its value.
        nonce_source: Source of CSP nonces. Defaults to the ``secrets`` CSPRNG.

    Raises:
        InvalidConfiguration: If ``level`` is not a known profile.
    """

    def __init__(
        self,
        level: SecurityProfile | str = SecurityProfile.STRICT,
        nonce_source: NonceSource | None = None,
    ):
        self._security_level = parse_profile(level)
        self._nonce = NonceCell(nonce_source)
        self._headers: dict[str, str] = {}

    @classmethod
    def from_config(cls, config: SecureHeadersConfig) -> SecurityHeaderSet:
        """Create a header set with every header enabled per ``config``."""
        header_set = cls(config.security_level)
        header_set.enable_hsts(
            max_age=config.hsts_max_age,
            include_subdomains=config.hsts_include_subdomains,
            preload=config.hsts_preload,
        )
        header_set.enable_csp()
        header_set.enable_x_frame_options(config.frame_options)
        header_set.enable_x_content_type_options()
        header_set.enable_x_xss_protection()
        header_set.enable_referrer_policy(config.referrer_policy)
        header_set.enable_permissions_policy()
        header_set.enable_client_hints_policy(config.client_hints)
        header_set.enable_critical_ch(config.critical_ch)
        return header_set

    # -- Profile and nonce ---------------------------------------------------

    @property
    def security_level(self) -> SecurityProfile:
        return self._security_level

    def set_security_level(self, level: SecurityProfile | str) -> None:
        """Switch profile, discarding headers and nonce derived from the old one."""
        self._security_level = parse_profile(level)
        self._headers = {}
        self._nonce.reset()

    def get_nonce(self) -> str | None:
        return self._nonce.get()

    def ensure_nonce(self) -> str:
        """Return the lifetime nonce, generating it on first use."""
        return self._nonce.ensure()

    def csp(self) -> CSPBuilder:
        """Return a new CSP builder sharing this header set's nonce."""
        return CSPBuilder(self)

    # -- Header families -----------------------------------------------------

    def enable_hsts(
        self,
        max_age: int = DEFAULT_HSTS_MAX_AGE,
        include_subdomains: bool = True,
        preload: bool = False,
    ) -> None:
        if max_age < 0:
            raise InvalidConfiguration(f"Invalid HSTS max-age: {max_age}")
        value = f"max-age={max_age}"
        if include_subdomains:
            value += "; includeSubDomains"
        if preload:
            value += "; preload"
        self._headers[HSTS_HEADER] = value

    def enable_csp(self, policies: Mapping[str, Sequence[str]] | None = None) -> None:
        """Compute the Content-Security-Policy header.

        Without ``policies`` the profile defaults are used. ``script-src``
        always receives the lifetime nonce, and ``'strict-dynamic'`` under the
        strict profile. ``policies`` itself is not modified.
        """
        if policies:
            directives = CSPDirectiveSet(policies)
        else:
            directives = default_csp_policies(self._security_level)

        nonce = self.ensure_nonce()

        if SCRIPT_SRC not in directives:
            directives[SCRIPT_SRC] = [SELF]

        if IMG_SRC in directives:
            directives[IMG_SRC] = _normalize_img_src(directives[IMG_SRC])

        directives.append(SCRIPT_SRC, f"'nonce-{nonce}'")
        if self._security_level is SecurityProfile.STRICT:
            directives.append(SCRIPT_SRC, STRICT_DYNAMIC)

        self._headers[CSP_HEADER] = build_csp_string(directives)
        logger.debug("Enabled %s with %d directives", CSP_HEADER, len(directives))

    def enable_x_frame_options(self, option: str = DEFAULT_X_FRAME_OPTIONS) -> None:
        if option not in X_FRAME_OPTIONS_CHOICES:
            raise InvalidConfiguration(f"Invalid X-Frame-Options value: {option}")
        self._headers[X_FRAME_OPTIONS_HEADER] = option

    def enable_x_content_type_options(self) -> None:
        self._headers[X_CONTENT_TYPE_OPTIONS_HEADER] = X_CONTENT_TYPE_OPTIONS_VALUE

    def enable_x_xss_protection(self) -> None:
        self._headers[X_XSS_PROTECTION_HEADER] = X_XSS_PROTECTION_VALUE

    def enable_referrer_policy(self, policy: str = DEFAULT_REFERRER_POLICY) -> None:
        if policy not in REFERRER_POLICIES:
            raise InvalidConfiguration(f"Invalid Referrer-Policy value: {policy}")
        self._headers[REFERRER_POLICY_HEADER] = policy

    def enable_permissions_policy(self, policies: Mapping[str, Sequence[str]] | None = None) -> None:
        """Set Permissions-Policy, replacing any earlier value (hints included)."""
        if not policies:
            policies = default_permissions_policies(self._security_level)
        self._headers[PERMISSIONS_POLICY_HEADER] = format_permissions_policy(policies)

    def enable_client_hints_policy(self, hints: Mapping[str, str] | None = None) -> None:
        """Append Client-Hints entries to Permissions-Policy.

        Does nothing when ``hints`` is empty. Creates the header from the
        hints alone when no Permissions-Policy has been enabled yet.
        """
        if not hints:
            return
        entries = format_client_hints(hints)
        existing = self._headers.get(PERMISSIONS_POLICY_HEADER)
        if existing:
            self._headers[PERMISSIONS_POLICY_HEADER] = f"{existing}, {entries}"
        else:
            self._headers[PERMISSIONS_POLICY_HEADER] = entries

    def enable_critical_ch(self, hints: Iterable[str] | None = None) -> None:
        hints = list(hints or ())
        if not hints:
            hints = list(DEFAULT_CRITICAL_CH)
        self._headers[CRITICAL_CH_HEADER] = format_critical_ch(hints)

    def enable_all_security_headers(self) -> None:
        """Enable every header family with its defaults."""
        self.enable_hsts()
        self.enable_csp()
        self.enable_x_frame_options()
        self.enable_x_content_type_options()
        self.enable_x_xss_protection()
        self.enable_referrer_policy()
        self.enable_permissions_policy()
        self.enable_client_hints_policy()
        self.enable_critical_ch()

    # -- Output --------------------------------------------------------------

    def get_headers(self) -> dict[str, str]:
        return dict(self._headers)

    def apply(self, response_headers: MutableMapping[str, str], overwrite: bool = True):  # noqa: ANN201
        """Write the header map onto a caller-owned header collection.

        Args:
            response_headers: Any mutable mapping of header names, e.g. a
                Starlette ``MutableHeaders``.
            overwrite: If False, headers already present are kept.

        Returns:
            ``response_headers``, for chaining.
        """
        for name, value in self._headers.items():
            if overwrite:
                response_headers[name] = value
            else:
                response_headers.setdefault(name, value)
        return response_headers


def _normalize_img_src(tokens: Sequence[str]) -> list[str]:
    """Put ``'self' data:`` ahead of custom image origins.

    A list with only built-in tokens is returned unchanged. Otherwise the
    result is ``'self'``, ``data:`` and the custom origins in their original
    order (``https:`` is dropped).
    """
    custom = [token for token in tokens if token not in IMG_SRC_BUILTIN_TOKENS]
    if not custom:
        return list(tokens)
    return [SELF, DATA_SCHEME, *custom]
