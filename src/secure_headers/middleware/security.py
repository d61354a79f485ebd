"""Security headers middleware for Starlette/ASGI."""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import SecureHeadersConfig
from ..constants import STYLE_SRC
from ..core.directives import CSPDirectiveSet, default_csp_policies
from ..headers import SecurityHeaderSet
from ..profiles import SecurityProfile

logger = logging.getLogger(__name__)


def _charset(content_type: str) -> str:
    for param in content_type.split(";")[1:]:
        name, _, value = param.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return "utf-8"


def merge_detected_policies(
    header_set: SecurityHeaderSet,
    detected: CSPDirectiveSet,
    style_nonce: bool = False,
) -> CSPDirectiveSet:
    """Overlay builder-detected sources on the profile's default CSP.

    With ``style_nonce`` the header set's nonce is also allowed in
    ``style-src`` so nonce-injected ``<style>`` tags apply. The basic profile
    is left on ``'unsafe-inline'``, which browsers ignore once a nonce is
    listed next to it.
    """
    policies = default_csp_policies(header_set.security_level)
    for directive, tokens in detected.items():
        policies.merge(directive, tokens)
    if style_nonce and header_set.security_level is SecurityProfile.STRICT:
        policies.append(STYLE_SRC, f"'nonce-{header_set.ensure_nonce()}'")
    return policies


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to every HTTP response.

    A fresh :class:`SecurityHeaderSet` is built per request, so each response
    gets its own CSP nonce. The nonce is published on
    ``request.state.csp_nonce`` for templates and the header set itself on
    ``request.state.security_headers``. For ``text/html`` responses the
    body can additionally be rewritten to carry the nonce on inline
    ``<script>``/``<style>`` tags, and external resources found in it can be
    added to the CSP.

    Headers already set by the handler are kept.

    Args:
        app: The ASGI application.
        config: Header policy; loaded from the environment when omitted.
    """

    def __init__(self, app, config: SecureHeadersConfig | None = None):  # noqa: ANN001
        super().__init__(app)
        self.config = config or SecureHeadersConfig.from_env()

    def _should_rewrite(self, response: Response) -> bool:
        if not (self.config.inject_nonces or self.config.detect_resources):
            return False
        if response.status_code < 200 or response.status_code in (204, 304):
            return False
        if response.headers.get("content-encoding"):
            return False
        content_type = response.headers.get("content-type", "")
        return content_type.split(";")[0].strip().lower() == "text/html"

    async def _rewrite_html(self, response: Response, header_set: SecurityHeaderSet) -> Response:
        body = b"".join([chunk async for chunk in response.body_iterator])  # type: ignore[attr-defined]
        charset = _charset(response.headers.get("content-type", ""))

        try:
            html = body.decode(charset)
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning("Leaving HTML body untouched, cannot decode as %s: %s", charset, e)
            html = None

        if html is not None:
            builder = header_set.csp()
            if not self.config.inject_nonces:
                builder.without_nonce()
            if self.config.detect_resources:
                builder.detect_external_resources_from_html(html)
            header_set.enable_csp(
                merge_detected_policies(header_set, builder.get_directives(), style_nonce=builder.uses_nonce)
            )
            body = builder.inject_nonces_to_html(html).encode(charset)

        rewritten = Response(
            content=body,
            status_code=response.status_code,
            background=response.background,
        )
        rewritten.raw_headers = [
            (name, value) for name, value in response.raw_headers if name.lower() != b"content-length"
        ] + [(b"content-length", str(len(body)).encode("latin-1"))]
        return rewritten

    async def dispatch(self, request: Request, call_next):  # noqa: ANN001, ANN201
        header_set = SecurityHeaderSet.from_config(self.config)
        request.state.security_headers = header_set
        request.state.csp_nonce = header_set.ensure_nonce()

        response = await call_next(request)

        if self._should_rewrite(response):
            response = await self._rewrite_html(response, header_set)

        header_set.apply(response.headers, overwrite=False)
        return response
