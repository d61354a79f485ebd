"""Fluent Content-Security-Policy builder.

Every configuration method mutates the builder and returns it, so calls can
be chained::

    directives = (
        headers.csp()
        .allow_scripts("https://cdn.example.com")
        .allow_styles("https://fonts.googleapis.com")
        .block_frames()
        .get_directives()
    )
    headers.enable_csp(directives)

The builder never owns a nonce. It reads and creates it through the header
set it was obtained from, so ``script-src``, ``style-src``, injected markup
and the final header all carry the same value.
"""

from __future__ import annotations

import base64
import hashlib
import logging
from typing import TYPE_CHECKING

from ..constants import (
    BUILDER_SEED_DIRECTIVES,
    CONNECT_SRC,
    DATA_SCHEME,
    DEFAULT_SRC,
    FONT_SRC,
    FRAME_ANCESTORS,
    FRAME_SRC,
    HASH_ALGORITHMS,
    IMG_SRC,
    NONE,
    OBJECT_SRC,
    SCRIPT_SRC,
    SELF,
    STRICT_DYNAMIC,
    STYLE_SRC,
    UNSAFE_EVAL,
    UNSAFE_INLINE,
    UPGRADE_INSECURE_REQUESTS,
)
from ..errors import InvalidConfiguration
from .directives import CSPDirectiveSet, build_csp_string
from .html import (
    ResourceKind,
    extract_origin,
    extract_resource_urls,
    inject_nonces,
    is_external_url,
)

if TYPE_CHECKING:
    from ..headers import SecurityHeaderSet

logger = logging.getLogger(__name__)


class CSPBuilder:
    """Mutable CSP directive builder bound to a :class:`SecurityHeaderSet`."""

    def __init__(self, header_set: SecurityHeaderSet):
        self._header_set = header_set
        self._directives = CSPDirectiveSet({name: [SELF] for name in BUILDER_SEED_DIRECTIVES})
        self._use_nonce = True
        self._script_hashes: list[str] = []
        self._style_hashes: list[str] = []

    @property
    def uses_nonce(self) -> bool:
        return self._use_nonce

    def _nonce_token(self) -> str:
        return f"'nonce-{self._header_set.ensure_nonce()}'"

    def _allow_inline_capable(self, directive: str, sources: tuple[str, ...], hashes: list[str]) -> None:
        tokens = list(sources) or [SELF]
        if self._use_nonce:
            tokens.append(self._nonce_token())
        tokens.extend(hashes)
        self._directives.merge(directive, tokens)

    # -- Source lists --------------------------------------------------------

    def allow_scripts(self, *sources: str) -> CSPBuilder:
        """Allow scripts from ``sources`` (default ``'self'``) plus nonce and hashes."""
        self._allow_inline_capable(SCRIPT_SRC, sources, self._script_hashes)
        return self

    def allow_styles(self, *sources: str) -> CSPBuilder:
        """Allow styles from ``sources`` (default ``'self'``) plus nonce and hashes."""
        self._allow_inline_capable(STYLE_SRC, sources, self._style_hashes)
        return self

    def allow_images(self, *sources: str) -> CSPBuilder:
        self._directives.merge(IMG_SRC, sources or (SELF, DATA_SCHEME))
        return self

    def allow_fonts(self, *sources: str) -> CSPBuilder:
        self._directives.merge(FONT_SRC, sources or (SELF,))
        return self

    def allow_connections(self, *sources: str) -> CSPBuilder:
        self._directives.merge(CONNECT_SRC, sources or (SELF,))
        return self

    def allow_frames(self, *sources: str) -> CSPBuilder:
        """Allow embedding frames (``frame-src``) from ``sources``."""
        self._directives.merge(FRAME_SRC, sources or (SELF,))
        return self

    def allow_objects(self, *sources: str) -> CSPBuilder:
        self._directives.merge(OBJECT_SRC, sources or (SELF,))
        return self

    def block_objects(self) -> CSPBuilder:
        self._directives.replace(OBJECT_SRC, [NONE])
        return self

    def allow_frame_ancestors(self, *sources: str) -> CSPBuilder:
        """Set who may frame this page, replacing any previous value."""
        self._directives.replace(FRAME_ANCESTORS, sources or (SELF,))
        return self

    def block_frames(self) -> CSPBuilder:
        self._directives.replace(FRAME_ANCESTORS, [NONE])
        return self

    def add_directive(self, directive: str, *tokens: str) -> CSPBuilder:
        """Merge arbitrary tokens into any directive."""
        self._directives.merge(directive, tokens)
        return self

    def set_default_src(self, *sources: str) -> CSPBuilder:
        self._directives.replace(DEFAULT_SRC, sources or (SELF,))
        return self

    # -- Keyword tokens ------------------------------------------------------

    def _append_script_token(self, token: str) -> CSPBuilder:
        if SCRIPT_SRC not in self._directives:
            self.allow_scripts()
        self._directives.append(SCRIPT_SRC, token)
        return self

    def allow_unsafe_inline_scripts(self) -> CSPBuilder:
        return self._append_script_token(UNSAFE_INLINE)

    def allow_unsafe_eval(self) -> CSPBuilder:
        return self._append_script_token(UNSAFE_EVAL)

    def use_strict_dynamic(self) -> CSPBuilder:
        return self._append_script_token(STRICT_DYNAMIC)

    def allow_unsafe_inline_styles(self) -> CSPBuilder:
        if STYLE_SRC not in self._directives:
            self.allow_styles()
        self._directives.append(STYLE_SRC, UNSAFE_INLINE)
        return self

    def upgrade_insecure_requests(self) -> CSPBuilder:
        self._directives.replace(UPGRADE_INSECURE_REQUESTS, [])
        return self

    def without_nonce(self) -> CSPBuilder:
        """Stop adding nonce tokens and skip nonce injection from now on."""
        self._use_nonce = False
        return self

    # -- Hashes --------------------------------------------------------------

    def add_script_hash(self, algorithm: str, digest: str) -> CSPBuilder:
        token = f"'{algorithm}-{digest}'"
        self._script_hashes.append(token)
        if SCRIPT_SRC not in self._directives:
            self.allow_scripts()
        else:
            self._directives.append(SCRIPT_SRC, token)
        return self

    def add_style_hash(self, algorithm: str, digest: str) -> CSPBuilder:
        token = f"'{algorithm}-{digest}'"
        self._style_hashes.append(token)
        if STYLE_SRC not in self._directives:
            self.allow_styles()
        else:
            self._directives.append(STYLE_SRC, token)
        return self

    def hash_inline_script(self, content: str, algorithm: str = "sha256") -> CSPBuilder:
        """Allow one inline script by the digest of its exact content."""
        return self.add_script_hash(algorithm, _digest(content, algorithm))

    def hash_inline_style(self, content: str, algorithm: str = "sha256") -> CSPBuilder:
        return self.add_style_hash(algorithm, _digest(content, algorithm))

    # -- HTML analysis -------------------------------------------------------

    def detect_external_resources_from_html(self, html: str) -> CSPBuilder:
        """Add the origin of every external resource referenced in ``html``.

        Each origin goes into the directive for its resource kind. A
        directive that does not exist yet is seeded with ``'self'`` first.
        """
        for kind in ResourceKind:
            for url in extract_resource_urls(html, kind):
                if not is_external_url(url):
                    continue
                origin = extract_origin(url)
                if origin is None:
                    continue
                if kind.directive not in self._directives:
                    self._directives[kind.directive] = [SELF]
                self._directives.append(kind.directive, origin)
                logger.debug("Detected external %s source %s", kind.value, origin)
        return self

    def inject_nonces_to_html(self, html: str) -> str:
        """Return ``html`` with the shared nonce on inline script/style tags."""
        if not self._use_nonce:
            return html
        return inject_nonces(html, self._header_set.ensure_nonce())

    # -- Output --------------------------------------------------------------

    def get_directives(self) -> CSPDirectiveSet:
        """Snapshot of the current directives."""
        return self._directives.copy()

    def build(self) -> str:
        """Serialize the current directives without header-set post-processing."""
        return build_csp_string(self._directives)


def _digest(content: str, algorithm: str) -> str:
    if algorithm not in HASH_ALGORITHMS:
        raise InvalidConfiguration(f"Invalid hash algorithm: {algorithm}")
    raw = hashlib.new(algorithm, content.encode("utf-8")).digest()
    return base64.b64encode(raw).decode("ascii")
