"""Pattern-based HTML scanning for CSP sources and inline nonce injection.

Detection uses regular expressions rather than a DOM. Everything above this
module only calls :func:`extract_resource_urls`, :func:`is_external_url`,
:func:`extract_origin` and :func:`inject_nonces`, so a real parser can be
swapped in behind the same functions.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from urllib.parse import urlsplit

from ..constants import FONT_SRC, FRAME_SRC, IMG_SRC, SCRIPT_SRC, STYLE_SRC

logger = logging.getLogger(__name__)


class ResourceKind(Enum):
    """Kinds of external resource, each feeding one CSP directive."""

    SCRIPT = "script"
    STYLESHEET = "stylesheet"
    IMPORT = "import"
    IMAGE = "image"
    FONT = "font"
    FRAME = "frame"

    @property
    def directive(self) -> str:
        return _DIRECTIVES[self]


_DIRECTIVES = {
    ResourceKind.SCRIPT: SCRIPT_SRC,
    ResourceKind.STYLESHEET: STYLE_SRC,
    ResourceKind.IMPORT: STYLE_SRC,
    ResourceKind.IMAGE: IMG_SRC,
    ResourceKind.FONT: FONT_SRC,
    ResourceKind.FRAME: FRAME_SRC,
}

# Attribute value in single or double quotes, name not part of e.g. data-src
_ATTR = r"""(?<![\w-]){name}\s*=\s*(["'])(?P<url>[^"']+)\1"""

_SRC_TAG_PATTERNS = {
    ResourceKind.SCRIPT: re.compile(r"<script\b[^>]*?" + _ATTR.format(name="src"), re.IGNORECASE),
    ResourceKind.IMAGE: re.compile(r"<img\b[^>]*?" + _ATTR.format(name="src"), re.IGNORECASE),
    ResourceKind.FRAME: re.compile(r"<iframe\b[^>]*?" + _ATTR.format(name="src"), re.IGNORECASE),
}

LINK_TAG_PATTERN = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
STYLESHEET_REL_PATTERN = re.compile(
    r"""(?<![\w-])rel\s*=\s*["']?[^"'>]*\bstylesheet\b""", re.IGNORECASE
)
HREF_PATTERN = re.compile(_ATTR.format(name="href"), re.IGNORECASE)

# @import url('x'), @import url(x), @import 'x'
IMPORT_PATTERN = re.compile(
    r"""@import\s+(?:url\(\s*["']?(?P<url>[^"'()\s]+)["']?\s*\)|["'](?P<bare>[^"']+)["'])""",
    re.IGNORECASE,
)

FONT_FACE_PATTERN = re.compile(r"@font-face\s*\{(?P<body>[^}]*)\}", re.IGNORECASE)
FONT_SRC_PATTERN = re.compile(r"(?<![\w-])src\s*:(?P<value>[^;}]*)", re.IGNORECASE)
CSS_URL_PATTERN = re.compile(r"""url\(\s*["']?(?P<url>[^"'()]+?)["']?\s*\)""", re.IGNORECASE)

ABSOLUTE_HTTP_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
NON_EXTERNAL_SCHEMES = ("data:", "javascript:")

# Opening <script>/<style> tag. A trailing "/" that ends an unquoted value
# (src=/a/b/) stays part of the attributes.
OPENING_TAG_PATTERN = re.compile(
    r"""<(?P<tag>script|style)\b(?P<attrs>[^>]*?)"""
    r"""(?P<close>(?:\s+|(?<=["'])|(?<=<script)|(?<=<style))/)?>""",
    re.IGNORECASE,
)
NONCE_ATTR_PATTERN = re.compile(r"(?<![\w-])nonce\s*=", re.IGNORECASE)


def _extract_link_stylesheets(html: str) -> list[str]:
    urls = []
    for tag in LINK_TAG_PATTERN.finditer(html):
        markup = tag.group(0)
        if not STYLESHEET_REL_PATTERN.search(markup):
            continue
        href = HREF_PATTERN.search(markup)
        if href:
            urls.append(href.group("url"))
    return urls


def _extract_imports(html: str) -> list[str]:
    return [m.group("url") or m.group("bare") for m in IMPORT_PATTERN.finditer(html)]


def _extract_font_faces(html: str) -> list[str]:
    urls = []
    for face in FONT_FACE_PATTERN.finditer(html):
        for src in FONT_SRC_PATTERN.finditer(face.group("body")):
            urls.extend(m.group("url") for m in CSS_URL_PATTERN.finditer(src.group("value")))
    return urls


def extract_resource_urls(html: str, kind: ResourceKind) -> list[str]:
    """Return every URL of the given resource kind referenced in ``html``.

    URLs are returned in document order, unfiltered; use
    :func:`is_external_url` to keep only third-party references.
    """
    if kind is ResourceKind.STYLESHEET:
        return _extract_link_stylesheets(html)
    if kind is ResourceKind.IMPORT:
        return _extract_imports(html)
    if kind is ResourceKind.FONT:
        return _extract_font_faces(html)
    return [m.group("url") for m in _SRC_TAG_PATTERNS[kind].finditer(html)]


def is_external_url(url: str) -> bool:
    """Check whether a URL points at another origin.

    External means protocol-relative (``//host/...``) or absolute
    ``http(s)://``. Empty, ``data:`` and ``javascript:`` URLs never are.
    """
    url = url.strip()
    if not url or url.lower().startswith(NON_EXTERNAL_SCHEMES):
        return False
    return url.startswith("//") or bool(ABSOLUTE_HTTP_PATTERN.match(url))


def extract_origin(url: str) -> str | None:
    """Reduce a URL to ``scheme://host[:port]``.

    Protocol-relative URLs are treated as ``https:``. Returns None when the
    URL has no host or an unparseable port.
    """
    url = url.strip()
    if url.startswith("//"):
        url = "https:" + url

    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        logger.warning("Skipping URL with invalid port: %s", url)
        return None

    host = parts.hostname
    if not host:
        logger.warning("Skipping URL without host: %s", url)
        return None
    if ":" in host:
        host = f"[{host}]"

    origin = f"{parts.scheme}://{host}"
    if port is not None:
        origin += f":{port}"
    return origin


def inject_nonces(html: str, nonce: str) -> str:
    """Add ``nonce="<nonce>"`` to every ``<script>``/``<style>`` opening tag.

    Tags that already declare a nonce are left as they are, which makes the
    operation idempotent. Tag content and other attributes are untouched.
    """

    def _add_nonce(match: re.Match[str]) -> str:
        attrs = match.group("attrs")
        if NONCE_ATTR_PATTERN.search(attrs):
            return match.group(0)
        close = match.group("close") or ""
        return f'<{match.group("tag")}{attrs} nonce="{nonce}"{close}>'

    return OPENING_TAG_PATTERN.sub(_add_nonce, html)
