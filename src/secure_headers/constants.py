"""Shared constants for secure-headers defaults and header vocabulary.

This module is the single source of truth for header names, keyword tokens
and the default values consumed by the policy engine, the CSP builder and
configuration loading.
"""

from __future__ import annotations

# Header names (exact, case-sensitive canonical form)
HSTS_HEADER = "Strict-Transport-Security"
CSP_HEADER = "Content-Security-Policy"
X_FRAME_OPTIONS_HEADER = "X-Frame-Options"
X_CONTENT_TYPE_OPTIONS_HEADER = "X-Content-Type-Options"
X_XSS_PROTECTION_HEADER = "X-XSS-Protection"
REFERRER_POLICY_HEADER = "Referrer-Policy"
PERMISSIONS_POLICY_HEADER = "Permissions-Policy"
CRITICAL_CH_HEADER = "Critical-CH"

# CSP keyword tokens
SELF = "'self'"
NONE = "'none'"
UNSAFE_INLINE = "'unsafe-inline'"
UNSAFE_EVAL = "'unsafe-eval'"
STRICT_DYNAMIC = "'strict-dynamic'"
DATA_SCHEME = "data:"
HTTPS_SCHEME = "https:"

# Directives with special handling
DEFAULT_SRC = "default-src"
SCRIPT_SRC = "script-src"
STYLE_SRC = "style-src"
IMG_SRC = "img-src"
FONT_SRC = "font-src"
CONNECT_SRC = "connect-src"
FRAME_SRC = "frame-src"
OBJECT_SRC = "object-src"
FRAME_ANCESTORS = "frame-ancestors"
BASE_URI = "base-uri"
FORM_ACTION = "form-action"
UPGRADE_INSECURE_REQUESTS = "upgrade-insecure-requests"

# Directives the CSP builder starts from
BUILDER_SEED_DIRECTIVES = (DEFAULT_SRC, BASE_URI, FORM_ACTION)

# Profile-independent CSP defaults, in emission order
DEFAULT_CSP_DIRECTIVES: dict[str, tuple[str, ...]] = {
    DEFAULT_SRC: (SELF,),
    SCRIPT_SRC: (SELF,),
    STYLE_SRC: (SELF,),
    IMG_SRC: (SELF, DATA_SCHEME, HTTPS_SCHEME),
    FONT_SRC: (SELF, HTTPS_SCHEME),
    FORM_ACTION: (SELF,),
    FRAME_ANCESTORS: (NONE,),
    BASE_URI: (SELF,),
    CONNECT_SRC: (SELF,),
}

# img-src tokens that do not count as custom origins
IMG_SRC_BUILTIN_TOKENS = frozenset({SELF, DATA_SCHEME, HTTPS_SCHEME})

# Nonce generation
NONCE_BYTES = 16

# Inline content hashing
HASH_ALGORITHMS = ("sha256", "sha384", "sha512")

# HSTS defaults
DEFAULT_HSTS_MAX_AGE = 31_536_000  # one year

# X-Frame-Options / X-Content-Type-Options / X-XSS-Protection
X_FRAME_OPTIONS_CHOICES = ("DENY", "SAMEORIGIN")
DEFAULT_X_FRAME_OPTIONS = "DENY"
X_CONTENT_TYPE_OPTIONS_VALUE = "nosniff"
X_XSS_PROTECTION_VALUE = "1; mode=block"

# Referrer-Policy
REFERRER_POLICIES = (
    "no-referrer",
    "no-referrer-when-downgrade",
    "origin",
    "origin-when-cross-origin",
    "same-origin",
    "strict-origin",
    "strict-origin-when-cross-origin",
    "unsafe-url",
)
DEFAULT_REFERRER_POLICY = "strict-origin-when-cross-origin"

# Permissions-Policy: features denied entirely under the strict profile
STRICT_PERMISSIONS_FEATURES = (
    "accelerometer",
    "ambient-light-sensor",
    "autoplay",
    "battery",
    "camera",
    "display-capture",
    "document-domain",
    "encrypted-media",
    "execution-while-not-rendered",
    "execution-while-out-of-viewport",
    "fullscreen",
    "geolocation",
    "gyroscope",
    "keyboard-map",
    "magnetometer",
    "microphone",
    "midi",
    "navigation-override",
    "payment",
    "picture-in-picture",
    "publickey-credentials-get",
    "screen-wake-lock",
    "sync-xhr",
    "usb",
    "web-share",
    "xr-spatial-tracking",
)

# Permissions-Policy: features restricted to same-origin under the basic profile
BASIC_PERMISSIONS_FEATURES = ("camera", "microphone", "geolocation")

# Critical-CH
DEFAULT_CRITICAL_CH = ("Sec-CH-UA", "Sec-CH-UA-Mobile", "Sec-CH-UA-Platform")

# Demo server defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_SECURITY_LEVEL = "strict"
