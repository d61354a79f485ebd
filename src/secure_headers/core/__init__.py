"""Core header-building modules: nonces, CSP directives, HTML scanning."""

from .builder import CSPBuilder
from .directives import CSPDirectiveSet, build_csp_string, deduplicate, default_csp_policies
from .html import (
    ResourceKind,
    extract_origin,
    extract_resource_urls,
    inject_nonces,
    is_external_url,
)
from .nonce import NonceCell, NonceSource
from .permissions import (
    default_permissions_policies,
    format_client_hints,
    format_critical_ch,
    format_permissions_policy,
)

__all__ = [
    "CSPBuilder",
    "CSPDirectiveSet",
    "NonceCell",
    "NonceSource",
    "ResourceKind",
    "build_csp_string",
    "deduplicate",
    "default_csp_policies",
    "default_permissions_policies",
    "extract_origin",
    "extract_resource_urls",
    "format_client_hints",
    "format_critical_ch",
    "format_permissions_policy",
    "inject_nonces",
    "is_external_url",
]
