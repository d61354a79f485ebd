"""Unit tests for CSP directive sets and serialization."""

import pytest

from secure_headers.core.directives import (
    CSPDirectiveSet,
    build_csp_string,
    deduplicate,
    default_csp_policies,
)
from secure_headers.errors import InvalidConfiguration
from secure_headers.profiles import SecurityProfile


class TestDeduplicate:
    """Tests for order-preserving dedup."""

    @pytest.mark.unit
    def test_keeps_first_occurrence(self):
        assert deduplicate(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    @pytest.mark.unit
    def test_empty(self):
        assert deduplicate([]) == []


class TestCSPDirectiveSet:
    """Tests for CSPDirectiveSet."""

    @pytest.mark.unit
    def test_preserves_insertion_order(self):
        directives = CSPDirectiveSet({"style-src": ["'self'"], "default-src": ["'self'"]})
        directives["img-src"] = ["'self'"]
        assert list(directives) == ["style-src", "default-src", "img-src"]

    @pytest.mark.unit
    def test_assignment_deduplicates(self):
        directives = CSPDirectiveSet()
        directives["script-src"] = ["'self'", "https://a.com", "'self'"]
        assert directives["script-src"] == ["'self'", "https://a.com"]

    @pytest.mark.unit
    def test_merge_unions_in_first_seen_order(self):
        directives = CSPDirectiveSet({"script-src": ["'self'", "https://a.com"]})
        directives.merge("script-src", ["https://b.com", "'self'", "https://a.com", "https://c.com"])
        assert directives["script-src"] == ["'self'", "https://a.com", "https://b.com", "https://c.com"]

    @pytest.mark.unit
    def test_merge_creates_missing_directive(self):
        directives = CSPDirectiveSet()
        directives.merge("font-src", ["'self'"])
        assert directives["font-src"] == ["'self'"]

    @pytest.mark.unit
    def test_append_is_idempotent(self):
        directives = CSPDirectiveSet({"script-src": ["'self'"]})
        directives.append("script-src", "'unsafe-eval'")
        directives.append("script-src", "'unsafe-eval'")
        assert directives["script-src"] == ["'self'", "'unsafe-eval'"]

    @pytest.mark.unit
    def test_replace_overwrites(self):
        directives = CSPDirectiveSet({"frame-ancestors": ["'self'", "https://a.com"]})
        directives.replace("frame-ancestors", ["'none'"])
        assert directives["frame-ancestors"] == ["'none'"]

    @pytest.mark.unit
    def test_copy_is_independent(self):
        original = CSPDirectiveSet({"script-src": ["'self'"]})
        snapshot = original.copy()
        snapshot.append("script-src", "https://a.com")
        assert original["script-src"] == ["'self'"]

    @pytest.mark.unit
    def test_item_lists_cannot_bypass_dedup(self):
        directives = CSPDirectiveSet({"script-src": ["'self'"]})
        directives["script-src"].append("'self'")
        assert directives["script-src"] == ["'self'"]

    @pytest.mark.unit
    def test_to_dict(self):
        directives = CSPDirectiveSet({"default-src": ("'self'",)})
        assert directives.to_dict() == {"default-src": ["'self'"]}

    @pytest.mark.unit
    def test_equality_with_plain_mapping(self):
        assert CSPDirectiveSet({"default-src": ["'self'"]}) == {"default-src": ["'self'"]}


class TestDefaultCSPPolicies:
    """Tests for profile default directives."""

    @pytest.mark.unit
    def test_strict_adds_upgrade_insecure_requests(self):
        policies = default_csp_policies(SecurityProfile.STRICT)
        assert policies["upgrade-insecure-requests"] == []
        assert policies["style-src"] == ["'self'"]

    @pytest.mark.unit
    def test_basic_allows_inline_styles(self):
        policies = default_csp_policies("basic")
        assert policies["style-src"] == ["'self'", "'unsafe-inline'"]
        assert "upgrade-insecure-requests" not in policies

    @pytest.mark.unit
    def test_shared_defaults(self):
        policies = default_csp_policies("strict")
        assert list(policies)[:9] == [
            "default-src",
            "script-src",
            "style-src",
            "img-src",
            "font-src",
            "form-action",
            "frame-ancestors",
            "base-uri",
            "connect-src",
        ]
        assert policies["img-src"] == ["'self'", "data:", "https:"]
        assert policies["frame-ancestors"] == ["'none'"]

    @pytest.mark.unit
    def test_invalid_profile(self):
        with pytest.raises(InvalidConfiguration, match="Invalid security level: paranoid"):
            default_csp_policies("paranoid")


class TestBuildCSPString:
    """Tests for Content-Security-Policy serialization."""

    @pytest.mark.unit
    def test_joins_directives_in_order(self):
        value = build_csp_string({"default-src": ["'self'"], "img-src": ["'self'", "data:"]})
        assert value == "default-src 'self'; img-src 'self' data:"

    @pytest.mark.unit
    def test_omits_empty_directives(self):
        value = build_csp_string(
            {
                "default-src": ["'self'"],
                "script-src": [],
                "style-src": ["'self'"],
                "empty-directive": [],
            }
        )
        assert "default-src 'self'" in value
        assert "style-src 'self'" in value
        assert "script-src" not in value
        assert "empty-directive" not in value

    @pytest.mark.unit
    def test_upgrade_insecure_requests_rendered_bare(self):
        value = build_csp_string({"default-src": ["'self'"], "upgrade-insecure-requests": []})
        assert value == "default-src 'self'; upgrade-insecure-requests"

    @pytest.mark.unit
    def test_empty_policy(self):
        assert build_csp_string({}) == ""

    @pytest.mark.unit
    def test_accepts_directive_set(self):
        directives = CSPDirectiveSet({"frame-ancestors": ["'none'"]})
        assert build_csp_string(directives) == "frame-ancestors 'none'"
