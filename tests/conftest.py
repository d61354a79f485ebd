"""Shared test fixtures for secure-headers tests."""

import os

import pytest

from secure_headers.core.nonce import NonceSource
from secure_headers.headers import SecurityHeaderSet

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")

FIXED_NONCE = "AAAAAAAAAAAAAAAAAAAAAA=="


class CountingNonceSource(NonceSource):
    """Deterministic nonce source that records how often it was asked."""

    def __init__(self, values=None):
        super().__init__()
        self.values = list(values or [FIXED_NONCE])
        self.calls = 0

    def generate(self) -> str:
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


@pytest.fixture(autouse=True)
def _clear_secure_headers_env(monkeypatch):
    """Keep SECURE_HEADERS_* variables from leaking into tests."""
    for key in list(os.environ.keys()):
        if key.startswith("SECURE_HEADERS_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def fixtures_dir():
    """Path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_html_path():
    """Path to a page referencing external scripts, styles, fonts and frames."""
    return os.path.join(FIXTURES_DIR, "sample.html")


@pytest.fixture
def sample_html(sample_html_path):
    with open(sample_html_path, encoding="utf-8") as f:
        return f.read()


@pytest.fixture
def nonce_source():
    return CountingNonceSource(["FIRSTFIRSTFIRSTFIRST1==", "SECONDSECONDSECONDSEC=="])


@pytest.fixture
def strict_headers(nonce_source):
    """Strict-profile header set with a deterministic nonce."""
    return SecurityHeaderSet("strict", nonce_source=nonce_source)


@pytest.fixture
def basic_headers(nonce_source):
    """Basic-profile header set with a deterministic nonce."""
    return SecurityHeaderSet("basic", nonce_source=nonce_source)
