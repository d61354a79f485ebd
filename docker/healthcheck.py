#!/usr/bin/env python3
"""Docker health check script for the secure-headers demo server.

Pre-flight:
  Verifies secure_headers and its config are importable/functional.

Runtime (``--http``):
  Hits the local demo endpoint and checks the security headers are present.

Exit 0 = healthy, Exit 1 = unhealthy.
"""

import os
import sys

REQUIRED_HEADERS = ("Content-Security-Policy", "Strict-Transport-Security", "X-Frame-Options")


def check_health(http: bool = False) -> bool:
    if http:
        return _check_http()
    return _check_imports()


def _check_http() -> bool:
    """Verify the demo server responds with security headers."""
    import urllib.request

    port = os.environ.get("SECURE_HEADERS_PORT", "8000")
    url = f"http://127.0.0.1:{port}/headers"
    try:
        req = urllib.request.Request(url, method="GET")  # noqa: S310
        with urllib.request.urlopen(req, timeout=3) as resp:  # noqa: S310
            missing = [name for name in REQUIRED_HEADERS if name not in resp.headers]
            if missing:
                print(f"Missing security headers: {', '.join(missing)}", file=sys.stderr)
                return False
            return resp.status == 200
    except Exception as exc:
        print(f"HTTP health check failed: {exc}", file=sys.stderr)
        return False


def _check_imports() -> bool:
    """Verify secure_headers is importable and builds headers."""
    try:
        from secure_headers import __version__

        assert __version__, "Version string is empty"

        from secure_headers.config import SecureHeadersConfig
        from secure_headers.headers import SecurityHeaderSet

        config = SecureHeadersConfig.from_env()
        headers = SecurityHeaderSet.from_config(config).get_headers()
        assert "Content-Security-Policy" in headers, "CSP header was not built"

        return True
    except Exception:
        import traceback

        traceback.print_exc(file=sys.stderr)
        return False


if __name__ == "__main__":
    sys.exit(0 if check_health(http="--http" in sys.argv[1:]) else 1)
