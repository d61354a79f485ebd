"""Demo Starlette application showing the generated security headers."""

from __future__ import annotations

import html

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route

from .config import SecureHeadersConfig
from .headers import SecurityHeaderSet
from .middleware.security import SecurityHeadersMiddleware

_PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>secure-headers demo</title>
    <style>
        body {{ font-family: system-ui, sans-serif; max-width: 800px; margin: 0 auto; padding: 2rem; }}
        code {{ word-break: break-all; }}
    </style>
</head>
<body>
    <h1>Security level: {level}</h1>
    <p>CSP nonce for this response: <code id="nonce">{nonce}</code></p>
    <table>
{rows}
    </table>
    <script nonce="{nonce}">
        document.getElementById("nonce").dataset.checked = "true";
    </script>
    <script>
        console.log("nonce injected by middleware");
    </script>
</body>
</html>
"""


def _header_rows(headers: dict[str, str]) -> str:
    return "\n".join(
        f"        <tr><th>{html.escape(name)}</th><td><code>{html.escape(value)}</code></td></tr>"
        for name, value in headers.items()
    )


def create_app(config: SecureHeadersConfig | None = None) -> Starlette:
    """Create the demo app wrapped in :class:`SecurityHeadersMiddleware`."""
    if config is None:
        config = SecureHeadersConfig.from_env()

    async def homepage(request: Request) -> HTMLResponse:
        header_set: SecurityHeaderSet = request.state.security_headers
        page = _PAGE.format(
            level=header_set.security_level.value,
            nonce=request.state.csp_nonce,
            rows=_header_rows(header_set.get_headers()),
        )
        return HTMLResponse(page)

    async def header_map(request: Request) -> JSONResponse:
        return JSONResponse(request.state.security_headers.get_headers())

    return Starlette(
        routes=[Route("/", homepage), Route("/headers", header_map)],
        middleware=[Middleware(SecurityHeadersMiddleware, config=config)],
    )
