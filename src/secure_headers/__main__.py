"""Entry point for running secure-headers as a module: python -m secure_headers.

Commands:
    serve               Run the demo app (SECURE_HEADERS_HOST / _PORT).
    headers [--level]   Print every header enabled with profile defaults.
    scan FILE           Print the CSP detected from an HTML file.
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import SecureHeadersConfig
from .errors import InvalidConfiguration
from .headers import SecurityHeaderSet
from .middleware.security import merge_detected_policies


def _serve(config: SecureHeadersConfig) -> None:
    import anyio
    import uvicorn

    from .demo import create_app

    app = create_app(config)

    async def _run() -> None:
        uvi_config = uvicorn.Config(
            app,
            host=config.host,
            port=config.port,
            log_level="info",
        )
        uvi_server = uvicorn.Server(uvi_config)
        await uvi_server.serve()

    anyio.run(_run)


def _print_headers(level: str) -> None:
    header_set = SecurityHeaderSet(level)
    header_set.enable_all_security_headers()
    for name, value in header_set.get_headers().items():
        print(f"{name}: {value}")


def _scan(path: str, level: str, inject: bool) -> None:
    html = Path(path).read_text(encoding="utf-8")
    header_set = SecurityHeaderSet(level)
    builder = header_set.csp().detect_external_resources_from_html(html)
    header_set.enable_csp(merge_detected_policies(header_set, builder.get_directives(), style_nonce=inject))

    print(f"Content-Security-Policy: {header_set.get_headers()['Content-Security-Policy']}")
    if inject:
        print()
        print(builder.inject_nonces_to_html(html))


def _build_parser(default_level: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="secure_headers", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("serve", help="run the demo server")

    headers = sub.add_parser("headers", help="print default security headers")
    headers.add_argument("--level", default=default_level)

    scan = sub.add_parser("scan", help="detect CSP sources in an HTML file")
    scan.add_argument("file")
    scan.add_argument("--level", default=default_level)
    scan.add_argument("--inject", action="store_true", help="also print nonce-injected markup")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the secure-headers command line."""
    try:
        config = SecureHeadersConfig.from_env()
    except InvalidConfiguration as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    args = _build_parser(config.security_level.value).parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.command == "headers":
            _print_headers(args.level)
        elif args.command == "scan":
            _scan(args.file, args.level, args.inject)
        else:
            _serve(config)
    except InvalidConfiguration as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
