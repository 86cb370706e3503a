"""Command-line entry point: ``darah-mcp-server`` / ``python -m darah_server``."""

import argparse
import asyncio
import os
import sys
from typing import Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="DARAH storefront: session carts checked against live stock, with WhatsApp checkout"
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="stdio: MCP cart tools for a single assistant client; "
        "http: storefront REST API with cookie-scoped carts",
    )
    parser.add_argument(
        "--catalog",
        metavar="FILE",
        help="JSON catalog to serve (overrides DARAH_CATALOG_FILE)",
    )
    parser.add_argument(
        "--whatsapp-number",
        metavar="NUMBER",
        help="Store number checkout links open a chat with (overrides DARAH_WHATSAPP_NUMBER)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Address the REST API listens on (http mode, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port the REST API listens on (http mode, default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the REST API when source files change (http mode)",
    )
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """Export command-line overrides where Settings.from_env() reads them."""
    if args.catalog:
        os.environ["DARAH_CATALOG_FILE"] = args.catalog
    if args.whatsapp_number:
        os.environ["DARAH_WHATSAPP_NUMBER"] = args.whatsapp_number


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    if args.mode == "http":
        from .http_server import run_http_server

        print(f"Starting DARAH storefront API on {args.host}:{args.port}", file=sys.stderr)
        run_http_server(host=args.host, port=args.port, reload=args.reload)
        return

    from .server import main as server_main

    try:
        asyncio.run(server_main())
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
