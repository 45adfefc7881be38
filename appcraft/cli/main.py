#!/usr/bin/env python3
"""
AppCraft CLI - Main Entry Point

Usage:
    appcraft serve                              # Run the API server
    appcraft fetch /posts/1                     # Proxy a GET against the base URL
    appcraft fetch https://example.com/api -X POST -d '{"a": 1}'
    appcraft --help
"""

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional

import httpx
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from appcraft import __version__
from appcraft.core.config import settings
from appcraft.modules.proxy.cache import ResponseCache
from appcraft.modules.proxy.service import ProxyService
from appcraft.schemas.proxy import ALLOWED_METHODS, ProxyFailure, ProxyResult


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI"""
    parser = argparse.ArgumentParser(
        prog="appcraft",
        description="AppCraft - HTTP proxy with retries and response caching",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  appcraft serve --port 9000                   Run the API on port 9000
  appcraft fetch /posts/1                      GET relative to PROXY_BASE_URL
  appcraft fetch https://httpbin.org/post -X POST -d '{"name": "test"}'
  appcraft fetch /items -H 'Authorization: Bearer xyz' --retries 0
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    serve_parser = subparsers.add_parser("serve", help="Run the AppCraft API server")
    serve_parser.add_argument("--host", default=settings.SERVER_HOST, help="Bind address")
    serve_parser.add_argument("--port", type=int, default=settings.SERVER_PORT, help="Bind port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    fetch_parser = subparsers.add_parser("fetch", help="Send one request through the proxy")
    fetch_parser.add_argument("url", help="Absolute URL, or path relative to PROXY_BASE_URL")
    fetch_parser.add_argument(
        "-X", "--method",
        default="GET",
        type=str.upper,
        choices=ALLOWED_METHODS,
        help="HTTP method (default: GET)"
    )
    fetch_parser.add_argument(
        "-H", "--header",
        action="append",
        default=[],
        dest="headers",
        help="Request header as 'Name: value' (repeatable)"
    )
    fetch_parser.add_argument("-d", "--data", help="Request body (JSON is sent as an object)")
    fetch_parser.add_argument("--timeout", type=int, help="Per-attempt timeout in ms")
    fetch_parser.add_argument("--retries", type=int, help="Retries after the first attempt")
    fetch_parser.add_argument("--raw", action="store_true", help="Print the raw result JSON only")

    return parser


def parse_headers(values: List[str]) -> Dict[str, str]:
    headers = {}
    for value in values:
        name, sep, header_value = value.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header {value!r}, expected 'Name: value'")
        headers[name.strip()] = header_value.strip()
    return headers


def parse_body(data: Optional[str]) -> Any:
    """JSON text becomes a JSON value; anything else is sent verbatim"""
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return data


def build_proxy_request(args: argparse.Namespace) -> Dict[str, Any]:
    request: Dict[str, Any] = {
        "url": args.url,
        "method": args.method,
        "headers": parse_headers(args.headers),
    }
    body = parse_body(args.data)
    if body is not None:
        request["body"] = body
    if args.timeout is not None:
        request["timeoutMs"] = args.timeout
    if args.retries is not None:
        request["maxRetries"] = args.retries
    return request


def render_result(console: Console, result: ProxyResult) -> None:
    payload = result.to_response()

    if isinstance(result, ProxyFailure):
        lines = [
            f"[bold red]✗ {result.error_kind.value}[/bold red] [dim]({result.code})[/dim]",
            result.message,
        ]
        if result.attempts:
            lines.append(f"[dim]Attempts: {result.attempts}[/dim]")
        if result.allowed_methods:
            lines.append(f"[dim]Allowed methods: {', '.join(result.allowed_methods)}[/dim]")
        console.print(Panel("\n".join(lines), title="Proxy failure", border_style="red"))
        return

    color = "green" if result.success else "yellow"
    status_line = f"[bold {color}]{result.status} {result.status_text or ''}[/bold {color}]"
    if result.cached:
        status_line = f"[bold {color}]cached[/bold {color}]"
    console.print(Panel(
        f"{status_line}\n[dim]{result.method or ''} {result.url or ''}  "
        f"attempts: {result.attempts}[/dim]",
        title="Proxy result",
        border_style=color,
    ))

    data = payload.get("data")
    if isinstance(data, (dict, list)):
        console.print(Syntax(json.dumps(data, indent=2, ensure_ascii=False), "json", word_wrap=True))
    elif data is not None:
        console.print(str(data))


async def run_fetch(
    args: argparse.Namespace,
    console: Console,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> int:
    """Run one proxied request. Exit code 0 only for a 2xx result."""
    request = build_proxy_request(args)

    async with ResponseCache() as cache:
        proxy_service = ProxyService(cache, transport=transport)
        try:
            result = await proxy_service.proxy(request)
        finally:
            await proxy_service.aclose()

    if args.raw:
        console.print_json(data=result.to_response())
    else:
        render_result(console, result)

    return 0 if result.success else 1


def run_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "appcraft.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)
    console = Console()

    if args.command == "serve":
        return run_serve(args)

    if args.command == "fetch":
        try:
            return asyncio.run(run_fetch(args, console))
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            return 2
        except KeyboardInterrupt:
            console.print("\n[dim]Cancelled[/dim]")
            return 130

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
