"""Command-line JSON-RPC caller."""
import argparse
import json
import logging
import sys
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel

from .client import JsonRPCClient
from .jsonrpc import codec
from .utils.errors import RPCClientError, RPCTransportError

logger = logging.getLogger(__name__)

console = Console()


def _parse_headers(values: List[str]) -> Dict[str, str]:
    headers = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            raise argparse.ArgumentTypeError(f"Header must look like 'Name: value', got {value!r}")
        headers[name.strip()] = content.strip()
    return headers


def _parse_id(value: Optional[str]):
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="json-rpc-call",
        description="Call a method on a JSON-RPC 2.0 endpoint",
    )
    parser.add_argument("url", help="Endpoint URL, e.g. http://localhost:3000/api")
    parser.add_argument("method", help="Method name")
    parser.add_argument("params", nargs="?", default="{}", help="Params as JSON (default: {})")
    parser.add_argument("--id", dest="request_id", help="Request id (default: null)")
    parser.add_argument(
        "--header", "-H", action="append", default=[],
        help="Extra header 'Name: value'; may be repeated",
    )
    parser.add_argument("--timeout", type=float, default=30, help="Timeout in seconds")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        params = json.loads(args.params)
        headers = _parse_headers(args.header)
    except (json.JSONDecodeError, argparse.ArgumentTypeError) as e:
        parser.error(str(e))

    with JsonRPCClient(args.url, default_headers=headers, timeout=args.timeout) as client:
        try:
            result = client.call(args.method, params, id=_parse_id(args.request_id))
        except RPCClientError as e:
            console.print(Panel(
                f"[bold]{e.message}[/bold]\ncode: {e.code}",
                title="RPC Error",
                border_style="red",
            ))
            return 1
        except RPCTransportError as e:
            console.print(f"[red]{e}[/red]")
            return 2

    console.print_json(data=codec.encode(result))
    return 0


if __name__ == "__main__":
    sys.exit(main())
