"""
Command line access to the Name.com API.

    name-api get domains get example.com --query a=1
    name-api post domains --data '{"domainName": "example.com"}'

Options that aren't given are read from NAME_API_* environment variables.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import httpx

from NameAPI.clients import (
    ApiError,
    ConfigurationError,
    ProtocolError,
    ResourceClient,
    TransportError,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_API_ERROR = 1
EXIT_USAGE_ERROR = 2


def parse_query(pairs: List[str]) -> Dict[str, str]:
    """Turn KEY=VALUE arguments into query parameters"""
    query = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected KEY=VALUE, got {pair!r}")
        query[key] = value
    return query


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="name-api", description="Issue a request against the Name.com API")
    parser.add_argument("verb", help="HTTP method, e.g. get, post, put, delete")
    parser.add_argument("segments", nargs="*", help="Resource path segments below /api")
    parser.add_argument("--query", "-q", action="append", default=[], metavar="KEY=VALUE",
                        help="Query string parameter, may be repeated")
    parser.add_argument("--data", "-d", help="JSON request body")
    parser.add_argument("--header", "-H", action="append", default=[], metavar="NAME=VALUE",
                        help="Extra request header, may be repeated")
    parser.add_argument("--user", help="API user (NAME_API_USER)")
    parser.add_argument("--token", help="API token (NAME_API_TOKEN)")
    parser.add_argument("--identifier", help="Application name sent as User-Agent")
    parser.add_argument("--url", help="API host, default https://www.name.com")
    parser.add_argument("--retries", type=int, help="Additional attempts for failed requests")
    parser.add_argument("--timeout", type=int, help="Request timeout in seconds")
    parser.add_argument("--fatal", action="store_true", default=None,
                        help="Exit with an error on 4xx/5xx responses")
    parser.add_argument("--debug", action="store_true", default=None,
                        help="Log requests and responses")
    return parser


async def run_request(verb: str, segments: List[str], *,
                      query: Dict[str, str],
                      data: Any,
                      headers: Dict[str, str],
                      options: Dict[str, Any],
                      transport: Optional[httpx.AsyncClient] = None) -> int:
    client = ResourceClient.from_env(transport=transport, **options)
    async with client:
        result, transaction = await client.resource(*segments).action(
            verb, query=query, data=data, headers=headers
        )

    print(json.dumps(result, indent=2) if not isinstance(result, str) else result)
    if not transaction.success:
        print(f"HTTP {transaction.status_code}", file=sys.stderr)
        return EXIT_API_ERROR
    return EXIT_OK


def main(argv: Optional[List[str]] = None, transport: Optional[httpx.AsyncClient] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    try:
        query = parse_query(args.query)
        headers = parse_query(args.header)
    except ValueError as e:
        parser.error(str(e))

    data = None
    if args.data is not None:
        try:
            data = json.loads(args.data)
        except json.JSONDecodeError as e:
            parser.error(f"--data is not valid JSON: {e}")

    options = {
        name: getattr(args, name)
        for name in ("user", "token", "identifier", "url", "retries", "timeout", "fatal", "debug")
        if getattr(args, name) is not None
    }
    logger.debug(f"Options from command line: {sorted(options)}")

    try:
        return asyncio.run(run_request(
            args.verb, args.segments,
            query=query, data=data, headers=headers,
            options=options, transport=transport,
        ))
    except (ConfigurationError, ProtocolError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE_ERROR
    except ApiError as e:
        print(f"error: {e}", file=sys.stderr)
        if e.response_data is not None:
            print(json.dumps(e.response_data, indent=2), file=sys.stderr)
        return EXIT_API_ERROR
    except TransportError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_API_ERROR


if __name__ == "__main__":
    sys.exit(main())
