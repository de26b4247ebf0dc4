"""
NetQuery command line

Usage:
    netquery serve [--host 0.0.0.0] [--port 8080]
    netquery query "machine learning engineers" --company "Acme Corp" [--json]
"""

import sys
import json
import asyncio
import argparse
import logging

from dotenv import load_dotenv


def _run_query(args) -> int:
    from .common.config import load_config
    from .common.errors import NetQueryError
    from .retriever.orchestrator import Query
    from .server.app import build_orchestrator

    config = load_config()
    orchestrator = build_orchestrator(config)

    async def _handle():
        try:
            return await orchestrator.handle(
                Query(text=args.text, company_name=args.company, requester_id=args.requester)
            )
        finally:
            await orchestrator.drain()

    try:
        result = asyncio.run(_handle())
    except NetQueryError as e:
        print(f"[NetQuery] ERROR ({e.kind}): {e.message}", file=sys.stderr)
        if e.details:
            print(f"[NetQuery] {e.details}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.summary)
        for rec in result.recommendations:
            print(f"[{rec.priority.value}] {rec.message}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="netquery", description="Query a company's professional network")
    parser.add_argument("--log-level", default=None, help="Logging level (default from config)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP server")
    serve.add_argument("--host", type=str, default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Port")

    query = sub.add_parser("query", help="Run one query and print the answer")
    query.add_argument("text", help="Natural-language question")
    query.add_argument("--company", required=True, help="Company whose network to search")
    query.add_argument("--requester", default=None, help="Requester id recorded in the audit log")
    query.add_argument("--json", action="store_true", help="Print the full result as JSON")

    args = parser.parse_args(argv)
    load_dotenv()

    if args.command == "serve":
        from .server.app import run_server
        run_server(host=args.host, port=args.port, log_level=args.log_level)
        return 0

    from .common.config import load_config
    logging.basicConfig(
        level=(args.log_level or load_config().server.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return _run_query(args)


if __name__ == "__main__":
    sys.exit(main())
