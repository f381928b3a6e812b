#!/usr/bin/env python3
"""
manage.py - project management entry point

Usage:
    python manage.py                    # start the web server (default)
    python manage.py web                # start the web server
    python manage.py web --port 9000    # start on a given port
    python manage.py init-db            # create the database schema and exit
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


def run_web_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    debug: Optional[bool] = None,
) -> None:
    """Start the web server"""
    from taskboard.web.config import config

    host = host or config.host
    port = port or config.port
    debug = config.debug if debug is None else debug

    print("=" * 50)
    print("  Taskboard API Server")
    print("=" * 50)
    print(f"  URL: http://{host}:{port}{config.api_prefix}")
    print(f"  Database: {config.database_path}")
    print(f"  Debug: {'ON' if debug else 'OFF'}")
    print("\nPress Ctrl+C to stop.\n")

    import uvicorn

    try:
        uvicorn.run("taskboard.web.main:app", host=host, port=port, reload=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Web server stopped")


async def _init_db() -> None:
    from taskboard.db.connection import DatabaseManager
    from taskboard.web.config import config

    db = DatabaseManager(config.database_path)
    await db.init()
    await db.close()
    print(f"[OK] Database schema ready: {config.database_path}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Taskboard - management entry point",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python manage.py                  # start the web server
  python manage.py web --port 9000  # start on port 9000
  python manage.py init-db          # create the schema
        """,
    )
    parser.add_argument("--log-level", default="INFO", help="logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="available commands")

    parser_web = subparsers.add_parser("web", help="start the web server")
    parser_web.add_argument("--host", default=None, help="bind address")
    parser_web.add_argument("--port", type=int, default=None, help="bind port")
    parser_web.add_argument("--debug", action="store_true", default=None, help="auto-reload")

    subparsers.add_parser("init-db", help="create the database schema")

    args = parser.parse_args()
    setup_logging(args.log_level)

    if args.command == "init-db":
        asyncio.run(_init_db())
        return 0

    if args.command == "web":
        run_web_server(host=args.host, port=args.port, debug=args.debug)
    else:
        run_web_server()
    return 0


if __name__ == "__main__":
    sys.exit(main())
