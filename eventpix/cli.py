"""
Command line entry point: run the API server or provision storage.
"""

from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from eventpix.config import get_settings
from eventpix.dependencies import get_storage

logger = logging.getLogger(__name__)


def provision() -> int:
    storage = get_storage()
    if storage.ensure_schema():
        logger.info(
            "Storage ready: tables %s, %s; container %s",
            storage.events_table,
            storage.photos_table,
            storage.photos_container,
        )
        return 0
    logger.error("Storage provisioning failed")
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Event photo sharing service")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Bind port")
    serve.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes (development only)",
    )

    subparsers.add_parser(
        "provision", help="Create the tables and photo container, then exit"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    if args.command == "provision":
        return provision()

    uvicorn.run("eventpix.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
