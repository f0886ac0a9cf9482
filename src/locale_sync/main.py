"""``locale-sync`` command: serve the HTTP API or list the local cache."""

from __future__ import annotations

import argparse
import logging

import uvicorn

from locale_sync.infrastructure.config import Settings, get_settings
from locale_sync.services.catalog import RepositoryCatalog

logger = logging.getLogger("locale_sync")


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locale-sync",
        description="Keep a local cache of Android strings.xml files from GitHub.",
    )
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument(
        "--list",
        action="store_true",
        help="print the URL of every cached repository and exit",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    args = _build_parser(settings).parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    if args.list:
        for url in RepositoryCatalog(settings.cache_root).list_repository_urls():
            print(url)
        return 0

    settings.cache_root.mkdir(parents=True, exist_ok=True)
    logger.info("Serving cache %s on %s:%d", settings.cache_root, args.host, args.port)
    uvicorn.run(
        "locale_sync.interface.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
