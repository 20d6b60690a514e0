import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from solder_sync import __version__
from solder_sync.core.dependencies import get_settings, get_state_store
from solder_sync.domain.errors import SyncError
from solder_sync.services.reconciler import sync_modpack

logger = logging.getLogger("solder_sync")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="solder-sync",
        description="Install or update a Technic modpack build into the working directory.",
    )
    parser.add_argument("modpack", help="Modpack slug, e.g. 'tekkitmain'.")
    parser.add_argument("build", help="Build id, or 'latest' / 'recommended'.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level)

    try:
        report = asyncio.run(sync_modpack(args.modpack, args.build, settings, store=get_state_store()))
    except SyncError as e:
        logger.error(str(e))
        return 1

    if not report.up_to_date:
        logger.info(
            f"Modpack [{report.package_id}] now at build [{report.build_id}] "
            f"({len(report.installed)} updated, {len(report.plan.obsolete)} removed, "
            f"{len(report.plan.unchanged)} unchanged)"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
