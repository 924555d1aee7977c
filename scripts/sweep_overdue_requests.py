#!/usr/bin/env python3
"""Mark pending locations overdue on requests past their due date.

Meant to run on a schedule (cron, Cloud Scheduler). Uses an admin session
so every tenant's requests are swept.
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add src to path
sys.path.append(str(Path(__file__).parent.parent / "src"))

from dateutil.parser import isoparse

from core.config import get_settings
from core.database import close_db, get_admin_db
from services.request_service import RequestService

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


async def sweep(now: datetime = None) -> int:
    """Run one sweep and return the number of requests updated."""
    sessions = get_admin_db()
    try:
        db = await anext(sessions)
        return await RequestService(db).sweep_overdue(now)
    finally:
        await sessions.aclose()
        await close_db()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--now",
        type=isoparse,
        default=None,
        help="Treat this ISO-8601 timestamp as the current time (UTC if no offset)",
    )
    args = parser.parse_args(argv)

    logger.info(f"Sweeping overdue requests ({settings.ENVIRONMENT})")
    try:
        updated = asyncio.run(sweep(args.now))
    except Exception as e:
        logger.error(f"Overdue sweep failed: {e}")
        return 1

    logger.info(f"Overdue sweep complete: {updated} requests updated")
    return 0


if __name__ == "__main__":
    sys.exit(main())
