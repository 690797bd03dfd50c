#!/usr/bin/env python3
"""
Domain Registry Rebuild Script

Recomputes domain_members from users.work_domain. Use it after manual
database edits or a restore; the API scheduler runs the same repair on an
interval.

Usage:
    # Seed the catalog and rebuild memberships
    python scripts/rebuild_domain_registry.py

    # Only report drift, change nothing
    python scripts/rebuild_domain_registry.py --dry-run
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from findx.database import async_session, init_db
from findx.models import DomainMember, User
from findx.services.domains import rebuild_registry, seed_domains

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def report_drift() -> dict:
    async with async_session() as session:
        result = await session.execute(
            select(User.email, User.work_domain).where(User.work_domain.is_not(None))
        )
        expected = {(row[1], row[0]) for row in result.all()}

        result = await session.execute(select(DomainMember.domain_name, DomainMember.email))
        actual = {(row[0], row[1]) for row in result.all()}

    for name, email in sorted(expected - actual):
        logger.info(f"Missing: {email} in {name}")
    for name, email in sorted(actual - expected):
        logger.info(f"Stale: {email} in {name}")

    return {"missing": len(expected - actual), "stale": len(actual - expected)}


async def main() -> None:
    parser = argparse.ArgumentParser(description="Rebuild the domain membership registry")
    parser.add_argument("--dry-run", action="store_true", help="Report drift without repairing it")

    args = parser.parse_args()

    await init_db()

    if args.dry_run:
        stats = await report_drift()
        logger.info(f"Drift: {stats}")
        return

    async with async_session() as session:
        created = await seed_domains(session)
        logger.info(f"Catalog rows created: {created}")

        stats = await rebuild_registry(session)
        logger.info(f"Memberships added: {stats['added']}, removed: {stats['removed']}")


if __name__ == "__main__":
    asyncio.run(main())
