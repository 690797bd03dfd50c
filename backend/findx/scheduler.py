"""
Background maintenance jobs.

    reconcile_domain_registry  rebuild domain_members from users.work_domain
    purge_expired_reset_codes  clear password reset codes past their expiry

Both run on an AsyncIOScheduler started from the FastAPI lifespan.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from findx.config import get_settings
from findx.database import async_session
from findx.services import accounts, domains

logger = logging.getLogger(__name__)

settings = get_settings()
scheduler = AsyncIOScheduler()


async def reconcile_domain_registry() -> dict:
    async with async_session() as db:
        stats = await domains.rebuild_registry(db)
    logger.info(f"Domain registry reconciled: {stats}")
    return stats


async def purge_expired_reset_codes() -> int:
    async with async_session() as db:
        purged = await accounts.purge_expired_reset_codes(db)
    if purged:
        logger.info(f"Cleared {purged} expired password reset codes")
    return purged


def start_scheduler():
    """Start the background scheduler"""
    scheduler.add_job(
        reconcile_domain_registry,
        trigger=IntervalTrigger(hours=settings.registry_reconcile_interval_hours),
        id="reconcile_domain_registry",
        replace_existing=True,
    )
    scheduler.add_job(
        purge_expired_reset_codes,
        trigger=IntervalTrigger(minutes=settings.reset_code_ttl_minutes),
        id="purge_expired_reset_codes",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started: reconciling domains every {settings.registry_reconcile_interval_hours} hours"
    )


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
