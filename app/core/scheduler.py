"""Background job scheduler for closing out past dining requests."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session

from app.core.config import settings
from app.core.database import engine
from app.dining.lifecycle import close_past_requests
from app.store.errors import StoreError
from app.store.repositories import DiningStore

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


def close_job():
    """Background close-out job."""
    try:
        with Session(engine) as session:
            closed = close_past_requests(DiningStore(session))
            logger.debug(f"Close-out job finished, {closed} requests closed")
    except StoreError as e:
        logger.error(f"Close-out job failed: {e.message}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        close_job,
        trigger=IntervalTrigger(minutes=settings.close_interval_minutes),
        id="close_past_requests",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        f"Scheduler started, closing past requests every {settings.close_interval_minutes} minutes"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler shut down")
