"""Background job scheduler for notifications and the email queue."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlmodel import Session

from studio_ops.core.config import settings
from studio_ops.core.database import engine

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def shooter_introduction_job():
    """Send tomorrow's shooter introduction emails."""
    from studio_ops.notifications.shooter_introduction import ShooterIntroductionEmail

    try:
        with Session(engine) as session:
            stats = ShooterIntroductionEmail(session).handle()
            logger.info(f"Shooter introduction job completed: {stats}")
    except Exception as e:
        logger.error(f"Shooter introduction job failed: {e}")


def start_scheduler():
    """Start the background scheduler."""
    scheduler.add_job(
        shooter_introduction_job,
        trigger=CronTrigger(
            day_of_week="mon-fri",
            hour=settings.shooter_introduction_hour,
            minute=settings.shooter_introduction_minute,
            timezone=settings.timezone,
        ),
        id="shooter_introduction_email",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler started, shooter introduction emails at "
        f"{settings.shooter_introduction_hour:02d}:{settings.shooter_introduction_minute:02d} on weekdays"
    )


def shutdown_scheduler():
    """Graceful shutdown."""
    scheduler.shutdown(wait=False)
    logger.info("Scheduler shut down")
