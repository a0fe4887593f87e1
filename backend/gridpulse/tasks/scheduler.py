"""APScheduler setup for periodic fleet forecast refresh."""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from gridpulse.config import settings

logger = logging.getLogger(__name__)

_scheduler: BackgroundScheduler | None = None


def _run_forecast_refresh():
    from gridpulse.services.fleet import refresh_all
    try:
        refresh_all()
    except Exception as e:
        logger.error("Forecast refresh job failed: %s", e)


def start_scheduler():
    global _scheduler
    _scheduler = BackgroundScheduler()

    _scheduler.add_job(
        _run_forecast_refresh,
        "interval",
        minutes=settings.forecast_refresh_interval,
        id="forecast_refresh",
        name="Fleet load forecast refresh",
        max_instances=1,
    )

    _scheduler.start()
    logger.info(
        "Scheduler started: forecast refresh every %d min",
        settings.forecast_refresh_interval,
    )


def stop_scheduler():
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
        _scheduler = None
