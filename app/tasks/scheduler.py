import logging
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)
scheduler = BackgroundScheduler(timezone='UTC')


def init_scheduler(app):
    """Start the background scheduler that runs one-shot token evictions."""
    if not app.config.get('SCHEDULER_ENABLED', False):
        logger.info("Scheduler disabled by config")
        return

    if scheduler.running:
        return

    scheduler.start()
    logger.info("Scheduler started")


def schedule_once(func, run_date, job_id, args=None):
    """Run ``func`` once at ``run_date``; replaces a pending job with the same id."""
    return scheduler.add_job(
        func,
        'date',
        run_date=run_date,
        args=args or [],
        id=job_id,
        replace_existing=True,
        misfire_grace_time=None,
    )


def cancel(job_id):
    """Drop a pending job if it is still scheduled."""
    job = scheduler.get_job(job_id)
    if job is not None:
        job.remove()
