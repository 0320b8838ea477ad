# app/functions/scheduler/scheduler.py
import logging
from apscheduler.schedulers.background import BackgroundScheduler
from app.functions.promocode.promocode_jobs import deactivate_expired_promocodes

def start_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")

    # Deactivates expired promotional codes every day at 3 AM UTC
    scheduler.add_job(deactivate_expired_promocodes, "cron", hour=3, minute=0, id="deactivate_expired_promocodes")

    scheduler.start()
    logging.info("SYSTEM >>> Scheduler started")
    return scheduler
