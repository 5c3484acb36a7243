# core/scheduler.py
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlmodel import Session, select

from core.logging_config import logger
from core.storage import ObjectStorage, StorageError
from core.utils import utcnow
from models.file_purge import FilePurge
from models.order import Order


# -----------------------------------------------------
# Jobs (take a session so tests can call them directly)
# -----------------------------------------------------
def archive_old_orders(session: Session, now: Optional[datetime] = None) -> int:
    """Stamp archived_at on orders created before the current month."""
    now = now or utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    rows = session.exec(
        select(Order)
        .where(Order.created_at < month_start)
        .where(Order.archived_at.is_(None))
    ).all()

    for order in rows:
        order.archived_at = now
        session.add(order)
    session.commit()

    logger.info(f"[SCHEDULER] Archived {len(rows)} order(s) created before {month_start.date()}")
    return len(rows)


def purge_deleted_files(session: Session, storage: Optional[ObjectStorage]) -> int:
    """
    Remove queued objects from storage. Failed paths stay queued
    and are retried on the next run.
    """
    if storage is None:
        logger.warning("[SCHEDULER] File purge skipped: storage not configured")
        return 0

    pending = session.exec(select(FilePurge).where(FilePurge.purged_at.is_(None))).all()

    purged = 0
    for item in pending:
        try:
            storage.delete(item.path)
        except StorageError as e:
            logger.error(f"[SCHEDULER] Could not purge {item.path}: {e}")
            continue

        item.purged_at = utcnow()
        session.add(item)
        purged += 1

    session.commit()

    if pending:
        logger.info(f"[SCHEDULER] Purged {purged}/{len(pending)} queued file(s)")
    return purged


def _run_archive(db):
    with db.session() as session:
        archive_old_orders(session)


def _run_purge(db, storage):
    with db.session() as session:
        purge_deleted_files(session, storage)


# -----------------------------------------------------
# Lifecycle
# -----------------------------------------------------
def start_scheduler(db, storage: Optional[ObjectStorage]) -> BackgroundScheduler:
    """
    Initialize the APScheduler background process.
    Archive runs monthly, the file purge hourly.
    """
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler.add_job(
        _run_archive,
        trigger=CronTrigger(day=1, hour=0, minute=0),
        args=[db],
        id="monthly_order_archive",
        replace_existing=True,
    )
    scheduler.add_job(
        _run_purge,
        trigger=CronTrigger(minute=0),
        args=[db, storage],
        id="hourly_file_purge",
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Scheduler started. Archive on the 1st at 00:00 UTC, purge hourly.")
    return scheduler


def stop_scheduler(scheduler: Optional[BackgroundScheduler]) -> None:
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped.")
