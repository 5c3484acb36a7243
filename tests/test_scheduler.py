# tests/test_scheduler.py

"""
Background jobs, called directly with a session.
"""

from datetime import datetime
from unittest.mock import Mock

from sqlmodel import select

from core.scheduler import archive_old_orders, purge_deleted_files
from core.storage import StorageError
from models.file_purge import FilePurge
from models.order import Order


def _order(user_id, created_at, number):
    return Order(
        user_id=user_id,
        order_number=number,
        customer_name="C",
        customer_email="c@example.com",
        total_price=5,
        created_at=created_at,
    )


def test_archive_only_touches_previous_months(database, customer):
    with database.session() as session:
        session.add(_order(customer.id, datetime(2024, 4, 30, 23, 59), "MQ_1001"))
        session.add(_order(customer.id, datetime(2024, 5, 2), "MQ_1002"))
        session.commit()

        archived = archive_old_orders(session, now=datetime(2024, 5, 15))
        assert archived == 1

        rows = {o.order_number: o for o in session.exec(select(Order)).all()}
        assert rows["MQ_1001"].archived_at == datetime(2024, 5, 15)
        assert rows["MQ_1002"].archived_at is None

        # Second run finds nothing new
        assert archive_old_orders(session, now=datetime(2024, 5, 16)) == 0


def test_purge_removes_queued_files_and_keeps_failures(database):
    storage = Mock()
    storage.delete.side_effect = [None, StorageError("gone fishing")]

    with database.session() as session:
        session.add(FilePurge(path="document/a.pdf"))
        session.add(FilePurge(path="document/b.pdf"))
        session.commit()

        assert purge_deleted_files(session, storage) == 1

        pending = session.exec(select(FilePurge).where(FilePurge.purged_at.is_(None))).all()
        assert len(pending) == 1


def test_purge_without_storage_is_a_noop(database):
    with database.session() as session:
        session.add(FilePurge(path="document/a.pdf"))
        session.commit()

        assert purge_deleted_files(session, None) == 0
