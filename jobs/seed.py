# jobs/seed.py

import os

from sqlmodel import Session

from core.config import settings
from core.logging_config import logger
from database import Database
from models.enums import Role
from services import accounts


SEED_ACCOUNTS = (
    ("Admin User", "admin@easyprint.example.com", Role.ADMIN),
    ("Staff User", "staff@easyprint.example.com", Role.STAFF),
    ("Customer User", "customer@easyprint.example.com", Role.CUSTOMER),
)


def seed(session: Session, password: str) -> int:
    """Create the demo accounts that don't exist yet. Returns how many were added."""
    created = 0
    for name, email, role in SEED_ACCOUNTS:
        if accounts.find_by_email(session, email):
            logger.info(f"Seed: {email} already exists")
            continue

        accounts.create_account(
            session,
            name=name,
            email=email,
            password=password,
            role=role,
        )
        created += 1

    return created


def run():
    """
    CLI entry point: python -m jobs.seed
    Password comes from SEED_PASSWORD, which must be set.
    """
    password = os.getenv("SEED_PASSWORD")
    if not password:
        raise RuntimeError("SEED_PASSWORD must be set")

    db = Database(settings.database_url)
    db.create_db_and_tables()
    db.migrate_legacy_roles()

    with db.session() as session:
        created = seed(session, password)

    db.close()
    logger.info(f"Seed complete: {created} account(s) created")


if __name__ == "__main__":
    run()
