# services/accounts.py

"""
Account helpers shared by /auth, /staff, /users and the WordPress bridge.
"""

import re
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy import delete
from sqlmodel import Session, select

from core.errors import handle_db_error
from core.logging_config import logger
from core.security import hash_password, verify_password
from core.utils import utcnow
from models.enums import Role
from models.message import Message, MessageResponse
from models.notification import Notification
from models.order import Order
from models.user import User, UserRead


PASSWORD_RE = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2


# -----------------------------------------------------
# Validation
# -----------------------------------------------------
def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not PASSWORD_RE.match(password):
        raise HTTPException(400, "Password must contain uppercase, lowercase, and number")


def validate_name(name: str) -> None:
    if len(name) < MIN_NAME_LENGTH:
        raise HTTPException(400, f"Name must be at least {MIN_NAME_LENGTH} characters")


def parse_role(value: Optional[str]) -> Role:
    try:
        return Role.parse(value)
    except ValueError:
        raise HTTPException(400, f"Invalid role: {value}")


# -----------------------------------------------------
# Lookups
# -----------------------------------------------------
def find_by_email(session: Session, email: str) -> Optional[User]:
    return session.exec(select(User).where(User.email == normalize_email(email))).first()


def to_read(user: User) -> dict:
    return UserRead.model_validate(user).model_dump()


# -----------------------------------------------------
# Create
# -----------------------------------------------------
def create_account(
    session: Session,
    *,
    name: Optional[str],
    email: str,
    password: str,
    role: Role = Role.CUSTOMER,
    check_strength: bool = True,
) -> User:
    """
    Insert a user with a bcrypt-hashed password and commit.
    409 on duplicate email (checked case-insensitively).
    """
    email = normalize_email(email)
    if check_strength:
        validate_password(password)

    if find_by_email(session, email):
        raise HTTPException(409, "Email already registered")

    user = User(
        name=name.strip() if name else None,
        email=email,
        password=hash_password(password),
        role=role.value,
    )

    try:
        session.add(user)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise handle_db_error(e, "Failed to create account")

    session.refresh(user)
    logger.info(f"Account created: {user.email} ({user.role})")
    return user


def register_customer(session: Session, name: Optional[str], email: Optional[str], password: Optional[str]) -> User:
    if not (name or "").strip() or not (email or "").strip() or not password:
        raise HTTPException(400, "All fields are required")

    validate_name(name.strip())
    return create_account(session, name=name, email=email, password=password, role=Role.CUSTOMER)


# -----------------------------------------------------
# Authenticate
# -----------------------------------------------------
def authenticate(session: Session, email: Optional[str], password: Optional[str]) -> Optional[User]:
    if not email or not password:
        return None

    user = find_by_email(session, email)
    if not user or not verify_password(password, user.password):
        return None

    return user


# -----------------------------------------------------
# Update
# -----------------------------------------------------
def update_account(
    session: Session,
    user: User,
    *,
    name: Optional[str] = None,
    email: Optional[str] = None,
    role: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    if name:
        user.name = name.strip()
    if email:
        new_email = normalize_email(email)
        existing = find_by_email(session, new_email)
        if existing and existing.id != user.id:
            raise HTTPException(409, "Email already registered")
        user.email = new_email
    if role:
        user.role = parse_role(role).value
    if password:
        validate_password(password)
        user.password = hash_password(password)

    user.updated_at = utcnow()

    try:
        session.add(user)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise handle_db_error(e, "Failed to update account")

    session.refresh(user)
    return user


# -----------------------------------------------------
# Delete (with dependents, one transaction)
# -----------------------------------------------------
def delete_account(session: Session, user: User) -> None:
    """
    Remove a user and everything hanging off it. The schema cascades
    too; deleting explicitly keeps SQLite and Postgres in step.
    """
    user_id = user.id

    own_message_ids = select(Message.id).where(Message.user_id == user_id)

    session.execute(delete(MessageResponse).where(MessageResponse.message_id.in_(own_message_ids)))
    session.execute(delete(MessageResponse).where(MessageResponse.responded_by_id == user_id))
    session.execute(delete(Message).where(Message.user_id == user_id))
    session.execute(delete(Order).where(Order.user_id == user_id))
    session.execute(delete(Notification).where(Notification.user_id == user_id))
    session.delete(user)
    session.commit()

    logger.info(f"User deleted: {user_id}")
