# routers/users.py

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind, ResourceRef
from core.utils import clean_text, utcnow
from database import get_session
from dependencies.auth import enforce, require
from models.auth import Principal
from models.enums import Role
from models.user import ProfileRead, ProfileUpdate, StaffUpdate, User
from services import accounts


router = APIRouter(
    prefix="/users",
    tags=["Users"],
)


def load_user(session: Session, user_id: str) -> User:
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return user


def target_ref(user: User) -> ResourceRef:
    try:
        role = Role.parse(user.role)
    except ValueError:
        role = None
    return ResourceRef(ResourceKind.user, id=user.id, role=role)


def update_user_account(session: Session, principal: Principal, user_id: str, payload: StaffUpdate) -> dict:
    """
    Shared by PATCH /users/{id} and PUT /staff/{id}. The update rule sees
    the stored role, so admin accounts stay out of reach.
    """
    target = load_user(session, user_id)
    enforce(principal, ResourceKind.user, Action.update, target_ref(target))

    user = accounts.update_account(
        session, target,
        name=payload.name,
        email=payload.email,
        role=payload.role,
        password=payload.password,
    )
    logger.info(f"User {user_id} updated by admin {principal.id}")
    return {"success": True, "user": accounts.to_read(user)}


def delete_user_account(session: Session, principal: Principal, user_id: str) -> dict:
    """
    Shared by /users/{id} and /staff/{id}: load, run the delete rule
    with the target's id and role, then remove with dependents.
    """
    target = load_user(session, user_id)
    enforce(principal, ResourceKind.user, Action.delete, target_ref(target))

    accounts.delete_account(session, target)
    logger.info(f"User {user_id} deleted by admin {principal.id}")
    return {"success": True, "message": "User deleted successfully"}


# ============================================================
# OWN PROFILE  (declared before /{user_id})
# ============================================================
@router.get("/me", response_model=ProfileRead, summary="Get my profile")
def read_profile(
    principal: Principal = Depends(require(ResourceKind.profile, Action.read)),
    session: Session = Depends(get_session),
):
    return load_user(session, principal.id)


@router.patch("/me", response_model=ProfileRead, summary="Update my profile")
def update_profile(
    payload: ProfileUpdate,
    principal: Principal = Depends(require(ResourceKind.profile, Action.update)),
    session: Session = Depends(get_session),
):
    name = clean_text(payload.name)
    school = clean_text(payload.school)
    if not name or not school:
        raise HTTPException(400, "Name and school are required")

    user = load_user(session, principal.id)
    user.name = name
    user.school = school
    user.organization = clean_text(payload.organization)
    user.phone = clean_text(payload.phone)
    user.updated_at = utcnow()

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


# ============================================================
# ADMIN: USER MANAGEMENT
# ============================================================
@router.get("", summary="Admin: list all users")
def list_users(
    principal: Principal = Depends(require(ResourceKind.user, Action.list)),
    session: Session = Depends(get_session),
):
    rows = session.exec(select(User).order_by(User.created_at.desc())).all()
    return [accounts.to_read(u) for u in rows]


@router.patch("/{user_id}", summary="Admin: update a user")
def update_user(
    user_id: str,
    payload: StaffUpdate,
    principal: Principal = Depends(require(ResourceKind.user, Action.update)),
    session: Session = Depends(get_session),
):
    return update_user_account(session, principal, user_id, payload)


@router.delete("/{user_id}", summary="Admin: delete a user")
def delete_user(
    user_id: str,
    principal: Principal = Depends(require(ResourceKind.user, Action.delete)),
    session: Session = Depends(get_session),
):
    return delete_user_account(session, principal, user_id)
