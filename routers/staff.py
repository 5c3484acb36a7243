# routers/staff.py

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from core.policy import Action, ResourceKind
from database import get_session
from dependencies.auth import require
from models.auth import Principal
from models.enums import Role
from models.user import StaffCreate, StaffUpdate, User
from routers.users import delete_user_account, update_user_account
from services import accounts


router = APIRouter(
    prefix="/staff",
    tags=["Staff"],
)


@router.get("", summary="Admin: list staff and admin accounts")
def list_staff(
    principal: Principal = Depends(require(ResourceKind.user, Action.list)),
    session: Session = Depends(get_session),
):
    rows = session.exec(
        select(User)
        .where(User.role.in_([Role.STAFF.value, Role.ADMIN.value]))
        .order_by(User.created_at.desc())
    ).all()
    return [accounts.to_read(u) for u in rows]


@router.post("", status_code=201, summary="Admin: create a staff account")
def create_staff(
    payload: StaffCreate,
    principal: Principal = Depends(require(ResourceKind.user, Action.create)),
    session: Session = Depends(get_session),
):
    role = accounts.parse_role(payload.role or Role.STAFF.value)
    accounts.validate_name((payload.name or "").strip())

    user = accounts.create_account(
        session,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        role=role,
    )
    return {"success": True, "user": accounts.to_read(user)}


@router.put("/{user_id}", summary="Admin: update a staff account")
def update_staff(
    user_id: str,
    payload: StaffUpdate,
    principal: Principal = Depends(require(ResourceKind.user, Action.update)),
    session: Session = Depends(get_session),
):
    return update_user_account(session, principal, user_id, payload)


@router.delete("/{user_id}", summary="Admin: delete a staff account")
def delete_staff(
    user_id: str,
    principal: Principal = Depends(require(ResourceKind.user, Action.delete)),
    session: Session = Depends(get_session),
):
    return delete_user_account(session, principal, user_id)
