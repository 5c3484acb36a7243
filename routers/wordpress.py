# routers/wordpress.py

"""
Endpoints consumed by the WordPress storefront plugin.

Auth here is a bearer token (7 day expiry) instead of the browser
session cookie. Origins are checked against ALLOWED_ORIGINS.
"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlmodel import Session, select

from core.logging_config import logger
from core.policy import Action, ResourceKind
from core.security import issue_bridge_token
from database import get_session
from dependencies.auth import enforce, get_bridge_principal, get_settings
from models.auth import BridgeAuthRequest, Principal
from models.enums import Role
from models.order import Order, OrderCreate, OrderSummary
from services import accounts, orders as order_service


router = APIRouter(
    prefix="/wordpress",
    tags=["WordPress"],
)


# -----------------------------------------------------
# Origin allow-list
# -----------------------------------------------------
def check_origin(request: Request):
    origin = request.headers.get("origin")
    allowed = get_settings(request).bridge_allowed_origins

    if origin and allowed and origin.rstrip("/") not in allowed:
        logger.warning(f"WordPress bridge call from disallowed origin {origin}")
        raise HTTPException(403, "CORS not allowed")


def _bridge_payload(user) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
    }


# -----------------------------------------------------
# POST /wordpress/auth   (action = login | register)
# -----------------------------------------------------
@router.post("/auth", summary="Issue a bridge token", dependencies=[Depends(check_origin)])
def bridge_auth(
    payload: BridgeAuthRequest,
    request: Request,
    session: Session = Depends(get_session),
):
    if not payload.email or not payload.password:
        raise HTTPException(400, "Email and password are required")

    config = get_settings(request)

    if payload.action == "login":
        user = accounts.authenticate(session, payload.email, payload.password)
        if not user:
            raise HTTPException(401, "Invalid credentials")

    elif payload.action == "register":
        email = accounts.normalize_email(payload.email)
        if accounts.find_by_email(session, email):
            raise HTTPException(400, "User already exists")

        user = accounts.create_account(
            session,
            name=email.split("@")[0],
            email=email,
            password=payload.password,
            role=Role.CUSTOMER,
        )

    else:
        raise HTTPException(400, "Invalid action")

    token = issue_bridge_token(user.id, user.email, user.role, config=config)
    return {"success": True, "token": token, "user": _bridge_payload(user)}


# -----------------------------------------------------
# Orders placed through the plugin
# -----------------------------------------------------
@router.post("/orders", summary="Create an order for the bridge user")
def bridge_create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_bridge_principal),
    session: Session = Depends(get_session),
):
    enforce(principal, ResourceKind.order, Action.create)

    order = order_service.create_order(session, principal.id, payload)
    return {
        "success": True,
        "order": {
            "id": order.id,
            "order_number": order.order_number,
            "status": order.status,
            "total_price": order.total_price,
        },
    }


@router.get("/orders", summary="Orders placed by the bridge user")
def bridge_list_orders(
    principal: Principal = Depends(get_bridge_principal),
    session: Session = Depends(get_session),
):
    enforce(principal, ResourceKind.order, Action.list_own)

    rows = session.exec(
        select(Order)
        .where(Order.user_id == principal.id)
        .order_by(Order.created_at.desc())
    ).all()

    return {"orders": [OrderSummary.model_validate(o).model_dump() for o in rows]}
