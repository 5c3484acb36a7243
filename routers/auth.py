from fastapi import APIRouter, Depends, HTTPException, Request, Response
from sqlmodel import Session

from core.logging_config import logger
from core.security import issue_session_token
from database import get_session
from dependencies.auth import get_current_principal, get_settings
from models.auth import Principal
from models.user import LoginRequest, RegisterRequest
from services import accounts


router = APIRouter(
    prefix="/auth",
    tags=["Auth"],
)


# ============================================================
# REGISTER (public, always creates a CUSTOMER)
# ============================================================
@router.post("/register", status_code=201, summary="Create a customer account")
def register(payload: RegisterRequest, session: Session = Depends(get_session)):
    user = accounts.register_customer(session, payload.name, payload.email, payload.password)

    return {
        "success": True,
        "message": "Account created successfully",
        "user": accounts.to_read(user),
    }


# ============================================================
# LOGIN (sets the session cookie)
# ============================================================
@router.post("/login", summary="Authenticate user")
def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    session: Session = Depends(get_session),
):
    email = payload.email.strip().lower()

    user = accounts.authenticate(session, email, payload.password)
    if not user:
        logger.warning(f"Login attempt failed for {email}")
        raise HTTPException(401, "Invalid email or password")

    config = get_settings(request)
    token = issue_session_token(user.id, user.email, user.role, user.name, config=config)

    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=config.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        samesite="lax",
        secure=config.ENV == "production",
    )

    return {"success": True, "user": accounts.to_read(user)}


@router.post("/logout", summary="Clear the session cookie")
def logout(request: Request, response: Response):
    response.delete_cookie(get_settings(request).SESSION_COOKIE_NAME)
    return {"success": True}


# ============================================================
# CURRENT PRINCIPAL
# ============================================================
@router.get("/me", response_model=Principal, summary="Current authenticated principal")
def read_me(principal: Principal = Depends(get_current_principal)):
    return principal
