from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from core.config import Settings, settings as default_settings
from core.errors import http_error_for, unauthorized
from core.policy import Action, ResourceKind, ResourceRef, policy_gate
from core.logging_config import logger
from core.security import BRIDGE_TOKEN, SESSION_TOKEN, decode_token
from database import get_session
from models.auth import Credential, CredentialScheme, Principal
from models.enums import Role
from models.user import User


# Expected "typ" claim per transport
SCHEME_TOKEN_TYPES = {
    CredentialScheme.session: SESSION_TOKEN,
    CredentialScheme.bridge: BRIDGE_TOKEN,
}

# WordPress sends "Authorization: Bearer <jwt>"; browsers send the session cookie
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


# ============================================================
# CREDENTIAL EXTRACTION (transport → opaque credential)
# ============================================================
def extract_credential(
    bearer: Optional[HTTPAuthorizationCredentials],
    cookie: Optional[str],
) -> Optional[Credential]:
    """
    Bearer header first (WordPress bridge), then the session cookie.
    """
    if bearer is not None and bearer.credentials:
        return Credential(scheme=CredentialScheme.bridge, token=bearer.credentials)

    if cookie:
        return Credential(scheme=CredentialScheme.session, token=cookie)

    return None


# ============================================================
# IDENTITY RESOLVER
# ============================================================
def resolve(credential: Optional[Credential], config: Settings = default_settings) -> Optional[Principal]:
    """
    Credential → Principal, or None when unauthenticated.
    Never looks at what the principal is allowed to do.
    """
    if credential is None or not credential.token:
        return None

    claims = decode_token(credential.token, config)
    if not claims:
        return None

    if claims.get("typ") != SCHEME_TOKEN_TYPES[credential.scheme]:
        return None

    user_id = claims.get("sub")
    email = claims.get("email")
    if not user_id or not email:
        return None

    try:
        role = Role.parse(claims.get("role"))
    except ValueError:
        return None

    return Principal(
        id=str(user_id),
        email=str(email),
        role=role,
        name=claims.get("name"),
        scheme=credential.scheme,
    )


# ============================================================
# FASTAPI DEPENDENCIES
# ============================================================
def refresh_role(session: Session, principal: Principal) -> Principal:
    """
    Tokens live for days; the stored row decides the role.
    A principal whose account is gone keeps only customer rights.
    """
    user = session.get(User, principal.id)
    if user is None:
        role = Role.CUSTOMER
    else:
        try:
            role = Role.parse(user.role)
        except ValueError:
            role = Role.CUSTOMER

    if role != principal.role:
        logger.info(f"Principal {principal.id}: token role {principal.role.value}, stored role {role.value}")
        return principal.model_copy(update={"role": role})
    return principal


def get_optional_principal(
    request: Request,
    bearer: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> Optional[Principal]:
    config = get_settings(request)
    cookie = request.cookies.get(config.SESSION_COOKIE_NAME)

    principal = resolve(extract_credential(bearer, cookie), config)
    if principal is None:
        return None
    return refresh_role(session, principal)


def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise unauthorized()
    return principal


def get_bridge_principal(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    """Principal that arrived with a WordPress bearer token."""
    if principal.scheme != CredentialScheme.bridge:
        raise unauthorized("Bearer token required")
    return principal


def require(kind: ResourceKind, action: Action):
    """
    Route guard for a (kind, action) pair.

    Usage:
        @router.get("/all")
        def list_all(principal: Principal = Depends(require(ResourceKind.order, Action.list_all))):
            ...

    Rules with an owner override or invariants are only pre-checked here;
    the handler finishes the decision with enforce() once the row is loaded.
    """
    # Fail at import time for undeclared pairs
    policy_gate.rule_for(kind, action)

    def dependency(
        principal: Optional[Principal] = Depends(get_optional_principal),
    ) -> Optional[Principal]:
        decision = policy_gate.precheck(principal, kind, action)
        if not decision.allowed:
            raise http_error_for(decision)
        return principal

    return dependency


def enforce(
    principal: Optional[Principal],
    kind: ResourceKind,
    action: Action,
    resource: Optional[ResourceRef] = None,
) -> None:
    """Full policy evaluation; raises the mapped HTTPException on deny."""
    decision = policy_gate.authorize(principal, kind, action, resource)
    if not decision.allowed:
        raise http_error_for(decision)


def can(principal: Optional[Principal], kind: ResourceKind, action: Action) -> bool:
    """Role-level answer for handlers that widen or narrow a query."""
    return policy_gate.precheck(principal, kind, action).allowed
