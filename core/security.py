# core/security.py

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from core.config import Settings, settings as default_settings


# Token "typ" claims; a token is only valid on the transport it was issued for
SESSION_TOKEN = "session"
BRIDGE_TOKEN = "bridge"


# ============================================================
# PASSWORDS
# ============================================================
def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: Optional[str]) -> bool:
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # Malformed stored hash
        return False


# ============================================================
# TOKENS
# ============================================================
def _issue(claims: dict, token_type: str, lifetime: timedelta, config: Settings) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "typ": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(payload, config.SESSION_SECRET, algorithm=config.JWT_ALGORITHM)


def issue_session_token(user_id: str, email: str, role: str, name: Optional[str] = None,
                        config: Settings = default_settings) -> str:
    """Browser session token, stored in the session cookie."""
    return _issue(
        {"sub": user_id, "email": email, "role": role, "name": name},
        SESSION_TOKEN,
        timedelta(days=config.SESSION_EXPIRE_DAYS),
        config,
    )


def issue_bridge_token(user_id: str, email: str, role: str,
                       config: Settings = default_settings) -> str:
    """Bearer token handed to the WordPress integration."""
    return _issue(
        {"sub": user_id, "email": email, "role": role},
        BRIDGE_TOKEN,
        timedelta(days=config.BRIDGE_TOKEN_EXPIRE_DAYS),
        config,
    )


def decode_token(token: str, config: Settings = default_settings) -> Optional[dict]:
    """Verified claims, or None when the token is malformed, forged or expired."""
    try:
        return jwt.decode(token, config.SESSION_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        return None
