from typing import Optional

from pydantic import BaseModel, EmailStr

from models.enums import BaseStrEnum, Role


# -----------------------------------------------------
# CREDENTIAL (what the transport handed us)
# -----------------------------------------------------
class CredentialScheme(BaseStrEnum):
    session = "session"   # browser cookie
    bridge = "bridge"     # WordPress bearer token


class Credential(BaseModel):
    scheme: CredentialScheme
    token: str


# -----------------------------------------------------
# PRINCIPAL (resolved per request, never persisted)
# -----------------------------------------------------
class Principal(BaseModel):
    id: str
    email: str
    role: Role
    name: Optional[str] = None
    scheme: CredentialScheme = CredentialScheme.session

    model_config = {"frozen": True}


# -----------------------------------------------------
# WORDPRESS BRIDGE
# -----------------------------------------------------
class BridgeAuthRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    action: Optional[str] = None   # "login" | "register"
