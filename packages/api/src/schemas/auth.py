# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    phone: str = ""
    name: str = ""


class TokenPayload(BaseModel):
    """Decoded access token claims."""

    sub: str
    role: str = ""
    phone: str = ""
    name: str = ""
