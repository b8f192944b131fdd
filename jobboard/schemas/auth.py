import re

from pydantic import BaseModel, field_validator

USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,30}$")
MIN_PASSWORD_LENGTH = 6


class UserCredentials(BaseModel):
    """Register/login body.

    Both fields are optional at the schema level so a missing one yields the
    API's own 400 ("Please provide username and password") rather than 422.
    """

    username: str | None = None
    password: str | None = None

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class UserResponse(BaseModel):
    id: int
    username: str
    role: str

    class Config:
        from_attributes = True


class Token(BaseModel):
    token: str
    user: UserResponse


class IdentityResponse(BaseModel):
    id: int
    role: str
