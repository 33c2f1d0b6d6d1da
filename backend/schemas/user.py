from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class RegisterRequest(BaseModel):
    # blank or missing fields are rejected by the auth service with a single message
    fullname: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(BaseModel):
    id: str
    fullname: str
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class AuthResponse(BaseModel):
    message: str
    user: UserOut


class AuthStatus(BaseModel):
    isAuthenticated: bool
    user: Optional[UserOut] = None
    sessionExpiresAt: Optional[datetime] = None
