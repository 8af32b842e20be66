from pydantic import BaseModel, ConfigDict

from app.schemas.common import APIModel


class LoginRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    email: str | None = None
    password: str | None = None


class RegisterAdminRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    email: str | None = None
    password: str | None = None


class AdminOut(APIModel):
    id: str
    name: str
    email: str
    role: str


class LoginOut(BaseModel):
    token: str
    admin: AdminOut


class AdminSummary(BaseModel):
    name: str
    email: str


class AdminCreatedOut(BaseModel):
    message: str
    admin: AdminSummary


class AdminClaims(BaseModel):
    """Decoded bearer token."""

    id: str
    email: str
    role: str
    exp: int
