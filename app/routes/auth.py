from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import AppError, to_http
from app.database.db import get_db
from app.routes.deps import require_admin
from app.schemas.auth import AdminClaims, AdminCreatedOut, LoginOut, LoginRequest, RegisterAdminRequest
from app.services import auth as auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginOut)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    try:
        token, admin = auth_service.issue_token(db, payload.email, payload.password)
    except AppError as e:
        raise to_http(e)
    return {"token": token, "admin": admin}


@router.post("/register-admin", response_model=AdminCreatedOut, status_code=status.HTTP_201_CREATED)
def register_admin(
    payload: RegisterAdminRequest,
    db: Session = Depends(get_db),
    current_admin: AdminClaims = Depends(require_admin),
):
    try:
        admin = auth_service.register_admin(
            db,
            name=payload.name,
            email=payload.email,
            password=payload.password,
            requestor=current_admin,
        )
    except AppError as e:
        raise to_http(e)
    return {"message": "Admin created successfully", "admin": {"name": admin.name, "email": admin.email}}
