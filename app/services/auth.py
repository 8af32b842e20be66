"""
Admin credentials and bearer tokens.

This module is the only writer of the admins table.
"""
import logging

from jose import JWTError
from pydantic import ValidationError
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import BadRequest, EmailTaken, InvalidCredentials, TokenInvalid, WeakPassword
from app.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    placeholder_hash,
    verify_password,
)
from app.models.admins import ADMIN_ROLE, Admin
from app.schemas.auth import AdminClaims
from app.services.registrations import is_valid_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
DEFAULT_ADMIN_NAME = "Super Admin"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_admin_by_email(db: Session, email: str) -> Admin | None:
    return db.scalar(select(Admin).where(Admin.email == normalize_email(email)))


def issue_token(db: Session, email: str | None, password: str | None) -> tuple[str, Admin]:
    """Check credentials and return a signed token with the admin it was issued for."""
    if not email or not password:
        raise BadRequest("Email and password are required")
    if not is_valid_email(email.strip()):
        raise BadRequest("Invalid email format")

    admin = get_admin_by_email(db, email)
    password_ok = verify_password(password, admin.password if admin is not None else placeholder_hash())
    if admin is None or not password_ok:
        logger.warning("Failed login for %s", normalize_email(email))
        raise InvalidCredentials()

    token = create_access_token({"id": admin.id, "email": admin.email, "role": admin.role})
    logger.info("Admin %s logged in", admin.email)
    return token, admin


def verify_token(token: str) -> AdminClaims:
    try:
        return AdminClaims(**decode_access_token(token))
    except (JWTError, ValidationError, TypeError):
        raise TokenInvalid()


def _insert_admin(db: Session, name: str, email: str, password: str) -> Admin:
    admin = Admin(
        name=name.strip(),
        email=normalize_email(email),
        password=hash_password(password),
        role=ADMIN_ROLE,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin


def register_admin(
    db: Session,
    *,
    name: str | None,
    email: str | None,
    password: str | None,
    requestor: AdminClaims | None,
) -> Admin:
    """Create another admin on behalf of an already authenticated admin."""
    if requestor is None:
        raise TokenInvalid()
    if not name or not name.strip() or not email or not password:
        raise BadRequest("Name, email and password are required")
    if not is_valid_email(email.strip()):
        raise BadRequest("Invalid email format")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise WeakPassword()
    if get_admin_by_email(db, email) is not None:
        raise EmailTaken()

    try:
        admin = _insert_admin(db, name, email, password)
    except IntegrityError:
        db.rollback()
        raise EmailTaken()
    logger.info("Admin %s created by %s", admin.email, requestor.email)
    return admin


def seed_default_admin(db: Session, email: str, password: str) -> Admin | None:
    """Create the first admin if, and only if, no admin exists yet."""
    if db.scalar(select(func.count(Admin.id))):
        return None
    try:
        admin = _insert_admin(db, DEFAULT_ADMIN_NAME, email, password)
    except IntegrityError:
        # Another instance seeded first
        db.rollback()
        return None
    logger.info("Default admin seeded: %s", admin.email)
    return admin
