from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.errors import TokenInvalid, to_http
from app.schemas.auth import AdminClaims
from app.services import auth as auth_service

bearer_scheme = HTTPBearer(auto_error=False)


def require_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AdminClaims:
    """Guard for admin-only routes: a valid bearer token or 401."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        return auth_service.verify_token(credentials.credentials)
    except TokenInvalid as e:
        raise to_http(e)
