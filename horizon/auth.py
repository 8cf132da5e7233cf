"""
Request guards: bearer JWT and the legacy x-admin-key header
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import Settings, get_settings
from .security import verify_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_optional_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Optional[dict]:
    """Claims of a valid bearer token, None otherwise"""
    if credentials is None:
        return None
    return verify_token(credentials.credentials, settings)


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Valid JWT required"""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = verify_token(credentials.credentials, settings)
    if claims is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return claims


def admin_key_matches(key: Optional[str], settings: Settings) -> bool:
    return bool(key) and settings.admin_key_active() and key == settings.ADMIN_KEY


def _admin_key_claims(request: Request) -> dict:
    logger.warning(
        "Admin key used for %s %s from %s",
        request.method,
        request.url.path,
        request.client.host if request.client else "unknown",
    )
    return {"id": None, "email": None, "role": "admin", "via_admin_key": True}


def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_admin_key: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Admin JWT, or the configured admin key"""
    claims = verify_token(credentials.credentials, settings) if credentials else None
    if claims and claims.get("role") == "admin":
        return claims

    if admin_key_matches(x_admin_key, settings):
        return _admin_key_claims(request)

    if claims:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


def is_admin_caller(
    request: Request,
    claims: Optional[dict] = Depends(get_optional_claims),
    x_admin_key: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> bool:
    """Non-raising admin check for endpoints with mixed visibility"""
    if claims and claims.get("role") == "admin":
        return True
    if admin_key_matches(x_admin_key, settings):
        _admin_key_claims(request)
        return True
    return False


def caller_id(claims: Optional[dict], fallback: Optional[int] = None) -> Optional[int]:
    """User id from the token, else the id the client sent"""
    if claims and claims.get("id") is not None:
        return claims["id"]
    return fallback
