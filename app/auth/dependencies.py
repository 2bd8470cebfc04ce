# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Session tokens are HS256 JWTs signed with SECRET_KEY.
#
# Tokens are accepted from:
# - the Authorization: Bearer header (API clients)
# - the httponly session cookie (HTML pages)
#
# Usage:
#   from app.auth import get_current_member, AuthMember
#
#   @router.get("/protected")
#   def protected(member: AuthMember = Depends(get_current_member)):
#       return {"member_id": member.id}
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthMember
from app.config import settings
from app.exceptions import NotAuthenticatedError
from core.models.member import User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SESSION_COOKIE = "clinicalrxq_session"

# HTTP Bearer token extractor (missing header is handled here, not by FastAPI)
security_optional = HTTPBearer(auto_error=False)


def create_access_token(user: User, ttl_minutes: Optional[int] = None) -> str:
    """Sign a session token for a member."""
    ttl = ttl_minutes if ttl_minutes is not None else settings.ACCESS_TOKEN_TTL_MINUTES
    expires = datetime.now(timezone.utc) + timedelta(minutes=ttl)
    payload = {"sub": user.id, "email": user.email, "exp": expires}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def set_session_cookie(response: Response, token: str) -> None:
    """Store the session token in the httponly cookie read by the pages."""
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )


def decode_access_token(token: str) -> AuthMember:
    """
    Verify a session token.

    Raises:
        NotAuthenticatedError: If the token is expired, malformed or has no sub
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.warning("Session token has expired")
        raise NotAuthenticatedError("Token has expired")
    except JWTError as e:
        logger.warning(f"Session token validation failed: {e}")
        raise NotAuthenticatedError("Invalid token")

    member_id = payload.get("sub")
    if not member_id:
        logger.warning("Session token missing 'sub' claim")
        raise NotAuthenticatedError("Invalid token: missing member ID")

    return AuthMember(id=str(member_id), email=payload.get("email"))


def _token_from_request(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(SESSION_COOKIE)


def get_current_member(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> AuthMember:
    """
    Extract and validate the member from the Bearer header or session cookie.

    Raises:
        NotAuthenticatedError: 401 if no token or the token is invalid
    """
    token = _token_from_request(request, credentials)
    if not token:
        raise NotAuthenticatedError()
    member = decode_access_token(token)
    logger.debug(f"Authenticated member: {member.id}")
    return member


def get_current_member_optional(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional),
) -> Optional[AuthMember]:
    """
    Optionally get the current member.

    Returns None instead of raising when there is no valid token. Used by
    pages, which redirect to /login rather than returning 401.
    """
    token = _token_from_request(request, credentials)
    if not token:
        return None
    try:
        return decode_access_token(token)
    except NotAuthenticatedError:
        return None
