# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for the mocked login flow.
#
# Only the demo account can sign in. A successful login returns a bearer
# token and also sets the session cookie used by the HTML pages.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Response

from app.auth.dependencies import SESSION_COOKIE, create_access_token, get_current_member, set_session_cookie
from app.auth.models import AuthMember, LoginRequest, RegisterRequest, TokenResponse
from app.auth.store import auth_store, to_member_info
from app.config import settings
from app.exceptions import InvalidCredentialsError, NotAuthenticatedError
from core.models.member import MemberInfo

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, response: Response) -> TokenResponse:
    """
    Sign in with the demo credentials.

    Raises:
        401: If the credentials are not the demo account's
    """
    user = auth_store.login(body.email, body.password)
    if user is None:
        raise InvalidCredentialsError(auth_store.demo_email)

    token = create_access_token(user)
    set_session_cookie(response, token)

    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_TTL_MINUTES * 60,
        member=to_member_info(user),
    )


@router.post("/logout")
def logout(response: Response) -> dict:
    """Clear the session cookie. Bearer tokens simply expire."""
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}


@router.post("/register", status_code=201)
def register(body: RegisterRequest) -> dict:
    """Accept a registration. Nothing is stored."""
    auth_store.register(
        body.email,
        body.password,
        firstName=body.firstName,
        lastName=body.lastName,
        pharmacyName=body.pharmacyName,
    )
    return {"success": True}


@router.get("/me", response_model=MemberInfo)
def get_current_member_info(member: AuthMember = Depends(get_current_member)) -> MemberInfo:
    """
    Get the signed-in member's dashboard summary.

    Raises:
        401: If not authenticated
    """
    user = auth_store.get_user(member.id)
    if user is None:
        raise NotAuthenticatedError("Unknown member")
    return to_member_info(user)
