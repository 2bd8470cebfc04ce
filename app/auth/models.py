# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for the mocked login flow.
# =============================================================================

from typing import Optional

from pydantic import BaseModel, Field

from core.models.member import MemberInfo


class AuthMember(BaseModel):
    """
    Authenticated member extracted from a session token.

    This is the minimal info carried by the token itself.
    """
    id: str
    email: Optional[str] = None

    class Config:
        frozen = True  # Make immutable


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    pharmacyName: Optional[str] = None


class TokenResponse(BaseModel):
    """Returned by a successful login."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    member: MemberInfo
