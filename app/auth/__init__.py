# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Mocked authentication: a single demo account and HS256 session tokens.
#
# Usage:
#   from app.auth import get_current_member, AuthMember
#
#   @router.get("/protected")
#   def protected(member: AuthMember = Depends(get_current_member)):
#       return {"member_id": member.id}
# =============================================================================

from app.auth.dependencies import get_current_member, get_current_member_optional
from app.auth.models import AuthMember, TokenResponse
from app.auth.store import AuthStore, auth_store, to_member_info

__all__ = [
    "get_current_member",
    "get_current_member_optional",
    "AuthMember",
    "TokenResponse",
    "AuthStore",
    "auth_store",
    "to_member_info",
]
