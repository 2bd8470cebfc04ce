# =============================================================================
# app/auth/store.py - Mocked Member Store
# =============================================================================
# There is no user table: exactly one demo account can sign in, and
# registration always "succeeds" without storing anything.
# =============================================================================

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from app.config import settings
from core.models.member import MemberInfo, Subscription, SubscriptionStatus, User

logger = logging.getLogger(__name__)

DEMO_MEMBER_ID = "1"
DEMO_PROGRAMS = ["mtm-future-today", "timemymeds", "test-treat"]


class AuthStore:
    """Demo-credential login and member lookup."""

    def __init__(self, demo_email: Optional[str] = None, demo_password: Optional[str] = None):
        self.demo_email = demo_email or settings.DEMO_MEMBER_EMAIL
        self.demo_password = demo_password or settings.DEMO_MEMBER_PASSWORD

    def demo_user(self, now: Optional[datetime] = None) -> User:
        now = now or datetime.now(timezone.utc)
        return User(
            id=DEMO_MEMBER_ID,
            email=self.demo_email,
            name="Demo User",
            role="member",
            subscription=Subscription(
                id="sub1",
                planName="Premium",
                status=SubscriptionStatus.ACTIVE,
                startDate=now,
                endDate=now + timedelta(days=365),
                programs=list(DEMO_PROGRAMS),
            ),
            createdAt=now,
        )

    def login(self, email: str, password: str) -> Optional[User]:
        """
        Check credentials against the demo account.

        The email is trimmed and compared case-insensitively; the password
        must match exactly.

        Returns:
            The demo User, or None for any other credentials
        """
        if email.strip().lower() == self.demo_email.lower() and password == self.demo_password:
            logger.info("Demo member signed in")
            return self.demo_user()
        logger.info("Rejected sign-in attempt")
        return None

    def register(self, email: str, password: str, **profile) -> bool:
        """Always succeeds; nothing is stored."""
        logger.info(f"Registration accepted (not persisted) for {email.strip().lower()}")
        return True

    def get_user(self, member_id: str) -> Optional[User]:
        """Member lookup for a decoded token."""
        if member_id == DEMO_MEMBER_ID:
            return self.demo_user()
        return None


def to_member_info(user: User) -> MemberInfo:
    """
    Map a User to the dashboard MemberInfo.

    cancelled/inactive subscriptions show as Expired; everything else
    (including no subscription) as Active.
    """
    status = "Active"
    if user.subscription and user.subscription.status in (SubscriptionStatus.CANCELLED, SubscriptionStatus.INACTIVE):
        status = "Expired"

    composed = " ".join(part for part in (user.firstName, user.lastName) if part)

    return MemberInfo(
        id=user.id,
        pharmacyName=user.name or composed or "Member",
        lastLoginISO=user.createdAt.isoformat() if user.createdAt else None,
        subscriptionStatus=status,
        email=user.email,
        firstName=user.firstName,
        lastName=user.lastName,
    )


auth_store = AuthStore()
