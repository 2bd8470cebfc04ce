# =============================================================================
# core/models/member.py - Member / Dashboard Schemas
# =============================================================================
# User, subscription and dashboard DTOs. Authentication is mocked, so these
# are never loaded from a real user table.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from .program import ProgramListItem


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    CANCELLED = "cancelled"


class Subscription(BaseModel):
    id: str
    planName: str
    status: SubscriptionStatus
    startDate: datetime
    endDate: datetime
    programs: list[str] = Field(default_factory=list)


class User(BaseModel):
    """The member record held by the mocked auth store."""
    id: str
    email: str
    name: str | None = None
    firstName: str | None = None
    lastName: str | None = None
    role: Literal["member", "admin"] = "member"
    subscription: Subscription | None = None
    createdAt: datetime


class MemberInfo(BaseModel):
    """
    Member summary shown on the dashboard header.

    subscriptionStatus is derived from the subscription: cancelled/inactive
    map to Expired, active (or no subscription) to Active.
    """
    id: str
    pharmacyName: str | None = None
    lastLoginISO: str | None = None
    subscriptionStatus: Literal["Active", "Expired", "Expiring"] | None = None
    email: str | None = None
    firstName: str | None = None
    lastName: str | None = None


class Profile(BaseModel):
    """Profile row shape of the (future) profiles table."""
    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None
    pharmacy_name: str | None = None
    subscription_status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


# =============================================================================
# Bookmarks & activity
# =============================================================================

class Bookmark(BaseModel):
    id: str
    user_id: str
    resource_type: str
    resource_id: str
    created_at: str
    resource_name: str | None = None
    program: str | None = None
    url: str | None = None


class BookmarkCreate(BaseModel):
    """resource_name / program / url are what the dashboard tile shows."""
    resource_type: str = Field(..., min_length=1, max_length=64)
    resource_id: str = Field(..., min_length=1, max_length=255)
    resource_name: str | None = Field(None, max_length=255)
    program: str | None = Field(None, max_length=255)
    url: str | None = Field(None, max_length=2048)


class RecentActivity(BaseModel):
    id: str
    user_id: str
    resource_name: str
    resource_type: str
    accessed_at: str


class ActivityCreate(BaseModel):
    resource_name: str = Field(..., min_length=1, max_length=255)
    resource_type: str = Field(..., min_length=1, max_length=64)


# =============================================================================
# Dashboard tiles
# =============================================================================

class QuickAccessItem(BaseModel):
    id: str
    title: str
    subtitle: str | None = None
    cta: Literal["Download", "Watch"]
    icon: str


class ResourceItem(BaseModel):
    """Bookmarked resource tile."""
    id: str
    name: str
    program: str | None = None
    url: str | None = None


class ActivityItem(ResourceItem):
    accessedAtISO: str


class Announcement(BaseModel):
    id: str
    title: str
    body: str
    dateISO: str


class Dashboard(BaseModel):
    """
    Everything the member dashboard renders.

    programsError is set (and programs left empty) when the program list
    could not be loaded; the rest of the dashboard still renders.
    """
    member: MemberInfo
    programs: list[ProgramListItem] = Field(default_factory=list)
    programsError: str | None = None
    quickAccess: list[QuickAccessItem] = Field(default_factory=list)
    bookmarks: list[ResourceItem] = Field(default_factory=list)
    recentActivity: list[ActivityItem] = Field(default_factory=list)
    announcements: list[Announcement] = Field(default_factory=list)
