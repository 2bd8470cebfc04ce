# =============================================================================
# app/routers/members.py - Member Dashboard, Bookmarks & Activity
# =============================================================================
#   GET    /api/v1/dashboard
#   GET    /api/v1/me/bookmarks
#   POST   /api/v1/me/bookmarks
#   DELETE /api/v1/me/bookmarks?resource_type=&resource_id=
#   GET    /api/v1/me/activity?limit=
#   POST   /api/v1/me/activity
#
# All endpoints require a signed-in member.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from app.auth import AuthMember, auth_store, get_current_member, to_member_info
from app.dependencies import ActivityStoreDep, DashboardServiceDep
from app.exceptions import NotAuthenticatedError
from core.models.member import ActivityCreate, Bookmark, BookmarkCreate, Dashboard, RecentActivity

logger = logging.getLogger(__name__)

router = APIRouter()


class BookmarksResponse(BaseModel):
    bookmarks: list[Bookmark] = Field(default_factory=list)


class ActivityResponse(BaseModel):
    activity: list[RecentActivity] = Field(default_factory=list)


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/dashboard", response_model=Dashboard)
def get_dashboard(
    service: DashboardServiceDep,
    member: AuthMember = Depends(get_current_member),
) -> Dashboard:
    """
    Member dashboard data.

    A program-list failure shows up as programsError; it is not an HTTP error.
    """
    user = auth_store.get_user(member.id)
    if user is None:
        raise NotAuthenticatedError("Unknown member")
    return service.get_dashboard(to_member_info(user))


# =============================================================================
# Bookmarks
# =============================================================================

@router.get("/me/bookmarks", response_model=BookmarksResponse)
def list_bookmarks(
    store: ActivityStoreDep,
    member: AuthMember = Depends(get_current_member),
) -> BookmarksResponse:
    return BookmarksResponse(bookmarks=store.list_bookmarks(member.id))


@router.post("/me/bookmarks", response_model=Bookmark, status_code=201)
def add_bookmark(
    body: BookmarkCreate,
    store: ActivityStoreDep,
    member: AuthMember = Depends(get_current_member),
) -> Bookmark:
    """Bookmark a resource; repeating the call returns the same bookmark."""
    return store.add_bookmark(
        member.id,
        body.resource_type,
        body.resource_id,
        resource_name=body.resource_name,
        program=body.program,
        url=body.url,
    )


@router.delete("/me/bookmarks")
def remove_bookmark(
    store: ActivityStoreDep,
    resource_type: str = Query(..., min_length=1),
    resource_id: str = Query(..., min_length=1),
    member: AuthMember = Depends(get_current_member),
) -> dict:
    removed = store.remove_bookmark(member.id, resource_type, resource_id)
    return {"removed": removed}


# =============================================================================
# Activity
# =============================================================================

@router.get("/me/activity", response_model=ActivityResponse)
def list_activity(
    store: ActivityStoreDep,
    limit: int = Query(10, ge=1, le=100),
    member: AuthMember = Depends(get_current_member),
) -> ActivityResponse:
    """Recent activity, newest first."""
    return ActivityResponse(activity=store.recent_activity(member.id, limit=limit))


@router.post("/me/activity", response_model=RecentActivity, status_code=201)
def log_activity(
    body: ActivityCreate,
    store: ActivityStoreDep,
    member: AuthMember = Depends(get_current_member),
) -> RecentActivity:
    return store.log_activity(member.id, body.resource_name, body.resource_type)
