# =============================================================================
# app/routers/pages.py - HTML Pages
# =============================================================================
# Server-rendered site pages (Jinja2).
#
# Public:  /  /about  /programs  /programs/{slug}  /success-stories
#          /enroll  /login  /logout
# Members: /dashboard  /resources  (redirect to /login without a session)
#
# Data failures never turn into error pages: the page renders with an
# inline message instead.
# =============================================================================

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth import AuthMember, auth_store, get_current_member_optional, to_member_info
from app.auth.dependencies import SESSION_COOKIE, create_access_token, set_session_cookie
from app.dependencies import ClinicalProgramServiceDep, DashboardServiceDep, LibraryServiceDep
from app.exceptions import ClinicalRxQException, ProgramNotFoundError
from app.templates import render_template
from core import content
from core.models.library import CategoryTag, FileType, LibraryFilter, QuickCard
from lib.utils import mask_secret

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

PROGRAMS_ERROR = "Error loading programs"
PROGRAM_ERROR = "Error loading program"
RESOURCES_ERROR = "Error loading resources"


def _login_redirect(next_path: str) -> RedirectResponse:
    return RedirectResponse(f"/login?next={next_path}", status_code=303)


def _safe_next(next_path: Optional[str]) -> str:
    """Only same-site relative paths are followed after login."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return "/dashboard"


# =============================================================================
# Public pages
# =============================================================================

@router.get("/", response_class=HTMLResponse)
def home(
    request: Request,
    service: ClinicalProgramServiceDep,
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    """Home page; program cards fall back to static copy if Airtable fails."""
    try:
        programs = service.list_programs().items or content.FEATURED_PROGRAMS
    except ClinicalRxQException as e:
        logger.warning(f"Home page programs unavailable: {e.message}")
        programs = content.FEATURED_PROGRAMS

    return render_template(request, "home.html", {
        "member": member,
        "programs": programs,
        "stories": content.SUCCESS_STORIES[:3],
    })


@router.get("/about", response_class=HTMLResponse)
def about(request: Request, member: Optional[AuthMember] = Depends(get_current_member_optional)):
    return render_template(request, "about.html", {
        "member": member,
        "pillars": content.PILLARS,
        "differentiators": content.DIFFERENTIATORS,
    })


@router.get("/programs", response_class=HTMLResponse)
def programs_page(
    request: Request,
    service: ClinicalProgramServiceDep,
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    programs, error = [], None
    try:
        programs = service.list_programs().items
    except ClinicalRxQException as e:
        logger.error(f"Programs page failed: {e.message}")
        error = PROGRAMS_ERROR

    return render_template(request, "programs.html", {"member": member, "programs": programs, "error": error})


@router.get("/programs/{slug}", response_class=HTMLResponse)
def program_detail_page(
    slug: str,
    request: Request,
    service: ClinicalProgramServiceDep,
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    """
    Program detail. Unknown slugs get a 404 page; other failures keep the
    static header (for known slugs) and show an inline error.
    """
    program, error, status_code = None, None, 200
    try:
        program = service.get_program_detail(slug.strip())
    except ProgramNotFoundError:
        error, status_code = "Program not found", 404
    except ClinicalRxQException as e:
        logger.error(f"Program page {slug} failed: {e.message}")
        error = PROGRAM_ERROR

    return render_template(
        request,
        "program_detail.html",
        {
            "member": member,
            "slug": slug,
            "program": program,
            "fallback": content.FALLBACK_PROGRAM_META.get(slug),
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/success-stories", response_class=HTMLResponse)
def success_stories(request: Request, member: Optional[AuthMember] = Depends(get_current_member_optional)):
    return render_template(request, "success_stories.html", {"member": member, "stories": content.SUCCESS_STORIES})


# =============================================================================
# Enrollment
# =============================================================================

@router.get("/enroll", response_class=HTMLResponse)
def enroll_form(
    request: Request,
    program: Optional[str] = Query(None),
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    return render_template(request, "enroll.html", {
        "member": member,
        "programs": content.ENROLLMENT_PROGRAMS,
        "selected": program if content.get_enrollment_program(program or "") else None,
        "form": {},
        "errors": [],
    })


@router.post("/enroll", response_class=HTMLResponse)
def enroll_submit(
    request: Request,
    program_id: str = Form(""),
    name: str = Form(""),
    email: str = Form(""),
    pharmacy_name: str = Form(""),
    phone: str = Form(""),
    card_number: str = Form(""),
    expiry: str = Form(""),
    cvc: str = Form(""),
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    """
    Validate the enrollment form and show a confirmation.

    No payment is taken; card details are only logged masked.
    """
    program = content.get_enrollment_program(program_id)
    errors = []
    if program is None:
        errors.append("Please choose a program.")
    if not name.strip():
        errors.append("Name is required.")
    if "@" not in email:
        errors.append("A valid email is required.")

    form = {"name": name, "email": email, "pharmacy_name": pharmacy_name, "phone": phone}

    if errors:
        return render_template(
            request,
            "enroll.html",
            {
                "member": member,
                "programs": content.ENROLLMENT_PROGRAMS,
                "selected": program_id if program else None,
                "form": form,
                "errors": errors,
            },
            status_code=400,
        )

    logger.info(
        f"Enrollment submitted: program={program_id} email={email.strip()} "
        f"card={mask_secret(card_number.replace(' ', ''))}"
    )
    return render_template(request, "enroll_confirm.html", {"member": member, "program": program, "form": form})


# =============================================================================
# Login / logout
# =============================================================================

@router.get("/login", response_class=HTMLResponse)
def login_form(
    request: Request,
    next: Optional[str] = Query(None),
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    if member is not None:
        return RedirectResponse(_safe_next(next), status_code=303)
    return render_template(request, "login.html", {
        "member": None,
        "next": _safe_next(next),
        "email": "",
        "error": None,
        "demo_email": auth_store.demo_email,
    })


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/dashboard"),
):
    user = auth_store.login(email, password)
    if user is None:
        return render_template(
            request,
            "login.html",
            {
                "member": None,
                "next": _safe_next(next),
                "email": email,
                "error": f"Invalid credentials. Use {auth_store.demo_email} and password.",
                "demo_email": auth_store.demo_email,
            },
            status_code=401,
        )

    response = RedirectResponse(_safe_next(next), status_code=303)
    set_session_cookie(response, create_access_token(user))
    return response


@router.get("/logout")
def logout():
    response = RedirectResponse("/", status_code=303)
    response.delete_cookie(SESSION_COOKIE)
    return response


# =============================================================================
# Member pages
# =============================================================================

@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    service: DashboardServiceDep,
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    user = auth_store.get_user(member.id) if member else None
    if user is None:
        return _login_redirect("/dashboard")

    dashboard = service.get_dashboard(to_member_info(user))
    return render_template(request, "dashboard.html", {"member": member, "dashboard": dashboard})


@router.get("/resources", response_class=HTMLResponse)
def resources_page(
    request: Request,
    service: LibraryServiceDep,
    program: Optional[str] = Query(None),
    quick: QuickCard = Query(QuickCard.ALL),
    types: list[FileType] = Query([]),
    categories: list[CategoryTag] = Query([]),
    programs: list[str] = Query([]),
    q: str = Query(""),
    member: Optional[AuthMember] = Depends(get_current_member_optional),
):
    """Member resource library with filters carried in the query string."""
    if member is None:
        return _login_redirect("/resources")

    filters = LibraryFilter(quick=quick, types=types, categories=categories, programs=programs, q=q)
    items, error = [], None
    try:
        items = service.filter_catalog(service.build_catalog(program or None), filters)
    except ClinicalRxQException as e:
        logger.error(f"Resources page failed: {e.message}")
        error = RESOURCES_ERROR

    return render_template(request, "resources.html", {
        "member": member,
        "items": items,
        "filters": filters,
        "error": error,
        "quick_cards": list(QuickCard),
        "file_types": [t for t in FileType if t != FileType.OTHER],
        "category_tags": [c for c in CategoryTag if c != CategoryTag.UNKNOWN],
        "program_slugs": content.PROGRAM_SLUGS,
    })
