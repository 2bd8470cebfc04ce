# =============================================================================
# app/templates.py - Jinja2 Template Rendering
# =============================================================================
# HTML pages live in app/templates/. Every page extends base.html, which
# renders the header (with sign-in state) and footer.
# =============================================================================

from datetime import datetime
from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def format_date(value: str | None) -> str:
    """ISO timestamp -> "Mar 4, 2025" (blank when missing)."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


templates.env.filters["date"] = format_date


def render_template(request: Request, template_name: str, context: dict[str, Any] | None = None, **kwargs: Any):
    """Render template with context"""
    return templates.TemplateResponse(request, template_name, {**(context or {})}, **kwargs)
