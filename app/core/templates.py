"""Shared Jinja2 templates and display filters."""
from datetime import datetime
from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from app.core.clock import to_display
from app.core.config import settings

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def format_when(value: datetime) -> str:
    """Render a stored UTC time like "Oct 19, 7:30 PM" in the display timezone."""
    local = to_display(value)
    hour = local.hour % 12 or 12
    return f"{local:%b} {local.day}, {hour}:{local:%M %p}"


templates.env.filters["when"] = format_when
templates.env.globals["app_name"] = settings.app_name


def pop_notices(request: Request) -> list[dict]:
    """Take the queued notices out of the session."""
    return request.session.pop("notices", [])


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    """Render a page with the signed-in user and any queued notices."""
    page = {
        "user_id": request.session.get("user_id"),
        "notices": pop_notices(request),
        "path": request.url.path,
    }
    page.update(context or {})
    return templates.TemplateResponse(request, name, page, status_code=status_code)
