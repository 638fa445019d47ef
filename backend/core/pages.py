"""Jinja2 page rendering shared by the routers and the error handlers."""

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(_TEMPLATE_DIR))

SITE_NAME = "Royal Wedding by Ully Sjah"


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    ctx = {"site_name": SITE_NAME, "error": None, "success": None}
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")
