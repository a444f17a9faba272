"""Shared Jinja2 templates for pages and email bodies."""
from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def render(name: str, **context) -> str:
    """Render a template outside a request, e.g. an email body."""
    return templates.get_template(name).render(**context)
