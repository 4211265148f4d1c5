from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fastapi import Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from jinja2 import DictLoader, Environment, TemplateError, select_autoescape

from lfsgate_core.db.locks import LockRow
from lfsgate_core.db.objects import ObjectRow
from lfsgate_core.db.users import UserRow
from lfsgate_core.mgmt.assets import read_asset_as_string

FRAME_TEMPLATE = "body.html"
CONTENT_TEMPLATE = "content"


class TemplateRenderError(Exception):
    """A management page template could not be loaded or parsed."""


@dataclass(frozen=True)
class PageData:
    """View model for one page render; only the page's own payload is set."""

    name: str
    config: dict[str, Any] | None = None
    users: list[UserRow] = field(default_factory=list)
    objects: list[ObjectRow] = field(default_factory=list)
    locks: list[LockRow] = field(default_factory=list)
    oid: str = ""


def _load_templates(template_name: str) -> Jinja2Templates:
    # Loaded per render: edits to the bundled templates show up without a restart.
    try:
        frame = read_asset_as_string("templates", FRAME_TEMPLATE)
        content = read_asset_as_string("templates", template_name)
    except OSError as e:
        raise TemplateRenderError(f"template not found: {e}") from e

    env = Environment(
        loader=DictLoader({FRAME_TEMPLATE: frame, CONTENT_TEMPLATE: content}),
        autoescape=select_autoescape(default=True),
    )
    try:
        # Parse both halves up front so a broken page never streams a partial frame.
        env.get_template(CONTENT_TEMPLATE)
        env.get_template(FRAME_TEMPLATE)
    except TemplateError as e:
        raise TemplateRenderError(f"template {template_name!r} failed to parse: {e}") from e

    return Jinja2Templates(env=env)


def render_page(request: Request, template_name: str, page: PageData) -> HTMLResponse:
    """Render ``template_name`` inside the shared frame."""

    templates = _load_templates(template_name)
    try:
        return templates.TemplateResponse(request, FRAME_TEMPLATE, {"page": page})
    except TemplateError as e:
        raise TemplateRenderError(f"template {template_name!r} failed to render: {e}") from e
