from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import jinja2
from fastapi import Request
from fastapi.responses import PlainTextResponse
from fastapi.templating import Jinja2Templates
from starlette.responses import Response

from firescan.errors import TemplateError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATES_DIR = BASE_DIR / "templates"
STATIC_DIR = BASE_DIR / "static"

TEMPLATES_ENV_VAR = "FIRESCAN_TEMPLATES_DIR"
REQUIRED_TEMPLATES = ("index.html", "collection.html")


def resolve_templates_dir(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    raw = (env.get(TEMPLATES_ENV_VAR) or "").strip()
    if raw:
        return Path(raw).expanduser().resolve()
    return DEFAULT_TEMPLATES_DIR


def load_templates(directory: Path) -> Jinja2Templates:
    """Compile every template under ``directory`` once.

    Raises TemplateError when the directory or a required template is missing, or
    when any template fails to parse.
    """

    if not directory.is_dir():
        raise TemplateError(f"template directory not found: {directory}")

    templates = Jinja2Templates(directory=str(directory))
    env = templates.env
    # Templates are read once at startup.
    env.auto_reload = False

    names = set(env.list_templates(extensions=["html"])) | set(REQUIRED_TEMPLATES)
    for name in sorted(names):
        try:
            env.get_template(name)
        except jinja2.TemplateError as exc:
            raise TemplateError(f"failed to parse template {name}: {exc}") from exc

    logger.info("Loaded %d templates from %s", len(names), directory)
    return templates


def render_template(
    request: Request,
    templates: Jinja2Templates,
    name: str,
    context: dict[str, Any],
) -> Response:
    try:
        return templates.TemplateResponse(request, name, context)
    except Exception as exc:
        logger.error("template error (%s): %s", name, exc)
        return PlainTextResponse("internal template error", status_code=500)
