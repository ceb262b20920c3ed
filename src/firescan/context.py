from __future__ import annotations

from dataclasses import dataclass

from fastapi.templating import Jinja2Templates

from firescan.config import ViewerConfig
from firescan.gateway import DocumentGateway


@dataclass(frozen=True)
class ViewerContext:
    """Application-scoped dependencies shared read-only by every request."""

    config: ViewerConfig
    gateway: DocumentGateway
    templates: Jinja2Templates
