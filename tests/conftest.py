from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import pytest
from fastapi.templating import Jinja2Templates

from firescan.app import create_app
from firescan.config import ViewerConfig
from firescan.context import ViewerContext
from firescan.errors import QueryError
from firescan.models import DocumentRecord
from firescan.ui.rendering import DEFAULT_TEMPLATES_DIR, load_templates


def make_records(prefix: str, n: int) -> list[DocumentRecord]:
    return [
        DocumentRecord(
            id=f"{prefix}-{i:03d}",
            json=json.dumps({"n": i}, indent=2),
            timestamp=f"2024-01-{(i % 28) + 1:02d}T00:00:00Z",
        )
        for i in range(1, n + 1)
    ]


class FakeGateway:
    """In-memory stand-in for FirestoreGateway; documents are already ordered."""

    def __init__(
        self,
        docs: dict[str, list[DocumentRecord]] | None = None,
        *,
        count_failures: Iterable[str] = (),
        fetch_failures: Iterable[str] = (),
    ) -> None:
        self.docs = docs or {}
        self.count_failures = set(count_failures)
        self.fetch_failures = set(fetch_failures)
        self.count_calls: list[str] = []
        self.fetch_calls: list[tuple[str, int, int]] = []

    def count(self, collection: str) -> int:
        self.count_calls.append(collection)
        if collection in self.count_failures:
            raise QueryError(f"counting {collection}: permission denied")
        return len(self.docs.get(collection, []))

    def fetch(self, collection: str, offset: int, limit: int) -> list[DocumentRecord]:
        self.fetch_calls.append((collection, offset, limit))
        if collection in self.fetch_failures:
            raise QueryError(f"fetching {collection}: backend unavailable")
        return self.docs.get(collection, [])[offset : offset + limit]


@pytest.fixture(scope="session")
def templates() -> Jinja2Templates:
    return load_templates(DEFAULT_TEMPLATES_DIR)


@pytest.fixture
def make_app(templates: Jinja2Templates):
    def _make(gateway: Any, **config: Any):
        raw: dict[str, Any] = {"project_id": "test-project"}
        raw.update(config)
        ctx = ViewerContext(
            config=ViewerConfig.model_validate(raw),
            gateway=gateway,
            templates=templates,
        )
        return create_app(ctx)

    return _make
