from __future__ import annotations

from dataclasses import dataclass

from markupsafe import Markup

UNKNOWN_COUNT = -1


@dataclass(frozen=True)
class CollectionSummary:
    name: str
    count: int

    @property
    def is_unknown(self) -> bool:
        return self.count == UNKNOWN_COUNT


@dataclass(frozen=True)
class DocumentRecord:
    id: str
    json: str
    timestamp: str = ""

    @classmethod
    def blank(cls) -> DocumentRecord:
        return cls(id="", json="", timestamp="")

    @property
    def is_blank(self) -> bool:
        return not self.id

    def to_payload(self) -> dict[str, str]:
        return {"id": self.id, "json": self.json, "timestamp": self.timestamp}


@dataclass(frozen=True)
class PageView:
    """Everything the collection template needs for one requested record."""

    collection: str
    page: int
    total: int
    has_prev: bool
    has_next: bool
    docs: list[DocumentRecord]
    batch_start: int
    current: DocumentRecord
    docs_json: Markup
