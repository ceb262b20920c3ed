"""Mapping between 1-based record numbers and fetched batches.

Records are addressed by their position in the collection's timestamp-descending
order. A request for record ``r`` fetches the whole batch containing it so that
the page can step through neighbouring records without another round trip.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from jinja2.utils import htmlsafe_json_dumps

from firescan.models import DocumentRecord, PageView


@dataclass(frozen=True)
class BatchWindow:
    offset: int
    limit: int
    index_in_batch: int

    @property
    def batch_start(self) -> int:
        return self.offset + 1


def locate_record(record: int, batch_size: int) -> BatchWindow:
    if record < 1:
        raise ValueError(f"record number must be >= 1, got {record}")
    if batch_size < 1:
        raise ValueError(f"batch size must be >= 1, got {batch_size}")

    offset = ((record - 1) // batch_size) * batch_size
    return BatchWindow(offset=offset, limit=batch_size, index_in_batch=(record - 1) - offset)


def parse_record_number(raw: str | None) -> int:
    """Return the requested record number; anything but a positive integer means 1."""

    if not raw or not raw.isascii():
        return 1
    # One optional sign, then digits only; no whitespace or underscores.
    digits = raw[1:] if raw[0] in "+-" else raw
    if not digits.isdigit():
        return 1
    n = int(raw)
    return n if n > 0 else 1


def build_page_view(
    *,
    collection: str,
    record: int,
    total: int,
    window: BatchWindow,
    docs: Sequence[DocumentRecord],
) -> PageView:
    # Out-of-range records show a blank record rather than an error.
    if 0 <= window.index_in_batch < len(docs):
        current = docs[window.index_in_batch]
    else:
        current = DocumentRecord.blank()

    return PageView(
        collection=collection,
        page=record,
        total=total,
        has_prev=record > 1,
        has_next=record < total,
        docs=list(docs),
        batch_start=window.batch_start,
        current=current,
        docs_json=htmlsafe_json_dumps([d.to_payload() for d in docs]),
    )
