from __future__ import annotations

import base64
import json
import logging
from datetime import UTC, datetime
from typing import Any, Protocol

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore

from firescan.config import ViewerConfig
from firescan.errors import ClientInitError, QueryError
from firescan.models import DocumentRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FIELD = "timestamp"
COUNT_ALIAS = "count"


class DocumentGateway(Protocol):
    def count(self, collection: str) -> int: ...

    def fetch(self, collection: str, offset: int, limit: int) -> list[DocumentRecord]: ...


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, firestore.DocumentReference):
        return value.path
    if isinstance(value, firestore.GeoPoint):
        return {"latitude": value.latitude, "longitude": value.longitude}
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    raise TypeError(f"unsupported value of type {type(value).__name__}")


def document_to_json(data: dict[str, Any]) -> str:
    try:
        return json.dumps(
            data,
            indent=2,
            sort_keys=True,
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as exc:
        return f"<error: {exc}>"


def format_timestamp(value: Any) -> str:
    """RFC 3339 (UTC, whole seconds) for datetimes; empty for anything else."""

    if not isinstance(value, datetime):
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


def snapshot_to_record(snapshot: Any) -> DocumentRecord:
    data = snapshot.to_dict() or {}
    return DocumentRecord(
        id=snapshot.id,
        json=document_to_json(data),
        timestamp=format_timestamp(data.get(TIMESTAMP_FIELD)),
    )


class FirestoreGateway:
    """Read-only queries against a Firestore client.

    The client is shared by all requests; google-cloud-firestore clients are safe
    for concurrent use.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    def count(self, collection: str) -> int:
        """Return the number of documents using a server-side count aggregation."""

        try:
            results = self._client.collection(collection).count(alias=COUNT_ALIAS).get()
        except (GoogleAPIError, ValueError) as exc:
            raise QueryError(f"counting {collection}: {exc}") from exc

        for result in results:
            for aggregation in result:
                if aggregation.alias == COUNT_ALIAS:
                    return int(aggregation.value)
        raise QueryError(f"counting {collection}: count field missing from aggregation result")

    def fetch(self, collection: str, offset: int, limit: int) -> list[DocumentRecord]:
        """Return up to ``limit`` documents after skipping ``offset``, newest first.

        Offset pagination makes the backend read and discard ``offset`` documents,
        so cost grows with the record number.
        """

        logger.debug("fetching %s offset=%d limit=%d", collection, offset, limit)
        try:
            query = (
                self._client.collection(collection)
                .order_by(TIMESTAMP_FIELD, direction=firestore.Query.DESCENDING)
                .offset(offset)
                .limit(limit)
            )
            return [snapshot_to_record(snap) for snap in query.stream()]
        except (GoogleAPIError, ValueError) as exc:
            raise QueryError(f"fetching {collection}: {exc}") from exc

    def close(self) -> None:
        self._client.close()


def create_client(config: ViewerConfig) -> firestore.Client:
    try:
        if config.credentials_file:
            return firestore.Client.from_service_account_json(
                config.credentials_file, project=config.project_id
            )
        return firestore.Client(project=config.project_id)
    except (OSError, ValueError, GoogleAuthError, GoogleAPIError) as exc:
        raise ClientInitError(f"creating Firestore client for {config.project_id}: {exc}") from exc
