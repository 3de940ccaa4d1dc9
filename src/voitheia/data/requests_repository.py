"""Storage for help requests: an in-process store and a Supabase-backed table."""

from __future__ import annotations

import itertools
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Iterator, Protocol

import httpx
from postgrest.exceptions import APIError

from ..config import settings
from ..exceptions import StorageUnavailable
from ..models.domain import Coordinate, RequestDraft, RequestRecord, RequestStatus
from ..services.geospatial import BoundingBox

logger = logging.getLogger(__name__)


class RequestRepository(Protocol):
    def fetch_open_requests(self, bounds: BoundingBox | None = None) -> list[RequestRecord]: ...

    def get(self, request_id: int) -> RequestRecord | None: ...

    def add(self, draft: RequestDraft) -> RequestRecord: ...

    def update(self, record: RequestRecord) -> RequestRecord: ...

    def delete(self, request_id: int) -> bool: ...

    def list_for_requestor(self, requestor_id: int) -> list[RequestRecord]: ...

    def list_for_acceptor(self, acceptor_id: int) -> list[RequestRecord]: ...

    def list_created_before(
        self, cutoff: datetime, statuses: Iterable[RequestStatus]
    ) -> list[RequestRecord]: ...


class InMemoryRequestRepository:
    """Thread-safe dictionary store used when no database is configured."""

    def __init__(self, records: Iterable[RequestRecord] = ()) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, RequestRecord] = {record.id: record for record in records}
        start = max(self._records, default=0) + 1
        self._ids = itertools.count(start)

    def fetch_open_requests(self, bounds: BoundingBox | None = None) -> list[RequestRecord]:
        with self._lock:
            records = list(self._records.values())
        return [
            record
            for record in records
            if record.status is RequestStatus.OPEN and (bounds is None or bounds.contains(record.location))
        ]

    def get(self, request_id: int) -> RequestRecord | None:
        with self._lock:
            return self._records.get(request_id)

    def add(self, draft: RequestDraft) -> RequestRecord:
        with self._lock:
            record = RequestRecord(
                id=next(self._ids),
                requestor_id=draft.requestor_id,
                acceptor_id=draft.acceptor_id,
                topic=draft.topic,
                description=draft.description,
                status=draft.status,
                created_on=draft.created_on,
                location=draft.location,
            )
            self._records[record.id] = record
        return record

    def update(self, record: RequestRecord) -> RequestRecord:
        with self._lock:
            if record.id not in self._records:
                raise KeyError(record.id)
            self._records[record.id] = record
        return record

    def delete(self, request_id: int) -> bool:
        with self._lock:
            return self._records.pop(request_id, None) is not None

    def list_for_requestor(self, requestor_id: int) -> list[RequestRecord]:
        with self._lock:
            return [record for record in self._records.values() if record.requestor_id == requestor_id]

    def list_for_acceptor(self, acceptor_id: int) -> list[RequestRecord]:
        with self._lock:
            return [record for record in self._records.values() if record.acceptor_id == acceptor_id]

    def list_created_before(
        self, cutoff: datetime, statuses: Iterable[RequestStatus]
    ) -> list[RequestRecord]:
        wanted = set(statuses)
        with self._lock:
            return [
                record
                for record in self._records.values()
                if record.status in wanted and record.created_on < cutoff
            ]


@contextmanager
def _storage_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (APIError, httpx.HTTPError) as exc:
        logger.error(f"Request storage {operation} failed: {exc}")
        raise StorageUnavailable(f"Request storage {operation} failed: {exc}") from exc


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _row_to_record(row: dict[str, Any]) -> RequestRecord:
    acceptor = row.get("acceptor_id")
    return RequestRecord(
        id=int(row["id"]),
        requestor_id=int(row["requestor_id"]),
        acceptor_id=int(acceptor) if acceptor is not None else None,
        topic=row.get("topic") or "",
        description=row.get("description") or "",
        status=RequestStatus(row["status"]),
        created_on=_parse_timestamp(row["created_on"]),
        location=Coordinate(float(row["latitude"]), float(row["longitude"])),
    )


def _draft_to_row(draft: RequestDraft | RequestRecord) -> dict[str, Any]:
    return {
        "requestor_id": draft.requestor_id,
        "acceptor_id": draft.acceptor_id,
        "topic": draft.topic,
        "description": draft.description,
        "status": draft.status.value,
        "created_on": draft.created_on.isoformat(),
        "latitude": draft.location.latitude,
        "longitude": draft.location.longitude,
    }


class SupabaseRequestRepository:
    """Reads and writes the ``requests`` table through the Supabase client."""

    def __init__(self, client: Any, table: str = "requests", page_size: int | None = None) -> None:
        self._client = client
        self._table = table
        self._page_size = page_size or settings.storage_page_size

    def _rows_to_records(self, rows: Iterable[dict[str, Any]]) -> list[RequestRecord]:
        records: list[RequestRecord] = []
        for row in rows:
            try:
                records.append(_row_to_record(row))
            except (KeyError, ValueError, TypeError) as e:
                # Skip invalid rows but continue processing
                logger.warning(f"Skipping invalid request row {row.get('id')!r}: {e}")
        return records

    def _select_all(self, build_query: Callable[[], Any], operation: str) -> list[RequestRecord]:
        # PostgREST caps every response at max-rows, so read in id-ordered batches
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            with _storage_errors(operation):
                response = build_query().order("id").range(start, start + self._page_size - 1).execute()
            batch = response.data or []
            rows.extend(batch)
            # If we got fewer than a full batch, we're done
            if len(batch) < self._page_size:
                break
            start += self._page_size
        return self._rows_to_records(rows)

    def fetch_open_requests(self, bounds: BoundingBox | None = None) -> list[RequestRecord]:
        def build_query() -> Any:
            query = self._client.table(self._table).select("*").eq("status", RequestStatus.OPEN.value)
            if bounds is not None:
                query = (
                    query.gte("latitude", bounds.min_latitude)
                    .lte("latitude", bounds.max_latitude)
                    .gte("longitude", bounds.min_longitude)
                    .lte("longitude", bounds.max_longitude)
                )
            return query

        return self._select_all(build_query, "fetch")

    def get(self, request_id: int) -> RequestRecord | None:
        with _storage_errors("get"):
            response = self._client.table(self._table).select("*").eq("id", request_id).limit(1).execute()
        records = self._rows_to_records(response.data or [])
        return records[0] if records else None

    def add(self, draft: RequestDraft) -> RequestRecord:
        with _storage_errors("insert"):
            response = self._client.table(self._table).insert(_draft_to_row(draft)).execute()
        if not response.data:
            raise StorageUnavailable("Request storage insert returned no row.")
        return _row_to_record(response.data[0])

    def update(self, record: RequestRecord) -> RequestRecord:
        row = _draft_to_row(record)
        with _storage_errors("update"):
            response = self._client.table(self._table).update(row).eq("id", record.id).execute()
        if not response.data:
            raise KeyError(record.id)
        return _row_to_record(response.data[0])

    def delete(self, request_id: int) -> bool:
        with _storage_errors("delete"):
            response = self._client.table(self._table).delete().eq("id", request_id).execute()
        return bool(response.data)

    def list_for_requestor(self, requestor_id: int) -> list[RequestRecord]:
        return self._select_all(
            lambda: self._client.table(self._table).select("*").eq("requestor_id", requestor_id), "list"
        )

    def list_for_acceptor(self, acceptor_id: int) -> list[RequestRecord]:
        return self._select_all(
            lambda: self._client.table(self._table).select("*").eq("acceptor_id", acceptor_id), "list"
        )

    def list_created_before(
        self, cutoff: datetime, statuses: Iterable[RequestStatus]
    ) -> list[RequestRecord]:
        status_values = [status.value for status in statuses]
        return self._select_all(
            lambda: self._client.table(self._table)
            .select("*")
            .in_("status", status_values)
            .lt("created_on", cutoff.isoformat()),
            "list",
        )

