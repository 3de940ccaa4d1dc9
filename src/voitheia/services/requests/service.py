"""Help request orchestration: creation, lookup, status changes and expiry."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from ...data.requests_repository import RequestRepository
from ...data.users_repository import UserRepository
from ...exceptions import InvalidArgument, RequestNotFound, UserNotFound
from ...models.domain import Coordinate, RequestDraft, RequestRecord, RequestStatus
from .lifecycle import is_terminal, transition

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_request(
    requests: RequestRepository,
    users: UserRepository,
    *,
    requestor_id: int,
    topic: str,
    description: str,
    location: Optional[Coordinate] = None,
    now: Optional[datetime] = None,
) -> RequestRecord:
    """Store a new OPEN request.

    The request keeps its own location. When none is given the requestor's
    profile location at this moment is copied, so later profile edits do not
    move existing requests.
    """
    topic = topic.strip()
    if not topic:
        raise InvalidArgument("topic must not be empty")

    requestor = users.get(requestor_id)
    if requestor is None:
        raise UserNotFound(requestor_id)

    draft = RequestDraft(
        requestor_id=requestor.id,
        topic=topic,
        description=description.strip(),
        location=location or requestor.location,
        created_on=now or _utcnow(),
    )
    record = requests.add(draft)
    logger.info(f"Created request {record.id} for user {requestor.id}")
    return record


def get_request(requests: RequestRepository, request_id: int) -> RequestRecord:
    record = requests.get(request_id)
    if record is None:
        raise RequestNotFound(request_id)
    return record


def delete_request(requests: RequestRepository, request_id: int) -> None:
    if not requests.delete(request_id):
        raise RequestNotFound(request_id)
    logger.info(f"Deleted request {request_id}")


def change_status(
    requests: RequestRepository,
    request_id: int,
    status: RequestStatus,
    *,
    acceptor_id: Optional[int] = None,
    users: Optional[UserRepository] = None,
) -> RequestRecord:
    record = get_request(requests, request_id)
    if acceptor_id is not None and users is not None and users.get(acceptor_id) is None:
        raise UserNotFound(acceptor_id)

    updated = transition(record, status, acceptor_id=acceptor_id)
    try:
        stored = requests.update(updated)
    except KeyError as exc:
        raise RequestNotFound(request_id) from exc
    logger.info(f"Request {request_id}: {record.status.value} -> {stored.status.value}")
    return stored


def expire_stale_requests(
    requests: RequestRepository,
    max_age: timedelta,
    *,
    now: Optional[datetime] = None,
) -> list[RequestRecord]:
    """Move OPEN and PENDING requests older than ``max_age`` to TIMEOUT."""
    cutoff = (now or _utcnow()) - max_age
    stale = requests.list_created_before(cutoff, (RequestStatus.OPEN, RequestStatus.PENDING))

    expired: list[RequestRecord] = []
    for record in stale:
        try:
            expired.append(requests.update(transition(record, RequestStatus.TIMEOUT)))
        except KeyError:
            logger.warning(f"Request {record.id} disappeared before it could be expired, skipping")
    if expired:
        logger.info(f"Expired {len(expired)} request(s) created before {cutoff.isoformat()}")
    return expired


def close_requests_for_user(requests: RequestRepository, user_id: int) -> int:
    """Close every non-terminal request a user created or accepted.

    Returns how many were closed.
    """
    affected = {record.id: record for record in requests.list_for_requestor(user_id)}
    affected.update((record.id, record) for record in requests.list_for_acceptor(user_id))

    closed = 0
    for record in affected.values():
        if is_terminal(record.status):
            continue
        requests.update(transition(record, RequestStatus.CLOSED))
        closed += 1
    return closed
