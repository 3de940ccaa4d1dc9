from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from voitheia.data.requests_repository import InMemoryRequestRepository
from voitheia.data.users_repository import InMemoryUserRepository
from voitheia.exceptions import InvalidArgument, RequestNotFound, UserNotFound
from voitheia.models.domain import Coordinate, RequestStatus, UserProfile
from voitheia.services.requests import service as request_service

NOW = datetime(2026, 4, 10, 12, 0, tzinfo=timezone.utc)


def _user(uid: int, lat: float = 52.52, lon: float = 13.405) -> UserProfile:
    return UserProfile(
        id=uid,
        email=f"user{uid}@example.org",
        first_name="Ada",
        last_name=f"User{uid}",
        street="Unter den Linden 1",
        city="Berlin",
        zip_code="10117",
        country="Germany",
        location=Coordinate(lat, lon),
    )


@pytest.fixture
def users() -> InMemoryUserRepository:
    return InMemoryUserRepository([_user(1), _user(2, 52.50, 13.40)])


@pytest.fixture
def requests() -> InMemoryRequestRepository:
    return InMemoryRequestRepository()


def test_create_request_copies_requestor_location(requests, users):
    record = request_service.create_request(
        requests, users, requestor_id=1, topic="  Groceries ", description="Milk and bread", now=NOW
    )

    assert record.id == 1
    assert record.topic == "Groceries"
    assert record.status is RequestStatus.OPEN
    assert record.created_on == NOW
    assert record.location == Coordinate(52.52, 13.405)


def test_create_request_with_explicit_location(requests, users):
    spot = Coordinate(52.53, 13.41)

    record = request_service.create_request(
        requests, users, requestor_id=1, topic="Dog walk", description="", location=spot
    )

    assert record.location == spot
    assert record.created_on.tzinfo is not None


def test_profile_moves_do_not_move_existing_requests(requests, users):
    record = request_service.create_request(requests, users, requestor_id=1, topic="Help", description="")

    users.update(replace(users.get(1), location=Coordinate(48.137, 11.575)))

    assert requests.get(record.id).location == Coordinate(52.52, 13.405)


def test_create_request_for_unknown_user_fails(requests, users):
    with pytest.raises(UserNotFound):
        request_service.create_request(requests, users, requestor_id=99, topic="Help", description="")


def test_create_request_requires_a_topic(requests, users):
    with pytest.raises(InvalidArgument):
        request_service.create_request(requests, users, requestor_id=1, topic="   ", description="")


def test_get_and_delete_missing_request(requests):
    with pytest.raises(RequestNotFound):
        request_service.get_request(requests, 5)
    with pytest.raises(RequestNotFound):
        request_service.delete_request(requests, 5)


def test_change_status_accepts_and_closes(requests, users):
    record = request_service.create_request(requests, users, requestor_id=1, topic="Help", description="")

    pending = request_service.change_status(requests, record.id, RequestStatus.PENDING, acceptor_id=2, users=users)
    closed = request_service.change_status(requests, record.id, RequestStatus.CLOSED)

    assert pending.acceptor_id == 2
    assert closed.status is RequestStatus.CLOSED
    assert requests.get(record.id).status is RequestStatus.CLOSED


def test_change_status_rejects_unknown_acceptor(requests, users):
    record = request_service.create_request(requests, users, requestor_id=1, topic="Help", description="")

    with pytest.raises(UserNotFound):
        request_service.change_status(requests, record.id, RequestStatus.PENDING, acceptor_id=42, users=users)
    assert requests.get(record.id).status is RequestStatus.OPEN


def test_expire_stale_requests_only_touches_old_outstanding_requests(requests, users):
    old = NOW - timedelta(days=5)
    old_open = request_service.create_request(requests, users, requestor_id=1, topic="a", description="", now=old)
    old_pending = request_service.create_request(requests, users, requestor_id=1, topic="b", description="", now=old)
    old_closed = request_service.create_request(requests, users, requestor_id=1, topic="c", description="", now=old)
    fresh = request_service.create_request(requests, users, requestor_id=1, topic="d", description="", now=NOW)
    request_service.change_status(requests, old_pending.id, RequestStatus.PENDING, acceptor_id=2)
    request_service.change_status(requests, old_closed.id, RequestStatus.CLOSED)

    expired = request_service.expire_stale_requests(requests, timedelta(hours=72), now=NOW)

    assert sorted(record.id for record in expired) == [old_open.id, old_pending.id]
    assert requests.get(old_open.id).status is RequestStatus.TIMEOUT
    assert requests.get(old_pending.id).status is RequestStatus.TIMEOUT
    assert requests.get(old_closed.id).status is RequestStatus.CLOSED
    assert requests.get(fresh.id).status is RequestStatus.OPEN


def test_close_requests_for_user(requests, users):
    first = request_service.create_request(requests, users, requestor_id=1, topic="a", description="")
    second = request_service.create_request(requests, users, requestor_id=1, topic="b", description="")
    other = request_service.create_request(requests, users, requestor_id=2, topic="c", description="")
    request_service.change_status(requests, second.id, RequestStatus.CLOSED)

    closed = request_service.close_requests_for_user(requests, 1)

    assert closed == 1
    assert requests.get(first.id).status is RequestStatus.CLOSED
    assert requests.get(other.id).status is RequestStatus.OPEN
