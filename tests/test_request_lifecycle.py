from datetime import datetime, timezone

import pytest

from voitheia.exceptions import InvalidArgument, InvalidStatusTransition
from voitheia.models.domain import Coordinate, RequestRecord, RequestStatus
from voitheia.services.requests.lifecycle import allowed_targets, is_terminal, transition


def _record(status: RequestStatus = RequestStatus.OPEN, acceptor_id=None) -> RequestRecord:
    return RequestRecord(
        id=1,
        requestor_id=10,
        acceptor_id=acceptor_id,
        topic="Pharmacy run",
        description="",
        status=status,
        created_on=datetime(2026, 4, 1, tzinfo=timezone.utc),
        location=Coordinate(52.52, 13.405),
    )


def test_accepting_an_open_request_makes_it_pending():
    updated = transition(_record(), RequestStatus.PENDING, acceptor_id=20)

    assert updated.status is RequestStatus.PENDING
    assert updated.acceptor_id == 20


def test_pending_request_can_be_closed_and_keeps_its_acceptor():
    pending = transition(_record(), RequestStatus.PENDING, acceptor_id=20)

    closed = transition(pending, RequestStatus.CLOSED)

    assert closed.status is RequestStatus.CLOSED
    assert closed.acceptor_id == 20


@pytest.mark.parametrize("start", [RequestStatus.OPEN, RequestStatus.PENDING])
def test_outstanding_requests_can_time_out(start):
    assert transition(_record(start, acceptor_id=20), RequestStatus.TIMEOUT).status is RequestStatus.TIMEOUT


def test_pending_requires_an_acceptor():
    with pytest.raises(InvalidArgument):
        transition(_record(), RequestStatus.PENDING)


def test_requestor_cannot_accept_their_own_request():
    with pytest.raises(InvalidArgument):
        transition(_record(), RequestStatus.PENDING, acceptor_id=10)


@pytest.mark.parametrize(
    "start, target",
    [
        (RequestStatus.OPEN, RequestStatus.OPEN),
        (RequestStatus.PENDING, RequestStatus.OPEN),
        (RequestStatus.PENDING, RequestStatus.PENDING),
        (RequestStatus.CLOSED, RequestStatus.OPEN),
        (RequestStatus.CLOSED, RequestStatus.PENDING),
        (RequestStatus.TIMEOUT, RequestStatus.OPEN),
        (RequestStatus.TIMEOUT, RequestStatus.CLOSED),
    ],
)
def test_illegal_transitions_are_rejected(start, target):
    with pytest.raises(InvalidStatusTransition):
        transition(_record(start, acceptor_id=20), target, acceptor_id=30)


def test_terminal_states():
    assert is_terminal(RequestStatus.CLOSED)
    assert is_terminal(RequestStatus.TIMEOUT)
    assert not is_terminal(RequestStatus.OPEN)
    assert not is_terminal(RequestStatus.PENDING)


def test_every_status_has_a_transition_table_entry():
    for status in RequestStatus:
        assert RequestStatus.OPEN not in allowed_targets(status)
