"""Request status state machine: OPEN -> PENDING -> {CLOSED, TIMEOUT}."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ...exceptions import InvalidArgument, InvalidStatusTransition
from ...models.domain import RequestRecord, RequestStatus


def allowed_targets(current: RequestStatus) -> frozenset[RequestStatus]:
    match current:
        case RequestStatus.OPEN:
            return frozenset({RequestStatus.PENDING, RequestStatus.CLOSED, RequestStatus.TIMEOUT})
        case RequestStatus.PENDING:
            return frozenset({RequestStatus.CLOSED, RequestStatus.TIMEOUT})
        case RequestStatus.CLOSED | RequestStatus.TIMEOUT:
            return frozenset()


def is_terminal(status: RequestStatus) -> bool:
    return not allowed_targets(status)


def transition(
    record: RequestRecord,
    target: RequestStatus,
    *,
    acceptor_id: Optional[int] = None,
) -> RequestRecord:
    """Return a copy of ``record`` moved to ``target``.

    Moving to PENDING requires an acceptor, who cannot be the requestor.
    """
    if target not in allowed_targets(record.status):
        raise InvalidStatusTransition(record.status.value, target.value)

    match target:
        case RequestStatus.PENDING:
            if acceptor_id is None:
                raise InvalidArgument("An acceptor is required to move a request to PENDING.")
            if acceptor_id == record.requestor_id:
                raise InvalidArgument("A requestor cannot accept their own request.")
            return replace(record, status=target, acceptor_id=acceptor_id)
        case RequestStatus.CLOSED | RequestStatus.TIMEOUT:
            return replace(record, status=target)
        case RequestStatus.OPEN:
            raise InvalidStatusTransition(record.status.value, target.value)
