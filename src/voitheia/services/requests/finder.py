"""Proximity search over open help requests."""

from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Sequence

from ...data.requests_repository import RequestRepository
from ...exceptions import InvalidArgument, StorageUnavailable
from ...models.domain import Coordinate, ProximityQuery, RequestRecord, RequestStatus
from ..geospatial import BoundingBox, bounding_box, haversine_m

logger = logging.getLogger(__name__)

FETCH_WORKERS = 8

# Shared by every finder; a fetch that outlives its timeout keeps its worker until storage answers.
_fetch_executor = ThreadPoolExecutor(max_workers=FETCH_WORKERS, thread_name_prefix="request-fetch")


@dataclass(frozen=True, slots=True)
class RankedRequest:
    record: RequestRecord
    distance_m: float


def _validate(center: Coordinate, radius_m: float, max_results: int) -> None:
    if not isinstance(center, Coordinate):
        raise InvalidArgument(f"center must be a Coordinate, got {type(center).__name__}")
    if isinstance(radius_m, bool) or not isinstance(radius_m, (int, float)):
        raise InvalidArgument(f"radius must be a number, got {radius_m!r}")
    if not math.isfinite(radius_m) or radius_m <= 0:
        raise InvalidArgument(f"radius must be a positive number of meters, got {radius_m}")
    if isinstance(max_results, bool) or not isinstance(max_results, int):
        raise InvalidArgument(f"max_results must be an integer, got {max_results!r}")
    if max_results <= 0:
        raise InvalidArgument(f"max_results must be positive, got {max_results}")


class ProximityRequestFinder:
    """Selects the OPEN requests closest to a point.

    The finder keeps no state besides its storage handle, so one instance can
    serve concurrent callers. Each call reads a snapshot of the store; a
    request may change status after it was fetched.
    """

    def __init__(self, repository: RequestRepository) -> None:
        self.repository = repository

    def _fetch(self, bounds: BoundingBox | None, timeout: float | None) -> Sequence[RequestRecord]:
        if timeout is None:
            return self._fetch_now(bounds)

        future = _fetch_executor.submit(self._fetch_now, bounds)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as exc:
            future.cancel()
            raise StorageUnavailable(f"Request storage did not answer within {timeout:g}s") from exc

    def _fetch_now(self, bounds: BoundingBox | None) -> Sequence[RequestRecord]:
        try:
            return self.repository.fetch_open_requests(bounds)
        except StorageUnavailable:
            raise
        except (ConnectionError, TimeoutError) as exc:
            raise StorageUnavailable(f"Request storage fetch failed: {exc}") from exc

    def find_nearby_ranked(
        self,
        center: Coordinate,
        radius_m: float,
        max_results: int,
        *,
        timeout: float | None = None,
    ) -> list[RankedRequest]:
        """Return up to ``max_results`` OPEN requests within ``radius_m`` with their distances.

        Ordered by distance, then creation time, then id. A request exactly
        ``radius_m`` away is included.
        """
        _validate(center, radius_m, max_results)

        candidates = self._fetch(bounding_box(center, radius_m), timeout)

        ranked: list[RankedRequest] = []
        for record in candidates:
            match record.status:
                case RequestStatus.OPEN:
                    pass
                case RequestStatus.PENDING | RequestStatus.CLOSED | RequestStatus.TIMEOUT:
                    continue
            distance = haversine_m(center, record.location)
            if distance <= radius_m:
                ranked.append(RankedRequest(record=record, distance_m=distance))

        ranked.sort(key=lambda item: (item.distance_m, item.record.created_on, item.record.id))
        logger.debug(
            f"Proximity search at ({center.latitude:.5f}, {center.longitude:.5f}) r={radius_m}m: "
            f"{len(candidates)} candidates, {len(ranked)} in range"
        )
        return ranked[:max_results]

    def find_nearby(
        self,
        center: Coordinate,
        radius_m: float,
        max_results: int,
        *,
        timeout: float | None = None,
    ) -> list[RequestRecord]:
        ranked = self.find_nearby_ranked(center, radius_m, max_results, timeout=timeout)
        return [item.record for item in ranked]

    def find(self, query: ProximityQuery, *, timeout: float | None = None) -> list[RequestRecord]:
        return self.find_nearby(query.center, query.radius_m, query.max_results, timeout=timeout)
