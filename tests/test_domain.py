import dataclasses

import pytest

from voitheia.exceptions import InvalidArgument
from voitheia.models.domain import Coordinate, ProximityQuery, RequestStatus


@pytest.mark.parametrize("lat, lon", [(90, 180), (-90, -180), (0, 0), (52.52, 13.405)])
def test_coordinate_accepts_values_in_range(lat, lon):
    coordinate = Coordinate(lat, lon)

    assert (coordinate.latitude, coordinate.longitude) == (lat, lon)


@pytest.mark.parametrize(
    "lat, lon",
    [
        (90.0001, 0),
        (-91, 0),
        (0, 180.5),
        (0, -181),
        (float("nan"), 0),
        (0, float("inf")),
        ("52.5", 13.4),
        (None, 13.4),
        (True, 13.4),
    ],
)
def test_coordinate_rejects_invalid_values(lat, lon):
    with pytest.raises(InvalidArgument):
        Coordinate(lat, lon)


def test_coordinate_is_immutable():
    coordinate = Coordinate(1.0, 2.0)

    with pytest.raises(dataclasses.FrozenInstanceError):
        coordinate.latitude = 3.0


def test_proximity_query_defaults():
    query = ProximityQuery(center=Coordinate(52.52, 13.405))

    assert query.max_results == 10
    assert query.radius_m == 2000


def test_status_is_stored_by_name():
    assert [status.value for status in RequestStatus] == ["OPEN", "PENDING", "CLOSED", "TIMEOUT"]
    assert RequestStatus("PENDING") is RequestStatus.PENDING
