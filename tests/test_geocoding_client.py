import httpx
import pytest

from voitheia.exceptions import GeocodingUnavailable
from voitheia.models.domain import ConfidenceLevel, Coordinate
from voitheia.services.geocoding import GeocodingClient
from voitheia.services.geocoding.client import confidence_for

PLACE = {
    "lat": "52.5162746",
    "lon": "13.3777041",
    "place_rank": 30,
    "display_name": "Pariser Platz 1, Mitte, Berlin, 10117, Deutschland",
}


def _client(handler, max_retries: int = 2) -> GeocodingClient:
    return GeocodingClient(
        base_url="https://geocoder.test/",
        user_agent="voitheia-tests",
        timeout=1.0,
        max_retries=max_retries,
        backoff_seconds=0,
        transport=httpx.MockTransport(handler),
    )


def _geocode(client: GeocodingClient):
    return client.geocode(street="Pariser Platz 1", city="Berlin", zip_code="10117", country="Germany")


def test_geocode_returns_high_confidence_match():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[PLACE])

    result = _geocode(_client(handler))

    assert result.coordinate == Coordinate(52.5162746, 13.3777041)
    assert result.confidence is ConfidenceLevel.HIGH
    assert result.display_name.startswith("Pariser Platz 1")

    (request,) = seen
    assert request.url.path == "/search"
    assert request.url.params["street"] == "Pariser Platz 1"
    assert request.url.params["postalcode"] == "10117"
    assert request.url.params["format"] == "jsonv2"
    assert request.url.params["limit"] == "1"
    assert request.headers["User-Agent"] == "voitheia-tests"


def test_geocode_without_match_returns_none():
    assert _geocode(_client(lambda request: httpx.Response(200, json=[]))) is None


def test_server_errors_are_retried():
    responses = iter([httpx.Response(503), httpx.Response(200, json=[PLACE])])

    result = _geocode(_client(lambda request: next(responses)))

    assert result.confidence is ConfidenceLevel.HIGH


def test_persistent_server_errors_give_up_after_max_retries():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503)

    with pytest.raises(GeocodingUnavailable):
        _geocode(_client(handler, max_retries=2))
    assert len(calls) == 3


def test_client_errors_are_not_retried():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403)

    with pytest.raises(GeocodingUnavailable):
        _geocode(_client(handler))
    assert len(calls) == 1


def test_connection_errors_are_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=[PLACE])

    assert _geocode(_client(handler)) is not None
    assert len(attempts) == 2


def test_unreadable_response_is_reported():
    with pytest.raises(GeocodingUnavailable):
        _geocode(_client(lambda request: httpx.Response(200, json={"error": "nope"})))


@pytest.mark.parametrize(
    "place, expected",
    [
        ({"place_rank": 30}, ConfidenceLevel.HIGH),
        ({"place_rank": "26"}, ConfidenceLevel.HIGH),
        ({"place_rank": 25}, ConfidenceLevel.MEDIUM),
        ({"place_rank": 16}, ConfidenceLevel.MEDIUM),
        ({"place_rank": 12}, ConfidenceLevel.LOW),
        ({"place_rank": None}, ConfidenceLevel.LOW),
        ({}, ConfidenceLevel.LOW),
    ],
)
def test_confidence_from_place_rank(place, expected):
    assert confidence_for(place) is expected
