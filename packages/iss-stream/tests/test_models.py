from __future__ import annotations

import json
from datetime import datetime

import pytest

from iss_stream.core.exceptions import MalformedEventError, MalformedUpstreamResponse
from iss_stream.core.models import NormalizedEvent

SUCCESS_BODY = {
    "message": "success",
    "timestamp": 1705332000,
    "iss_position": {"latitude": "48.8566", "longitude": "2.3522"},
}


def test_from_upstream_normalizes_success_body() -> None:
    event = NormalizedEvent.from_upstream(SUCCESS_BODY, observed_at="2026-01-15T22:40:00.000Z")

    assert event.source_timestamp == 1705332000
    assert event.latitude == 48.8566
    assert event.longitude == 2.3522
    assert event.observed_at == "2026-01-15T22:40:00.000Z"


def test_from_upstream_generates_iso_observed_at() -> None:
    event = NormalizedEvent.from_upstream(SUCCESS_BODY)

    assert event.observed_at.endswith("Z")
    datetime.fromisoformat(event.observed_at.replace("Z", "+00:00"))
    assert event.observed_at not in {str(value) for value in SUCCESS_BODY.values()}


@pytest.mark.parametrize(
    "payload",
    [
        {"message": "failure"},
        [],
        {"message": "success", "iss_position": {"latitude": "1", "longitude": "2"}},
        {"message": "success", "timestamp": "1705332000", "iss_position": {"latitude": "1", "longitude": "2"}},
        {"message": "success", "timestamp": True, "iss_position": {"latitude": "1", "longitude": "2"}},
        {"message": "success", "timestamp": 1705332000},
        {"message": "success", "timestamp": 1705332000, "iss_position": {"latitude": "abc", "longitude": "2"}},
        {"message": "success", "timestamp": 1705332000, "iss_position": {"latitude": "1"}},
        {"message": "success", "timestamp": 1705332000, "iss_position": {"latitude": "nan", "longitude": "2"}},
        {"message": "success", "timestamp": 1705332000, "iss_position": {"latitude": "1", "longitude": "inf"}},
        {"message": "success", "timestamp": 1705332000, "iss_position": {"latitude": "", "longitude": "2"}},
        {"message": "success", "timestamp": 1705332000, "iss_position": {"latitude": 10**400, "longitude": "2"}},
    ],
)
def test_from_upstream_rejects_malformed_payloads(payload) -> None:
    with pytest.raises(MalformedUpstreamResponse):
        NormalizedEvent.from_upstream(payload)


def test_wire_round_trip_preserves_values() -> None:
    event = NormalizedEvent(
        source_timestamp=1705332000,
        latitude=-51.6123456789,
        longitude=179.99999999,
        observed_at="2026-01-15T22:40:00.000Z",
    )

    decoded = NormalizedEvent.decode(event.encode())

    assert decoded == event
    assert json.loads(event.encode()) == {
        "timestamp": 1705332000,
        "latitude": -51.6123456789,
        "longitude": 179.99999999,
        "eventTime": "2026-01-15T22:40:00.000Z",
    }


def test_from_wire_accepts_integral_coordinates() -> None:
    event = NormalizedEvent.from_wire(
        {"timestamp": 1, "latitude": 10, "longitude": -20, "eventTime": "2026-01-15T22:40:00.000Z"}
    )

    assert event.latitude == 10.0
    assert isinstance(event.latitude, float)


@pytest.mark.parametrize(
    "value",
    [
        b"not-json",
        b"\xff\xfe",
        b"[1, 2]",
        b'{"timestamp": 1, "latitude": 1.0, "longitude": 2.0}',
        b'{"timestamp": "1", "latitude": 1.0, "longitude": 2.0, "eventTime": "t"}',
        b'{"timestamp": 1, "latitude": "1.0", "longitude": 2.0, "eventTime": "t"}',
        b'{"timestamp": 1, "latitude": 1.0, "longitude": 2.0, "eventTime": 5}',
        b'{"timestamp": 1, "latitude": NaN, "longitude": 2.0, "eventTime": "t"}',
        b'{"timestamp": 1, "latitude": 1.0, "longitude": -Infinity, "eventTime": "t"}',
        b'{"timestamp": 1, "latitude": ' + b"9" * 400 + b', "longitude": 2.0, "eventTime": "t"}',
        None,
        "{}",
    ],
)
def test_decode_rejects_payloads_outside_wire_schema(value: object) -> None:
    with pytest.raises(MalformedEventError):
        NormalizedEvent.decode(value)
