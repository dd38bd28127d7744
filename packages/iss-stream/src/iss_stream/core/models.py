from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any

from relaykit.clock import now_utc_iso

from iss_stream.core.exceptions import MalformedEventError, MalformedUpstreamResponse

UPSTREAM_SUCCESS_MARKER = "success"


def _parse_coordinate(value: Any, field: str) -> float:
    # bool is an int subclass and would parse as 0.0 or 1.0
    if value is None or isinstance(value, bool):
        raise MalformedUpstreamResponse(f"upstream coordinate '{field}' is missing")
    try:
        parsed = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise MalformedUpstreamResponse(f"upstream coordinate '{field}' is not numeric: {value!r}") from exc
    if not math.isfinite(parsed):
        raise MalformedUpstreamResponse(f"upstream coordinate '{field}' is not finite: {value!r}")
    return parsed


@dataclass(frozen=True)
class NormalizedEvent:
    """One ISS position reading in canonical form.

    ``source_timestamp`` is the upstream epoch second, ``observed_at`` is the
    local normalization time rendered as ISO-8601 UTC.
    """

    source_timestamp: int
    latitude: float
    longitude: float
    observed_at: str

    @classmethod
    def from_upstream(cls, payload: Any, observed_at: str | None = None) -> NormalizedEvent:
        if not isinstance(payload, dict):
            raise MalformedUpstreamResponse("upstream payload is not a json object")
        if payload.get("message") != UPSTREAM_SUCCESS_MARKER:
            raise MalformedUpstreamResponse(f"upstream status is not success: {payload.get('message')!r}")
        timestamp = payload.get("timestamp")
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise MalformedUpstreamResponse(f"upstream timestamp is not an integer: {timestamp!r}")
        position = payload.get("iss_position")
        if not isinstance(position, dict):
            raise MalformedUpstreamResponse("upstream payload missing object field 'iss_position'")
        return cls(
            source_timestamp=timestamp,
            latitude=_parse_coordinate(position.get("latitude"), "latitude"),
            longitude=_parse_coordinate(position.get("longitude"), "longitude"),
            observed_at=observed_at or now_utc_iso(),
        )

    def to_wire(self) -> dict[str, Any]:
        return {
            "timestamp": self.source_timestamp,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "eventTime": self.observed_at,
        }

    def encode(self) -> bytes:
        return json.dumps(self.to_wire()).encode("utf-8")

    @classmethod
    def from_wire(cls, data: Any) -> NormalizedEvent:
        if not isinstance(data, dict):
            raise MalformedEventError("event payload is not a json object")
        missing = [field for field in ("timestamp", "latitude", "longitude", "eventTime") if field not in data]
        if missing:
            raise MalformedEventError(f"event payload missing fields: {', '.join(missing)}")
        timestamp = data["timestamp"]
        if not isinstance(timestamp, int) or isinstance(timestamp, bool):
            raise MalformedEventError(f"event timestamp is not an integer: {timestamp!r}")
        coordinates: list[float] = []
        for field in ("latitude", "longitude"):
            value = data[field]
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise MalformedEventError(f"event {field} is not a number: {value!r}")
            try:
                parsed = float(value)
            except OverflowError as exc:
                raise MalformedEventError(f"event {field} is out of range") from exc
            if not math.isfinite(parsed):
                raise MalformedEventError(f"event {field} is not finite: {value!r}")
            coordinates.append(parsed)
        event_time = data["eventTime"]
        if not isinstance(event_time, str):
            raise MalformedEventError(f"event eventTime is not a string: {event_time!r}")
        return cls(
            source_timestamp=timestamp,
            latitude=coordinates[0],
            longitude=coordinates[1],
            observed_at=event_time,
        )

    @classmethod
    def decode(cls, value: bytes) -> NormalizedEvent:
        if not isinstance(value, (bytes, bytearray)):
            raise MalformedEventError(f"event payload is not bytes: {type(value).__name__}")
        try:
            decoded = json.loads(value.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise MalformedEventError("event payload is not utf-8 json") from exc
        return cls.from_wire(decoded)
