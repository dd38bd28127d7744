from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from relaykit.clock import to_iso_millis
from relaykit.observability import _ExtraFieldsFormatter, _ProbeAccessLogFilter


def _access_record(path: str, status: int) -> logging.LogRecord:
    return logging.LogRecord(
        name="uvicorn.access",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg='%s - "%s %s HTTP/%s" %d',
        args=("127.0.0.1:12345", "GET", path, "1.1", status),
        exc_info=None,
    )


def test_probe_access_log_filter_ignores_probe_200() -> None:
    probe_filter = _ProbeAccessLogFilter(ignored_paths=("/healthz", "/readyz"))
    assert probe_filter.filter(_access_record("/healthz", 200)) is False
    assert probe_filter.filter(_access_record("/readyz", 200)) is False
    assert probe_filter.filter(_access_record("/readyz?full=true", 200)) is False


def test_probe_access_log_filter_keeps_non_probe_or_non_200() -> None:
    probe_filter = _ProbeAccessLogFilter(ignored_paths=("/healthz", "/readyz"))
    assert probe_filter.filter(_access_record("/healthz", 503)) is True
    assert probe_filter.filter(_access_record("/metrics", 200)) is True


def test_extra_fields_formatter_appends_structured_fields() -> None:
    formatter = _ExtraFieldsFormatter("%(levelname)s %(message)s")
    record = logging.LogRecord(
        name="iss_stream.ingest.loop",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="ingest_upstream_unavailable",
        args=(),
        exc_info=None,
    )
    record.error = "timeout"
    record.attempt = 2

    assert formatter.format(record) == "WARNING ingest_upstream_unavailable attempt=2 error=timeout"


def test_to_iso_millis_renders_utc_with_z_suffix() -> None:
    moment = datetime(2026, 1, 15, 22, 40, 0, 123456, tzinfo=timezone.utc)
    assert to_iso_millis(moment) == "2026-01-15T22:40:00.123Z"


def test_to_iso_millis_converts_offsets_to_utc() -> None:
    moment = datetime(2026, 1, 16, 7, 40, 0, tzinfo=timezone(timedelta(hours=9)))
    assert to_iso_millis(moment) == "2026-01-15T22:40:00.000Z"
