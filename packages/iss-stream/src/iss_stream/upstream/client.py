from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx

from iss_stream.core.exceptions import MalformedUpstreamResponse, UpstreamUnavailable


class IssPositionClient:
    """Fetches the current ISS position with one bounded-time GET.

    No retry happens here: a failed request is reported to the caller and the
    next scheduled tick is the retry.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 10.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._url = url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._client_factory = client_factory

    async def fetch(self) -> dict[str, Any]:
        factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout))
        async with factory() as client:
            try:
                response = await client.get(self._url)
            except httpx.TimeoutException as exc:
                raise UpstreamUnavailable(f"upstream timeout: url={self._url}") from exc
            except httpx.HTTPError as exc:
                raise UpstreamUnavailable(f"upstream request error: url={self._url}: {exc}") from exc

        if response.status_code >= 400:
            raise UpstreamUnavailable(
                f"upstream error status: status={response.status_code} {response.reason_phrase}"
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise MalformedUpstreamResponse("upstream body is not json") from exc
        if not isinstance(payload, dict):
            raise MalformedUpstreamResponse("upstream payload is not a json object")
        return payload
