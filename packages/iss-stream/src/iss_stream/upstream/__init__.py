"""Upstream position source."""

from iss_stream.upstream.client import IssPositionClient

__all__ = ["IssPositionClient"]
