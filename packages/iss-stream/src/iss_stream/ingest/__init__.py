"""Poll-and-publish loop."""

from iss_stream.ingest.loop import IngestLoop, PositionSource

__all__ = ["IngestLoop", "PositionSource"]
