"""Real-time ISS position stream: ingest, relay and viewer."""
