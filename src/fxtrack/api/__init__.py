"""JSON HTTP API consumed by the web dashboard."""
