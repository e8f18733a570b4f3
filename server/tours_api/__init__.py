"""Tours catalog REST API."""
