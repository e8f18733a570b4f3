"""Core infrastructure: configuration, database, errors, observability."""
