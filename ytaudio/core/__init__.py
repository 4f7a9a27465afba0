"""Core infrastructure: configuration, logging, errors, validation and metrics."""
