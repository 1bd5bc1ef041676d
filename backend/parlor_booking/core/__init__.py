"""Core infrastructure: configuration, errors, logging and HTTP helpers."""
