"""Shared helpers: random streams and logging setup."""
