"""Routing tables, routing roles, token-ring sync and TCP peer links for a ring of mesh devices."""

__version__ = "0.1.0"