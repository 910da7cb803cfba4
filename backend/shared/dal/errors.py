"""Errors raised by repository implementations."""


class PersistenceError(Exception):
    """A read or write against the record store failed."""
