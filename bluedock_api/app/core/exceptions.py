"""
Domain exceptions raised by the service and database layers.

The application maps them to HTTP responses in ``main.py``:
``ValidationError`` becomes a 400, ``NotFoundError`` a 404 and
``StorageError`` a 500.
"""


class ValidationError(ValueError):
    """Missing or invalid client input; raised before any SQL runs."""


class NotFoundError(LookupError):
    """A single record requested by id does not exist."""


class StorageError(RuntimeError):
    """The database rejected or failed a statement.

    The underlying ``sqlite3.Error`` is available as ``__cause__``.
    """
