"""Exceptions raised by the connection wrapper."""


class GygDbError(Exception):
    """Base class for wrapper errors."""


class InvalidParameter(GygDbError, TypeError):
    """A query parameter is itself a composite value."""


class StructureError(GygDbError, ValueError):
    """Data or filter keys don't match the table's columns."""


class InsertFailed(GygDbError):
    """The engine rejected an INSERT."""

    def __init__(self, table: str, cause: Exception):
        super().__init__(f'Insert into {table} failed: {cause}')
        self.table = table
        self.cause = cause
