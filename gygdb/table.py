"""Table handle bound to a shared Database."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .conn import Database


@dataclass(frozen=True)
class Table:
    """A table name paired with the Database it lives in.

    The Database is borrowed, not owned: many Table values can share one
    connection and none of them closes it.
    """
    db: 'Database'
    name: str
