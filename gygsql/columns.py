"""Column metadata and positional column mapping."""

from dataclasses import dataclass
from typing import Any, Dict, List, NewType, Optional, Sequence

# Raw DDL fragment, e.g. "id INTEGER PRIMARY KEY" or
# "FOREIGN KEY(userId) REFERENCES User(id)". Passed through verbatim.
ColumnSpec = NewType('ColumnSpec', str)


@dataclass(frozen=True)
class ColumnInfo:
    """One row of ``PRAGMA table_info``."""
    name: str
    position: int
    type: str = ''
    notnull: bool = False
    default: Optional[Any] = None
    pk: bool = False

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'ColumnInfo':
        """Build from a ``PRAGMA table_info`` row mapping."""
        return cls(
            name=row['name'], position=int(row['cid']), type=row.get('type') or '',
            notnull=bool(row.get('notnull')), default=row.get('dflt_value'), pk=bool(row.get('pk'))
        )


def assignable(columns: Sequence[ColumnInfo]) -> List[ColumnInfo]:
    """Columns a caller may set: everything except the primary key, in table order."""
    return [c for c in sorted(columns, key=lambda c: c.position) if not c.pk]


def map_positional(values: Sequence[Any], columns: Sequence[ColumnInfo]) -> Dict[str, Any]:
    """Map bare values onto column names, skipping the primary key.

    With the primary key at position p, value i lands on column i when i < p
    and on column i + 1 otherwise. Raises IndexError if there are more values
    than assignable columns.
    """
    targets = assignable(columns)
    if len(values) > len(targets):
        raise IndexError(f'{len(values)} values for {len(targets)} assignable columns')
    return {col.name: value for col, value in zip(targets, values)}
