"""Equality conditions for SQL WHERE clauses."""

import re
from typing import Any, List, Mapping, Tuple

_ident = re.compile(r'^\w+$')

AND = ' AND '
COMMA = ','


class Condition:
    """Represents a single ``col=?`` condition."""
    __slots__ = ('field', 'value')

    def __init__(self, field: str, value: Any):
        """Initialize condition."""
        if not isinstance(field, str) or not _ident.match(field):
            raise ValueError(f'Invalid field name: {field!r}')
        self.field = field
        self.value = value

    def to_sql(self, ph: str = '?') -> Tuple[str, Any]:
        """Convert condition to SQL fragment and its parameter."""
        return f'{self.field}={ph}', self.value

    def __repr__(self):
        return f'Condition({self.field!r}, {self.value!r})'


def build_where(filters: Mapping[str, Any], joiner: str = AND, ph: str = '?') -> Tuple[str, List[Any]]:
    """Build WHERE clause from a column -> value mapping.

    Returns ('', []) when there are no filters. Conditions keep the mapping's
    iteration order and the params follow the same order.
    """
    if not filters:
        return '', []
    parts = []
    params = []
    for field, value in filters.items():
        frag, p = Condition(field, value).to_sql(ph)
        parts.append(frag)
        params.append(p)
    return f'WHERE {joiner.join(parts)}', params
