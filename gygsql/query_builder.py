"""SQL query builder for table-level CRUD operations on SQLite."""

import re
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union
import logging
from .columns import ColumnSpec
from .conditions import AND, COMMA, build_where

logger = logging.getLogger(__name__)

_ident = re.compile(r'^\w+$')

Query = Tuple[str, List[Any]]


def _check_table(table: str) -> str:
    if not isinstance(table, str) or not _ident.match(table):
        raise ValueError(f'Invalid table name: {table!r}')
    return table


def _check_columns(cols: Sequence[Any]) -> List[str]:
    bad = [c for c in cols if not isinstance(c, str) or not _ident.match(c)]
    if bad:
        raise ValueError(f'Invalid column names: {bad}')
    return list(cols)


def _join(*parts: str) -> str:
    return ' '.join(p for p in parts if p)


class SQLBuilder:
    """Builds SQL for SELECT, INSERT, UPDATE, DELETE and table DDL.

    Every method returns the SQL text, and the DML/query methods also return a
    flat positional parameter list matching the ``?`` placeholders.

    ``legacy_comma_where`` reproduces the old comma-joined WHERE clause
    (``a=?,b=?``) for UPDATE and DELETE. SQLite rejects that form once there
    is more than one condition; it exists only for compatibility with callers
    that relied on the old SQL text.
    """
    ph = '?'

    def __init__(self, legacy_comma_where: bool = False):
        self.legacy_comma_where = legacy_comma_where
        self._dml_joiner = COMMA if legacy_comma_where else AND

    def select(self, table: str, filters: Optional[Mapping[str, Any]] = None,
               columns: Union[str, Sequence[str]] = '*', order_by: Optional[Union[str, Sequence[str]]] = None,
               order_direction: str = 'DESC') -> Query:
        """Generate SELECT query."""
        _check_table(table)
        cols = columns if isinstance(columns, str) else ','.join(columns)
        where, params = build_where(filters or {}, AND, self.ph)
        order = ''
        if order_by is not None:
            fields = [order_by] if isinstance(order_by, str) else list(order_by)
            _check_columns(fields)
            direction = order_direction.upper()
            if direction not in ('ASC', 'DESC'):
                raise ValueError(f'Invalid order direction: {order_direction}')
            order = f'ORDER BY {",".join(fields)} {direction}'
        return _join(f'SELECT {cols} FROM {table}', where, order), params

    def insert(self, table: str, data: Mapping[str, Any]) -> Query:
        """Generate INSERT query for a single row of named values."""
        _check_table(table)
        if not data:
            return f'INSERT INTO {table} DEFAULT VALUES', []
        keys = _check_columns(list(data.keys()))
        phs = ','.join(self.ph for _ in keys)
        return f'INSERT INTO {table} ({",".join(keys)}) VALUES ({phs})', list(data.values())

    def update(self, table: str, data: Mapping[str, Any], filters: Optional[Mapping[str, Any]] = None) -> Query:
        """Generate UPDATE query. No filters means every row."""
        _check_table(table)
        if not data:
            raise ValueError('No values provided for update')
        sets = ','.join(f'{k}={self.ph}' for k in _check_columns(list(data.keys())))
        where, w_params = build_where(filters or {}, self._dml_joiner, self.ph)
        return _join(f'UPDATE {table} SET {sets}', where), list(data.values()) + w_params

    def delete(self, table: str, filters: Optional[Mapping[str, Any]] = None) -> Query:
        """Generate DELETE query. No filters means every row."""
        _check_table(table)
        where, params = build_where(filters or {}, self._dml_joiner, self.ph)
        if not where:
            logger.warning('DELETE without WHERE on table %s removes every row', table)
        return _join(f'DELETE FROM {table}', where), params

    def clear(self, table: str) -> str:
        """Generate DELETE of all rows."""
        return f'DELETE FROM {_check_table(table)}'

    def create(self, table: str, columns: Sequence[ColumnSpec]) -> str:
        """Generate CREATE TABLE IF NOT EXISTS from raw column specs."""
        _check_table(table)
        if isinstance(columns, str):
            columns = [columns]
        if not columns:
            raise ValueError('No columns provided for create')
        return f'CREATE TABLE IF NOT EXISTS {table} ({",".join(columns)})'

    def drop(self, table: str) -> str:
        """Generate DROP TABLE IF EXISTS."""
        return f'DROP TABLE IF EXISTS {_check_table(table)}'

    def table_info(self, table: str) -> str:
        """Generate column introspection query."""
        return f'PRAGMA table_info({_check_table(table)})'

    def table_exists(self, name: str) -> Query:
        """Generate catalog lookup for a table name."""
        return f"SELECT name FROM sqlite_master WHERE type='table' AND name={self.ph}", [name]
