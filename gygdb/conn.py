"""Main SQL connection wrapper for table-level operations on SQLite."""

import re
import sys
import pandas as pd
from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union
from sqlalchemy import create_engine, event, inspect as sa_inspect
from sqlalchemy.engine.url import make_url
from sqlalchemy.exc import DBAPIError
from sqlalchemy.pool import StaticPool
from gygsql import SQLBuilder, ColumnInfo, ColumnSpec, map_positional, df_rows
from .audit import Audit, audited
from .config import INSERT_ERROR_POLICIES, load_config
from .errors import InvalidParameter, StructureError, InsertFailed
import logging

logger = logging.getLogger(__name__)

_scalar_types = (str, bytes, bytearray, memoryview)
_ident = re.compile(r'^\w+$')


class _Outcome(NamedTuple):
    rows: List[Dict[str, Any]]
    columns: List[str]
    rowcount: int


def normalize_locator(locator: str) -> str:
    """Turn a PDO-style ``sqlite:`` DSN into a SQLAlchemy URL.

    ``sqlite::memory:`` -> ``sqlite://``, ``sqlite:/a/b.db`` -> ``sqlite:////a/b.db``,
    ``sqlite:b.db`` -> ``sqlite:///b.db``. SQLAlchemy URLs pass through unchanged.
    """
    if locator.startswith('sqlite:') and not locator.startswith('sqlite://'):
        path = locator[len('sqlite:'):]
        return 'sqlite://' if path in ('', ':memory:') else f'sqlite:///{path}'
    return locator


def _enable_foreign_keys(dbapi_conn, conn_record):
    cur = dbapi_conn.cursor()
    cur.execute('PRAGMA foreign_keys=ON')
    cur.close()


def check_params(params: Iterable[Any]) -> Tuple[Any, ...]:
    """Reject anything but a flat sequence of scalars; return it as a tuple."""
    if isinstance(params, (Mapping,) + _scalar_types) or not isinstance(params, Iterable):
        raise InvalidParameter(f'SQL parameters must be a flat sequence, got {type(params).__name__}')
    params = tuple(params)
    for param in params:
        if isinstance(param, Mapping) or (isinstance(param, Iterable) and not isinstance(param, _scalar_types)):
            raise InvalidParameter(f'Nested SQL parameter is not allowed: {param!r}')
    return params


class Database:
    """SQLite connection wrapper with query building and a query trail.

    One engine, one underlying DBAPI connection for the life of the object.
    Every statement runs in its own transaction and is committed on success.
    Foreign key enforcement is switched on for the connection.
    """
    def __init__(
        self, conn: str, echo: bool = False, debug: bool = False, audit_db: Optional[str] = None,
        legacy_comma_where: bool = False, on_insert_error: str = 'raise'
    ):
        if on_insert_error not in INSERT_ERROR_POLICIES:
            raise ValueError(f'on_insert_error must be one of {INSERT_ERROR_POLICIES}, got {on_insert_error!r}')
        self.url = make_url(normalize_locator(conn))
        if self.url.get_backend_name() != 'sqlite':
            raise ValueError(f'Only SQLite is supported, got {self.url.get_backend_name()}')
        self.debug = debug
        self.on_insert_error = on_insert_error
        self.builder = SQLBuilder(legacy_comma_where=legacy_comma_where)
        self.audit_obj = Audit(audit_db) if audit_db else None
        self.queries: List[str] = []
        self.num_queries = 0
        self._last_insert_id: Optional[int] = None
        self.engine = create_engine(
            self.url, poolclass=StaticPool, connect_args={'check_same_thread': False},
            echo=echo, future=True
        )
        event.listen(self.engine, 'connect', _enable_foreign_keys)
        with self.engine.connect():
            pass

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'Database':
        """Build a wrapper from a settings dict, or from the environment when omitted."""
        cfg = load_config() if config is None else dict(config)
        return cls(
            cfg['conn_str'], echo=cfg.get('echo', False), debug=cfg.get('debug', False),
            audit_db=cfg.get('audit_db'), legacy_comma_where=cfg.get('legacy_comma_where', False),
            on_insert_error=cfg.get('on_insert_error', 'raise')
        )

    def _log(self, sql: str, params: Any):
        """Log SQL and params if debug enabled."""
        if self.debug:
            logger.debug(f'SQL: {sql} | Params: {params}')

    def _run(self, query: str, params: Sequence[Any]) -> _Outcome:
        params = () if params is None else params
        params = check_params(params)
        self._log(query, params)
        with self.engine.begin() as conn:
            result = conn.exec_driver_sql(query, params)
            if result.returns_rows:
                columns = list(result.keys())
                return _Outcome([dict(r) for r in result.mappings().all()], columns, -1)
            if query.lstrip().upper().startswith(('INSERT', 'REPLACE')):
                self._last_insert_id = result.lastrowid
            return _Outcome([], [], result.rowcount)

    @audited
    def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Execute a statement and return the number of affected rows."""
        return self._run(query, params).rowcount

    @audited
    def select_and_fetch(self, query: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """Execute a query and return every row as a dict."""
        return self._run(query, params).rows

    @audited
    def fetch_df(self, query: str, params: Sequence[Any] = ()) -> pd.DataFrame:
        """Execute a query and return the rows as a DataFrame."""
        outcome = self._run(query, params)
        return pd.DataFrame.from_records(outcome.rows, columns=outcome.columns)

    def select(self, table: str, filters: Optional[Mapping[str, Any]] = None,
               columns: Union[str, Sequence[str]] = '*', order_by: Optional[Union[str, Sequence[str]]] = None,
               order_direction: str = 'DESC') -> List[Dict[str, Any]]:
        """Select rows matching every filter (col = value)."""
        return self.select_and_fetch(*self.builder.select(table, filters, columns, order_by, order_direction))

    def select_df(self, table: str, filters: Optional[Mapping[str, Any]] = None,
                  columns: Union[str, Sequence[str]] = '*', order_by: Optional[Union[str, Sequence[str]]] = None,
                  order_direction: str = 'DESC') -> pd.DataFrame:
        """Same as select, returned as a DataFrame."""
        return self.fetch_df(*self.builder.select(table, filters, columns, order_by, order_direction))

    def create(self, table: str, columns: Sequence[ColumnSpec], enabled: bool = True) -> None:
        """Create table if it doesn't exist.

        ``columns`` are raw DDL fragments joined verbatim, constraints included::

            ["id INTEGER PRIMARY KEY", "title TEXT", "userId INT",
             "FOREIGN KEY(userId) REFERENCES User(id)"]

        The caller is responsible for their syntax. ``enabled`` is reserved
        and currently has no effect.
        """
        self.execute(self.builder.create(table, columns))

    def drop(self, table: str) -> None:
        """Drop table if it exists."""
        self.execute(self.builder.drop(table))

    def clear(self, table: str) -> None:
        """Delete all rows, keep the table."""
        self.execute(self.builder.clear(table))

    def table_info(self, table: str) -> List[ColumnInfo]:
        """Column metadata in table order. Empty if the table doesn't exist."""
        return [ColumnInfo.from_row(r) for r in self.select_and_fetch(self.builder.table_info(table))]

    def table_exists(self, name: str) -> bool:
        """Check the catalog for a table of this name."""
        return len(self.select_and_fetch(*self.builder.table_exists(name))) > 0

    def table_names(self) -> List[str]:
        """Names of all tables in the database."""
        return sa_inspect(self.engine).get_table_names()

    def insert(self, table: str, data: Mapping[str, Any]) -> Optional[int]:
        """Insert one row of named values and return its row id."""
        if not isinstance(data, Mapping):
            raise TypeError('insert expects a column -> value mapping; use insert_values for positional data')
        return self._insert(table, *self.builder.insert(table, data))

    def insert_values(self, table: str, values: Sequence[Any]) -> Optional[int]:
        """Insert one row of bare values in table column order.

        The primary key is never supplied; values fill the remaining columns
        in order. For columns ``id (pk), count, emotion, name`` the values
        ``[1, 'happy', 'karl']`` give ``count=1, emotion='happy', name='karl'``.
        If the primary key sits between columns, later values shift past it.
        Prefer ``insert`` with named values unless the table layout is known.
        """
        if isinstance(values, (Mapping,) + _scalar_types):
            raise TypeError('insert_values expects a sequence of values; use insert for named data')
        try:
            data = map_positional(list(values), self.table_info(table))
        except IndexError as e:
            raise StructureError(f'Too many values for table {table}: {e}') from e
        return self._insert(table, *self.builder.insert(table, data))

    def insert_df(self, table: str, df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> List[Optional[int]]:
        """Insert every DataFrame row by column name and return the row ids."""
        return [self.insert(table, row) for row in df_rows(df, columns)]

    def _insert(self, table: str, sql: str, params: List[Any]) -> Optional[int]:
        try:
            self.execute(sql, params)
        except DBAPIError as e:
            if self.on_insert_error == 'exit':
                logger.critical(f'Insert into {table} failed, exiting: {e}')
                sys.exit(f'{e}\nFailed to insert into {table}.')
            raise InsertFailed(table, e) from e
        return self._last_insert_id

    def update(self, table: str, data: Mapping[str, Any], row_filters: Optional[Mapping[str, Any]] = None) -> int:
        """Update rows and return the number changed.

        Every ``data`` key must name a non-primary-key column and every
        ``row_filters`` key must name a column; otherwise StructureError is
        raised and nothing runs. Columns whose names are not plain word
        characters cannot be addressed here. Without row_filters every row is
        updated.
        """
        columns = [c for c in self.table_info(table) if _ident.match(c.name)]
        self._check_keys(table, data, {c.name for c in columns if not c.pk}, 'data')
        if not data:
            raise StructureError(f'No columns to update in table {table}')
        if row_filters:
            self._check_keys(table, row_filters, {c.name for c in columns}, 'row_filters')
        return self.execute(*self.builder.update(table, data, row_filters))

    @staticmethod
    def _check_keys(table: str, mapping: Mapping[Any, Any], allowed: set, what: str) -> None:
        bad = [k for k in mapping if not isinstance(k, str) or k not in allowed]
        if bad:
            raise StructureError(
                f'Structure of {what} is incorrect for table {table}: keys {bad} are not column names'
            )

    def delete(self, table: str, filters: Mapping[str, Any]) -> int:
        """Delete matching rows. Empty filters delete every row."""
        return self.execute(*self.builder.delete(table, filters))

    def row_exists(self, table: str, filters: Optional[Mapping[str, Any]] = None) -> bool:
        """True if at least one row matches the filters."""
        return len(self.select(table, filters)) > 0

    def last_insert_id(self) -> Optional[int]:
        """Row id from the most recent successful INSERT on this connection."""
        return self._last_insert_id

    def close(self):
        """Dispose of engine resources."""
        self.engine.dispose()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
