"""Query trail and persistent query log for database operations."""

import sqlite3
import logging
import functools
import inspect
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

# Frames from these packages are never reported as the caller.
_LIBRARY_PACKAGES = ('gygdb', 'gygsql')

_PARAMS_LIMIT = 1000


class Audit:
    """Append-only log of statements run through a ``Database``.

    Rows live in a ``query_log`` table of a separate SQLite file, so the log
    survives the connection and can be shared by several wrappers; the
    ``db_url`` column tells them apart.
    """
    def __init__(self, path: str = 'audit.db'):
        self.path = path
        self.lock = Lock()
        self._create()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        return conn

    def _create(self):
        with self.lock, self._connect() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS query_log (
                    id INTEGER PRIMARY KEY,
                    ts TEXT DEFAULT CURRENT_TIMESTAMP,
                    db_url TEXT,
                    operation TEXT,
                    statement TEXT,
                    params TEXT,
                    succeeded INTEGER,
                    row_count INTEGER,
                    error TEXT,
                    caller_module TEXT,
                    caller_path TEXT
                )
            ''')

    def record(self, db_url: str, operation: str, statement: str, params: str, *,
               row_count: Optional[int] = None, error: Optional[str] = None,
               caller: Tuple[str, str] = ('unknown', 'unknown')):
        """Store one statement. A statement with an ``error`` counts as failed."""
        with self.lock, self._connect() as conn:
            conn.execute('''
                INSERT INTO query_log (db_url, operation, statement, params, succeeded,
                                       row_count, error, caller_module, caller_path)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ''', (db_url, operation, statement, params, int(error is None), row_count, error, *caller))

    def entries(self, limit: int = 100, failed_only: bool = False) -> List[Dict[str, Any]]:
        """Most recent log rows, newest first."""
        where = 'WHERE succeeded = 0' if failed_only else ''
        with self.lock, self._connect() as conn:
            rows = conn.execute(f'SELECT * FROM query_log {where} ORDER BY id DESC LIMIT ?', (limit,)).fetchall()
        return [dict(r) for r in rows]

    def purge(self) -> int:
        """Remove every row and return how many were removed."""
        with self.lock, self._connect() as conn:
            return conn.execute('DELETE FROM query_log').rowcount


def _caller() -> Tuple[str, str]:
    """Module name and file of the nearest frame outside this library."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            module = frame.f_globals.get('__name__') or '__main__'
            if module.split('.')[0] not in _LIBRARY_PACKAGES:
                return module, frame.f_code.co_filename
            frame = frame.f_back
    finally:
        del frame
    logger.warning('No caller outside %s found on the stack', '/'.join(_LIBRARY_PACKAGES))
    return 'unknown', 'unknown'


def _row_count(result: Any) -> Optional[int]:
    if isinstance(result, int):
        return result
    try:
        return len(result)
    except TypeError:
        return None


def audited(fn):
    """Decorator recording each executed query.

    On success the query text goes onto ``self.queries`` and ``self.num_queries``
    is bumped. When ``self.audit_obj`` is set, successes and failures are also
    written to its query log along with the code that issued them.
    """
    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        sql = args[0] if args else kwargs.get('query', '')
        if self.audit_obj is None:
            result = fn(self, *args, **kwargs)
            self.queries.append(sql)
            self.num_queries += 1
            return result
        params = str(args[1] if len(args) > 1 else kwargs.get('params', ()))[:_PARAMS_LIMIT]
        caller = _caller()
        try:
            result = fn(self, *args, **kwargs)
        except Exception as e:
            self.audit_obj.record(str(self.url), fn.__name__, sql, params, error=str(e), caller=caller)
            raise
        self.queries.append(sql)
        self.num_queries += 1
        self.audit_obj.record(str(self.url), fn.__name__, sql, params, row_count=_row_count(result), caller=caller)
        return result
    return wrapper
