"""SQL Builder subpackage for generating SQLite queries and parameters."""

from .query_builder import SQLBuilder
from .conditions import Condition, build_where
from .columns import ColumnInfo, ColumnSpec, assignable, map_positional
from .df_handler import df_rows

__all__ = [
    'SQLBuilder',
    'Condition',
    'build_where',
    'ColumnInfo',
    'ColumnSpec',
    'assignable',
    'map_positional',
    'df_rows'
]
