from .conn import Database, check_params, normalize_locator
from .table import Table
from .audit import Audit, audited
from .errors import GygDbError, InvalidParameter, StructureError, InsertFailed
from .config import DB_CONFIG, load_config

__all__ = [
    'Database', 'Table', 'Audit', 'audited', 'check_params', 'normalize_locator',
    'GygDbError', 'InvalidParameter', 'StructureError', 'InsertFailed', 'DB_CONFIG', 'load_config'
]
