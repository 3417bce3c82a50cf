"""Environment-driven connection settings."""

import os
from typing import Any, Dict

INSERT_ERROR_POLICIES = ('raise', 'exit')

DEFAULTS = {
    'conn_str': 'sqlite:///gyg.db',
    'echo': False,
    'debug': False,
    'audit_db': None,
    'legacy_comma_where': False,
    'on_insert_error': 'raise',
}


def _flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ('1', 'true', 'yes', 'on')


def load_config(validate: bool = True) -> Dict[str, Any]:
    """Read settings from GYGDB_* environment variables.

    With ``validate=False`` an unknown insert-error policy is kept as given
    and left for ``Database`` to reject.
    """
    policy = os.environ.get('GYGDB_ON_INSERT_ERROR', DEFAULTS['on_insert_error']).strip().lower()
    if validate and policy not in INSERT_ERROR_POLICIES:
        raise ValueError(f'GYGDB_ON_INSERT_ERROR must be one of {INSERT_ERROR_POLICIES}, got {policy!r}')
    return {
        'conn_str': os.environ.get('GYGDB_URL', DEFAULTS['conn_str']),
        'echo': _flag('GYGDB_ECHO', DEFAULTS['echo']),
        'debug': _flag('GYGDB_DEBUG', DEFAULTS['debug']),
        'audit_db': os.environ.get('GYGDB_AUDIT_DB') or DEFAULTS['audit_db'],
        'legacy_comma_where': _flag('GYGDB_LEGACY_COMMA_WHERE', DEFAULTS['legacy_comma_where']),
        'on_insert_error': policy,
    }


# Snapshot at import time; Database.from_config() re-reads the environment.
DB_CONFIG = load_config(validate=False)
