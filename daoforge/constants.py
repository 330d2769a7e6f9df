"""
DAOForge Constants

This module consolidates the governance protocol constants and the environment
configuration used throughout the codebase. Environment values are read once
from ``.env`` at import time.
"""
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

GOVERNANCE_DEFAULTS = {
    'DAOFORGE_NODE_NAME':              'daoforge',
    'DAOFORGE_ONE_VOTE_PER_MEMBER':    'False',
    'DAOFORGE_ADMIN':                  '',
}

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_TO_FILE':                     'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# ==================================================================================
# GOVERNANCE PROTOCOL CONSTANTS
# ==================================================================================
# Fixed protocol values. They are not exposed through any configuration layer.
GOVERNANCE_QUORUM = 3       # Minimum votes (for + against) before finalization
GOVERNANCE_THRESHOLD = 2    # Minimum raw "for" votes for acceptance

GOVERNANCE_STATUS_PENDING = 'Pending'
GOVERNANCE_STATUS_ACCEPTED = 'Accepted'
GOVERNANCE_STATUS_REJECTED = 'Rejected'


# ==================================================================================
# METRICS
# ==================================================================================
METRICS_DEFAULT_NAMESPACE = 'daoforge'


# ==================================================================================
# ENVIRONMENT VALUES
# ==================================================================================
class _WithDefault:
    """Remembers the built-in default next to the effective value."""

    _default = None

    def default(self):
        return self._default


class ConfigString(_WithDefault, str):
    """``str`` read from ``.env`` that also carries its default."""

    def __new__(cls, value, default):
        obj = super().__new__(cls, value)
        obj._default = default
        return obj


class ConfigBool(_WithDefault, int):
    """Boolean read from ``.env`` (an ``int`` subclass, as ``bool`` cannot be) that also carries its default."""

    def __new__(cls, value, default):
        obj = super().__new__(cls, bool(value))
        obj._default = default
        return obj

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__

    def __str__(self):
        return str(bool(self))

    __repr__ = __str__


_BOOL_WORDS = {"true": True, "false": False}


def parse_bool(v):
    """
    Map "true"/"false" (any case, surrounding whitespace ignored) to ``bool``.
    Any other value is returned unchanged.
    """
    if isinstance(v, str):
        return _BOOL_WORDS.get(v.strip().casefold(), v)
    return v


def _env_value(raw, default_raw):
    # dotenv_values yields None for keys declared without a value
    value_raw = default_raw if raw is None else raw
    value = parse_bool(value_raw)
    if isinstance(value, bool):
        return ConfigBool(value, parse_bool(default_raw))
    return ConfigString(value_raw, default_raw)


DEFAULTS = GOVERNANCE_DEFAULTS | LOGGER_DEFAULTS
globals().update({key: _env_value(_config.get(key), raw) for key, raw in DEFAULTS.items()})

# Names bound above, listed for readers and linters.
DAOFORGE_NODE_NAME: ConfigString
DAOFORGE_ONE_VOTE_PER_MEMBER: ConfigBool
DAOFORGE_ADMIN: ConfigString
LOG_LEVEL: ConfigString
LOG_FORMAT: ConfigString
LOG_DATE_FORMAT: ConfigString
LOG_CONSOLE_HIGHLIGHTING: ConfigBool
LOG_TO_FILE: ConfigBool
