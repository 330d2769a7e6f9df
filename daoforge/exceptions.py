"""
DAOForge Exceptions

Custom exception classes for DAOForge.

Expected governance outcomes (non-member callers, unknown proposals, closed
voting, ...) are returned as result values by the engine and never raised.
The classes below cover faults only.
"""


class DAOForgeException(Exception):
    """Base exception for DAOForge."""
    pass


class ConfigurationError(DAOForgeException):
    """Configuration error."""
    pass


class GovernanceError(DAOForgeException):
    """Base governance exception."""
    pass


class ProposalLifecycleError(GovernanceError):
    """Raised on illegal proposal state transitions."""
    pass
