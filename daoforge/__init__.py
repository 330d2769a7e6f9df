"""
DAOForge Governance Package

Core imports are lazily loaded so that importing a submodule does not pull
in the whole engine. For direct access, import from submodules:

    from daoforge.governance import GovernanceEngine, MembershipSet
    from daoforge.config import load_config
    from daoforge.rpc import RPCServer
"""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy module loading."""
    if name == 'GovernanceEngine':
        from .governance import GovernanceEngine
        return GovernanceEngine
    elif name == 'load_config':
        from .config import load_config
        return load_config
    elif name == 'build_engine':
        from .config import build_engine
        return build_engine
    raise AttributeError(f"module 'daoforge' has no attribute {name!r}")

__all__ = ['GovernanceEngine', 'load_config', 'build_engine']
