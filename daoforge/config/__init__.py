"""
DAOForge Configuration

Loads config.toml at startup. Environment variables override TOML values.
"""

from .loader import (
    DAOConfig,
    GovernanceSectionConfig,
    MetricsConfig,
    NodeSectionConfig,
    build_engine,
    load_config,
)

__all__ = [
    "DAOConfig",
    "GovernanceSectionConfig",
    "MetricsConfig",
    "NodeSectionConfig",
    "build_engine",
    "load_config",
]
