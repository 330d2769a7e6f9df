"""
DAOForge TOML Configuration Loader

Loads config.toml at startup with environment variable overrides.
Each [section] maps to a dataclass with ``from_dict`` and ``apply_env``.

Environment variable mapping:
    [node] name                       → DAOFORGE_NODE_NAME
    [node] log_level                  → DAOFORGE_LOG_LEVEL
    [governance] one_vote_per_member  → DAOFORGE_ONE_VOTE_PER_MEMBER
    [governance] admin                → DAOFORGE_ADMIN
    [metrics] enabled                 → DAOFORGE_METRICS_ENABLED

Log level precedence, highest first: DAOFORGE_LOG_LEVEL, [node] log_level,
LOG_LEVEL from .env, INFO. LOG_LEVEL applies from import time; the others
take effect when build_engine runs.

Quorum and threshold are protocol constants and cannot be configured.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..constants import (
    DAOFORGE_ADMIN,
    DAOFORGE_NODE_NAME,
    DAOFORGE_ONE_VOTE_PER_MEMBER,
    LOG_LEVEL,
    METRICS_DEFAULT_NAMESPACE,
    parse_bool,
)
from ..exceptions import ConfigurationError
from ..governance import GovernanceEngine, SingleAdminAuthorizer, allow_all
from ..logger import LogManager, get_logger
from ..metrics import GovernanceMetrics

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(value: str) -> bool:
    parsed = parse_bool(value)
    if not isinstance(parsed, bool):
        raise ConfigurationError(f"Expected True/False, got {value!r}")
    return parsed


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------


@dataclass
class NodeSectionConfig:
    """[node] section."""
    name: str = str(DAOFORGE_NODE_NAME)
    log_level: str = str(LOG_LEVEL)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeSectionConfig":
        return cls(
            name=data.get("name", str(DAOFORGE_NODE_NAME)),
            log_level=data.get("log_level", str(LOG_LEVEL)),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("DAOFORGE_NODE_NAME"):
            self.name = v
        if v := os.environ.get("DAOFORGE_LOG_LEVEL"):
            self.log_level = v


@dataclass
class GovernanceSectionConfig:
    """[governance] section."""
    one_vote_per_member: bool = bool(DAOFORGE_ONE_VOTE_PER_MEMBER)
    admin: str = str(DAOFORGE_ADMIN)  # empty → anyone may add members

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GovernanceSectionConfig":
        return cls(
            one_vote_per_member=data.get(
                "one_vote_per_member", bool(DAOFORGE_ONE_VOTE_PER_MEMBER)
            ),
            admin=data.get("admin", str(DAOFORGE_ADMIN)),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("DAOFORGE_ONE_VOTE_PER_MEMBER"):
            self.one_vote_per_member = _env_bool(v)
        if v := os.environ.get("DAOFORGE_ADMIN"):
            self.admin = v


@dataclass
class MetricsConfig:
    """[metrics] section."""
    enabled: bool = True
    namespace: str = METRICS_DEFAULT_NAMESPACE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetricsConfig":
        return cls(
            enabled=data.get("enabled", True),
            namespace=data.get("namespace", METRICS_DEFAULT_NAMESPACE),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("DAOFORGE_METRICS_ENABLED"):
            self.enabled = _env_bool(v)


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class DAOConfig:
    """Complete engine configuration."""
    node: NodeSectionConfig = field(default_factory=NodeSectionConfig)
    governance: GovernanceSectionConfig = field(default_factory=GovernanceSectionConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    # --- factories --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DAOConfig":
        """Create DAOConfig from a parsed TOML dict."""
        return cls(
            node=NodeSectionConfig.from_dict(data.get("node", {})),
            governance=GovernanceSectionConfig.from_dict(data.get("governance", {})),
            metrics=MetricsConfig.from_dict(data.get("metrics", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "DAOConfig":
        """
        Load configuration from a TOML file.

        A missing file is not an error: defaults (with env overrides) are
        returned instead.
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    # --- env overrides ----------------------------------------------------

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.node.apply_env()
        self.governance.apply_env()
        self.metrics.apply_env()

    # --- validation -------------------------------------------------------

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not isinstance(self.node.name, str) or not self.node.name:
            raise ConfigurationError("node.name must be a non-empty string")
        if str(self.node.log_level).upper() not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.node.log_level}")
        if not isinstance(self.governance.one_vote_per_member, bool):
            raise ConfigurationError("governance.one_vote_per_member must be a boolean")
        if not isinstance(self.governance.admin, str):
            raise ConfigurationError("governance.admin must be a string")
        if not isinstance(self.metrics.enabled, bool):
            raise ConfigurationError("metrics.enabled must be a boolean")
        if not isinstance(self.metrics.namespace, str):
            raise ConfigurationError("metrics.namespace must be a string")
        if not self.metrics.namespace.replace("_", "").isalnum():
            raise ConfigurationError(f"Invalid metrics namespace: {self.metrics.namespace}")
        return True

    # --- serialisation ----------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics)."""
        return {
            "node": {
                "name": self.node.name,
                "log_level": self.node.log_level,
            },
            "governance": {
                "one_vote_per_member": self.governance.one_vote_per_member,
                "admin": self.governance.admin,
            },
            "metrics": {
                "enabled": self.metrics.enabled,
                "namespace": self.metrics.namespace,
            },
        }


# -----------------------------------------------------------------------
# Convenience functions
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> DAOConfig:
    """
    Load engine configuration.

    Resolution order:
        1. Explicit *path* argument
        2. DAOFORGE_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("DAOFORGE_CONFIG", "config.toml")

    cfg = DAOConfig.from_file(path)
    cfg.validate()
    return cfg


def build_engine(config: Optional[DAOConfig] = None, **collaborators: Any) -> GovernanceEngine:
    """
    Wire a GovernanceEngine from *config*.

    Extra keyword arguments (``members``, ``store``, ``clock``,
    ``execution_hook``) are passed through to the engine.
    """
    cfg = config or load_config()
    cfg.validate()

    LogManager().set_level(cfg.node.log_level)

    authorizer = SingleAdminAuthorizer(cfg.governance.admin) if cfg.governance.admin else allow_all
    metrics = GovernanceMetrics(cfg.metrics.namespace) if cfg.metrics.enabled else None

    engine = GovernanceEngine(
        authorizer=authorizer,
        one_vote_per_member=cfg.governance.one_vote_per_member,
        metrics=metrics,
        **collaborators,
    )
    logger.info(f"Governance engine '{cfg.node.name}' ready: {engine!r}")
    return engine
