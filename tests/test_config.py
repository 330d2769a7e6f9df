"""
Configuration Test Suite

Coverage:
  - .env-backed constants wrappers
  - TOML loading, env overrides, validation
  - Engine wiring from configuration
"""

import logging

import pytest

from daoforge.config import DAOConfig, build_engine, load_config
from daoforge.constants import LOG_LEVEL, ConfigBool, ConfigString, parse_bool
from daoforge.exceptions import ConfigurationError
from daoforge.governance import SingleAdminAuthorizer, allow_all
from daoforge.logger import LogManager, TerminalSafeFormatter, get_logger


CONFIG_TOML = """
[node]
name = "garden-dao"
log_level = "DEBUG"

[governance]
one_vote_per_member = true
admin = "member-alice"

[metrics]
enabled = false
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in (
        "DAOFORGE_CONFIG",
        "DAOFORGE_NODE_NAME",
        "DAOFORGE_LOG_LEVEL",
        "DAOFORGE_ONE_VOTE_PER_MEMBER",
        "DAOFORGE_ADMIN",
        "DAOFORGE_METRICS_ENABLED",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return path


class TestConstants:

    def test_parse_bool(self):
        assert parse_bool(" true ") is True
        assert parse_bool("FALSE") is False
        assert parse_bool("maybe") == "maybe"
        assert parse_bool("") == ""

    def test_config_wrappers_keep_defaults(self):
        s = ConfigString("DEBUG", "INFO")
        assert s == "DEBUG"
        assert s.default() == "INFO"
        b = ConfigBool(True, False)
        assert b == True  # noqa: E712
        assert b.default() is False
        assert str(b) == "True"


class TestDAOConfig:

    def test_defaults(self):
        cfg = DAOConfig()
        assert cfg.governance.one_vote_per_member is False
        assert cfg.governance.admin == ""
        assert cfg.metrics.enabled is True
        assert cfg.validate()

    def test_from_file(self, config_file):
        cfg = DAOConfig.from_file(str(config_file))
        assert cfg.node.name == "garden-dao"
        assert cfg.node.log_level == "DEBUG"
        assert cfg.governance.one_vote_per_member is True
        assert cfg.governance.admin == "member-alice"
        assert cfg.metrics.enabled is False

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = DAOConfig.from_file(str(tmp_path / "absent.toml"))
        assert cfg.to_dict() == DAOConfig().to_dict()

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[node\nname = ")
        with pytest.raises(ConfigurationError):
            DAOConfig.from_file(str(path))

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv("DAOFORGE_NODE_NAME", "env-dao")
        monkeypatch.setenv("DAOFORGE_ONE_VOTE_PER_MEMBER", "False")
        monkeypatch.setenv("DAOFORGE_METRICS_ENABLED", "true")
        cfg = DAOConfig.from_file(str(config_file))
        assert cfg.node.name == "env-dao"
        assert cfg.governance.one_vote_per_member is False
        assert cfg.metrics.enabled is True

    def test_bad_env_bool(self, monkeypatch):
        monkeypatch.setenv("DAOFORGE_ONE_VOTE_PER_MEMBER", "sometimes")
        with pytest.raises(ConfigurationError):
            DAOConfig().apply_env()

    def test_validate_rejects_bad_log_level(self):
        cfg = DAOConfig()
        cfg.node.log_level = "LOUD"
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_validate_rejects_non_bool_policy(self):
        cfg = DAOConfig.from_dict({"governance": {"one_vote_per_member": "yes"}})
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_validate_rejects_string_metrics_flag(self):
        cfg = DAOConfig.from_dict({"metrics": {"enabled": "false"}})
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_validate_rejects_non_string_namespace(self):
        cfg = DAOConfig.from_dict({"metrics": {"namespace": 5}})
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_validate_rejects_non_string_name(self):
        cfg = DAOConfig.from_dict({"node": {"name": 7}})
        with pytest.raises(ConfigurationError):
            cfg.validate()

    def test_build_engine_refuses_string_metrics_flag(self):
        with pytest.raises(ConfigurationError):
            build_engine(DAOConfig.from_dict({"metrics": {"enabled": "false"}}))

    def test_log_level_defaults_to_dotenv_value(self):
        assert DAOConfig().node.log_level == str(LOG_LEVEL)

    def test_log_level_env_wins_over_toml(self, config_file, monkeypatch):
        monkeypatch.setenv("DAOFORGE_LOG_LEVEL", "ERROR")
        assert DAOConfig.from_file(str(config_file)).node.log_level == "ERROR"

    def test_load_config_from_env_path(self, config_file, monkeypatch):
        monkeypatch.setenv("DAOFORGE_CONFIG", str(config_file))
        assert load_config().node.name == "garden-dao"

    def test_to_dict(self, config_file):
        d = DAOConfig.from_file(str(config_file)).to_dict()
        assert d["governance"] == {"one_vote_per_member": True, "admin": "member-alice"}


class TestBuildEngine:

    def test_wires_policies(self, config_file):
        engine = build_engine(load_config(str(config_file)))
        assert engine.one_vote_per_member is True
        assert isinstance(engine.authorizer, SingleAdminAuthorizer)
        assert engine.authorizer.admin == "member-alice"
        assert engine.metrics is None

    def test_defaults_are_open(self):
        engine = build_engine(DAOConfig())
        assert engine.authorizer is allow_all
        assert engine.metrics is not None
        assert engine.one_vote_per_member is False

    def test_passes_collaborators_through(self):
        hook = lambda pid: "custom"  # noqa: E731
        engine = build_engine(DAOConfig(), execution_hook=hook)
        assert engine.execution_hook is hook


class TestLogging:

    def test_log_manager_is_singleton(self):
        assert LogManager() is LogManager()
        assert LogManager().is_configured

    def test_get_logger(self):
        assert get_logger("daoforge.test").name == "daoforge.test"

    def test_sanitize_strips_escapes(self):
        raw = "title \x1b[31mred\x1b[0m\r\x07done"
        assert TerminalSafeFormatter.sanitize(raw) == "title reddone"

    def test_invalid_format_falls_back(self):
        assert LogManager.validate_log_format("%(nope") == LogManager.validate_log_format("")

    def test_set_level(self):
        manager = LogManager()
        manager.set_level("WARNING")
        try:
            assert logging.getLogger().level == logging.WARNING
        finally:
            manager.set_level(None)

    def test_build_engine_applies_log_level(self, config_file):
        try:
            build_engine(load_config(str(config_file)))
            assert logging.getLogger().level == logging.DEBUG
        finally:
            LogManager().set_level(None)
