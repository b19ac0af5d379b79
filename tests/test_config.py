"""Tests for config.py — config file loading, env parsing, and constants."""

import pytest

from ticktick_cli import config

_KNOWN_ENV_KEYS = list(config._ENV_KEYS)


class TestLoadEnv:
    @pytest.fixture(autouse=True)
    def _clean_environ(self, monkeypatch):
        """Remove known keys from os.environ so file-parsing tests are isolated."""
        for key in _KNOWN_ENV_KEYS:
            monkeypatch.delenv(key, raising=False)

    def test_basic_key_value(self, tmp_path, monkeypatch):
        cfg = tmp_path / "ticktick-cli"
        cfg.write_text("ACCESS_TOKEN=abc\nTOKEN_EXPIRY=1700000000\n")
        monkeypatch.setattr(config, "CONFIG_PATH", str(cfg))
        assert config.load_env() == {"ACCESS_TOKEN": "abc", "TOKEN_EXPIRY": "1700000000"}

    def test_shell_syntax(self, tmp_path, monkeypatch):
        cfg = tmp_path / "ticktick-cli"
        cfg.write_text('# token\nexport ACCESS_TOKEN="abc=def"\n\nTICKTICK_DST_RULE=\'us\'\n')
        monkeypatch.setattr(config, "CONFIG_PATH", str(cfg))
        assert config.load_env() == {"ACCESS_TOKEN": "abc=def", "TICKTICK_DST_RULE": "us"}

    def test_missing_file_returns_empty(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "CONFIG_PATH", str(tmp_path / "nonexistent"))
        assert config.load_env() == {}

    def test_environ_fallback(self, tmp_path, monkeypatch):
        cfg = tmp_path / "ticktick-cli"
        cfg.write_text("ACCESS_TOKEN=from-file\n")
        monkeypatch.setattr(config, "CONFIG_PATH", str(cfg))
        monkeypatch.setenv("ACCESS_TOKEN", "from-env")
        monkeypatch.setenv("TICKTICK_MOVE_LOG", "1")
        monkeypatch.setenv("UNRELATED_KEY", "x")
        assert config.load_env() == {"ACCESS_TOKEN": "from-file", "TICKTICK_MOVE_LOG": "1"}


class TestEnvParsers:
    def test_bool(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"A": "yes", "B": "off"})
        assert config._env_bool("A") is True
        assert config._env_bool("B") is False
        assert config._env_bool("MISSING", True) is True

    def test_int_fallback(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"A": "12", "B": "twelve", "C": ""})
        assert config._env_int("A", 0) == 12
        assert config._env_int("B", 3) == 3
        assert config._env_int("C", 4) == 4

    def test_float_fallback(self, monkeypatch):
        monkeypatch.setattr(config, "env", {"A": "0.25", "B": "x"})
        assert config._env_float("A", 1.0) == 0.25
        assert config._env_float("B", 1.0) == 1.0


class TestConstants:
    def test_priority_maps_agree(self):
        for name, value in config.PRIORITY_VALUES.items():
            assert config.PRIORITY_LABELS[value].lower() == name

    def test_move_policy(self):
        assert config.MOVE_DELETE_ATTEMPTS == 8
        assert config.MOVE_PRE_DELETE_ATTEMPTS == 10
        assert config.MOVE_VERIFY_ATTEMPTS == 10
        assert config.MOVE_DELETE_MAX_DELAY == 4.0

    def test_inbox_sentinel(self):
        assert config.INBOX_ID == "inbox"
        assert config.INBOX_NAME == "Inbox"

    def test_default_dst_rule(self):
        assert "fixed" in config.VALID_DST_RULES
        assert config.DST_RULE in config.VALID_DST_RULES
