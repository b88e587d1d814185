"""Config precedence, token persistence and the done marker."""

import json
from datetime import date

import pytest

from duo_core.config import load_config, load_token, save_token
from duo_core.constants import DAILY_XP_REQUIREMENT, DEFAULT_PORT, POLL_INTERVAL_SEC
from duo_core.errors import ConfigError, PersistenceError
from duo_core import marker


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "enforcer.json"


class TestLoadConfig:

    def test_defaults(self, config_file):
        config = load_config(config_file, env={})
        assert config["port"] == DEFAULT_PORT
        assert config["dailyXpRequirement"] == DAILY_XP_REQUIREMENT
        assert config["pollIntervalSec"] == POLL_INTERVAL_SEC

    def test_file_overrides_defaults(self, config_file):
        config_file.write_text(json.dumps({"port": 9000, "dailyXpRequirement": 50}))
        config = load_config(config_file, env={})
        assert config["port"] == 9000
        assert config["dailyXpRequirement"] == 50

    def test_env_overrides_file(self, config_file):
        config_file.write_text(json.dumps({"port": 9000}))
        config = load_config(config_file, env={"DUO_PORT": "9100", "DUO_POLL_INTERVAL": "300"})
        assert config["port"] == 9100
        assert config["pollIntervalSec"] == 300.0

    def test_broken_file_is_ignored(self, config_file):
        config_file.write_text("{not json")
        assert load_config(config_file, env={})["port"] == DEFAULT_PORT

    def test_bad_number_raises(self, config_file):
        with pytest.raises(ConfigError):
            load_config(config_file, env={"DUO_DAILY_XP": "lots"})

    def test_non_positive_interval_raises(self, config_file):
        with pytest.raises(ConfigError):
            load_config(config_file, env={"DUO_POLL_INTERVAL": "0"})


class TestTokens:

    def test_persisted_token_wins(self, tmp_path):
        config = {"jwtFile": str(tmp_path / "jwt")}
        (tmp_path / "jwt").write_text("from-file\n")
        assert load_token(config, env={"JWT_TOKEN": "from-env"}) == "from-file"

    def test_env_fallback(self, tmp_path):
        config = {"jwtFile": str(tmp_path / "missing")}
        assert load_token(config, env={"JWT_TOKEN": "", "DUO_JWT": "duo"}) == "duo"

    def test_nothing_configured(self, tmp_path):
        assert load_token({"jwtFile": str(tmp_path / "missing")}, env={}) is None

    def test_save_then_load(self, tmp_path):
        config = {"jwtFile": str(tmp_path / "sub" / "jwt")}
        save_token(config, "abc")
        assert load_token(config, env={}) == "abc"

    def test_save_failure_raises_persistence_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(PersistenceError):
            save_token({"jwtFile": str(blocker / "jwt")}, "abc")


class TestDoneMarker:

    def test_write_and_remove(self, done_file):
        assert not marker.is_done(done_file)
        marker.write_done(done_file, date(2026, 10, 18))
        assert marker.is_done(done_file)
        assert done_file.read_text() == "2026-10-18"
        marker.remove_done(done_file)
        assert not marker.is_done(done_file)

    def test_remove_missing_is_fine(self, done_file):
        marker.remove_done(done_file)

    def test_remove_failure_raises(self, tmp_path):
        # A directory in place of the marker can't be unlinked
        target = tmp_path / "duo-done"
        target.mkdir()
        with pytest.raises(PersistenceError):
            marker.remove_done(target)
