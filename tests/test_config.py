"""Tests for config loading, defaults and environment overrides."""

import json
import os

import pytest

from strongbox.core.config import Config, ConfigError, load_config


ENV_NAMES = ("STRONGBOX_HOME", "STRONGBOX_LOG_LEVEL", "STRONGBOX_DB_NAME")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes os.environ directly, outside monkeypatch
    for name in ENV_NAMES:
        os.environ.pop(name, None)


class TestDefaults:

    def test_default_values(self, tmp_path):
        config = Config(config_dir=tmp_path)
        assert config.log_level == "info"
        assert config.db_name == "pass.db"
        assert config.storage_path == tmp_path / "pass.db"
        assert config.vault_path == tmp_path / "master.key"
        assert config.log_dir == tmp_path / "logs"
        assert config.use_sqlcipher is False

    def test_home_env_sets_config_dir(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STRONGBOX_HOME", str(tmp_path / "home"))
        assert Config().config_dir == tmp_path / "home"


class TestLoadConfig:

    def test_writes_defaults_on_first_run(self, tmp_path):
        config = load_config(tmp_path)
        written = json.loads((tmp_path / "config.json").read_text())
        assert written == {
            "db_name": "pass.db",
            "vault_name": "master.key",
            "log_level": "info",
            "use_sqlcipher": False,
        }
        assert config.config_dir == tmp_path

    def test_creates_directory(self, tmp_path):
        load_config(tmp_path / "new" / "dir")
        assert (tmp_path / "new" / "dir" / "config.json").exists()

    def test_reads_existing_file(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({
            "db_name": "other.db", "log_level": "debug", "use_sqlcipher": True,
        }))
        config = load_config(tmp_path)
        assert config.db_name == "other.db"
        assert config.log_level == "debug"
        assert config.use_sqlcipher is True
        assert config.vault_name == "master.key"

    def test_does_not_overwrite_existing_file(self, tmp_path):
        (tmp_path / "config.json").write_text('{"log_level": "warn"}')
        load_config(tmp_path)
        assert json.loads((tmp_path / "config.json").read_text()) == {"log_level": "warn"}

    def test_malformed_json(self, tmp_path):
        (tmp_path / "config.json").write_text("{not json")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_non_object_json(self, tmp_path):
        (tmp_path / "config.json").write_text("[1, 2]")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STRONGBOX_LOG_LEVEL", "error")
        monkeypatch.setenv("STRONGBOX_DB_NAME", "env.db")
        config = load_config(tmp_path)
        assert config.log_level == "error"
        assert config.storage_path == tmp_path / "env.db"

    def test_home_env_used_without_argument(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STRONGBOX_HOME", str(tmp_path))
        config = load_config()
        assert config.config_dir == tmp_path
        assert (tmp_path / "config.json").exists()

    def test_dotenv_file_loaded(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("STRONGBOX_LOG_LEVEL=debug\n")
        config = load_config(tmp_path / "cfg")
        assert config.log_level == "debug"

    @pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
    def test_use_sqlcipher_must_be_bool(self, tmp_path, value):
        (tmp_path / "config.json").write_text(json.dumps({"use_sqlcipher": value}))
        with pytest.raises(ConfigError, match="use_sqlcipher"):
            load_config(tmp_path)

    def test_use_sqlcipher_false_accepted(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({"use_sqlcipher": False}))
        assert load_config(tmp_path).use_sqlcipher is False
