"""Tests for configuration loading."""

from pathlib import Path

from squadlens.config import Config, get_config, load_config, reset_config


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.logs.status_directory == "orchestration-log"
        assert config.status.staleness_seconds == 300
        assert config.roster.retry_delay_seconds == 1.5
        assert config.tasks.completion_keywords == ["completed", "done", "✅", "pass", "succeeds"]
        assert config.api.host == "127.0.0.1"

    def test_yaml_file(self, temp_dir, monkeypatch):
        (temp_dir / "squadlens.yaml").write_text(
            "status:\n  staleness_seconds: 60\nlogs:\n  session_directories: [log, archive]\n"
        )
        monkeypatch.chdir(temp_dir)

        config = load_config()

        assert config.status.staleness_seconds == 60
        assert config.logs.session_directories == ["log", "archive"]

    def test_env_overrides(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("SQUADLENS_ROOT", str(temp_dir))
        monkeypatch.setenv("SQUADLENS_LOG_LEVEL", "DEBUG")

        config = load_config()

        assert config.workspace.root == Path(temp_dir)
        assert config.logging.level == "DEBUG"

    def test_global_config_cached(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first
