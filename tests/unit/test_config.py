"""
Unit tests for server configuration.
"""

import pytest

from fileserver.config import ServerConfig


class TestServerConfig:
    """Tests for ServerConfig defaults and validation."""

    def test_defaults(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.root_dir == "."
        assert config.max_workers == 16
        assert config.log_format == "text"

    def test_defaults_are_valid(self):
        ServerConfig().validate()

    def test_port_zero_allowed(self, doc_root):
        ServerConfig(port=0, root_dir=str(doc_root)).validate()

    @pytest.mark.parametrize("overrides,message", [
        ({"port": -1}, "Invalid port"),
        ({"port": 65536}, "Invalid port"),
        ({"max_workers": 0}, "max_workers"),
        ({"queue_size": 0}, "queue_size"),
        ({"buffer_size": 100}, "buffer_size"),
        ({"max_request_line": 4}, "max_request_line"),
        ({"chunk_size": 0}, "chunk_size"),
        ({"timeout": 0}, "timeout"),
        ({"log_format": "xml"}, "log_format"),
    ])
    def test_invalid_values(self, doc_root, overrides, message):
        config = ServerConfig(root_dir=str(doc_root), **overrides)
        with pytest.raises(ValueError, match=message):
            config.validate()

    def test_timeout_none_allowed(self, doc_root):
        ServerConfig(timeout=None, root_dir=str(doc_root)).validate()

    def test_missing_root(self, tmp_path):
        config = ServerConfig(root_dir=str(tmp_path / "missing"))
        with pytest.raises(ValueError, match="root_dir"):
            config.validate()

    def test_root_is_a_file(self, doc_root):
        config = ServerConfig(root_dir=str(doc_root / "greeting.txt"))
        with pytest.raises(ValueError, match="root_dir"):
            config.validate()


class TestFromEnv:
    """Tests for environment variable loading."""

    def test_defaults_without_env(self, monkeypatch):
        for name in (
            "FILESERVER_HOST", "FILESERVER_PORT", "FILESERVER_ROOT",
            "FILESERVER_WORKERS", "FILESERVER_TIMEOUT",
            "FILESERVER_LOG_LEVEL", "FILESERVER_LOG_FORMAT",
        ):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_reads_env(self, monkeypatch, doc_root):
        monkeypatch.setenv("FILESERVER_HOST", "0.0.0.0")
        monkeypatch.setenv("FILESERVER_PORT", "3000")
        monkeypatch.setenv("FILESERVER_ROOT", str(doc_root))
        monkeypatch.setenv("FILESERVER_WORKERS", "4")
        monkeypatch.setenv("FILESERVER_TIMEOUT", "2.5")
        monkeypatch.setenv("FILESERVER_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("FILESERVER_LOG_FORMAT", "json")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.root_dir == str(doc_root)
        assert config.max_workers == 4
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    @pytest.mark.parametrize("name", [
        "FILESERVER_PORT",
        "FILESERVER_WORKERS",
        "FILESERVER_TIMEOUT",
    ])
    def test_bad_number_names_variable(self, monkeypatch, name):
        monkeypatch.setenv(name, "eighty")
        with pytest.raises(ValueError, match=f"{name} must be a number, got 'eighty'"):
            ServerConfig.from_env()
