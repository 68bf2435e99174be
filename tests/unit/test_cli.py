"""
Unit tests for the command-line entry point.
"""

import pytest

from fileserver.__main__ import config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "FILESERVER_HOST", "FILESERVER_PORT", "FILESERVER_ROOT",
        "FILESERVER_WORKERS", "FILESERVER_TIMEOUT",
        "FILESERVER_LOG_LEVEL", "FILESERVER_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)


class TestConfigFromArgs:

    def test_defaults(self):
        config = config_from_args([])
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.root_dir == "."

    def test_flags(self, doc_root):
        config = config_from_args([
            "--host", "0.0.0.0",
            "--port", "3000",
            "--root", str(doc_root),
            "--workers", "4",
            "--timeout", "5",
            "--log-level", "debug",
            "--log-format", "json",
        ])

        assert config.host == "0.0.0.0"
        assert config.port == 3000
        assert config.root_dir == str(doc_root)
        assert config.max_workers == 4
        assert config.timeout == 5.0
        assert config.log_level == "DEBUG"
        assert config.log_format == "json"

    def test_short_flags(self, doc_root):
        config = config_from_args(["-p", "9000", "-r", str(doc_root), "-w", "2"])
        assert (config.port, config.root_dir, config.max_workers) == (9000, str(doc_root), 2)

    def test_env_provides_defaults(self, monkeypatch):
        monkeypatch.setenv("FILESERVER_PORT", "4000")
        monkeypatch.setenv("FILESERVER_LOG_FORMAT", "json")

        config = config_from_args([])

        assert config.port == 4000
        assert config.log_format == "json"

    def test_flag_overrides_env(self, monkeypatch):
        monkeypatch.setenv("FILESERVER_PORT", "4000")
        assert config_from_args(["--port", "5000"]).port == 5000

    def test_bad_port_type(self):
        with pytest.raises(SystemExit):
            config_from_args(["--port", "abc"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            config_from_args(["--version"])
        assert exc_info.value.code == 0
        assert "PyFileServer" in capsys.readouterr().out


class TestMain:

    def test_invalid_root(self, tmp_path, capsys):
        assert main(["--root", str(tmp_path / "missing")]) == 1
        assert "root_dir" in capsys.readouterr().err

    def test_bad_env_number(self, monkeypatch, capsys):
        monkeypatch.setenv("FILESERVER_PORT", "eighty")
        assert main([]) == 1
        assert "FILESERVER_PORT" in capsys.readouterr().err

    def test_invalid_port(self, doc_root, capsys):
        assert main(["--port", "70000", "--root", str(doc_root)]) == 1
        assert "Invalid port" in capsys.readouterr().err
