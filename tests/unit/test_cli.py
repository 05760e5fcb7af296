"""Unit tests for the command-line entry point."""

import logging
from pathlib import Path
from unittest.mock import patch, MagicMock

from lockdrop import cli
from lockdrop.logging_config import configure_logging


def test_load_config_flags_override_env(monkeypatch, tmp_path):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("LOCKDROP_UPLOAD_DIR", "/should/not/win")
    config = cli.load_config(
        ["--port", "7000", "--upload-dir", str(tmp_path), "--log-level", "debug"]
    )
    assert config.port == 7000
    assert config.upload_dir == tmp_path
    assert config.log_level == "DEBUG"


def test_load_config_env_used_without_flags(monkeypatch):
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.delenv("LOCKDROP_UPLOAD_DIR", raising=False)
    config = cli.load_config([])
    assert config.port == 9000
    assert config.upload_dir == Path("./uploads")


def test_main_wires_app_and_cleans_up(monkeypatch, tmp_path):
    monkeypatch.setenv("LOCKDROP_SWEEP_INTERVAL", "0")
    fake_app = MagicMock()
    with patch("lockdrop.cli.create_app", return_value=fake_app) as create, \
            patch("lockdrop.cli.configure_logging"), \
            patch("lockdrop.cli.ExpirySweeper") as sweeper_cls:
        cli.main(["--port", "5555", "--host", "127.0.0.1", "--upload-dir", str(tmp_path)])

    config, service = create.call_args.args
    assert config.port == 5555
    assert service.storage.root == tmp_path
    fake_app.run.assert_called_once_with(host="127.0.0.1", port=5555, threaded=True)
    sweeper_cls.return_value.start.assert_called_once()
    sweeper_cls.return_value.stop.assert_called_once()


def test_configure_logging_accepts_level_names():
    with patch("lockdrop.logging_config.logging.basicConfig") as basic:
        configure_logging("debug")
        configure_logging("nonsense")
    assert basic.call_args_list[0].kwargs["level"] == logging.DEBUG
    assert basic.call_args_list[1].kwargs["level"] == logging.INFO
