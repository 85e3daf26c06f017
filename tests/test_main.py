"""
Tests for the entry point and logging setup.
"""
import logging
import sys

import app
import cli
import main
from log_setup import ConsoleFormatter, setup_logging


class TestLogging:

    def test_setup_logging_level_and_handler(self):
        setup_logging("debug")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ConsoleFormatter)
        assert root.handlers[0].stream is sys.stderr

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "app.log"
        setup_logging("INFO", str(log_file))
        logging.getLogger("prediction").info("hello")
        for h in logging.getLogger().handlers:
            h.flush()
        assert "hello" in log_file.read_text()
        for h in logging.getLogger().handlers:
            h.close()

    def test_formatter_output(self):
        record = logging.LogRecord("app", logging.WARNING, __file__, 1,
                                   "bad %s", ("post",), None)
        line = ConsoleFormatter().format(record)
        assert "WARNING" in line
        assert "[app] bad post" in line


class TestMain:

    def test_cli_flag_runs_cli(self, monkeypatch):
        calls = []
        monkeypatch.setattr(sys, "argv", ["main.py", "--cli", "--log-level", "WARNING"])
        monkeypatch.setattr(cli, "run_cli", lambda: calls.append("cli"))
        main.main()
        assert calls == ["cli"]
        assert logging.getLogger().level == logging.WARNING

    def test_default_runs_web(self, monkeypatch):
        calls = []
        monkeypatch.setattr(sys, "argv", ["main.py", "--no-browser"])
        monkeypatch.setattr(app, "run_web", lambda open_browser: calls.append(open_browser))
        main.main()
        assert calls == [False]
