"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import structlog

from voltra.logging import TRADE_LOGGER, get_logger, setup_logging


class TestSetupLogging:
    def test_json_format(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_json")
        logger.info("test message", symbol="BTCUSDT")

        captured = capsys.readouterr()
        line = json.loads(captured.err.strip())
        assert line["event"] == "test message"
        assert line["symbol"] == "BTCUSDT"
        assert line["level"] == "info"
        assert "timestamp" in line

    def test_console_format(self, capsys):
        setup_logging(level="INFO", log_format="console")
        logger = get_logger("test_console")
        logger.info("hello console", market="binance")

        captured = capsys.readouterr()
        assert "hello console" in captured.err
        assert "binance" in captured.err

    def test_log_level_filtering(self, capsys):
        setup_logging(level="WARNING", log_format="json")
        logger = get_logger("test_level")
        logger.info("should be hidden")
        logger.warning("should appear")

        captured = capsys.readouterr()
        assert "should be hidden" not in captured.err
        assert "should appear" in captured.err

    def test_disabled(self, capsys):
        setup_logging(level="INFO", log_format="json", enabled=False)
        get_logger("test_disabled").error("not shown")

        assert "not shown" not in capsys.readouterr().err

    def test_get_logger_with_context(self, capsys):
        setup_logging(level="INFO", log_format="json")
        logger = get_logger("test_ctx", symbol="ETHUSDT", market="binance")
        logger.info("context test")

        captured = capsys.readouterr()
        line = json.loads(captured.err.strip())
        assert line["symbol"] == "ETHUSDT"
        assert line["market"] == "binance"

    def test_contextvars_binding(self, capsys):
        setup_logging(level="INFO", log_format="json")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(cycle_id="abc123")

        logger = get_logger("test_ctxvars")
        logger.info("with context var")

        captured = capsys.readouterr()
        line = json.loads(captured.err.strip())
        assert line["cycle_id"] == "abc123"

        structlog.contextvars.clear_contextvars()


class TestTradeLog:
    def test_trades_written_to_file(self, tmp_path, capsys):
        path = tmp_path / "trades.log"
        setup_logging(level="INFO", log_format="console", trade_log_file=str(path))
        get_logger(TRADE_LOGGER).info("buy", symbol="BTCUSDT", price="11000")
        get_logger("other").info("not a trade")

        lines = path.read_text().strip().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["event"] == "buy"
        assert record["symbol"] == "BTCUSDT"
        # Trades also reach the console.
        assert "BTCUSDT" in capsys.readouterr().err

        setup_logging(level="INFO", log_format="json")

    def test_no_file_by_default(self):
        setup_logging(level="INFO", log_format="json")
        assert logging.getLogger(TRADE_LOGGER).handlers == []
