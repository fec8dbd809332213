from __future__ import annotations

import structlog
from structlog.testing import capture_logs


def test_configure_structlog_warns_on_invalid_log_level(monkeypatch, capfd) -> None:
    from brokerage_pnl.logging import configure_structlog

    monkeypatch.setenv("BROKERAGE_PNL_LOG_LEVEL", "not-a-level")
    configure_structlog()

    captured = capfd.readouterr()
    assert "Invalid BROKERAGE_PNL_LOG_LEVEL" in captured.err


def test_configure_structlog_respects_level(monkeypatch) -> None:
    from brokerage_pnl.logging import configure_structlog

    monkeypatch.setenv("BROKERAGE_PNL_LOG_LEVEL", "error")
    configure_structlog()
    try:
        with capture_logs() as logs:
            structlog.get_logger().warning("filtered out")
            structlog.get_logger().error("kept")
    finally:
        monkeypatch.delenv("BROKERAGE_PNL_LOG_LEVEL")
        configure_structlog()

    assert [log["event"] for log in logs] == ["kept"]
