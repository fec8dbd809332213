"""
Tests for report configuration resolution.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from brokerage_pnl.config import METHOD_ENV_VAR, ReportConfig
from brokerage_pnl.portfolio import AccountingMethod


class TestReportConfig:
    """Test method resolution: flag > env var > default."""

    def test_default_method_is_real(self, monkeypatch) -> None:
        monkeypatch.delenv(METHOD_ENV_VAR, raising=False)

        assert ReportConfig.resolve().method is AccountingMethod.REAL

    def test_env_var_sets_method(self, monkeypatch) -> None:
        monkeypatch.setenv(METHOD_ENV_VAR, "FIFO")

        assert ReportConfig.resolve().method is AccountingMethod.FIFO

    def test_flag_wins_over_env_var(self, monkeypatch) -> None:
        monkeypatch.setenv(METHOD_ENV_VAR, "fifo")

        assert ReportConfig.resolve("lifo").method is AccountingMethod.LIFO

    @pytest.mark.parametrize("spelling", ["avg-cost", "avg_cost", "average", "Average-Cost"])
    def test_average_cost_spellings(self, spelling: str) -> None:
        assert ReportConfig.resolve(spelling).method is AccountingMethod.AVERAGE_COST

    def test_blank_env_var_falls_back_to_default(self, monkeypatch) -> None:
        monkeypatch.setenv(METHOD_ENV_VAR, "  ")

        assert ReportConfig.resolve().method is AccountingMethod.REAL

    def test_unknown_method_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ReportConfig.resolve("hifo")
