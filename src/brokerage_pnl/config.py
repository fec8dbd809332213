"""
Configuration for the report CLI (accounting method resolution).
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, field_validator

from brokerage_pnl.portfolio import AccountingMethod

METHOD_ENV_VAR = "BROKERAGE_PNL_METHOD"


class ReportConfig(BaseModel):
    """Settings that shape a rendered P&L report."""

    model_config = ConfigDict(frozen=True)

    method: AccountingMethod = AccountingMethod.REAL

    @field_validator("method", mode="before")
    @classmethod
    def _normalize_method(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            # Accept the common spellings of average cost.
            if normalized in {"avg", "average", "average-cost", "avgcost"}:
                return AccountingMethod.AVERAGE_COST
            return normalized
        return value

    @classmethod
    def resolve(cls, method: str | None = None) -> ReportConfig:
        """
        Build the effective configuration.

        Priority: CLI flag > BROKERAGE_PNL_METHOD env var > default "real".

        Raises:
            pydantic.ValidationError: If the chosen method is not a known one.
        """
        env_method = os.getenv(METHOD_ENV_VAR)
        chosen = method or env_method
        if chosen is None or not chosen.strip():
            return cls()
        return cls(method=chosen)
