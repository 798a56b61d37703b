# Tabular views of engine results for export.
from typing import Sequence

import pandas as pd

from ..domain.models import FinancialResult, OptimizationResult, SensitivityEntry

CASH_FLOW_COLUMNS = (
    "revenue", "opex", "power_opex", "ebitda", "depreciation", "ebit", "interest",
    "principal", "ebt", "tax", "net_income_by_year", "equity_cash_flows", "project_cash_flows",
)


def cash_flow_frame(financials: FinancialResult) -> pd.DataFrame:
    """Year-by-year schedule ($MM), year 0 holding the initial outlay"""
    frame = pd.DataFrame({column: getattr(financials, column) for column in CASH_FLOW_COLUMNS},
                         index=pd.Index(financials.years, name="year"))
    frame = frame.rename(columns={"net_income_by_year": "net_income"})
    frame["cumulative_equity_cash_flow"] = frame["equity_cash_flows"].cumsum()
    return frame


def candidates_frame(result: OptimizationResult) -> pd.DataFrame:
    rows = []
    for candidate in result.candidates:
        evaluation = candidate.evaluation
        rows.append({
            "diameter": candidate.diameter,
            "velocity": evaluation.engineering.velocity,
            "pump_stations": evaluation.engineering.pump_stations,
            "total_pump_power": evaluation.engineering.total_pump_power,
            "total_capex": evaluation.costs.total_capex,
            "total_opex": evaluation.costs.total_opex,
            "project_npv": evaluation.financials.project_npv,
            "project_irr": evaluation.financials.project_irr,
            "atax_breakeven": evaluation.financials.atax_breakeven,
            "feasible": candidate.feasible,
            "is_optimal": candidate.is_optimal,
        })
    return pd.DataFrame(rows).set_index("diameter")


def tornado_frame(entries: Sequence[SensitivityEntry]) -> pd.DataFrame:
    return pd.DataFrame([entry.model_dump() for entry in entries]).set_index("driver")
