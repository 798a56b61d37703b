# Closed-form +/-25% NPV sensitivities for a tornado chart.
from typing import List, Tuple

from ...domain.models import FinancialResult, ScheduleAndFinance, SensitivityEntry
from ...evaluation.financials import annuity_factor

PERTURBATION = 0.25
LEVERAGE_SHIELD_SHARE = 0.5

DRIVERS = (
    ("CO2 Price", "revenue"),
    ("CAPEX", "capex"),
    ("Flow Rate", "flow"),
    ("OPEX", "opex"),
    ("Cost of Equity", "coe"),
    ("Debt %", "leverage"),
    ("Pipeline Length", "length"),
    ("Power Price", "power"),
)


def _npv_range(factor: str, financials: FinancialResult, finance: ScheduleAndFinance,
               pv_factor: float, pct: float) -> Tuple[float, float]:
    base = financials.project_npv
    after_tax = 1 - financials.combined_tax_rate
    life = finance.operational_life

    if factor in ("revenue", "flow"):
        delta = financials.annual_revenue * pct * after_tax * pv_factor
        return base - delta, base + delta
    if factor == "capex":
        delta = financials.total_capex * pct
        return base + delta, base - delta
    if factor == "opex":
        delta = financials.total_opex * pct * after_tax * pv_factor
        return base + delta, base - delta
    if factor == "coe":
        debt_cost = finance.debt_fraction * finance.cost_of_debt * after_tax
        delta_coe = finance.cost_of_equity * pct
        high_wacc = debt_cost + (1 - finance.debt_fraction) * (finance.cost_of_equity + delta_coe)
        low_wacc = debt_cost + (1 - finance.debt_fraction) * (finance.cost_of_equity - delta_coe)
        high_npv = -financials.total_capex + financials.unlevered_fcf * annuity_factor(low_wacc, life, "WACC (low cost of equity)")
        low_npv = -financials.total_capex + financials.unlevered_fcf * annuity_factor(high_wacc, life, "WACC (high cost of equity)")
        return low_npv, high_npv
    if factor == "leverage":
        shield = (financials.total_capex * finance.debt_fraction * pct * finance.cost_of_debt
                  * financials.combined_tax_rate * pv_factor)
        return base - shield * LEVERAGE_SHIELD_SHARE, base + shield * LEVERAGE_SHIELD_SHARE
    if factor == "length":
        delta = financials.pipeline_capex * pct + financials.pipeline_opex * pct * after_tax * pv_factor
        return base + delta, base - delta
    if factor == "power":
        delta = financials.power_cost * pct * after_tax * pv_factor
        return base + delta, base - delta
    raise ValueError(f"unknown sensitivity driver {factor!r}")


def analyze_sensitivity(financials: FinancialResult, finance: ScheduleAndFinance,
                        pct: float = PERTURBATION) -> List[SensitivityEntry]:
    """
    NPV change for each driver at -pct and +pct, largest spread first.

    Uses annuity approximations around the base case instead of re-running the model.
    """
    pv_factor = annuity_factor(financials.wacc, finance.operational_life)
    entries = []
    for name, factor in DRIVERS:
        low_npv, high_npv = _npv_range(factor, financials, finance, pv_factor, pct)
        low_delta = low_npv - financials.project_npv
        high_delta = high_npv - financials.project_npv
        entries.append(SensitivityEntry(driver=name, low_delta=low_delta, high_delta=high_delta,
                                        spread=abs(high_delta - low_delta)))
    return sorted(entries, key=lambda e: e.spread, reverse=True)
