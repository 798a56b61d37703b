# What-if views derived from a base-case financial result without re-running the engine.
from typing import Iterable, List

from ..domain.models import (
    BreakevenPoint,
    CostPerTonne,
    FinancialResult,
    LeveragePoint,
    PipelineDesign,
    ScheduleAndFinance,
)
from ..exceptions import InvalidInputError
from .financials import capital_recovery_factor, internal_rate_of_return

BREAKEVEN_DISTANCES = tuple(range(25, 301, 25))
LEVERAGE_STEPS = tuple(d / 100 for d in range(0, 81, 10))
MIN_EQUITY = 0.01  # $MM


def _average_flow(design: PipelineDesign) -> float:
    if design.average_flow_rate <= 0:
        raise InvalidInputError("average flow rate", "must be positive to price a tonne")
    return design.average_flow_rate


def _grossed_up(required_return: float, financials: FinancialResult, finance: ScheduleAndFinance) -> float:
    if not finance.taxable_entity:
        return required_return
    if financials.combined_tax_rate >= 1:
        raise InvalidInputError("combined tax rate", "equity return cannot be grossed up at 100% tax")
    return required_return / (1 - financials.combined_tax_rate)


def cost_per_tonne(financials: FinancialResult, design: PipelineDesign, finance: ScheduleAndFinance) -> CostPerTonne:
    """Split the year-1 tariff into what each tonne pays for"""
    flow = _average_flow(design)
    required_return = financials.equity_size * finance.cost_of_equity
    grossed_up = _grossed_up(required_return, financials, finance)
    return CostPerTonne(
        opex=financials.total_opex / flow,
        capital_recovery=(financials.annual_principal + financials.equity_size / finance.operational_life) / flow,
        interest=financials.annual_interest / flow,
        equity_return=required_return / flow,
        tax_gross_up=(grossed_up - required_return) / flow,
    )


def breakeven_by_distance(financials: FinancialResult, design: PipelineDesign, finance: ScheduleAndFinance,
                          distances: Iterable[float] = BREAKEVEN_DISTANCES) -> List[BreakevenPoint]:
    """After-tax breakeven if the same line were built over other distances.

    CAPEX and pipeline OPEX scale linearly with distance; facility and power OPEX do not.
    """
    flow = _average_flow(design)
    facility_opex = financials.total_opex - financials.pipeline_opex - financials.power_cost
    crf = capital_recovery_factor(finance.cost_of_debt, finance.debt_term)

    points = []
    for distance in distances:
        ratio = distance / design.length
        capex = financials.total_capex * ratio
        opex = financials.pipeline_opex * ratio + facility_opex + financials.power_cost
        debt_service = capex * finance.debt_fraction * crf
        required_return = capex * (1 - finance.debt_fraction) * finance.cost_of_equity
        breakeven = (opex + debt_service + _grossed_up(required_return, financials, finance)) / flow
        points.append(BreakevenPoint(distance=distance, breakeven=breakeven))
    return points


def leverage_curve(financials: FinancialResult, finance: ScheduleAndFinance,
                   debt_fractions: Iterable[float] = LEVERAGE_STEPS) -> List[LeveragePoint]:
    """Equity IRR against debt share, holding year-1 operating results constant"""
    term = finance.debt_term
    crf = capital_recovery_factor(finance.cost_of_debt, term)
    points = []
    for debt_fraction in debt_fractions:
        debt = financials.total_capex * debt_fraction
        equity = financials.total_capex * (1 - debt_fraction)
        if equity < MIN_EQUITY:
            continue

        debt_service = debt * crf if debt > 0 else 0.0
        interest = debt * finance.cost_of_debt * (term + 1) / (2 * term)
        ebt = financials.annual_ebit - interest
        net_income = ebt - max(0.0, ebt * financials.combined_tax_rate)
        fcfe = net_income + financials.annual_depreciation - (debt_service - interest)

        cash_flows = [-equity] + [fcfe] * finance.operational_life
        equity_irr = internal_rate_of_return(cash_flows, max_iterations=50, bounds=(-0.5, 2.0),
                                             derivative_tolerance=0.0001)
        points.append(LeveragePoint(debt_fraction=debt_fraction, equity_irr=equity_irr,
                                    project_irr=financials.project_irr))
    return points
