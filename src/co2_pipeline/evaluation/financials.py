# Project finance model: debt sizing, escalated P&L and cash flows, IRR/NPV, payback and breakeven tariffs.
import logging
from typing import Optional, Sequence

import numpy as np

from ..domain.models import CostResult, FinancialResult, PipelineDesign, ScheduleAndFinance
from ..exceptions import InvalidInputError

logger = logging.getLogger(__name__)

IRR_SEED = 0.1
IRR_MAX_ITERATIONS = 100
IRR_TOLERANCE = 0.0001
IRR_BOUNDS = (-0.99, 10.0)


def capital_recovery_factor(i: float, n_years: float) -> float:
    """Calculate Capital Recovery Factor (CRF).

    CRF = i(1+i)^n / ((1+i)^n - 1)

    Special case: If i ≈ 0, returns 1/n_years
    """
    if n_years <= 0:
        return 0.0
    if abs(i) < 1e-9:
        return 1.0 / n_years
    p = (1.0 + i) ** n_years
    return i * p / (p - 1.0)


def annuity_factor(rate: float, n_years: float, quantity: str = "WACC") -> float:
    """Present value of 1 per year for ``n_years`` at ``rate``"""
    if rate == 0:
        raise InvalidInputError(quantity, "annuity factor is undefined at a zero rate")
    return (1 - (1 + rate) ** -n_years) / rate


def net_present_value(cash_flows: Sequence[float], rate: float) -> float:
    """Discount a cash-flow sequence whose first element falls at year 0"""
    if rate <= -1:
        raise InvalidInputError("discount rate", f"{rate} is at or below -100%")
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / (1 + rate) ** periods))


def _npv_and_slope(flows: np.ndarray, rate: float):
    periods = np.arange(len(flows))
    discount = (1 + rate) ** periods
    return np.sum(flows / discount), -np.sum(periods * flows / (discount * (1 + rate)))


def internal_rate_of_return(cash_flows: Sequence[float], seed: float = IRR_SEED,
                            max_iterations: int = IRR_MAX_ITERATIONS, tolerance: float = IRR_TOLERANCE,
                            bounds=IRR_BOUNDS, derivative_tolerance: float = 0.0) -> float:
    """
    Newton-Raphson IRR.

    Stops once |NPV| < ``tolerance``; each step is clamped to ``bounds`` so the
    iterate cannot run off to -100% or infinity. The last iterate is returned
    if the solve has not converged.
    """
    flows = np.asarray(cash_flows, dtype=float)
    lower, upper = bounds
    irr = seed
    for _ in range(max_iterations):
        npv, dnpv = _npv_and_slope(flows, irr)
        if abs(npv) < tolerance:
            break
        if abs(dnpv) <= derivative_tolerance:
            break
        irr = min(max(irr - npv / dnpv, lower), upper)
    else:
        # The last step may itself have converged
        if abs(_npv_and_slope(flows, irr)[0]) >= tolerance:
            logger.warning("IRR did not converge in %d iterations, returning %.4f", max_iterations, irr)
    return float(irr)


def payback_months(equity: float, annual_fcfe: float, operational_life: int) -> int:
    """Months until constant year-1 FCFE repays the equity, interpolated within the payback year"""
    cumulative = -equity
    for year in range(1, operational_life + 1):
        cumulative += annual_fcfe
        if cumulative >= 0:
            fraction = (equity - (year - 1) * annual_fcfe) / annual_fcfe if annual_fcfe else 0.0
            return int(round((year - 1 + fraction) * 12))
    return operational_life * 12


def discounted_payback_months(equity: float, annual_fcfe: float, cost_of_equity: float,
                              operational_life: int) -> int:
    """Whole years (in months) until discounted year-1 FCFE repays the equity"""
    cumulative = -equity
    for year in range(1, operational_life + 1):
        cumulative += annual_fcfe / (1 + cost_of_equity) ** year
        if cumulative >= 0:
            return year * 12
    return operational_life * 12


def _with_outlay(values: np.ndarray, outlay: float = 0.0) -> tuple:
    return (float(outlay),) + tuple(float(v) for v in values)


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    return numerator / denominator if denominator else None


def _average_flow(design: PipelineDesign) -> float:
    if design.average_flow_rate <= 0:
        raise InvalidInputError("average flow rate", "must be positive to price a tonne")
    return design.average_flow_rate


def _wacc(finance: ScheduleAndFinance) -> float:
    after_tax_cost_of_debt = finance.cost_of_debt * (1 - finance.combined_tax_rate)
    return finance.debt_fraction * after_tax_cost_of_debt + (1 - finance.debt_fraction) * finance.cost_of_equity


def _operating_years(average_flow: float, finance: ScheduleAndFinance, costs: CostResult):
    """Escalated revenue, OPEX, power and depreciation for years 1..life"""
    breakdown = costs.escalated
    years = np.arange(1, finance.operational_life + 1)
    revenue = average_flow * finance.co2_price * (1 + finance.revenue_escalation) ** (years - 1)
    maintenance = (breakdown.pipeline_opex + breakdown.facility_opex) * (1 + finance.general_inflation) ** (years - 1)
    power = breakdown.power_cost * (1 + finance.power_escalation) ** (years - 1)
    annual_depreciation = breakdown.total_capex / finance.depreciation_years
    depreciation = np.where(years <= finance.depreciation_years, annual_depreciation, 0.0)
    return years, revenue, maintenance + power, power, depreciation


def project_npv(design: PipelineDesign, finance: ScheduleAndFinance, costs: CostResult) -> float:
    """Project NPV at the WACC alone, without the IRR solves of the full model"""
    _, revenue, opex, _, depreciation = _operating_years(_average_flow(design), finance, costs)
    ebit = revenue - opex - depreciation
    unlevered_fcf = ebit * (1 - finance.combined_tax_rate) + depreciation
    return net_present_value(_with_outlay(unlevered_fcf, -costs.escalated.total_capex), _wacc(finance))


def evaluate_financials(design: PipelineDesign, finance: ScheduleAndFinance, costs: CostResult) -> FinancialResult:
    """Build the financing structure and the year-by-year model for one costed design."""
    breakdown = costs.escalated
    average_flow = _average_flow(design)

    tax_rate = finance.combined_tax_rate
    total_capex = breakdown.total_capex
    debt_size = total_capex * finance.debt_fraction
    equity_size = total_capex * (1 - finance.debt_fraction)
    after_tax_cost_of_debt = finance.cost_of_debt * (1 - tax_rate)
    wacc = _wacc(finance)

    term = finance.debt_term
    annual_debt_service = debt_size * capital_recovery_factor(finance.cost_of_debt, term)
    average_debt_balance = debt_size * (term + 1) / (2 * term)
    annual_interest = average_debt_balance * finance.cost_of_debt
    annual_principal = annual_debt_service - annual_interest
    annual_depreciation = total_capex / finance.depreciation_years

    life = finance.operational_life
    revenue_base = average_flow * finance.co2_price
    years, revenue, opex, power, depreciation = _operating_years(average_flow, finance, costs)

    debt_service = np.where(years <= term, annual_debt_service, 0.0)
    # Declining-interest approximation of the amortization schedule
    interest = np.where(years <= term, annual_interest * (term - years + 1) / term, 0.0)
    principal = debt_service - interest

    ebitda = revenue - opex
    ebit = ebitda - depreciation
    ebt = ebit - interest
    tax = np.maximum(0.0, ebt * tax_rate) if finance.taxable_entity else np.zeros(life)
    net_income = ebt - tax
    fcfe = net_income + depreciation - principal
    unlevered_fcf = ebit * (1 - tax_rate) + depreciation

    equity_cash_flows = _with_outlay(fcfe, -equity_size)
    project_cash_flows = _with_outlay(unlevered_fcf, -total_capex)

    # Year-1 summary
    annual_ebitda = revenue_base - breakdown.total_opex
    annual_ebit = annual_ebitda - annual_depreciation
    annual_ebt = annual_ebit - annual_interest
    tax_expense = max(0.0, annual_ebt * tax_rate) if finance.taxable_entity else 0.0
    year1_net_income = annual_ebt - tax_expense
    year1_fcfe = year1_net_income + annual_depreciation - annual_principal
    year1_unlevered_fcf = annual_ebit * (1 - tax_rate) + annual_depreciation

    required_equity_return = equity_size * finance.cost_of_equity

    levelized_capex = total_capex / life
    financing_cost_annual = max(0.0, annual_debt_service - levelized_capex * finance.debt_fraction)
    btax_breakeven = (levelized_capex + breakdown.total_opex + financing_cost_annual) / average_flow

    if finance.taxable_entity:
        if tax_rate >= 1:
            raise InvalidInputError("combined tax rate", "equity return cannot be grossed up at 100% tax")
        grossed_up_equity_return = required_equity_return / (1 - tax_rate)
    else:
        grossed_up_equity_return = required_equity_return
    atax_breakeven = (breakdown.total_opex + annual_debt_service + grossed_up_equity_return) / average_flow

    return FinancialResult(
        total_capex=total_capex,
        pipeline_capex=breakdown.pipeline_capex,
        pipeline_opex=breakdown.pipeline_opex,
        power_cost=breakdown.power_cost,
        total_opex=breakdown.total_opex,
        combined_tax_rate=tax_rate,
        after_tax_cost_of_debt=after_tax_cost_of_debt,
        wacc=wacc,
        debt_size=debt_size,
        equity_size=equity_size,
        annual_debt_service=annual_debt_service,
        average_debt_balance=average_debt_balance,
        annual_interest=annual_interest,
        annual_principal=annual_principal,
        annual_depreciation=annual_depreciation,
        annual_revenue=revenue_base,
        annual_ebitda=annual_ebitda,
        annual_ebit=annual_ebit,
        annual_ebt=annual_ebt,
        tax_expense=tax_expense,
        net_income=year1_net_income,
        fcfe=year1_fcfe,
        unlevered_fcf=year1_unlevered_fcf,
        required_equity_return=required_equity_return,
        years=tuple(range(life + 1)),
        revenue=_with_outlay(revenue),
        opex=_with_outlay(opex),
        power_opex=_with_outlay(power),
        ebitda=_with_outlay(ebitda),
        depreciation=_with_outlay(depreciation),
        ebit=_with_outlay(ebit),
        interest=_with_outlay(interest),
        principal=_with_outlay(principal),
        ebt=_with_outlay(ebt),
        tax=_with_outlay(tax),
        net_income_by_year=_with_outlay(net_income),
        equity_cash_flows=equity_cash_flows,
        project_cash_flows=project_cash_flows,
        lifetime_revenue=float(revenue.sum()),
        lifetime_opex=float(opex.sum()),
        lifetime_power_cost=float(power.sum()),
        equity_irr=internal_rate_of_return(equity_cash_flows),
        project_irr=internal_rate_of_return(project_cash_flows),
        equity_npv=net_present_value(equity_cash_flows, finance.cost_of_equity),
        project_npv=net_present_value(project_cash_flows, wacc),
        payback_months=payback_months(equity_size, year1_fcfe, life),
        discounted_payback_months=discounted_payback_months(equity_size, year1_fcfe, finance.cost_of_equity, life),
        roic=annual_ebit * (1 - tax_rate) / total_capex,
        dscr=_ratio(annual_ebitda, annual_debt_service),
        interest_coverage=_ratio(annual_ebit, annual_interest),
        net_debt_to_ebitda=_ratio(debt_size, annual_ebitda),
        btax_breakeven=btax_breakeven,
        atax_breakeven=atax_breakeven,
        in_service_date=finance.in_service_date,
    )
