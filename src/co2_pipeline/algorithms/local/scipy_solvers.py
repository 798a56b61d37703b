# Root-finding on the project cash flows using SciPy.
import logging

from scipy.optimize import brentq

from ...domain.models import CostResult, PipelineDesign, ScheduleAndFinance
from ...evaluation.financials import project_npv

logger = logging.getLogger(__name__)


def solve_npv_breakeven_price(design: PipelineDesign, finance: ScheduleAndFinance, costs: CostResult,
                              upper: float = 100.0, max_expansions: int = 20) -> float:
    """
    CO2 price ($/t) at which project NPV is zero.

    Costs do not depend on the tariff, so only the project cash flows are re-discounted.
    The bracket starts at [0, upper] and doubles until it holds a sign change.
    """

    def objective(price):
        priced = finance.model_copy(update={"co2_price": price})
        return project_npv(design, priced, costs)

    lower_npv = objective(0.0)
    if lower_npv >= 0:
        return 0.0

    for _ in range(max_expansions):
        if objective(upper) > 0:
            break
        upper *= 2
    else:
        raise ValueError(f"NPV stays negative up to a CO2 price of {upper:.0f} $/t")

    price = brentq(objective, 0.0, upper, xtol=1e-9)
    logger.debug("NPV breakeven price %.4f $/t", price)
    return price
