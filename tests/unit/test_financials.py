import unittest
from datetime import date

from co2_pipeline.domain.models import (
    LocationContext,
    PipelineDesign,
    ScheduleAndFinance,
    TerrainFactors,
    TerrainMix,
)
from co2_pipeline.evaluation.costs import evaluate_costs
from co2_pipeline.evaluation.financials import (
    annuity_factor,
    capital_recovery_factor,
    discounted_payback_months,
    evaluate_financials,
    internal_rate_of_return,
    net_present_value,
    payback_months,
    project_npv,
)
from co2_pipeline.evaluation.hydraulics import evaluate_hydraulics
from co2_pipeline.exceptions import InvalidInputError


class TestFinancialHelpers(unittest.TestCase):

    def test_capital_recovery_factor(self):
        self.assertAlmostEqual(capital_recovery_factor(0.0, 10), 0.1)
        self.assertAlmostEqual(capital_recovery_factor(0.1, 10), 0.162745, places=6)

    def test_annuity_factor(self):
        self.assertAlmostEqual(annuity_factor(0.1, 10), 6.144567, places=6)
        with self.assertRaises(InvalidInputError) as ctx:
            annuity_factor(0.0, 10)
        self.assertEqual(ctx.exception.quantity, "WACC")

    def test_net_present_value(self):
        self.assertAlmostEqual(net_present_value([-100, 110], 0.1), 0.0)
        self.assertAlmostEqual(net_present_value([-100, 50, 50], 0.0), 0.0)
        with self.assertRaises(InvalidInputError):
            net_present_value([-100, 110], -1.0)

    def test_internal_rate_of_return(self):
        self.assertAlmostEqual(internal_rate_of_return([-100, 110]), 0.1, places=6)
        self.assertAlmostEqual(internal_rate_of_return([-100, 0, 121]), 0.1, places=4)
        self.assertAlmostEqual(internal_rate_of_return([-100, 60, 60]), 0.130662, places=4)

    def test_irr_without_root_warns(self):
        with self.assertLogs("co2_pipeline.evaluation.financials", level="WARNING"):
            irr = internal_rate_of_return([-100, -1, -1])
        self.assertEqual(irr, 10.0)

    def test_irr_converging_on_last_step_does_not_warn(self):
        # From a seed of 0 the third Newton step lands within tolerance
        with self.assertNoLogs("co2_pipeline.evaluation.financials", level="WARNING"):
            irr = internal_rate_of_return([-100, 110], seed=0.0, max_iterations=3)
        self.assertAlmostEqual(irr, 0.1, places=6)

    def test_irr_stays_in_bounds(self):
        irr = internal_rate_of_return([-100, 1, 1])
        self.assertGreaterEqual(irr, -0.99)
        self.assertLessEqual(irr, 10.0)

    def test_payback_months(self):
        self.assertEqual(payback_months(100, 25, 30), 48)
        self.assertEqual(payback_months(100, 30, 30), 40)
        self.assertEqual(payback_months(100, -5, 30), 360)
        self.assertEqual(payback_months(100, 0, 30), 360)

    def test_discounted_payback_months(self):
        self.assertEqual(discounted_payback_months(100, 30, 0.1, 30), 60)
        self.assertEqual(discounted_payback_months(100, 5, 0.1, 30), 360)


class TestFinancialModel(unittest.TestCase):

    def setUp(self):
        self.design = PipelineDesign()
        self.finance = ScheduleAndFinance()
        self.costs = self._costs(self.design, self.finance)
        self.result = evaluate_financials(self.design, self.finance, self.costs)

    @staticmethod
    def _costs(design, finance):
        engineering = evaluate_hydraulics(design)
        return evaluate_costs(design, engineering, finance, LocationContext(), TerrainMix(), TerrainFactors())

    def test_sequence_lengths(self):
        expected = self.finance.operational_life + 1
        for name in ("years", "revenue", "opex", "power_opex", "ebitda", "depreciation", "ebit", "interest",
                     "principal", "ebt", "tax", "net_income_by_year", "equity_cash_flows", "project_cash_flows"):
            self.assertEqual(len(getattr(self.result, name)), expected, name)

    def test_initial_outlays(self):
        self.assertAlmostEqual(self.result.equity_cash_flows[0], -self.result.equity_size)
        self.assertAlmostEqual(self.result.project_cash_flows[0], -self.result.total_capex)
        self.assertEqual(self.result.revenue[0], 0)

    def test_capital_structure(self):
        r = self.result
        self.assertAlmostEqual(r.debt_size + r.equity_size, r.total_capex)
        self.assertAlmostEqual(r.debt_size, 0.6 * r.total_capex)
        self.assertAlmostEqual(r.combined_tax_rate, 0.2495)
        self.assertAlmostEqual(r.wacc, 0.6 * 0.065 * (1 - 0.2495) + 0.4 * 0.12)

    def test_coverage_ratios(self):
        r = self.result
        self.assertAlmostEqual(r.dscr, r.annual_ebitda / r.annual_debt_service)
        self.assertAlmostEqual(r.interest_coverage, r.annual_ebit / r.annual_interest)
        self.assertAlmostEqual(r.net_debt_to_ebitda, r.debt_size / r.annual_ebitda)
        self.assertAlmostEqual(r.roic, r.annual_ebit * (1 - r.combined_tax_rate) / r.total_capex)

    def test_schedules_end_on_time(self):
        r = self.result
        self.assertEqual(r.interest[self.finance.debt_term + 1], 0)
        self.assertEqual(r.depreciation[self.finance.depreciation_years + 1], 0)
        self.assertAlmostEqual(r.interest[1], r.annual_interest)
        self.assertAlmostEqual(sum(r.depreciation), r.total_capex)

    def test_escalation(self):
        self.assertAlmostEqual(self.result.revenue[1], 0.9 * 85)
        self.assertAlmostEqual(self.result.revenue[2], 0.9 * 85 * 1.02)
        self.assertAlmostEqual(self.result.lifetime_revenue, sum(self.result.revenue))

    def test_reference_case_is_viable(self):
        self.assertGreater(self.result.project_npv, 0)
        self.assertGreater(self.result.equity_irr, self.finance.cost_of_equity)
        self.assertLess(self.result.atax_breakeven, self.finance.co2_price)
        self.assertEqual(self.result.in_service_date, date(2024, 9, 1))

    def test_irr_zeroes_npv(self):
        self.assertAlmostEqual(net_present_value(self.result.project_cash_flows, self.result.project_irr), 0.0,
                               places=3)

    def test_no_debt(self):
        finance = self.finance.model_copy(update={"debt_fraction": 0.0})
        result = evaluate_financials(self.design, finance, self._costs(self.design, finance))
        self.assertEqual(result.debt_size, 0)
        self.assertIsNone(result.dscr)
        self.assertIsNone(result.interest_coverage)
        self.assertAlmostEqual(result.wacc, finance.cost_of_equity)

    def test_zero_ebitda_has_no_leverage_ratio(self):
        no_opex = self.costs.escalated.model_copy(
            update={"pipeline_opex": 0.0, "facility_opex": 0.0, "power_cost": 0.0, "total_opex": 0.0})
        costs = self.costs.model_copy(update={"escalated": no_opex})
        finance = self.finance.model_copy(update={"co2_price": 0.0})
        with self.assertLogs("co2_pipeline.evaluation.financials", level="WARNING"):
            result = evaluate_financials(self.design, finance, costs)
        self.assertEqual(result.annual_ebitda, 0)
        self.assertIsNone(result.net_debt_to_ebitda)

    def test_project_npv_matches_full_model(self):
        self.assertAlmostEqual(project_npv(self.design, self.finance, self.costs), self.result.project_npv)
        finance = self.finance.model_copy(update={"co2_price": 20.0})
        self.assertAlmostEqual(project_npv(self.design, finance, self.costs),
                               evaluate_financials(self.design, finance, self.costs).project_npv)

    def test_tax_exempt_entity(self):
        finance = self.finance.model_copy(update={"taxable_entity": False})
        result = evaluate_financials(self.design, finance, self.costs)
        self.assertEqual(result.combined_tax_rate, 0)
        self.assertEqual(sum(result.tax), 0)
        self.assertLess(result.atax_breakeven, self.result.atax_breakeven)

    def test_full_tax_cannot_be_grossed_up(self):
        finance = self.finance.model_copy(update={"federal_tax": 1.0})
        with self.assertRaises(InvalidInputError):
            evaluate_financials(self.design, finance, self.costs)

    def test_higher_price_raises_npv(self):
        finance = self.finance.model_copy(update={"co2_price": 100.0})
        self.assertGreater(evaluate_financials(self.design, finance, self.costs).project_npv,
                           self.result.project_npv)


if __name__ == '__main__':
    unittest.main()
