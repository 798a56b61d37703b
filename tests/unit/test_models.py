import unittest
from datetime import date

from pydantic import ValidationError

from co2_pipeline.domain.models import (
    LocationContext,
    ModelInputs,
    PipelineDesign,
    ScheduleAndFinance,
    TerrainFactors,
    TerrainMix,
)
from co2_pipeline.exceptions import InvalidInputError


class TestInputModels(unittest.TestCase):

    def test_reference_defaults(self):
        inputs = ModelInputs()
        self.assertEqual(inputs.design.diameter, 8.625)
        self.assertAlmostEqual(inputs.design.average_flow_rate, 0.9)
        self.assertEqual(inputs.location.state, "TX")
        self.assertEqual(inputs.diameter_mode, "auto")
        self.assertAlmostEqual(sum(inputs.terrain.as_dict().values()), 1.0)

    def test_diameter_must_be_standard(self):
        with self.assertRaises(ValidationError):
            PipelineDesign(diameter=9.0)

    def test_pressure_window(self):
        with self.assertRaises(ValidationError):
            PipelineDesign(pump_inlet_pressure=2200)

    def test_capacity_factor_range(self):
        with self.assertRaises(ValidationError):
            PipelineDesign(capacity_factor=0)
        with self.assertRaises(ValidationError):
            PipelineDesign(capacity_factor=1.2)

    def test_debt_fraction_range(self):
        with self.assertRaises(ValidationError):
            ScheduleAndFinance(debt_fraction=1.0)

    def test_models_are_frozen_and_hashable(self):
        design = PipelineDesign()
        with self.assertRaises(ValidationError):
            design.length = 50
        self.assertEqual(hash(design), hash(PipelineDesign()))

    def test_unknown_cost_model(self):
        with self.assertRaises(ValidationError):
            LocationContext(economic_model="Smith")

    def test_state_factor(self):
        self.assertAlmostEqual(LocationContext(state="CA").state_factor, 1.35)
        self.assertAlmostEqual(LocationContext(state="ZZ").state_factor, 1.0)

    def test_terrain_mix_must_sum_to_one(self):
        with self.assertRaises(ValidationError):
            TerrainMix(flat_dry=0.9)
        TerrainMix(flat_dry=0.7005)

    def test_terrain_mix_from_shares(self):
        mix = TerrainMix.from_shares({"flat_dry": 3, "river": 1})
        self.assertAlmostEqual(mix.flat_dry, 0.75)
        self.assertAlmostEqual(mix.river, 0.25)
        self.assertEqual(mix.deep_offshore, 0)
        with self.assertRaises(InvalidInputError):
            TerrainMix.from_shares({"lava": 1})
        with self.assertRaises(InvalidInputError):
            TerrainMix.from_shares({"flat_dry": 0})

    def test_terrain_factors_positive(self):
        with self.assertRaises(ValidationError):
            TerrainFactors(river=0)

    def test_tax_and_schedule(self):
        finance = ScheduleAndFinance()
        self.assertAlmostEqual(finance.combined_tax_rate, 0.2495)
        self.assertEqual(finance.in_service_date, date(2024, 9, 1))
        late = ScheduleAndFinance(construction_start=date(2024, 1, 31), construction_months=1)
        self.assertEqual(late.in_service_date, date(2024, 2, 29))
        self.assertEqual(ScheduleAndFinance(taxable_entity=False).combined_tax_rate, 0)

    def test_partial_config(self):
        inputs = ModelInputs.model_validate_json('{"design": {"length": 250}, "diameter_mode": "override"}')
        self.assertEqual(inputs.design.length, 250)
        self.assertEqual(inputs.design.diameter, 8.625)
        self.assertEqual(inputs.diameter_mode, "override")
        self.assertEqual(inputs.finance, ScheduleAndFinance())


if __name__ == '__main__':
    unittest.main()
