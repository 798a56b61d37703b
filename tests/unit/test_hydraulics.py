import math
import unittest

from co2_pipeline.domain.co2.properties import UNBOUNDED_SEGMENT_MILES
from co2_pipeline.domain.co2.specifications import STANDARD_DIAMETERS
from co2_pipeline.domain.models import PipelineDesign
from co2_pipeline.evaluation.hydraulics import (
    colebrook_friction_factor,
    evaluate_hydraulics,
    velocity_status,
    wall_thickness,
)


class TestHydraulics(unittest.TestCase):

    def setUp(self):
        self.design = PipelineDesign()
        self.result = evaluate_hydraulics(self.design)

    def test_colebrook_golden_value(self):
        self.assertAlmostEqual(colebrook_friction_factor(1e6, 1e-4), 0.0134414, places=6)

    def test_colebrook_is_deterministic(self):
        self.assertEqual(colebrook_friction_factor(3.8e6, 2e-4), colebrook_friction_factor(3.8e6, 2e-4))

    def test_wall_thickness(self):
        self.assertAlmostEqual(wall_thickness(2100, 8.625, 483), 0.179551, places=5)
        self.assertAlmostEqual(self.result.wall_thickness, 0.179551, places=5)
        self.assertAlmostEqual(self.result.inner_diameter, 8.625 - 2 * 0.179551, places=4)

    def test_reference_velocity(self):
        self.assertAlmostEqual(self.result.velocity, 0.963463, places=4)
        self.assertEqual(self.result.velocity_status, "ok")
        self.assertTrue(self.result.feasible)

    def test_flat_route_needs_one_station(self):
        self.assertEqual(self.result.elevation_pressure, 0)
        self.assertGreater(self.result.max_segment_length, self.design.length)
        self.assertEqual(self.result.pump_stations, 1)
        self.assertAlmostEqual(self.result.total_pump_power, self.result.pump_power_per_station)

    def test_pump_power(self):
        self.assertAlmostEqual(self.result.available_pressure, 800)
        self.assertAlmostEqual(self.result.pump_power_per_station, 245.3129, places=3)

    def test_elevation_gain_adds_pressure_and_stations(self):
        uphill = evaluate_hydraulics(self.design.model_copy(update={"elevation_change": 3000}))
        self.assertAlmostEqual(uphill.elevation_pressure - self.result.elevation_pressure, 1041.0, places=6)
        self.assertAlmostEqual(uphill.total_pressure_loss - self.result.total_pressure_loss, 1041.0, places=6)
        self.assertGreater(uphill.pump_stations, self.result.pump_stations)
        self.assertEqual(uphill.pump_stations, 3)

    def test_velocity_decreases_with_diameter(self):
        velocities = [
            evaluate_hydraulics(self.design.model_copy(update={"diameter": d})).velocity
            for d in STANDARD_DIAMETERS
        ]
        for smaller, larger in zip(velocities, velocities[1:]):
            self.assertGreater(smaller, larger)

    def test_stations_cover_route(self):
        for diameter in STANDARD_DIAMETERS:
            result = evaluate_hydraulics(self.design.model_copy(update={"diameter": diameter}))
            self.assertGreaterEqual(result.pump_stations, 1)
            self.assertGreaterEqual(result.pump_stations,
                                    math.ceil(self.design.length / result.max_segment_length))

    def test_downhill_route_uses_unbounded_segment(self):
        downhill = evaluate_hydraulics(self.design.model_copy(update={"elevation_change": -5000}))
        self.assertEqual(downhill.max_segment_length, UNBOUNDED_SEGMENT_MILES)
        self.assertEqual(downhill.pump_stations, 1)

    def test_velocity_status(self):
        self.assertEqual(velocity_status(0.4), "low")
        self.assertEqual(velocity_status(0.5), "ok")
        self.assertEqual(velocity_status(3.0), "ok")
        self.assertEqual(velocity_status(3.5), "high")

    def test_small_and_large_diameters_are_infeasible(self):
        small = evaluate_hydraulics(self.design.model_copy(update={"diameter": 4.5}))
        large = evaluate_hydraulics(self.design.model_copy(update={"diameter": 12.75}))
        self.assertEqual(small.velocity_status, "high")
        self.assertEqual(large.velocity_status, "low")


if __name__ == '__main__':
    unittest.main()
