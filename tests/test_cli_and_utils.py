import io
import json
import os
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import date

import numpy as np
import pandas as pd

from co2_pipeline.cli.main import build_parser, main
from co2_pipeline.data.providers.defaults import default_inputs, load_inputs, load_points
from co2_pipeline.services import pipeline_service
from co2_pipeline.utils.serialization import to_json
from co2_pipeline.utils.tables import candidates_frame, cash_flow_frame, tornado_frame
from co2_pipeline.utils.visualization import plot_diameter_npv, plot_tornado


class TestSerialization(unittest.TestCase):

    def test_numpy_and_dates(self):
        payload = json.loads(to_json({
            "value": np.float64(1.5),
            "count": np.int64(3),
            "flag": np.bool_(True),
            "array": np.arange(3),
            "day": date(2024, 9, 1),
        }))
        self.assertEqual(payload, {"value": 1.5, "count": 3, "flag": True, "array": [0, 1, 2],
                                   "day": "2024-09-01"})

    def test_models(self):
        payload = json.loads(to_json(default_inputs()))
        self.assertEqual(payload["design"]["diameter"], 8.625)
        self.assertEqual(payload["finance"]["construction_start"], "2024-01-01")


class TestTablesAndPlots(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        inputs = default_inputs()
        cls.inputs = inputs
        cls.optimization = pipeline_service.optimize_diameter(inputs.design, inputs.finance, inputs.location,
                                                              inputs.terrain, inputs.terrain_factors)
        cls.financials = cls.optimization.optimal.evaluation.financials
        cls.entries = pipeline_service.analyze_sensitivity(cls.financials, inputs.finance)

    def test_cash_flow_frame(self):
        frame = cash_flow_frame(self.financials)
        self.assertEqual(len(frame), self.inputs.finance.operational_life + 1)
        self.assertIn("net_income", frame.columns)
        self.assertAlmostEqual(frame["cumulative_equity_cash_flow"].iloc[-1], sum(self.financials.equity_cash_flows))

    def test_candidates_frame(self):
        frame = candidates_frame(self.optimization)
        self.assertEqual(len(frame), 12)
        self.assertEqual(frame[frame["is_optimal"]].index.tolist(), [self.optimization.optimal_diameter])

    def test_tornado_frame(self):
        frame = tornado_frame(self.entries)
        self.assertEqual(list(frame.index), [e.driver for e in self.entries])

    def test_plots_are_written(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            tornado = plot_tornado(self.entries, os.path.join(tmpdir, "tornado.png"))
            npv = plot_diameter_npv(self.optimization, os.path.join(tmpdir, "npv.png"))
            self.assertTrue(tornado.exists())
            self.assertTrue(npv.exists())


class TestCLI(unittest.TestCase):

    def run_cli(self, *argv):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            code = main(list(argv))
        self.assertEqual(code, 0)
        return json.loads(buffer.getvalue())

    def test_parser_requires_command(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args([])

    def test_evaluate(self):
        output = self.run_cli("evaluate", "--scenarios")
        self.assertEqual(output["mode"], "auto")
        self.assertEqual(output["selected_diameter"], output["optimal_diameter"])
        self.assertIn("financials", output["evaluation"])
        self.assertEqual(len(output["breakeven_by_distance"]), 12)

    def test_evaluate_override_with_csv(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "cash_flows.csv")
            output = self.run_cli("evaluate", "--override-diameter", "10.75", "--csv", path)
            self.assertEqual(output["mode"], "override")
            self.assertEqual(output["selected_diameter"], 10.75)
            self.assertEqual(len(pd.read_csv(path)), 31)

    def test_optimize(self):
        output = self.run_cli("optimize")
        self.assertEqual(len(output["candidates"]), 12)
        self.assertFalse(output["used_fallback"])

    def test_sensitivity(self):
        output = self.run_cli("sensitivity")
        self.assertEqual(len(output["sensitivity"]), 8)

    def test_route_and_config(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            points_path = os.path.join(tmpdir, "route.json")
            with open(points_path, "w") as f:
                json.dump([[110, 200], [260, 250], [330, 330]], f)
            config_path = os.path.join(tmpdir, "config.json")
            with open(config_path, "w") as f:
                json.dump({"design": {"length": 250}}, f)

            self.assertEqual(len(load_points(points_path)), 3)
            self.assertEqual(load_inputs(config_path).design.length, 250)

            output = self.run_cli("--config", config_path, "route", "--points", points_path)
            self.assertGreater(output["total_miles"], 0)
            self.assertEqual(output["crossing_count"], len(output["crossings"]))


if __name__ == '__main__':
    unittest.main()
