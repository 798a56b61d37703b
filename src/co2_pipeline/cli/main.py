# The main entry point for the command-line interface (CLI).
import argparse
import logging
import sys

from ..data.providers.defaults import load_inputs, load_points
from ..domain.models import PipelineDesign
from ..services import pipeline_service
from ..utils.serialization import to_json
from ..utils.tables import candidates_frame, cash_flow_frame
from ..utils.visualization import plot_diameter_npv, plot_tornado

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="co2-pipeline",
                                     description="CO2 pipeline sizing and economics")
    parser.add_argument("--config", help="JSON file of model inputs (defaults to the reference case)")
    parser.add_argument("--verbose", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    evaluate = commands.add_parser("evaluate", help="Evaluate the auto-selected or overridden diameter")
    evaluate.add_argument("--override-diameter", type=float, help="Pin the diameter (in)")
    evaluate.add_argument("--csv", help="Write the cash-flow schedule to this CSV")
    evaluate.add_argument("--scenarios", action="store_true",
                          help="Add cost per tonne, breakeven by distance and the leverage curve")

    optimize = commands.add_parser("optimize", help="Evaluate every standard diameter")
    optimize.add_argument("--csv", help="Write the candidate table to this CSV")
    optimize.add_argument("--plot", help="Save the NPV-vs-diameter chart to this image")

    sensitivity = commands.add_parser("sensitivity", help="Tornado analysis of the selected design")
    sensitivity.add_argument("--plot", help="Save the tornado chart to this image")

    route = commands.add_parser("route", help="Measure a route drawn on the demonstration map")
    route.add_argument("--points", required=True, help="JSON list of [x, y] points")
    return parser


def main(argv=None):
    """
    Main function to run the engine and print results as JSON.
    """
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    inputs = load_inputs(args.config)
    logger.info("Loaded inputs for a %.0f mi, %.2f Mt/yr line", inputs.design.length, inputs.design.mass_flow_rate)

    if args.command == "evaluate":
        if args.override_diameter is not None:
            design = PipelineDesign(**{**inputs.design.model_dump(), "diameter": args.override_diameter})
            inputs = inputs.model_copy(update={"design": design, "diameter_mode": "override"})
        result = pipeline_service.evaluate(inputs)
        if args.csv:
            cash_flow_frame(result.evaluation.financials).to_csv(args.csv)
            logger.info("Cash flows saved to '%s'", args.csv)
        output = {
            "mode": result.mode,
            "selected_diameter": result.selected_diameter,
            "optimal_diameter": result.optimal_diameter,
            "velocity_based_diameter": result.velocity_based_diameter,
            "evaluation": result.evaluation,
        }
        if args.scenarios:
            output["cost_per_tonne"] = pipeline_service.cost_per_tonne(result.evaluation, inputs.design, inputs.finance)
            output["breakeven_by_distance"] = pipeline_service.breakeven_by_distance(result.evaluation, inputs.design,
                                                                                     inputs.finance)
            output["leverage_curve"] = pipeline_service.leverage_curve(result.evaluation, inputs.finance)

    elif args.command == "optimize":
        result = pipeline_service.optimize_diameter(inputs.design, inputs.finance, inputs.location,
                                                    inputs.terrain, inputs.terrain_factors)
        table = candidates_frame(result)
        if args.csv:
            table.to_csv(args.csv)
            logger.info("Candidates saved to '%s'", args.csv)
        if args.plot:
            plot_diameter_npv(result, args.plot)
        output = {
            "optimal_diameter": result.optimal_diameter,
            "used_fallback": result.used_fallback,
            "candidates": table.reset_index().to_dict(orient="records"),
        }

    elif args.command == "sensitivity":
        result = pipeline_service.evaluate(inputs)
        entries = pipeline_service.analyze_sensitivity(result.evaluation.financials, inputs.finance)
        if args.plot:
            plot_tornado(entries, args.plot)
        output = {"diameter": result.selected_diameter, "sensitivity": entries}

    else:
        stats = pipeline_service.analyze_route(load_points(args.points))
        output = stats.model_dump()
        output["crossing_count"] = stats.crossing_count

    print(to_json(output))
    return 0


if __name__ == "__main__":
    sys.exit(main())
