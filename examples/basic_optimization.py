# An example script: size the reference line, then re-run it over a drawn route.
from co2_pipeline.data.providers.defaults import default_inputs
from co2_pipeline.services import pipeline_service
from co2_pipeline.utils.serialization import to_json
from co2_pipeline.utils.tables import candidates_frame


def run_basic_optimization():
    """
    Optimizes the reference case and prints the results.
    """
    print("Running basic optimization example...")

    # 1. Reference inputs: 100 mi, 1 Mt/yr, Texas
    inputs = default_inputs()

    # 2. Optimize and evaluate the selected diameter
    result = pipeline_service.evaluate(inputs)
    print("\n--- Candidate diameters ---")
    print(candidates_frame(result.optimization).round(3).to_string())

    financials = result.evaluation.financials
    print(f"\nOptimal diameter: {result.optimal_diameter} in "
          f"(velocity-based: {result.velocity_based_diameter} in)")
    print(f"Project NPV: {financials.project_npv:.2f} $MM, IRR: {financials.project_irr:.1%}")
    print(f"After-tax breakeven: {financials.atax_breakeven:.2f} $/t")

    # 3. Tornado
    entries = pipeline_service.analyze_sensitivity(financials, inputs.finance)
    print("\n--- Sensitivity (JSON) ---")
    print(to_json(entries))

    # 4. Permian Basin to Houston on the demonstration map
    stats = pipeline_service.analyze_route([(140, 230), (260, 300), (340, 360), (430, 380)])
    routed = pipeline_service.evaluate(pipeline_service.apply_route(inputs, stats))
    print(f"\nRoute: {stats.total_miles:.0f} mi, {stats.crossing_count} crossings, "
          f"optimal diameter {routed.optimal_diameter} in, "
          f"NPV {routed.evaluation.financials.project_npv:.2f} $MM")


if __name__ == "__main__":
    run_basic_optimization()
