# CAPEX and OPEX of a sized line, escalated from the cost base year to the construction midpoint.
from typing import Mapping

from ..domain.co2.properties import HOURS_PER_YEAR
from ..domain.co2.specifications import (
    CONTROL_SYSTEM_COST,
    FACILITY_OPEX_RATE,
    PIPELINE_OPEX_RATE,
    PUMP_COST_PER_KW,
    PUMP_STATION_FIXED_COST,
    REFERENCE_DIAMETER,
    REFERENCE_GRADE,
    SURGE_TANK_COST,
)
from ..domain.models import (
    CostBreakdown,
    CostResult,
    EngineeringResult,
    LocationContext,
    PipelineDesign,
    ScheduleAndFinance,
    TerrainFactors,
    TerrainMix,
)
from ..exceptions import InvalidInputError
from .hydraulics import wall_thickness

DIAMETER_COST_EXPONENT = 1.2
CONSTRUCTION_DRAW_FRACTION = 0.5  # debt is on average half drawn during construction


def diameter_factor(diameter: float) -> float:
    return (diameter / REFERENCE_DIAMETER) ** DIAMETER_COST_EXPONENT


def terrain_location_factor(shares: Mapping[str, float], factors: Mapping[str, float]) -> float:
    """Share-weighted terrain multiplier; shares are normalized, so any positive scale gives the same factor."""
    total = sum(shares.values())
    if total <= 0:
        raise InvalidInputError("terrain shares", "total share must be positive")
    return sum(share * factors.get(key, 1.0) for key, share in shares.items()) / total


def escalation_factor(rate: float, years: float) -> float:
    return (1 + rate) ** years


def material_grade_factor(grade: float, premium_factor: float) -> float:
    return 1 + (grade - REFERENCE_GRADE) / REFERENCE_GRADE * premium_factor


def power_cost(total_pump_power_kw: float, capacity_factor: float, power_price: float) -> float:
    """Year-1 power bill ($MM) for pumps running at the average throughput"""
    mwh = total_pump_power_kw * HOURS_PER_YEAR * capacity_factor / 1000
    return mwh * power_price / 1e6


def _breakdown(material, labour, row, misc, engineering, design, finance) -> CostBreakdown:
    pipeline_capex = material + labour + row + misc

    pump_capex = PUMP_STATION_FIXED_COST * engineering.pump_stations + PUMP_COST_PER_KW * engineering.total_pump_power
    facilities_capex = pump_capex + SURGE_TANK_COST + CONTROL_SYSTEM_COST

    installed_cost = pipeline_capex + facilities_capex
    financing_cost = (installed_cost * finance.cost_of_debt * (finance.construction_months / 12)
                      * CONSTRUCTION_DRAW_FRACTION)

    pipeline_opex = pipeline_capex * PIPELINE_OPEX_RATE
    facility_opex = facilities_capex * FACILITY_OPEX_RATE
    power = power_cost(engineering.total_pump_power, design.capacity_factor, finance.power_price)

    return CostBreakdown(
        material=material,
        labour=labour,
        row=row,
        misc=misc,
        pipeline_capex=pipeline_capex,
        pump_capex=pump_capex,
        surge_tank_capex=SURGE_TANK_COST,
        control_system_capex=CONTROL_SYSTEM_COST,
        facilities_capex=facilities_capex,
        installed_cost=installed_cost,
        financing_cost=financing_cost,
        total_capex=installed_cost + financing_cost,
        pipeline_opex=pipeline_opex,
        facility_opex=facility_opex,
        power_cost=power,
        total_opex=pipeline_opex + facility_opex + power,
    )


def evaluate_costs(design: PipelineDesign, engineering: EngineeringResult, finance: ScheduleAndFinance,
                   location: LocationContext, terrain: TerrainMix, terrain_factors: TerrainFactors) -> CostResult:
    """
    Price the line with the selected cost model.

    Material, ROW and misc escalate with general inflation; labour with its own
    rate. Facilities and OPEX are quoted in construction-year dollars already.
    """
    coefficients = location.cost_coefficients
    state = location.state_factor
    d_factor = diameter_factor(design.diameter)
    terrain_factor = terrain_location_factor(terrain.as_dict(), terrain_factors.as_dict())

    grade_factor = material_grade_factor(design.grade, design.grade_premium_factor)
    reference_wt = wall_thickness(design.design_pressure, design.diameter, REFERENCE_GRADE)
    wt_factor = engineering.wall_thickness / reference_wt
    sensitivity = design.labour_weight_sensitivity
    labour_weight = (1 - sensitivity) + sensitivity * wt_factor

    material_base = coefficients.material * design.length * d_factor * state * grade_factor
    labour_base = coefficients.labour * design.length * d_factor * state * terrain_factor * labour_weight
    row_base = coefficients.row * design.length * state
    misc_base = coefficients.misc * design.length * d_factor * state

    years = finance.years_to_construction_midpoint
    general = escalation_factor(finance.general_inflation, years)
    labor = escalation_factor(finance.labor_escalation, years)

    return CostResult(
        diameter_factor=d_factor,
        state_factor=state,
        terrain_location_factor=terrain_factor,
        reference_wall_thickness=reference_wt,
        wall_thickness_factor=wt_factor,
        labour_weight_factor=labour_weight,
        material_grade_factor=grade_factor,
        years_to_construction=years,
        general_escalation_factor=general,
        labor_escalation_factor=labor,
        base=_breakdown(material_base, labour_base, row_base, misc_base, engineering, design, finance),
        escalated=_breakdown(material_base * general, labour_base * labor, row_base * general,
                             misc_base * general, engineering, design, finance),
    )
