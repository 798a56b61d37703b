# Hydraulic sizing of a dense-phase CO2 line: wall thickness, velocity, pressure loss and pumping.
import logging
import math

import numpy as np

from ..domain.co2.properties import (
    CO2_PROPERTIES,
    DESIGN_FACTOR,
    ELEVATION_PSI_PER_FT,
    INCH_TO_M,
    MAX_VELOCITY,
    MIN_VELOCITY,
    M_PER_MILE,
    MPA_TO_PSI,
    PA_PER_PSI,
    PUMP_EFFICIENCY,
    UNBOUNDED_SEGMENT_MILES,
    CO2Properties,
    mass_flow_kg_per_s,
)
from ..domain.models import EngineeringResult, PipelineDesign

logger = logging.getLogger(__name__)

FRICTION_ITERATIONS = 10
FRICTION_SEED = 0.02


def wall_thickness(pressure: float, diameter: float, grade: float, design_factor: float = DESIGN_FACTOR) -> float:
    """Barlow wall thickness (in) for a design pressure (psi) and SMYS (MPa)"""
    return (pressure * diameter) / (2 * grade * MPA_TO_PSI * design_factor)


def colebrook_friction_factor(reynolds: float, relative_roughness: float,
                              iterations: int = FRICTION_ITERATIONS, seed: float = FRICTION_SEED) -> float:
    """
    Darcy friction factor from the Colebrook-White equation.

    Runs a fixed number of fixed-point iterations from ``seed`` with no
    convergence test, so results are reproducible to the last digit.
    """
    friction_factor = seed
    for _ in range(iterations):
        term = relative_roughness / 3.7 + 2.51 / (reynolds * math.sqrt(friction_factor))
        friction_factor = (-2 * math.log10(term)) ** -2
    return friction_factor


def velocity_status(velocity: float) -> str:
    if velocity > MAX_VELOCITY:
        return "high"
    if velocity < MIN_VELOCITY:
        return "low"
    return "ok"


def evaluate_hydraulics(design: PipelineDesign, properties: CO2Properties = CO2_PROPERTIES) -> EngineeringResult:
    """Size the line at its design (nameplate) flow rate."""
    mass_flow = mass_flow_kg_per_s(design.mass_flow_rate)

    wt = wall_thickness(design.design_pressure, design.diameter, design.grade)
    inner_diameter = design.diameter - 2 * wt
    inner_diameter_m = inner_diameter * INCH_TO_M

    flow_area = np.pi * (inner_diameter_m / 2) ** 2
    volumetric_flow = mass_flow / properties.density
    velocity = volumetric_flow / flow_area

    reynolds = properties.density * velocity * inner_diameter_m / properties.viscosity
    relative_roughness = properties.roughness / inner_diameter_m
    friction_factor = colebrook_friction_factor(reynolds, relative_roughness)

    # Darcy-Weisbach
    pressure_loss_pa_m = friction_factor * properties.density * velocity ** 2 / (2 * inner_diameter_m)
    friction_loss = pressure_loss_pa_m * M_PER_MILE / PA_PER_PSI

    elevation_pressure = design.elevation_change * ELEVATION_PSI_PER_FT
    total_friction_loss = friction_loss * design.length

    available_pressure = design.design_pressure - design.pump_inlet_pressure
    effective_loss = friction_loss + elevation_pressure / design.length
    if effective_loss > 0:
        max_segment_length = available_pressure / effective_loss
    else:
        logger.debug("Effective loss %.3f psi/mi <= 0, treating segment as unbounded", effective_loss)
        max_segment_length = UNBOUNDED_SEGMENT_MILES

    # At least one station for initial compression
    pump_stations = max(1, math.ceil(design.length / max_segment_length))

    pressure_rise_pa = available_pressure * PA_PER_PSI
    pump_power_per_station = mass_flow * pressure_rise_pa / (properties.density * PUMP_EFFICIENCY * 1000)

    return EngineeringResult(
        diameter=design.diameter,
        wall_thickness=wt,
        inner_diameter=inner_diameter,
        inner_diameter_m=inner_diameter_m,
        design_flow_rate=design.mass_flow_rate,
        average_flow_rate=design.average_flow_rate,
        mass_flow_kg_s=mass_flow,
        volumetric_flow=volumetric_flow,
        velocity=float(velocity),
        velocity_status=velocity_status(velocity),
        reynolds=float(reynolds),
        friction_factor=friction_factor,
        friction_loss=float(friction_loss),
        total_friction_loss=float(total_friction_loss),
        elevation_pressure=elevation_pressure,
        total_pressure_loss=float(total_friction_loss + elevation_pressure),
        available_pressure=available_pressure,
        max_segment_length=float(max_segment_length),
        pump_stations=pump_stations,
        pump_power_per_station=pump_power_per_station,
        total_pump_power=pump_power_per_station * pump_stations,
    )
