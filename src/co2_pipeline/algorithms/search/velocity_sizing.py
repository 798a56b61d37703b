# Smallest standard diameter that carries the design flow near the target velocity.
import math
from typing import Sequence

from ...domain.co2.properties import CO2_PROPERTIES, INCH_TO_M, TARGET_VELOCITY, mass_flow_kg_per_s
from ...domain.co2.specifications import STANDARD_DIAMETERS

WALL_ALLOWANCE = 1.05  # outer/inner diameter estimate


def recommend_velocity_diameter(mass_flow_rate: float, diameters: Sequence[float] = STANDARD_DIAMETERS,
                                target_velocity: float = TARGET_VELOCITY) -> float:
    volumetric_flow = mass_flow_kg_per_s(mass_flow_rate) / CO2_PROPERTIES.density
    required_area = volumetric_flow / target_velocity
    required_inner_in = 2 * math.sqrt(required_area / math.pi) / INCH_TO_M
    estimated_od = required_inner_in * WALL_ALLOWANCE
    for diameter in sorted(diameters):
        if diameter >= estimated_od:
            return diameter
    return max(diameters)
