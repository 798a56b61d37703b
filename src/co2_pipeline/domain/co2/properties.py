# Physical properties and unit conversions for dense-phase CO2 transport.
from dataclasses import dataclass

SECONDS_PER_YEAR = 365.25 * 24 * 3600
KG_PER_MT = 1e9
INCH_TO_M = 0.0254
PA_PER_PSI = 6894.76
M_PER_MILE = 1609.34
MPA_TO_PSI = 145.037738
HOURS_PER_YEAR = 8760

DESIGN_FACTOR = 0.72
PUMP_EFFICIENCY = 0.75
ELEVATION_PSI_PER_FT = 0.347  # hydrostatic head of dense-phase CO2
UNBOUNDED_SEGMENT_MILES = 999.0

MIN_VELOCITY = 0.5  # m/s, deposition/stagnation
MAX_VELOCITY = 3.0  # m/s, erosion/noise
TARGET_VELOCITY = 2.0  # m/s


@dataclass(frozen=True)
class CO2Properties:
    """Fluid constants assumed for supercritical CO2"""
    density: float = 950.0  # kg/m3
    viscosity: float = 0.00005  # Pa.s
    roughness: float = 0.0000457  # m, commercial steel


CO2_PROPERTIES = CO2Properties()


def mass_flow_kg_per_s(mt_per_year: float) -> float:
    return mt_per_year * KG_PER_MT / SECONDS_PER_YEAR
