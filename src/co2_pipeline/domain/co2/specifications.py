# Standard line-pipe sizes and the cost lookup tables used by the cost model.
from dataclasses import dataclass
from typing import Dict

STANDARD_DIAMETERS = (4.5, 6.625, 8.625, 10.75, 12.75, 16.0, 20.0, 24.0, 30.0, 36.0, 42.0, 48.0)

REFERENCE_DIAMETER = 8.625
REFERENCE_GRADE = 483.0  # X70 baseline for wall thickness and material premium

GRADES = {
    "X42": 290.0,
    "X52": 359.0,
    "X60": 414.0,
    "X65": 448.0,
    "X70": 483.0,
    "X80": 552.0,
}

TERRAIN_TYPES = (
    "flat_dry",
    "rolling_hills",
    "mountainous",
    "marsh_wetland",
    "river",
    "existing_row",
    "high_population",
    "shallow_offshore",
    "deep_offshore",
)

DEFAULT_TERRAIN_FACTORS = {
    "flat_dry": 1.0,
    "rolling_hills": 1.3,
    "mountainous": 2.5,  # rock
    "marsh_wetland": 1.8,
    "river": 2.2,  # HDD or open-cut
    "existing_row": 2.2,
    "high_population": 1.6,
    "shallow_offshore": 1.5,  # <200m, S-lay
    "deep_offshore": 4.0,  # >200m, J-lay
}

DEFAULT_TERRAIN_MIX = {
    "flat_dry": 0.70,
    "rolling_hills": 0.10,
    "mountainous": 0.05,
    "marsh_wetland": 0.03,
    "river": 0.05,
    "existing_row": 0.02,
    "high_population": 0.03,
    "shallow_offshore": 0.02,
    "deep_offshore": 0.00,
}

STATE_FACTORS = {
    "Avg": 1.0,
    "TX": 0.9,
    "LA": 0.92,
    "OK": 0.93,
    "ND": 1.05,
    "CA": 1.35,
    "NY": 1.25,
    "PA": 1.1,
}


@dataclass(frozen=True)
class CostCoefficients:
    """Base pipeline unit costs ($MM per mile) of one published cost model"""
    material: float
    labour: float
    row: float
    misc: float


COST_MODELS: Dict[str, CostCoefficients] = {
    "Avg": CostCoefficients(0.118, 0.283, 0.062, 0.145),
    "Brown": CostCoefficients(0.105, 0.265, 0.055, 0.135),
    "McCoy": CostCoefficients(0.125, 0.295, 0.068, 0.155),
    "Parker": CostCoefficients(0.112, 0.275, 0.058, 0.140),
    "Rui": CostCoefficients(0.130, 0.305, 0.072, 0.160),
}

# Facilities ($MM)
PUMP_STATION_FIXED_COST = 0.136
PUMP_COST_PER_KW = 0.00215
SURGE_TANK_COST = 1.77
CONTROL_SYSTEM_COST = 0.19

PIPELINE_OPEX_RATE = 0.025
FACILITY_OPEX_RATE = 0.04


def state_factor(state: str) -> float:
    return STATE_FACTORS.get(state, 1.0)
