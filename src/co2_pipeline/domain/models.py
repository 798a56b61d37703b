# Domain entities: the input records a caller supplies and the result records the engine returns.
import calendar
from datetime import date
from typing import Dict, Literal, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .co2.specifications import (
    COST_MODELS,
    DEFAULT_TERRAIN_FACTORS,
    DEFAULT_TERRAIN_MIX,
    STANDARD_DIAMETERS,
    TERRAIN_TYPES,
    CostCoefficients,
    state_factor,
)
from ..exceptions import InvalidInputError

TERRAIN_SUM_TOLERANCE = 0.001


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Inputs -----------------------------------------------------------------

class PipelineDesign(_Frozen):
    """Pipe geometry, operating envelope and flow basis of a single design"""

    diameter: float = Field(8.625, description="Outer diameter (in), one of the standard sizes")
    length: float = Field(100.0, gt=0, description="Route length (mi)")
    grade: float = Field(483.0, gt=0, description="Specified minimum yield strength (MPa)")
    design_pressure: float = Field(2100.0, gt=0, description="Maximum operating pressure (psi)")
    pump_inlet_pressure: float = Field(1300.0, ge=0, description="Minimum pressure at pump suction (psi)")
    mass_flow_rate: float = Field(1.0, gt=0, description="Design (nameplate) throughput (Mt/yr)")
    capacity_factor: float = Field(0.9, gt=0, le=1, description="Average / design throughput")
    elevation_change: float = Field(0.0, description="Net elevation gain start to end (ft), uphill positive")
    grade_premium_factor: float = Field(0.0, ge=0, description="Material price sensitivity to grade")
    labour_weight_sensitivity: float = Field(0.3, ge=0, le=1, description="Labour cost sensitivity to pipe weight")

    @field_validator("diameter")
    @classmethod
    def _standard_diameter(cls, value: float) -> float:
        if value not in STANDARD_DIAMETERS:
            raise ValueError(f"diameter {value} is not a standard size {STANDARD_DIAMETERS}")
        return value

    @model_validator(mode="after")
    def _pressure_window(self):
        if self.pump_inlet_pressure >= self.design_pressure:
            raise ValueError("pump_inlet_pressure must be below design_pressure")
        return self

    @property
    def average_flow_rate(self) -> float:
        return self.mass_flow_rate * self.capacity_factor


class ScheduleAndFinance(_Frozen):
    """Schedule, market prices, capital structure, tax and escalation assumptions"""

    construction_start: date = Field(date(2024, 1, 1), description="Construction start date")
    construction_months: int = Field(8, ge=0, description="Construction duration (months)")
    operational_life: int = Field(30, ge=1, description="Operating years")

    co2_price: float = Field(85.0, ge=0, description="Transport tariff ($/t)")
    power_price: float = Field(100.0, ge=0, description="Electricity price ($/MWh)")

    debt_fraction: float = Field(0.6, ge=0, lt=1, description="Share of total CAPEX financed by debt")
    debt_term: int = Field(20, ge=1, description="Debt tenor (years)")
    cost_of_debt: float = Field(0.065, ge=0, description="Interest rate on debt")
    cost_of_equity: float = Field(0.12, ge=0, description="Required return on equity")
    federal_tax: float = Field(0.21, ge=0, le=1)
    state_tax: float = Field(0.05, ge=0, le=1)
    taxable_entity: bool = True
    depreciation_years: int = Field(15, ge=1, description="Straight-line depreciation period")

    cost_base_year: int = Field(2024, description="Year the unit costs are quoted in")
    general_inflation: float = Field(0.025, gt=-1)
    labor_escalation: float = Field(0.03, gt=-1)
    power_escalation: float = Field(0.02, gt=-1)
    revenue_escalation: float = Field(0.02, gt=-1)

    @property
    def combined_tax_rate(self) -> float:
        if not self.taxable_entity:
            return 0.0
        return self.federal_tax + self.state_tax * (1 - self.federal_tax)

    @property
    def years_to_construction_midpoint(self) -> float:
        midpoint = self.construction_start.year + (self.construction_months / 12) / 2
        return max(0.0, midpoint - self.cost_base_year)

    @property
    def in_service_date(self) -> date:
        months = self.construction_start.month - 1 + self.construction_months
        year = self.construction_start.year + months // 12
        month = months % 12 + 1
        day = min(self.construction_start.day, calendar.monthrange(year, month)[1])
        return date(year, month, day)


class LocationContext(_Frozen):
    """Where the line is built and which published cost model prices it"""

    state: str = Field("TX", description="State/region code for the location multiplier")
    economic_model: Literal["Avg", "Brown", "McCoy", "Parker", "Rui"] = "Avg"

    @property
    def state_factor(self) -> float:
        return state_factor(self.state)

    @property
    def cost_coefficients(self) -> CostCoefficients:
        return COST_MODELS[self.economic_model]


class TerrainMix(_Frozen):
    """Share of route length in each terrain category (sums to 1)"""

    flat_dry: float = Field(DEFAULT_TERRAIN_MIX["flat_dry"], ge=0, le=1)
    rolling_hills: float = Field(DEFAULT_TERRAIN_MIX["rolling_hills"], ge=0, le=1)
    mountainous: float = Field(DEFAULT_TERRAIN_MIX["mountainous"], ge=0, le=1)
    marsh_wetland: float = Field(DEFAULT_TERRAIN_MIX["marsh_wetland"], ge=0, le=1)
    river: float = Field(DEFAULT_TERRAIN_MIX["river"], ge=0, le=1)
    existing_row: float = Field(DEFAULT_TERRAIN_MIX["existing_row"], ge=0, le=1)
    high_population: float = Field(DEFAULT_TERRAIN_MIX["high_population"], ge=0, le=1)
    shallow_offshore: float = Field(DEFAULT_TERRAIN_MIX["shallow_offshore"], ge=0, le=1)
    deep_offshore: float = Field(DEFAULT_TERRAIN_MIX["deep_offshore"], ge=0, le=1)

    @model_validator(mode="after")
    def _sums_to_one(self):
        total = sum(self.as_dict().values())
        if abs(total - 1.0) >= TERRAIN_SUM_TOLERANCE:
            raise ValueError(f"terrain shares must sum to 1.0, got {total:.4f}")
        return self

    def as_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in TERRAIN_TYPES}

    @classmethod
    def from_shares(cls, shares: Mapping[str, float]) -> "TerrainMix":
        """Build a mix from unnormalized weights; missing categories are zero."""
        unknown = set(shares) - set(TERRAIN_TYPES)
        if unknown:
            raise InvalidInputError("terrain category", f"unknown {sorted(unknown)}")
        total = sum(shares.values())
        if total <= 0:
            raise InvalidInputError("terrain shares", "total share must be positive")
        return cls(**{key: shares.get(key, 0.0) / total for key in TERRAIN_TYPES})


class TerrainFactors(_Frozen):
    """Labour cost multiplier per terrain category"""

    flat_dry: float = Field(DEFAULT_TERRAIN_FACTORS["flat_dry"], gt=0)
    rolling_hills: float = Field(DEFAULT_TERRAIN_FACTORS["rolling_hills"], gt=0)
    mountainous: float = Field(DEFAULT_TERRAIN_FACTORS["mountainous"], gt=0)
    marsh_wetland: float = Field(DEFAULT_TERRAIN_FACTORS["marsh_wetland"], gt=0)
    river: float = Field(DEFAULT_TERRAIN_FACTORS["river"], gt=0)
    existing_row: float = Field(DEFAULT_TERRAIN_FACTORS["existing_row"], gt=0)
    high_population: float = Field(DEFAULT_TERRAIN_FACTORS["high_population"], gt=0)
    shallow_offshore: float = Field(DEFAULT_TERRAIN_FACTORS["shallow_offshore"], gt=0)
    deep_offshore: float = Field(DEFAULT_TERRAIN_FACTORS["deep_offshore"], gt=0)

    def as_dict(self) -> Dict[str, float]:
        return {key: getattr(self, key) for key in TERRAIN_TYPES}


class ModelInputs(_Frozen):
    """The complete, immutable configuration of one model run"""

    design: PipelineDesign = Field(default_factory=PipelineDesign)
    finance: ScheduleAndFinance = Field(default_factory=ScheduleAndFinance)
    location: LocationContext = Field(default_factory=LocationContext)
    terrain: TerrainMix = Field(default_factory=TerrainMix)
    terrain_factors: TerrainFactors = Field(default_factory=TerrainFactors)
    diameter_mode: Literal["auto", "override"] = Field(
        "auto", description="auto: use the NPV-optimal diameter; override: keep design.diameter")


# --- Results ----------------------------------------------------------------

class EngineeringResult(_Frozen):
    """Hydraulic sizing of one diameter"""

    diameter: float
    wall_thickness: float = Field(..., description="in")
    inner_diameter: float = Field(..., description="in")
    inner_diameter_m: float
    design_flow_rate: float = Field(..., description="Mt/yr")
    average_flow_rate: float = Field(..., description="Mt/yr")
    mass_flow_kg_s: float
    volumetric_flow: float = Field(..., description="m3/s")
    velocity: float = Field(..., description="m/s")
    velocity_status: Literal["low", "ok", "high"]
    reynolds: float
    friction_factor: float
    friction_loss: float = Field(..., description="Friction loss rate (psi/mi)")
    total_friction_loss: float = Field(..., description="psi over the route")
    elevation_pressure: float = Field(..., description="psi, signed with elevation change")
    total_pressure_loss: float = Field(..., description="Friction plus elevation (psi)")
    available_pressure: float = Field(..., description="Design minus pump-inlet pressure (psi)")
    max_segment_length: float = Field(..., description="Longest unboosted segment (mi)")
    pump_stations: int
    pump_power_per_station: float = Field(..., description="kW")
    total_pump_power: float = Field(..., description="kW")

    @property
    def feasible(self) -> bool:
        return self.velocity_status == "ok"


class CostBreakdown(_Frozen):
    """CAPEX and year-1 OPEX line items ($MM)"""

    material: float
    labour: float
    row: float
    misc: float
    pipeline_capex: float
    pump_capex: float
    surge_tank_capex: float
    control_system_capex: float
    facilities_capex: float
    installed_cost: float
    financing_cost: float
    total_capex: float
    pipeline_opex: float
    facility_opex: float
    power_cost: float
    total_opex: float


class CostResult(_Frozen):
    """Cost model output in base-year and construction-midpoint dollars"""

    diameter_factor: float
    state_factor: float
    terrain_location_factor: float
    reference_wall_thickness: float
    wall_thickness_factor: float
    labour_weight_factor: float
    material_grade_factor: float
    years_to_construction: float
    general_escalation_factor: float
    labor_escalation_factor: float
    base: CostBreakdown
    escalated: CostBreakdown

    @property
    def total_capex(self) -> float:
        return self.escalated.total_capex

    @property
    def total_opex(self) -> float:
        return self.escalated.total_opex


class FinancialResult(_Frozen):
    """Capital structure, cash flows and investment metrics ($MM unless noted)"""

    # Cost projections the sensitivity analysis perturbs
    total_capex: float
    pipeline_capex: float
    pipeline_opex: float
    power_cost: float
    total_opex: float

    combined_tax_rate: float
    after_tax_cost_of_debt: float
    wacc: float
    debt_size: float
    equity_size: float
    annual_debt_service: float
    average_debt_balance: float
    annual_interest: float
    annual_principal: float
    annual_depreciation: float

    # Year-1 summary
    annual_revenue: float
    annual_ebitda: float
    annual_ebit: float
    annual_ebt: float
    tax_expense: float
    net_income: float
    fcfe: float
    unlevered_fcf: float
    required_equity_return: float

    # Index 0 is the initial outlay year
    years: Tuple[int, ...]
    revenue: Tuple[float, ...]
    opex: Tuple[float, ...]
    power_opex: Tuple[float, ...]
    ebitda: Tuple[float, ...]
    depreciation: Tuple[float, ...]
    ebit: Tuple[float, ...]
    interest: Tuple[float, ...]
    principal: Tuple[float, ...]
    ebt: Tuple[float, ...]
    tax: Tuple[float, ...]
    net_income_by_year: Tuple[float, ...]
    equity_cash_flows: Tuple[float, ...]
    project_cash_flows: Tuple[float, ...]

    lifetime_revenue: float
    lifetime_opex: float
    lifetime_power_cost: float

    equity_irr: float
    project_irr: float
    equity_npv: float
    project_npv: float
    payback_months: int
    discounted_payback_months: int
    roic: float
    dscr: Optional[float] = Field(None, description="None when there is no debt service")
    interest_coverage: Optional[float] = Field(None, description="None when there is no interest")
    net_debt_to_ebitda: Optional[float] = Field(None, description="None when EBITDA is zero")
    btax_breakeven: float = Field(..., description="$/t")
    # Tariff covering OPEX, debt service and the grossed-up equity return. It is not
    # the NPV-zero price; that is PipelineEvaluation.npv_breakeven_price.
    atax_breakeven: float = Field(..., description="$/t, not an NPV-zero price")
    in_service_date: date


class PipelineEvaluation(_Frozen):
    """Hydraulic, cost and financial results of one diameter"""

    engineering: EngineeringResult
    costs: CostResult
    financials: FinancialResult
    npv_breakeven_price: Optional[float] = Field(
        None, description="CO2 price ($/t) at which project NPV is zero")


class CandidateEvaluation(_Frozen):
    diameter: float
    feasible: bool = Field(..., description="Velocity within the allowed window")
    is_optimal: bool = False
    evaluation: PipelineEvaluation

    @property
    def velocity(self) -> float:
        return self.evaluation.engineering.velocity

    @property
    def project_npv(self) -> float:
        return self.evaluation.financials.project_npv

    @property
    def total_capex(self) -> float:
        return self.evaluation.costs.total_capex


class OptimizationResult(_Frozen):
    """Every standard diameter evaluated, and the one the optimizer picked"""

    candidates: Tuple[CandidateEvaluation, ...]
    optimal_diameter: float
    used_fallback: bool = Field(..., description="No diameter met the velocity window")

    @property
    def optimal(self) -> CandidateEvaluation:
        return next(c for c in self.candidates if c.diameter == self.optimal_diameter)

    @property
    def feasible_candidates(self) -> Tuple[CandidateEvaluation, ...]:
        return tuple(c for c in self.candidates if c.feasible)


class SensitivityEntry(_Frozen):
    driver: str
    low_delta: float = Field(..., description="NPV change at -25% ($MM)")
    high_delta: float = Field(..., description="NPV change at +25% ($MM)")
    spread: float = Field(..., description="|high - low|, the tornado sort key")


class PipelineCrossing(_Frozen):
    pipeline_id: str
    pipeline_name: str
    pipeline_segment: int = Field(..., description="Index of the crossed existing-pipeline segment")
    route_segment: int = Field(..., description="Index of the crossing route segment")
    location: Tuple[float, float] = Field(..., description="Midpoint of the crossing route segment")


class RouteStats(_Frozen):
    total_pixels: float
    total_miles: float
    terrain_fractions: Dict[str, float] = Field(..., description="Per-category share before normalization")
    terrain_mix: TerrainMix
    crossings: Tuple[PipelineCrossing, ...]
    existing_row_fraction: float

    @property
    def crossing_count(self) -> int:
        return len(self.crossings)


class DesignEvaluation(_Frozen):
    """Result of an auto/override run"""

    mode: Literal["auto", "override"]
    selected_diameter: float
    optimal_diameter: float
    velocity_based_diameter: float
    evaluation: PipelineEvaluation
    optimization: OptimizationResult


class CostPerTonne(_Frozen):
    """Breakeven tariff decomposed per average tonne ($/t)"""

    opex: float
    capital_recovery: float
    interest: float
    equity_return: float
    tax_gross_up: float

    @property
    def total(self) -> float:
        return self.opex + self.capital_recovery + self.interest + self.equity_return + self.tax_gross_up


class BreakevenPoint(_Frozen):
    distance: float
    breakeven: float


class LeveragePoint(_Frozen):
    debt_fraction: float
    equity_irr: float
    project_irr: float
