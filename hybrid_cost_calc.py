"""
Hybrid Energy Cost Calculator - derivation engine

Pure formulas behind the plug-in hybrid cost dashboard: converts what the
driver spent (or the car's consumption rate) into per-kilometre costs for
electricity and fuel, works out the break-even electricity price, and feeds
the charts and the sensitivity matrix.

Features:
- Two input modes: spend + distance, or consumption rate + unit price
- Break-even ("critical") electricity price
- Charge-or-refuel recommendation with projected annual savings
- Price sweeps for the cost, critical-price and cost-ratio charts
- Annual cost scenarios and a 2-D price sensitivity matrix
- Input advisories, chart builders and CSV export
"""

import csv
import logging
from dataclasses import dataclass
from enum import Enum
from io import StringIO
from typing import Iterator, List, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from matplotlib.colors import ListedColormap

logger = logging.getLogger(__name__)


# ============================================================================
# CONSTANTS AND DEFAULTS
# ============================================================================

CURRENCY = "¥"

ANNUAL_DISTANCE_KM = 15000
DECISION_EPSILON = 0.01          # currency/km
DIFF_HIGHLIGHT_THRESHOLD = 0.02  # currency/km, colours the difference card
EQUAL_PERCENT_THRESHOLD = 1.0    # %, sensitivity cells closer than this are "equal"

# (start, end, step)
ELECTRIC_PRICE_SWEEP = (0.5, 5.0, 0.1)
FUEL_PRICE_SWEEP = (5.0, 12.0, 0.2)

# (label, electricity multiplier, fuel multiplier)
SCENARIOS = [
    ('Current prices', 1.0, 1.0),
    ('Electricity +50%', 1.5, 1.0),
    ('Electricity +100%', 2.0, 1.0),
    ('Fuel +30%', 1.0, 1.3),
    ('Fuel +50%', 1.0, 1.5),
]

ELECTRIC_OFFSETS = [-0.40, -0.30, -0.20, -0.10, 0, 0.10, 0.20, 0.30, 0.40, 0.50, 0.60]
FUEL_OFFSETS = [-0.30, -0.20, -0.10, 0, 0.10, 0.20, 0.30, 0.40, 0.50]

DEFAULTS = {
    'electric_spend': 29.0,        # spent on one charge
    'electric_distance': 50.0,     # km driven on it
    'electric_price': 2.1,         # per kWh
    'electric_rate_per_100': 27.62,
    'fuel_spend': 100.0,           # spent on one refuel
    'fuel_distance': 200.0,        # km driven on it
    'fuel_price': 7.0,             # per litre
    'fuel_rate_per_100': 7.0,
}


# ============================================================================
# VALUE RECORDS
# ============================================================================

@dataclass(frozen=True)
class RateInput:
    """Consumption rate (kWh or L per 100 km) and the unit price paid."""
    unit_price: float
    rate_per_100: float


@dataclass(frozen=True)
class SpendDistanceInput:
    """Money spent on one charge/refuel and the distance it covered."""
    spend: float
    distance: float
    unit_price: float


EnergyInput = Union[RateInput, SpendDistanceInput]


@dataclass(frozen=True)
class InputSnapshot:
    """Canonical (rate form) snapshot of every input the engine needs."""
    electric_price: float
    fuel_price: float
    electric_rate_per_100: float
    fuel_rate_per_100: float


@dataclass(frozen=True)
class CostResult:
    electric_cost_per_km: float
    fuel_cost_per_km: float
    diff: float
    critical_electric_price: float
    electric_cost_per_100km: float = 0.0
    fuel_cost_per_100km: float = 0.0
    electric_rate_per_100: float = 0.0
    fuel_rate_per_100: float = 0.0


class DecisionKind(str, Enum):
    """Which energy source is currently cheaper per kilometre."""

    FUEL = "fuel"
    ELECTRIC = "electric"
    EQUAL = "equal"


@dataclass(frozen=True)
class Decision:
    kind: DecisionKind
    title: str
    severity: str  # 'warning', 'success' or 'info'
    guidance: str
    saving_per_km: float
    annual_saving: float
    critical_electric_price: float


@dataclass(frozen=True)
class SweepPoint:
    parameter: float
    value: float


@dataclass(frozen=True)
class CostSweepPoint:
    price: float
    electric_cost_per_km: float
    fuel_cost_per_km: float


@dataclass(frozen=True)
class ScenarioBar:
    label: str
    electric_multiplier: float
    fuel_multiplier: float
    annual_electric: float
    annual_fuel: float


class CellClass(str, Enum):
    EQUAL = "equal"
    ELECTRIC_BETTER = "electric-better"
    FUEL_BETTER = "fuel-better"


@dataclass(frozen=True)
class SensitivityCell:
    electric_offset: float
    fuel_offset: float
    electric_cost_per_km: float
    fuel_cost_per_km: float
    diff: float  # absolute
    diff_percent: float
    classification: CellClass
    is_current: bool


@dataclass(frozen=True)
class SensitivityMatrix:
    """Grid of cells, rows indexed by fuel offset, columns by electric offset."""
    electric_offsets: Tuple[float, ...]
    fuel_offsets: Tuple[float, ...]
    current_electric_cost_per_km: float
    current_fuel_cost_per_km: float
    rows: Tuple[Tuple[SensitivityCell, ...], ...]

    def cell(self, electric_offset: float, fuel_offset: float) -> SensitivityCell:
        """Look up the cell for a pair of offsets."""
        row = self.rows[self.fuel_offsets.index(fuel_offset)]
        return row[self.electric_offsets.index(electric_offset)]

    def iter_cells(self) -> Iterator[SensitivityCell]:
        for row in self.rows:
            yield from row

    @property
    def shape(self) -> Tuple[int, int]:
        """(fuel offsets, electric offsets), the same orientation as ``rows``."""
        return len(self.fuel_offsets), len(self.electric_offsets)


# ============================================================================
# UNIT NORMALISER
# ============================================================================

def cost_per_km_from_spend(spend: float, distance: float) -> float:
    """Cost per km from money spent over a distance; 0 for zero distance."""
    return spend / distance if distance > 0 else 0.0


def cost_per_km_from_rate(unit_price: float, rate_per_100: float) -> float:
    """Cost per km from a unit price and consumption per 100 km."""
    return (unit_price * rate_per_100) / 100


def rate_per_100_from_cost(cost_per_km: float, unit_price: float) -> float:
    """
    Reverse derivation: the consumption rate implied by a per-km cost.

    Parameters
    ----------
    cost_per_km : float
        Cost per kilometre (currency/km)
    unit_price : float
        Price per kWh or per litre

    Returns
    -------
    float
        Consumption per 100 km, or 0 when the unit price is 0
    """
    cost_per_100km = cost_per_km * 100
    return cost_per_100km / unit_price if unit_price > 0 else 0.0


def energy_cost_per_km(energy: EnergyInput) -> float:
    """Per-km cost of either input mode."""
    if isinstance(energy, SpendDistanceInput):
        return cost_per_km_from_spend(energy.spend, energy.distance)
    return cost_per_km_from_rate(energy.unit_price, energy.rate_per_100)


def to_rate_input(energy: EnergyInput) -> RateInput:
    """Convert either input mode to the canonical rate form."""
    if isinstance(energy, RateInput):
        return energy
    cost = cost_per_km_from_spend(energy.spend, energy.distance)
    return RateInput(
        unit_price=energy.unit_price,
        rate_per_100=rate_per_100_from_cost(cost, energy.unit_price),
    )


def snapshot_from_inputs(electric: EnergyInput, fuel: EnergyInput) -> InputSnapshot:
    """Build the canonical InputSnapshot from two inputs of any mode."""
    electric_rate = to_rate_input(electric)
    fuel_rate = to_rate_input(fuel)
    return InputSnapshot(
        electric_price=electric_rate.unit_price,
        fuel_price=fuel_rate.unit_price,
        electric_rate_per_100=electric_rate.rate_per_100,
        fuel_rate_per_100=fuel_rate.rate_per_100,
    )


# ============================================================================
# BREAK-EVEN CALCULATOR
# ============================================================================

def compute_critical_electric_price(
    fuel_cost_per_km: float,
    electric_rate_per_100: float
) -> float:
    """
    Electricity price at which charging costs exactly as much as refuelling.

    Parameters
    ----------
    fuel_cost_per_km : float
        Current fuel cost per kilometre
    electric_rate_per_100 : float
        Electric consumption in kWh/100 km, held fixed

    Returns
    -------
    float
        Break-even price per kWh, or 0 when the electric rate is 0
    """
    if electric_rate_per_100 > 0:
        return (fuel_cost_per_km * 100) / electric_rate_per_100
    logger.debug("Electric rate is zero; critical price falls back to 0")
    return 0.0


def compute_costs(electric: EnergyInput, fuel: EnergyInput) -> CostResult:
    """
    Derive per-km costs, implied consumption and the break-even price.

    Each side may be given in either input mode. Spend + distance inputs keep
    their per-km cost even when the unit price is unknown (0); only the
    implied consumption rate collapses to 0 in that case.

    Returns
    -------
    CostResult
        Per-km and per-100 km costs, implied rates, difference and critical price
    """
    electric_cost_per_km = energy_cost_per_km(electric)
    fuel_cost_per_km = energy_cost_per_km(fuel)

    electric_rate_per_100 = to_rate_input(electric).rate_per_100
    fuel_rate_per_100 = to_rate_input(fuel).rate_per_100

    return CostResult(
        electric_cost_per_km=electric_cost_per_km,
        fuel_cost_per_km=fuel_cost_per_km,
        diff=electric_cost_per_km - fuel_cost_per_km,
        critical_electric_price=compute_critical_electric_price(
            fuel_cost_per_km, electric_rate_per_100
        ),
        electric_cost_per_100km=electric_cost_per_km * 100,
        fuel_cost_per_100km=fuel_cost_per_km * 100,
        electric_rate_per_100=electric_rate_per_100,
        fuel_rate_per_100=fuel_rate_per_100,
    )


def compute_snapshot_costs(snapshot: InputSnapshot) -> CostResult:
    """Evaluate a canonical InputSnapshot."""
    return compute_costs(
        RateInput(snapshot.electric_price, snapshot.electric_rate_per_100),
        RateInput(snapshot.fuel_price, snapshot.fuel_rate_per_100),
    )


# ============================================================================
# DECISION CLASSIFIER
# ============================================================================

def classify_decision(
    costs: CostResult,
    annual_distance_km: float = ANNUAL_DISTANCE_KM
) -> Decision:
    """
    Recommend charging or refuelling from the per-km cost difference.

    A difference within +/- DECISION_EPSILON counts as a tie.
    """
    diff = costs.diff
    critical = costs.critical_electric_price
    saving = abs(diff)
    annual_saving = saving * annual_distance_km

    if diff > DECISION_EPSILON:
        kind = DecisionKind.FUEL
        title = "⛽ Recommendation: refuelling is cheaper"
        severity = 'warning'
        guidance = (
            f"Electricity must drop to {critical:.2f} {CURRENCY}/kWh or below "
            "for charging to pay off"
        )
    elif diff < -DECISION_EPSILON:
        kind = DecisionKind.ELECTRIC
        title = "⚡ Recommendation: charging is cheaper"
        severity = 'success'
        guidance = (
            f"Electricity could rise to {critical:.2f} {CURRENCY}/kWh "
            "and charging would still pay off"
        )
    else:
        kind = DecisionKind.EQUAL
        title = "⚖️ Recommendation: costs are roughly even"
        severity = 'info'
        guidance = f"Critical electricity price: {critical:.2f} {CURRENCY}/kWh"

    return Decision(
        kind=kind,
        title=title,
        severity=severity,
        guidance=guidance,
        saving_per_km=saving,
        annual_saving=annual_saving,
        critical_electric_price=critical,
    )


def diff_tone(diff: float) -> str:
    """Tone of the cost-difference card: 'warning', 'saving' or 'neutral'."""
    if diff > DIFF_HIGHLIGHT_THRESHOLD:
        return 'warning'
    if diff < -DIFF_HIGHLIGHT_THRESHOLD:
        return 'saving'
    return 'neutral'


# ============================================================================
# SWEEP GENERATORS
# ============================================================================

def sweep_values(start: float, end: float, step: float) -> Iterator[float]:
    """
    Evenly spaced parameter values from start to end inclusive.

    The point count is fixed up front so float drift can never drop the
    endpoint.
    """
    count = int(round((end - start) / step)) + 1
    for value in np.linspace(start, end, count):
        yield float(value)


def iter_cost_vs_electric_price(
    costs: CostResult,
    price_range: Tuple[float, float, float] = ELECTRIC_PRICE_SWEEP
) -> Iterator[CostSweepPoint]:
    """Per-km charging cost across electricity prices, against today's fuel cost."""
    for price in sweep_values(*price_range):
        yield CostSweepPoint(
            price=price,
            electric_cost_per_km=cost_per_km_from_rate(price, costs.electric_rate_per_100),
            fuel_cost_per_km=costs.fuel_cost_per_km,
        )


def iter_critical_vs_fuel_price(
    costs: CostResult,
    price_range: Tuple[float, float, float] = FUEL_PRICE_SWEEP
) -> Iterator[SweepPoint]:
    """Critical electricity price as the fuel price moves, consumption held fixed."""
    for fuel_price in sweep_values(*price_range):
        fuel_cost_per_km = cost_per_km_from_rate(fuel_price, costs.fuel_rate_per_100)
        yield SweepPoint(
            parameter=fuel_price,
            value=compute_critical_electric_price(
                fuel_cost_per_km, costs.electric_rate_per_100
            ),
        )


def iter_scenario_bars(
    costs: CostResult,
    scenarios: List[Tuple[str, float, float]] = SCENARIOS,
    annual_distance_km: float = ANNUAL_DISTANCE_KM
) -> Iterator[ScenarioBar]:
    """Annual cost of charging only vs. refuelling only under price scenarios."""
    for label, elec_mult, fuel_mult in scenarios:
        yield ScenarioBar(
            label=label,
            electric_multiplier=elec_mult,
            fuel_multiplier=fuel_mult,
            annual_electric=costs.electric_cost_per_km * elec_mult * annual_distance_km,
            annual_fuel=costs.fuel_cost_per_km * fuel_mult * annual_distance_km,
        )


def iter_cost_ratio(
    costs: CostResult,
    price_range: Tuple[float, float, float] = ELECTRIC_PRICE_SWEEP
) -> Iterator[SweepPoint]:
    """Charging/refuelling cost ratio across electricity prices."""
    for point in iter_cost_vs_electric_price(costs, price_range):
        if costs.fuel_cost_per_km > 0:
            ratio = point.electric_cost_per_km / costs.fuel_cost_per_km
        else:
            ratio = 0.0
        yield SweepPoint(parameter=point.price, value=ratio)


# ============================================================================
# SENSITIVITY MATRIX
# ============================================================================

def compute_sensitivity_cell(
    electric_cost_per_km: float,
    fuel_cost_per_km: float,
    electric_offset: float,
    fuel_offset: float
) -> SensitivityCell:
    """Evaluate one pair of simultaneous price offsets."""
    e_cost = electric_cost_per_km * (1 + electric_offset)
    f_cost = fuel_cost_per_km * (1 + fuel_offset)
    diff = e_cost - f_cost
    larger = max(e_cost, f_cost)
    diff_percent = abs(diff) / larger * 100 if larger > 0 else 0.0

    if diff_percent < EQUAL_PERCENT_THRESHOLD:
        classification = CellClass.EQUAL
    elif diff < 0:
        classification = CellClass.ELECTRIC_BETTER
    else:
        classification = CellClass.FUEL_BETTER

    return SensitivityCell(
        electric_offset=electric_offset,
        fuel_offset=fuel_offset,
        electric_cost_per_km=e_cost,
        fuel_cost_per_km=f_cost,
        diff=abs(diff),
        diff_percent=diff_percent,
        classification=classification,
        is_current=(electric_offset == 0 and fuel_offset == 0),
    )


def build_sensitivity_matrix(
    costs: CostResult,
    electric_offsets: List[float] = ELECTRIC_OFFSETS,
    fuel_offsets: List[float] = FUEL_OFFSETS
) -> SensitivityMatrix:
    """
    Build the grid of simultaneous electricity/fuel price perturbations.

    Parameters
    ----------
    costs : CostResult
        Current per-km costs, used as the centre of the grid
    electric_offsets, fuel_offsets : list of float
        Fractional price changes (e.g. -0.1 for -10%)

    Returns
    -------
    SensitivityMatrix
        One row per fuel offset, one column per electric offset
    """
    rows = tuple(
        tuple(
            compute_sensitivity_cell(
                costs.electric_cost_per_km, costs.fuel_cost_per_km, ev, fv
            )
            for ev in electric_offsets
        )
        for fv in fuel_offsets
    )
    return SensitivityMatrix(
        electric_offsets=tuple(electric_offsets),
        fuel_offsets=tuple(fuel_offsets),
        current_electric_cost_per_km=costs.electric_cost_per_km,
        current_fuel_cost_per_km=costs.fuel_cost_per_km,
        rows=rows,
    )


def format_offset(offset: float) -> str:
    """Header label for a price offset: 'Current', '+10%' or '-40%'."""
    if offset == 0:
        return "Current"
    sign = "+" if offset > 0 else ""
    return f"{sign}{offset * 100:.0f}%"


CELL_LABELS = {
    CellClass.EQUAL: "⚖️ Even",
    CellClass.ELECTRIC_BETTER: "⚡ Charge",
    CellClass.FUEL_BETTER: "⛽ Refuel",
}


def sensitivity_frame(matrix: SensitivityMatrix) -> pd.DataFrame:
    """Render the matrix as a labelled table (fuel offsets down, electric across)."""
    columns = [
        f"{format_offset(ev)} ({matrix.current_electric_cost_per_km * (1 + ev):.3f}/km)"
        for ev in matrix.electric_offsets
    ]
    index = [
        f"{format_offset(fv)} ({matrix.current_fuel_cost_per_km * (1 + fv):.3f}/km)"
        for fv in matrix.fuel_offsets
    ]
    data = []
    for row in matrix.rows:
        labels = []
        for cell in row:
            label = "★ Current" if cell.is_current else CELL_LABELS[cell.classification]
            labels.append(f"{label} (Δ{cell.diff:.4f})")
        data.append(labels)

    df = pd.DataFrame(data, index=index, columns=columns)
    df.index.name = "Fuel ↓ / Electricity →"
    return df


# ============================================================================
# TABULAR VIEWS
# ============================================================================

def cost_sweep_frame(points: List[CostSweepPoint]) -> pd.DataFrame:
    return pd.DataFrame({
        'Electricity price': [p.price for p in points],
        'Charging cost (/km)': [p.electric_cost_per_km for p in points],
        'Refuelling cost (/km)': [p.fuel_cost_per_km for p in points],
    })


def sweep_frame(points: List[SweepPoint], parameter: str, value: str) -> pd.DataFrame:
    return pd.DataFrame({
        parameter: [p.parameter for p in points],
        value: [p.value for p in points],
    })


def scenario_frame(bars: List[ScenarioBar]) -> pd.DataFrame:
    return pd.DataFrame({
        'Scenario': [b.label for b in bars],
        'Charging only (annual)': [b.annual_electric for b in bars],
        'Refuelling only (annual)': [b.annual_fuel for b in bars],
    })


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_inputs(
    electric: EnergyInput,
    fuel: EnergyInput
) -> list:
    """
    Check inputs and return a list of warning strings.

    Nothing here blocks the calculation: the engine falls back to 0 for every
    undefined quotient, these messages just tell the user why a figure is 0.
    """
    warnings = []

    for name, energy, unit, high_price, high_rate in (
        ("Electricity", electric, "kWh", 10.0, 60.0),
        ("Fuel", fuel, "L", 30.0, 30.0),
    ):
        if energy.unit_price <= 0:
            if isinstance(energy, SpendDistanceInput):
                warnings.append(
                    f"{name} price is 0; consumption and critical price cannot be derived."
                )
            else:
                warnings.append(f"{name} price is 0, so cost per km is 0.")
        elif energy.unit_price > high_price:
            warnings.append(
                f"{name} price above {high_price:.0f} {CURRENCY}/{unit} is unusually high. "
                "Verify your input."
            )

        if isinstance(energy, SpendDistanceInput):
            if energy.distance <= 0:
                warnings.append(f"{name} distance is 0; cost per km is treated as 0.")
            if energy.spend <= 0:
                warnings.append(f"{name} spend is 0, so cost per km is 0.")
        elif energy.rate_per_100 <= 0:
            warnings.append(f"{name} consumption per 100 km is 0.")

        rate = to_rate_input(energy).rate_per_100
        if rate > high_rate:
            warnings.append(
                f"{name} consumption of {rate:.1f} {unit}/100 km is unusually high "
                "for a passenger car."
            )

    return warnings


# ============================================================================
# PLOTTING FUNCTIONS
# ============================================================================

ELECTRIC_COLOUR = '#00a6d6'
FUEL_COLOUR = '#f97316'


def create_cost_vs_price_plot(
    points: List[CostSweepPoint],
    current_price: float = None
) -> plt.Figure:
    """Line chart of per-km charging cost vs. electricity price."""
    prices = [p.price for p in points]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(prices, [p.electric_cost_per_km for p in points],
            linewidth=2, color=ELECTRIC_COLOUR, label='Charging cost (/km)')
    ax.plot(prices, [p.fuel_cost_per_km for p in points],
            linewidth=2, color=FUEL_COLOUR, label='Refuelling cost (/km)')
    ax.fill_between(prices, [p.electric_cost_per_km for p in points],
                    color=ELECTRIC_COLOUR, alpha=0.1)
    if current_price and prices and prices[0] <= current_price <= prices[-1]:
        ax.axvline(current_price, color='#666666', linestyle='--', linewidth=1,
                   label=f'Current price ({current_price:.2f})')
    ax.set_xlabel(f'Electricity price ({CURRENCY}/kWh)', fontsize=12)
    ax.set_ylabel(f'Cost ({CURRENCY}/km)', fontsize=12)
    ax.set_title('Effect of Electricity Price on Cost', fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    ax.legend()
    if prices:
        ax.set_xlim(prices[0], prices[-1])
    return fig


def create_critical_price_plot(points: List[SweepPoint]) -> plt.Figure:
    """Line chart of the critical electricity price vs. fuel price."""
    fig, ax = plt.subplots(figsize=(10, 6))
    fuel_prices = [p.parameter for p in points]
    critical = [p.value for p in points]
    ax.plot(fuel_prices, critical, linewidth=2, color='#22c55e')
    ax.fill_between(fuel_prices, critical, color='#22c55e', alpha=0.2)
    ax.set_xlabel(f'Fuel price ({CURRENCY}/L)', fontsize=12)
    ax.set_ylabel(f'Critical electricity price ({CURRENCY}/kWh)', fontsize=12)
    ax.set_title('Critical Electricity Price vs. Fuel Price', fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    if fuel_prices:
        ax.set_xlim(fuel_prices[0], fuel_prices[-1])
    return fig


def create_scenario_bar_chart(bars: List[ScenarioBar]) -> plt.Figure:
    """
    Grouped bar chart of annual charging-only vs. refuelling-only cost.
    """
    labels = [b.label for b in bars]
    x = np.arange(len(labels))
    width = 0.38

    fig, ax = plt.subplots(figsize=(10, 5))
    elec_bars = ax.bar(x - width / 2, [b.annual_electric for b in bars], width,
                       color=ELECTRIC_COLOUR, label='Charging only')
    fuel_bars = ax.bar(x + width / 2, [b.annual_fuel for b in bars], width,
                       color=FUEL_COLOUR, label='Refuelling only')
    for bar in list(elec_bars) + list(fuel_bars):
        ax.text(
            bar.get_x() + bar.get_width() / 2,
            bar.get_height(),
            f"{bar.get_height():,.0f}",
            ha='center', va='bottom', fontsize=9
        )
    ax.set_xticks(x)
    ax.set_xticklabels(labels)
    ax.set_ylabel(f'Annual cost ({CURRENCY})', fontsize=12)
    ax.set_title(
        f'Annual Cost by Scenario ({ANNUAL_DISTANCE_KM:,} km)',
        fontsize=14, fontweight='bold'
    )
    ax.grid(axis='y', alpha=0.3)
    ax.legend()
    fig.tight_layout()
    return fig


def create_cost_ratio_plot(points: List[SweepPoint]) -> plt.Figure:
    """Line chart of the charging/refuelling cost ratio with a parity line."""
    fig, ax = plt.subplots(figsize=(10, 6))
    prices = [p.parameter for p in points]
    ax.plot(prices, [p.value for p in points], linewidth=2, color='#7c3aed')
    ax.axhline(1.0, color='#666666', linestyle='--', linewidth=1, label='Parity')
    ax.set_xlabel(f'Electricity price ({CURRENCY}/kWh)', fontsize=12)
    ax.set_ylabel('Cost ratio (charging / refuelling)', fontsize=12)
    ax.set_title('Cost Ratio Trend', fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    ax.legend()
    if prices:
        ax.set_xlim(prices[0], prices[-1])
    return fig


CELL_CODES = {
    CellClass.ELECTRIC_BETTER: 0,
    CellClass.EQUAL: 1,
    CellClass.FUEL_BETTER: 2,
}


def create_sensitivity_heatmap(matrix: SensitivityMatrix) -> plt.Figure:
    """Heat-map of the sensitivity matrix, coloured by cheaper energy source."""
    codes = np.array([
        [CELL_CODES[cell.classification] for cell in row] for row in matrix.rows
    ])
    cmap = ListedColormap([ELECTRIC_COLOUR, '#facc15', FUEL_COLOUR])

    fig, ax = plt.subplots(figsize=(11, 6))
    ax.imshow(codes, cmap=cmap, vmin=0, vmax=2, aspect='auto')
    for i, row in enumerate(matrix.rows):
        for j, cell in enumerate(row):
            text = "★" if cell.is_current else f"{cell.diff:.3f}"
            ax.text(j, i, text, ha='center', va='center', fontsize=8,
                    fontweight='bold' if cell.is_current else 'normal')
    ax.set_xticks(range(len(matrix.electric_offsets)))
    ax.set_xticklabels([format_offset(v) for v in matrix.electric_offsets])
    ax.set_yticks(range(len(matrix.fuel_offsets)))
    ax.set_yticklabels([format_offset(v) for v in matrix.fuel_offsets])
    ax.set_xlabel('Electricity price change', fontsize=12)
    ax.set_ylabel('Fuel price change', fontsize=12)
    ax.set_title(
        'Sensitivity Matrix (blue: charge, yellow: even, orange: refuel)',
        fontsize=13, fontweight='bold'
    )
    fig.tight_layout()
    return fig


# ============================================================================
# CSV EXPORT FUNCTION
# ============================================================================

def generate_csv_summary(inputs: dict, costs: CostResult, decision: Decision) -> str:
    """
    Generate a CSV summary: the raw inputs, a side-by-side cost table for
    charging and refuelling, then the recommendation.
    """
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)

    writer.writerow(['Hybrid Energy Cost Calculator'])
    writer.writerow([])
    writer.writerow(['INPUTS'])
    for key, value in inputs.items():
        writer.writerow([key, value])

    writer.writerow([])
    writer.writerow(['COSTS', 'Charging', 'Refuelling'])
    writer.writerow([f'Cost ({CURRENCY}/km)',
                     f"{costs.electric_cost_per_km:.4f}", f"{costs.fuel_cost_per_km:.4f}"])
    writer.writerow([f'Cost ({CURRENCY}/100 km)',
                     f"{costs.electric_cost_per_100km:.2f}", f"{costs.fuel_cost_per_100km:.2f}"])
    writer.writerow(['Consumption (per 100 km)',
                     f"{costs.electric_rate_per_100:.2f} kWh", f"{costs.fuel_rate_per_100:.2f} L"])
    writer.writerow([f'Annual cost ({ANNUAL_DISTANCE_KM} km)',
                     f"{costs.electric_cost_per_km * ANNUAL_DISTANCE_KM:.0f}",
                     f"{costs.fuel_cost_per_km * ANNUAL_DISTANCE_KM:.0f}"])

    writer.writerow([])
    writer.writerow(['RECOMMENDATION'])
    writer.writerow(['Cheaper source', decision.kind.value])
    writer.writerow([f'Difference ({CURRENCY}/km)', f"{costs.diff:.4f}"])
    writer.writerow([f'Critical electricity price ({CURRENCY}/kWh)',
                     f"{decision.critical_electric_price:.2f}"])
    writer.writerow([f'Annual saving ({CURRENCY})', f"{decision.annual_saving:.0f}"])
    writer.writerow(['Guidance', decision.guidance])

    return output.getvalue()
