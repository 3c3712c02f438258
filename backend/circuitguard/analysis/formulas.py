"""Electrical formulas used by the power-flow pass and the safety checks.

Pure functions. Every division is guarded at the point of computation so
that callers never see NaN or Infinity from a zero denominator.
"""

from __future__ import annotations

import math

SQRT3 = math.sqrt(3)

# Standard miniature breaker sizes (A), IEC 60898.
STANDARD_BREAKER_RATINGS = (6, 10, 16, 20, 25, 32, 40, 50, 63, 80, 100, 125)

# Arc-flash model constants
ARC_FLASH_COEFFICIENT = 1.732
ARC_FAULT_MULTIPLIER = 10.0
MAX_ARC_FAULT_CURRENT_A = 10_000.0
WORKING_DISTANCE_CM = 45.72  # 18 in
DEFAULT_CLEARING_TIME_S = 0.1

# Upper bound of incident energy (cal/cm²) for PPE categories 0-4
PPE_CATEGORY_LIMITS = (1.2, 4.0, 8.0, 25.0, 40.0)

GROUND_FAULT_PATH_OHMS = 1000.0
MAX_SERIES_RESISTANCE_OHMS = 1e6


def finite_or_zero(value: float) -> float:
    """Clamp non-finite or negative results to 0."""
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def calculate_power(voltage: float, current: float, power_factor: float = 1.0) -> float:
    return voltage * current * power_factor


def calculate_current(voltage: float, resistance: float) -> float:
    return voltage / resistance if resistance > 0 else 0.0


def calculate_efficiency(output_power: float, input_power: float) -> float:
    """Output/input in percent, capped at 100."""
    if input_power <= 0:
        return 0.0
    return min(output_power / input_power * 100, 100.0)


def calculate_load_current(
    power_w: float,
    voltage: float,
    power_factor: float,
    three_phase: bool = False,
) -> float:
    """Line current drawn by a load of known real power.

    Single-phase: I = P / (V · pf)
    Three-phase:  I = P / (√3 · V · pf)
    """
    denominator = voltage * power_factor
    if three_phase:
        denominator *= SQRT3
    if denominator == 0:
        return 0.0
    return finite_or_zero(power_w / denominator)


def calculate_resistor_current(voltage: float, resistance: float) -> float:
    """I = V / R with R capped at 1 MΩ; zero for non-positive R."""
    if resistance <= 0:
        return 0.0
    return voltage / min(resistance, MAX_SERIES_RESISTANCE_OHMS)


def recommended_protective_rating(current: float, safety_factor: float = 1.25) -> int:
    """Minimum breaker/fuse rating for a load, rounded up to whole amps."""
    return math.ceil(current * safety_factor)


def calculate_breaker_rating(current: float, safety_factor: float = 1.25) -> int:
    """Smallest standard breaker size covering the load with margin."""
    required = current * safety_factor
    for rating in STANDARD_BREAKER_RATINGS:
        if rating >= required:
            return rating
    return STANDARD_BREAKER_RATINGS[-1]


def calculate_ground_fault_current(
    voltage: float, resistance: float = GROUND_FAULT_PATH_OHMS
) -> float:
    return calculate_current(voltage, resistance)


def arc_fault_current(operating_current: float) -> float:
    """Prospective fault current, estimated as 10x operating, capped at 10 kA."""
    return min(operating_current * ARC_FAULT_MULTIPLIER, MAX_ARC_FAULT_CURRENT_A)


def calculate_arc_flash_energy(
    voltage: float,
    fault_current: float,
    clearing_time_s: float = DEFAULT_CLEARING_TIME_S,
    distance_cm: float = WORKING_DISTANCE_CM,
) -> float:
    """Incident energy E = 1.732 · V · I · t / (4π · d²)."""
    if distance_cm <= 0:
        return 0.0
    energy = (
        ARC_FLASH_COEFFICIENT
        * voltage
        * fault_current
        * clearing_time_s
        / (4 * math.pi * distance_cm**2)
    )
    return finite_or_zero(energy)


def ppe_category(incident_energy: float) -> int | None:
    """NFPA 70E PPE category (0-4); None when energy exceeds category 4."""
    for category, limit in enumerate(PPE_CATEGORY_LIMITS):
        if incident_energy <= limit:
            return category
    return None
