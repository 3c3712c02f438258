"""Value Validator / Clamper.

Runs between the power-flow pass and the safety stages. Hand-edited or
AI-generated circuits can carry stray values that push results outside any
physical range; each such value is reported as a critical issue and then
clamped, so hazard and compliance logic only ever see finite, in-range
numbers.
"""

from __future__ import annotations

import logging
import math

from circuitguard.analysis.component_types import numeric_property
from circuitguard.analysis.standards import DEFAULT_LIMITS, ValueLimits
from circuitguard.schemas.analysis import (
    CircuitAnalysis,
    CircuitIssue,
    IssueType,
    Severity,
)
from circuitguard.schemas.circuit import Component, ComponentType

logger = logging.getLogger(__name__)


def clamp(value: float, upper: float) -> float:
    """Clamp into [0, upper]; NaN becomes 0."""
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), upper)


def _check_mapping(
    values: dict[str, float],
    upper: float,
    quantity: str,
    unit: str,
    issues: list[CircuitIssue],
) -> dict[str, float]:
    checked: dict[str, float] = {}
    for component_id, value in values.items():
        if math.isfinite(value) and 0 <= value <= upper:
            checked[component_id] = value
            continue

        clamped = clamp(value, upper)
        logger.warning(
            "Clamped %s of %s from %s to %s", quantity, component_id, value, clamped
        )
        issues.append(
            CircuitIssue(
                id=f"invalid-{quantity}-{component_id}",
                type=IssueType.ERROR,
                severity=Severity.CRITICAL,
                component_id=component_id,
                message=(
                    f"Component {component_id} has impossible {quantity} "
                    f"{value}{unit} (valid range 0–{upper:g}{unit}); "
                    f"clamped to {clamped:g}{unit}"
                ),
                recommendation=f"Check the ratings and values entered for {component_id}",
            )
        )
        checked[component_id] = clamped
    return checked


def validate_analysis_values(
    analysis: CircuitAnalysis,
    limits: ValueLimits = DEFAULT_LIMITS,
) -> CircuitAnalysis:
    """Return a copy of `analysis` with every value in range.

    Out-of-range or non-finite values raise a critical issue naming the
    component and the offending value. Already-valid input comes back
    unchanged with no new issues.
    """
    issues = list(analysis.issues)

    voltages = _check_mapping(analysis.voltages, limits.max_voltage, "voltage", "V", issues)
    currents = _check_mapping(analysis.currents, limits.max_current, "current", "A", issues)
    power = _check_mapping(analysis.power, limits.max_power, "power", "W", issues)

    total_power = analysis.total_power
    if not math.isfinite(total_power) or total_power < 0:
        total_power = sum(power.values())

    return CircuitAnalysis(
        voltages=voltages,
        currents=currents,
        power=power,
        total_power=total_power,
        efficiency=clamp(analysis.efficiency, 100.0),
        issues=issues,
    )


# ═══════════════════════════════════════════════════════════
# Component Sanity
# ═══════════════════════════════════════════════════════════


def validate_component(component: Component) -> list[CircuitIssue]:
    """Flag nominal values that make a component's formula meaningless."""
    issues: list[CircuitIssue] = []

    if component.type == ComponentType.RESISTOR and component.value <= 0:
        issues.append(
            CircuitIssue(
                id=f"invalid-resistor-{component.id}",
                type=IssueType.ERROR,
                severity=Severity.HIGH,
                component_id=component.id,
                message=f"Resistor {component.id} value must be positive",
                recommendation="Set a valid resistance value",
            )
        )

    elif component.type == ComponentType.BATTERY and component.value <= 0:
        issues.append(
            CircuitIssue(
                id=f"invalid-battery-{component.id}",
                type=IssueType.ERROR,
                severity=Severity.HIGH,
                component_id=component.id,
                message=(
                    f"Battery {component.id} voltage must be positive; "
                    "using the circuit supply voltage instead"
                ),
                recommendation="Set a valid voltage value",
            )
        )

    elif component.type == ComponentType.MCB:
        trip = numeric_property(component.properties, "tripCurrent")
        if trip is not None and trip <= 0:
            issues.append(
                CircuitIssue(
                    id=f"invalid-mcb-{component.id}",
                    type=IssueType.ERROR,
                    severity=Severity.HIGH,
                    component_id=component.id,
                    message=f"MCB {component.id} trip current must be positive",
                    recommendation="Set a valid trip current value",
                )
            )

    return issues
