"""Compliance Checker: one verdict per regulatory standard.

Each check returns exactly one ComplianceCheck whose description states the
observed value against the limit; that text is what the safety panel and
the assistant show to the user.
"""

from __future__ import annotations

from typing import Callable

from circuitguard.analysis.component_types import (
    NEC_MANDATORY_PROTECTION,
    NEC_RECOMMENDED_PROTECTION,
    POWER_SOURCES,
)
from circuitguard.analysis.hazards import source_arc_flash_energy
from circuitguard.analysis.standards import DEFAULT_STANDARDS, SafetyStandards
from circuitguard.schemas.analysis import CircuitAnalysis
from circuitguard.schemas.circuit import Circuit
from circuitguard.schemas.safety import ComplianceCheck, ComplianceStatus

StandardCheck = Callable[[CircuitAnalysis, Circuit, SafetyStandards], ComplianceCheck]


def _max(values: dict[str, float]) -> float | None:
    return max(values.values()) if values else None


def check_nec(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> ComplianceCheck:
    """NEC: voltage/current ceilings plus mandatory and recommended protection."""
    limits = standards.nec
    max_voltage = _max(analysis.voltages)
    max_current = _max(analysis.currents)

    present = {c.type for c in circuit.components}
    missing_mandatory = [t.value for t in NEC_MANDATORY_PROTECTION if t not in present]
    missing_recommended = [t.value for t in NEC_RECOMMENDED_PROTECTION if t not in present]

    status = ComplianceStatus.COMPLIANT
    parts: list[str] = []

    if max_voltage is None or max_current is None:
        status = ComplianceStatus.WARNING
        parts.append("Insufficient voltage/current data to fully verify NEC limits")
    elif max_voltage > limits.max_voltage or max_current > limits.max_current:
        status = ComplianceStatus.NON_COMPLIANT
        if max_voltage > limits.max_voltage:
            parts.append(
                f"Max voltage {max_voltage:.1f}V exceeds NEC limit {limits.max_voltage:g}V"
            )
        if max_current > limits.max_current:
            parts.append(
                f"Max current {max_current:.2f}A exceeds NEC limit {limits.max_current:g}A"
            )
    else:
        parts.append(
            f"Voltage {max_voltage:.1f}V (limit {limits.max_voltage:g}V) and current "
            f"{max_current:.2f}A (limit {limits.max_current:g}A) within NEC limits"
        )

    if missing_mandatory:
        status = ComplianceStatus.NON_COMPLIANT
        parts.append(f"Missing critical protection: {', '.join(missing_mandatory)}")
    elif missing_recommended:
        if status != ComplianceStatus.NON_COMPLIANT:
            status = ComplianceStatus.WARNING
        parts.append(f"Consider adding protection: {', '.join(missing_recommended)}")
    else:
        parts.append("All critical protection devices present")

    return ComplianceCheck(
        standard="NEC",
        status=status,
        description=" | ".join(parts),
        requirement=(
            f"Keep voltage ≤ {limits.max_voltage:g}V & current ≤ {limits.max_current:g}A. "
            "Required protection: MCB, RCCB, grounding. Recommended: GFCI, AFCI, "
            "SPD, surge, over/undervoltage, emergency stop."
        ),
    )


def check_osha(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> ComplianceCheck:
    """OSHA: maximum observed voltage against the touch-voltage ceiling."""
    limit = standards.osha.max_touch_voltage
    max_voltage = _max(analysis.voltages)

    if max_voltage is None:
        status = ComplianceStatus.WARNING
        description = (
            "Touch voltage data unavailable – unable to fully verify OSHA compliance"
        )
    elif max_voltage > limit:
        status = ComplianceStatus.WARNING
        description = (
            f"Touch voltage {max_voltage:.1f}V exceeds OSHA recommended limit {limit:g}V"
        )
    else:
        status = ComplianceStatus.COMPLIANT
        description = f"Touch voltage {max_voltage:.1f}V within OSHA safe limit {limit:g}V"

    return ComplianceCheck(
        standard="OSHA",
        status=status,
        description=description,
        requirement=(
            f"Keep accessible touch voltage ≤ {limit:g}V and provide proper "
            "isolation/guards."
        ),
    )


def check_nfpa(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> ComplianceCheck:
    """NFPA 70E: worst-case arc-flash incident energy across all sources."""
    limit = standards.nfpa.max_arc_flash_energy
    sources = [c for c in circuit.components if c.type in POWER_SOURCES]

    worst = 0.0
    for source in sources:
        energy = source_arc_flash_energy(source, analysis, standards)
        if energy is not None:
            worst = max(worst, energy)

    if not sources:
        status = ComplianceStatus.WARNING
        description = "No primary power sources detected – unable to evaluate arc flash risk"
    elif worst == 0:
        status = ComplianceStatus.WARNING
        description = "Arc flash energy could not be calculated – verify fault current data"
    elif worst > limit:
        status = ComplianceStatus.NON_COMPLIANT
        description = (
            f"Arc flash energy {worst:.2f} cal/cm² exceeds NFPA limit {limit:g} cal/cm²"
        )
    else:
        status = ComplianceStatus.COMPLIANT
        description = (
            f"Arc flash energy {worst:.2f} cal/cm² within NFPA limit {limit:g} cal/cm²"
        )

    return ComplianceCheck(
        standard="NFPA",
        status=status,
        description=description,
        requirement=(
            f"Limit incident energy to ≤ {limit:g} cal/cm² at 18\" working distance "
            "and apply appropriate PPE."
        ),
    )


ALL_STANDARD_CHECKS: list[StandardCheck] = [check_nec, check_osha, check_nfpa]


def check_compliance(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
    checks: list[StandardCheck] | None = None,
) -> list[ComplianceCheck]:
    check_fns = checks if checks is not None else ALL_STANDARD_CHECKS
    return [check(analysis, circuit, standards) for check in check_fns]
