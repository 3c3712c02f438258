"""Hazard Analyzer: six independent electrical hazard detectors.

Each detector reads a validated CircuitAnalysis plus the Circuit and
returns zero or more SafetyHazard records:
  1. Overcurrent   (NEC current ceiling, component current ratings)
  2. Overvoltage   (NEC voltage ceiling, ratings, OSHA touch voltage)
  3. Short circuit (dual-condition current heuristic)
  4. Ground fault  (missing ground, unprotected fault current)
  5. Thermal       (power ratings, unrated dissipation)
  6. Arc flash     (incident energy against the NFPA ceiling)

Detectors are order-independent; `analyze_hazards` runs them and removes
duplicates by (type, component, description).
"""

from __future__ import annotations

from typing import Callable

from circuitguard.analysis import formulas
from circuitguard.analysis.component_types import (
    ACCESSIBLE_TYPES,
    DEFAULT_LINE_VOLTAGE,
    GROUND_FAULT_DEVICES,
    HIGH_POWER_APPLIANCES,
    POWER_SOURCES,
    PROTECTION_DEVICES,
    RESIDUAL_CURRENT_DEVICES,
    has_component_type,
    resolve_properties,
)
from circuitguard.analysis.standards import DEFAULT_STANDARDS, SafetyStandards
from circuitguard.schemas.analysis import CircuitAnalysis, Severity
from circuitguard.schemas.circuit import Circuit, Component, ComponentType
from circuitguard.schemas.safety import HazardType, SafetyHazard

Detector = Callable[[CircuitAnalysis, Circuit, SafetyStandards], list[SafetyHazard]]


# ─── Internal Helpers ───


def _sources(circuit: Circuit) -> list[Component]:
    return [c for c in circuit.components if c.type in POWER_SOURCES]


def _metadata_supply_voltage(circuit: Circuit) -> float:
    voltage = circuit.metadata.voltage
    return voltage if voltage > 0 else DEFAULT_LINE_VOLTAGE


def source_arc_flash_energy(
    source: Component,
    analysis: CircuitAnalysis,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> float | None:
    """Incident energy at a source, or None below the arc-flash voltage."""
    voltage = analysis.voltages.get(source.id, 0.0)
    current = analysis.currents.get(source.id, 0.0)
    if voltage <= standards.arc_flash_min_voltage:
        return None

    clearing_time = resolve_properties(source).clearing_time
    return formulas.calculate_arc_flash_energy(
        voltage,
        formulas.arc_fault_current(current),
        clearing_time_s=clearing_time,
    )


# ═══════════════════════════════════════════════════════════
# Detector 1: Overcurrent
# ═══════════════════════════════════════════════════════════


def detect_overcurrent(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> list[SafetyHazard]:
    """Source current above the NEC ceiling; component current above rating."""
    hazards: list[SafetyHazard] = []
    max_current = standards.nec.max_current

    for source in _sources(circuit):
        current = analysis.currents.get(source.id, 0.0)
        if current > max_current:
            hazards.append(
                SafetyHazard(
                    id=f"overcurrent-{source.id}",
                    type=HazardType.OVERCURRENT,
                    severity=Severity.CRITICAL,
                    component_id=source.id,
                    description=(
                        f"Current {current:.2f}A exceeds NEC limit of {max_current:g}A"
                    ),
                    mitigation="Add current limiting devices or reduce load",
                )
            )

    for component in circuit.components:
        rating = resolve_properties(component).current_rating
        current = analysis.currents.get(component.id, 0.0)
        if rating is not None and current > rating:
            hazards.append(
                SafetyHazard(
                    id=f"component-overcurrent-{component.id}",
                    type=HazardType.OVERCURRENT,
                    severity=Severity.HIGH,
                    component_id=component.id,
                    description=(
                        f"Component {component.id} current {current:.2f}A "
                        f"exceeds rating {rating:g}A"
                    ),
                    mitigation=(
                        "Replace with higher rated component or add current limiting"
                    ),
                )
            )

    return hazards


# ═══════════════════════════════════════════════════════════
# Detector 2: Overvoltage
# ═══════════════════════════════════════════════════════════


def detect_overvoltage(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> list[SafetyHazard]:
    """NEC ceiling, component voltage ratings, and unprotected touch voltage."""
    hazards: list[SafetyHazard] = []
    max_voltage = standards.nec.max_voltage
    touch_limit = standards.osha.max_touch_voltage
    protected = has_component_type(circuit.components, GROUND_FAULT_DEVICES)
    exposed: list[str] = []

    for component in circuit.components:
        voltage = analysis.voltages.get(component.id, 0.0)

        if voltage > max_voltage:
            hazards.append(
                SafetyHazard(
                    id=f"overvoltage-{component.id}",
                    type=HazardType.OVERVOLTAGE,
                    severity=Severity.CRITICAL,
                    component_id=component.id,
                    description=(
                        f"Voltage {voltage:.2f}V exceeds NEC limit of {max_voltage:g}V"
                    ),
                    mitigation=(
                        "Use appropriate voltage rating or add voltage protection"
                    ),
                )
            )

        rating = resolve_properties(component).voltage_rating
        if rating is not None and voltage > rating:
            hazards.append(
                SafetyHazard(
                    id=f"component-overvoltage-{component.id}",
                    type=HazardType.OVERVOLTAGE,
                    severity=Severity.HIGH,
                    component_id=component.id,
                    description=(
                        f"Component {component.id} voltage {voltage:.2f}V "
                        f"exceeds rating {rating:g}V"
                    ),
                    mitigation="Replace with higher voltage rated component",
                )
            )

        if not protected and component.type in ACCESSIBLE_TYPES and voltage > touch_limit:
            exposed.append(f"{component.type.value} ({component.id})")

    if exposed:
        hazards.append(
            SafetyHazard(
                id="touch-voltage-accessible",
                type=HazardType.OVERVOLTAGE,
                severity=Severity.HIGH,
                description=(
                    f"{len(exposed)} accessible component(s) exceed OSHA touch "
                    f"voltage limit of {touch_limit:g}V: {', '.join(exposed)}"
                ),
                mitigation=(
                    "Install GFCI/RCCB protection and ensure proper insulation/grounding"
                ),
            )
        )

    return hazards


# ═══════════════════════════════════════════════════════════
# Detector 3: Short Circuit
# ═══════════════════════════════════════════════════════════


def detect_short_circuit(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> list[SafetyHazard]:
    """Flag a source whose current exceeds both an absolute floor AND
    `voltage_multiple` times its voltage."""
    hazards: list[SafetyHazard] = []
    rule = standards.short_circuit
    supply = _metadata_supply_voltage(circuit)
    floor = (
        rule.low_voltage_floor_current
        if supply <= rule.low_voltage_threshold
        else rule.floor_current
    )

    for source in _sources(circuit):
        current = analysis.currents.get(source.id, 0.0)
        voltage = analysis.voltages.get(source.id) or supply

        if not 0 < voltage <= standards.nec.max_voltage:
            continue
        if current > floor and current > voltage * rule.voltage_multiple:
            hazards.append(
                SafetyHazard(
                    id=f"short-circuit-{source.id}",
                    type=HazardType.SHORT_CIRCUIT,
                    severity=Severity.CRITICAL,
                    component_id=source.id,
                    description=(
                        f"Potential short circuit detected: {current:.2f}A "
                        f"at {voltage:.2f}V"
                    ),
                    mitigation="Add fuses, circuit breakers, or current limiting devices",
                )
            )

    return hazards


# ═══════════════════════════════════════════════════════════
# Detector 4: Ground Fault
# ═══════════════════════════════════════════════════════════


def detect_ground_fault(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> list[SafetyHazard]:
    """Missing ground, and fault current through an assumed 1 kΩ body path
    when no residual-current device is installed."""
    hazards: list[SafetyHazard] = []
    limits = standards.ground_fault

    if not has_component_type(circuit.components, (ComponentType.GROUND,)):
        hazards.append(
            SafetyHazard(
                id="no-ground",
                type=HazardType.GROUND_FAULT,
                severity=Severity.MEDIUM,
                description="No ground connection found in circuit",
                mitigation="Add proper grounding for safety",
            )
        )

    if has_component_type(circuit.components, RESIDUAL_CURRENT_DEVICES):
        return hazards

    for source in _sources(circuit):
        voltage = analysis.voltages.get(source.id, 0.0)
        current = analysis.currents.get(source.id, 0.0)
        if voltage <= 0 or current <= 0:
            continue

        fault_current = formulas.calculate_ground_fault_current(
            voltage, limits.fault_path_ohms
        )
        if fault_current > limits.max_fault_current:
            hazards.append(
                SafetyHazard(
                    id=f"ground-fault-{source.id}",
                    type=HazardType.GROUND_FAULT,
                    severity=Severity.HIGH,
                    component_id=source.id,
                    description=(
                        f"Ground fault current {fault_current * 1000:.1f}mA exceeds "
                        f"safety limit of {limits.max_fault_current * 1000:g}mA"
                    ),
                    mitigation="Install GFCI protection or improve grounding",
                )
            )

    return hazards


# ═══════════════════════════════════════════════════════════
# Detector 5: Thermal
# ═══════════════════════════════════════════════════════════


def detect_thermal(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> list[SafetyHazard]:
    """Power above rating; unrated dissipation above a class threshold.

    High-power appliances are exempt from the unrated check.
    """
    hazards: list[SafetyHazard] = []
    limits = standards.thermal

    for component in circuit.components:
        power = analysis.power.get(component.id, 0.0)
        if power <= 0:
            continue

        rating = resolve_properties(component).power_rating
        if rating is not None:
            if power > rating:
                hazards.append(
                    SafetyHazard(
                        id=f"thermal-{component.id}",
                        type=HazardType.THERMAL,
                        severity=Severity.HIGH,
                        component_id=component.id,
                        description=(
                            f"Component {component.id} power {power:.2f}W "
                            f"exceeds rating {rating:g}W"
                        ),
                        mitigation=(
                            "Replace with higher power rated component or add heat sinking"
                        ),
                    )
                )
            continue

        if component.type in HIGH_POWER_APPLIANCES:
            continue

        threshold = (
            limits.protection_device_max_w
            if component.type in PROTECTION_DEVICES
            else limits.component_max_w
        )
        if power > threshold:
            hazards.append(
                SafetyHazard(
                    id=f"thermal-density-{component.id}",
                    type=HazardType.THERMAL,
                    severity=Severity.MEDIUM,
                    component_id=component.id,
                    description=(
                        f"High power dissipation {power:.2f}W in {component.id} "
                        f"(threshold {threshold:g}W) may cause thermal issues"
                    ),
                    mitigation="Ensure adequate ventilation and heat sinking",
                )
            )

    return hazards


# ═══════════════════════════════════════════════════════════
# Detector 6: Arc Flash
# ═══════════════════════════════════════════════════════════


def detect_arc_flash(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
) -> list[SafetyHazard]:
    """Incident energy at each source above the NFPA ceiling."""
    hazards: list[SafetyHazard] = []
    limit = standards.nfpa.max_arc_flash_energy

    for source in _sources(circuit):
        energy = source_arc_flash_energy(source, analysis, standards)
        if energy is None or energy <= limit:
            continue

        category = formulas.ppe_category(energy)
        ppe = f"PPE category {category}" if category is not None else "beyond PPE category 4"
        hazards.append(
            SafetyHazard(
                id=f"arc-flash-{source.id}",
                type=HazardType.ARC_FLASH,
                severity=Severity.CRITICAL,
                component_id=source.id,
                description=(
                    f"Arc flash energy {energy:.2f} cal/cm² exceeds NFPA limit "
                    f"of {limit:g} cal/cm² ({ppe})"
                ),
                mitigation=(
                    "Use appropriate PPE, maintain safe working distance, "
                    "or reduce fault current"
                ),
            )
        )

    return hazards


# ═══════════════════════════════════════════════════════════
# Main Analyzer
# ═══════════════════════════════════════════════════════════

ALL_DETECTORS: list[Detector] = [
    detect_overcurrent,
    detect_overvoltage,
    detect_short_circuit,
    detect_ground_fault,
    detect_thermal,
    detect_arc_flash,
]


def deduplicate_hazards(hazards: list[SafetyHazard]) -> list[SafetyHazard]:
    """Keep the first hazard per (type, component, description)."""
    unique: dict[tuple[str, str, str], SafetyHazard] = {}
    for hazard in hazards:
        key = (hazard.type.value, hazard.component_id or "global", hazard.description)
        unique.setdefault(key, hazard)
    return list(unique.values())


def analyze_hazards(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
    detectors: list[Detector] | None = None,
) -> list[SafetyHazard]:
    """Run all (or selected) detectors and deduplicate the findings.

    Expects `analysis` to have been through `validate_analysis_values`.
    """
    detector_fns = detectors if detectors is not None else ALL_DETECTORS
    hazards: list[SafetyHazard] = []
    for detect in detector_fns:
        hazards.extend(detect(analysis, circuit, standards))
    return deduplicate_hazards(hazards)
