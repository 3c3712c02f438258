"""Power-Flow Calculator.

Assigns voltage, current and power to every component in one deterministic
pass. This is not a nodal solver: loads are sized from their nameplate
wattage, the sum of appliance currents is what every in-line device sees,
and each remaining component type follows one fixed formula selected from
a dispatch table keyed by component type.

Pass order:
  1. Source selection (battery / socket); none → all-zero analysis
  2. Supply voltage: source value → circuit metadata → 230 V
  3. Appliance currents from declared wattage and power factor
  4. Aggregate load current
  5. Per-type formula for every component
  6. Circuit-level diagnostics (battery short, high current, efficiency,
     power balance)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from circuitguard.analysis import formulas
from circuitguard.analysis.component_types import (
    AMMETER_BURDEN_VOLTS,
    APPLIANCES,
    DEFAULT_LINE_VOLTAGE,
    DEVICE_DRAW_AMPS,
    LOAD_TYPES,
    METER_SELF_LOAD_AMPS,
    PASS_THROUGH_DEVICES,
    POWER_SOURCES,
    SHUNT_DEVICES,
    SHUNT_LEAKAGE_AMPS,
    resolve_properties,
)
from circuitguard.analysis.topology import Adjacency, build_adjacency, neighbor_ids
from circuitguard.schemas.analysis import (
    CircuitAnalysis,
    CircuitIssue,
    IssueType,
    Severity,
)
from circuitguard.schemas.circuit import Circuit, Component, ComponentType as T

logger = logging.getLogger(__name__)

HIGH_TOTAL_CURRENT_A = 100.0
MIN_EFFICIENCY_PCT = 80.0
POWER_BALANCE_TOLERANCE_W = 0.1
# Battery current above this multiple of its nominal voltage suggests a short.
SHORT_CIRCUIT_CURRENT_RATIO = 10.0


@dataclass
class FlowContext:
    """Shared state of one power-flow pass."""

    circuit: Circuit
    adjacency: Adjacency
    supply_voltage: float
    three_phase: bool
    appliance_currents: dict[str, float] = field(default_factory=dict)
    total_current: float = 0.0
    issues: list[CircuitIssue] = field(default_factory=list)


# (voltage, current, power)
Operating = tuple[float, float, float]
Handler = Callable[[Component, FlowContext], Operating]


# ─── Supply ───


def resolve_source_voltage(source: Component, circuit: Circuit) -> float:
    """Source value if positive, else circuit metadata voltage, else 230 V."""
    if source.value > 0:
        return source.value
    if circuit.metadata.voltage > 0:
        return circuit.metadata.voltage
    return DEFAULT_LINE_VOLTAGE


def appliance_current(component: Component, ctx: FlowContext) -> float:
    props = resolve_properties(component, ctx.supply_voltage)
    return formulas.calculate_load_current(
        props.power_consumption,
        props.operating_voltage,
        props.power_factor,
        three_phase=ctx.three_phase,
    )


# ═══════════════════════════════════════════════════════════
# Per-Type Formulas
# ═══════════════════════════════════════════════════════════


def _source(component: Component, ctx: FlowContext) -> Operating:
    voltage = resolve_source_voltage(component, ctx.circuit)
    return voltage, ctx.total_current, voltage * ctx.total_current


def _appliance(component: Component, ctx: FlowContext) -> Operating:
    props = resolve_properties(component, ctx.supply_voltage)
    # Nameplate wattage is authoritative; never recomputed from V·I.
    return (
        props.operating_voltage,
        ctx.appliance_currents.get(component.id, 0.0),
        props.power_consumption,
    )


def _pass_through(component: Component, ctx: FlowContext) -> Operating:
    v, i = ctx.supply_voltage, ctx.total_current
    return v, i, formulas.calculate_power(v, i)


def _protective_trip(
    component: Component,
    ctx: FlowContext,
    rating: float,
    device: str,
    outcome: str,
) -> None:
    """Flag a breaker/fuse whose rating is below the aggregate load current."""
    if ctx.total_current <= rating:
        return
    minimum = formulas.recommended_protective_rating(ctx.total_current)
    standard = formulas.calculate_breaker_rating(ctx.total_current)
    ctx.issues.append(
        CircuitIssue(
            id=f"{device.lower()}-overcurrent-{component.id}",
            type=IssueType.ERROR,
            severity=Severity.CRITICAL,
            component_id=component.id,
            message=(
                f"{device} will {outcome}: Current ({ctx.total_current:.2f}A) "
                f"exceeds rating ({rating:g}A)"
            ),
            recommendation=(
                f"Use a {device} with rating {minimum}A or higher "
                f"(nearest standard size {standard}A)"
            ),
        )
    )


def _mcb(component: Component, ctx: FlowContext) -> Operating:
    props = resolve_properties(component, ctx.supply_voltage)
    _protective_trip(component, ctx, props.trip_current, "MCB", "trip")
    return _pass_through(component, ctx)


def _fuse(component: Component, ctx: FlowContext) -> Operating:
    props = resolve_properties(component, ctx.supply_voltage)
    _protective_trip(component, ctx, props.fuse_rating, "Fuse", "blow")
    return _pass_through(component, ctx)


def _shunt(component: Component, ctx: FlowContext) -> Operating:
    v = ctx.supply_voltage
    return v, SHUNT_LEAKAGE_AMPS, formulas.calculate_power(v, SHUNT_LEAKAGE_AMPS)


def _control_device(component: Component, ctx: FlowContext) -> Operating:
    v = ctx.supply_voltage
    i = DEVICE_DRAW_AMPS[component.type]
    return v, i, formulas.calculate_power(v, i)


def _junction(component: Component, ctx: FlowContext) -> Operating:
    # Only the appliances wired directly to this junction.
    i = sum(
        ctx.appliance_currents.get(peer_id, 0.0)
        for peer_id in neighbor_ids(ctx.adjacency, component.id)
    )
    v = ctx.supply_voltage
    return v, i, formulas.calculate_power(v, i)


def _ground(component: Component, ctx: FlowContext) -> Operating:
    return 0.0, 0.0, 0.0


def _transformer(component: Component, ctx: FlowContext) -> Operating:
    props = resolve_properties(component, ctx.supply_voltage)
    secondary = props.primary_voltage / props.turns_ratio
    i = ctx.total_current * props.turns_ratio
    return secondary, i, formulas.calculate_power(secondary, i)


def _resistor(component: Component, ctx: FlowContext) -> Operating:
    props = resolve_properties(component, ctx.supply_voltage)
    v = ctx.supply_voltage
    i = formulas.calculate_resistor_current(v, props.resistance)
    p = formulas.calculate_power(v, i)

    if props.power_rating is not None and p > props.power_rating:
        ctx.issues.append(
            CircuitIssue(
                id=f"overpower-{component.id}",
                type=IssueType.WARNING,
                severity=Severity.HIGH,
                component_id=component.id,
                message=(
                    f"Component {component.id} dissipates {p:.2f}W, exceeding "
                    f"its power rating of {props.power_rating:g}W"
                ),
                recommendation=f"Use a resistor rated for at least {p:.2f}W",
            )
        )
    return v, i, p


def _voltmeter(component: Component, ctx: FlowContext) -> Operating:
    v = ctx.supply_voltage
    return v, METER_SELF_LOAD_AMPS, formulas.calculate_power(v, METER_SELF_LOAD_AMPS)


def _ammeter(component: Component, ctx: FlowContext) -> Operating:
    i = ctx.total_current
    return AMMETER_BURDEN_VOLTS, i, formulas.calculate_power(AMMETER_BURDEN_VOLTS, i)


def _default(component: Component, ctx: FlowContext) -> Operating:
    return ctx.supply_voltage, 0.0, 0.0


HANDLERS: dict[T, Handler] = {
    **{t: _source for t in POWER_SOURCES},
    **{t: _appliance for t in APPLIANCES},
    **{t: _pass_through for t in PASS_THROUGH_DEVICES},
    **{t: _shunt for t in SHUNT_DEVICES},
    **{t: _control_device for t in DEVICE_DRAW_AMPS},
    T.MCB: _mcb,
    T.FUSE: _fuse,
    T.JUNCTION: _junction,
    T.GROUND: _ground,
    T.TRANSFORMER: _transformer,
    T.RESISTOR: _resistor,
    T.VOLTMETER: _voltmeter,
    T.AMMETER: _ammeter,
    T.WATTMETER: _voltmeter,
}


# ═══════════════════════════════════════════════════════════
# Circuit-Level Diagnostics
# ═══════════════════════════════════════════════════════════


def _circuit_issues(
    total_current: float,
    generated: float,
    consumed: float,
    efficiency: float,
) -> list[CircuitIssue]:
    issues: list[CircuitIssue] = []

    if total_current > HIGH_TOTAL_CURRENT_A:
        issues.append(
            CircuitIssue(
                id="high-current",
                type=IssueType.WARNING,
                severity=Severity.HIGH,
                message=f"High total current: {total_current:.2f}A",
                recommendation="Consider dividing the load into multiple circuits",
            )
        )

    if generated > 0 and efficiency < MIN_EFFICIENCY_PCT:
        issues.append(
            CircuitIssue(
                id="low-efficiency",
                type=IssueType.WARNING,
                severity=Severity.MEDIUM,
                message=f"Low circuit efficiency: {efficiency:.1f}%",
                recommendation="Check for power losses and improve power factor",
            )
        )

    if consumed - generated > POWER_BALANCE_TOLERANCE_W:
        issues.append(
            CircuitIssue(
                id="power-balance",
                type=IssueType.WARNING,
                severity=Severity.MEDIUM,
                message=(
                    f"Power balance issue: Generated {generated:.2f}W, "
                    f"Consumed {consumed:.2f}W"
                ),
                recommendation="Check circuit connections and component values",
            )
        )

    return issues


def _short_circuit_issues(
    sources: list[Component],
    currents: dict[str, float],
) -> list[CircuitIssue]:
    """Flag batteries drawing far more current than their voltage allows."""
    issues: list[CircuitIssue] = []
    for source in sources:
        if source.type != T.BATTERY or source.value <= 0:
            continue
        current = currents.get(source.id, 0.0)
        if current > source.value * SHORT_CIRCUIT_CURRENT_RATIO:
            issues.append(
                CircuitIssue(
                    id=f"short-circuit-{source.id}",
                    type=IssueType.ERROR,
                    severity=Severity.CRITICAL,
                    component_id=source.id,
                    message=(
                        f"Potential short circuit detected near {source.id}: "
                        f"{current:.2f}A from a {source.value:g}V battery"
                    ),
                    recommendation=(
                        "Check for direct connections between positive and "
                        "negative terminals"
                    ),
                )
            )
    return issues


# ═══════════════════════════════════════════════════════════
# Main Calculator
# ═══════════════════════════════════════════════════════════


def _no_source_analysis(circuit: Circuit) -> CircuitAnalysis:
    zeros = {c.id: 0.0 for c in circuit.components}
    return CircuitAnalysis(
        voltages=dict(zeros),
        currents=dict(zeros),
        power=dict(zeros),
        total_power=0.0,
        efficiency=0.0,
        issues=[
            CircuitIssue(
                id="no-power-source",
                type=IssueType.ERROR,
                severity=Severity.CRITICAL,
                message="No power source found in circuit",
                recommendation="Add a battery or socket to supply the circuit",
            )
        ],
    )


def calculate_power_flow(
    circuit: Circuit,
    adjacency: Adjacency | None = None,
) -> CircuitAnalysis:
    """Compute voltage, current and power for every component.

    Args:
        circuit: The circuit to analyse. Never mutated.
        adjacency: Pre-built adjacency, if the caller already has one.

    Returns:
        CircuitAnalysis with an entry for every component id in all three
        mappings, plus diagnostics. Never raises for a well-shaped Circuit.
    """
    sources = [c for c in circuit.components if c.type in POWER_SOURCES]
    if not sources:
        logger.warning("Circuit %s has no power source", circuit.id)
        return _no_source_analysis(circuit)

    ctx = FlowContext(
        circuit=circuit,
        adjacency=adjacency if adjacency is not None else build_adjacency(circuit),
        supply_voltage=resolve_source_voltage(sources[0], circuit),
        three_phase=circuit.metadata.phase == "three",
    )

    for component in circuit.components:
        if component.type in APPLIANCES:
            ctx.appliance_currents[component.id] = appliance_current(component, ctx)
    ctx.total_current = sum(ctx.appliance_currents.values())

    voltages: dict[str, float] = {}
    currents: dict[str, float] = {}
    power: dict[str, float] = {}

    for component in circuit.components:
        handler = HANDLERS.get(component.type, _default)
        v, i, p = handler(component, ctx)
        voltages[component.id] = v
        currents[component.id] = i
        power[component.id] = p

    generated = sum(power[c.id] for c in sources)
    consumed = sum(power[c.id] for c in circuit.components if c.type in LOAD_TYPES)
    efficiency = formulas.calculate_efficiency(consumed, generated)

    issues = (
        ctx.issues
        + _short_circuit_issues(sources, currents)
        + _circuit_issues(ctx.total_current, generated, consumed, efficiency)
    )

    logger.debug(
        "Power flow %s: supply=%.1fV total_current=%.3fA load=%.1fW",
        circuit.id,
        ctx.supply_voltage,
        ctx.total_current,
        consumed,
    )

    return CircuitAnalysis(
        voltages=voltages,
        currents=currents,
        power=power,
        total_power=consumed,
        efficiency=efficiency,
        issues=issues,
    )
