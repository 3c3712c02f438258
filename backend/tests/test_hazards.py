"""Unit tests for the Hazard Analyzer."""

import pytest
from pydantic import ValidationError

from circuitguard.analysis import formulas
from circuitguard.analysis.hazards import (
    ALL_DETECTORS,
    analyze_hazards,
    deduplicate_hazards,
    detect_arc_flash,
    detect_ground_fault,
    detect_overcurrent,
    detect_overvoltage,
    detect_short_circuit,
    detect_thermal,
    source_arc_flash_energy,
)
from circuitguard.analysis.standards import (
    DEFAULT_STANDARDS,
    NECLimits,
    SafetyStandards,
)
from circuitguard.schemas.analysis import CircuitAnalysis, Severity
from circuitguard.schemas.circuit import Circuit, CircuitMetadata, Component
from circuitguard.schemas.safety import HazardType, SafetyHazard


# ─── Fixtures ───


def _comp(comp_id: str, comp_type: str, value: float = 0.0, **properties) -> Component:
    return Component(id=comp_id, type=comp_type, value=value, properties=properties)


def _circuit(*components: Component, voltage: float = 230.0) -> Circuit:
    return Circuit(
        components=list(components),
        metadata=CircuitMetadata(voltage=voltage),
    )


def _analysis(
    voltages: dict[str, float] | None = None,
    currents: dict[str, float] | None = None,
    power: dict[str, float] | None = None,
) -> CircuitAnalysis:
    return CircuitAnalysis(
        voltages=voltages or {},
        currents=currents or {},
        power=power or {},
    )


def _ids(hazards: list[SafetyHazard]) -> list[str]:
    return [h.id for h in hazards]


# ═══════════════════════════════════════════════════════════
# Detector 1: Overcurrent
# ═══════════════════════════════════════════════════════════


class TestOvercurrent:
    def test_source_above_nec_limit(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        hazards = detect_overcurrent(_analysis(currents={"s1": 150.0}), circuit)
        assert _ids(hazards) == ["overcurrent-s1"]
        assert hazards[0].severity == Severity.CRITICAL
        assert hazards[0].type == HazardType.OVERCURRENT

    def test_source_at_limit_is_fine(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        assert detect_overcurrent(_analysis(currents={"s1": 100.0}), circuit) == []

    def test_component_above_rating(self):
        circuit = _circuit(
            _comp("s1", "socket", 230), _comp("sw", "switch", currentRating=10)
        )
        hazards = detect_overcurrent(_analysis(currents={"s1": 12, "sw": 12}), circuit)
        assert _ids(hazards) == ["component-overcurrent-sw"]
        assert hazards[0].severity == Severity.HIGH

    def test_custom_standards(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        standards = SafetyStandards(nec=NECLimits(max_current=10))
        hazards = detect_overcurrent(_analysis(currents={"s1": 20.0}), circuit, standards)
        assert _ids(hazards) == ["overcurrent-s1"]


# ═══════════════════════════════════════════════════════════
# Detector 2: Overvoltage
# ═══════════════════════════════════════════════════════════


class TestOvervoltage:
    def test_above_nec_limit(self):
        circuit = _circuit(_comp("t1", "transformer"), _comp("gfci", "gfci"))
        hazards = detect_overvoltage(_analysis(voltages={"t1": 700.0}), circuit)
        assert _ids(hazards) == ["overvoltage-t1"]
        assert hazards[0].severity == Severity.CRITICAL

    def test_above_component_rating(self):
        circuit = _circuit(_comp("led", "led", voltageRating=12))
        hazards = detect_overvoltage(_analysis(voltages={"led": 24.0}), circuit)
        assert _ids(hazards) == ["component-overvoltage-led"]

    def test_negative_rating_ignored(self):
        circuit = _circuit(_comp("g1", "ground", voltageRating=-1))
        assert detect_overvoltage(_analysis(voltages={"g1": 0.0}), circuit) == []

    def test_touch_voltage_without_protection(self):
        circuit = _circuit(_comp("s1", "socket", 230), _comp("l1", "light"))
        analysis = _analysis(voltages={"s1": 230.0, "l1": 230.0})

        hazards = detect_overvoltage(analysis, circuit)

        assert _ids(hazards) == ["touch-voltage-accessible"]
        assert hazards[0].component_id is None
        assert "2 accessible" in hazards[0].description
        assert "light (l1)" in hazards[0].description

    def test_touch_voltage_with_rccb(self):
        circuit = _circuit(
            _comp("s1", "socket", 230), _comp("l1", "light"), _comp("rc", "rccb")
        )
        analysis = _analysis(voltages={"s1": 230.0, "l1": 230.0, "rc": 230.0})
        assert detect_overvoltage(analysis, circuit) == []

    def test_low_voltage_is_not_a_touch_hazard(self):
        circuit = _circuit(_comp("l1", "light"))
        assert detect_overvoltage(_analysis(voltages={"l1": 24.0}), circuit) == []


# ═══════════════════════════════════════════════════════════
# Detector 3: Short Circuit
# ═══════════════════════════════════════════════════════════


class TestShortCircuit:
    def test_both_conditions_met(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 800.0})
        hazards = detect_short_circuit(analysis, circuit)
        assert _ids(hazards) == ["short-circuit-s1"]
        assert hazards[0].type == HazardType.SHORT_CIRCUIT

    def test_high_current_below_voltage_multiple(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 500.0})
        assert detect_short_circuit(analysis, circuit) == []

    def test_low_voltage_floor(self):
        circuit = _circuit(_comp("b1", "battery", 12), voltage=12)
        flagged = _analysis(voltages={"b1": 12.0}, currents={"b1": 60.0})
        normal = _analysis(voltages={"b1": 12.0}, currents={"b1": 40.0})
        assert _ids(detect_short_circuit(flagged, circuit)) == ["short-circuit-b1"]
        assert detect_short_circuit(normal, circuit) == []

    def test_above_nec_voltage_is_skipped(self):
        circuit = _circuit(_comp("s1", "socket", 800))
        analysis = _analysis(voltages={"s1": 800.0}, currents={"s1": 5000.0})
        assert detect_short_circuit(analysis, circuit) == []


# ═══════════════════════════════════════════════════════════
# Detector 4: Ground Fault
# ═══════════════════════════════════════════════════════════


class TestGroundFault:
    def test_missing_ground(self):
        circuit = _circuit(_comp("b1", "battery", 9))
        hazards = detect_ground_fault(_analysis(voltages={"b1": 9.0}), circuit)
        assert _ids(hazards) == ["no-ground"]
        assert hazards[0].severity == Severity.MEDIUM

    def test_unprotected_fault_current(self):
        circuit = _circuit(_comp("s1", "socket", 230), _comp("g", "ground"))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 1.0})
        hazards = detect_ground_fault(analysis, circuit)
        assert _ids(hazards) == ["ground-fault-s1"]
        assert "230.0mA" in hazards[0].description

    def test_gfci_suppresses_fault_current(self):
        circuit = _circuit(
            _comp("s1", "socket", 230), _comp("g", "ground"), _comp("gf", "gfci")
        )
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 1.0})
        assert detect_ground_fault(analysis, circuit) == []

    def test_idle_source_skipped(self):
        circuit = _circuit(_comp("s1", "socket", 230), _comp("g", "ground"))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 0.0})
        assert detect_ground_fault(analysis, circuit) == []

    def test_low_voltage_fault_below_limit(self):
        circuit = _circuit(_comp("b1", "battery", 9), _comp("g", "ground"))
        analysis = _analysis(voltages={"b1": 9.0}, currents={"b1": 1.0})
        assert detect_ground_fault(analysis, circuit) == []


# ═══════════════════════════════════════════════════════════
# Detector 5: Thermal
# ═══════════════════════════════════════════════════════════


class TestThermal:
    def test_above_power_rating(self):
        circuit = _circuit(_comp("r1", "resistor", 100, powerRating=0.25))
        hazards = detect_thermal(_analysis(power={"r1": 1.0}), circuit)
        assert _ids(hazards) == ["thermal-r1"]
        assert hazards[0].severity == Severity.HIGH

    def test_unrated_protection_device(self):
        circuit = _circuit(_comp("mcb", "mcb"))
        hazards = detect_thermal(_analysis(power={"mcb": 230.0}), circuit)
        assert _ids(hazards) == ["thermal-density-mcb"]
        assert hazards[0].severity == Severity.MEDIUM

    def test_unrated_component_threshold(self):
        circuit = _circuit(_comp("t1", "transformer"))
        assert detect_thermal(_analysis(power={"t1": 400.0}), circuit) == []
        hazards = detect_thermal(_analysis(power={"t1": 600.0}), circuit)
        assert _ids(hazards) == ["thermal-density-t1"]

    def test_high_power_appliance_exempt(self):
        circuit = _circuit(_comp("h1", "heater"))
        assert detect_thermal(_analysis(power={"h1": 3000.0}), circuit) == []


# ═══════════════════════════════════════════════════════════
# Detector 6: Arc Flash
# ═══════════════════════════════════════════════════════════


class TestArcFlash:
    def test_energy_formula(self):
        energy = formulas.calculate_arc_flash_energy(230, 1000, 0.1)
        assert energy == pytest.approx(1.5165, abs=1e-3)

    def test_fault_current_capped(self):
        assert formulas.arc_fault_current(50) == 500
        assert formulas.arc_fault_current(5000) == 10_000

    def test_ppe_categories(self):
        assert formulas.ppe_category(1.0) == 0
        assert formulas.ppe_category(1.5) == 1
        assert formulas.ppe_category(15.0) == 3
        assert formulas.ppe_category(41.0) is None

    def test_flagged_above_limit(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 100.0})
        hazards = detect_arc_flash(analysis, circuit)
        assert _ids(hazards) == ["arc-flash-s1"]
        assert hazards[0].severity == Severity.CRITICAL
        assert "PPE category 1" in hazards[0].description

    def test_below_limit(self):
        circuit = _circuit(_comp("s1", "socket", 230))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 50.0})
        assert detect_arc_flash(analysis, circuit) == []

    def test_longer_clearing_time_raises_energy(self):
        circuit = _circuit(_comp("s1", "socket", 230, clearingTime=0.5))
        analysis = _analysis(voltages={"s1": 230.0}, currents={"s1": 50.0})
        assert _ids(detect_arc_flash(analysis, circuit)) == ["arc-flash-s1"]

    def test_beyond_category_four(self):
        circuit = _circuit(_comp("s1", "socket", 1000))
        analysis = _analysis(voltages={"s1": 1000.0}, currents={"s1": 1000.0})
        hazards = detect_arc_flash(analysis, circuit)
        assert "beyond PPE category 4" in hazards[0].description

    def test_low_voltage_source_has_no_energy(self):
        source = _comp("b1", "battery", 48)
        analysis = _analysis(voltages={"b1": 48.0}, currents={"b1": 5000.0})
        assert source_arc_flash_energy(source, analysis) is None
        assert detect_arc_flash(analysis, _circuit(source)) == []


# ═══════════════════════════════════════════════════════════
# Aggregation
# ═══════════════════════════════════════════════════════════


class TestAnalyzeHazards:
    def test_runs_every_detector(self):
        assert len(ALL_DETECTORS) == 6

    def test_duplicates_removed(self):
        hazard = SafetyHazard(
            id="dup",
            type=HazardType.THERMAL,
            severity=Severity.MEDIUM,
            component_id="x",
            description="Hot",
            mitigation="Cool it",
        )

        def twice(analysis, circuit, standards):
            return [hazard, hazard.model_copy()]

        hazards = analyze_hazards(_analysis(), _circuit(), detectors=[twice])
        assert len(hazards) == 1

    def test_dedup_keeps_distinct_components(self):
        base = dict(
            type=HazardType.THERMAL,
            severity=Severity.MEDIUM,
            description="Hot",
            mitigation="Cool it",
        )
        hazards = deduplicate_hazards(
            [
                SafetyHazard(id="a", component_id="x", **base),
                SafetyHazard(id="b", component_id="y", **base),
                SafetyHazard(id="c", component_id="x", **base),
            ]
        )
        assert _ids(hazards) == ["a", "b"]

    def test_safe_circuit_has_no_hazards(self):
        circuit = _circuit(
            _comp("b1", "battery", 9),
            _comp("r1", "resistor", 330, powerRating=0.25),
            _comp("g", "ground"),
        )
        analysis = _analysis(
            voltages={"b1": 9.0, "r1": 9.0, "g": 0.0},
            currents={"b1": 0.0, "r1": 0.0273, "g": 0.0},
            power={"b1": 0.0, "r1": 0.245, "g": 0.0},
        )
        assert analyze_hazards(analysis, circuit) == []

    def test_default_standards_are_immutable(self):
        with pytest.raises(ValidationError):
            DEFAULT_STANDARDS.arc_flash_min_voltage = 10.0
