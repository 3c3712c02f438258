"""Circuit Analysis & Safety Assessment Engine.

Pipeline:
  Circuit ──► power flow ──► topology checks ──► validator ──► CircuitAnalysis
  CircuitAnalysis + Circuit ──► validator ──► hazards + compliance ──► scorer
                                                         ──► SafetyAssessment

Every stage is a pure function of its inputs. `CircuitAnalyzer` adds the
only piece of state: an append-only history of past analyses for
before/after comparison.
"""

from __future__ import annotations

import logging

from circuitguard.analysis.compliance import check_compliance
from circuitguard.analysis.hazards import analyze_hazards
from circuitguard.analysis.power_flow import calculate_power_flow
from circuitguard.analysis.scoring import (
    calculate_safety_score,
    determine_risk_level,
    generate_recommendations,
)
from circuitguard.analysis.standards import (
    DEFAULT_LIMITS,
    DEFAULT_STANDARDS,
    SafetyStandards,
    ValueLimits,
)
from circuitguard.analysis.topology import (
    build_adjacency,
    check_connections,
    find_isolated_components,
    find_series_groups,
    series_group_issues,
)
from circuitguard.analysis.validator import validate_analysis_values, validate_component
from circuitguard.schemas.analysis import AnalysisDiff, CircuitAnalysis, CircuitIssue
from circuitguard.schemas.circuit import Circuit
from circuitguard.schemas.safety import CircuitReport, SafetyAssessment

logger = logging.getLogger(__name__)


def analyze_circuit(
    circuit: Circuit,
    limits: ValueLimits = DEFAULT_LIMITS,
) -> CircuitAnalysis:
    """Power flow plus topology diagnostics, validated and clamped."""
    adjacency = build_adjacency(circuit)
    analysis = calculate_power_flow(circuit, adjacency)

    issues: list[CircuitIssue] = list(analysis.issues)
    for component in circuit.components:
        issues.extend(validate_component(component))
    issues.extend(check_connections(circuit))
    issues.extend(series_group_issues(find_series_groups(circuit, adjacency)))
    issues.extend(find_isolated_components(circuit, adjacency))

    return validate_analysis_values(
        analysis.model_copy(update={"issues": issues}), limits
    )


def assess_safety(
    analysis: CircuitAnalysis,
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
    limits: ValueLimits = DEFAULT_LIMITS,
) -> SafetyAssessment:
    """Hazards, compliance and score for an analysed circuit.

    The analysis is re-validated first, so callers may pass the raw output
    of `calculate_power_flow` as well as the result of `analyze_circuit`.
    """
    validated = validate_analysis_values(analysis, limits)

    hazards = analyze_hazards(validated, circuit, standards)
    compliance = check_compliance(validated, circuit, standards)
    score = calculate_safety_score(hazards, compliance)
    risk = determine_risk_level(score, hazards)

    logger.debug(
        "Safety %s: score=%.0f risk=%s hazards=%d",
        circuit.id,
        score,
        risk.value,
        len(hazards),
    )

    return SafetyAssessment(
        safety_score=score,
        hazards=hazards,
        compliance=compliance,
        recommendations=generate_recommendations(hazards, compliance),
        risk_level=risk,
    )


def evaluate_circuit(
    circuit: Circuit,
    standards: SafetyStandards = DEFAULT_STANDARDS,
    limits: ValueLimits = DEFAULT_LIMITS,
) -> CircuitReport:
    analysis = analyze_circuit(circuit, limits)
    return CircuitReport(
        analysis=analysis,
        assessment=assess_safety(analysis, circuit, standards, limits),
    )


def _changes(before: dict[str, float], after: dict[str, float]) -> dict[str, float]:
    return {key: after.get(key, 0.0) - value for key, value in before.items()}


def compare_analyses(before: CircuitAnalysis, after: CircuitAnalysis) -> AnalysisDiff:
    """Per-component change (after - before), keyed by the earlier analysis."""
    return AnalysisDiff(
        voltage_changes=_changes(before.voltages, after.voltages),
        current_changes=_changes(before.currents, after.currents),
        power_changes=_changes(before.power, after.power),
    )


class CircuitAnalyzer:
    """Engine entry point for callers that want an analysis history."""

    def __init__(
        self,
        standards: SafetyStandards = DEFAULT_STANDARDS,
        limits: ValueLimits = DEFAULT_LIMITS,
    ):
        self.standards = standards
        self.limits = limits
        self._history: list[CircuitAnalysis] = []

    def analyze(self, circuit: Circuit) -> CircuitAnalysis:
        analysis = analyze_circuit(circuit, self.limits)
        self._history.append(analysis)
        return analysis

    def assess(self, analysis: CircuitAnalysis, circuit: Circuit) -> SafetyAssessment:
        return assess_safety(analysis, circuit, self.standards, self.limits)

    def evaluate(self, circuit: Circuit) -> CircuitReport:
        analysis = self.analyze(circuit)
        return CircuitReport(analysis=analysis, assessment=self.assess(analysis, circuit))

    @property
    def history(self) -> list[CircuitAnalysis]:
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    def compare_with_previous(self) -> AnalysisDiff | None:
        """Diff between the two most recent analyses, if there are two."""
        if len(self._history) < 2:
            return None
        return compare_analyses(self._history[-2], self._history[-1])
