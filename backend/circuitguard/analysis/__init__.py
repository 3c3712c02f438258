from circuitguard.analysis.engine import (
    CircuitAnalyzer,
    analyze_circuit,
    assess_safety,
    compare_analyses,
    evaluate_circuit,
)
from circuitguard.analysis.standards import DEFAULT_STANDARDS, SafetyStandards

__all__ = [
    "CircuitAnalyzer",
    "analyze_circuit",
    "assess_safety",
    "compare_analyses",
    "evaluate_circuit",
    "DEFAULT_STANDARDS",
    "SafetyStandards",
]
