"""Analysis router: stateless circuit analysis for the editor.

The editor posts its current circuit on every change and renders the
returned per-component values and safety panel. Nothing is persisted.
"""

from __future__ import annotations

from fastapi import APIRouter

from circuitguard.analysis.engine import analyze_circuit, evaluate_circuit
from circuitguard.analysis.topology import summarize_circuit
from circuitguard.schemas.analysis import CircuitAnalysis
from circuitguard.schemas.circuit import Circuit, CircuitStats
from circuitguard.schemas.safety import CircuitReport

router = APIRouter()


@router.post("/analyze", response_model=CircuitAnalysis, response_model_by_alias=True)
def analyze(circuit: Circuit):
    """Voltage, current and power for every component, plus issues."""
    return analyze_circuit(circuit)


@router.post("/assess", response_model=CircuitReport, response_model_by_alias=True)
def assess(circuit: Circuit):
    """Full pipeline: analysis plus hazards, compliance, score and risk."""
    return evaluate_circuit(circuit)


@router.post("/stats", response_model=CircuitStats, response_model_by_alias=True)
def stats(circuit: Circuit):
    return summarize_circuit(circuit)
