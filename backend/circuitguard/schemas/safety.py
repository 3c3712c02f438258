from __future__ import annotations

from enum import Enum

from pydantic import Field

from circuitguard.schemas.analysis import CircuitAnalysis, Severity
from circuitguard.schemas.circuit import CamelModel


class HazardType(str, Enum):
    OVERCURRENT = "overcurrent"
    OVERVOLTAGE = "overvoltage"
    SHORT_CIRCUIT = "short_circuit"
    GROUND_FAULT = "ground_fault"
    ARC_FLASH = "arc_flash"
    THERMAL = "thermal"


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    WARNING = "warning"
    NON_COMPLIANT = "non_compliant"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SafetyHazard(CamelModel):
    id: str
    type: HazardType
    severity: Severity
    component_id: str | None = None
    description: str
    mitigation: str


class ComplianceCheck(CamelModel):
    standard: str  # NEC, OSHA, NFPA
    status: ComplianceStatus
    description: str
    requirement: str


class SafetyAssessment(CamelModel):
    safety_score: float = Field(ge=0, le=100)
    hazards: list[SafetyHazard] = Field(default_factory=list)
    compliance: list[ComplianceCheck] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    risk_level: RiskLevel


class CircuitReport(CamelModel):
    """Full pipeline output: per-component analysis plus safety verdict."""

    analysis: CircuitAnalysis
    assessment: SafetyAssessment
