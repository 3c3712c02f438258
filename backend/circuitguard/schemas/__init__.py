from circuitguard.schemas.circuit import (
    Circuit,
    CircuitMetadata,
    CircuitStats,
    Component,
    ComponentType,
    Connection,
)
from circuitguard.schemas.analysis import (
    AnalysisDiff,
    CircuitAnalysis,
    CircuitIssue,
    IssueType,
    Severity,
)
from circuitguard.schemas.safety import (
    CircuitReport,
    ComplianceCheck,
    ComplianceStatus,
    HazardType,
    RiskLevel,
    SafetyAssessment,
    SafetyHazard,
)

__all__ = [
    "Circuit",
    "CircuitMetadata",
    "CircuitStats",
    "Component",
    "ComponentType",
    "Connection",
    "AnalysisDiff",
    "CircuitAnalysis",
    "CircuitIssue",
    "IssueType",
    "Severity",
    "CircuitReport",
    "ComplianceCheck",
    "ComplianceStatus",
    "HazardType",
    "RiskLevel",
    "SafetyAssessment",
    "SafetyHazard",
]
