from __future__ import annotations

from enum import Enum

from pydantic import Field

from circuitguard.schemas.circuit import CamelModel


class IssueType(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class CircuitIssue(CamelModel):
    id: str
    type: IssueType
    severity: Severity
    component_id: str | None = None
    message: str
    recommendation: str = ""


class CircuitAnalysis(CamelModel):
    voltages: dict[str, float] = Field(default_factory=dict)
    currents: dict[str, float] = Field(default_factory=dict)
    power: dict[str, float] = Field(default_factory=dict)
    total_power: float = 0.0
    efficiency: float = 0.0
    issues: list[CircuitIssue] = Field(default_factory=list)


class AnalysisDiff(CamelModel):
    """Per-component change between two analyses (after - before)."""

    voltage_changes: dict[str, float] = Field(default_factory=dict)
    current_changes: dict[str, float] = Field(default_factory=dict)
    power_changes: dict[str, float] = Field(default_factory=dict)
