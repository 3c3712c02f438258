"""Safety Scorer & Risk Classifier.

Reduces hazards and compliance verdicts to a 0–100 score, a risk tier,
and a deduplicated recommendation list.
"""

from __future__ import annotations

from circuitguard.schemas.analysis import Severity
from circuitguard.schemas.safety import (
    ComplianceCheck,
    ComplianceStatus,
    HazardType,
    RiskLevel,
    SafetyHazard,
)

BASE_SCORE = 100.0
PROTECTION_BONUS = 20.0
MIN_PROTECTED_SCORE = 10.0

HAZARD_PENALTIES = {
    Severity.CRITICAL: 25.0,
    Severity.HIGH: 15.0,
    Severity.MEDIUM: 8.0,
    Severity.LOW: 3.0,
}

COMPLIANCE_PENALTIES = {
    ComplianceStatus.NON_COMPLIANT: 12.0,
    ComplianceStatus.WARNING: 3.0,
    ComplianceStatus.COMPLIANT: 0.0,
}

SAFE_NOTE = "Circuit appears safe - continue monitoring"
REVIEW_NOTE = "Review all safety hazards before operation"
PROTECTION_NOTE = "Consider adding protective devices (fuses, circuit breakers)"
NON_COMPLIANCE_NOTE = "Address non-compliance issues before operation"


def has_protection(hazards: list[SafetyHazard]) -> bool:
    """Protection counts as present unless a critical short circuit exists."""
    return not any(
        h.type == HazardType.SHORT_CIRCUIT and h.severity == Severity.CRITICAL
        for h in hazards
    )


def raw_safety_score(
    hazards: list[SafetyHazard],
    compliance: list[ComplianceCheck],
) -> float:
    """Score before clamping."""
    score = BASE_SCORE
    if has_protection(hazards):
        score += PROTECTION_BONUS
    score -= sum(HAZARD_PENALTIES[h.severity] for h in hazards)
    score -= sum(COMPLIANCE_PENALTIES[c.status] for c in compliance)
    return score


def calculate_safety_score(
    hazards: list[SafetyHazard],
    compliance: list[ComplianceCheck],
) -> float:
    floor = MIN_PROTECTED_SCORE if has_protection(hazards) else 0.0
    return min(BASE_SCORE, max(floor, raw_safety_score(hazards, compliance)))


def determine_risk_level(safety_score: float, hazards: list[SafetyHazard]) -> RiskLevel:
    severities = {h.severity for h in hazards}
    if Severity.CRITICAL in severities or safety_score < 30:
        return RiskLevel.CRITICAL
    if Severity.HIGH in severities or safety_score < 50:
        return RiskLevel.HIGH
    if safety_score < 75:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def generate_recommendations(
    hazards: list[SafetyHazard],
    compliance: list[ComplianceCheck],
) -> list[str]:
    """Hazard mitigations plus general advice, exact duplicates removed."""
    recommendations = [h.mitigation for h in hazards]

    if hazards:
        recommendations += [REVIEW_NOTE, PROTECTION_NOTE]
    else:
        recommendations.append(SAFE_NOTE)

    if any(c.status == ComplianceStatus.NON_COMPLIANT for c in compliance):
        recommendations.append(NON_COMPLIANCE_NOTE)

    return list(dict.fromkeys(recommendations))
