"""Unit tests for the NEC / OSHA / NFPA compliance checks."""

from circuitguard.analysis.compliance import (
    ALL_STANDARD_CHECKS,
    check_compliance,
    check_nec,
    check_nfpa,
    check_osha,
)
from circuitguard.analysis.standards import NECLimits, SafetyStandards
from circuitguard.schemas.analysis import CircuitAnalysis
from circuitguard.schemas.circuit import Circuit, Component
from circuitguard.schemas.safety import ComplianceStatus


# ─── Fixtures ───

MANDATORY = ["mcb", "rccb", "ground"]
RECOMMENDED = [
    "gfci",
    "afci",
    "spd",
    "surge-protector",
    "overvoltage-protector",
    "undervoltage-protector",
    "emergency-stop",
]


def _circuit(*types: str, source: str = "socket", source_value: float = 230) -> Circuit:
    components = [Component(id="s1", type=source, value=source_value)]
    components += [Component(id=f"{t}-1", type=t) for t in types]
    return Circuit(components=components)


def _analysis(voltage: float = 230.0, current: float = 5.0) -> CircuitAnalysis:
    return CircuitAnalysis(voltages={"s1": voltage}, currents={"s1": current})


# ═══════════════════════════════════════════════════════════
# NEC
# ═══════════════════════════════════════════════════════════


class TestNEC:
    def test_fully_protected(self):
        check = check_nec(_analysis(), _circuit(*MANDATORY, *RECOMMENDED))
        assert check.standard == "NEC"
        assert check.status == ComplianceStatus.COMPLIANT
        assert "230.0V" in check.description
        assert "600V" in check.description
        assert "All critical protection devices present" in check.description

    def test_missing_mandatory(self):
        check = check_nec(_analysis(), _circuit("rccb", "ground"))
        assert check.status == ComplianceStatus.NON_COMPLIANT
        assert "Missing critical protection: mcb" in check.description

    def test_missing_recommended_only(self):
        check = check_nec(_analysis(), _circuit(*MANDATORY))
        assert check.status == ComplianceStatus.WARNING
        assert "Consider adding protection: gfci" in check.description

    def test_voltage_over_limit(self):
        check = check_nec(_analysis(voltage=700.0), _circuit(*MANDATORY, *RECOMMENDED))
        assert check.status == ComplianceStatus.NON_COMPLIANT
        assert "Max voltage 700.0V exceeds NEC limit 600V" in check.description

    def test_over_limit_stays_non_compliant_with_missing_recommended(self):
        check = check_nec(_analysis(current=150.0), _circuit(*MANDATORY))
        assert check.status == ComplianceStatus.NON_COMPLIANT
        assert "Max current 150.00A" in check.description

    def test_empty_analysis(self):
        check = check_nec(CircuitAnalysis(), _circuit(*MANDATORY, *RECOMMENDED))
        assert check.status == ComplianceStatus.WARNING
        assert "Insufficient" in check.description

    def test_custom_limit(self):
        standards = SafetyStandards(nec=NECLimits(max_voltage=120))
        check = check_nec(_analysis(), _circuit(*MANDATORY, *RECOMMENDED), standards)
        assert check.status == ComplianceStatus.NON_COMPLIANT


# ═══════════════════════════════════════════════════════════
# OSHA
# ═══════════════════════════════════════════════════════════


class TestOSHA:
    def test_above_touch_voltage(self):
        check = check_osha(_analysis(), _circuit())
        assert check.status == ComplianceStatus.WARNING
        assert "230.0V exceeds" in check.description

    def test_extra_low_voltage(self):
        check = check_osha(_analysis(voltage=12.0), _circuit(source="battery"))
        assert check.status == ComplianceStatus.COMPLIANT

    def test_no_data(self):
        check = check_osha(CircuitAnalysis(), _circuit())
        assert check.status == ComplianceStatus.WARNING
        assert "unavailable" in check.description


# ═══════════════════════════════════════════════════════════
# NFPA
# ═══════════════════════════════════════════════════════════


class TestNFPA:
    def test_no_sources(self):
        circuit = Circuit(components=[Component(id="r1", type="resistor", value=10)])
        check = check_nfpa(CircuitAnalysis(), circuit)
        assert check.status == ComplianceStatus.WARNING
        assert "No primary power sources" in check.description

    def test_low_voltage_source_not_calculable(self):
        check = check_nfpa(
            _analysis(voltage=9.0, current=1.0),
            _circuit(source="battery", source_value=9),
        )
        assert check.status == ComplianceStatus.WARNING
        assert "could not be calculated" in check.description

    def test_within_limit(self):
        check = check_nfpa(_analysis(current=10.0), _circuit())
        assert check.status == ComplianceStatus.COMPLIANT
        assert "0.15 cal/cm²" in check.description

    def test_above_limit(self):
        check = check_nfpa(_analysis(current=100.0), _circuit())
        assert check.status == ComplianceStatus.NON_COMPLIANT
        assert "1.52 cal/cm²" in check.description


class TestCheckCompliance:
    def test_one_verdict_per_standard(self):
        checks = check_compliance(_analysis(), _circuit())
        assert [c.standard for c in checks] == ["NEC", "OSHA", "NFPA"]
        assert len(ALL_STANDARD_CHECKS) == 3

    def test_selected_checks(self):
        checks = check_compliance(_analysis(), _circuit(), checks=[check_osha])
        assert [c.standard for c in checks] == ["OSHA"]
