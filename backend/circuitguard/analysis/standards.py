"""Safety standard thresholds.

Immutable threshold sets passed explicitly into the hazard and compliance
stages. `DEFAULT_STANDARDS` holds the NEC / OSHA / NFPA limits the engine
ships with; tests and callers may substitute their own.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class NECLimits(_Frozen):
    """National Electrical Code."""

    max_voltage: float = 600.0  # V
    max_current: float = 100.0  # A


class OSHALimits(_Frozen):
    """Occupational Safety and Health Administration."""

    max_touch_voltage: float = 50.0  # V


class NFPALimits(_Frozen):
    """NFPA 70E."""

    max_arc_flash_energy: float = 1.2  # cal/cm²


class ShortCircuitHeuristic(_Frozen):
    """Empirical thresholds for flagging a likely short circuit.

    A source is flagged only when its current exceeds both the absolute
    floor and `voltage_multiple` times its voltage.
    """

    floor_current: float = 150.0  # A
    low_voltage_floor_current: float = 50.0  # A
    low_voltage_threshold: float = 50.0  # V
    voltage_multiple: float = 3.0


class GroundFaultLimits(_Frozen):
    fault_path_ohms: float = 1000.0
    max_fault_current: float = 0.03  # A


class ThermalLimits(_Frozen):
    protection_device_max_w: float = 100.0
    component_max_w: float = 500.0


class SafetyStandards(_Frozen):
    nec: NECLimits = Field(default_factory=NECLimits)
    osha: OSHALimits = Field(default_factory=OSHALimits)
    nfpa: NFPALimits = Field(default_factory=NFPALimits)
    short_circuit: ShortCircuitHeuristic = Field(default_factory=ShortCircuitHeuristic)
    ground_fault: GroundFaultLimits = Field(default_factory=GroundFaultLimits)
    thermal: ThermalLimits = Field(default_factory=ThermalLimits)
    arc_flash_min_voltage: float = 50.0  # V


class ValueLimits(_Frozen):
    """Physically plausible ranges for computed operating values."""

    max_voltage: float = 1000.0  # V
    max_current: float = 10_000.0  # A
    max_power: float = 1e7  # W


DEFAULT_STANDARDS = SafetyStandards()
DEFAULT_LIMITS = ValueLimits()
