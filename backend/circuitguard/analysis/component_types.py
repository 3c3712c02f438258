"""Component catalog: type groups and per-type property defaults.

Every formula in the power-flow pass reads a component's attributes through
`resolve_properties()`, which merges the sparse property bag authored in the
editor over the engineering defaults for that component type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from circuitguard.analysis.formulas import DEFAULT_CLEARING_TIME_S
from circuitguard.schemas.circuit import Component, ComponentType as T

# Industry-default line voltage when neither the source nor the circuit
# metadata supplies a positive value.
DEFAULT_LINE_VOLTAGE = 230.0


# ─── Type Groups ───

POWER_SOURCES = frozenset({T.BATTERY, T.SOCKET})

APPLIANCES = frozenset(
    {
        T.FAN,
        T.LIGHT,
        T.TV,
        T.AC,
        T.MOTOR,
        T.HEATER,
        T.REFRIGERATOR,
        T.WASHING_MACHINE,
        T.MICROWAVE,
        T.UPS,
        T.INVERTER,
        T.DISHWASHER,
        T.WATER_HEATER,
        T.ELECTRIC_STOVE,
        T.ELECTRIC_OVEN,
        T.HEAT_PUMP,
        T.ELECTRIC_BOILER,
    }
)

# In-line devices that carry the full aggregate load current.
PASS_THROUGH_DEVICES = frozenset(
    {T.MCB, T.RCCB, T.FUSE, T.GFCI, T.AFCI, T.SWITCH, T.TWO_WAY_SWITCH}
)

# Shunt-connected surge devices only leak a small current.
SHUNT_DEVICES = frozenset({T.SPD, T.SURGE_PROTECTOR})

PROTECTION_DEVICES = frozenset(
    {T.MCB, T.RCCB, T.GFCI, T.AFCI, T.SPD, T.SURGE_PROTECTOR, T.FUSE}
)

GROUND_FAULT_DEVICES = frozenset({T.GFCI, T.RCCB, T.AFCI})
RESIDUAL_CURRENT_DEVICES = frozenset({T.GFCI, T.RCCB})

# Components a person can touch during normal use.
ACCESSIBLE_TYPES = frozenset(
    {
        T.SOCKET,
        T.SWITCH,
        T.TWO_WAY_SWITCH,
        T.LIGHT,
        T.FAN,
        T.TV,
        T.AC,
        T.HEATER,
        T.MOTOR,
        T.WASHING_MACHINE,
        T.DISHWASHER,
        T.MICROWAVE,
        T.REFRIGERATOR,
        T.WATER_HEATER,
        T.ELECTRIC_STOVE,
        T.ELECTRIC_OVEN,
        T.HEAT_PUMP,
        T.ELECTRIC_BOILER,
    }
)

# Appliances rated to dissipate their nameplate power.
HIGH_POWER_APPLIANCES = frozenset(
    {
        T.AC,
        T.HEATER,
        T.MOTOR,
        T.WASHING_MACHINE,
        T.MICROWAVE,
        T.DISHWASHER,
        T.WATER_HEATER,
        T.ELECTRIC_STOVE,
        T.ELECTRIC_OVEN,
        T.HEAT_PUMP,
        T.ELECTRIC_BOILER,
        T.UPS,
        T.INVERTER,
        T.REFRIGERATOR,
    }
)

SERIES_GROUPABLE = frozenset({T.RESISTOR, T.CAPACITOR, T.INDUCTOR})

# Components whose power counts as consumed load.
LOAD_TYPES = APPLIANCES | frozenset({T.RESISTOR, T.LED, T.DIODE})

NEC_MANDATORY_PROTECTION = (T.MCB, T.RCCB, T.GROUND)
NEC_RECOMMENDED_PROTECTION = (
    T.GFCI,
    T.AFCI,
    T.SPD,
    T.SURGE_PROTECTOR,
    T.OVERVOLTAGE_PROTECTOR,
    T.UNDERVOLTAGE_PROTECTOR,
    T.EMERGENCY_STOP,
)


# ─── Per-Type Defaults ───

# Nameplate wattage when an appliance declares no powerConsumption.
APPLIANCE_DEFAULT_WATTS: dict[T, float] = {
    T.FAN: 75,
    T.LIGHT: 10,
    T.TV: 150,
    T.AC: 2000,
    T.MOTOR: 750,
    T.HEATER: 1500,
    T.REFRIGERATOR: 150,
    T.WASHING_MACHINE: 2000,
    T.MICROWAVE: 1200,
    T.DISHWASHER: 1800,
    T.WATER_HEATER: 3000,
    T.ELECTRIC_STOVE: 4000,
    T.ELECTRIC_OVEN: 2500,
    T.HEAT_PUMP: 3000,
    T.ELECTRIC_BOILER: 6000,
    T.UPS: 1000,
    T.INVERTER: 2000,
}

# Coil / electronics draw (A) of control devices that sit off the load path.
DEVICE_DRAW_AMPS: dict[T, float] = {
    T.CONTACTOR: 0.05,
    T.RELAY: 0.03,
    T.TIMER: 0.01,
    T.EMERGENCY_STOP: 0.005,
    T.OVERVOLTAGE_PROTECTOR: 0.005,
    T.UNDERVOLTAGE_PROTECTOR: 0.005,
    T.SENSOR: 0.005,
}

SHUNT_LEAKAGE_AMPS = 0.001
METER_SELF_LOAD_AMPS = 0.001
AMMETER_BURDEN_VOLTS = 0.1

DEFAULT_POWER_FACTOR = 0.8
DEFAULT_PROTECTIVE_RATING_AMPS = 16.0


class ResolvedProperties(BaseModel):
    """Component attributes after defaults are applied.

    Ratings stay None unless the component declares a positive value; an
    absent rating means "not rated", never "rated at zero".
    """

    power_consumption: float = 0.0
    operating_voltage: float = DEFAULT_LINE_VOLTAGE
    power_factor: float = DEFAULT_POWER_FACTOR
    trip_current: float = DEFAULT_PROTECTIVE_RATING_AMPS
    fuse_rating: float = DEFAULT_PROTECTIVE_RATING_AMPS
    resistance: float = 0.0
    turns_ratio: float = 1.0
    primary_voltage: float = DEFAULT_LINE_VOLTAGE
    clearing_time: float = DEFAULT_CLEARING_TIME_S
    power_rating: float | None = None
    voltage_rating: float | None = None
    current_rating: float | None = None


def numeric_property(properties: dict[str, Any], key: str) -> float | None:
    """Return a declared property as float, or None when absent.

    Zero counts as absent, matching the editor which leaves unset numeric
    fields at 0. Booleans and strings are ignored.
    """
    value = properties.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if value == 0:
        return None
    return float(value)


def _positive(properties: dict[str, Any], key: str) -> float | None:
    value = numeric_property(properties, key)
    return value if value is not None and value > 0 else None


def resolve_properties(
    component: Component,
    supply_voltage: float = DEFAULT_LINE_VOLTAGE,
) -> ResolvedProperties:
    """Merge a component's declared properties over its type defaults."""
    props = component.properties

    def pick(key: str, default: float) -> float:
        value = numeric_property(props, key)
        return default if value is None else value

    resistance = numeric_property(props, "resistance")
    if resistance is None:
        resistance = component.value

    return ResolvedProperties(
        power_consumption=pick(
            "powerConsumption", APPLIANCE_DEFAULT_WATTS.get(component.type, 0.0)
        ),
        operating_voltage=_positive(props, "operatingVoltage") or supply_voltage,
        power_factor=pick("powerFactor", DEFAULT_POWER_FACTOR),
        trip_current=_positive(props, "tripCurrent") or DEFAULT_PROTECTIVE_RATING_AMPS,
        fuse_rating=_positive(props, "fuseRating") or DEFAULT_PROTECTIVE_RATING_AMPS,
        resistance=resistance,
        turns_ratio=_positive(props, "turnsRatio") or 1.0,
        primary_voltage=_positive(props, "primaryVoltage") or supply_voltage,
        clearing_time=_positive(props, "clearingTime") or DEFAULT_CLEARING_TIME_S,
        power_rating=_positive(props, "powerRating"),
        voltage_rating=_positive(props, "voltageRating"),
        current_rating=_positive(props, "currentRating"),
    )


def has_component_type(components: list[Component], types: frozenset | tuple) -> bool:
    return any(c.type in types for c in components)
