from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for records exchanged with the editor (camelCase JSON)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ComponentType(str, Enum):
    # Power sources
    BATTERY = "battery"
    SOCKET = "socket"
    # Passive
    RESISTOR = "resistor"
    CAPACITOR = "capacitor"
    INDUCTOR = "inductor"
    TRANSFORMER = "transformer"
    DIODE = "diode"
    LED = "led"
    # Protection
    MCB = "mcb"
    RCCB = "rccb"
    FUSE = "fuse"
    GFCI = "gfci"
    AFCI = "afci"
    SPD = "spd"
    SURGE_PROTECTOR = "surge-protector"
    OVERVOLTAGE_PROTECTOR = "overvoltage-protector"
    UNDERVOLTAGE_PROTECTOR = "undervoltage-protector"
    EMERGENCY_STOP = "emergency-stop"
    # Control
    SWITCH = "switch"
    TWO_WAY_SWITCH = "two-way-switch"
    CONTACTOR = "contactor"
    RELAY = "relay"
    TIMER = "timer"
    # Appliances
    FAN = "fan"
    LIGHT = "light"
    TV = "tv"
    AC = "ac"
    MOTOR = "motor"
    HEATER = "heater"
    REFRIGERATOR = "refrigerator"
    WASHING_MACHINE = "washing-machine"
    MICROWAVE = "microwave"
    DISHWASHER = "dishwasher"
    WATER_HEATER = "water-heater"
    ELECTRIC_STOVE = "electric-stove"
    ELECTRIC_OVEN = "electric-oven"
    HEAT_PUMP = "heat-pump"
    ELECTRIC_BOILER = "electric-boiler"
    UPS = "ups"
    INVERTER = "inverter"
    # Measurement
    VOLTMETER = "voltmeter"
    AMMETER = "ammeter"
    WATTMETER = "wattmeter"
    # Topology / other
    GROUND = "ground"
    JUNCTION = "junction"
    LIGHTNING_ROD = "lightning-rod"
    SENSOR = "sensor"
    ISOLATION_TRANSFORMER = "isolation-transformer"
    # Legacy editor tags
    WIRE = "wire"
    BREAKER = "breaker"


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class Component(CamelModel):
    id: str
    type: ComponentType
    value: float = 0.0
    unit: str = ""
    ports: int = 2
    properties: dict[str, Any] = Field(default_factory=dict)
    position: Position | None = None
    rotation: float = 0.0


class Connection(CamelModel):
    id: str
    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    from_port: int = 0
    to_port: int = 0
    wire_color: Literal["red", "black", "green", "blue"] | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CircuitMetadata(CamelModel):
    voltage: float = 230.0
    frequency: float | None = None
    phase: Literal["single", "three"] | None = None
    description: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Circuit(CamelModel):
    id: str = "circuit"
    name: str = "Untitled circuit"
    components: list[Component] = Field(default_factory=list)
    connections: list[Connection] = Field(default_factory=list)
    metadata: CircuitMetadata = Field(default_factory=CircuitMetadata)


class CircuitStats(CamelModel):
    total_components: int
    total_connections: int
    component_counts: dict[str, int] = Field(default_factory=dict)
    has_power_source: bool = False
    has_ground: bool = False
