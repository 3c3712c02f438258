"""Topology Graph Builder.

Turns the flat connection list of a Circuit into an undirected adjacency
view, and derives the topology diagnostics reported alongside the power
flow: series chains, isolated components, and dangling connections.
"""

from __future__ import annotations

from collections import Counter, deque
from typing import NamedTuple

from circuitguard.analysis.component_types import POWER_SOURCES, SERIES_GROUPABLE
from circuitguard.schemas.analysis import CircuitIssue, IssueType, Severity
from circuitguard.schemas.circuit import (
    Circuit,
    CircuitStats,
    Component,
    ComponentType,
)


class Neighbor(NamedTuple):
    neighbor_id: str
    neighbor_port: int
    wire_color: str | None


Adjacency = dict[str, list[Neighbor]]

SERIES_NOTES = {
    ComponentType.RESISTOR: "Series resistors add their values together",
    ComponentType.CAPACITOR: "Series capacitors combine as the reciprocal of the sum of reciprocals",
    ComponentType.INDUCTOR: "Series inductors add their values together",
}


# ─── Internal Helpers ───


def _component_map(circuit: Circuit) -> dict[str, Component]:
    """Build id→component lookup. The first component wins on duplicate ids."""
    components: dict[str, Component] = {}
    for c in circuit.components:
        components.setdefault(c.id, c)
    return components


# ═══════════════════════════════════════════════════════════
# Adjacency
# ═══════════════════════════════════════════════════════════


def build_adjacency(circuit: Circuit) -> Adjacency:
    """Map every component id to its neighbours, in connection order.

    Isolated components map to an empty list. Connections that name an
    unknown component are left out (see `check_connections`).
    """
    adjacency: Adjacency = {c.id: [] for c in circuit.components}

    for conn in circuit.connections:
        if conn.from_id not in adjacency or conn.to_id not in adjacency:
            continue
        adjacency[conn.from_id].append(
            Neighbor(conn.to_id, conn.to_port, conn.wire_color)
        )
        if conn.to_id != conn.from_id:
            adjacency[conn.to_id].append(
                Neighbor(conn.from_id, conn.from_port, conn.wire_color)
            )

    return adjacency


def neighbor_ids(adjacency: Adjacency, component_id: str) -> list[str]:
    """Distinct neighbour ids of a component, first-seen order."""
    return list(dict.fromkeys(n.neighbor_id for n in adjacency.get(component_id, [])))


# ═══════════════════════════════════════════════════════════
# Series Groups
# ═══════════════════════════════════════════════════════════


def find_series_groups(
    circuit: Circuit,
    adjacency: Adjacency | None = None,
) -> list[list[Component]]:
    """Group directly chained components of the same passive type.

    Breadth-first from each unvisited resistor/capacitor/inductor, only
    crossing edges to neighbours of the same type. Single-member groups
    are dropped.
    """
    adjacency = adjacency if adjacency is not None else build_adjacency(circuit)
    components = _component_map(circuit)
    visited: set[str] = set()
    groups: list[list[Component]] = []

    for start in circuit.components:
        if start.type not in SERIES_GROUPABLE or start.id in visited:
            continue

        group: list[Component] = []
        queue = deque([start])
        while queue:
            current = queue.popleft()
            if current.id in visited:
                continue
            visited.add(current.id)
            group.append(current)

            for peer_id in neighbor_ids(adjacency, current.id):
                peer = components.get(peer_id)
                if peer and peer.type == start.type and peer.id not in visited:
                    queue.append(peer)

        if len(group) > 1:
            groups.append(group)

    return groups


def series_group_issues(groups: list[list[Component]]) -> list[CircuitIssue]:
    return [
        CircuitIssue(
            id=f"series-group-{group[0].id}",
            type=IssueType.INFO,
            severity=Severity.LOW,
            message=(
                "Series configuration detected: "
                f"{', '.join(c.id for c in group)}"
            ),
            recommendation=SERIES_NOTES.get(group[0].type, ""),
        )
        for group in groups
    ]


# ═══════════════════════════════════════════════════════════
# Isolation & Connection Integrity
# ═══════════════════════════════════════════════════════════


def find_isolated_components(
    circuit: Circuit,
    adjacency: Adjacency | None = None,
) -> list[CircuitIssue]:
    """Every component except ground must have at least one connection."""
    adjacency = adjacency if adjacency is not None else build_adjacency(circuit)
    issues: list[CircuitIssue] = []

    for component in circuit.components:
        if component.type == ComponentType.GROUND or adjacency.get(component.id):
            continue
        issues.append(
            CircuitIssue(
                id=f"isolated-{component.id}",
                type=IssueType.WARNING,
                severity=Severity.MEDIUM,
                component_id=component.id,
                message=f"Component {component.id} is not connected to the circuit",
                recommendation="Connect the component or remove it",
            )
        )

    return issues


def check_connections(circuit: Circuit) -> list[CircuitIssue]:
    """Report connections to unknown components or out-of-range ports."""
    components = _component_map(circuit)
    issues: list[CircuitIssue] = []

    for conn in circuit.connections:
        missing = [
            cid for cid in (conn.from_id, conn.to_id) if cid not in components
        ]
        if missing:
            issues.append(
                CircuitIssue(
                    id=f"invalid-connection-{conn.id}",
                    type=IssueType.ERROR,
                    severity=Severity.HIGH,
                    message=(
                        f"Connection {conn.id} references unknown "
                        f"component(s): {', '.join(missing)}"
                    ),
                    recommendation="Remove the stale connection or restore the component",
                )
            )
            continue

        bad_ports = [
            f"{cid}[{port}]"
            for cid, port in ((conn.from_id, conn.from_port), (conn.to_id, conn.to_port))
            if not 0 <= port < components[cid].ports
        ]
        if bad_ports:
            issues.append(
                CircuitIssue(
                    id=f"invalid-port-{conn.id}",
                    type=IssueType.WARNING,
                    severity=Severity.MEDIUM,
                    message=(
                        f"Connection {conn.id} uses port(s) outside the "
                        f"component's terminals: {', '.join(bad_ports)}"
                    ),
                    recommendation="Reconnect the wire to a valid terminal",
                )
            )

    return issues


def summarize_circuit(circuit: Circuit) -> CircuitStats:
    counts = Counter(c.type.value for c in circuit.components)
    return CircuitStats(
        total_components=len(circuit.components),
        total_connections=len(circuit.connections),
        component_counts=dict(counts),
        has_power_source=any(c.type in POWER_SOURCES for c in circuit.components),
        has_ground=any(c.type == ComponentType.GROUND for c in circuit.components),
    )
