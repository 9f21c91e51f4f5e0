"""Thermal circuit description and graph-based construction.

A circuit is a set of thermal nodes with heat capacitance, coupled by a dense
symmetric conductance matrix. The first ``cores`` nodes are the cores, i.e.
the nodes that receive externally supplied power.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import networkx as nx
import numpy as np


@dataclass
class ThermalCircuit:
    """RC thermal network.

    Attributes:
        cores: Number of heat-generating nodes (the first ``cores`` nodes, >= 1)
        capacitance: Heat capacitance per node, shape (nodes,), all > 0
        conductance: Symmetric conductance matrix, shape (nodes, nodes),
            including self terms (conductance to ambient on the diagonal)
        node_names: Optional name for each node, in matrix order
    """
    cores: int
    capacitance: np.ndarray
    conductance: np.ndarray
    node_names: List[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        capacitance = np.array(self.capacitance, dtype=np.float64).ravel()
        conductance = np.array(self.conductance, dtype=np.float64)
        nodes = capacitance.shape[0]

        if nodes < 1:
            raise ValueError("circuit must have at least one node")
        if not 1 <= self.cores <= nodes:
            raise ValueError(f"cores must be in [1, {nodes}], got {self.cores}")
        if conductance.shape != (nodes, nodes):
            raise ValueError(
                f"conductance must be {nodes}x{nodes}, got {conductance.shape}"
            )
        if np.any(capacitance <= 0.0):
            raise ValueError("all capacitances must be > 0")
        scale = max(float(np.max(np.abs(conductance))), 1.0)
        if not np.allclose(conductance, conductance.T, rtol=0.0, atol=1e-12 * scale):
            raise ValueError("conductance matrix must be symmetric")
        if self.node_names and len(self.node_names) != nodes:
            raise ValueError(
                f"node_names has {len(self.node_names)} entries for {nodes} nodes"
            )

        capacitance.flags.writeable = False
        conductance.flags.writeable = False
        self.cores = int(self.cores)
        self.capacitance = capacitance
        self.conductance = conductance

    @property
    def nodes(self) -> int:
        return self.capacitance.shape[0]

    @property
    def core_names(self) -> List[Any]:
        if self.node_names:
            return list(self.node_names[:self.cores])
        return list(range(self.cores))


def create_circuit_from_graph(
    graph: nx.Graph,
    core_nodes: Sequence[Any],
    ground: Any = '0',
    conductance_attr: str = 'conductance',
    capacitance_attr: str = 'capacitance',
) -> ThermalCircuit:
    """Build a ThermalCircuit from a graph of thermal conductances.

    Every node other than ``ground`` becomes a thermal node and must carry a
    capacitance attribute. Edges carry either a conductance (W/K) or a
    ``resistance`` (K/W) attribute. An edge between two thermal nodes stamps
    +g on both diagonals and -g on the off-diagonal pair; an edge to ``ground``
    stamps +g on the diagonal only (heat path to ambient). Parallel edges of a
    multigraph accumulate.

    Args:
        graph: networkx Graph or MultiGraph
        core_nodes: Nodes receiving power, in core order; placed first
        ground: Node representing ambient (not a thermal node)
        conductance_attr: Edge attribute holding conductance
        capacitance_attr: Node attribute holding capacitance

    Returns:
        ThermalCircuit with node_names giving the matrix order.

    Raises:
        ValueError: If a core is not in the graph, a node has no capacitance,
            or an edge has neither conductance nor resistance.

    Example:
        G, cores = generate_thermal_grid(rows=2, cols=2)
        circuit = create_circuit_from_graph(G, cores)
    """
    core_list = list(core_nodes)
    core_set = set(core_list)
    if len(core_set) != len(core_list):
        raise ValueError("core_nodes contains duplicates")
    for node in core_list:
        if node == ground or node not in graph:
            raise ValueError(f"Core node {node!r} not found in graph")

    others = [n for n in graph.nodes if n != ground and n not in core_set]
    order = core_list + others
    node_to_idx: Dict[Any, int] = {n: i for i, n in enumerate(order)}
    n_nodes = len(order)

    capacitance = np.zeros(n_nodes, dtype=np.float64)
    for node in order:
        value = graph.nodes[node].get(capacitance_attr)
        if value is None:
            raise ValueError(f"Node {node!r} has no '{capacitance_attr}' attribute")
        capacitance[node_to_idx[node]] = float(value)

    conductance = np.zeros((n_nodes, n_nodes), dtype=np.float64)
    for u, v, data in graph.edges(data=True):
        g = _edge_conductance(data, conductance_attr)
        if g is None:
            raise ValueError(f"Edge ({u!r}, {v!r}) has no conductance or resistance")
        if u == v:
            continue

        u_is_ground = (u == ground)
        v_is_ground = (v == ground)
        if u_is_ground and v_is_ground:
            continue
        elif u_is_ground:
            conductance[node_to_idx[v], node_to_idx[v]] += g
        elif v_is_ground:
            conductance[node_to_idx[u], node_to_idx[u]] += g
        else:
            iu, iv = node_to_idx[u], node_to_idx[v]
            conductance[iu, iu] += g
            conductance[iv, iv] += g
            conductance[iu, iv] -= g
            conductance[iv, iu] -= g

    return ThermalCircuit(
        cores=len(core_list),
        capacitance=capacitance,
        conductance=conductance,
        node_names=order,
    )


def _edge_conductance(data: Dict[str, Any], conductance_attr: str) -> Optional[float]:
    g = data.get(conductance_attr)
    if g is not None:
        return float(g)
    r = data.get('resistance')
    if r is None:
        return None
    if r <= 0:
        raise ValueError(f"Non-positive thermal resistance: {r}")
    return 1.0 / float(r)
