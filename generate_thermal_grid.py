#!/usr/bin/env python3
"""
Synthetic thermal network generator for fast prototyping.

Network layout:
1) Die layer of rows x cols core blocks, one thermal node per block
2) Adjacent die blocks coupled by lateral conductance
3) One heat-spreader node under each die block, coupled vertically to it
4) Adjacent spreader nodes coupled by (larger) lateral conductance
5) Every spreader node coupled to a single heat-sink node
6) Heat sink coupled to ambient (ground node '0') by a convection conductance
7) Node capacitances jittered by a seeded relative variation
"""

from __future__ import annotations
import random
from typing import List, Optional, Tuple

import networkx as nx
import matplotlib.pyplot as plt


def generate_thermal_grid(
    rows: int,
    cols: int,
    die_capacitance: float = 0.02,
    spreader_capacitance: float = 0.2,
    sink_capacitance: float = 20.0,
    die_lateral_conductance: float = 0.5,
    die_vertical_conductance: float = 2.0,
    spreader_lateral_conductance: float = 5.0,
    spreader_sink_conductance: float = 4.0,
    sink_ambient_conductance: float = 1.0,
    variation: float = 0.0,
    seed: Optional[int] = 42,
    plot: bool = False,
    save_path: Optional[str] = None,
) -> Tuple[nx.Graph, List[str]]:
    """
    Returns:
      G: nx.Graph with node attribute 'capacitance' (J/K) and edge attribute
         'conductance' (W/K); ground node '0' stands for ambient
      cores: List of die-block node ids in row-major order
    """
    if rows < 1 or cols < 1:
        raise ValueError(f"rows and cols must be >= 1, got {rows}x{cols}")
    if not 0.0 <= variation < 1.0:
        raise ValueError(f"variation must be in [0, 1), got {variation}")

    rng = random.Random(seed)

    def jitter(value: float) -> float:
        if variation == 0.0:
            return value
        return value * (1.0 + rng.uniform(-variation, variation))

    def die(r: int, c: int) -> str:
        return f"die_{r}_{c}"

    def spreader(r: int, c: int) -> str:
        return f"spr_{r}_{c}"

    G = nx.Graph()
    G.add_node("0", kind="ambient", xy=(-1.0, -1.0))
    G.add_node("sink", kind="sink", capacitance=jitter(sink_capacitance),
               xy=((cols - 1) / 2.0, -1.0))

    cores: List[str] = []
    for r in range(rows):
        for c in range(cols):
            G.add_node(die(r, c), kind="die", capacitance=jitter(die_capacitance),
                       xy=(float(c), float(r)))
            G.add_node(spreader(r, c), kind="spreader",
                       capacitance=jitter(spreader_capacitance),
                       xy=(c + 0.3, r - 0.3))
            G.add_edge(die(r, c), spreader(r, c),
                       conductance=die_vertical_conductance, kind="vertical")
            G.add_edge(spreader(r, c), "sink",
                       conductance=spreader_sink_conductance / (rows * cols), kind="sink")
            cores.append(die(r, c))

    # Lateral coupling to the right and downward neighbour
    for r in range(rows):
        for c in range(cols):
            for dr, dc in ((0, 1), (1, 0)):
                rr, cc = r + dr, c + dc
                if rr >= rows or cc >= cols:
                    continue
                G.add_edge(die(r, c), die(rr, cc),
                           conductance=die_lateral_conductance, kind="die")
                G.add_edge(spreader(r, c), spreader(rr, cc),
                           conductance=spreader_lateral_conductance, kind="spreader")

    G.add_edge("sink", "0", conductance=sink_ambient_conductance, kind="convection")

    # ---------- Optional quick plot ----------
    if plot or save_path:
        fig = plt.figure(figsize=(7, 6))
        for (u, v, d) in G.edges(data=True):
            if d["kind"] in ("sink", "convection"):
                continue
            x1, y1 = G.nodes[u]["xy"]
            x2, y2 = G.nodes[v]["xy"]
            color = "#D0021B" if d["kind"] == "die" else "#555555"
            plt.plot([x1, x2], [y1, y2], lw=0.8, color=color, alpha=0.7)

        def draw_nodes(kind, color, size, z=3, label=None):
            xs, ys = [], []
            for n, data in G.nodes(data=True):
                if data["kind"] == kind:
                    x, y = data["xy"]
                    xs.append(x); ys.append(y)
            if xs:
                plt.scatter(xs, ys, s=size, c=color, edgecolors="k", linewidths=0.4, zorder=z, label=label)

        draw_nodes("die", "#F8E71C", 60, z=5, label="Cores (die)")
        draw_nodes("spreader", "#4A90E2", 30, z=4, label="Spreader")
        draw_nodes("sink", "#AAAAAA", 80, z=4, label="Heat sink")

        plt.gca().set_aspect("equal", adjustable="box")
        plt.title("Synthetic Thermal Network")
        plt.legend(loc="upper right", fontsize=8)
        plt.tight_layout()
        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches="tight")
        if plot:
            plt.show()
        plt.close(fig)

    return G, cores


if __name__ == "__main__":
    # Example usage
    G, cores = generate_thermal_grid(rows=4, cols=4, variation=0.1, seed=7, plot=True)
    print(f"Graph: {G.number_of_nodes()} nodes, {G.number_of_edges()} edges")
    print(f"Cores: {len(cores)}")
