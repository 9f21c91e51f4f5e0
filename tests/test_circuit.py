"""Tests for thermal circuit construction.

Covers ThermalCircuit validation, graph stamping via create_circuit_from_graph
and the synthetic network generator.
"""

import unittest

import networkx as nx
import numpy as np

from generate_thermal_grid import generate_thermal_grid
from rcthermal import ThermalCircuit, ThermalConfig, create_circuit_from_graph


def build_chain_graph():
    """Ambient -- a -- b chain; b is the core."""
    G = nx.Graph()
    G.add_node('0')
    G.add_node('a', capacitance=2.0)
    G.add_node('b', capacitance=0.5)
    G.add_edge('0', 'a', conductance=1.0)
    G.add_edge('a', 'b', conductance=2.0)
    return G


class TestThermalCircuit(unittest.TestCase):
    """Tests for ThermalCircuit validation."""

    def test_valid_circuit(self):
        """A symmetric circuit with positive capacitance is accepted."""
        c = ThermalCircuit(cores=1, capacitance=[1.0, 2.0],
                           conductance=[[2.0, -1.0], [-1.0, 1.0]])
        self.assertEqual(c.nodes, 2)
        self.assertEqual(c.cores, 1)
        self.assertEqual(c.core_names, [0])
        self.assertEqual(c.capacitance.dtype, np.float64)

    def test_arrays_read_only(self):
        """Stored arrays cannot be modified after construction."""
        c = ThermalCircuit(cores=1, capacitance=[1.0], conductance=[[1.0]])
        with self.assertRaises(ValueError):
            c.capacitance[0] = 5.0
        with self.assertRaises(ValueError):
            c.conductance[0, 0] = 5.0

    def test_rejects_asymmetric(self):
        with self.assertRaises(ValueError):
            ThermalCircuit(cores=1, capacitance=[1.0, 1.0],
                           conductance=[[1.0, -1.0], [0.0, 1.0]])

    def test_rejects_non_positive_capacitance(self):
        with self.assertRaises(ValueError):
            ThermalCircuit(cores=1, capacitance=[1.0, 0.0], conductance=np.eye(2))

    def test_rejects_bad_core_count(self):
        with self.assertRaises(ValueError):
            ThermalCircuit(cores=0, capacitance=[1.0], conductance=[[1.0]])
        with self.assertRaises(ValueError):
            ThermalCircuit(cores=3, capacitance=[1.0, 1.0], conductance=np.eye(2))

    def test_rejects_shape_mismatch(self):
        with self.assertRaises(ValueError):
            ThermalCircuit(cores=1, capacitance=[1.0, 1.0], conductance=np.eye(3))

    def test_rejects_node_name_mismatch(self):
        with self.assertRaises(ValueError):
            ThermalCircuit(cores=1, capacitance=[1.0, 1.0], conductance=np.eye(2),
                           node_names=['x'])


class TestThermalConfig(unittest.TestCase):
    """Tests for ThermalConfig."""

    def test_defaults(self):
        config = ThermalConfig()
        self.assertGreater(config.time_step, 0.0)

    def test_rejects_non_positive_step(self):
        with self.assertRaises(ValueError):
            ThermalConfig(time_step=0.0)
        with self.assertRaises(ValueError):
            ThermalConfig(time_step=-1e-3)


class TestCreateCircuitFromGraph(unittest.TestCase):
    """Tests for create_circuit_from_graph()."""

    def test_stamping_and_order(self):
        """Cores come first; ground edges stamp the diagonal only."""
        circuit = create_circuit_from_graph(build_chain_graph(), ['b'])

        self.assertEqual(circuit.node_names, ['b', 'a'])
        self.assertEqual(circuit.core_names, ['b'])
        np.testing.assert_allclose(circuit.capacitance, [0.5, 2.0])
        np.testing.assert_allclose(circuit.conductance, [[2.0, -2.0], [-2.0, 3.0]])

    def test_resistance_attribute(self):
        """Edges given as resistance stamp 1/R."""
        G = build_chain_graph()
        G.edges['a', 'b'].pop('conductance')
        G.edges['a', 'b']['resistance'] = 0.25

        circuit = create_circuit_from_graph(G, ['b'])

        np.testing.assert_allclose(circuit.conductance[0, 1], -4.0)

    def test_multigraph_parallel_edges_accumulate(self):
        G = nx.MultiGraph(build_chain_graph())
        G.add_edge('a', 'b', conductance=1.0)

        circuit = create_circuit_from_graph(G, ['b'])

        np.testing.assert_allclose(circuit.conductance[0, 0], 3.0)

    def test_missing_core(self):
        with self.assertRaises(ValueError):
            create_circuit_from_graph(build_chain_graph(), ['zz'])
        with self.assertRaises(ValueError):
            create_circuit_from_graph(build_chain_graph(), ['0'])

    def test_duplicate_core(self):
        with self.assertRaises(ValueError):
            create_circuit_from_graph(build_chain_graph(), ['a', 'a'])

    def test_missing_capacitance(self):
        G = build_chain_graph()
        del G.nodes['a']['capacitance']
        with self.assertRaises(ValueError):
            create_circuit_from_graph(G, ['b'])

    def test_missing_conductance(self):
        G = build_chain_graph()
        G.add_edge('b', '0')
        with self.assertRaises(ValueError):
            create_circuit_from_graph(G, ['b'])


class TestGenerateThermalGrid(unittest.TestCase):
    """Tests for the synthetic network generator."""

    def test_structure(self):
        """rows x cols dies and spreaders plus a sink, all behind ambient."""
        G, cores = generate_thermal_grid(rows=2, cols=3)

        self.assertEqual(len(cores), 6)
        self.assertEqual(G.number_of_nodes(), 6 + 6 + 1 + 1)
        self.assertTrue(nx.is_connected(G))

        circuit = create_circuit_from_graph(G, cores)
        self.assertEqual(circuit.nodes, 13)
        self.assertEqual(circuit.core_names, cores)

    def test_only_sink_reaches_ambient(self):
        """Row sums of G vanish except for the ambient path."""
        G, cores = generate_thermal_grid(rows=2, cols=2, sink_ambient_conductance=0.7)
        circuit = create_circuit_from_graph(G, cores)

        row_sums = circuit.conductance.sum(axis=1)
        sink = circuit.node_names.index('sink')
        np.testing.assert_allclose(row_sums[sink], 0.7)
        np.testing.assert_allclose(np.delete(row_sums, sink), 0.0, atol=1e-12)

    def test_seeded_variation(self):
        """Capacitance jitter is reproducible for a fixed seed."""
        G1, _ = generate_thermal_grid(rows=2, cols=2, variation=0.2, seed=5)
        G2, _ = generate_thermal_grid(rows=2, cols=2, variation=0.2, seed=5)
        G3, _ = generate_thermal_grid(rows=2, cols=2, variation=0.2, seed=6)

        caps1 = [G1.nodes[n]['capacitance'] for n in G1.nodes if n != '0']
        caps2 = [G2.nodes[n]['capacitance'] for n in G2.nodes if n != '0']
        caps3 = [G3.nodes[n]['capacitance'] for n in G3.nodes if n != '0']
        self.assertEqual(caps1, caps2)
        self.assertNotEqual(caps1, caps3)

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            generate_thermal_grid(rows=0, cols=2)


if __name__ == '__main__':
    unittest.main()
