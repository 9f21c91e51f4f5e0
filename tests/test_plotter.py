"""Tests for ThermalPlotter."""

import os
import tempfile
import unittest

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from generate_thermal_grid import generate_thermal_grid
from rcthermal import (
    PowerProfiles,
    ThermalConfig,
    ThermalPlotter,
    TransientSimulator,
    create_circuit_from_graph,
    plot_core_waveforms,
    plot_peak_temperatures,
)


def build_result():
    G, cores = generate_thermal_grid(rows=2, cols=2, seed=1)
    circuit = create_circuit_from_graph(G, cores)
    profiles = PowerProfiles(cores=circuit.cores)
    profiles.add_pulse(0, v1=0.0, v2=2.0, delay=0.005, width=0.01, period=0.02)
    profiles.add_dc(3, 0.5)
    sim = TransientSimulator(circuit, ThermalConfig(time_step=1e-3))
    return sim.solve_transient(profiles, t_end=0.05)


class TestThermalPlotter(unittest.TestCase):
    """Tests for waveform and peak plots."""

    @classmethod
    def setUpClass(cls):
        cls.result = build_result()

    def tearDown(self):
        plt.close('all')

    def test_core_waveforms_saved(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'cores.png')
            fig, ax = ThermalPlotter.plot_core_waveforms(self.result, save_path=path)
            self.assertTrue(os.path.exists(path))
        self.assertEqual(len(ax.get_lines()), 4)
        self.assertIs(ax.figure, fig)

    def test_core_subset_relative(self):
        cores = self.result.core_names[:2]
        _, ax = plot_core_waveforms(self.result, cores=cores, relative=True)
        self.assertEqual(len(ax.get_lines()), 2)
        self.assertGreaterEqual(min(ax.get_lines()[0].get_ydata()), -1e-9)

    def test_existing_axes(self):
        fig, ax = plt.subplots()
        fig2, ax2 = plot_core_waveforms(self.result, ax=ax)
        self.assertIs(fig2, fig)
        self.assertIs(ax2, ax)

    def test_unknown_cores(self):
        with self.assertRaises(ValueError):
            plot_core_waveforms(self.result, cores=['nope'])

    def test_peak_temperatures(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'peaks.png')
            fig, ax = plot_peak_temperatures(self.result, save_path=path)
            self.assertTrue(os.path.exists(path))
        self.assertEqual(len(ax.patches), 4)


if __name__ == '__main__':
    unittest.main()
