#!/usr/bin/env python3
"""Example usage of the transient thermal analysis workflow.

Builds a synthetic die/spreader/sink network, drives a few cores with pulse
trains and a PWL burst, and reports the hottest cores.

Usage:
    python example_transient.py
    python example_transient.py --rows 4 --cols 4 --t-end 2.0 --plot --verbose
"""

import argparse
import logging
from pathlib import Path

from generate_thermal_grid import generate_thermal_grid
from rcthermal import (
    PowerProfiles,
    ThermalConfig,
    TransientSimulator,
    create_circuit_from_graph,
    plot_core_waveforms,
    plot_peak_temperatures,
)


def main():
    parser = argparse.ArgumentParser(
        description='Transient thermal simulation of a synthetic RC network',
    )
    parser.add_argument('--rows', type=int, default=3,
                        help='Core rows on the die (default: 3)')
    parser.add_argument('--cols', type=int, default=3,
                        help='Core columns on the die (default: 3)')
    parser.add_argument('--dt', type=float, default=1e-3,
                        help='Time step in seconds (default: 1e-3)')
    parser.add_argument('--t-end', type=float, default=1.0,
                        help='Simulated time in seconds (default: 1.0)')
    parser.add_argument('--ambient', type=float, default=318.15,
                        help='Ambient temperature (default: 318.15)')
    parser.add_argument('--window', type=int, default=64,
                        help='Steps per analysis call (default: 64)')
    parser.add_argument('--seed', type=int, default=11,
                        help='Random seed for capacitance variation (default: 11)')
    parser.add_argument('--output', '-o', type=str, default='./results',
                        help='Output directory for plots (default: ./results)')
    parser.add_argument('--plot', action='store_true',
                        help='Save waveform and peak plots to the output directory')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')
    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(levelname)s: %(message)s')

    G, cores = generate_thermal_grid(rows=args.rows, cols=args.cols, variation=0.1, seed=args.seed)
    circuit = create_circuit_from_graph(G, cores)
    print(f"Network: {circuit.nodes} thermal nodes, {circuit.cores} cores")

    config = ThermalConfig(ambient=args.ambient, time_step=args.dt)
    sim = TransientSimulator(circuit, config, window=args.window, growth_factor=1.5)

    # Background load everywhere, bursts on a few cores
    profiles = PowerProfiles(cores=circuit.cores)
    for c in range(circuit.cores):
        profiles.add_dc(c, 0.2)
    profiles.add_pulse(0, v1=0.0, v2=3.0, delay=0.05, rise=1e-3, fall=1e-3,
                       width=0.1, period=0.3)
    if circuit.cores > 1:
        profiles.add_pulse(circuit.cores - 1, v1=0.0, v2=2.0, delay=0.2, rise=5e-3,
                           fall=5e-3, width=0.05, period=0.15)
    if circuit.cores > 2:
        profiles.add_pwl(circuit.cores // 2,
                         [(0.0, 0.0), (0.25, 2.5), (0.5, 2.5), (0.6, 0.0)])

    result = sim.solve_transient(profiles, t_end=args.t_end, verbose=args.verbose)
    summary = result.summary()

    print(f"Simulated {summary['steps']} steps in {result.timings['total'] * 1000:.1f} ms "
          f"(operators {result.timings['build_operators'] * 1000:.1f} ms)")
    print(f"Peak {result.peak_temperature:.3f} on {result.peak_core} at t={result.peak_time:.3f}s")
    print("Hottest cores:")
    for name, peak, t in result.hottest_cores:
        print(f"  {name}: {peak:.3f} (rise {peak - result.ambient:.3f}) at t={t:.3f}s")

    steady = sim.steady_state(profiles, t=0.0)
    print(f"Steady state at background load: max {max(steady.values()):.3f}")

    if args.plot:
        out_dir = Path(args.output)
        out_dir.mkdir(parents=True, exist_ok=True)
        plot_core_waveforms(result, relative=True, save_path=str(out_dir / 'core_waveforms.png'))
        plot_peak_temperatures(result, save_path=str(out_dir / 'peak_temperatures.png'))
        print(f"Plots written to {out_dir}")


if __name__ == "__main__":
    main()
