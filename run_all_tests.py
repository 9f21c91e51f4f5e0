#!/usr/bin/env python3
"""Run all unit tests."""
import unittest
import sys

# Configure matplotlib before importing test modules
import matplotlib
matplotlib.use('Agg')

loader = unittest.TestLoader()

print("Loading unit test modules from ./tests directory...")
suite = unittest.TestSuite()

test_modules = [
    'tests.test_analysis',
    'tests.test_circuit',
    'tests.test_history',
    'tests.test_linear',
    'tests.test_plotter',
    'tests.test_power',
    'tests.test_simulation',
]

load_errors = []
for module in test_modules:
    try:
        suite.addTests(loader.loadTestsFromName(module))
    except Exception as e:
        print(f"Warning: Could not load {module}: {e}")
        load_errors.append(module)

print(f"\nRunning {suite.countTestCases()} tests...")
print("="*70)

runner = unittest.TextTestRunner(verbosity=1)
result = runner.run(suite)

print("\n" + "="*70)
print("TEST SUMMARY")
print("="*70)
print(f"Tests run: {result.testsRun}")
print(f"Successes: {result.testsRun - len(result.failures) - len(result.errors)}")
print(f"Failures: {len(result.failures)}")
print(f"Errors: {len(result.errors)}")

if result.failures:
    print("\nFAILED TESTS:")
    for test, _ in result.failures:
        print(f"  ❌ {test}")

if result.errors:
    print("\nERRORS:")
    for test, _ in result.errors:
        print(f"  ❌ {test}")

print("="*70)
sys.exit(0 if result.wasSuccessful() and not load_errors else 1)
