"""
Conformance Test Suite

This suite defines the NORMATIVE behavior of statewatch monitors.
Any compatible monitor implementation MUST pass these tests.

The tests are organized by property:
1. dirty_detection.py - Un-asserted changes are reported, asserted ones are not
2. gas_accounting.py - Wallet expectations are independent of gas spent
3. structural_equality.py - Structural equality over contract values

These tests use hypothesis for property-based testing.
"""
