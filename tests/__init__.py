"""Test suite for the krepko package.

This package contains unit and integration tests validating pattern
matching, flow execution, run policies, flow file loading, reporting
and the command-line and pytest integrations.
"""
