"""Test suite for the querytest package.

This package contains unit and integration tests validating scenario
parsing, transaction grouping, parameter typing, client loading and
execution semantics of query test scenarios.
"""
