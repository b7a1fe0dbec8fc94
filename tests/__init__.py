"""
Test suite for yomiage

Contains:
- tests/unit/          : Unit tests for the core services, clients and routes
"""
