"""Test suite for AssetForge.

Test Structure:
- unit/: Unit tests for individual components
  - agents/: Resolver, texture, geometry, entitlement, providers, state machine
  - config/: Config models and loader
  - utils/: Logging utilities
  - cli/: CLI helpers
- integration/: End-to-end generation scenarios through AssetSession
- conftest.py: Shared fixtures and fakes
"""
