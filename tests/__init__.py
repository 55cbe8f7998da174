"""Test suite for metaprog.

Test Structure:
- unit/: Unit tests per package (io, caching, loading, generation, building, config, cli)
- integration/: End-to-end builds against the real filesystem
- conftest.py: Shared fixtures (in-memory cache, scripted generator, sample sources)
"""
