"""
jamforge test suite
===================

Test Modules
------------
- test_models.py: Manifest and request models
- test_validation.py: Project name rules
- test_patterns.py: Include/ignore glob matching
- test_casing.py: Case-conversion filters
- test_engine.py: Template rendering
- test_collector.py: Presets, prompts and defaults
- test_prompts.py: questionary wrappers
- test_sources.py: Bundled and git template sources
- test_generator.py: Tree generation and the end-to-end pipeline
- test_cli.py: Command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Skip tests that need git
    pytest -m "not integration"

    # Run specific module
    pytest tests/test_patterns.py
"""
