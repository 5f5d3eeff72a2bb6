"""
pytest configuration and shared fixtures for jamforge tests.

This module provides fixtures and configuration used across all test modules.
Fixtures defined here are automatically available to all tests.

Fixtures
--------
make_template : Callable[[dict[str, str | bytes]], Path]
    Builds a template tree on disk from a mapping of relative path to content.

basic_manifest_toml : str
    A small but complete ``jamforge.toml``.

make_manifest : Callable[..., TemplateManifest]
    Builds a manifest model directly, without touching the disk.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from jamforge.models import MANIFEST_FILENAME, TemplateManifest


BASIC_MANIFEST_TOML = '''
[template]
name = "test-template"
description = "Template used by the test suite"
ignore = ["target", "*.secret"]

[placeholders.greeting]
type = "string"
prompt = "Greeting?"
default = "hi"

[placeholders.license]
type = "string"
prompt = "License?"
choices = ["MIT", "Apache-2.0"]
default = "MIT"

[placeholders.with_tests]
type = "bool"
prompt = "Include tests?"
default = true
'''


@pytest.fixture
def basic_manifest_toml() -> str:
    """
    Provide sample manifest content for testing.

    Returns
    -------
    str
        A valid ``jamforge.toml`` with one placeholder of each kind.
    """
    return BASIC_MANIFEST_TOML


@pytest.fixture
def make_template(tmp_path: Path) -> Callable[[dict[str, str | bytes]], Path]:
    """
    Factory that writes a template tree under ``tmp_path/template``.

    Keys are ``/``-separated paths relative to the template root. Text values
    are written as UTF-8, bytes values unchanged. A manifest is added from
    :data:`BASIC_MANIFEST_TOML` unless the mapping provides its own.
    """

    def _make(files: dict[str, str | bytes]) -> Path:
        root = tmp_path / "template"
        root.mkdir(exist_ok=True)

        files = {MANIFEST_FILENAME: BASIC_MANIFEST_TOML, **files}
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def make_manifest() -> Callable[..., TemplateManifest]:
    """
    Factory for in-memory manifests.

    Keyword arguments go into the ``[template]`` table; ``placeholders`` is
    passed through as the placeholder mapping.
    """

    def _make(placeholders: dict | None = None, **template: object) -> TemplateManifest:
        return TemplateManifest.model_validate({
            "template": {"name": "test-template", **template},
            "placeholders": placeholders or {},
        })

    return _make


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """
    Configure pytest with custom markers.

    This function is called by pytest during startup to register
    custom markers used in our test suite.
    """
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests requiring external resources"
    )
