"""
jamforge - JAM Service Project Generator
========================================

A CLI tool and library that creates new JAM service projects from
parameterized templates.

Features
--------
- **Bundled Templates**: A ready-to-build ``basic-service`` skeleton
- **Git Templates**: Any repository (``gh:owner/repo`` shorthands included)
- **Manifests**: ``jamforge.toml`` declares variables, prompts and defaults
- **Case Filters**: ``{{ project_name | pascal_case }}`` and friends
- **Scriptable**: ``--defaults``, ``--define`` and ``--values-file`` for CI

Quick Start
-----------
```bash
# Install jamforge
pip install jamforge

# Create a new service interactively
jamforge new my-service

# Or without prompts
jamforge new my-service --defaults -d author="Jane Doe"
```

Example
-------
>>> from jamforge import NewProjectRequest, create_project
>>> request = NewProjectRequest(name="my-service", defaults=True)
>>> result = create_project(request, verbose=False)

Architecture
------------
The package is organized into these main modules:

- ``cli``: Typer-based command line interface
- ``generator``: Tree walking and the end-to-end pipeline
- ``sources``: Bundled and git template sources
- ``models``: Pydantic models for manifests and requests
- ``collector``: Variable presets, prompts and defaults
- ``engine``: Jinja2 rendering of file contents and names
- ``patterns``: Glob matching for include and ignore lists
- ``casing``: Case-conversion filters
- ``validation``: Project name rules
- ``errors``: Exception hierarchy
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"

# =============================================================================
# Public API Exports
# =============================================================================
# These are the main functions/classes users should interact with when using
# jamforge as a library (as opposed to the CLI)

from jamforge.errors import JamforgeError
from jamforge.generator import GenerationResult, create_project, generate_project
from jamforge.models import NewProjectRequest, TemplateManifest


__all__ = [
    "GenerationResult",
    "JamforgeError",
    "NewProjectRequest",
    "TemplateManifest",
    # Version info
    "__version__",
    # Core functions
    "create_project",
    "generate_project",
]
