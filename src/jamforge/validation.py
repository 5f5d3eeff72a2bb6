"""
jamforge.validation - Project Name Validation
=============================================

The project name becomes the Cargo package name of the generated service,
and its underscore form becomes the crate (module) name. Both have to be
accepted by cargo, so names are checked before any template is fetched.

Rules
-----
- Not empty
- Starts with a lowercase letter
- Contains only lowercase letters, digits, ``_`` and ``-``
- Not a reserved Rust identifier
- At most 64 characters

Example
-------
>>> validate_project_name("my-service")
'my-service'
>>> to_crate_name("my-service")
'my_service'
"""

from __future__ import annotations

import re

from jamforge.errors import ValidationError


PROJECT_NAME_PATTERN = r"^[a-z][a-z0-9_-]*$"

MAX_PROJECT_NAME_LENGTH = 64

RESERVED_NAMES = frozenset({
    "self", "super", "crate", "Self", "test", "std", "core", "alloc",
})


def validate_project_name(name: str) -> str:
    """
    Check that ``name`` can be used as a JAM service project name.

    Parameters
    ----------
    name : str
        Candidate project name, exactly as the user typed it.

    Returns
    -------
    str
        The same name, unchanged.

    Raises
    ------
    ValidationError
        If the name is empty, malformed, reserved, or too long.
    """
    if not name:
        raise ValidationError("Project name cannot be empty", name=name)

    if not re.fullmatch(PROJECT_NAME_PATTERN, name):
        msg = (
            f"Invalid project name '{name}': must start with a lowercase letter "
            "and contain only lowercase letters, numbers, underscores, and hyphens"
        )
        raise ValidationError(msg, name=name)

    if name in RESERVED_NAMES:
        msg = f"Invalid project name '{name}': '{name}' is a reserved Rust keyword"
        raise ValidationError(msg, name=name)

    if len(name) > MAX_PROJECT_NAME_LENGTH:
        msg = (
            f"Invalid project name '{name}': must be "
            f"{MAX_PROJECT_NAME_LENGTH} characters or less"
        )
        raise ValidationError(msg, name=name)

    return name


def to_crate_name(name: str) -> str:
    """Hyphens are not allowed in Rust crate identifiers."""
    return name.replace("-", "_")
