"""
jamforge.errors - Exception Hierarchy
=====================================

Every failure the generation engine can report has its own exception class.
All of them derive from :class:`JamforgeError`, so callers that only care
about "generation failed" can catch one type, while the CLI and tests can
tell the kinds apart.

Several classes also derive from the closest builtin exception, so
``except FileExistsError`` also catches :class:`OutputExistsError`.

Hierarchy
---------
::

    JamforgeError
    ├── ManifestMissingError   (FileNotFoundError)
    ├── ManifestInvalidError   (ValueError)
    ├── TemplateNotFoundError  (LookupError)
    ├── SourceFetchError
    ├── ValidationError        (ValueError)
    ├── RenderError
    │   ├── RenderParseError
    │   ├── RenderEvalError
    │   ├── RenderDecodeError
    │   └── UnsafePathError
    └── OutputExistsError      (FileExistsError)

Plain I/O failures are not wrapped; they propagate as ``OSError``.
"""

from __future__ import annotations

from pathlib import Path


class JamforgeError(Exception):
    """Base class for all errors raised by jamforge."""


# =============================================================================
# Manifest Errors
# =============================================================================

class ManifestMissingError(JamforgeError, FileNotFoundError):
    """The template root has no manifest file."""

    def __init__(self, template_root: Path, filename: str) -> None:
        super().__init__(f"{filename} not found in template directory {template_root}")
        self.template_root = template_root
        self.manifest_filename = filename

    def __str__(self) -> str:
        return self.args[0]


class ManifestInvalidError(JamforgeError, ValueError):
    """The manifest exists but does not have the expected shape."""


# =============================================================================
# Template Source Errors
# =============================================================================

class TemplateNotFoundError(JamforgeError, LookupError):
    """
    A named template, or a subdirectory inside a fetched repository,
    does not exist.
    """

    def __init__(self, name: str, detail: str | None = None) -> None:
        self.name = name
        message = f"Template not found: {name}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)

    def __str__(self) -> str:
        return self.args[0]


class SourceFetchError(JamforgeError):
    """Cloning a remote template repository failed."""


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(JamforgeError, ValueError):
    """
    A value was rejected: an invalid project name, a placeholder value that
    does not match its regex, or a malformed preset.

    Attributes
    ----------
    name : str | None
        The project name or variable name the failure refers to.
    """

    def __init__(self, message: str, *, name: str | None = None) -> None:
        self.name = name
        super().__init__(message)


# =============================================================================
# Rendering Errors
# =============================================================================

class RenderError(JamforgeError):
    """
    Base class for template rendering failures.

    Attributes
    ----------
    source : str | None
        Relative path (or filename) of the template being rendered, when
        known. The generator fills this in before re-raising.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.message = message
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.source:
            return f"{self.source}: {self.message}"
        return self.message


class RenderParseError(RenderError):
    """The template text is not valid template syntax."""


class RenderEvalError(RenderError):
    """The template parsed but referenced something undefined while rendering."""


class RenderDecodeError(RenderError):
    """A file selected for rendering is not UTF-8 text."""


class UnsafePathError(RenderError):
    """A rendered path component would place output outside the project."""


# =============================================================================
# Output Errors
# =============================================================================

class OutputExistsError(JamforgeError, FileExistsError):
    """The output directory already exists; only fresh generation is supported."""

    def __init__(self, path: Path) -> None:
        super().__init__(
            f"Project already exists at: {path}. "
            "Use a different name or remove the existing directory."
        )
        self.path = path

    def __str__(self) -> str:
        return self.args[0]
