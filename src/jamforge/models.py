"""
jamforge.models - Pydantic Models for Templates and Requests
============================================================

This module defines the data models used throughout jamforge. We use Pydantic
for the same reasons as for any user-supplied configuration:

1. **Validation**: A malformed manifest is rejected with a message that names
   the offending field
2. **Tagged unions**: Placeholder kinds are a discriminated union on ``type``
3. **Type Safety**: Full type hints that work with basedpyright/pyright

Architecture Notes
------------------
The manifest models mirror the ``jamforge.toml`` file found at the root of
every template:

    TemplateManifest
    ├── template: TemplateMetadata
    │   ├── name, description, version
    │   └── include / exclude / ignore: list[str]
    ├── placeholders: dict[str, Placeholder]
    │   ├── StringPlaceholder (type = "string")
    │   └── BoolPlaceholder   (type = "bool")
    └── conditional: dict[str, ConditionalRules]

A manifest looks like this::

    [template]
    name = "basic-service"
    ignore = ["target", "*.secret"]

    [placeholders.license]
    type = "string"
    prompt = "License?"
    choices = ["MIT", "Apache-2.0"]
    default = "MIT"

    [placeholders.with_tests]
    type = "bool"
    prompt = "Include tests?"
    default = true

``NewProjectRequest`` holds the settings of a single ``jamforge new`` run.

Usage Example
-------------
>>> from pathlib import Path
>>> from jamforge.models import TemplateManifest
>>> manifest = TemplateManifest.load(Path("templates/basic-service"))
>>> manifest.template.name
'basic-service'
"""

from __future__ import annotations

import re
import tomllib
from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from jamforge.errors import ManifestInvalidError, ManifestMissingError
from jamforge.validation import to_crate_name, validate_project_name


# Name of the manifest file expected at the root of every template
MANIFEST_FILENAME = "jamforge.toml"

DEFAULT_TEMPLATE = "basic-service"


# =============================================================================
# Template Metadata
# =============================================================================

class TemplateMetadata(BaseModel):
    """
    The ``[template]`` table of a manifest.

    Attributes
    ----------
    name : str
        Template name. Required.

    description : str | None
        One-line description shown by ``jamforge templates``.

    version : str | None
        Template version, informational only.

    include : list[str]
        Glob patterns of files whose *content* is rendered. When empty,
        every file that is not ignored is rendered.

    exclude : list[str]
        Reserved. Parsed and kept, but the generator does not consult it.

    ignore : list[str]
        Glob patterns of paths that are never copied to the output.
    """

    name: str = Field(min_length=1, description="Template name")
    description: str | None = Field(default=None, description="Template description")
    version: str | None = Field(default=None, description="Template version")
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    ignore: list[str] = Field(default_factory=list)


# =============================================================================
# Placeholders
# =============================================================================

class StringPlaceholder(BaseModel):
    """
    A free-text or multiple-choice variable.

    If ``choices`` is given the user picks one of them; otherwise the user
    types a value, which must match ``regex`` when one is declared.

    Note
    ----
    ``default`` is *not* required to be one of ``choices``. A default that is
    not a choice simply leaves the first choice pre-selected.
    """

    type: Literal["string"]
    prompt: str
    default: str | None = None
    regex: str | None = None
    choices: list[str] | None = None

    @field_validator("choices")
    @classmethod
    def validate_choices(cls, v: list[str] | None) -> list[str] | None:
        """An empty choice list would leave nothing to select."""
        if v is not None and not v:
            msg = "choices must not be empty"
            raise ValueError(msg)
        return v

    @field_validator("regex")
    @classmethod
    def validate_regex(cls, v: str | None) -> str | None:
        """Reject patterns Python's ``re`` cannot compile."""
        if v is None:
            return None
        try:
            re.compile(v)
        except re.error as e:
            msg = f"Invalid regex '{v}': {e}"
            raise ValueError(msg) from e
        return v

    def default_value(self) -> str | None:
        return self.default


class BoolPlaceholder(BaseModel):
    """
    A yes/no variable. Bound as the text ``"true"`` or ``"false"``.
    """

    type: Literal["bool"]
    prompt: str
    default: bool | None = None

    @property
    def choices(self) -> None:
        return None

    @property
    def regex(self) -> None:
        return None

    def default_value(self) -> str | None:
        if self.default is None:
            return None
        return bool_to_str(self.default)


Placeholder = Annotated[StringPlaceholder | BoolPlaceholder, Field(discriminator="type")]


def bool_to_str(value: bool) -> str:
    """Canonical text form used for booleans in variable bindings."""
    return "true" if value else "false"


# =============================================================================
# Conditional Rules
# =============================================================================

class ConditionalRules(BaseModel):
    """
    Pattern lists of a ``[conditional.<name>]`` table.

    These are parsed so that manifests using them load, but generation does
    not act on them.
    """

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    ignore: list[str] = Field(default_factory=list)


# =============================================================================
# Manifest
# =============================================================================

class TemplateManifest(BaseModel):
    """
    Complete description of one template.

    Attributes
    ----------
    template : TemplateMetadata
        Name and file-selection patterns.

    placeholders : dict[str, Placeholder]
        Variables the template expects, keyed by variable name.

    conditional : dict[str, ConditionalRules]
        Per-feature pattern lists (inert).
    """

    template: TemplateMetadata
    placeholders: dict[str, Placeholder] = Field(default_factory=dict)
    conditional: dict[str, ConditionalRules] = Field(default_factory=dict)

    @classmethod
    def load(cls, template_root: Path) -> TemplateManifest:
        """
        Load the manifest from a template directory.

        Parameters
        ----------
        template_root : Path
            Root of a template tree, as returned by a template source.

        Returns
        -------
        TemplateManifest
            The validated manifest.

        Raises
        ------
        ManifestMissingError
            If ``jamforge.toml`` does not exist at ``template_root``.
        ManifestInvalidError
            If the file is not valid TOML or does not match the schema.
        """
        manifest_path = template_root / MANIFEST_FILENAME
        if not manifest_path.is_file():
            raise ManifestMissingError(template_root, MANIFEST_FILENAME)

        with manifest_path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                msg = f"Failed to parse {MANIFEST_FILENAME}: {e}"
                raise ManifestInvalidError(msg) from e

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid {MANIFEST_FILENAME}: {e}"
            raise ManifestInvalidError(msg) from e


# =============================================================================
# New Project Request
# =============================================================================

class NewProjectRequest(BaseModel):
    """
    Settings for one ``jamforge new`` invocation.

    The request only describes *where* the template comes from and which
    values are preset; the actual variable values are resolved later by the
    collector, after the manifest is known.

    Attributes
    ----------
    name : str
        Project name, validated with :func:`validate_project_name`.

    template : str
        Name of a bundled template. Ignored when ``git`` is set.

    git : str | None
        Repository URL or shorthand (``gh:owner/repo``) to clone instead.

    branch : str | None
        Branch to clone. Requires ``git``.

    path : Path | None
        Subdirectory of the repository holding the template. Requires ``git``.

    output : Path | None
        Where to create the project. Defaults to ``./<name>``.

    defaults : bool
        Skip prompts and use manifest defaults.

    defines : list[str]
        ``KEY=VALUE`` presets.

    values_file : Path | None
        TOML file with more presets. Wins over ``defines`` on collisions.

    init_git : bool
        Initialize a git repository in the generated project.

    Examples
    --------
    >>> request = NewProjectRequest(name="my-service")
    >>> request.crate_name
    'my_service'
    >>> request.project_dir
    PosixPath('my-service')
    """

    name: str
    template: str = Field(default=DEFAULT_TEMPLATE, min_length=1)
    git: str | None = None
    branch: str | None = None
    path: Path | None = None
    output: Path | None = None
    defaults: bool = False
    defines: list[str] = Field(default_factory=list)
    values_file: Path | None = None
    init_git: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Delegate to the shared project-name rules."""
        return validate_project_name(v)

    @model_validator(mode="after")
    def validate_git_options(self) -> NewProjectRequest:
        """``--branch`` and ``--path`` only make sense with ``--git``."""
        if self.git is None:
            if self.branch is not None:
                msg = "--branch requires --git"
                raise ValueError(msg)
            if self.path is not None:
                msg = "--path requires --git"
                raise ValueError(msg)
        return self

    @property
    def crate_name(self) -> str:
        return to_crate_name(self.name)

    @property
    def project_dir(self) -> Path:
        """
        Directory the project is generated into.

        Returns
        -------
        Path
            ``output`` if given, otherwise ``./<name>``.
        """
        if self.output is not None:
            return self.output
        return Path(self.name)
