"""
jamforge.collector - Variable Collection
========================================

Builds the variable bindings a template is rendered with.

Sources, in the order they are applied (later wins):

    1. ``--define KEY=VALUE`` pairs
    2. The values file (``--values-file``), overriding colliding defines
    3. ``project_name`` and ``crate_name``, always set from the project name
    4. For every placeholder still unbound:
       - interactive: ask the user
       - non-interactive: the manifest default, if there is one

Note that the values file beats ``--define`` on the command line, the
reverse of the usual "flags override files" convention.

A placeholder with neither a preset value nor a default stays unbound in
non-interactive mode. Rendering a template that uses it then fails with
:class:`~jamforge.errors.RenderEvalError`.
"""

from __future__ import annotations

import re
import tomllib
from types import MappingProxyType
from typing import TYPE_CHECKING, assert_never

from jamforge.errors import ValidationError
from jamforge.models import BoolPlaceholder, StringPlaceholder, bool_to_str
from jamforge.prompts import prompt_confirm, prompt_select, prompt_text
from jamforge.validation import to_crate_name


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from jamforge.models import Placeholder, TemplateManifest


# Variables jamforge always binds itself; never prompted for
PROJECT_NAME_VAR = "project_name"
CRATE_NAME_VAR = "crate_name"


# =============================================================================
# Presets
# =============================================================================

def parse_defines(pairs: Iterable[str]) -> dict[str, str]:
    """
    Parse ``KEY=VALUE`` strings.

    The value is everything after the first ``=``, so values may themselves
    contain ``=``. Later pairs override earlier ones.

    Raises
    ------
    ValidationError
        If a pair has no ``=`` or an empty key.

    Examples
    --------
    >>> parse_defines(["author=Jane", "query=a=b"])
    {'author': 'Jane', 'query': 'a=b'}
    """
    variables: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep or not key:
            msg = f"Invalid define '{pair}': expected KEY=VALUE"
            raise ValidationError(msg, name=key or None)
        variables[key] = value
    return variables


def load_values_file(path: Path) -> dict[str, str]:
    """
    Load preset variables from a TOML file.

    Every top-level key becomes a variable. Strings are taken as they are,
    booleans become ``"true"``/``"false"``, and numbers and dates use their
    string form.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValidationError
        If the file is not valid TOML, or a value is a table or array.
    """
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Failed to parse values file {path}: {e}"
            raise ValidationError(msg) from e

    variables: dict[str, str] = {}
    for key, value in data.items():
        if isinstance(value, (dict, list)):
            msg = f"Values file {path}: '{key}' must be a single value, not a table or array"
            raise ValidationError(msg, name=key)
        if isinstance(value, bool):
            variables[key] = bool_to_str(value)
        else:
            variables[key] = str(value)
    return variables


def build_preset(defines: Iterable[str], values_file: Path | None = None) -> dict[str, str]:
    """
    Merge ``--define`` pairs and the values file.

    Values file entries are applied second and override defines with the
    same key.
    """
    preset = parse_defines(defines)
    if values_file is not None:
        preset.update(load_values_file(values_file))
    return preset


# =============================================================================
# Placeholder Resolution
# =============================================================================

def prompt_placeholder(placeholder: Placeholder) -> str:
    """Ask the user for one placeholder's value."""
    match placeholder:
        case StringPlaceholder(choices=choices) if choices:
            return prompt_select(placeholder.prompt, choices, placeholder.default)
        case StringPlaceholder():
            return prompt_text(placeholder.prompt, placeholder.default, placeholder.regex)
        case BoolPlaceholder():
            default = placeholder.default if placeholder.default is not None else False
            return bool_to_str(prompt_confirm(placeholder.prompt, default))
        case _:
            assert_never(placeholder)


def default_for(key: str, placeholder: Placeholder) -> str | None:
    """
    The value a placeholder takes when prompting is skipped.

    Raises
    ------
    ValidationError
        If a string placeholder's default does not match its own regex.
    """
    match placeholder:
        case StringPlaceholder():
            value = placeholder.default
            if value is not None and placeholder.regex and not re.search(placeholder.regex, value):
                msg = (
                    f"Default value '{value}' for '{key}' does not match "
                    f"pattern: {placeholder.regex}"
                )
                raise ValidationError(msg, name=key)
            return value
        case BoolPlaceholder():
            return placeholder.default_value()
        case _:
            assert_never(placeholder)


# =============================================================================
# Collection
# =============================================================================

def collect_variables(
    manifest: TemplateManifest,
    preset: Mapping[str, str],
    project_name: str,
    *,
    interactive: bool,
) -> Mapping[str, str]:
    """
    Resolve the bindings for one generation run.

    Parameters
    ----------
    manifest : TemplateManifest
        Manifest of the template being generated.

    preset : Mapping[str, str]
        Values supplied up front, usually from :func:`build_preset`.

    project_name : str
        Validated project name. Bound as ``project_name``, and as
        ``crate_name`` with hyphens replaced by underscores.

    interactive : bool
        Prompt for unbound placeholders instead of using defaults.

    Returns
    -------
    Mapping[str, str]
        Read-only bindings.

    Notes
    -----
    Placeholders are visited in sorted name order, so prompts always come
    in the same sequence for a given manifest.
    """
    variables = dict(preset)
    variables[PROJECT_NAME_VAR] = project_name
    variables[CRATE_NAME_VAR] = to_crate_name(project_name)

    for key in sorted(manifest.placeholders):
        if key in variables:
            continue

        placeholder = manifest.placeholders[key]
        if interactive:
            variables[key] = prompt_placeholder(placeholder)
        else:
            value = default_for(key, placeholder)
            if value is not None:
                variables[key] = value

    return MappingProxyType(variables)
