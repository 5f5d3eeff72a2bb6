"""
jamforge.engine - Template Rendering
====================================

Renders file contents and file names against the collected variables.

Template Syntax
---------------
Templates use Jinja2 syntax::

    [package]
    name = "{{ project_name }}"

    pub struct {{ project_name | pascal_case }}Service;

    {% if with_tests == "true" %}
    mod tests;
    {% endif %}

All variables are strings. Booleans are bound as ``"true"``/``"false"``, so
conditionals compare against the string rather than relying on truthiness.

Referencing a variable that is not bound is an error, never an empty string.

Template Files
--------------
A file whose name ends in ``.j2`` is always rendered and written without the
suffix, whatever the manifest's ``include`` list says.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jinja2 import (
    Environment,
    StrictUndefined,
    TemplateError,
    TemplateSyntaxError,
    select_autoescape,
)

from jamforge.casing import CASE_FILTERS
from jamforge.errors import RenderEvalError, RenderParseError


if TYPE_CHECKING:
    from collections.abc import Mapping


# Suffix marking a file as a template regardless of include patterns
TEMPLATE_SUFFIX = ".j2"

# Opening marker of an interpolation; file names without it are left alone
INTERPOLATION_MARKER = "{{"


def create_jinja_env() -> Environment:
    """
    Create and configure the Jinja2 environment.

    The environment is configured with:
    - Autoescaping disabled (we're generating code, not HTML)
    - StrictUndefined so unbound variables fail loudly
    - Trim blocks and lstrip_blocks for cleaner output around block tags
    - Trailing newlines preserved so rendered files keep their last line break
    - The case-conversion filters from :mod:`jamforge.casing`

    Returns
    -------
    Environment
        Configured Jinja2 environment.
    """
    env = Environment(
        autoescape=select_autoescape([]),  # Disable for code generation
        undefined=StrictUndefined,
        trim_blocks=True,  # Remove first newline after block tags
        lstrip_blocks=True,  # Strip leading whitespace before block tags
        keep_trailing_newline=True,  # Preserve trailing newlines in templates
    )
    env.filters.update(CASE_FILTERS)
    return env


class TemplateEngine:
    """
    Renders template text and file names.

    One engine is created per generation run and reused for every file.

    Examples
    --------
    >>> engine = TemplateEngine()
    >>> engine.render("Hello {{ name | pascal_case }}", {"name": "my-service"})
    'Hello MyService'
    >>> engine.render_filename("Cargo.toml", {})
    'Cargo.toml'
    """

    def __init__(self) -> None:
        self.env = create_jinja_env()

    def render(self, template: str, variables: Mapping[str, str]) -> str:
        """
        Render ``template`` with ``variables``.

        Parameters
        ----------
        template : str
            Template source text.

        variables : Mapping[str, str]
            Variable bindings.

        Returns
        -------
        str
            Rendered text.

        Raises
        ------
        RenderParseError
            If the text is not valid template syntax, or uses an unknown filter.
        RenderEvalError
            If rendering references an unbound variable or otherwise fails.
        """
        try:
            compiled = self.env.from_string(template)
        except TemplateSyntaxError as e:
            msg = f"Failed to parse template (line {e.lineno}): {e.message}"
            raise RenderParseError(msg) from e

        try:
            return compiled.render(dict(variables))
        except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
            msg = f"Failed to render template: {e}"
            raise RenderEvalError(msg) from e

    def render_filename(self, filename: str, variables: Mapping[str, str]) -> str:
        """
        Render a single file or directory name.

        Names without ``{{`` are returned unchanged and never parsed, so an
        odd character in a plain file name cannot cause a parse error.
        """
        if INTERPOLATION_MARKER not in filename:
            return filename
        return self.render(filename, variables)
