"""
jamforge.patterns - Glob Matching for Template Paths
====================================================

Decides which template paths are ignored and which are rendered, using the
``include`` and ``ignore`` lists of the manifest.

Pattern Syntax
--------------
- ``src/lib.rs``: a literal path. Matches the path itself and, when it names
  a directory, everything below it (``target`` matches ``target/debug/x``).
- ``*``: any run of characters except ``/``.
- ``**``: any run of characters including ``/``.

Wildcard patterns are translated to a regular expression and must match the
whole path. Characters other than ``*`` are handed to the regex engine as they
are, so ``.`` matches any character. A pattern the regex engine rejects never
matches anything instead of failing the generation.

Paths are always relative to the template root and ``/``-separated.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

from jamforge.models import MANIFEST_FILENAME


if TYPE_CHECKING:
    from jamforge.models import TemplateManifest


WILDCARD = "*"


@lru_cache(maxsize=256)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """
    Translate a wildcard pattern into a compiled regex.

    Returns
    -------
    re.Pattern[str] | None
        The compiled expression, or None if the pattern is malformed.
    """
    # Split on ** first so the single-star translation does not touch it
    parts = [part.replace("*", "[^/]*") for part in pattern.split("**")]
    try:
        return re.compile(".*".join(parts))
    except re.error:
        return None


def matches(pattern: str, relative_path: str) -> bool:
    """
    Check whether ``relative_path`` is selected by ``pattern``.

    Parameters
    ----------
    pattern : str
        Glob pattern from a manifest.

    relative_path : str
        ``/``-separated path relative to the template root.

    Returns
    -------
    bool
        True if the pattern selects the path.

    Examples
    --------
    >>> matches("*.secret", "config.secret")
    True
    >>> matches("*.secret", "nested/config.secret")
    False
    >>> matches("**/*.secret", "nested/config.secret")
    True
    >>> matches("target", "target/debug/app")
    True
    """
    if WILDCARD in pattern:
        regex = compile_pattern(pattern)
        if regex is None:
            return False
        return regex.fullmatch(relative_path) is not None

    return relative_path == pattern or relative_path.startswith(f"{pattern}/")


def should_ignore(manifest: TemplateManifest, relative_path: str) -> bool:
    """
    True if the path must not appear in the generated project.

    The manifest file itself is always ignored, whatever the ignore list says.
    """
    if relative_path == MANIFEST_FILENAME:
        return True
    return any(matches(pattern, relative_path) for pattern in manifest.template.ignore)


def should_render(manifest: TemplateManifest, relative_path: str) -> bool:
    """
    True if the file's content goes through the template engine.

    With ``include`` patterns, only matching files are rendered. Without
    them, every file that is not ignored is rendered.
    """
    include = manifest.template.include
    if include:
        return any(matches(pattern, relative_path) for pattern in include)
    return not should_ignore(manifest, relative_path)
