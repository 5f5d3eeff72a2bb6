"""
jamforge.prompts - Interactive Prompts
======================================

Thin wrappers around questionary used by the variable collector and the
``new`` command. Each wrapper returns the answer, or raises ``typer.Abort``
when the user cancels with Ctrl-C.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import questionary
import typer


if TYPE_CHECKING:
    from collections.abc import Callable


def regex_validator(regex: str) -> Callable[[str], bool | str]:
    """
    Build a questionary validator for ``regex``.

    The answer is accepted if the pattern matches anywhere in it; anchor the
    pattern with ``^...$`` to require a full match.
    """
    pattern = re.compile(regex)

    def validate(value: str) -> bool | str:
        if pattern.search(value):
            return True
        return f"Input must match pattern: {regex}"

    return validate


def prompt_text(prompt: str, default: str | None = None, regex: str | None = None) -> str:
    """
    Ask for free text.

    Parameters
    ----------
    prompt : str
        Question shown to the user.

    default : str | None
        Pre-filled answer.

    regex : str | None
        If given, the answer must contain a match for this pattern. The user
        is asked again until it does.

    Returns
    -------
    str
        The accepted answer.
    """
    result = questionary.text(
        prompt,
        default=default or "",
        validate=regex_validator(regex) if regex is not None else None,
    ).ask()

    if result is None:
        raise typer.Abort()

    return result


def prompt_select(prompt: str, choices: list[str], default: str | None = None) -> str:
    """
    Ask the user to pick one of ``choices``.

    The declared default is pre-selected when it is one of the choices;
    otherwise the first choice is.
    """
    selected = default if default in choices else choices[0]

    result = questionary.select(
        prompt,
        choices=choices,
        default=selected,
    ).ask()

    if result is None:
        raise typer.Abort()

    return result


def prompt_confirm(prompt: str, default: bool = False) -> bool:
    """Ask a yes/no question."""
    result = questionary.confirm(prompt, default=default).ask()

    if result is None:
        raise typer.Abort()

    return result
