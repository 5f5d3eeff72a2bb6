"""
jamforge.casing - Case Conversion Transforms
============================================

Stateless text functions exposed to templates as filters::

    {{ project_name | pascal_case }}       my-service -> MyService
    {{ project_name | snake_case }}        my-service -> my_service
    {{ project_name | kebab_case }}        MyService  -> my-service
    {{ project_name | camel_case }}        my-service -> myService
    {{ project_name | upper_camel_case }}  my-service -> MyService

Word Splitting
--------------
Input is split into words at every run of non-alphanumeric characters, at a
lowercase-to-uppercase change (``myService``) and at the end of an acronym
(``HTTPServer`` -> ``HTTP`` ``Server``). Digits stay in the word they follow.

Every transform is idempotent: feeding it its own output returns the same
string.
"""

from __future__ import annotations

import re


# Separator runs: anything that is not a letter or digit, underscore included
_SEPARATOR_RE = re.compile(r"[\W_]+")


def split_words(value: str) -> list[str]:
    """
    Break ``value`` into its words.

    Examples
    --------
    >>> split_words("my-service_v2")
    ['my', 'service', 'v2']
    >>> split_words("HTTPServerError")
    ['HTTP', 'Server', 'Error']
    """
    words = []
    for chunk in _SEPARATOR_RE.split(value):
        if chunk:
            words.extend(_split_chunk(chunk))
    return words


def _split_chunk(chunk: str) -> list[str]:
    start = 0
    words = []
    for i in range(1, len(chunk)):
        ch, prev = chunk[i], chunk[i - 1]
        if not ch.isupper():
            continue
        # myService, v2Beta
        lower_to_upper = prev.islower() or prev.isdigit()
        # HTTPServer: the last capital starts the next word
        acronym_end = prev.isupper() and i + 1 < len(chunk) and chunk[i + 1].islower()
        if lower_to_upper or acronym_end:
            words.append(chunk[start:i])
            start = i
    words.append(chunk[start:])
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def pascal_case(value: str) -> str:
    return "".join(_capitalize(word) for word in split_words(value))


def upper_camel_case(value: str) -> str:
    # Same convention as PascalCase, kept as its own filter name
    return pascal_case(value)


def camel_case(value: str) -> str:
    words = split_words(value)
    if not words:
        return ""
    return words[0].lower() + "".join(_capitalize(word) for word in words[1:])


def snake_case(value: str) -> str:
    return "_".join(word.lower() for word in split_words(value))


def kebab_case(value: str) -> str:
    return "-".join(word.lower() for word in split_words(value))


# Filter name -> transform, registered on the Jinja2 environment
CASE_FILTERS = {
    "pascal_case": pascal_case,
    "snake_case": snake_case,
    "kebab_case": kebab_case,
    "camel_case": camel_case,
    "upper_camel_case": upper_camel_case,
}
