"""Story id and display-name derivation.

A story id is ``{sanitized component title}--{sanitized story name}``,
e.g. ``Components/Button`` + ``Primary`` → ``components-button--primary``.

INVARIANT: The same (title, name) pair always yields the same id.
"""

from __future__ import annotations

import re

STORY_ID_PATTERN: re.Pattern[str] = re.compile(
    r"^[a-z0-9]+(?:-[a-z0-9]+)*--[a-z0-9]+(?:-[a-z0-9]+)*$"
)

_SEPARATORS = re.compile(r"""[\s’–—―′¿'`~!@#$%^&*()_|+\-=?;:",.<>{}\[\]\\/]""")
_DASH_RUNS = re.compile(r"-+")
_EXPORT_WORDS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def sanitize(text: str) -> str:
    """Lowercase *text*, turn separators into dashes, collapse and trim dashes."""
    text = _SEPARATORS.sub("-", text.lower())
    text = _DASH_RUNS.sub("-", text)
    return text.strip("-")


def _sanitize_part(text: str, part: str) -> str:
    sanitized = sanitize(text)
    if not sanitized:
        msg = f"Invalid {part} {text!r}, must include alphanumeric characters"
        raise ValueError(msg)
    return sanitized


def to_id(kind: str, name: str) -> str:
    """Build a story id from a component title (*kind*) and a story name.

    Raises:
        ValueError: If either part sanitizes to the empty string.
    """
    return f"{_sanitize_part(kind, 'kind')}--{_sanitize_part(name, 'name')}"


def story_name_from_export(export_name: str) -> str:
    """Start-case an export name: ``primaryButton`` → ``Primary Button``.

    Examples:
        >>> story_name_from_export("primaryButton")
        'Primary Button'
        >>> story_name_from_export("with_icon_2")
        'With Icon 2'
    """
    words = _EXPORT_WORDS.findall(export_name)
    return " ".join(word[0].upper() + word[1:] for word in words)


def validate_id(story_id: str) -> bool:
    """Check whether *story_id* has the ``kind--name`` shape."""
    return STORY_ID_PATTERN.match(story_id) is not None
