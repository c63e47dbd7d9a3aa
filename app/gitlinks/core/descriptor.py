"""Git dependency extraction from package descriptors.

A package may declare additional git references that must be installed
alongside it under a non-standard descriptor key::

    "gitdependencies": ["git@host:org/a.git", "git@host:org/b.git#v1"]

or as a single comma-separated string::

    "gitdependencies": "git@host:org/a.git, git@host:org/b.git#v1"

This is a narrow text scan, not a JSON parser. It tolerates malformed or
partial documents and never raises.
"""

import logging
import re
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTOR_NAME = "package.json"
DEFAULT_DEPENDENCY_KEY = "gitdependencies"

# A double-quoted string body with backslash escapes
_QUOTED_BODY = r'(?:[^"\\]|\\.)*'


def _array_pattern(key: str) -> re.Pattern[str]:
    # Brackets inside quoted entries do not close the array
    return re.compile(
        rf'"{re.escape(key)}"\s*:\s*\[((?:[^\]"]|"{_QUOTED_BODY}")*)\]',
        re.DOTALL,
    )


def _string_pattern(key: str) -> re.Pattern[str]:
    return re.compile(rf'"{re.escape(key)}"\s*:\s*"({_QUOTED_BODY})"', re.DOTALL)


def split_respecting_quotes(text: str) -> Iterator[str]:
    """Split text on commas that are not inside double quotes.

    Args:
        text: Comma-separated entries, optionally quoted.

    Yields:
        Raw (untrimmed) entries, including empty ones.
    """
    if not text:
        return

    in_quotes = False
    start = 0
    for i, char in enumerate(text):
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            yield text[start:i]
            start = i + 1

    yield text[start:]


def unquote_token(token: str) -> str:
    """Trim a token and remove one pair of wrapping double quotes."""
    stripped = token.strip()
    if len(stripped) >= 2 and stripped[0] == '"' and stripped[-1] == '"':
        stripped = stripped[1:-1]
    return stripped.strip()


def _clean(tokens: Iterator[str]) -> list[str]:
    return [t for t in (unquote_token(token) for token in tokens) if t]


def extract_git_dependencies(
    text: str | None,
    key: str = DEFAULT_DEPENDENCY_KEY,
) -> list[str] | None:
    """Extract git dependency references declared in descriptor text.

    The array form is tried first, then the single-string form. Inside the
    string form, escaped quotes (``\\"``) are honoured so that a quoted
    entry may contain commas.

    Args:
        text: Raw descriptor text.
        key: Descriptor key holding the declaration.

    Returns:
        List of trimmed, unquoted, non-empty references, or None when the
        key is missing or declares nothing.
    """
    if not text:
        return None

    array_match = _array_pattern(key).search(text)
    if array_match is not None:
        return _clean(split_respecting_quotes(array_match.group(1))) or None

    string_match = _string_pattern(key).search(text)
    if string_match is not None:
        inside = string_match.group(1).replace('\\"', '"')
        return _clean(split_respecting_quotes(inside)) or None

    return None


def read_git_dependencies(
    package_dir: str | Path | None,
    descriptor_name: str = DEFAULT_DESCRIPTOR_NAME,
    key: str = DEFAULT_DEPENDENCY_KEY,
) -> list[str] | None:
    """Read a package descriptor and extract its git dependencies.

    Missing directories, missing files and read errors are all treated as
    "no dependencies".

    Args:
        package_dir: Resolved package directory.
        descriptor_name: Descriptor file name inside the directory.
        key: Descriptor key holding the declaration.

    Returns:
        List of dependency references, or None if none could be found.
    """
    if not package_dir:
        return None

    descriptor = Path(package_dir) / descriptor_name
    try:
        text = descriptor.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read descriptor %s: %s", descriptor, e)
        return None

    return extract_git_dependencies(text, key)
