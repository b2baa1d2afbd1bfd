"""Syntactic validation of user-typed package names."""

from __future__ import annotations

from pytikz._constants import ALLOWED_INPUT_RE, PACKAGE_NAME_RE
from pytikz.exceptions import InvalidCharactersError


def parse_package_names(raw: str) -> list[str]:
    """Split *raw* on whitespace into package names.

    Raises :class:`InvalidCharactersError` if anything other than lowercase
    letters, digits and whitespace is present.  Empty tokens are dropped;
    duplicates are kept.
    """
    leftover = ALLOWED_INPUT_RE.sub("", raw)
    if leftover:
        raise InvalidCharactersError("".join(dict.fromkeys(leftover)))
    return raw.split()


def validate_package_name(name: str) -> str:
    """Check a single token; whitespace is not allowed here."""
    if not name:
        raise InvalidCharactersError("", "Package name must be non-empty")
    if not PACKAGE_NAME_RE.fullmatch(name):
        raise InvalidCharactersError(ALLOWED_INPUT_RE.sub("", name) or name)
    return name
