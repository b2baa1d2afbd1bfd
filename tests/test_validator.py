from __future__ import annotations

import pytest

from pytikz.exceptions import InvalidCharactersError
from pytikz.reconcile.validator import parse_package_names, validate_package_name


def test_splits_on_whitespace_and_drops_empty_tokens() -> None:
    assert parse_package_names("  pgfplots   amsmath\tfontspec\n") == ["pgfplots", "amsmath", "fontspec"]


def test_keeps_duplicates_and_order() -> None:
    assert parse_package_names("tikz3d amsmath tikz3d") == ["tikz3d", "amsmath", "tikz3d"]


def test_empty_input_yields_no_names() -> None:
    assert parse_package_names("") == []
    assert parse_package_names("   ") == []


@pytest.mark.parametrize(
    "raw",
    ["amsmath; rm -rf", "AmsMath", "pgf-plots", "tikz.lib", "ämsmath", "a,b"],
)
def test_rejects_input_with_characters_outside_alphabet(raw: str) -> None:
    with pytest.raises(InvalidCharactersError):
        parse_package_names(raw)


def test_error_reports_offending_characters_once() -> None:
    with pytest.raises(InvalidCharactersError) as exc_info:
        parse_package_names("amsmath; rm -rf; x")

    assert exc_info.value.characters == ";-"


def test_validate_single_name() -> None:
    assert validate_package_name("pgfplots") == "pgfplots"
    with pytest.raises(InvalidCharactersError):
        validate_package_name("../etc")
    with pytest.raises(InvalidCharactersError):
        validate_package_name("two words")


def test_validate_empty_name_has_its_own_message() -> None:
    with pytest.raises(InvalidCharactersError, match="must be non-empty") as exc_info:
        validate_package_name("")

    assert exc_info.value.characters == ""
