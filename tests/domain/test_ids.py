"""Tests for story id and name derivation."""

import pytest

from storyprep.domain.ids import sanitize, story_name_from_export, to_id, validate_id


class TestSanitize:
    def test_lowercases_and_dashes_separators(self) -> None:
        assert sanitize("Components/Button") == "components-button"

    def test_collapses_and_trims_dashes(self) -> None:
        assert sanitize("  --Hello,   World!-- ") == "hello-world"

    def test_underscores_become_dashes(self) -> None:
        assert sanitize("with_icon") == "with-icon"


class TestToId:
    def test_title_and_name(self) -> None:
        assert to_id("Components/Button", "Primary") == "components-button--primary"

    def test_multi_word_name(self) -> None:
        assert to_id("Forms/Text Input", "With Placeholder") == "forms-text-input--with-placeholder"

    def test_empty_kind_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid kind"):
            to_id("///", "Primary")

    def test_empty_name_rejected(self) -> None:
        with pytest.raises(ValueError, match="Invalid name"):
            to_id("Button", "!!!")


class TestStoryNameFromExport:
    def test_camel_case(self) -> None:
        assert story_name_from_export("primaryButton") == "Primary Button"

    def test_snake_case_with_digits(self) -> None:
        assert story_name_from_export("with_icon_2") == "With Icon 2"

    def test_acronym(self) -> None:
        assert story_name_from_export("URLInput") == "URL Input"


class TestValidateId:
    def test_valid(self) -> None:
        assert validate_id("components-button--primary")

    def test_missing_separator(self) -> None:
        assert not validate_id("components-button-primary")

    def test_uppercase_rejected(self) -> None:
        assert not validate_id("Components--Primary")
