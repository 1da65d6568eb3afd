# tests/test_validators.py
import pytest

from orm_slots.validators import (
    slot_name_validator,
    string_length_optional_validator,
    string_length_validator,
)


class TestSlotName:
    @pytest.mark.parametrize("name", ["teaser", "_private", "block2", "Header_Image"])
    def test_valid(self, name):
        assert slot_name_validator()(name) == name

    def test_strips_whitespace(self):
        assert slot_name_validator()("  teaser ") == "teaser"

    @pytest.mark.parametrize("name", ["2fast", "with space", "dash-ed", "dot.ted"])
    def test_invalid(self, name):
        with pytest.raises(ValueError, match="must start with a letter"):
            slot_name_validator()(name)

    def test_empty(self):
        with pytest.raises(ValueError, match="Slot name cannot be empty"):
            slot_name_validator()("   ")

    def test_too_long(self):
        with pytest.raises(ValueError, match="cannot exceed 10 characters"):
            slot_name_validator(10)("a" * 11)


class TestStringLength:
    def test_preserves_case(self):
        assert string_length_validator(20, "Slot type")(" Markdown ") == "Markdown"

    def test_optional_passes_none(self):
        assert string_length_optional_validator(20)(None) is None

    def test_optional_still_validates(self):
        with pytest.raises(ValueError, match="Value cannot be empty"):
            string_length_optional_validator(20)("")
