"""
Tests for identifier normalization.
"""

import pytest

from user_management.identifiers import SSN_LENGTH, IdentifierFormatError, normalize_identifier


class TestNormalizeIdentifier:
    @pytest.mark.parametrize("digits", ["7", "2945", "12345678", "123456789012345"])
    def test_pads_to_fixed_width(self, digits):
        result = normalize_identifier(digits)
        assert len(result) == SSN_LENGTH
        assert result == "0" * (SSN_LENGTH - len(digits)) + digits

    def test_full_width_is_idempotent(self):
        assert normalize_identifier("1234567890123456") == "1234567890123456"
        once = normalize_identifier("2945")
        assert normalize_identifier(once) == once

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty_input_passes_through(self, raw):
        assert normalize_identifier(raw) is raw

    def test_input_without_digits_is_returned_unchanged(self):
        assert normalize_identifier("abc-") == "abc-"

    def test_strips_non_digit_characters(self):
        assert normalize_identifier("29-45 ") == "0000000000002945"

    def test_padded_and_unpadded_forms_match(self):
        assert normalize_identifier("2945") == normalize_identifier("0000000000002945")

    def test_extra_leading_zeros_are_accepted(self):
        assert normalize_identifier("000000000000000002945") == "0000000000002945"

    def test_rejects_more_than_sixteen_significant_digits(self):
        with pytest.raises(IdentifierFormatError):
            normalize_identifier("12345678901234567")

    def test_format_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            normalize_identifier("99999999999999999999999")
