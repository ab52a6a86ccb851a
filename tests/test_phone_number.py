"""Tests for NANP phone number validation and normalization."""

import pytest
from finval.validate.phone import NORTH_AMERICA_ONLY, validate_phone_number
from finval.validate.verdict import ErrorCode


class TestNormalization:
    @pytest.mark.parametrize("raw", [
        "2025551234",
        "202-555-1234",
        "(202) 555-1234",
        "202.555.1234",
        "202 555 1234",
        "+12025551234",
        "+1 (202) 555-1234",
        "1 202 555 1234",
        "12025551234",
        "  2025551234  ",
    ])
    def test_every_presentation_normalizes_to_one_form(self, raw):
        v = validate_phone_number(raw)
        assert v.valid
        assert v.normalized == "+12025551234"

    def test_canadian_number(self):
        assert validate_phone_number("613-555-0123").normalized == "+16135550123"

    def test_normalized_value_validates_to_itself(self):
        v = validate_phone_number("(415) 555-0100")
        assert validate_phone_number(v.normalized).normalized == v.normalized


class TestRejected:
    @pytest.mark.parametrize("raw", ["9115551234", "4115551234", "0125551234", "1255551234"])
    def test_bad_area_code(self, raw):
        v = validate_phone_number(raw)
        assert v.error_code is ErrorCode.UNSUPPORTED
        assert "area code" in v.error_message

    @pytest.mark.parametrize("raw", ["8005551234", "8885551234", "8335551234"])
    def test_toll_free(self, raw):
        v = validate_phone_number(raw)
        assert v.error_code is ErrorCode.UNSUPPORTED
        assert "Toll-free" in v.error_message

    def test_premium_rate(self):
        v = validate_phone_number("900-555-1234")
        assert v.error_code is ErrorCode.UNSUPPORTED
        assert "Premium" in v.error_message

    @pytest.mark.parametrize("raw", ["2020551234", "2021551234", "2029111234", "2024111234"])
    def test_bad_exchange(self, raw):
        v = validate_phone_number(raw)
        assert v.error_code is ErrorCode.UNSUPPORTED
        assert "exchange" in v.error_message

    @pytest.mark.parametrize("raw", ["+44 20 7946 0958", "+33 1 42 68 53 00", "+52 55 1234 5678"])
    def test_international(self, raw):
        v = validate_phone_number(raw)
        assert v.error_code is ErrorCode.UNSUPPORTED
        assert v.error_message == NORTH_AMERICA_ONLY

    def test_too_short(self):
        v = validate_phone_number("202555123")
        assert v.error_code is ErrorCode.FORMAT
        assert "10 digits" in v.error_message
        assert "short" in v.error_message

    def test_too_long(self):
        v = validate_phone_number("202555123456")
        assert v.error_code is ErrorCode.FORMAT
        assert "long" in v.error_message

    @pytest.mark.parametrize("raw", ["0000000000", "1111111111", "11111111111"])
    def test_repeated_digits(self, raw):
        v = validate_phone_number(raw)
        assert v.error_code is ErrorCode.FORMAT
        assert v.error_message == "Invalid phone number"

    @pytest.mark.parametrize("raw", ["202-555-CALL", "abc", "202_555_1234", "2025551234 ext 5", "202+5551234"])
    def test_disallowed_characters(self, raw):
        assert validate_phone_number(raw).error_code is ErrorCode.FORMAT

    def test_separators_only(self):
        assert validate_phone_number("(--)").error_code is ErrorCode.FORMAT

    def test_overlong_input(self):
        assert validate_phone_number("2" * 60).error_code is ErrorCode.FORMAT


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_required(raw):
    v = validate_phone_number(raw)
    assert v.error_code is ErrorCode.REQUIRED
    assert "required" in v.error_message


def test_non_string_is_a_contract_violation():
    with pytest.raises(TypeError):
        validate_phone_number(2025551234)


def test_fictional_555_exchange_passes_because_it_is_not_n11():
    assert validate_phone_number("312-555-0199").normalized == "+13125550199"
    assert validate_phone_number("312-511-0199").error_code is ErrorCode.UNSUPPORTED
