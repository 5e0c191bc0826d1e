import pytest

from auction.core.exceptions import InvalidInputError
from auction.core.money import MAX_CENTS, MoneyError, coerce_amount, format_cents, parse_money_to_cents


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("10", 1000),
        ("10.5", 1050),
        ("10.55", 1055),
        (" 0.01 ", 1),
        ("0", 0),
    ],
)
def test_parse_money_to_cents(raw, expected):
    assert parse_money_to_cents(raw) == expected


@pytest.mark.parametrize("raw", ["", "abc", "10.555", "-5", "1,50", ".50", "10."])
def test_parse_money_rejects_bad_format(raw):
    with pytest.raises(MoneyError):
        parse_money_to_cents(raw)


def test_parse_money_rejects_overflow():
    with pytest.raises(MoneyError):
        parse_money_to_cents("99999999999999999999")


def test_money_error_is_invalid_input():
    with pytest.raises(InvalidInputError) as exc_info:
        parse_money_to_cents("nope")

    assert exc_info.value.to_dict()["code"] == "INVALID_AMOUNT"


def test_coerce_amount():
    assert coerce_amount(250) == 250
    assert coerce_amount(MAX_CENTS) == MAX_CENTS
    assert coerce_amount("2.50") == 250
    with pytest.raises(MoneyError):
        coerce_amount(True)
    with pytest.raises(MoneyError):
        coerce_amount(MAX_CENTS + 1)


@pytest.mark.parametrize(
    "amount,expected",
    [
        (0, "AED 0.00"),
        (5, "AED 0.05"),
        (1234, "AED 12.34"),
        (-150, "AED -1.50"),
    ],
)
def test_format_cents(amount, expected):
    assert format_cents(amount) == expected
