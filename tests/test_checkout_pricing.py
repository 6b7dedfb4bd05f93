"""Input parsing and settlement, no database involved."""

import pytest

from app.errors import NotFoundError, ValidationError
from app.services.catalog import ProductSnapshot
from app.services.checkout import CheckoutLine, flatten_address, parse_lines, parse_shipping, settle
from app.utils.money import D


PRODUCTS = {
    1: ProductSnapshot(name="Shirt", price=D("30.00"), seller_id=7),
    2: ProductSnapshot(name="Socks", price=D("10.00"), seller_id=3),
    3: ProductSnapshot(name="Hat", price=D("4.99"), seller_id=7),
}


class TestSettle:
    def test_reference_order(self):
        lines = [CheckoutLine(1, 2), CheckoutLine(2, 1)]
        total, credits = settle(lines, PRODUCTS)
        assert total == D("70.00")
        assert credits == [(3, D("10.00")), (7, D("60.00"))]

    def test_credits_merge_per_seller_and_sum_to_total(self):
        lines = [CheckoutLine(1, 1), CheckoutLine(3, 3), CheckoutLine(2, 2)]
        total, credits = settle(lines, PRODUCTS)
        assert credits == [(3, D("20.00")), (7, D("44.97"))]
        assert sum(amount for _, amount in credits) == total == D("64.97")

    def test_unknown_product(self):
        with pytest.raises(NotFoundError) as exc:
            settle([CheckoutLine(1, 1), CheckoutLine(42, 1)], PRODUCTS)
        assert exc.value.message == "Invalid product 42"


class TestParseLines:
    def test_parses_sizes_and_string_ids(self):
        lines = parse_lines([
            {"productId": "5", "quantity": 2, "size": "M"},
            {"productId": 6, "quantity": "1", "size": ""},
        ])
        assert lines == [CheckoutLine(5, 2, "M"), CheckoutLine(6, 1, None)]

    @pytest.mark.parametrize("items", [None, [], {}, "abc"])
    def test_empty(self, items):
        with pytest.raises(ValidationError) as exc:
            parse_lines(items)
        assert exc.value.message == "Cart is empty"

    @pytest.mark.parametrize("line", [
        {"quantity": 1},
        {"productId": "x", "quantity": 1},
        {"productId": 1, "quantity": 0},
        {"productId": 1, "quantity": -2},
        {"productId": 1, "quantity": 1.5},
        {"productId": True, "quantity": 1},
        {"productId": 1, "quantity": "²"},
        {"productId": "²", "quantity": 1},
    ])
    def test_bad_line(self, line):
        with pytest.raises(ValidationError):
            parse_lines([line])


class TestShipping:
    def test_names_first_missing_field(self):
        with pytest.raises(ValidationError) as exc:
            parse_shipping({"firstName": "Ada", "lastName": "L", "address": "1 Road"})
        assert exc.value.message == "Missing shipping.city"

    def test_not_an_object(self):
        with pytest.raises(ValidationError) as exc:
            parse_shipping(None)
        assert exc.value.message == "Missing shipping.firstName"

    def test_flatten(self, shipping):
        assert flatten_address(parse_shipping(shipping)) == "12 Analytical St, London N1 9GU"
