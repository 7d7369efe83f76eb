"""Order / preorder request schemas — camelCase input, blank handling, totals."""

from datetime import date, time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from caramel.schemas.order import OrderCreate, OrderCreated
from caramel.schemas.preorder import PreorderCreate


def test_order_accepts_camel_case_fields():
    order = OrderCreate.model_validate({
        "items": [{"id": 1, "name": "Cake", "quantity": 2, "price": "9.99"}],
        "totalAmount": "19.98",
        "deliveryAddress": "Mira 1",
        "deliveryDate": "2026-11-01",
    })
    assert order.total_amount == Decimal("19.98")
    assert order.delivery_address == "Mira 1"
    assert order.delivery_date == date(2026, 11, 1)


def test_line_total_is_exact_decimal():
    order = OrderCreate.model_validate({
        "items": [{"id": 1, "name": "Truffle", "quantity": 3, "price": "0.10"}],
    })
    assert order.items[0].line_total == Decimal("0.30")


def test_total_defaults_to_items_sum():
    order = OrderCreate.model_validate({
        "items": [
            {"id": 1, "name": "A", "quantity": 2, "price": "1.50"},
            {"id": 2, "name": "B", "quantity": 1, "price": "4.00"},
        ],
    })
    assert order.total_amount == Decimal("7.00")


def test_empty_items_parse_but_report_no_items():
    assert not OrderCreate.model_validate({"items": []}).has_items
    assert not OrderCreate.model_validate({}).has_items


def test_blank_optional_strings_become_none():
    order = OrderCreate.model_validate({
        "customer": {"name": " Anna ", "phone": "  ", "email": ""},
        "notes": "",
        "deliveryDate": "",
    })
    assert order.customer.name == "Anna"
    assert order.customer.phone is None
    assert order.customer.email is None
    assert order.notes is None
    assert order.delivery_date is None


@pytest.mark.parametrize("item", [
    {"id": 1, "name": "A", "quantity": 0, "price": 1},
    {"id": 1, "name": "A", "quantity": 1, "price": -1},
    {"id": 1, "name": "", "quantity": 1, "price": 1},
])
def test_invalid_items_rejected(item):
    with pytest.raises(ValidationError):
        OrderCreate.model_validate({"items": [item]})


def test_order_created_serializes_camel_case():
    payload = OrderCreated(order_id=5, order_number="CR00000005").model_dump(
        by_alias=True,
    )
    assert payload == {
        "success": True,
        "orderId": 5,
        "orderNumber": "CR00000005",
        "message": "Order created successfully",
    }


def test_preorder_required_fields():
    assert PreorderCreate.model_validate({}).missing_required
    complete = PreorderCreate.model_validate({
        "customer": {"name": "Boris"},
        "eventType": "birthday",
        "eventDate": "2026-12-01",
        "eventTime": "15:00",
    })
    assert not complete.missing_required
    assert complete.event_time == time(15, 0)


def test_preorder_blank_event_type_is_missing():
    preorder = PreorderCreate.model_validate({
        "customer": {"name": "Boris"},
        "eventType": "",
        "eventDate": "2026-12-01",
    })
    assert preorder.missing_required
