from __future__ import annotations

from decimal import Decimal

import pytest

from proposal_docs.layout.errors import ValidationError
from proposal_docs.layout.payload import parse_payload


def test_camel_case_payload_is_parsed() -> None:
    payload = parse_payload(
        {
            "client": {"name": "Acme Pvt Ltd", "CIN": "U12345DL2020PTC000001", "address": "New Delhi"},
            "proposal": {"date": "01 April 2026", "message": "Hello"},
            "services": [
                {
                    "id": 7,
                    "category": "Audit",
                    "service": "Statutory Audit",
                    "scopeOfWork": "Audit under the Companies Act",
                    "price": 50000,
                    "discountedPrice": 45000,
                    "billingCycle": "Annual",
                }
            ],
        }
    )
    assert payload.client.cin == "U12345DL2020PTC000001"
    assert payload.proposal.message == "Hello"
    item = payload.services[0]
    assert item.id == "7"
    assert item.scope_of_work == "Audit under the Companies Act"
    assert item.discounted_price == 45000
    assert item.billing_cycle == "Annual"


def test_snake_case_keys_and_missing_sections() -> None:
    payload = parse_payload(
        {"services": [{"id": "a", "category": "Tax", "service": "ITR", "price": Decimal("2500"), "discounted_price": None}]}
    )
    assert payload.client.name is None
    assert payload.proposal.date is None
    assert payload.services[0].discounted_price is None


def test_absent_services_is_an_empty_list() -> None:
    assert parse_payload({}).services == ()


def test_empty_string_is_kept_distinct_from_absent() -> None:
    payload = parse_payload({"client": {"name": ""}})
    assert payload.client.name == ""
    assert payload.client.address is None


def test_all_problems_are_reported_together() -> None:
    with pytest.raises(ValidationError) as info:
        parse_payload(
            {
                "services": [
                    {"category": "Audit", "service": "No id", "price": 100},
                    {"id": "2", "service": "No category", "price": 100},
                    {"id": "3", "category": "Tax", "service": "No price"},
                    {"id": "4", "category": "Tax", "service": "Negative", "price": -5},
                ]
            }
        )
    errors = info.value.errors
    assert any("services[0].id" in e for e in errors)
    assert any("services[1].category" in e for e in errors)
    assert any("services[2].price is required" in e for e in errors)
    assert any("services[3].price" in e for e in errors)


@pytest.mark.parametrize("price", [float("nan"), float("inf"), "5000", True, -0.01])
def test_bad_prices_are_rejected(price) -> None:
    with pytest.raises(ValidationError):
        parse_payload({"services": [{"id": "1", "category": "Audit", "service": "X", "price": price}]})


def test_bad_discounted_price_is_rejected() -> None:
    with pytest.raises(ValidationError):
        parse_payload(
            {"services": [{"id": "1", "category": "Audit", "service": "X", "price": 10, "discountedPrice": -1}]}
        )


def test_duplicate_ids_are_rejected() -> None:
    with pytest.raises(ValidationError, match="duplicates"):
        parse_payload(
            {
                "services": [
                    {"id": "1", "category": "Audit", "service": "A", "price": 10},
                    {"id": "1", "category": "Tax", "service": "B", "price": 20},
                ]
            }
        )


def test_non_list_services_is_rejected() -> None:
    with pytest.raises(ValidationError, match="services must be a list"):
        parse_payload({"services": {"id": "1"}})
