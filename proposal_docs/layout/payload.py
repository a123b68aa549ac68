from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Tuple, Union

from .errors import ValidationError


Number = Union[int, float, Decimal]

_MISSING = object()


@dataclass(frozen=True)
class Client:
    name: Optional[str] = None
    cin: Optional[str] = None
    address: Optional[str] = None


@dataclass(frozen=True)
class ProposalMeta:
    date: Optional[str] = None
    message: Optional[str] = None


@dataclass(frozen=True)
class ServiceItem:
    id: str
    category: str
    service: str
    price: Number
    scope_of_work: Optional[str] = None
    discounted_price: Optional[Number] = None
    billing_cycle: Optional[str] = None


@dataclass(frozen=True)
class ProposalPayload:
    client: Client = field(default_factory=Client)
    proposal: ProposalMeta = field(default_factory=ProposalMeta)
    services: Tuple[ServiceItem, ...] = ()


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
    # camelCase (as sent by the web client) and snake_case are both accepted
    for key in keys:
        if key in record:
            return record[key]
    return _MISSING


def _optional_text(value: Any) -> Optional[str]:
    if value is _MISSING or value is None:
        return None
    return str(value)


def is_valid_price(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite() and value >= 0
    return math.isfinite(value) and value >= 0


def _price_problem(value: Any, label: str) -> Optional[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return f"{label} must be a number, got {value!r}"
    if not is_valid_price(value):
        return f"{label} must be a finite non-negative number, got {value!r}"
    return None


def _blank(value: Any) -> bool:
    return value is _MISSING or value is None or not str(value).strip()


def _field_problems(where: str, item_id: Any, category: Any, price: Any, discounted: Any) -> List[str]:
    problems: List[str] = []
    if _blank(item_id):
        problems.append(f"{where}.id is required")
    if _blank(category):
        problems.append(f"{where}.category is required")
    if price is _MISSING or price is None:
        problems.append(f"{where}.price is required")
    else:
        problem = _price_problem(price, f"{where}.price")
        if problem:
            problems.append(problem)
    if discounted is not None:
        problem = _price_problem(discounted, f"{where}.discountedPrice")
        if problem:
            problems.append(problem)
    return problems


def _parse_client(raw: Any, errors: List[str]) -> Client:
    if raw is _MISSING or raw is None:
        return Client()
    if not isinstance(raw, Mapping):
        errors.append("client must be an object")
        return Client()
    return Client(
        name=_optional_text(_pick(raw, "name")),
        cin=_optional_text(_pick(raw, "CIN", "cin")),
        address=_optional_text(_pick(raw, "address")),
    )


def _parse_meta(raw: Any, errors: List[str]) -> ProposalMeta:
    if raw is _MISSING or raw is None:
        return ProposalMeta()
    if not isinstance(raw, Mapping):
        errors.append("proposal must be an object")
        return ProposalMeta()
    return ProposalMeta(
        date=_optional_text(_pick(raw, "date")),
        message=_optional_text(_pick(raw, "message")),
    )


def _parse_item(raw: Any, index: int, errors: List[str]) -> Optional[ServiceItem]:
    where = f"services[{index}]"
    if not isinstance(raw, Mapping):
        errors.append(f"{where} must be an object")
        return None

    item_id = _pick(raw, "id")
    category = _pick(raw, "category")
    price = _pick(raw, "price")
    discounted = _pick(raw, "discountedPrice", "discounted_price")
    if discounted is _MISSING:
        discounted = None

    problems = _field_problems(where, item_id, category, price, discounted)
    if problems:
        errors.extend(problems)
        return None

    service = _pick(raw, "service", "name")
    return ServiceItem(
        id=str(item_id),
        category=str(category),
        service="" if service is _MISSING or service is None else str(service),
        price=price,
        scope_of_work=_optional_text(_pick(raw, "scopeOfWork", "scope_of_work")),
        discounted_price=discounted,
        billing_cycle=_optional_text(_pick(raw, "billingCycle", "billing_cycle")),
    )


def parse_payload(raw: Mapping[str, Any]) -> ProposalPayload:
    """
    Validate a raw proposal payload and freeze it into a ProposalPayload.

    Every problem is collected before raising, so the caller sees the whole list
    in one ValidationError. Nothing is returned unless the whole payload is valid.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("payload must be an object")

    errors: List[str] = []
    client = _parse_client(_pick(raw, "client"), errors)
    proposal = _parse_meta(_pick(raw, "proposal"), errors)

    raw_services = _pick(raw, "services")
    if raw_services is _MISSING or raw_services is None:
        raw_services = []
    if not isinstance(raw_services, (list, tuple)):
        errors.append("services must be a list")
        raw_services = []

    items: List[ServiceItem] = []
    seen_ids = set()
    for index, raw_item in enumerate(raw_services):
        item = _parse_item(raw_item, index, errors)
        if item is None:
            continue
        if item.id in seen_ids:
            errors.append(f"services[{index}].id duplicates {item.id!r}")
            continue
        seen_ids.add(item.id)
        items.append(item)

    if errors:
        raise ValidationError(errors)
    return ProposalPayload(client=client, proposal=proposal, services=tuple(items))


def check_payload(payload: ProposalPayload) -> ProposalPayload:
    """
    Apply the parse_payload rules to an already-built ProposalPayload.

    Dataclass construction checks nothing, so a payload assembled in code can
    carry a blank category or a negative price; this catches it the same way.
    """
    errors: List[str] = []
    seen_ids = set()
    for index, item in enumerate(payload.services):
        where = f"services[{index}]"
        if not isinstance(item, ServiceItem):
            errors.append(f"{where} must be a ServiceItem, got {type(item).__name__}")
            continue
        problems = _field_problems(where, item.id, item.category, item.price, item.discounted_price)
        if problems:
            errors.extend(problems)
            continue
        if item.id in seen_ids:
            errors.append(f"{where}.id duplicates {item.id!r}")
        seen_ids.add(item.id)

    if errors:
        raise ValidationError(errors)
    return payload
