from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, List, Mapping, Optional, Union

from .. import config
from .document import (
    Block,
    DocumentTree,
    PageBreak,
    ServicePageBlock,
    ServiceRow,
    TableBlock,
    TextBlock,
)
from .formatters import (
    currency_format,
    format_currency,
    format_currency_plain,
    format_long_date,
    resolve_text,
)
from .grouping import CategoryGroup, group_by_category
from .pagination import check_capacity, paginate
from .payload import Number, ProposalPayload, ServiceItem, check_payload, parse_payload

logger = logging.getLogger(__name__)

FEE_SCHEDULE = "fee_schedule"
SCOPE_OF_SERVICES = "scope_of_services"


@dataclass(frozen=True)
class DocumentDefaults:
    """Every fallback used when an optional field is absent or blank."""

    client_name: str = config.DEFAULT_CLIENT_NAME
    cin: str = config.DEFAULT_CIN
    address: str = config.DEFAULT_ADDRESS
    message: str = config.DEFAULT_MESSAGE
    price_placeholder: str = config.PRICE_PLACEHOLDER


@dataclass(frozen=True)
class LayoutSettings:
    services_per_page: int = config.SERVICES_PER_PAGE
    # None keeps the fee schedule as one continuous flow
    fee_schedule_groups_per_page: Optional[int] = None
    locale: str = config.DEFAULT_LOCALE
    currency: str = config.DEFAULT_CURRENCY
    defaults: DocumentDefaults = field(default_factory=DocumentDefaults)
    today: Optional[date] = None

    def validate(self) -> "LayoutSettings":
        check_capacity(self.services_per_page)
        if self.fee_schedule_groups_per_page is not None:
            check_capacity(self.fee_schedule_groups_per_page)
        currency_format(self.locale, self.currency)
        return self


@dataclass(frozen=True)
class ResolvedHeader:
    client_name: str
    cin: str
    address: str
    date: str
    message: str


@dataclass(frozen=True)
class ProposalDocuments:
    payload: ProposalPayload
    fee_schedule: DocumentTree
    scope_of_services: DocumentTree


PayloadLike = Union[ProposalPayload, Mapping[str, Any]]


def has_personalised_price(item: ServiceItem) -> bool:
    return item.discounted_price is not None and item.discounted_price != item.price


def display_price(item: ServiceItem) -> Number:
    """The fee the client pays: the discounted price when it really differs, else the list price."""
    return item.discounted_price if has_personalised_price(item) else item.price


def resolve_header(payload: ProposalPayload, settings: LayoutSettings) -> ResolvedHeader:
    defaults = settings.defaults
    today = settings.today or date.today()
    return ResolvedHeader(
        client_name=resolve_text(payload.client.name, defaults.client_name),
        cin=resolve_text(payload.client.cin, defaults.cin),
        address=resolve_text(payload.client.address, defaults.address),
        date=resolve_text(payload.proposal.date, format_long_date(today)),
        message=resolve_text(payload.proposal.message, defaults.message),
    )


def _prepare(payload: PayloadLike, settings: Optional[LayoutSettings]) -> tuple[ProposalPayload, LayoutSettings]:
    settings = (settings or LayoutSettings()).validate()
    if isinstance(payload, ProposalPayload):
        payload = check_payload(payload)
    else:
        payload = parse_payload(payload)
    return payload, settings


def _fee_table(group: CategoryGroup, settings: LayoutSettings) -> TableBlock:
    placeholder = settings.defaults.price_placeholder
    rows = []
    for item in group.items:
        personalised = (
            format_currency(item.discounted_price, settings.locale, settings.currency)
            if has_personalised_price(item)
            else placeholder
        )
        rows.append(
            (
                item.service,
                format_currency(item.price, settings.locale, settings.currency),
                personalised,
            )
        )
    return TableBlock(title=group.category, columns=tuple(config.FEE_TABLE_HEADERS), rows=tuple(rows))


def _fee_tables(groups: List[CategoryGroup], settings: LayoutSettings) -> List[Block]:
    if settings.fee_schedule_groups_per_page is None:
        return [_fee_table(group, settings) for group in groups]
    blocks: List[Block] = []
    for page in paginate(groups, settings.fee_schedule_groups_per_page):
        if page.number > 1:
            blocks.append(PageBreak())
        blocks.extend(_fee_table(group, settings) for group in page.items)
    return blocks


def _build_fee_schedule(payload: ProposalPayload, settings: LayoutSettings) -> DocumentTree:
    header = resolve_header(payload, settings)
    groups = group_by_category(payload.services)

    blocks: List[Block] = [
        TextBlock(role="date", lines=(header.date,)),
        TextBlock(
            role="address",
            lines=(
                "To,",
                config.ADDRESSEE,
                header.client_name,
                f"CIN - {header.cin}",
                f"Address: {header.address}",
            ),
        ),
        TextBlock(role="subject", lines=(config.SUBJECT_LINE,)),
        TextBlock(role="salutation", lines=(config.SALUTATION,)),
        TextBlock(role="message", lines=(header.message,)),
    ]
    blocks.extend(_fee_tables(groups, settings))
    blocks.extend(
        [
            TextBlock(role="terms", lines=tuple(config.TERMS), title=config.TERMS_TITLE),
            TextBlock(role="acceptance", lines=(config.ACCEPTANCE_NOTE,)),
            TextBlock(
                role="signature",
                lines=(
                    *config.SIGNATORY_LINES,
                    f"DATE – {header.date}",
                    *config.SIGNATURE_TRAILER,
                ),
            ),
            TextBlock(role="enclosure", lines=(config.ENCLOSURE,)),
        ]
    )
    return DocumentTree(variant=FEE_SCHEDULE, blocks=tuple(blocks))


def _service_row(item: ServiceItem, settings: LayoutSettings) -> ServiceRow:
    scope = (item.scope_of_work or "").strip() or None
    cycle = (item.billing_cycle or "").strip() or None
    return ServiceRow(
        name=item.service,
        fee=format_currency_plain(display_price(item), settings.locale, settings.currency),
        scope=scope,
        billing_cycle=f"({cycle})" if cycle else None,
    )


def _build_scope_of_services(payload: ProposalPayload, settings: LayoutSettings) -> DocumentTree:
    unit = currency_format(settings.locale, settings.currency).unit
    header = (config.SERVICES_HEADER, f"Fees (In {unit})")

    blocks: List[Block] = []
    for page in paginate(payload.services, settings.services_per_page):
        if page.number > 1:
            blocks.append(PageBreak())
        blocks.append(
            ServicePageBlock(
                number=page.number,
                header=header,
                side_title=config.SERVICES_SIDE_TITLE,
                rows=tuple(_service_row(item, settings) for item in page.items),
            )
        )
    return DocumentTree(variant=SCOPE_OF_SERVICES, blocks=tuple(blocks))


def compose_fee_schedule(payload: PayloadLike, settings: Optional[LayoutSettings] = None) -> DocumentTree:
    payload, settings = _prepare(payload, settings)
    return _build_fee_schedule(payload, settings)


def compose_scope_of_services(payload: PayloadLike, settings: Optional[LayoutSettings] = None) -> DocumentTree:
    payload, settings = _prepare(payload, settings)
    return _build_scope_of_services(payload, settings)


def compose_documents(payload: PayloadLike, settings: Optional[LayoutSettings] = None) -> ProposalDocuments:
    """
    Validate once, then lay out both documents from the same frozen payload.

    Raises ValidationError or ConfigurationError before any layout work happens.
    """
    payload, settings = _prepare(payload, settings)
    fee_schedule = _build_fee_schedule(payload, settings)
    scope = _build_scope_of_services(payload, settings)
    logger.debug(
        "Composed fee schedule (%d pages) and scope of services (%d pages) for %d services",
        fee_schedule.page_count,
        scope.page_count,
        len(payload.services),
    )
    return ProposalDocuments(payload=payload, fee_schedule=fee_schedule, scope_of_services=scope)
