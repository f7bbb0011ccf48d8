from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Protocol

from ..mapping.conversions import (
    NA_LITERAL,
    convert_excel_date,
    invoice_number_text,
    join_address_fragments,
    map_state_code,
    to_flag,
    to_number,
    to_text,
)
from ..mapping.field_resolver import has_value, resolve
from ..mapping.layout_detector import INVOICE_LABELS, LayoutIndeterminateError, is_invoice_row, legacy_row_type
from ..mapping.schema import InvoiceBasedSchema, LayoutSchema, LegacySchema, LineColumns, PartyColumns, get_schema
from ..models.config_models import DefaultValues
from ..models.document import (
    Address,
    AllowanceCharge,
    Contact,
    DeliveryParty,
    DocumentReference,
    DocumentSummary,
    FreightAllowanceCharge,
    InvoiceDocument,
    InvoiceHeader,
    InvoicePeriod,
    ItemClassification,
    LineItem,
    MonetaryTotals,
    OrganizationParty,
    PartyIdentification,
    Payment,
    PrepaidPayment,
    Price,
    Shipment,
    TaxCategory,
    TaxScheme,
    TaxSubtotal,
    TaxSummary,
)
from ..models.layout import SheetLayout
from ..models.row_data import sheet_row_number

"""Document construction from spreadsheet rows.

Two strategies sit behind ``DocumentBuilder``:

- InvoiceBasedStrategy: one row is one complete document.
- LegacyStrategy: an H row opens a document, L rows add line items, an F row
  sets the totals and closes it. A document still open at end of input is
  flushed.

Strategies hold only read-only configuration (schema table, defaults, clock),
so building the same rows twice yields equal documents apart from the issue
date/time.
"""

__all__ = [
    "DocumentBuildError",
    "BuildContext",
    "BuildFailure",
    "BuildOutcome",
    "InvoiceBasedStrategy",
    "LegacyStrategy",
    "DocumentBuilder",
]

logger = logging.getLogger(__name__)

SCHEME_TYPES = ("TIN", "BRN", "SST", "TTX")


class DocumentBuildError(Exception):
    """A single row (or row group) cannot yield a document."""

    def __init__(self, message: str, *, row_number: int = -1, invoice_no: str = "") -> None:
        super().__init__(message)
        self.row_number = row_number
        self.invoice_no = invoice_no


@dataclass(frozen=True)
class BuildContext:
    rows: Sequence[Mapping[str, Any]]  # all data rows of the sheet
    row_index: int  # 0-based index of the opening row within ``rows``
    metadata_rows: int = 2

    @property
    def row_number(self) -> int:
        return sheet_row_number(self.row_index, self.metadata_rows)


@dataclass(frozen=True)
class BuildFailure:
    index: int  # position among document starts
    row_number: int
    invoice_no: str
    error: str


@dataclass
class BuildOutcome:
    documents: list[InvoiceDocument] = field(default_factory=list)
    failures: list[BuildFailure] = field(default_factory=list)
    document_starts: int = 0
    warnings: list[str] = field(default_factory=list)  # non-fatal findings (skipped rows etc.)


def _utc_now() -> datetime:
    return datetime.now(UTC)


class LayoutStrategy(Protocol):
    def build(self, row: Mapping[str, Any], context: BuildContext) -> InvoiceDocument: ...

    def build_all(self, rows: Sequence[Mapping[str, Any]], metadata_rows: int = 2) -> BuildOutcome: ...


class _StrategyBase:
    """Field readers shared by both layouts.

    Both schema tables name the common header/payment/shipment columns the
    same way, so these helpers take whichever table the strategy owns.
    """

    def __init__(
        self,
        schema: InvoiceBasedSchema | LegacySchema,
        defaults: DefaultValues,
        clock: Callable[[], datetime],
    ) -> None:
        self.schema = schema
        self.defaults = defaults
        self.clock = clock

    # -- header -----------------------------------------------------------
    def _header(self, row: Mapping[str, Any], invoice_no: str) -> InvoiceHeader:
        s = self.schema
        now = self.clock()
        currency = to_text(resolve(row, s.currency))
        tax_currency = to_text(resolve(row, s.tax_currency)) or currency or self.defaults.currency
        return InvoiceHeader(
            invoice_no=invoice_no,
            invoice_type=to_text(resolve(row, s.invoice_type)),
            document_currency_code=currency,
            tax_currency_code=tax_currency,
            exchange_rate=to_number(resolve(row, s.exchange_rate)),
            document_reference=DocumentReference(
                uuid=to_text(resolve(row, s.uuid)),
                internal_id=to_text(resolve(row, s.internal_id)),
                billing_reference=to_text(resolve(row, s.billing_reference)),
                billing_reference_type=to_text(resolve(row, s.billing_reference_type)),
            ),
            issue_date=now.date().isoformat(),
            issue_time=now.strftime("%H:%M:%SZ"),
            invoice_period=InvoicePeriod(
                start_date=convert_excel_date(resolve(row, s.period_start)),
                end_date=convert_excel_date(resolve(row, s.period_end)),
                description=to_text(resolve(row, s.period_description)),
            ),
        )

    # -- parties ----------------------------------------------------------
    def _address(self, row: Mapping[str, Any], cols: PartyColumns, line: str | None) -> Address:
        d = self.defaults
        country = to_text(resolve(row, cols.country))
        list_id = to_text(resolve(row, cols.country_list_id))
        agency = to_text(resolve(row, cols.country_list_agency_id))
        if cols.default_country:
            country = country or d.country
        if cols.default_country_scheme:
            list_id = list_id or d.country_list_id
            agency = agency or d.country_list_agency_id
        return Address(
            line=line,
            city=to_text(resolve(row, cols.city)),
            postcode=to_text(resolve(row, cols.postcode)),
            state=map_state_code(resolve(row, cols.state)),
            country=country,
            country_list_id=list_id,
            country_list_agency_id=agency,
        )

    def _contact(self, row: Mapping[str, Any], cols: PartyColumns) -> Contact:
        return Contact(
            phone=to_text(resolve(row, cols.phone)) if cols.phone else None,
            email=to_text(resolve(row, cols.email)) if cols.email else None,
        )

    def _supplier_extras(self, row: Mapping[str, Any]) -> dict[str, str | None]:
        s = self.schema
        return {
            "additional_account_id": to_text(resolve(row, s.supplier_additional_account)),
            "scheme_agency_name": (
                to_text(resolve(row, s.supplier_scheme_agency)) or self.defaults.scheme_agency_name
            ),
            "industry_classification_code": to_text(resolve(row, s.supplier_industry_code)),
            "industry_name": to_text(resolve(row, s.supplier_industry_name)),
        }

    def _shipment(self, row: Mapping[str, Any]) -> Shipment:
        s = self.schema
        return Shipment(
            id=to_text(resolve(row, s.shipment_id)),
            freight_allowance_charge=FreightAllowanceCharge(
                indicator=to_flag(resolve(row, s.freight_indicator)),
                reason=to_text(resolve(row, s.freight_reason)),
                amount=to_number(resolve(row, s.freight_amount)),
            ),
        )

    # -- payment / allowance ----------------------------------------------
    def _payment(self, row: Mapping[str, Any]) -> Payment:
        s = self.schema
        return Payment(
            payment_means_code=to_text(resolve(row, s.payment_means)),
            payee_financial_account=to_text(resolve(row, s.payee_account)),
            payment_terms=to_text(resolve(row, s.payment_terms)),
            prepaid_payment=PrepaidPayment(
                id=to_text(resolve(row, s.prepaid_id)),
                amount=to_number(resolve(row, s.prepaid_amount)),
                date=convert_excel_date(resolve(row, s.prepaid_date)),
                time=to_text(resolve(row, s.prepaid_time)),
            ),
        )

    def _allowance(self, row: Mapping[str, Any]) -> AllowanceCharge:
        s = self.schema
        return AllowanceCharge(
            indicator=to_flag(resolve(row, s.allowance_indicator)),
            reason=to_text(resolve(row, s.allowance_reason)),
            amount=to_number(resolve(row, s.allowance_amount)),
        )

    # -- line items -------------------------------------------------------
    def _line_allowance(self, row: Mapping[str, Any], cols: LineColumns) -> AllowanceCharge:
        return AllowanceCharge(
            indicator=to_flag(resolve(row, cols.charge_indicator)),
            reason=to_text(resolve(row, cols.charge_reason)),
            multiplier=to_number(resolve(row, cols.charge_multiplier)),
            amount=to_number(resolve(row, cols.charge_amount)),
        )

    def _line_item(self, row: Mapping[str, Any], cols: LineColumns) -> LineItem:
        d = self.defaults
        unit_price = to_number(resolve(row, cols.unit_price))
        subtotal = to_number(resolve(row, cols.price_subtotal))
        return LineItem(
            line_id=to_text(resolve(row, cols.line_id)),
            quantity=to_number(resolve(row, cols.quantity)),
            unit_code=to_text(resolve(row, cols.unit_code)),
            unit_price=unit_price,
            line_extension_amount=to_number(resolve(row, cols.line_extension_amount)),
            allowance_charges=[self._line_allowance(row, cols)],
            tax_amount=to_number(resolve(row, cols.tax_total)),
            tax_subtotal=TaxSubtotal(
                taxable_amount=to_number(resolve(row, cols.taxable_amount)),
                tax_amount=to_number(resolve(row, cols.tax_amount)),
                category=TaxCategory(
                    id=to_text(resolve(row, cols.tax_category)) or d.tax_category_id,
                    percent=to_number(resolve(row, cols.tax_percent)),
                    exemption_reason=to_text(resolve(row, cols.tax_exemption_reason)),
                    tax_scheme=TaxScheme(
                        id=to_text(resolve(row, cols.tax_scheme_id)) or d.tax_scheme_id,
                        scheme_id=to_text(resolve(row, cols.tax_scheme_list_id)) or d.tax_scheme_list_id,
                        scheme_agency_id=(
                            to_text(resolve(row, cols.tax_scheme_agency_id)) or d.tax_scheme_agency_id
                        ),
                    ),
                ),
            ),
            classification=ItemClassification(
                code=to_text(resolve(row, cols.classification_code)),
                type=to_text(resolve(row, cols.classification_type)),
                description=to_text(resolve(row, cols.description)),
                origin_country=to_text(resolve(row, cols.origin_country)),
            ),
            price=Price(amount=unit_price, subtotal=subtotal, extension=subtotal),
        )

    def _totals(self, row: Mapping[str, Any]) -> MonetaryTotals:
        s = self.schema
        return MonetaryTotals(
            line_extension_amount=to_number(resolve(row, s.total_line_extension)),
            tax_exclusive_amount=to_number(resolve(row, s.total_tax_exclusive)),
            tax_inclusive_amount=to_number(resolve(row, s.total_tax_inclusive)),
            allowance_total_amount=to_number(resolve(row, s.total_allowance)),
            charge_total_amount=to_number(resolve(row, s.total_charge)),
            payable_rounding_amount=to_number(resolve(row, s.total_rounding)),
            payable_amount=to_number(resolve(row, s.total_payable)),
        )


class InvoiceBasedStrategy(_StrategyBase):
    """Every row with an invoice number is a complete document."""

    schema: InvoiceBasedSchema

    def __init__(
        self,
        schema: InvoiceBasedSchema,
        defaults: DefaultValues,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        super().__init__(schema, defaults, clock)

    def is_document_start(self, row: Mapping[str, Any]) -> bool:
        """Row carries something in the invoice column other than a label."""
        raw = invoice_number_text(resolve(row, self.schema.invoice))
        if raw is None:
            return False
        text = raw.strip()
        return bool(text) and text not in INVOICE_LABELS

    def _address_line(self, row: Mapping[str, Any], base: str) -> str | None:
        start = int(base)
        slots = [resolve(row, str(start + i)) for i in range(self.schema.address_slots)]
        return join_address_fragments(slots)

    def _identifications(self, row: Mapping[str, Any], cols: PartyColumns) -> list[PartyIdentification]:
        idents = []
        for scheme, column in zip(SCHEME_TYPES, (cols.tin, cols.brn, cols.sst, cols.ttx), strict=True):
            # 値が無くても NA として 4 種すべて出力する
            value = to_text(resolve(row, column)) if column else None
            idents.append(PartyIdentification(id=value, scheme_type=scheme))
        return idents

    def _party(self, row: Mapping[str, Any], cols: PartyColumns, **extras: Any) -> OrganizationParty:
        idents = self._identifications(row, cols)
        primary = to_text(resolve(row, cols.id)) if cols.id else idents[0].id
        return OrganizationParty(
            id=primary,
            identifications=idents,
            name=to_text(resolve(row, cols.name)),
            address=self._address(row, cols, self._address_line(row, cols.address)),
            contact=self._contact(row, cols),
            **extras,
        )

    def _delivery(self, row: Mapping[str, Any]) -> DeliveryParty:
        party = self._party(row, self.schema.delivery)
        return DeliveryParty(
            id=party.id,
            identifications=party.identifications,
            name=party.name,
            address=party.address,
            contact=party.contact,
            shipment=self._shipment(row),
        )

    def _summary(self, row: Mapping[str, Any], items: Sequence[LineItem]) -> DocumentSummary:
        s = self.schema
        d = self.defaults
        first = items[0].tax_subtotal.category if items else None
        rate = (first.percent if first is not None else 0.0) or to_number(resolve(row, s.tax_rate))
        category_id = (first.id if first is not None else None) or to_text(resolve(row, s.tax_category))
        reason = (first.exemption_reason if first is not None else None) or to_text(
            resolve(row, s.tax_exemption_reason)
        )
        scheme = first.tax_scheme if first is not None else TaxScheme(
            id=to_text(resolve(row, s.tax_scheme)) or d.tax_scheme_id,
            scheme_id=d.tax_scheme_list_id,
            scheme_agency_id=d.tax_scheme_agency_id,
        )
        return DocumentSummary(
            amounts=self._totals(row),
            tax=TaxSummary(
                total_amount=to_number(resolve(row, s.tax_total)),
                taxable_amount=to_number(resolve(row, s.tax_taxable_amount)),
                exempted_amount=to_number(resolve(row, s.tax_exempted_amount)),
                rate=rate,
                type_code=category_id,
                exemption_reason=reason,
                category=TaxCategory(
                    id=category_id or d.tax_category_id,
                    percent=rate,
                    exemption_reason=reason,
                    tax_scheme=scheme,
                ),
            ),
        )

    def build(self, row: Mapping[str, Any], context: BuildContext) -> InvoiceDocument:
        s = self.schema
        raw_invoice = invoice_number_text(resolve(row, s.invoice))
        if raw_invoice is None or raw_invoice.strip() in ("", NA_LITERAL):
            raise DocumentBuildError("Missing invoice number", row_number=context.row_number)
        if not is_invoice_row(row):
            raise DocumentBuildError(
                f"Invalid invoice number: {raw_invoice}",
                row_number=context.row_number,
                invoice_no=raw_invoice,
            )

        cols = s.line
        items: list[LineItem] = []
        if any(has_value(resolve(row, c)) for c in (cols.line_id, cols.quantity, cols.line_extension_amount)):
            items.append(self._line_item(row, cols))
        else:
            logger.debug("row %d has no line item data, header-only document", context.row_number)

        return InvoiceDocument(
            header=self._header(row, raw_invoice),
            supplier=self._party(row, s.supplier, **self._supplier_extras(row)),
            buyer=self._party(row, s.buyer),
            delivery=self._delivery(row),
            items=items,
            summary=self._summary(row, items),
            allowance_charge=self._allowance(row),
            payment=self._payment(row),
            source_row=context.row_number,
        )

    def build_all(self, rows: Sequence[Mapping[str, Any]], metadata_rows: int = 2) -> BuildOutcome:
        outcome = BuildOutcome()
        for index, row in enumerate(rows):
            if not self.is_document_start(row):
                continue
            position = outcome.document_starts
            outcome.document_starts += 1
            context = BuildContext(rows=rows, row_index=index, metadata_rows=metadata_rows)
            try:
                outcome.documents.append(self.build(row, context))
            except DocumentBuildError as e:
                logger.warning("row %d skipped: %s", e.row_number, e)
                outcome.failures.append(
                    BuildFailure(index=position, row_number=e.row_number, invoice_no=e.invoice_no, error=str(e))
                )
        return outcome


class LegacyStrategy(_StrategyBase):
    """Header / Line / Footer row groups."""

    schema: LegacySchema

    def __init__(
        self,
        schema: LegacySchema,
        defaults: DefaultValues,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        super().__init__(schema, defaults, clock)

    def _following(
        self,
        rows: Sequence[Mapping[str, Any]],
        start: int,
        count: int,
        metadata_rows: int,
    ) -> list[Mapping[str, Any]]:
        """Rows below the header used for ids / address lines.

        Stops at a row tagged H or F: tagging wins over the fixed offset.
        """
        found: list[Mapping[str, Any]] = []
        for offset in range(1, count + 1):
            index = start + offset
            if index >= len(rows):
                break
            row_type = legacy_row_type(rows[index])
            if row_type in ("H", "F"):
                logger.debug(
                    "row %d: id / address rows end at %s row %d",
                    sheet_row_number(start, metadata_rows),
                    row_type,
                    sheet_row_number(index, metadata_rows),
                )
                break
            found.append(rows[index])
        return found

    def _identifications(
        self,
        header: Mapping[str, Any],
        scheme_rows: Sequence[Mapping[str, Any]],
        cols: PartyColumns,
    ) -> list[PartyIdentification]:
        idents: list[PartyIdentification] = []
        primary = to_text(resolve(header, cols.id)) if cols.id else None
        if primary is not None:
            scheme = (to_text(resolve(header, cols.scheme)) if cols.scheme else None) or "TIN"
            idents.append(PartyIdentification(id=primary, scheme_type=scheme))
        for scheme, row in zip(self.schema.scheme_rows, scheme_rows, strict=False):
            value = to_text(resolve(row, cols.id)) if cols.id else None
            if value is not None:
                idents.append(PartyIdentification(id=value, scheme_type=scheme))
        return idents

    def _party(
        self,
        header: Mapping[str, Any],
        below: Sequence[Mapping[str, Any]],
        cols: PartyColumns,
        **extras: Any,
    ) -> OrganizationParty:
        line = join_address_fragments(
            [resolve(header, cols.address)]
            + [resolve(r, cols.address) for r in below[: self.schema.address_rows]]
        )
        return OrganizationParty(
            id=to_text(resolve(header, cols.id)) if cols.id else None,
            identifications=self._identifications(header, below, cols),
            name=to_text(resolve(header, cols.name)),
            address=self._address(header, cols, line),
            contact=self._contact(header, cols),
            **extras,
        )

    def _open(
        self,
        header: Mapping[str, Any],
        context: BuildContext,
    ) -> InvoiceDocument:
        s = self.schema
        invoice_no = invoice_number_text(resolve(header, s.invoice))
        if invoice_no is None or invoice_no.strip() in ("", NA_LITERAL):
            raise DocumentBuildError("Missing invoice number", row_number=context.row_number)

        count = max(len(s.scheme_rows), s.address_rows)
        below = self._following(context.rows, context.row_index, count, context.metadata_rows)
        delivery = self._party(header, below, s.delivery)
        return InvoiceDocument(
            header=self._header(header, invoice_no),
            supplier=self._party(header, below, s.supplier, **self._supplier_extras(header)),
            buyer=self._party(header, below, s.buyer),
            delivery=DeliveryParty(
                id=delivery.id,
                identifications=delivery.identifications,
                name=delivery.name,
                address=delivery.address,
                contact=delivery.contact,
                shipment=self._shipment(header),
            ),
            items=[],
            summary=DocumentSummary(),
            allowance_charge=self._allowance(header),
            payment=self._payment(header),
            source_row=context.row_number,
        )

    def _add_line(self, items: list[LineItem], row: Mapping[str, Any], row_number: int) -> None:
        cols = self.schema.line
        if not (
            has_value(resolve(row, cols.line_id))
            and has_value(resolve(row, cols.quantity))
            and has_value(resolve(row, cols.line_extension_amount))
        ):
            logger.debug("row %d: incomplete line item ignored", row_number)
            return
        item = self._line_item(row, cols)
        for pos, existing in enumerate(items):
            if existing.line_id == item.line_id:
                # 同一行 ID は追加の割引/手数料としてまとめる
                items[pos] = replace(
                    existing,
                    allowance_charges=existing.allowance_charges + item.allowance_charges,
                )
                return
        items.append(item)

    def _footer(self, row: Mapping[str, Any]) -> DocumentSummary:
        s = self.schema
        d = self.defaults
        rate = to_number(resolve(row, s.footer_tax_rate))
        category_id = to_text(resolve(row, s.footer_tax_category)) or d.tax_category_id
        reason = to_text(resolve(row, s.footer_tax_exemption_reason))
        return DocumentSummary(
            amounts=self._totals(row),
            tax=TaxSummary(
                total_amount=to_number(resolve(row, s.footer_tax_total)),
                taxable_amount=to_number(resolve(row, s.footer_taxable_amount)),
                rate=rate,
                type_code=category_id,
                exemption_reason=reason,
                category=TaxCategory(
                    id=category_id,
                    percent=rate,
                    exemption_reason=reason,
                    tax_scheme=TaxScheme(
                        id=to_text(resolve(row, s.footer_tax_scheme)) or d.tax_scheme_id,
                        scheme_id=d.tax_scheme_list_id,
                        scheme_agency_id=d.tax_scheme_agency_id,
                    ),
                ),
            ),
        )

    def _build_group(
        self,
        header: Mapping[str, Any],
        context: BuildContext,
        types: Sequence[str | None],
    ) -> tuple[InvoiceDocument, int]:
        """Build the document opened at ``context.row_index``.

        Returns the document and the index of the first row after the group.
        """
        document = self._open(header, context)
        items: list[LineItem] = []
        summary: DocumentSummary | None = None
        rows = context.rows
        index = context.row_index + 1
        while index < len(rows):
            row_type = types[index]
            if row_type == "H":
                break
            if row_type == "L":
                self._add_line(items, rows[index], sheet_row_number(index, context.metadata_rows))
            elif row_type == "F":
                summary = self._footer(rows[index])
                index += 1
                break
            index += 1
        if summary is None:
            logger.info("invoice %s has no footer row, flushed without totals", document.invoice_no)
            summary = document.summary
        return replace(document, items=items, summary=summary), index

    def build(self, row: Mapping[str, Any], context: BuildContext) -> InvoiceDocument:
        types = [legacy_row_type(r) for r in context.rows]
        document, _ = self._build_group(row, context, types)
        return document

    def build_all(self, rows: Sequence[Mapping[str, Any]], metadata_rows: int = 2) -> BuildOutcome:
        outcome = BuildOutcome()
        types = [legacy_row_type(r) for r in rows]
        index = 0
        while index < len(rows):
            row_type = types[index]
            if row_type != "H":
                if row_type in ("L", "F"):
                    message = (
                        f"Row {sheet_row_number(index, metadata_rows)}: {row_type} row "
                        "without an open invoice skipped"
                    )
                    logger.info(message)
                    outcome.warnings.append(message)
                index += 1
                continue
            position = outcome.document_starts
            outcome.document_starts += 1
            context = BuildContext(rows=rows, row_index=index, metadata_rows=metadata_rows)
            try:
                document, index = self._build_group(rows[index], context, types)
            except DocumentBuildError as e:
                logger.warning("row %d skipped: %s", e.row_number, e)
                outcome.failures.append(
                    BuildFailure(index=position, row_number=e.row_number, invoice_no=e.invoice_no, error=str(e))
                )
                index += 1
                continue
            outcome.documents.append(document)
        return outcome


class DocumentBuilder:
    """Builds invoice documents for one sheet layout.

    The layout is decided beforehand (``detect_layout``) and fixed for the
    builder's lifetime. ``UNKNOWN`` is rejected with LayoutIndeterminateError.
    """

    def __init__(
        self,
        layout: SheetLayout,
        *,
        schema: LayoutSchema | None = None,
        defaults: DefaultValues | None = None,
        metadata_rows: int = 2,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        schema = schema or get_schema()
        defaults = defaults or DefaultValues()
        self.layout = layout
        self.metadata_rows = metadata_rows
        self.strategy: LayoutStrategy
        if layout is SheetLayout.INVOICE_BASED:
            self.strategy = InvoiceBasedStrategy(schema.invoice_based, defaults, clock)
        elif layout is SheetLayout.LEGACY_HEADER_LINE_FOOTER:
            self.strategy = LegacyStrategy(schema.legacy, defaults, clock)
        else:
            raise LayoutIndeterminateError("Unable to determine Excel structure type")

    def build(self, row: Mapping[str, Any], context: BuildContext | None = None) -> InvoiceDocument:
        """Build the document opened by ``row``.

        Without a context the row is treated as a sheet of its own.
        """
        if context is None:
            context = BuildContext(rows=[row], row_index=0, metadata_rows=self.metadata_rows)
        return self.strategy.build(row, context)

    def build_all(self, rows: Sequence[Mapping[str, Any]]) -> BuildOutcome:
        return self.strategy.build_all(rows, self.metadata_rows)
