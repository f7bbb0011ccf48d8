from __future__ import annotations

from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any

"""InvoiceDocument graph.

Documents are reconstructed from spreadsheet rows by the document builder and
handed to the external LHDN mapper. Internally "not provided" is ``None``; the
literal ``"NA"`` sentinel only appears when a document is serialized with
``to_dict()``. Numeric monetary/tax fields are always concrete numbers (0 when
absent), so they never carry ``None``.
"""

__all__ = [
    "NOT_APPLICABLE",
    "PartyIdentification",
    "Address",
    "Contact",
    "OrganizationParty",
    "FreightAllowanceCharge",
    "Shipment",
    "DeliveryParty",
    "DocumentReference",
    "InvoicePeriod",
    "InvoiceHeader",
    "PrepaidPayment",
    "Payment",
    "AllowanceCharge",
    "TaxScheme",
    "TaxCategory",
    "TaxSubtotal",
    "ItemClassification",
    "Price",
    "LineItem",
    "MonetaryTotals",
    "TaxSummary",
    "DocumentSummary",
    "DocumentMetadata",
    "DocumentAnalytics",
    "InvoiceDetails",
    "InvoiceValidation",
    "InvoiceDocument",
    "to_wire",
]

NOT_APPLICABLE = "NA"


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_wire(value: Any) -> Any:
    """Serialize a document (or any part of it) to plain dict/list values.

    Keys become camelCase. ``None`` in a text field becomes ``"NA"``; fields
    declared with ``metadata={"nullable": True}`` keep ``None``.
    """
    if is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        for f in fields(value):
            raw = getattr(value, f.name)
            if raw is None and not f.metadata.get("nullable"):
                out[_camel(f.name)] = NOT_APPLICABLE
            else:
                out[_camel(f.name)] = to_wire(raw)
        return out
    if isinstance(value, (list, tuple)):
        return [to_wire(v) for v in value]
    if isinstance(value, dict):
        return {k: to_wire(v) for k, v in value.items()}
    return value


@dataclass(frozen=True)
class PartyIdentification:
    id: str | None
    scheme_type: str  # TIN | BRN | SST | TTX


@dataclass(frozen=True)
class Address:
    line: str | None = None
    city: str | None = None
    postcode: str | None = None
    state: str | None = None
    country: str | None = None
    country_list_id: str | None = None
    country_list_agency_id: str | None = None


@dataclass(frozen=True)
class Contact:
    phone: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class OrganizationParty:
    """Supplier, buyer or delivery recipient."""
    id: str | None
    identifications: list[PartyIdentification]
    name: str | None
    address: Address
    contact: Contact
    additional_account_id: str | None = None
    scheme_agency_name: str | None = None
    industry_classification_code: str | None = None
    industry_name: str | None = None

    def identification(self, scheme_type: str) -> str | None:
        for ident in self.identifications:
            if ident.scheme_type == scheme_type:
                return ident.id
        return None


@dataclass(frozen=True)
class FreightAllowanceCharge:
    indicator: bool = False
    reason: str | None = None
    amount: float = 0.0


@dataclass(frozen=True)
class Shipment:
    id: str | None = None
    freight_allowance_charge: FreightAllowanceCharge = field(default_factory=FreightAllowanceCharge)


@dataclass(frozen=True)
class DeliveryParty(OrganizationParty):
    shipment: Shipment = field(default_factory=Shipment)


@dataclass(frozen=True)
class DocumentReference:
    uuid: str | None = None
    internal_id: str | None = None
    billing_reference: str | None = None
    billing_reference_type: str | None = None


@dataclass(frozen=True)
class InvoicePeriod:
    start_date: str | None = None  # YYYY-MM-DD
    end_date: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class InvoiceHeader:
    invoice_no: str
    invoice_type: str | None
    document_currency_code: str | None
    tax_currency_code: str | None  # falls back to document_currency_code / default currency
    exchange_rate: float
    document_reference: DocumentReference
    issue_date: str  # processing date (UTC)
    issue_time: str  # processing time, HH:MM:SSZ
    invoice_period: InvoicePeriod


@dataclass(frozen=True)
class PrepaidPayment:
    id: str | None = None
    amount: float = 0.0
    date: str | None = None
    time: str | None = None


@dataclass(frozen=True)
class Payment:
    payment_means_code: str | None = None
    payee_financial_account: str | None = None
    payment_terms: str | None = None
    prepaid_payment: PrepaidPayment = field(default_factory=PrepaidPayment)


@dataclass(frozen=True)
class AllowanceCharge:
    indicator: bool = False  # True = charge, False = allowance
    reason: str | None = None
    amount: float = 0.0
    multiplier: float = 0.0


@dataclass(frozen=True)
class TaxScheme:
    id: str | None = None
    scheme_id: str | None = None
    scheme_agency_id: str | None = None


@dataclass(frozen=True)
class TaxCategory:
    id: str | None = None
    percent: float = 0.0
    exemption_reason: str | None = None
    tax_scheme: TaxScheme = field(default_factory=TaxScheme)


@dataclass(frozen=True)
class TaxSubtotal:
    taxable_amount: float = 0.0
    tax_amount: float = 0.0
    category: TaxCategory = field(default_factory=TaxCategory)


@dataclass(frozen=True)
class ItemClassification:
    code: str | None = None
    type: str | None = None
    description: str | None = None
    origin_country: str | None = None


@dataclass(frozen=True)
class Price:
    amount: float = 0.0
    subtotal: float = 0.0
    extension: float = 0.0


@dataclass(frozen=True)
class LineItem:
    line_id: str | None
    quantity: float
    unit_code: str | None
    unit_price: float
    line_extension_amount: float
    allowance_charges: list[AllowanceCharge]  # always at least one entry
    tax_amount: float
    tax_subtotal: TaxSubtotal
    classification: ItemClassification
    price: Price


@dataclass(frozen=True)
class MonetaryTotals:
    line_extension_amount: float = 0.0
    tax_exclusive_amount: float = 0.0
    tax_inclusive_amount: float = 0.0
    allowance_total_amount: float = 0.0
    charge_total_amount: float = 0.0
    payable_rounding_amount: float = 0.0
    payable_amount: float = 0.0


@dataclass(frozen=True)
class TaxSummary:
    total_amount: float = 0.0
    taxable_amount: float = 0.0
    exempted_amount: float = 0.0
    rate: float = 0.0
    type_code: str | None = None
    exemption_reason: str | None = None
    category: TaxCategory = field(default_factory=TaxCategory)


@dataclass(frozen=True)
class DocumentSummary:
    amounts: MonetaryTotals = field(default_factory=MonetaryTotals)
    tax: TaxSummary = field(default_factory=TaxSummary)


@dataclass(frozen=True)
class DocumentMetadata:
    """Batch-processing augmentation; not part of the canonical document."""
    processing_index: int
    processing_timestamp: str
    document_id: str
    status: str = "processed"


@dataclass(frozen=True)
class DocumentAnalytics:
    line_item_count: int
    total_amount: float
    tax_amount: float
    currency: str
    invoice_type: str


@dataclass(frozen=True)
class InvoiceDetails:
    """Flat listing view of an accepted document (upload preview tables)."""
    invoice_number: str
    supplier: str | None
    buyer: str | None
    total_amount: float
    tax_amount: float
    currency: str
    invoice_type: str
    issue_date: str
    line_item_count: int


@dataclass(frozen=True)
class InvoiceValidation:
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class InvoiceDocument:
    header: InvoiceHeader
    supplier: OrganizationParty
    buyer: OrganizationParty
    delivery: DeliveryParty
    items: list[LineItem]
    summary: DocumentSummary
    allowance_charge: AllowanceCharge
    payment: Payment
    source_row: int = field(default=-1, compare=False)  # 1-based sheet row of the opening row
    metadata: DocumentMetadata | None = field(default=None, metadata={"nullable": True})
    analytics: DocumentAnalytics | None = field(default=None, metadata={"nullable": True})
    invoice_details: InvoiceDetails | None = field(default=None, metadata={"nullable": True})
    validation: InvoiceValidation | None = field(default=None, metadata={"nullable": True})

    @property
    def invoice_no(self) -> str:
        return self.header.invoice_no

    def to_dict(self) -> dict[str, Any]:
        data = to_wire(self)
        # 付帯情報が無い場合はキーごと省く
        for key in ("metadata", "analytics", "invoiceDetails", "validation"):
            if data.get(key) is None:
                data.pop(key, None)
        return data
