from __future__ import annotations

from dataclasses import dataclass

"""Versioned positional schema tables.

Each table maps a logical document field to the column key that holds it in a
given export format. Keys are passed through ``field_resolver.resolve`` so
``"15"`` matches ``__EMPTY_15``, ``_15``, ``Column15`` and friends.

A new export tool version becomes a new table registered in ``SCHEMAS``;
the document builder never hard-codes column numbers.
"""

__all__ = [
    "PartyColumns",
    "LineColumns",
    "InvoiceBasedSchema",
    "LegacySchema",
    "LayoutSchema",
    "LAYOUT_SCHEMA_V1",
    "SCHEMAS",
    "get_schema",
]


@dataclass(frozen=True)
class PartyColumns:
    """Column keys for one organization party (supplier / buyer / delivery).

    Invoice-based sheets carry one column per identification scheme
    (``tin``/``brn``/``sst``/``ttx``). Legacy sheets carry the primary id in
    ``id`` (its scheme name optionally in ``scheme``) and the BRN/SST/TTX ids
    in the same ``id`` column of the 3 rows below the header row.
    """
    name: str
    address: str  # first address slot
    city: str
    postcode: str
    state: str
    country: str
    country_list_id: str
    country_list_agency_id: str
    phone: str | None = None
    email: str | None = None
    id: str | None = None
    scheme: str | None = None
    tin: str | None = None
    brn: str | None = None
    sst: str | None = None
    ttx: str | None = None
    default_country: bool = False  # country 欠落時に既定値 (MYS)
    default_country_scheme: bool = False  # listID / agencyID 欠落時に既定値


@dataclass(frozen=True)
class LineColumns:
    line_id: str
    quantity: str
    unit_code: str
    line_extension_amount: str
    charge_indicator: str
    charge_reason: str
    charge_multiplier: str
    charge_amount: str
    tax_total: str
    taxable_amount: str
    tax_amount: str
    tax_percent: str
    tax_category: str
    tax_exemption_reason: str
    tax_scheme_id: str
    tax_scheme_list_id: str
    tax_scheme_agency_id: str
    classification_code: str
    classification_type: str
    description: str
    origin_country: str
    unit_price: str
    price_subtotal: str


@dataclass(frozen=True)
class InvoiceBasedSchema:
    """One row per invoice: every field of a document lives on that row."""
    invoice: str
    uuid: str
    internal_id: str
    invoice_type: str
    currency: str
    tax_currency: str
    exchange_rate: str
    period_start: str
    period_end: str
    period_description: str
    billing_reference: str
    billing_reference_type: str
    supplier_additional_account: str
    supplier_scheme_agency: str
    supplier_industry_code: str
    supplier_industry_name: str
    supplier: PartyColumns
    buyer: PartyColumns
    delivery: PartyColumns
    shipment_id: str
    freight_indicator: str
    freight_reason: str
    freight_amount: str
    payment_means: str
    payee_account: str
    payment_terms: str
    prepaid_id: str
    prepaid_amount: str
    prepaid_date: str
    prepaid_time: str
    allowance_indicator: str
    allowance_reason: str
    allowance_amount: str
    tax_taxable_amount: str
    tax_exempted_amount: str
    tax_category: str
    tax_scheme: str
    tax_total: str
    tax_rate: str
    tax_exemption_reason: str
    total_line_extension: str
    total_tax_exclusive: str
    total_tax_inclusive: str
    total_allowance: str
    total_charge: str
    total_rounding: str
    total_payable: str
    line: LineColumns
    address_slots: int = 2  # 連続する住所列の数


@dataclass(frozen=True)
class LegacySchema:
    """Header / Line / Footer row groups."""
    invoice: str
    uuid: str
    internal_id: str
    invoice_type: str
    currency: str
    tax_currency: str
    exchange_rate: str
    period_start: str
    period_end: str
    period_description: str
    billing_reference: str
    billing_reference_type: str
    supplier_additional_account: str
    supplier_scheme_agency: str
    supplier_industry_code: str
    supplier_industry_name: str
    supplier: PartyColumns
    buyer: PartyColumns
    delivery: PartyColumns
    shipment_id: str
    freight_indicator: str
    freight_reason: str
    freight_amount: str
    payment_means: str
    payee_account: str
    payment_terms: str
    prepaid_id: str
    prepaid_amount: str
    prepaid_date: str
    prepaid_time: str
    allowance_indicator: str
    allowance_reason: str
    allowance_amount: str
    footer_taxable_amount: str
    footer_tax_category: str
    footer_tax_scheme: str
    footer_tax_total: str
    footer_tax_rate: str
    footer_tax_exemption_reason: str
    total_line_extension: str
    total_tax_exclusive: str
    total_tax_inclusive: str
    total_allowance: str
    total_charge: str
    total_rounding: str
    total_payable: str
    line: LineColumns
    scheme_rows: tuple[str, ...] = ("BRN", "SST", "TTX")  # header+1, +2, +3
    address_rows: int = 3  # header 行の下に続く住所行の数


@dataclass(frozen=True)
class LayoutSchema:
    version: str
    invoice_based: InvoiceBasedSchema
    legacy: LegacySchema


_INVOICE_BASED_V1 = InvoiceBasedSchema(
    invoice="Invoice",
    uuid="0",
    internal_id="1",
    invoice_type="4",
    currency="5",
    tax_currency="6",
    exchange_rate="7",
    period_start="InvoicePeriod",
    period_end="8",
    period_description="9",
    billing_reference="AdditionalDocumentReference",
    billing_reference_type="10",
    supplier_additional_account="Supplier",
    supplier_scheme_agency="12",
    supplier_industry_code="13",
    supplier_industry_name="14",
    supplier=PartyColumns(
        tin="15", brn="16", sst="20", ttx="21",
        city="22", postcode="23", state="24", address="25",
        country="28", country_list_id="29", country_list_agency_id="30",
        name="31", phone="32", email="33",
    ),
    buyer=PartyColumns(
        tin="34", brn="Buyer", sst="38", ttx="39",
        city="40", postcode="41", state="42", address="43",
        country="46", country_list_id="47", country_list_agency_id="48",
        name="49", phone="50", email="51",
        default_country_scheme=True,
    ),
    delivery=PartyColumns(
        id="Delivery", tin="Delivery", brn="Delivery", sst="Delivery", ttx="Delivery",
        city="58", postcode="59", state="60", address="61",
        country="64", country_list_id="65", country_list_agency_id="66",
        name="67",
        default_country=True, default_country_scheme=True,
    ),
    shipment_id="68",
    freight_indicator="69",
    freight_reason="70",
    freight_amount="71",
    payment_means="PaymentMeans",
    payee_account="72",
    payment_terms="PaymentTerms",
    prepaid_id="PrepaidPayment",
    prepaid_amount="73",
    prepaid_date="74",
    prepaid_time="75",
    allowance_indicator="InvoiceAllowanceCharge",
    allowance_reason="76",
    allowance_amount="77",
    tax_taxable_amount="78",
    tax_exempted_amount="79",
    tax_category="80",
    tax_scheme="81",
    tax_total="Invoice_TaxTotal",
    tax_rate="99",
    tax_exemption_reason="101",
    total_line_extension="LegalMonetaryTotal",
    total_tax_exclusive="84",
    total_tax_inclusive="85",
    total_allowance="86",
    total_charge="87",
    total_rounding="88",
    total_payable="89",
    line=LineColumns(
        line_id="InvoiceLine",
        quantity="90",
        unit_code="91",
        line_extension_amount="92",
        charge_indicator="93",
        charge_reason="94",
        charge_multiplier="95",
        charge_amount="96",
        tax_total="InvoiceLine_TaxTotal",
        taxable_amount="97",
        tax_amount="98",
        tax_percent="99",
        tax_category="100",
        tax_exemption_reason="101",
        tax_scheme_id="102",
        tax_scheme_list_id="103",
        tax_scheme_agency_id="104",
        classification_code="InvoiceItem",
        classification_type="105",
        description="106",
        origin_country="107",
        unit_price="108",
        price_subtotal="109",
    ),
)

_LEGACY_V1 = LegacySchema(
    invoice="Invoice",
    uuid="1",
    internal_id="2",
    invoice_type="5",
    currency="6",
    tax_currency="7",
    exchange_rate="8",
    period_start="InvoicePeriod",
    period_end="9",
    period_description="10",
    billing_reference="AdditionalDocumentReference",
    billing_reference_type="11",
    supplier_additional_account="Supplier",
    supplier_scheme_agency="13",
    supplier_industry_code="14",
    supplier_industry_name="15",
    supplier=PartyColumns(
        id="16", scheme="17",
        city="18", postcode="19", state="20", address="21",
        country="22", country_list_id="23", country_list_agency_id="24",
        name="25", phone="26", email="27",
    ),
    buyer=PartyColumns(
        id="Buyer", scheme="28",
        city="29", postcode="30", state="31", address="32",
        country="33", country_list_id="34", country_list_agency_id="35",
        name="36", phone="37", email="38",
        default_country_scheme=True,
    ),
    delivery=PartyColumns(
        id="Delivery", scheme="39",
        city="40", postcode="41", state="42", address="43",
        country="44", country_list_id="45", country_list_agency_id="46",
        name="47",
    ),
    shipment_id="48",
    freight_indicator="49",
    freight_reason="50",
    freight_amount="51",
    payment_means="PaymentMeans",
    payee_account="52",
    payment_terms="PaymentTerms",
    prepaid_id="PrepaidPayment",
    prepaid_amount="53",
    prepaid_date="54",
    prepaid_time="55",
    allowance_indicator="InvoiceAllowanceCharge",
    allowance_reason="56",
    allowance_amount="57",
    footer_taxable_amount="58",
    footer_tax_category="60",
    footer_tax_scheme="61",
    footer_tax_total="Invoice_TaxTotal",
    footer_tax_rate="79",
    footer_tax_exemption_reason="81",
    total_line_extension="LegalMonetaryTotal",
    total_tax_exclusive="64",
    total_tax_inclusive="65",
    total_allowance="66",
    total_charge="67",
    total_rounding="68",
    total_payable="69",
    line=LineColumns(
        line_id="InvoiceLine",
        quantity="70",
        unit_code="71",
        line_extension_amount="72",
        charge_indicator="73",
        charge_reason="74",
        charge_multiplier="75",
        charge_amount="76",
        tax_total="InvoiceLine_TaxTotal",
        taxable_amount="77",
        tax_amount="78",
        tax_percent="79",
        tax_category="80",
        tax_exemption_reason="81",
        tax_scheme_id="82",
        tax_scheme_list_id="83",
        tax_scheme_agency_id="84",
        classification_code="InvoiceItem",
        classification_type="85",
        description="86",
        origin_country="87",
        unit_price="88",
        price_subtotal="89",
    ),
)

LAYOUT_SCHEMA_V1 = LayoutSchema(version="v1", invoice_based=_INVOICE_BASED_V1, legacy=_LEGACY_V1)

SCHEMAS: dict[str, LayoutSchema] = {
    LAYOUT_SCHEMA_V1.version: LAYOUT_SCHEMA_V1,
}


def get_schema(version: str = "v1") -> LayoutSchema:
    try:
        return SCHEMAS[version]
    except KeyError:
        raise ValueError(f"unknown schema version: {version}") from None
