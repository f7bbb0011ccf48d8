from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the e-Invoice spreadsheet mapper.

These are the typed domain values produced by ``einvoice_excel.config.loader``.
DefaultValues is a read-only constants table shared by every document build;
no process-wide mutable state hangs off it.
"""

__all__ = [
    "DefaultValues",
    "MapperConfig",
]


@dataclass(frozen=True)
class DefaultValues:
    """Fallbacks applied when a cell is absent.

    Text defaults not listed here stay ``None`` and serialize to ``"NA"``.
    """
    currency: str = "MYR"
    country: str = "MYS"
    country_list_id: str = "ISO3166-1"
    country_list_agency_id: str = "6"
    tax_scheme_id: str = "OTH"
    tax_scheme_list_id: str = "UN/ECE 5153"
    tax_scheme_agency_id: str = "6"
    tax_category_id: str = "01"
    scheme_agency_name: str = "CertEx"
    invoice_type: str = "01"


@dataclass(frozen=True)
class MapperConfig:
    """Root configuration for sheet mapping."""
    metadata_rows: int = 2  # descriptions row + field-mapping row before data rows
    schema_version: str = "v1"  # positional schema table to use
    error_log_dir: str = "logs"
    defaults: DefaultValues = field(default_factory=DefaultValues)
