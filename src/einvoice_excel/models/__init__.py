"""Domain models for the LHDN e-Invoice spreadsheet mapper.

This package contains the data contracts shared by the mapping services: raw
rows, the sheet layout variant, the reconstructed invoice document graph, the
row validation report and the batch result.
"""

from .batch_result import BatchResult, BatchSummary, BatchValidation, InvalidInvoice, LogEntry
from .config_models import DefaultValues, MapperConfig
from .document import InvoiceDocument, LineItem, OrganizationParty
from .error_record import ErrorRecord
from .layout import SheetLayout
from .row_data import RawRow
from .validation_report import RowValidation, ValidationReport

__all__ = [
    # Configuration models
    "DefaultValues",
    "MapperConfig",
    # Sheet models
    "RawRow",
    "SheetLayout",
    # Document models
    "InvoiceDocument",
    "LineItem",
    "OrganizationParty",
    # Reporting models
    "RowValidation",
    "ValidationReport",
    "BatchResult",
    "BatchSummary",
    "BatchValidation",
    "InvalidInvoice",
    "LogEntry",
    "ErrorRecord",
]
