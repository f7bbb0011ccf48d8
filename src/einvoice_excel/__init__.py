"""LHDN e-Invoice spreadsheet mapper.

Turns the rows of an uploaded e-Invoice workbook (invoice-based or legacy
Header/Line/Footer layout) into invoice document graphs.
"""

from .config.loader import ConfigError, load_config
from .excel.reader import SheetReadError, read_workbook_rows
from .mapping.field_resolver import resolve
from .mapping.layout_detector import LayoutIndeterminateError, detect_layout
from .models import BatchResult, InvoiceDocument, MapperConfig, SheetLayout, ValidationReport
from .services.batch_processor import BatchOptions, process_multiple_invoices
from .services.document_builder import BuildContext, DocumentBuilder, DocumentBuildError
from .services.extraction import process_manual_upload_excel_data
from .services.row_validator import validate_excel_rows, validate_rows

__all__ = [
    "BatchOptions",
    "BatchResult",
    "BuildContext",
    "ConfigError",
    "DocumentBuildError",
    "DocumentBuilder",
    "InvoiceDocument",
    "LayoutIndeterminateError",
    "MapperConfig",
    "SheetLayout",
    "SheetReadError",
    "ValidationReport",
    "detect_layout",
    "load_config",
    "process_manual_upload_excel_data",
    "process_multiple_invoices",
    "read_workbook_rows",
    "resolve",
    "validate_excel_rows",
    "validate_rows",
]
