from __future__ import annotations

from enum import Enum

"""SheetLayout enum.

A layout is decided once per batch by the layout detector and passed explicitly
to the row validator and the document builder.

- INVOICE_BASED: every row with a usable ``Invoice`` value is a complete document
- LEGACY_HEADER_LINE_FOOTER: rows tagged H/L/F; H + N*L + F form one document
- UNKNOWN: no row-type signal anywhere; nothing can be built from the sheet
"""

__all__ = [
    "SheetLayout",
]


class SheetLayout(Enum):
    INVOICE_BASED = "NEW_INVOICE_BASED"
    LEGACY_HEADER_LINE_FOOTER = "LEGACY_HLF"
    UNKNOWN = "UNKNOWN"

    @property
    def is_known(self) -> bool:
        return self is not SheetLayout.UNKNOWN
