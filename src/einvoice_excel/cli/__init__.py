"""Command-line driver (``python -m einvoice_excel.cli``)."""
