"""Validation, document construction and batch processing services."""
