"""Mapper configuration loading."""
