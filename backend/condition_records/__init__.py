"""Condition Records - patient condition data layer."""

__version__ = "0.1.0"
