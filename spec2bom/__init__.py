"""Spec-to-BOM client library and credential-holding proxy."""

__version__ = "0.1.0"
