"""Availability resolution and slot reservation engine for tenant booking pages."""

__version__ = "0.1.0"
