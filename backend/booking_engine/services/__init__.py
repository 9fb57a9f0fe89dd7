"""Availability resolution engine services."""
