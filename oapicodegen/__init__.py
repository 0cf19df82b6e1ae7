"""Describe OpenAPI 3 documents as Go types, parameters, bodies and operations for code generation."""

__version__ = "0.1.0"