"""
Utility functions and helpers for resource-schema.

This module provides utility functions used across the resource-schema codebase.
"""

from .json_pointer import NOT_FOUND, JSONPointer, PointerResolution

__all__ = ["JSONPointer", "PointerResolution", "NOT_FOUND"]
