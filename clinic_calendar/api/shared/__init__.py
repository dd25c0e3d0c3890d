"""
Shared utilities for the Clinic Calendar API.
"""

from .validators import (
    validate_date_string,
    validate_direction,
    validate_docname,
    validate_status,
    validate_view,
)

__all__ = [
    "validate_date_string",
    "validate_direction",
    "validate_docname",
    "validate_status",
    "validate_view",
]
