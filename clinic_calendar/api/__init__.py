"""
Clinic Calendar API

Structure:
    api/
    ├── __init__.py              # This file
    ├── calendar_api.py          # Whitelisted calendar endpoints
    └── shared/                  # Shared utilities
        ├── __init__.py
        └── validators.py        # Argument validators

Usage:
    frappe.call("clinic_calendar.api.calendar_api.get_calendar_view", ...)
"""

from . import shared

__all__ = [
    "shared",
]
