"""
Calendar-specific Validators

Validation utilities for the calendar API arguments.
"""

import re
import frappe
from frappe import _

from clinic_calendar.clinic_calendar.calendar_view import date_keys
from clinic_calendar.clinic_calendar.calendar_view.models import AppointmentStatus, CalendarView
from clinic_calendar.clinic_calendar.calendar_view.labels import LTR, RTL


def validate_date_string(date_str: str, field_name: str = "date") -> str:
    """
    Validate date string format (YYYY-MM-DD) and that it is a real date.

    Args:
        date_str: Date string to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated date string

    Raises:
        frappe.ValidationError: If date format is invalid
    """
    if not date_str:
        frappe.throw(_(f"{field_name} is required"), frappe.ValidationError)

    date_str = str(date_str).strip()

    if date_keys.decode(date_str) is None:
        frappe.throw(
            _(f"Invalid {field_name} format. Use YYYY-MM-DD"), frappe.ValidationError
        )

    return date_str


def validate_view(view: str) -> str:
    """
    Validate the calendar view name.

    Returns:
        str: "monthly", "weekly" or "daily"

    Raises:
        frappe.ValidationError: If the view is not supported
    """
    if not view:
        return CalendarView.MONTHLY.value

    allowed = [item.value for item in CalendarView]
    view = str(view).strip().lower()

    if view not in allowed:
        frappe.throw(
            _(f"Invalid view. Use one of: {', '.join(allowed)}"), frappe.ValidationError
        )

    return view


def validate_status(status: str) -> str:
    """
    Validate an appointment status value.

    Raises:
        frappe.ValidationError: If the status is not one of the known values
    """
    allowed = [item.value for item in AppointmentStatus]
    status = str(status or "").strip().upper()

    if status not in allowed:
        frappe.throw(
            _(f"Invalid status. Use one of: {', '.join(allowed)}"), frappe.ValidationError
        )

    return status


def validate_direction(direction: str) -> str:
    """Validate the text direction flag (ltr/rtl). Empty means ltr."""
    direction = str(direction or LTR).strip().lower()

    if direction not in (LTR, RTL):
        frappe.throw(_("Invalid direction. Use ltr or rtl"), frappe.ValidationError)

    return direction


def validate_docname(name: str, field_name: str = "name") -> str:
    """
    Validate a document name (ID).

    Ensures the name is not too long and doesn't contain injection patterns.

    Args:
        name: Document name to validate
        field_name: Name of field for error messages

    Returns:
        str: Validated document name

    Raises:
        frappe.ValidationError: If name is invalid
    """
    if not name:
        frappe.throw(_(f"{field_name} is required"), frappe.ValidationError)

    name = str(name).strip()

    if len(name) > 140:
        frappe.throw(_(f"{field_name} is too long"), frappe.ValidationError)

    dangerous_patterns = [
        r"<script",
        r"javascript:",
        r"SELECT\s+",
        r"UPDATE\s+",
        r"DELETE\s+",
        r"DROP\s+",
        r"UNION\s+",
        r"--",
        r";",
    ]

    for pattern in dangerous_patterns:
        if re.search(pattern, name, re.IGNORECASE):
            frappe.throw(_(f"Invalid {field_name}"), frappe.ValidationError)

    return name
