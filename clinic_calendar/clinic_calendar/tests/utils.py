"""
Shared helpers for the calendar view tests.
"""

import unittest
from unittest.mock import patch

from clinic_calendar.clinic_calendar.calendar_view.models import Appointment, AppointmentStatus


def make_appointment(
	appointment_id,
	date="2024-01-15",
	start_time=None,
	duration=30,
	status=AppointmentStatus.UPCOMING
):
	return Appointment(
		id=appointment_id,
		date=date,
		status=status,
		start_time=start_time,
		duration_minutes=duration,
	)


class CalendarTestCase(unittest.TestCase):
	"""
	Base TestCase that replaces frappe.logger.

	Outside a bench, frappe.logger() tries to open ../logs/<module>.log.
	"""

	def setUp(self):
		patcher = patch("frappe.logger")
		self.logger_factory = patcher.start()
		self.logger = self.logger_factory.return_value
		self.addCleanup(patcher.stop)
