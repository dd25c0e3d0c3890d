"""
Tests for api/calendar_api.py and api/shared/validators.py

The database, realtime and translation calls are replaced with mocks so the
helpers behind the whitelisted endpoints can be tested without a site.
"""

import unittest
from datetime import date, time, timedelta
from unittest.mock import patch

import frappe

from clinic_calendar.api import calendar_api
from clinic_calendar.api.shared import (
	validate_date_string,
	validate_direction,
	validate_docname,
	validate_status,
	validate_view,
)
from clinic_calendar.clinic_calendar.calendar_view.models import AppointmentStatus, StatusChangeEvent
from clinic_calendar.clinic_calendar.calendar_view.settings import CalendarSettings
from clinic_calendar.clinic_calendar.tests.utils import CalendarTestCase


def _raise(msg, exc=frappe.ValidationError, *args, **kwargs):
	raise exc(msg)


class TestValidators(unittest.TestCase):
	"""Tests for the API argument validators."""

	def setUp(self):
		for target, kwargs in [
			("frappe.throw", {"side_effect": _raise}),
			("clinic_calendar.api.shared.validators._", {"side_effect": lambda msg: msg}),
		]:
			patcher = patch(target, **kwargs)
			patcher.start()
			self.addCleanup(patcher.stop)

	def test_valid_values(self):
		self.assertEqual(validate_date_string(" 2024-01-15 "), "2024-01-15")
		self.assertEqual(validate_view("Weekly"), "weekly")
		self.assertEqual(validate_view(None), "monthly")
		self.assertEqual(validate_status("cancel"), "CANCEL")
		self.assertEqual(validate_direction("RTL"), "rtl")
		self.assertEqual(validate_direction(None), "ltr")
		self.assertEqual(validate_docname("APT-0001"), "APT-0001")

	def test_invalid_values(self):
		"""Test that every invalid argument raises ValidationError."""
		calls = [
			(validate_date_string, "2024-02-30"),
			(validate_date_string, "15/01/2024"),
			(validate_date_string, ""),
			(validate_view, "yearly"),
			(validate_status, "DONE"),
			(validate_direction, "up"),
			(validate_docname, ""),
			(validate_docname, "x" * 141),
			(validate_docname, "APT'; DROP TABLE x"),
		]
		for validator, value in calls:
			with self.assertRaises(frappe.ValidationError, msg=f"{validator.__name__}({value!r})"):
				validator(value)


class TestNormalizeRecord(unittest.TestCase):
	"""Tests for the conversion of frappe.get_all rows."""

	def test_time_fields(self):
		"""Test Time columns returned as timedelta or time."""
		record = calendar_api.normalize_record({
			"name": "APT-1",
			"date": date(2024, 1, 15),
			"start_time": timedelta(hours=9, minutes=30),
			"end_time": time(10, 15),
			"duration_minutes": 45,
			"status": "UPCOMING",
			"patient_name": "Sara",
			"patient": "PAT-7",
		})

		self.assertEqual(record["id"], "APT-1")
		self.assertEqual(record["date"], "2024-01-15")
		self.assertEqual(record["startTime"], "09:30")
		self.assertEqual(record["endTime"], "10:15")
		self.assertEqual(record["patientId"], "PAT-7")

	def test_all_day_row(self):
		record = calendar_api.normalize_record({"name": "APT-2", "date": "2024-01-15", "start_time": None})
		self.assertIsNone(record["startTime"])


class TestCalendarHelpers(CalendarTestCase):
	"""Tests for fetch/persist/build helpers."""

	def test_fetch_appointments(self):
		"""Test that rows are read from the configured DocType in creation order."""
		rows = [{"name": "APT-1", "date": date(2024, 1, 15), "start_time": timedelta(hours=10), "status": "PENDING"}]
		settings = CalendarSettings(appointment_doctype="Patient Appointment")

		with patch("frappe.get_all", return_value=rows) as get_all:
			records = calendar_api.fetch_appointments(settings)

		get_all.assert_called_once_with(
			"Patient Appointment",
			fields=calendar_api.APPOINTMENT_FIELDS,
			order_by="creation asc"
		)
		self.assertEqual(records[0]["startTime"], "10:00")

	def test_persist_status_change(self):
		"""Test that the listener writes the status and publishes the event."""
		listener = calendar_api.persist_status_change("Clinic Appointment")
		event = StatusChangeEvent("APT-1", AppointmentStatus.CANCEL, AppointmentStatus.UPCOMING)

		with patch("frappe.db") as db, patch("frappe.publish_realtime") as publish:
			listener(event)

		db.set_value.assert_called_once_with("Clinic Appointment", "APT-1", "status", "CANCEL")
		publish.assert_called_once_with(
			calendar_api.STATUS_CHANGED_EVENT,
			{"appointment_id": "APT-1", "new_status": "CANCEL", "previous_status": "UPCOMING"},
			after_commit=True,
		)

	def test_build_controller_and_status_change(self):
		"""Test the flow behind change_appointment_status."""
		records = [
			calendar_api.normalize_record({
				"name": "APT-1",
				"date": date(2024, 1, 15),
				"start_time": timedelta(hours=9),
				"duration_minutes": 30,
				"status": "UPCOMING",
			})
		]
		controller = calendar_api.build_controller(
			CalendarSettings(),
			records,
			"weekly",
			"2024-01-15",
			"en",
			None,
			selected_day="2024-01-15",
		)

		model = controller.render_model
		self.assertEqual(model.cells[0].date, date(2024, 1, 15))
		self.assertEqual(model.positions["2024-01-15"]["APT-1"].row_start, 20)
		self.assertEqual(model.selected_day, date(2024, 1, 15))

		with patch("frappe.db") as db, patch("frappe.publish_realtime"):
			controller.subscribe(calendar_api.persist_status_change("Clinic Appointment"))
			event = controller.on_appointment_status_change("APT-1", "COMPLETE")

		self.assertEqual(event.previous_status, AppointmentStatus.UPCOMING)
		db.set_value.assert_called_once_with("Clinic Appointment", "APT-1", "status", "COMPLETE")
		self.assertEqual(controller.render_model.as_dict()["selectedDayAppointments"][0]["status"], "COMPLETE")


class TestCalendarEndpoints(CalendarTestCase):
	"""Tests for the whitelisted endpoints with site services mocked."""

	rows = [
		{
			"name": "APT-1",
			"date": date(2024, 1, 15),
			"start_time": timedelta(hours=9),
			"duration_minutes": 30,
			"status": "UPCOMING",
		},
	]

	def setUp(self):
		super().setUp()
		self.conf = frappe._dict(clinic_calendar={})
		self.mocks = {}
		for target, kwargs in [
			("frappe.throw", {"side_effect": _raise}),
			("frappe.log_error", {}),
			("frappe.get_all", {"return_value": self.rows}),
			("frappe.db", {}),
			("frappe.publish_realtime", {}),
			("frappe.conf", {"new": self.conf}),
			("clinic_calendar.api.calendar_api._", {"side_effect": lambda msg: msg}),
			("clinic_calendar.api.shared.validators._", {"side_effect": lambda msg: msg}),
		]:
			patcher = patch(target, **kwargs)
			self.mocks[target] = patcher.start()
			self.addCleanup(patcher.stop)

		# Whitelisted functions read frappe.local.flags when there is no request
		patcher = patch.object(frappe.local, "flags", frappe._dict(in_test=False), create=True)
		patcher.start()
		self.addCleanup(patcher.stop)

	def test_get_calendar_view(self):
		"""Test that the endpoint returns the render model as a dict."""
		result = calendar_api.get_calendar_view(view="daily", anchor_date="2024-01-15", language="en")

		self.assertEqual(result["view"], "daily")
		self.assertEqual(result["positions"]["2024-01-15"]["APT-1"]["rowStart"], 20)
		self.mocks["frappe.get_all"].assert_called_once()

	def test_invalid_settings_become_validation_error(self):
		"""Test that a configuration error is reported through frappe.throw."""
		self.conf.clinic_calendar = {"collision_strategy": "fuzzy"}

		with self.assertRaises(frappe.ValidationError) as cm:
			calendar_api.get_calendar_view(view="weekly", anchor_date="2024-01-15", language="en")

		self.assertIs(type(cm.exception), frappe.ValidationError)
		self.assertIn("fuzzy", str(cm.exception))
		self.mocks["frappe.log_error"].assert_not_called()

	def test_unexpected_error_is_logged(self):
		"""Test that unexpected failures are logged and reported as a generic error."""
		self.mocks["frappe.get_all"].side_effect = RuntimeError("connection lost")

		with self.assertRaises(frappe.ValidationError):
			calendar_api.get_calendar_view(view="monthly", anchor_date="2024-01-15", language="en")

		self.mocks["frappe.log_error"].assert_called_once()
		self.assertIn("connection lost", self.mocks["frappe.log_error"].call_args[0][0])

	def test_change_appointment_status(self):
		"""Test that the endpoint persists, publishes and returns the event."""
		result = calendar_api.change_appointment_status(
			"APT-1", "complete", view="daily", anchor_date="2024-01-15", language="en"
		)

		self.assertEqual(
			result["event"],
			{"appointment_id": "APT-1", "new_status": "COMPLETE", "previous_status": "UPCOMING"},
		)
		self.assertEqual(result["calendar"]["cells"][0]["appointments"][0]["status"], "COMPLETE")
		self.mocks["frappe.db"].set_value.assert_called_once_with("Clinic Appointment", "APT-1", "status", "COMPLETE")
		self.mocks["frappe.publish_realtime"].assert_called_once()

	def test_change_status_of_unknown_appointment(self):
		"""Test that an unknown id raises DoesNotExistError and persists nothing."""
		with self.assertRaises(frappe.DoesNotExistError):
			calendar_api.change_appointment_status(
				"APT-404", "CANCEL", view="monthly", anchor_date="2024-01-15", language="en"
			)

		self.mocks["frappe.db"].set_value.assert_not_called()
		self.mocks["frappe.log_error"].assert_not_called()

	def test_change_status_with_invalid_status(self):
		with self.assertRaises(frappe.ValidationError):
			calendar_api.change_appointment_status("APT-1", "DONE", anchor_date="2024-01-15", language="en")

		self.mocks["frappe.get_all"].assert_not_called()


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
