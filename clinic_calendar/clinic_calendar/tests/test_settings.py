"""
Tests for calendar_view/settings.py

Tests defaults, validation, site config loading and the timezone-aware today.
"""

import unittest
from datetime import date, datetime

import pytz

from clinic_calendar.clinic_calendar.calendar_view.models import InvalidSettingsError
from clinic_calendar.clinic_calendar.calendar_view.settings import (
	COLLISION_INTERVAL,
	OVERLAP_POLICY_SUPPRESS,
	SUNDAY,
	CalendarSettings,
	load_settings,
)
from clinic_calendar.clinic_calendar.tests.utils import CalendarTestCase


class TestCalendarSettings(unittest.TestCase):
	"""Tests for defaults and validation."""

	def test_defaults(self):
		settings = CalendarSettings()

		self.assertEqual(settings.slot_granularity_minutes, 30)
		self.assertEqual(settings.week_start, 0)
		self.assertEqual(settings.month_visible_limit, 2)
		self.assertEqual(settings.overlap_policy, "stack")
		self.assertEqual(settings.collision_strategy, "exact_time")
		self.assertEqual(settings.slots_per_day, 48)
		self.assertEqual(settings.total_rows, 49)

	def test_invalid_values(self):
		"""Test that out-of-range values raise InvalidSettingsError."""
		invalid = [
			{"slot_granularity_minutes": 0},
			{"slot_granularity_minutes": 7},
			{"week_start": 3},
			{"month_visible_limit": 0},
			{"overlap_policy": "hide"},
		]
		for values in invalid:
			with self.assertRaises(InvalidSettingsError, msg=str(values)):
				CalendarSettings(**values)


class TestLoadSettings(CalendarTestCase):
	"""Tests for load_settings."""

	def test_empty_config_uses_defaults(self):
		self.assertEqual(load_settings({}), CalendarSettings())

	def test_site_config_values(self):
		"""Test values as they come from site_config.json."""
		settings = load_settings({
			"clinic_calendar": {
				"slot_granularity_minutes": "15",
				"week_start": 6,
				"month_visible_limit": 3,
				"overlap_policy": OVERLAP_POLICY_SUPPRESS,
				"collision_strategy": COLLISION_INTERVAL,
				"timezone": "America/Bogota",
			}
		})

		self.assertEqual(settings.slot_granularity_minutes, 15)
		self.assertEqual(settings.week_start, SUNDAY)
		self.assertEqual(settings.month_visible_limit, 3)
		self.assertEqual(settings.overlap_policy, OVERLAP_POLICY_SUPPRESS)
		self.assertEqual(settings.collision_strategy, COLLISION_INTERVAL)
		self.assertEqual(settings.timezone, "America/Bogota")
		self.assertEqual(settings.total_rows, 97)

	def test_invalid_site_config(self):
		with self.assertRaises(InvalidSettingsError):
			load_settings({"clinic_calendar": {"week_start": 2}})

	def test_zero_or_non_numeric_values_are_rejected(self):
		"""Test that a configured 0 or a non-numeric value is not replaced by the default."""
		invalid = [
			{"slot_granularity_minutes": 0},
			{"slot_granularity_minutes": "0"},
			{"slot_granularity_minutes": "half hour"},
			{"month_visible_limit": 0},
			{"month_visible_limit": "two"},
			{"week_start": "monday"},
		]
		for values in invalid:
			with self.assertRaises(InvalidSettingsError, msg=str(values)):
				load_settings({"clinic_calendar": values})


class TestToday(CalendarTestCase):
	"""Tests for CalendarSettings.today."""

	def test_today_in_configured_timezone(self):
		"""Test that 03:00 UTC is still the previous day in Bogota."""
		settings = CalendarSettings(timezone="America/Bogota")
		now = pytz.UTC.localize(datetime(2024, 3, 10, 3, 0))

		self.assertEqual(settings.today(now), date(2024, 3, 9))
		self.assertEqual(settings.today(datetime(2024, 3, 10, 3, 0)), date(2024, 3, 9))

	def test_today_without_timezone(self):
		"""Test that a naive clock is used as is."""
		self.assertEqual(CalendarSettings().today(datetime(2024, 3, 10, 3, 0)), date(2024, 3, 10))

	def test_invalid_timezone_falls_back_to_utc(self):
		"""Test fallback to UTC with an error log."""
		settings = CalendarSettings(timezone="Mars/Olympus")

		self.assertEqual(settings.today(datetime(2024, 3, 10, 3, 0)), date(2024, 3, 10))
		self.logger.error.assert_called_once()


def run_tests():
	"""Run all tests in this module."""
	unittest.main()
