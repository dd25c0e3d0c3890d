"""
Calendar Settings

Reads the calendar configuration from the site config
(`clinic_calendar` key in site_config.json) with defaults for every value:

	{
		"clinic_calendar": {
			"slot_granularity_minutes": 30,
			"week_start": 0,
			"month_visible_limit": 2,
			"overlap_policy": "stack",
			"collision_strategy": "exact_time",
			"timezone": "America/Bogota"
		}
	}
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Mapping, Optional

import frappe
import pytz
from frappe.utils import cint

from .diagnostics import get_logger
from .models import InvalidSettingsError

MONDAY = 0
SUNDAY = 6

OVERLAP_POLICY_STACK = "stack"
OVERLAP_POLICY_SUPPRESS = "suppress_duplicates"
OVERLAP_POLICIES = (OVERLAP_POLICY_STACK, OVERLAP_POLICY_SUPPRESS)

COLLISION_EXACT_TIME = "exact_time"
COLLISION_INTERVAL = "interval"

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class CalendarSettings:
	slot_granularity_minutes: int = 30
	week_start: int = MONDAY
	month_visible_limit: int = 2
	overlap_policy: str = OVERLAP_POLICY_STACK
	collision_strategy: str = COLLISION_EXACT_TIME
	timezone: Optional[str] = None
	default_language: str = "en"
	appointment_doctype: str = "Clinic Appointment"

	def __post_init__(self):
		self.validate()

	def validate(self) -> None:
		"""
		Valida la configuración.

		Raises:
			InvalidSettingsError: si algún valor está fuera de rango
		"""
		granularity = self.slot_granularity_minutes
		if granularity <= 0 or MINUTES_PER_DAY % granularity:
			raise InvalidSettingsError(
				f"slot_granularity_minutes must divide {MINUTES_PER_DAY}, got {granularity}"
			)

		if self.week_start not in (MONDAY, SUNDAY):
			raise InvalidSettingsError(
				f"week_start must be {MONDAY} (Monday) or {SUNDAY} (Sunday), got {self.week_start}"
			)

		if self.month_visible_limit < 1:
			raise InvalidSettingsError("month_visible_limit must be at least 1")

		if self.overlap_policy not in OVERLAP_POLICIES:
			raise InvalidSettingsError(f"Unknown overlap_policy: {self.overlap_policy!r}")

		# collision_strategy se valida en get_overlap_strategy()

	@property
	def slots_per_day(self) -> int:
		return MINUTES_PER_DAY // self.slot_granularity_minutes

	@property
	def total_rows(self) -> int:
		"""Filas del timeline incluyendo la fila all-day."""
		return self.slots_per_day + 1

	def today(self, now: Optional[datetime] = None) -> date:
		"""
		Fecha actual según la timezone configurada.

		Sin timezone se usa el reloj local (naive). Timezone inválida -> UTC.
		"""
		if not self.timezone:
			return (now or datetime.now()).date()

		try:
			tz = pytz.timezone(self.timezone)
		except pytz.UnknownTimeZoneError:
			tz = pytz.UTC
			get_logger().error(f"Invalid timezone '{self.timezone}' for calendar settings, usando UTC")

		if now is None:
			return datetime.now(tz).date()
		if now.tzinfo is None:
			now = pytz.UTC.localize(now)
		return now.astimezone(tz).date()


def _int_setting(values: Mapping[str, Any], key: str, default: int) -> int:
	"""Valor entero de la config; ausente -> default, no numérico -> InvalidSettingsError."""
	value = values.get(key)
	if value is None:
		return default

	if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
		raise InvalidSettingsError(f"{key} must be an integer, got {value!r}")

	return cint(value)


def load_settings(conf: Optional[Mapping[str, Any]] = None) -> CalendarSettings:
	"""
	Construye CalendarSettings desde la configuración del site.

	Args:
		conf: mapping con la key "clinic_calendar" (por defecto frappe.conf)

	Returns:
		CalendarSettings validado

	Raises:
		InvalidSettingsError: si algún valor es inválido
	"""
	if conf is None:
		conf = frappe.conf or {}

	values = frappe._dict(conf.get("clinic_calendar") or {})
	defaults = CalendarSettings()

	return CalendarSettings(
		slot_granularity_minutes=_int_setting(values, "slot_granularity_minutes", defaults.slot_granularity_minutes),
		week_start=_int_setting(values, "week_start", defaults.week_start),
		month_visible_limit=_int_setting(values, "month_visible_limit", defaults.month_visible_limit),
		overlap_policy=values.overlap_policy or defaults.overlap_policy,
		collision_strategy=values.collision_strategy or defaults.collision_strategy,
		timezone=values.timezone or defaults.timezone,
		default_language=values.default_language or defaults.default_language,
		appointment_doctype=values.appointment_doctype or defaults.appointment_doctype,
	)
