"""
Time Slot Scheduler

Maps appointment start times and durations onto the fixed vertical timeline
used by the week and day views:

	slot 0            all-day row
	slot 1..N         one slot per granularity unit across 24 hours

With the default 30 minute granularity the timeline has 49 rows.
"""

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from . import labels
from .models import InvalidSettingsError
from .settings import MINUTES_PER_DAY, CalendarSettings

ALL_DAY_SLOT = 0

START_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$", re.ASCII)

# Etiquetas visibles ("2:30 PM", "٢:٣٠ م", "14:30")
_LABEL_12H = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?\s*([AaPp])\.?\s*[Mm]\.?$")
_LABEL_RTL_SUFFIX = re.compile(r"^(\d{1,2})(?:[:.](\d{2}))?\s*([صم])$")
_LABEL_RTL_PREFIX = re.compile(r"^([صم])\s*(\d{1,2})(?:[:.](\d{2}))?$")
_LABEL_24H = re.compile(r"^(\d{1,2})[:.](\d{2})(?::\d{2})?$")

_RTL_AM = "ص"
_RTL_PM = "م"

# Marcas de dirección que Babel/los navegadores insertan en labels RTL
_BIDI_MARKS = dict.fromkeys(map(ord, "\u200e\u200f\u061c\u202a\u202b\u202c\u2066\u2067\u2068\u2069"))


def parse_start_time(value: Optional[str]) -> Optional[Tuple[int, int]]:
	"""
	Parsea un start time HH:mm (segundos opcionales, como los guarda Frappe).

	Returns:
		(hour, minute), o None si está vacío o mal formado
	"""
	if not value or not isinstance(value, str):
		return None

	match = START_TIME_PATTERN.match(value.strip())
	if not match:
		return None

	hour, minute = int(match.group(1)), int(match.group(2))
	if hour > 23 or minute > 59:
		return None
	return hour, minute


def time_to_hour(start_time: Optional[str]) -> Optional[int]:
	"""Hora 0..23 de un start time; None si no tiene slot (vacío o mal formado)."""
	parsed = parse_start_time(start_time)
	if parsed is None:
		return None
	return parsed[0]


def _twelve_hour(hour: int, is_pm: bool) -> Optional[int]:
	if hour < 1 or hour > 12:
		return None
	if hour == 12:
		return 12 if is_pm else 0
	return hour + 12 if is_pm else hour


def parse_time_label(label: Optional[str]) -> Optional[int]:
	"""
	Extrae la hora (0..23) de una etiqueta de tiempo ya formateada.

	Soporta:
		- 12 horas con AM/PM: "2:30 PM", "9 am", "11:00 p.m."
		- Marcadores RTL: "2:30 م" (PM), "9:00 ص" (AM), también con dígitos arábigos
		- 24 horas: "14:30"

	Returns:
		int, o None si ningún patrón coincide
	"""
	if not label or not isinstance(label, str):
		return None

	text = " ".join(label.translate(_BIDI_MARKS).split())
	if not text:
		return None

	match = _LABEL_12H.match(text)
	if match:
		return _twelve_hour(int(match.group(1)), match.group(3).lower() == "p")

	match = _LABEL_RTL_SUFFIX.match(text)
	if match:
		return _twelve_hour(int(match.group(1)), match.group(3) == _RTL_PM)

	match = _LABEL_RTL_PREFIX.match(text)
	if match:
		return _twelve_hour(int(match.group(2)), match.group(1) == _RTL_PM)

	match = _LABEL_24H.match(text)
	if match:
		hour, minute = int(match.group(1)), int(match.group(2))
		if hour <= 23 and minute <= 59:
			return hour

	return None


@dataclass(frozen=True)
class TimelineRow:
	index: int
	label: str
	hour: Optional[int] = None
	minute: Optional[int] = None

	@property
	def is_all_day(self) -> bool:
		return self.index == ALL_DAY_SLOT

	def as_dict(self) -> Dict:
		return {
			"index": self.index,
			"row": self.index + 1,
			"label": self.label,
			"hour": self.hour,
			"minute": self.minute,
			"isAllDay": self.is_all_day,
		}


class TimeSlotScheduler:
	"""Convierte start time + duración en posiciones del timeline."""

	def __init__(self, granularity_minutes: int = 30):
		if granularity_minutes <= 0 or MINUTES_PER_DAY % granularity_minutes:
			raise InvalidSettingsError(
				f"slot_granularity_minutes must divide {MINUTES_PER_DAY}, got {granularity_minutes}"
			)
		self.granularity = granularity_minutes

	@classmethod
	def from_settings(cls, settings: CalendarSettings) -> "TimeSlotScheduler":
		return cls(settings.slot_granularity_minutes)

	@property
	def slots_per_day(self) -> int:
		return MINUTES_PER_DAY // self.granularity

	@property
	def total_rows(self) -> int:
		return self.slots_per_day + 1

	def slot_index_for(self, start_time: Optional[str]) -> int:
		"""
		Índice de slot para un start time.

		Vacío/ausente -> slot 0 (all-day). En otro caso
		1 + floor((hour*60 + minute) / granularity).

		Raises:
			ValueError: si el start time no es HH:mm válido
		"""
		if not (start_time or "").strip():
			return ALL_DAY_SLOT

		parsed = parse_start_time(start_time)
		if parsed is None:
			raise ValueError(f"Malformed start time: {start_time!r}")

		hour, minute = parsed
		return 1 + (hour * 60 + minute) // self.granularity

	def row_span_for(self, duration_minutes: Optional[int]) -> int:
		"""max(1, ceil(duration / granularity)); 0 o ausente ocupa 1 slot."""
		if not duration_minutes or duration_minutes <= 0:
			return 1
		return max(1, math.ceil(duration_minutes / self.granularity))

	def minutes_range(self, start_time: str, duration_minutes: Optional[int]) -> Tuple[int, int]:
		"""Rango [start, end) en minutos desde medianoche."""
		parsed = parse_start_time(start_time)
		if parsed is None:
			raise ValueError(f"Malformed start time: {start_time!r}")

		start = parsed[0] * 60 + parsed[1]
		return start, start + max(int(duration_minutes or 0), 1)

	def rows(self, language: str = "en") -> List[TimelineRow]:
		"""Filas del timeline: all-day + un slot por unidad de granularidad."""
		rows = [TimelineRow(index=ALL_DAY_SLOT, label=labels.all_day_label(language))]

		for slot in range(self.slots_per_day):
			minutes = slot * self.granularity
			hour, minute = divmod(minutes, 60)
			rows.append(TimelineRow(
				index=slot + 1,
				label=labels.time_label(hour, minute, language),
				hour=hour,
				minute=minute,
			))

		return rows
