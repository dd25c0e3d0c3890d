"""
Date Keys

Canonical, timezone-safe day keys (YYYY-MM-DD) built from the date's own
calendar fields. Keys are never derived through UTC so a late-evening
datetime keeps its local day.
"""

import re
from datetime import date, datetime
from typing import Optional, Union

DATE_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)

DateLike = Union[date, datetime]


def encode(value: DateLike) -> str:
	"""
	Convierte una fecha a su key local YYYY-MM-DD.

	Usa year/month/day del propio objeto (un datetime conserva su día local,
	sin pasar por UTC).
	"""
	return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def decode(key: Optional[str]) -> Optional[date]:
	"""
	Convierte una key YYYY-MM-DD a date.

	Returns:
		date, o None si la key está vacía o mal formada
	"""
	if not key or not isinstance(key, str):
		return None

	match = DATE_KEY_PATTERN.match(key.strip())
	if not match:
		return None

	year, month, day = (int(part) for part in match.groups())
	try:
		return date(year, month, day)
	except ValueError:
		# 2024-02-30 y similares
		return None


def same_day(a: DateLike, b: DateLike) -> bool:
	"""Compara solo year, month y day (ignora la hora)."""
	return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def as_date(value: DateLike) -> date:
	if isinstance(value, datetime):
		return value.date()
	return value
