"""
Locale labels

Display strings for the calendar header, day drawer and timeline rows.
The language/direction flag only selects formats here; it never changes
grid math.
"""

from datetime import date, time
from typing import List

from babel.dates import format_date, format_time, get_day_names

RTL = "rtl"
LTR = "ltr"

_LOCALES = {
	"ar": "ar_SA",
	"en": "en_US",
}

_ALL_DAY = {
	"ar": "طوال اليوم",
	"en": "All day",
}

PERIOD_FORMAT = "EEE, MMMM d, y"
SELECTED_DAY_FORMAT = "EEEE, MMMM d, y"


def _language_code(language: str) -> str:
	return (language or "en").split("-")[0].split("_")[0].lower()


def language_locale(language: str) -> str:
	"""Locale de Babel para un tag de idioma (ar -> ar_SA, resto -> en_US)."""
	return _LOCALES.get(_language_code(language), _LOCALES["en"])


def direction_for(language: str) -> str:
	return RTL if _language_code(language) == "ar" else LTR


def drawer_position(direction: str) -> str:
	"""El drawer se abre del lado opuesto a la lectura."""
	return "left" if direction == RTL else "right"


def period_label(anchor: date, language: str = "en") -> str:
	return format_date(anchor, PERIOD_FORMAT, locale=language_locale(language))


def selected_day_label(day: date, language: str = "en") -> str:
	return format_date(day, SELECTED_DAY_FORMAT, locale=language_locale(language))


def day_names(language: str = "en", week_start: int = 0) -> List[str]:
	"""
	Nombres cortos de los días, empezando en week_start (0 = lunes, 6 = domingo).
	"""
	names = get_day_names("abbreviated", locale=language_locale(language))
	return [names[(week_start + offset) % 7] for offset in range(7)]


def time_label(hour: int, minute: int, language: str = "en") -> str:
	return format_time(time(hour, minute), format="short", locale=language_locale(language))


def all_day_label(language: str = "en") -> str:
	return _ALL_DAY.get(_language_code(language), _ALL_DAY["en"])
