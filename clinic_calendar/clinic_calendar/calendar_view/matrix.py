"""
Calendar Matrix Builder

Produces the ordered day cells for the month (42 cells), week (7 cells) and
day (1 cell) views, plus the period navigation used by the controller.
"""

from datetime import date, timedelta
from typing import List, Optional

from frappe.utils import add_days, add_months, get_first_day, get_last_day

from . import date_keys
from .appointment_index import AppointmentIndex
from .models import CalendarCell, CalendarView
from .settings import CalendarSettings

MONTH_GRID_CELLS = 42
WEEK_DAYS = 7


def start_of_week(day: date, week_start: int = 0) -> date:
	"""Primer día de la semana que contiene `day` (0 = lunes, 6 = domingo)."""
	return day - timedelta(days=(day.weekday() - week_start) % 7)


def shift_anchor(view, anchor: date, step: int) -> date:
	"""
	Mueve el anchor `step` periodos (negativo = hacia atrás).

	monthly: un mes por paso (el día se ajusta al último día del mes destino)
	weekly: 7 días por paso
	daily: 1 día por paso
	"""
	view = CalendarView.coerce(view)

	if view is CalendarView.MONTHLY:
		return add_months(anchor, step)
	elif view is CalendarView.WEEKLY:
		return add_days(anchor, WEEK_DAYS * step)
	return add_days(anchor, step)


class CalendarMatrixBuilder:
	"""Genera las celdas del calendario para una vista y un anchor."""

	def __init__(self, settings: Optional[CalendarSettings] = None):
		self.settings = settings or CalendarSettings()

	def build(self, view, anchor: date, today: date, index: AppointmentIndex) -> List[CalendarCell]:
		"""
		Genera las celdas para la vista.

		Args:
			view: "monthly", "weekly" o "daily" (o CalendarView)
			anchor: fecha de referencia del periodo mostrado
			today: fecha actual, para marcar is_today
			index: AppointmentIndex del snapshot actual

		Returns:
			list[CalendarCell]: 42, 7 o 1 celdas

		Raises:
			InvalidViewError: si la vista no es soportada
		"""
		view = CalendarView.coerce(view)
		anchor = date_keys.as_date(anchor)
		today = date_keys.as_date(today)

		if view is CalendarView.MONTHLY:
			return self.month_cells(anchor, today, index)
		elif view is CalendarView.WEEKLY:
			return self.week_cells(anchor, today, index)
		return [self._cell(anchor, today, index, focused=True)]

	def month_cells(self, anchor: date, today: date, index: AppointmentIndex) -> List[CalendarCell]:
		"""
		Algoritmo:
			1. Primer y último día del mes del anchor
			2. Rellenar al inicio con los últimos días del mes anterior hasta
			   el día de inicio de semana configurado
			3. Todos los días del mes (máximo month_visible_limit visibles + overflow)
			4. Rellenar con los primeros días del mes siguiente hasta 42 celdas
		"""
		first_day = get_first_day(anchor)
		last_day = get_last_day(anchor)
		leading = (first_day.weekday() - self.settings.week_start) % 7

		cells = []

		for offset in range(leading, 0, -1):
			cells.append(self._cell(first_day - timedelta(days=offset), today, index, focused=False))

		current = first_day
		while current <= last_day:
			cells.append(self._cell(current, today, index, focused=True, limit=self.settings.month_visible_limit))
			current += timedelta(days=1)

		trailing = last_day
		while len(cells) < MONTH_GRID_CELLS:
			trailing += timedelta(days=1)
			cells.append(self._cell(trailing, today, index, focused=False))

		return cells

	def week_cells(self, anchor: date, today: date, index: AppointmentIndex) -> List[CalendarCell]:
		first_day = start_of_week(anchor, self.settings.week_start)
		return [
			self._cell(first_day + timedelta(days=offset), today, index, focused=True)
			for offset in range(WEEK_DAYS)
		]

	def _cell(
		self,
		day: date,
		today: date,
		index: AppointmentIndex,
		focused: bool,
		limit: Optional[int] = None
	) -> CalendarCell:
		appointments = index.for_date(day)
		overflow = None

		if limit is not None and len(appointments) > limit:
			overflow = len(appointments) - limit
			appointments = appointments[:limit]

		return CalendarCell(
			date=day,
			is_in_focused_period=focused,
			is_today=date_keys.same_day(day, today),
			visible_appointments=appointments,
			overflow_count=overflow,
		)
