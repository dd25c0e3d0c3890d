"""
Calendar Controller

Holds the calendar state (view, anchor date, appointment snapshot, language)
and recomputes the full render model on every transition. The controller
never persists anything: status changes are applied to its own snapshot and
announced to subscribers as StatusChangeEvent.
"""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import date_keys, labels
from .appointment_index import AppointmentIndex, load_appointments
from .diagnostics import get_logger, report_data_quality
from .matrix import CalendarMatrixBuilder, shift_anchor
from .models import (
	Appointment,
	AppointmentStatus,
	CalendarCell,
	CalendarView,
	StatusChangeEvent,
	TimelinePosition,
)
from .overlap import OverlapResolver
from .settings import CalendarSettings
from .timeline import TimelineRow

StatusListener = Callable[[StatusChangeEvent], Any]


@dataclass
class RenderModel:
	view: CalendarView
	anchor_date: date
	today: date
	cells: List[CalendarCell]
	positions: Dict[str, Dict[str, TimelinePosition]] = field(default_factory=dict)
	suppressed: Dict[str, List[str]] = field(default_factory=dict)
	timeline_rows: List[TimelineRow] = field(default_factory=list)
	period_label: str = ""
	day_names: List[str] = field(default_factory=list)
	language: str = "en"
	direction: str = labels.LTR
	drawer_position: str = "right"
	selected_day: Optional[date] = None
	selected_day_label: str = ""
	selected_day_appointments: Tuple[Appointment, ...] = ()
	warnings: List[str] = field(default_factory=list)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"view": self.view.value,
			"anchorDate": date_keys.encode(self.anchor_date),
			"today": date_keys.encode(self.today),
			"cells": [cell.as_dict() for cell in self.cells],
			"positions": {
				key: {appointment_id: position.as_dict() for appointment_id, position in day.items()}
				for key, day in self.positions.items()
			},
			"suppressed": self.suppressed,
			"timelineRows": [row.as_dict() for row in self.timeline_rows],
			"periodLabel": self.period_label,
			"dayNames": self.day_names,
			"language": self.language,
			"direction": self.direction,
			"drawerPosition": self.drawer_position,
			"selectedDay": date_keys.encode(self.selected_day) if self.selected_day else None,
			"selectedDayLabel": self.selected_day_label,
			"selectedDayAppointments": [appointment.as_dict() for appointment in self.selected_day_appointments],
			"warnings": self.warnings,
		}


class CalendarController:
	"""
	Máquina de estados del calendario.

	Estado: {view, anchor_date, snapshot, language, direction, selected_day}.
	Cada transición reconstruye el RenderModel completo (sin diffs): los
	grids están acotados a 42 celdas y 49 filas por día.
	"""

	def __init__(
		self,
		appointments: Iterable[Any] = (),
		settings: Optional[CalendarSettings] = None,
		view="monthly",
		anchor_date: Optional[date] = None,
		language: Optional[str] = None,
		direction: Optional[str] = None,
		today: Optional[Callable[[], date]] = None
	):
		self.settings = settings or CalendarSettings()
		self._today = today or self.settings.today

		self.matrix_builder = CalendarMatrixBuilder(self.settings)
		self.resolver = OverlapResolver.from_settings(self.settings)

		self.view = CalendarView.coerce(view)
		self.anchor_date = date_keys.as_date(anchor_date) if anchor_date else self._today()
		self.language = language or self.settings.default_language
		self.direction = direction or labels.direction_for(self.language)
		self.selected_day: Optional[date] = None

		self._listeners: List[StatusListener] = []
		self._snapshot_warnings: List[str] = []
		self._transition_warnings: List[str] = []
		self.snapshot: Tuple[Appointment, ...] = load_appointments(appointments, self._snapshot_warnings)

		self.render_model = self.render()

	# ===== EVENTS =====

	def subscribe(self, listener: StatusListener) -> StatusListener:
		"""Registra un listener para StatusChangeEvent (p. ej. el store externo)."""
		self._listeners.append(listener)
		return listener

	def unsubscribe(self, listener: StatusListener) -> None:
		if listener in self._listeners:
			self._listeners.remove(listener)

	# ===== TRANSITIONS =====

	def set_view(self, view) -> RenderModel:
		"""Cambia la vista conservando el anchor actual."""
		self.view = CalendarView.coerce(view)
		return self._refresh()

	def previous_period(self) -> RenderModel:
		self.anchor_date = shift_anchor(self.view, self.anchor_date, -1)
		return self._refresh()

	def next_period(self) -> RenderModel:
		self.anchor_date = shift_anchor(self.view, self.anchor_date, 1)
		return self._refresh()

	def go_to_today(self) -> RenderModel:
		self.anchor_date = self._today()
		return self._refresh()

	def go_to_date(self, value) -> RenderModel:
		"""
		Salta a una fecha (date o key YYYY-MM-DD). String vacío no hace nada.

		Raises:
			ValueError: si la key no es una fecha válida
		"""
		if not value:
			return self.render_model

		if isinstance(value, str):
			parsed = date_keys.decode(value)
			if parsed is None:
				raise ValueError(f"Invalid date: {value!r}")
			value = parsed

		self.anchor_date = date_keys.as_date(value)
		return self._refresh()

	def set_language(self, language: str, direction: Optional[str] = None) -> RenderModel:
		self.language = language or self.settings.default_language
		self.direction = direction or labels.direction_for(self.language)
		return self._refresh()

	def open_day(self, day) -> RenderModel:
		"""Selecciona un día para el drawer de appointments del día."""
		if isinstance(day, str):
			parsed = date_keys.decode(day)
			if parsed is None:
				raise ValueError(f"Invalid date: {day!r}")
			day = parsed

		self.selected_day = date_keys.as_date(day)
		return self._refresh()

	def close_day(self) -> RenderModel:
		self.selected_day = None
		return self._refresh()

	def on_appointments_snapshot_changed(self, appointments: Iterable[Any]) -> RenderModel:
		self._snapshot_warnings = []
		self.snapshot = load_appointments(appointments, self._snapshot_warnings)
		return self._refresh()

	def on_appointment_status_change(self, appointment_id: str, new_status) -> Optional[StatusChangeEvent]:
		"""
		Cambia el status de un appointment en el snapshot local.

		El snapshot se reemplaza por una tupla nueva (nunca se modifica en
		sitio), se re-renderiza y se emite StatusChangeEvent para que el
		store externo persista el cambio.

		Returns:
			StatusChangeEvent, o None si el id no existe en el snapshot

		Raises:
			ValueError: si new_status no pertenece a AppointmentStatus
		"""
		status = AppointmentStatus.coerce(new_status)

		previous = next((item for item in self.snapshot if item.id == appointment_id), None)
		if previous is None:
			report_data_quality(
				self._transition_warnings,
				f"Status change for unknown appointment {appointment_id!r} ignored"
			)
			self._refresh()
			return None

		self.snapshot = tuple(
			replace(item, status=status) if item.id == appointment_id else item
			for item in self.snapshot
		)
		self._refresh()

		event = StatusChangeEvent(
			appointment_id=appointment_id,
			new_status=status,
			previous_status=previous.status,
		)
		for listener in list(self._listeners):
			listener(event)

		get_logger().info(f"Appointment {appointment_id}: {previous.status.value} -> {status.value}")
		return event

	# ===== RENDER =====

	def render(self) -> RenderModel:
		"""
		Calcula el RenderModel para el estado actual.

		Algoritmo:
			1. Indexar el snapshot por date key
			2. Construir las celdas para la vista
			3. En weekly/daily, layout del timeline por día
			4. Labels según idioma (periodo, días, filas, drawer)
		"""
		warnings = list(self._snapshot_warnings) + list(self._transition_warnings)
		index = AppointmentIndex(self.snapshot, warnings)
		today = self._today()

		cells = self.matrix_builder.build(self.view, self.anchor_date, today, index)

		model = RenderModel(
			view=self.view,
			anchor_date=self.anchor_date,
			today=today,
			cells=cells,
			period_label=labels.period_label(self.anchor_date, self.language),
			day_names=labels.day_names(self.language, self.settings.week_start),
			language=self.language,
			direction=self.direction,
			drawer_position=labels.drawer_position(self.direction),
			warnings=warnings,
		)

		if self.view is not CalendarView.MONTHLY:
			for cell in cells:
				layout = self.resolver.layout(cell.date, cell.visible_appointments)
				key = date_keys.encode(cell.date)
				model.positions[key] = layout.positions
				if layout.suppressed:
					model.suppressed[key] = layout.suppressed
				warnings.extend(layout.warnings)
			model.timeline_rows = self.resolver.scheduler.rows(self.language)

		if self.selected_day is not None:
			model.selected_day = self.selected_day
			model.selected_day_label = labels.selected_day_label(self.selected_day, self.language)
			model.selected_day_appointments = index.for_date(self.selected_day)

		return model

	def _refresh(self) -> RenderModel:
		self.render_model = self.render()
		self._transition_warnings = []
		return self.render_model
