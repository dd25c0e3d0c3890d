"""
Calendar View Models

Value objects shared by the calendar view services:
- Appointment (snapshot record, immutable per render pass)
- CalendarCell (one day in the month/week/day grid)
- TimelinePosition (placement of an appointment in the week/day timeline)
- AppointmentStatus and its presentation helpers
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

import frappe


class CalendarConfigurationError(frappe.ValidationError):
	"""Configuración inválida: la llamada de render falla por completo."""
	pass


class InvalidViewError(CalendarConfigurationError):
	"""Modo de vista no soportado."""
	pass


class InvalidSettingsError(CalendarConfigurationError):
	"""Valor de configuración fuera de rango."""
	pass


class CalendarView(str, Enum):
	MONTHLY = "monthly"
	WEEKLY = "weekly"
	DAILY = "daily"

	@classmethod
	def coerce(cls, value: Any) -> "CalendarView":
		"""
		Convierte un string (o CalendarView) al enum.

		Raises:
			InvalidViewError: si el valor no es una vista soportada
		"""
		if isinstance(value, cls):
			return value
		try:
			return cls(str(value).strip().lower())
		except ValueError:
			raise InvalidViewError(f"Unsupported calendar view: {value!r}")


class AppointmentStatus(str, Enum):
	COMPLETE = "COMPLETE"
	UPCOMING = "UPCOMING"
	PENDING = "PENDING"
	CANCEL = "CANCEL"

	@classmethod
	def coerce(cls, value: Any) -> "AppointmentStatus":
		"""
		Raises:
			ValueError: si el status no pertenece a la enumeración
		"""
		if isinstance(value, cls):
			return value
		try:
			return cls(str(value).strip().upper())
		except ValueError:
			raise ValueError(f"Unknown appointment status: {value!r}")


def status_label(status: AppointmentStatus) -> str:
	"""Etiqueta visible del status (se traduce en la capa de presentación)."""
	if status is AppointmentStatus.COMPLETE:
		return "Complete"
	elif status is AppointmentStatus.UPCOMING:
		return "Upcoming"
	elif status is AppointmentStatus.PENDING:
		return "Pending"
	elif status is AppointmentStatus.CANCEL:
		return "Cancel"
	raise ValueError(f"Unhandled appointment status: {status!r}")


def status_severity(status: AppointmentStatus) -> str:
	"""Severidad del tag asociada al status."""
	if status is AppointmentStatus.COMPLETE:
		return "success"
	elif status is AppointmentStatus.UPCOMING:
		return "info"
	elif status is AppointmentStatus.PENDING:
		return "warn"
	elif status is AppointmentStatus.CANCEL:
		return "danger"
	raise ValueError(f"Unhandled appointment status: {status!r}")


def status_options() -> List[Dict[str, str]]:
	"""Opciones para el selector de status, en el orden de la enumeración."""
	return [{"label": status_label(status), "value": status.value} for status in AppointmentStatus]


def _pick(record: Mapping[str, Any], *keys: str) -> Any:
	for key in keys:
		if key in record and record[key] is not None:
			return record[key]
	return None


@dataclass(frozen=True)
class Appointment:
	id: str
	date: str
	status: AppointmentStatus
	start_time: Optional[str] = None
	duration_minutes: Optional[int] = None
	patient_name: Optional[str] = None
	patient_id: Optional[str] = None
	end_time: Optional[str] = None
	notes: Optional[str] = None

	@property
	def is_all_day(self) -> bool:
		return not (self.start_time or "").strip()

	@classmethod
	def from_record(cls, record: Mapping[str, Any]) -> "Appointment":
		"""
		Construye un Appointment desde un registro plano.

		Acepta claves camelCase (como las envía el frontend) o snake_case
		(como las devuelve frappe.get_all).

		Raises:
			ValueError: si falta el id o el status es desconocido
		"""
		appointment_id = _pick(record, "id", "name")
		if appointment_id is None or str(appointment_id) == "":
			raise ValueError("Appointment record without id")

		duration = _pick(record, "durationMinutes", "duration_minutes")
		if duration is not None:
			try:
				duration = int(duration)
			except (TypeError, ValueError):
				# Se valida en el OverlapResolver como dato de mala calidad
				duration = None

		start_time = _pick(record, "startTime", "start_time")

		return cls(
			id=str(appointment_id),
			date=str(_pick(record, "date") or ""),
			status=AppointmentStatus.coerce(_pick(record, "status")),
			start_time=str(start_time) if start_time is not None else None,
			duration_minutes=duration,
			patient_name=_pick(record, "patientName", "patient_name"),
			patient_id=_pick(record, "patientId", "patient_id"),
			end_time=_pick(record, "endTime", "end_time"),
			notes=_pick(record, "notes"),
		)

	def as_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"date": self.date,
			"startTime": self.start_time,
			"durationMinutes": self.duration_minutes,
			"status": self.status.value,
			"statusLabel": status_label(self.status),
			"statusSeverity": status_severity(self.status),
			"patientName": self.patient_name,
			"patientId": self.patient_id,
			"endTime": self.end_time,
			"notes": self.notes,
		}


@dataclass(frozen=True)
class CalendarCell:
	date: date
	is_in_focused_period: bool
	is_today: bool
	visible_appointments: Tuple[Appointment, ...] = ()
	overflow_count: Optional[int] = None

	def as_dict(self) -> Dict[str, Any]:
		return {
			"date": self.date.strftime("%Y-%m-%d"),
			"isInFocusedPeriod": self.is_in_focused_period,
			"isToday": self.is_today,
			"appointments": [appointment.as_dict() for appointment in self.visible_appointments],
			"overflowCount": self.overflow_count,
		}


@dataclass(frozen=True)
class TimelinePosition:
	row_start: int
	row_span: int
	column_start: int = 1
	column_span: int = 1
	column_count: int = 1
	left_percent: float = 0.0
	width_percent: float = 100.0
	is_all_day: bool = False

	def as_dict(self) -> Dict[str, Any]:
		return {
			"rowStart": self.row_start,
			"rowSpan": self.row_span,
			"columnStart": self.column_start,
			"columnSpan": self.column_span,
			"columnCount": self.column_count,
			"left": self.left_percent,
			"width": self.width_percent,
			"isAllDay": self.is_all_day,
		}


@dataclass(frozen=True)
class StatusChangeEvent:
	"""Evento emitido por el controller para que un store externo persista."""

	appointment_id: str
	new_status: AppointmentStatus
	previous_status: Optional[AppointmentStatus] = None


@dataclass
class DayLayout:
	"""Resultado del OverlapResolver para un día."""

	positions: Dict[str, TimelinePosition] = field(default_factory=dict)
	suppressed: List[str] = field(default_factory=list)
	warnings: List[str] = field(default_factory=list)
