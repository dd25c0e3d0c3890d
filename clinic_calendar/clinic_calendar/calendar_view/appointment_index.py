"""
Appointment Index

Buckets an appointment snapshot by date key so each calendar cell looks up
its appointments in O(1).
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from . import date_keys
from .diagnostics import report_data_quality
from .models import Appointment


class AppointmentIndex:
	"""
	Índice date key -> appointments, construido una vez por snapshot.

	Conserva el orden original del snapshot dentro de cada día.
	"""

	def __init__(self, appointments: Iterable[Appointment], warnings: Optional[List[str]] = None):
		self.warnings: List[str] = warnings if warnings is not None else []
		self._by_key: Dict[str, List[Appointment]] = {}

		for appointment in appointments:
			day = date_keys.decode(appointment.date)
			if day is None:
				report_data_quality(
					self.warnings,
					f"Appointment {appointment.id} has invalid date key {appointment.date!r}, excluded"
				)
				continue
			# Bucket bajo la key canónica (" 2024-01-15" -> "2024-01-15")
			self._by_key.setdefault(date_keys.encode(day), []).append(appointment)

	def for_date(self, value) -> Tuple[Appointment, ...]:
		return tuple(self._by_key.get(date_keys.encode(value), ()))

	def __len__(self) -> int:
		return sum(len(bucket) for bucket in self._by_key.values())


def load_appointments(
	records: Iterable[Any],
	warnings: Optional[List[str]] = None
) -> Tuple[Appointment, ...]:
	"""
	Convierte registros planos en un snapshot inmutable de Appointments.

	Acepta Appointments ya construidos o mappings. Registros sin id o con
	status desconocido se excluyen con un warning.

	Returns:
		tuple[Appointment]: snapshot en el orden recibido
	"""
	if warnings is None:
		warnings = []

	snapshot = []
	for position, record in enumerate(records or []):
		if isinstance(record, Appointment):
			snapshot.append(record)
			continue

		if not isinstance(record, Mapping):
			report_data_quality(warnings, f"Record #{position} is not a mapping, excluded")
			continue

		try:
			snapshot.append(Appointment.from_record(record))
		except ValueError as e:
			report_data_quality(warnings, f"Record #{position} excluded: {e}")

	return tuple(snapshot)
