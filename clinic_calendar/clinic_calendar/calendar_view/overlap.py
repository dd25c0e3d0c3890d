"""
Overlap Resolver

Lays out one day's appointments on the week/day timeline, deciding which
appointments are simultaneous and how they share the column width:
- all-day appointments sit in row 1 at full width and are never grouped
- timed appointments get rows from the TimeSlotScheduler
- simultaneous appointments are stacked side by side (or suppressed,
  depending on the overlap policy)

Two collision strategies are available and must be chosen explicitly:
- exact_time: simultaneous means identical start time string
- interval: simultaneous means the [start, end) ranges overlap
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Sequence

from .diagnostics import get_logger, report_data_quality
from .models import Appointment, DayLayout, InvalidSettingsError, TimelinePosition
from .settings import (
	COLLISION_EXACT_TIME,
	COLLISION_INTERVAL,
	OVERLAP_POLICIES,
	OVERLAP_POLICY_STACK,
	OVERLAP_POLICY_SUPPRESS,
	CalendarSettings,
)
from .timeline import ALL_DAY_SLOT, TimeSlotScheduler, parse_start_time

MARGIN_PERCENT = 2.0
GAP_PERCENT = 1.0


@dataclass(frozen=True)
class TimedEntry:
	appointment: Appointment
	order: int
	start: int
	end: int

	@property
	def id(self) -> str:
		return self.appointment.id

	def overlaps(self, other: "TimedEntry") -> bool:
		return self.start < other.end and other.start < self.end


class OverlapStrategy(ABC):
	"""
	Interfaz para estrategias de colisión.

	Cada grupo es una lista de columnas y cada columna una lista de entradas
	que no se solapan entre sí. Las columnas se reparten el ancho de izquierda
	a derecha, en el orden de la lista.
	"""

	name = ""

	@abstractmethod
	def group(self, entries: Sequence[TimedEntry]) -> List[List[List[TimedEntry]]]:
		"""
		Agrupa entradas simultáneas.

		Args:
			entries: entradas timed válidas del día, en orden original

		Returns:
			list[list[list[TimedEntry]]]: grupos -> columnas -> entradas
		"""
		pass


class ExactTimeStrategy(OverlapStrategy):
	"""Agrupa por igualdad exacta del string startTime; una columna por id, en orden de id."""

	name = COLLISION_EXACT_TIME

	def group(self, entries: Sequence[TimedEntry]) -> List[List[List[TimedEntry]]]:
		groups: Dict[str, List[TimedEntry]] = {}
		for entry in entries:
			groups.setdefault(entry.appointment.start_time, []).append(entry)

		ordered = sorted(groups.values(), key=lambda members: (members[0].start, members[0].appointment.start_time))
		return [
			[[entry] for entry in sorted(members, key=lambda entry: entry.id)]
			for members in ordered
		]


class IntervalStrategy(OverlapStrategy):
	"""
	Agrupa por solapamiento real de intervalos.

	Un grupo es una componente conexa de rangos que se solapan. Dentro del
	grupo, en orden (start, id), cada entrada va a la primera columna cuya
	última entrada ya terminó; si no hay ninguna se abre una columna nueva.
	Dos entradas en columnas distintas del mismo grupo solo quedan lado a
	lado si se solapan.
	"""

	name = COLLISION_INTERVAL

	def group(self, entries: Sequence[TimedEntry]) -> List[List[List[TimedEntry]]]:
		ordered = sorted(entries, key=lambda entry: (entry.start, entry.id))

		groups: List[List[List[TimedEntry]]] = []
		cluster_end = None

		for entry in ordered:
			if groups and entry.start < cluster_end:
				self._place(groups[-1], entry)
				cluster_end = max(cluster_end, entry.end)
			else:
				groups.append([[entry]])
				cluster_end = entry.end

		return groups

	def _place(self, columns: List[List[TimedEntry]], entry: TimedEntry) -> None:
		for column in columns:
			if column[-1].end <= entry.start:
				column.append(entry)
				return
		columns.append([entry])


def get_overlap_strategy(name: str) -> OverlapStrategy:
	"""
	Factory para obtener la estrategia de colisión.

	Args:
		name: "exact_time" o "interval"

	Raises:
		InvalidSettingsError: si la estrategia no es soportada
	"""
	if name == COLLISION_EXACT_TIME:
		return ExactTimeStrategy()
	elif name == COLLISION_INTERVAL:
		return IntervalStrategy()
	else:
		raise InvalidSettingsError(f"Unsupported collision strategy: {name!r}")


def lateral_slots(count: int) -> List[Dict[str, float]]:
	"""
	Divide el ancho disponible en `count` columnas iguales.

	Returns:
		list[dict]: [{"left": float, "width": float}, ...] en porcentaje
	"""
	width = (100.0 - 2 * MARGIN_PERCENT - GAP_PERCENT * (count - 1)) / count
	return [
		{"left": round(MARGIN_PERCENT + index * (width + GAP_PERCENT), 4), "width": round(width, 4)}
		for index in range(count)
	]


class OverlapResolver:
	"""Calcula TimelinePosition para cada appointment de un día."""

	def __init__(
		self,
		scheduler: TimeSlotScheduler,
		strategy: OverlapStrategy,
		policy: str = OVERLAP_POLICY_STACK
	):
		if policy not in OVERLAP_POLICIES:
			raise InvalidSettingsError(f"Unknown overlap_policy: {policy!r}")

		self.scheduler = scheduler
		self.strategy = strategy
		self.policy = policy

	@classmethod
	def from_settings(cls, settings: CalendarSettings) -> "OverlapResolver":
		return cls(
			TimeSlotScheduler.from_settings(settings),
			get_overlap_strategy(settings.collision_strategy),
			settings.overlap_policy,
		)

	def layout(self, day: date, appointments: Iterable[Appointment]) -> DayLayout:
		"""
		Layout de un día.

		Algoritmo:
			1. Validar: start time mal formado o duración <= 0 -> excluir + warning
			2. Separar all-day (fila 1, ancho completo, sin agrupar) de timed
			3. Si la política es suppress_duplicates, conservar solo el primero
			   (orden original) de cada start time repetido
			4. Agrupar timed con la estrategia de colisión
			5. Repartir el ancho de cada grupo y calcular filas con el scheduler

		Returns:
			DayLayout con positions (id -> TimelinePosition), suppressed y warnings
		"""
		result = DayLayout()
		full_width = lateral_slots(1)[0]
		entries: List[TimedEntry] = []

		for order, appointment in enumerate(appointments):
			if appointment.is_all_day:
				result.positions[appointment.id] = TimelinePosition(
					row_start=ALL_DAY_SLOT + 1,
					row_span=1,
					left_percent=full_width["left"],
					width_percent=full_width["width"],
					is_all_day=True,
				)
				continue

			if parse_start_time(appointment.start_time) is None:
				report_data_quality(
					result.warnings,
					f"Appointment {appointment.id} on {day} has malformed start time "
					f"{appointment.start_time!r}, excluded from timeline"
				)
				continue

			if appointment.duration_minutes is None or appointment.duration_minutes <= 0:
				report_data_quality(
					result.warnings,
					f"Appointment {appointment.id} on {day} has non-positive duration "
					f"{appointment.duration_minutes!r}, excluded from timeline"
				)
				continue

			start, end = self.scheduler.minutes_range(appointment.start_time, appointment.duration_minutes)
			entries.append(TimedEntry(appointment=appointment, order=order, start=start, end=end))

		if self.policy == OVERLAP_POLICY_SUPPRESS:
			entries = self._suppress_duplicates(day, entries, result)

		for columns in self.strategy.group(entries):
			for index, (column, slot) in enumerate(zip(columns, lateral_slots(len(columns)))):
				for entry in column:
					result.positions[entry.id] = self._position(entry, index, len(columns), slot)

		return result

	def _suppress_duplicates(self, day: date, entries: List[TimedEntry], result: DayLayout) -> List[TimedEntry]:
		kept: List[TimedEntry] = []
		seen = set()

		for entry in sorted(entries, key=lambda item: item.order):
			if entry.appointment.start_time in seen:
				result.suppressed.append(entry.id)
				continue
			seen.add(entry.appointment.start_time)
			kept.append(entry)

		if result.suppressed:
			get_logger().info(
				f"{day}: suppressed {len(result.suppressed)} same-time appointment(s): "
				f"{', '.join(result.suppressed)}"
			)

		return kept

	def _position(self, entry: TimedEntry, index: int, count: int, slot: Dict[str, float]) -> TimelinePosition:
		slot_index = self.scheduler.slot_index_for(entry.appointment.start_time)
		row_span = self.scheduler.row_span_for(entry.appointment.duration_minutes)
		# El bloque no puede pasar de la última fila del día
		row_span = min(row_span, self.scheduler.total_rows - slot_index)

		return TimelinePosition(
			row_start=slot_index + 1,
			row_span=row_span,
			column_start=index + 1,
			column_span=1,
			column_count=count,
			left_percent=slot["left"],
			width_percent=slot["width"],
		)
