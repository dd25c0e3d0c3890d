"""
Calendar API Endpoints

Whitelisted functions for the calendar page:
- get_calendar_view: render model for a view/anchor/language
- change_appointment_status: optimistic status change + persistence
- get_status_options: values for the status selector

Appointments are read from the DocType configured in
site_config (`clinic_calendar.appointment_doctype`).
"""

import frappe
from frappe import _
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional

from clinic_calendar.clinic_calendar.calendar_view import date_keys
from clinic_calendar.clinic_calendar.calendar_view.controller import CalendarController
from clinic_calendar.clinic_calendar.calendar_view.models import (
	CalendarConfigurationError,
	StatusChangeEvent,
	status_options,
)
from clinic_calendar.clinic_calendar.calendar_view.settings import CalendarSettings, load_settings

from clinic_calendar.api.shared import (
	validate_date_string,
	validate_direction,
	validate_docname,
	validate_status,
	validate_view,
)

STATUS_CHANGED_EVENT = "clinic_appointment_status_changed"

APPOINTMENT_FIELDS = [
	"name",
	"date",
	"start_time",
	"duration_minutes",
	"status",
	"patient_name",
	"patient",
	"end_time",
	"notes",
]


def _format_time_value(value: Any) -> Optional[str]:
	"""Convierte Time de Frappe (timedelta desde medianoche, time o str) a HH:mm."""
	if value is None or value == "":
		return None
	if isinstance(value, timedelta):
		total_minutes = int(value.total_seconds()) // 60
		hours, minutes = divmod(total_minutes, 60)
		return f"{hours:02d}:{minutes:02d}"
	if isinstance(value, time):
		return value.strftime("%H:%M")
	return str(value)


def normalize_record(row: Dict[str, Any]) -> Dict[str, Any]:
	"""
	Convierte una fila de frappe.get_all al registro plano que consume el core.

	- date/datetime -> key YYYY-MM-DD (local, sin UTC)
	- Time (timedelta) -> HH:mm
	"""
	row_date = row.get("date")
	if isinstance(row_date, (date, datetime)):
		row_date = date_keys.encode(row_date)

	return {
		"id": row.get("name"),
		"date": row_date,
		"startTime": _format_time_value(row.get("start_time")),
		"durationMinutes": row.get("duration_minutes"),
		"status": row.get("status"),
		"patientName": row.get("patient_name"),
		"patientId": row.get("patient"),
		"endTime": _format_time_value(row.get("end_time")),
		"notes": row.get("notes"),
	}


def fetch_appointments(settings: CalendarSettings) -> List[Dict[str, Any]]:
	"""Lee todas las citas (snapshot) en orden de creación."""
	rows = frappe.get_all(
		settings.appointment_doctype,
		fields=APPOINTMENT_FIELDS,
		order_by="creation asc"
	)
	return [normalize_record(row) for row in rows]


def persist_status_change(doctype: str) -> Callable[[StatusChangeEvent], None]:
	"""
	Listener que persiste un StatusChangeEvent y lo publica en realtime.

	La actualización local es optimista: si la escritura falla no hay rollback
	del render ya devuelto.
	"""
	def _listener(event: StatusChangeEvent) -> None:
		frappe.db.set_value(doctype, event.appointment_id, "status", event.new_status.value)
		frappe.publish_realtime(
			STATUS_CHANGED_EVENT,
			{
				"appointment_id": event.appointment_id,
				"new_status": event.new_status.value,
				"previous_status": event.previous_status.value if event.previous_status else None,
			},
			after_commit=True,
		)

	return _listener


def build_controller(
	settings: CalendarSettings,
	records: List[Dict[str, Any]],
	view: str,
	anchor_date: Optional[str],
	language: Optional[str],
	direction: Optional[str],
	selected_day: Optional[str] = None
) -> CalendarController:
	controller = CalendarController(
		appointments=records,
		settings=settings,
		view=view,
		anchor_date=date_keys.decode(anchor_date) if anchor_date else None,
		language=language,
		direction=direction,
	)
	if selected_day:
		controller.open_day(selected_day)
	return controller


def _parse_common_args(view, anchor_date, language, direction):
	view = validate_view(view)
	if anchor_date:
		anchor_date = validate_date_string(anchor_date, "anchor_date")
	direction = validate_direction(direction) if direction else None
	language = language or getattr(frappe.local, "lang", None)
	return view, anchor_date, language, direction


@frappe.whitelist(methods=["GET"])
def get_calendar_view(
	view: str = "monthly",
	anchor_date: Optional[str] = None,
	language: Optional[str] = None,
	direction: Optional[str] = None,
	selected_day: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Render model del calendario.

	Args:
		view: "monthly", "weekly" o "daily"
		anchor_date: fecha de referencia (YYYY-MM-DD), por defecto hoy
		language: tag de idioma ("en", "ar"), por defecto el idioma de la sesión
		direction: "ltr" o "rtl", por defecto según el idioma
		selected_day: día abierto en el drawer (YYYY-MM-DD)

	Returns:
		dict: RenderModel.as_dict()

	Example:
		```javascript
		frappe.call({
			method: "clinic_calendar.api.calendar_api.get_calendar_view",
			args: {view: "weekly", anchor_date: "2024-01-15", language: "en"},
			callback: function(r) {
				console.log(r.message.cells, r.message.positions);
			}
		});
		```
	"""
	view, anchor_date, language, direction = _parse_common_args(view, anchor_date, language, direction)
	if selected_day:
		selected_day = validate_date_string(selected_day, "selected_day")

	try:
		settings = load_settings()
		controller = build_controller(
			settings,
			fetch_appointments(settings),
			view,
			anchor_date,
			language,
			direction,
			selected_day,
		)
		return controller.render_model.as_dict()

	except CalendarConfigurationError as e:
		frappe.throw(_(str(e)), frappe.ValidationError)
	except frappe.ValidationError:
		raise
	except Exception as e:
		frappe.log_error(f"Error in get_calendar_view: {str(e)}", "Clinic Calendar API")
		frappe.throw(_("Error al generar el calendario"))


@frappe.whitelist(methods=["POST"])
def change_appointment_status(
	appointment_id: str,
	new_status: str,
	view: str = "monthly",
	anchor_date: Optional[str] = None,
	language: Optional[str] = None,
	direction: Optional[str] = None
) -> Dict[str, Any]:
	"""
	Cambia el status de una cita y devuelve el calendario actualizado.

	El controller aplica el cambio sobre su snapshot y emite el evento; el
	listener registrado aquí lo persiste y lo publica en realtime.

	Returns:
		dict: {"event": {...} | None, "calendar": RenderModel.as_dict()}
	"""
	appointment_id = validate_docname(appointment_id, "appointment_id")
	new_status = validate_status(new_status)
	view, anchor_date, language, direction = _parse_common_args(view, anchor_date, language, direction)

	try:
		settings = load_settings()
		controller = build_controller(
			settings,
			fetch_appointments(settings),
			view,
			anchor_date,
			language,
			direction,
		)
		controller.subscribe(persist_status_change(settings.appointment_doctype))
		event = controller.on_appointment_status_change(appointment_id, new_status)

		if event is None:
			frappe.throw(_(f"Appointment '{appointment_id}' no existe"), frappe.DoesNotExistError)

		return {
			"event": {
				"appointment_id": event.appointment_id,
				"new_status": event.new_status.value,
				"previous_status": event.previous_status.value if event.previous_status else None,
			},
			"calendar": controller.render_model.as_dict(),
		}

	except CalendarConfigurationError as e:
		frappe.throw(_(str(e)), frappe.ValidationError)
	except frappe.ValidationError:
		raise
	except Exception as e:
		frappe.log_error(f"Error in change_appointment_status: {str(e)}", "Clinic Calendar API")
		frappe.throw(_("Error al cambiar el status de la cita"))


@frappe.whitelist(methods=["GET"])
def get_status_options() -> List[Dict[str, str]]:
	"""Opciones de status con su etiqueta traducida."""
	return [{"label": _(option["label"]), "value": option["value"]} for option in status_options()]
