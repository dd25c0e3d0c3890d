"""
Data-quality reporting

Malformed appointments never abort a render: they are excluded and a
warning is recorded for the caller and written to the app log.
"""

from typing import List

import frappe

LOGGER_NAME = "clinic_calendar"


def get_logger():
	return frappe.logger(LOGGER_NAME)


def report_data_quality(warnings: List[str], message: str) -> None:
	"""
	Registra un warning de calidad de datos.

	Args:
		warnings: lista acumulada del render actual (se modifica)
		message: descripción del problema
	"""
	warnings.append(message)
	get_logger().warning(f"Data quality: {message}")
