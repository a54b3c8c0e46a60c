# Log document composition

from typing import Any, Dict, Mapping

from .formatting import format_rfc3339_nano, record_time_ns
from .levels import from_levelno

ERROR_KEY = "error"


class ErrorValue:
	"""Tags a structured field value as an error to be written as text."""
	__slots__ = ("message",)

	def __init__(self, error):
		self.message = str(error)

	def __str__(self):
		return self.message

	def __repr__(self):
		return f"ErrorValue({self.message!r})"


def record_fields(record) -> Dict[str, Any]:
	fields = getattr(record, "fields", None)
	if not isinstance(fields, Mapping):
		return {}
	return dict(fields)


def normalize_fields(fields: Mapping[str, Any]) -> Dict[str, Any]:
	"""Copy fields, turning an error held under "error" into its message."""
	data = dict(fields)
	value = data.get(ERROR_KEY)
	if isinstance(value, (BaseException, ErrorValue)):
		data[ERROR_KEY] = str(value)
	return data


def default_message_creator(record, handler) -> Dict[str, Any]:
	"""Default composer for documents sent to the search backend."""
	return {
		"Host": handler.host,
		"@timestamp": format_rfc3339_nano(record_time_ns(record)),
		"Message": record.getMessage(),
		"Data": normalize_fields(record_fields(record)),
		"Level": from_levelno(record.levelno).label,
	}
