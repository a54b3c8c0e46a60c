# Timestamp formatting for log documents

from datetime import datetime, timezone

_NANOS_PER_SECOND = 1_000_000_000


def record_time_ns(record) -> int:
	"""Return the record's creation time as integer nanoseconds since the epoch."""
	created_ns = getattr(record, "created_ns", None)
	if isinstance(created_ns, int):
		return created_ns
	# LogRecord.created is a float; microseconds is all it reliably holds
	return round(record.created * 1_000_000) * 1000


def format_rfc3339_nano(ns: int) -> str:
	"""Format epoch nanoseconds as UTC RFC 3339 with trimmed fractional seconds.

	>>> format_rfc3339_nano(1700000000_500000000)
	'2023-11-14T22:13:20.5Z'
	"""
	seconds, fraction = divmod(ns, _NANOS_PER_SECOND)
	text = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
	if fraction:
		text += "." + f"{fraction:09d}".rstrip("0")
	return text + "Z"
