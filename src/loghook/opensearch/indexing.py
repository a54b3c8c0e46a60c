# Index name resolution and index bootstrap

from datetime import datetime, timezone
from typing import Callable, Optional

from ..errors import CannotCreateIndexError
from .mappings import LOG_INDEX_BODY

IndexNameFunc = Callable[[], str]


def static_index(name: str) -> IndexNameFunc:
	"""Resolver that always returns the same index name."""
	def resolve():
		return name
	return resolve


def dated_index(prefix: str, date_format: str = "%Y.%m.%d", clock: Optional[Callable[[], datetime]] = None) -> IndexNameFunc:
	"""Resolver that appends the current UTC date, e.g. logs-2024.01.31."""
	now = clock or (lambda: datetime.now(timezone.utc))

	def resolve():
		return f"{prefix}-{now().strftime(date_format)}"
	return resolve


def as_resolver(index) -> IndexNameFunc:
	if isinstance(index, str):
		return static_index(index)
	if callable(index):
		return index
	raise TypeError(f"index must be a str or a callable, got {type(index).__name__}")


def index_log_document(client, index_name, doc, ctx):
	"""Write one log document."""
	return client.index(index=index_name, doc_type="log", body=doc, ctx=ctx)


def ensure_index(client, index_fn: IndexNameFunc, ctx, body=LOG_INDEX_BODY):
	"""Create the resolved index unless it already exists.

	Returns the create response, or None when the index was already there.
	Raises CannotCreateIndexError when the backend does not acknowledge the
	create; backend errors propagate unchanged.
	"""
	if client.indices.exists(index=index_fn(), ctx=ctx):
		return None
	name = index_fn()
	response = client.indices.create(index=name, body=body, ctx=ctx)
	if not (response or {}).get("acknowledged"):
		raise CannotCreateIndexError(name, response=response)
	return response
