# SearchIndexHandler implementation

import logging
import threading
from typing import Any, Callable, FrozenSet, Mapping, Optional

from .config import load_config
from .context import CancelContext
from .dispatch import DROP_NEWEST, AsyncDispatcher
from .document import default_message_creator, normalize_fields, record_fields
from .errors import CannotCreateIndexError, ErrorKind, HookError
from .levels import Level, enabled_levels, from_levelno, normalize_level, to_levelno
from .opensearch.client import get_opensearch_client
from .opensearch.indexing import as_resolver, dated_index, ensure_index, index_log_document

MessageCreatorFunc = Callable[[logging.LogRecord, "SearchIndexHandler"], Mapping[str, Any]]


class SearchIndexHandler(logging.Handler):
	"""Logging handler that ships records as documents to a search index.

	Construction checks that the resolved index exists and creates it when
	it does not; any failure there cancels the handler's context and
	propagates, so no half-built handler is ever returned.

	In synchronous mode fire() writes on the caller's thread and raises the
	backend's error. In asynchronous mode fire() hands the write to a
	bounded worker pool and returns immediately; failures there are counted
	by the dispatcher and never reach the caller.
	"""

	def __init__(
		self,
		client,
		host: str,
		level=Level.INFO,
		index="logs",
		asynchronous: bool = False,
		workers: int = 2,
		queue_size: int = 1000,
		overflow: str = DROP_NEWEST,
		write_timeout: Optional[float] = None,
	):
		threshold = normalize_level(level)
		if threshold is None:
			raise ValueError(f"Unknown level: {level!r}")
		index_fn = as_resolver(index)
		super().__init__(to_levelno(threshold))
		self.client = client
		self._host = host
		self._index = index_fn
		self._levels = enabled_levels(threshold)
		self.write_timeout = write_timeout
		self._creator_lock = threading.Lock()
		self._message_creator: MessageCreatorFunc = default_message_creator
		self._ctx = CancelContext()
		self.dispatcher = None
		if asynchronous:
			self.dispatcher = AsyncDispatcher(workers=workers, queue_size=queue_size, overflow=overflow)
		try:
			ensure_index(client, index_fn, self._ctx)
		except Exception:
			self._ctx.cancel()
			if self.dispatcher is not None:
				self.dispatcher.shutdown()
			raise

	@property
	def host(self) -> str:
		return self._host

	def get_host(self) -> str:
		"""Return the host label written into every document."""
		return self._host

	@property
	def asynchronous(self) -> bool:
		return self.dispatcher is not None

	@property
	def context(self) -> CancelContext:
		return self._ctx

	def levels(self) -> FrozenSet[Level]:
		return self._levels

	def index_name(self) -> str:
		return self._index()

	def set_message_creator(self, fn: MessageCreatorFunc):
		"""Replace the function that turns a record into a document."""
		with self._creator_lock:
			self._message_creator = fn

	def _current_creator(self) -> MessageCreatorFunc:
		with self._creator_lock:
			return self._message_creator

	def cancel(self):
		"""Cancel every backend call made through this handler, now and later."""
		self._ctx.cancel()

	def fire(self, record: logging.LogRecord):
		if self.dispatcher is not None:
			self.dispatcher.submit(lambda: self._write(record))
			return None
		return self._write(record)

	def _write(self, record):
		record.fields = normalize_fields(record_fields(record))
		doc = self._current_creator()(record, self)
		ctx = self._ctx.with_timeout(self.write_timeout)
		index_log_document(self.client, self._index(), doc, ctx)

	def emit(self, record):
		if from_levelno(record.levelno) not in self._levels:
			return
		try:
			self.fire(record)
		except Exception:
			self.handleError(record)

	def close(self):
		try:
			if self.dispatcher is not None:
				self.dispatcher.shutdown()
			self.cancel()
		finally:
			super().close()


def new_handler(client, host, level, index, **kwargs) -> SearchIndexHandler:
	"""Synchronous handler for a fixed index name or an index-name callable."""
	return SearchIndexHandler(client, host, level=level, index=index, asynchronous=False, **kwargs)


def new_async_handler(client, host, level, index, **kwargs) -> SearchIndexHandler:
	"""Asynchronous handler for a fixed index name or an index-name callable."""
	return SearchIndexHandler(client, host, level=level, index=index, asynchronous=True, **kwargs)


def handler_from_config(cfg=None, client=None) -> SearchIndexHandler:
	cfg = cfg or load_config()
	if client is None:
		client = get_opensearch_client(cfg)
	if cfg.index_rotation == "daily":
		index = dated_index(cfg.index)
	else:
		index = cfg.index
	return SearchIndexHandler(
		client,
		cfg.source_host,
		level=cfg.level,
		index=index,
		asynchronous=cfg.async_mode,
		workers=cfg.workers,
		queue_size=cfg.queue_size,
		overflow=cfg.overflow,
		write_timeout=cfg.write_timeout,
	)


def attach_handler(logger=None, cfg=None, client=None) -> SearchIndexHandler:
	"""Build a handler from configuration and add it to a logger (root by default)."""
	handler = handler_from_config(cfg=cfg, client=client)
	(logger or logging.getLogger()).addHandler(handler)
	return handler


__all__ = [
	"CannotCreateIndexError",
	"ErrorKind",
	"HookError",
	"MessageCreatorFunc",
	"SearchIndexHandler",
	"attach_handler",
	"handler_from_config",
	"new_async_handler",
	"new_handler",
]
