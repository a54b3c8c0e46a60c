# Errors raised while setting up a handler

from enum import Enum


class ErrorKind(Enum):
	CANNOT_CREATE_INDEX = "cannot_create_index"


class HookError(Exception):
	"""Base exception for handler failures, tagged with an ErrorKind."""

	def __init__(self, kind: ErrorKind, message: str, index=None, cause=None):
		super().__init__(message)
		self.kind = kind
		self.index = index
		self.cause = cause


class CannotCreateIndexError(HookError):
	"""Raised when the backend does not acknowledge index creation."""

	def __init__(self, index, response=None):
		super().__init__(ErrorKind.CANNOT_CREATE_INDEX, f"Cannot create index '{index}'", index=index)
		self.response = response
