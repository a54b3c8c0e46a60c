# Cancellation context shared by every backend call a handler makes

import threading
import time
from typing import Optional


class ContextCancelledError(Exception):
	"""Raised when a backend call is attempted with a cancelled context."""
	pass


class CancelContext:
	"""One-way cancellation token, optionally bounded by a deadline.

	A context derived with with_timeout() is done as soon as its parent is
	cancelled or its own deadline passes. Cancelling never un-cancels.
	"""

	def __init__(self, parent: Optional["CancelContext"] = None, deadline: Optional[float] = None):
		self._event = threading.Event()
		self._parent = parent
		self._deadline = deadline

	def cancel(self):
		self._event.set()

	@property
	def cancelled(self) -> bool:
		if self._event.is_set():
			return True
		if self._parent is not None and self._parent.cancelled:
			return True
		if self._deadline is not None and time.monotonic() >= self._deadline:
			return True
		return False

	def remaining(self) -> Optional[float]:
		"""Seconds left before the nearest deadline, or None without one."""
		remaining = None
		if self._deadline is not None:
			remaining = max(0.0, self._deadline - time.monotonic())
		if self._parent is not None:
			parent_remaining = self._parent.remaining()
			if parent_remaining is not None:
				remaining = parent_remaining if remaining is None else min(remaining, parent_remaining)
		return remaining

	def with_timeout(self, seconds: Optional[float]) -> "CancelContext":
		if seconds is None:
			return self
		return CancelContext(parent=self, deadline=time.monotonic() + seconds)

	def raise_if_cancelled(self):
		if self.cancelled:
			raise ContextCancelledError("context cancelled")

	def __repr__(self):
		state = "cancelled" if self.cancelled else "active"
		return f"<CancelContext {state}>"
