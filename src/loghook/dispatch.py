# Background dispatch of log writes

import queue
import sys
import threading
import time
from typing import Callable, Dict

DROP_NEWEST = "drop_newest"
DROP_OLDEST = "drop_oldest"
BLOCK = "block"
OVERFLOW_POLICIES = (DROP_NEWEST, DROP_OLDEST, BLOCK)


class AsyncDispatcher:
	"""Bounded worker pool for fire-and-forget writes.

	Tasks go into a fixed-capacity queue drained by a fixed number of daemon
	threads. When the queue is full the overflow policy decides what happens:
	drop_newest discards the incoming task, drop_oldest evicts the oldest
	queued task, block waits up to block_timeout seconds and then drops.

	Task failures are never raised to the submitter. They are counted and
	reported on stderr at most once per error_print_interval seconds.
	"""

	def __init__(
		self,
		workers: int = 2,
		queue_size: int = 1000,
		overflow: str = DROP_NEWEST,
		block_timeout: float = 1.0,
		error_print_interval: float = 10.0,
		poll_interval: float = 0.1,
	):
		if overflow not in OVERFLOW_POLICIES:
			raise ValueError(f"overflow must be one of {', '.join(OVERFLOW_POLICIES)}, got {overflow!r}")
		if workers < 1:
			raise ValueError("workers must be at least 1")
		self.overflow = overflow
		self.block_timeout = block_timeout
		self.error_print_interval = error_print_interval
		self.poll_interval = poll_interval
		self._queue: queue.Queue = queue.Queue(maxsize=max(1, queue_size))
		# Guards enqueueing and _closed together; _lock guards counters
		self._submit_lock = threading.Lock()
		self._lock = threading.Lock()
		self._closed = False
		self._last_error_printed = 0.0
		self._stats = {"submitted": 0, "completed": 0, "failed": 0, "dropped": 0}
		self._threads = []
		for i in range(workers):
			thread = threading.Thread(target=self._worker_loop, name=f"loghook-dispatch-{i}", daemon=True)
			thread.start()
			self._threads.append(thread)

	def submit(self, task: Callable[[], object]) -> bool:
		"""Queue a task. Returns False when it was dropped.

		submitted counts tasks that made it into the queue; dropped counts
		tasks rejected on overflow or after shutdown, plus tasks evicted by
		drop_oldest.
		"""
		with self._submit_lock:
			if self._closed:
				self._count("dropped")
				return False
			if self._enqueue(task):
				self._count("submitted")
				return True
		self._count("dropped")
		return False

	def _enqueue(self, task) -> bool:
		try:
			self._queue.put_nowait(task)
			return True
		except queue.Full:
			pass
		if self.overflow == DROP_OLDEST:
			try:
				self._queue.get_nowait()
				self._queue.task_done()
				self._count("dropped")
			except queue.Empty:
				pass
			try:
				self._queue.put_nowait(task)
				return True
			except queue.Full:
				return False
		if self.overflow == BLOCK:
			try:
				self._queue.put(task, timeout=self.block_timeout)
				return True
			except queue.Full:
				return False
		return False

	def stats(self) -> Dict[str, int]:
		with self._lock:
			return dict(self._stats)

	@property
	def closed(self) -> bool:
		return self._closed

	def join(self):
		"""Block until every queued task has run."""
		self._queue.join()

	def shutdown(self, timeout: float = 5.0) -> bool:
		"""Stop accepting tasks and wait up to timeout for workers to drain the queue.

		Returns True when every worker has exited. Workers still busy at the
		deadline finish the queue on their own and then exit.
		"""
		deadline = time.monotonic() + timeout
		with self._submit_lock:
			self._closed = True
		for thread in self._threads:
			thread.join(max(0.0, deadline - time.monotonic()))
		return not any(thread.is_alive() for thread in self._threads)

	def _count(self, key):
		with self._lock:
			self._stats[key] += 1

	def _worker_loop(self):
		while True:
			try:
				task = self._queue.get(timeout=self.poll_interval)
			except queue.Empty:
				# Nothing can be enqueued once closed, so an empty queue is final
				if self._closed:
					return
				continue
			try:
				task()
			except Exception as e:
				self._count("failed")
				self._report_failure(e)
			else:
				self._count("completed")
			finally:
				self._queue.task_done()

	def _report_failure(self, error):
		current_time = time.time()
		# Only print errors occasionally to avoid log spam
		with self._lock:
			if current_time - self._last_error_printed <= self.error_print_interval:
				return
			self._last_error_printed = current_time
		print(f"[loghook] Background write failed: {type(error).__name__}: {error}", file=sys.stderr)
