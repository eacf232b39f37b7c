import logging
import threading
from typing import Callable

logger = logging.getLogger("color_match")

class Countdown:
	"""Periodic tick on a daemon thread until cancelled.

	``on_tick`` receives the handle itself so the owner can check that the
	tick belongs to the countdown it still considers active.
	"""

	def __init__(self, interval: float, on_tick: Callable[["Countdown", float], None]) -> None:
		self.interval = interval
		self._on_tick = on_tick
		self._stopped = threading.Event()
		self._thread = threading.Thread(target=self._run, name="color-match-countdown", daemon=True)

	@property
	def cancelled(self) -> bool:
		return self._stopped.is_set()

	def start(self) -> None:
		self._thread.start()

	def cancel(self) -> None:
		self._stopped.set()

	def _run(self) -> None:
		while not self._stopped.wait(self.interval):
			try:
				self._on_tick(self, self.interval)
			except Exception:
				logger.exception("countdown_tick_failed")
				self._stopped.set()

class ManualCountdown:
	"""Countdown that only advances when ``tick`` is called; used to drive the engine deterministically."""

	def __init__(self, interval: float, on_tick: Callable[["ManualCountdown", float], None]) -> None:
		self.interval = interval
		self._on_tick = on_tick
		self.started = False
		self.cancelled = False

	def start(self) -> None:
		self.started = True

	def cancel(self) -> None:
		self.cancelled = True

	def tick(self, times: int = 1) -> None:
		# ticks after cancel are still delivered so the owner's guard is exercised
		for _ in range(times):
			self._on_tick(self, self.interval)
