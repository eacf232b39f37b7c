import random
import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, List, Optional, Sequence
from .models import Color, Difficulty, GameState, SessionSnapshot
from .config import settings
from .services.countdown import Countdown
from .services.palette import PALETTE, generate_options, pick_target
from .services.persistence import (
	DIFFICULTY_KEY,
	GAMES_PLAYED_KEY,
	HIGH_SCORE_KEY,
	SOUND_ENABLED_KEY,
	JsonFileStore,
	PersistenceGateway,
)
from .services.scoring import calculate_points, should_level_up, time_limit

logger = logging.getLogger("color_match")

Observer = Callable[[SessionSnapshot], None]

class SessionData:
	def __init__(self, target_color: Color) -> None:
		self.score = 0
		self.high_score = 0
		self.state = GameState.NOT_STARTED
		self.time_remaining = 0.0
		self.level = 1
		self.target_color = target_color
		self.color_options: List[Color] = []
		self.streak = 0
		self.difficulty = Difficulty.NORMAL
		self.sound_enabled = False
		self.games_played = 0

class GameEngine:
	"""Owns the single game session: state machine, countdown, challenges and scoring.

	Every mutation runs under one lock and is followed by a snapshot pushed to
	the subscribers, so observers see changes in the order they happened.
	Calls that do not fit the current state are ignored.
	"""

	def __init__(
		self,
		store: PersistenceGateway,
		*,
		base_time: Optional[float] = None,
		tick_interval: Optional[float] = None,
		low_time_warning: Optional[float] = None,
		palette: Sequence[Color] = PALETTE,
		rng: Optional[random.Random] = None,
		countdown_factory: Callable[..., Any] = Countdown,
		writer: Optional[Executor] = None,
	) -> None:
		self.store = store
		self.base_time = settings.base_time if base_time is None else base_time
		self.tick_interval = settings.tick_interval if tick_interval is None else tick_interval
		self.low_time_warning = settings.low_time_warning if low_time_warning is None else low_time_warning
		self.palette = list(palette)
		if len(set(self.palette)) < 2:
			raise ValueError("palette needs at least two distinct colors")
		self.rng = rng or random.Random()
		self._countdown_factory = countdown_factory
		self._countdown: Any = None
		self._writer = writer
		self._lock = threading.RLock()
		self._observers: List[Observer] = []
		self.session = SessionData(pick_target(self.palette, self.rng))
		self._load()

	# -- persistence --

	def _load(self) -> None:
		s = self.session
		s.high_score = max(0, self._read(self.store.get_int, HIGH_SCORE_KEY, 0))
		s.sound_enabled = self._read(self.store.get_bool, SOUND_ENABLED_KEY, False)
		s.difficulty = Difficulty.from_label(self._read(self.store.get_string, DIFFICULTY_KEY, None))
		s.games_played = max(0, self._read(self.store.get_int, GAMES_PLAYED_KEY, 0))
		logger.debug({
			"event": "settings_loaded",
			"high_score": s.high_score,
			"sound_enabled": s.sound_enabled,
			"difficulty": s.difficulty.value,
			"games_played": s.games_played,
		})

	def _read(self, getter: Callable[[str], Any], key: str, default: Any) -> Any:
		try:
			return getter(key)
		except Exception:
			logger.exception("storage_read_failed", extra={"key": key})
			return default

	def _write(self, setter: Callable[[str, Any], None], key: str, value: Any) -> None:
		try:
			setter(key, value)
			logger.debug({"event": "storage_write", "key": key, "value": value})
		except Exception:
			logger.exception("storage_write_failed", extra={"key": key})

	def _persist(self, setter: Callable[[str, Any], None], key: str, value: Any) -> None:
		if self._writer is None:
			self._write(setter, key, value)
			return
		try:
			self._writer.submit(self._write, setter, key, value)
		except RuntimeError:
			logger.exception("storage_write_rejected", extra={"key": key})

	# -- observation --

	def subscribe(self, observer: Observer) -> Callable[[], None]:
		with self._lock:
			self._observers.append(observer)

		def unsubscribe() -> None:
			with self._lock:
				if observer in self._observers:
					self._observers.remove(observer)
		return unsubscribe

	def snapshot(self) -> SessionSnapshot:
		with self._lock:
			s = self.session
			active = s.state in (GameState.PLAYING, GameState.PAUSED)
			return SessionSnapshot(
				score=s.score,
				high_score=s.high_score,
				state=s.state,
				time_remaining=s.time_remaining,
				level=s.level,
				target_color=s.target_color,
				color_options=list(s.color_options),
				streak=s.streak,
				difficulty=s.difficulty,
				sound_enabled=s.sound_enabled,
				games_played=s.games_played,
				time_low=active and s.time_remaining <= self.low_time_warning,
			)

	def _emit(self) -> None:
		snap = self.snapshot()
		for observer in list(self._observers):
			try:
				observer(snap)
			except Exception:
				logger.exception("observer_failed")

	# -- countdown --

	def _start_countdown(self) -> None:
		self._stop_countdown()
		self._countdown = self._countdown_factory(self.tick_interval, self._on_tick)
		self._countdown.start()

	def _stop_countdown(self) -> None:
		if self._countdown is not None:
			self._countdown.cancel()
			self._countdown = None

	def _on_tick(self, handle: Any, elapsed: float) -> None:
		with self._lock:
			# late ticks from a replaced or cancelled countdown must not touch the session
			if handle is not self._countdown or handle.cancelled or self.session.state != GameState.PLAYING:
				return
			s = self.session
			s.time_remaining = max(0.0, round(s.time_remaining - elapsed, 6))
			if s.time_remaining <= 0:
				logger.debug({"event": "time_up", "score": s.score})
				self.end_game()
				return
			self._emit()

	# -- operations --

	def start_game(self) -> None:
		with self._lock:
			s = self.session
			if s.state not in (GameState.NOT_STARTED, GameState.GAME_OVER):
				logger.debug({"event": "start_ignored", "state": s.state.value})
				return
			s.state = GameState.PLAYING
			s.score = 0
			s.streak = 0
			s.level = 1
			s.time_remaining = time_limit(self.base_time, s.difficulty.time_multiplier)
			s.games_played += 1
			self._persist(self.store.set_int, GAMES_PLAYED_KEY, s.games_played)
			self.generate_challenge()
			self._start_countdown()
			logger.debug({
				"event": "game_started",
				"difficulty": s.difficulty.value,
				"time_remaining": s.time_remaining,
				"games_played": s.games_played,
			})
			self._emit()

	def pause_game(self) -> None:
		with self._lock:
			if self.session.state != GameState.PLAYING:
				return
			self._stop_countdown()
			self.session.state = GameState.PAUSED
			logger.debug({"event": "game_paused", "time_remaining": self.session.time_remaining})
			self._emit()

	def resume_game(self) -> None:
		with self._lock:
			if self.session.state != GameState.PAUSED:
				return
			self.session.state = GameState.PLAYING
			self._start_countdown()
			logger.debug({"event": "game_resumed", "time_remaining": self.session.time_remaining})
			self._emit()

	def end_game(self) -> None:
		with self._lock:
			s = self.session
			if s.state not in (GameState.PLAYING, GameState.PAUSED):
				return
			s.state = GameState.GAME_OVER
			self._stop_countdown()
			new_best = s.score > s.high_score
			if new_best:
				s.high_score = s.score
				self._persist(self.store.set_int, HIGH_SCORE_KEY, s.high_score)
			logger.debug({"event": "game_over", "score": s.score, "high_score": s.high_score, "new_best": new_best})
			self._emit()

	def return_to_menu(self) -> None:
		with self._lock:
			if self.session.state != GameState.GAME_OVER:
				return
			self.session.state = GameState.NOT_STARTED
			self._emit()

	def select_color(self, choice: Color) -> None:
		with self._lock:
			s = self.session
			if s.state != GameState.PLAYING:
				return
			if choice == s.target_color:
				points = calculate_points(s.level, s.streak)
				s.score += points
				s.streak += 1
				if should_level_up(s.streak):
					s.level += 1
				logger.debug({
					"event": "correct_selection",
					"points": points,
					"score": s.score,
					"streak": s.streak,
					"level": s.level,
				})
				self.generate_challenge()
				self._emit()
			else:
				logger.debug({
					"event": "wrong_selection",
					"selected": choice.hex,
					"target": s.target_color.hex,
					"score": s.score,
				})
				s.streak = 0
				self.end_game()

	def generate_challenge(self) -> None:
		with self._lock:
			s = self.session
			s.target_color = pick_target(self.palette, self.rng)
			s.color_options = generate_options(self.palette, s.target_color, s.difficulty.option_count, self.rng)

	def update_settings(self, sound_enabled: bool, difficulty: Difficulty) -> None:
		with self._lock:
			s = self.session
			s.sound_enabled = sound_enabled
			s.difficulty = difficulty
			self._persist(self.store.set_bool, SOUND_ENABLED_KEY, sound_enabled)
			self._persist(self.store.set_string, DIFFICULTY_KEY, difficulty.value)
			logger.debug({"event": "settings_updated", "sound_enabled": sound_enabled, "difficulty": difficulty.value})
			self._emit()

	def stats(self) -> dict:
		with self._lock:
			s = self.session
			return {"high_score": s.high_score, "games_played": s.games_played, "difficulty": s.difficulty}

	def close(self) -> None:
		with self._lock:
			self._stop_countdown()
		if self._writer is not None:
			self._writer.shutdown(wait=True)

def build_engine() -> GameEngine:
	writer = ThreadPoolExecutor(max_workers=1, thread_name_prefix="color-match-storage") if settings.async_writes else None
	return GameEngine(JsonFileStore(settings.storage_path), writer=writer)
