from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging
from time import perf_counter
from datetime import datetime, timezone
from typing import List
from .state import build_engine
from .models import (
	Color,
	DifficultyInfo,
	Difficulty,
	GameState,
	SelectColorRequest,
	SessionSnapshot,
	SettingsResponse,
	StatsResponse,
	UpdateSettingsRequest,
)
from .services.palette import find_color
from .services.scoring import time_limit
from .config import settings

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("color_match")

app = FastAPI(default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

engine = build_engine()

class StateChangeLogger:
	"""Logs game state transitions seen on the snapshot stream."""

	def __init__(self) -> None:
		self.last_state: GameState | None = None

	def __call__(self, snap: SessionSnapshot) -> None:
		if snap.state == self.last_state:
			return
		logger.info({
			"event": "state_changed",
			"from": self.last_state.value if self.last_state else None,
			"to": snap.state.value,
			"score": snap.score,
			"level": snap.level,
		})
		self.last_state = snap.state

engine.subscribe(StateChangeLogger())

@app.on_event("startup")
def on_startup() -> None:
	logger.info({
		"event": "api_startup",
		"utc_time": datetime.now(timezone.utc).isoformat(),
		"base_time": settings.base_time,
		"tick_interval": settings.tick_interval,
		"storage_path": settings.storage_path,
	})

@app.on_event("shutdown")
def on_shutdown() -> None:
	engine.close()
	logger.info({"event": "api_shutdown"})

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response

@app.get("/api/game", response_model=SessionSnapshot)
def get_game():
	return engine.snapshot()

@app.post("/api/game/start", response_model=SessionSnapshot)
def start_game():
	engine.start_game()
	return engine.snapshot()

@app.post("/api/game/pause", response_model=SessionSnapshot)
def pause_game():
	engine.pause_game()
	return engine.snapshot()

@app.post("/api/game/resume", response_model=SessionSnapshot)
def resume_game():
	engine.resume_game()
	return engine.snapshot()

@app.post("/api/game/select", response_model=SessionSnapshot)
def select_color(payload: SelectColorRequest):
	# colors outside the palette simply never match the target
	choice = find_color(payload.color, engine.palette) or Color(hex=payload.color)
	engine.select_color(choice)
	return engine.snapshot()

@app.post("/api/game/menu", response_model=SessionSnapshot)
def return_to_menu():
	engine.return_to_menu()
	return engine.snapshot()

@app.get("/api/settings", response_model=SettingsResponse)
def get_settings():
	snap = engine.snapshot()
	return SettingsResponse(sound_enabled=snap.sound_enabled, difficulty=snap.difficulty)

@app.put("/api/settings", response_model=SettingsResponse)
def update_settings(payload: UpdateSettingsRequest):
	engine.update_settings(payload.sound_enabled, payload.difficulty)
	snap = engine.snapshot()
	return SettingsResponse(sound_enabled=snap.sound_enabled, difficulty=snap.difficulty)

@app.get("/api/stats", response_model=StatsResponse)
def get_stats():
	return StatsResponse(**engine.stats())

@app.get("/api/difficulties", response_model=List[DifficultyInfo])
def list_difficulties():
	return [
		DifficultyInfo(
			name=d,
			time_multiplier=d.time_multiplier,
			option_count=d.option_count,
			time_limit=time_limit(engine.base_time, d.time_multiplier),
			description=d.description,
		)
		for d in Difficulty
	]

@app.get("/api/palette", response_model=List[Color])
def get_palette():
	return engine.palette
