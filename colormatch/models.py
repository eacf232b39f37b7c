from enum import Enum
from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional

class GameState(str, Enum):
    NOT_STARTED = "NotStarted"
    PLAYING = "Playing"
    PAUSED = "Paused"
    GAME_OVER = "GameOver"

class Difficulty(str, Enum):
    EASY = "Easy"
    NORMAL = "Normal"
    HARD = "Hard"

    @property
    def time_multiplier(self) -> float:
        return _DIFFICULTY_PARAMS[self][0]

    @property
    def option_count(self) -> int:
        return _DIFFICULTY_PARAMS[self][1]

    @property
    def description(self) -> str:
        return _DIFFICULTY_PARAMS[self][2]

    @classmethod
    def from_label(cls, label: Optional[str]) -> "Difficulty":
        # unknown or missing labels fall back to Normal
        for member in cls:
            if member.value == label:
                return member
        return cls.NORMAL

_DIFFICULTY_PARAMS = {
    Difficulty.EASY: (1.5, 3, "More time, 3 color options"),
    Difficulty.NORMAL: (1.0, 4, "Standard time, 4 color options"),
    Difficulty.HARD: (0.7, 6, "Less time, 6 color options"),
}

class Color(BaseModel):
    """A palette entry. Two colors are equal when their hex codes match exactly."""
    model_config = ConfigDict(frozen=True)

    hex: str
    name: str = ""

    @field_validator("hex")
    @classmethod
    def normalize_hex(cls, value: str) -> str:
        value = value.strip().lower()
        if not value.startswith("#"):
            value = "#" + value
        return value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.hex == other.hex

    def __hash__(self) -> int:
        return hash(self.hex)

class SessionSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: int
    high_score: int
    state: GameState
    time_remaining: float
    level: int
    target_color: Color
    color_options: List[Color]
    streak: int
    difficulty: Difficulty
    sound_enabled: bool
    games_played: int = 0
    time_low: bool = False

class SelectColorRequest(BaseModel):
    color: str

class UpdateSettingsRequest(BaseModel):
    sound_enabled: bool
    difficulty: Difficulty

class SettingsResponse(BaseModel):
    sound_enabled: bool
    difficulty: Difficulty

class StatsResponse(BaseModel):
    high_score: int
    games_played: int
    difficulty: Difficulty

class DifficultyInfo(BaseModel):
    name: Difficulty
    time_multiplier: float
    option_count: int
    time_limit: float
    description: str
