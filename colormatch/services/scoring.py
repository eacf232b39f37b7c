BASE_POINTS = 10
LEVEL_BONUS = 2
STREAK_BONUS = 5
STREAK_PER_LEVEL = 5

def calculate_points(level: int, streak: int) -> int:
    # streak is the value before this round's increment
    return BASE_POINTS + level * LEVEL_BONUS + streak * STREAK_BONUS

def should_level_up(streak: int) -> bool:
    return streak > 0 and streak % STREAK_PER_LEVEL == 0

def time_limit(base_time: float, multiplier: float) -> float:
    return base_time * multiplier
