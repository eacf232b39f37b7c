import random
from typing import List, Optional, Sequence
from ..models import Color

PALETTE: List[Color] = [
    Color(hex="#fbd600", name="Yellow"),
    Color(hex="#ffffff", name="White"),
    Color(hex="#ff6b6b", name="Red"),
    Color(hex="#4ecdc4", name="Teal"),
    Color(hex="#45b7d1", name="Blue"),
    Color(hex="#96ceb4", name="Green"),
    Color(hex="#ffeaa7", name="Light Yellow"),
    Color(hex="#dda0dd", name="Plum"),
]

def find_color(hex_code: str, palette: Sequence[Color] = PALETTE) -> Optional[Color]:
    probe = Color(hex=hex_code)
    return next((c for c in palette if c == probe), None)

def pick_target(palette: Sequence[Color], rng: random.Random) -> Color:
    return rng.choice(list(palette))

def generate_options(palette: Sequence[Color], target: Color, count: int, rng: random.Random) -> List[Color]:
    """Build the shuffled option list for one round.

    The target goes in once; the remaining ``count - 1`` slots are drawn with
    replacement from the palette entries that differ from the target, so two
    distractors may share a color. The target never appears twice.
    """
    others = [c for c in palette if c != target]
    if count > 1 and not others:
        raise ValueError("palette needs a color other than the target to fill the options")
    options = [target]
    for _ in range(count - 1):
        options.append(rng.choice(others))
    rng.shuffle(options)
    return options
