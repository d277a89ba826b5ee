from typing import List
import math
import random
import logging

from .common import SymbolMode, EMOJIS, NONSENSE_CONSONANTS, NONSENSE_VOWELS
from .puzzle_types import Symbol

logger = logging.getLogger(__name__)

_CONCRETE_MODES = [SymbolMode.EMOJI, SymbolMode.WORDS, SymbolMode.VORONOI]


def generate_word(rng: random.Random) -> str:
    """Consonant-vowel-consonant-vowel nonsense word, e.g. 'KOBA'."""
    return (rng.choice(NONSENSE_CONSONANTS) + rng.choice(NONSENSE_VOWELS) +
            rng.choice(NONSENSE_CONSONANTS) + rng.choice(NONSENSE_VOWELS))


def generate_voronoi(rng: random.Random):
    """Random-hue polygon with 5-8 vertices on a jittered ring in a 100x100 box."""
    hue = rng.randrange(360)
    num_points = 5 + rng.randrange(4)
    points = []
    for i in range(num_points):
        angle = (i / num_points) * math.pi * 2
        r = 30 + rng.random() * 20
        points.append((round(50 + math.cos(angle) * r, 2), round(50 + math.sin(angle) * r, 2)))
    return hue, tuple(points)


def generate_symbols(count: int, mode: SymbolMode, rng: random.Random) -> List[Symbol]:
    """
    Produces `count` symbols in the given style.

    Emoji tokens come from a shuffled copy of the pool and wrap around with
    `i % len(pool)`, so more than len(EMOJIS) emoji symbols will repeat glyphs.
    Symbol ids are always unique, so repeated glyphs never affect the logic.
    """
    if count > len(EMOJIS) and mode in (SymbolMode.EMOJI, SymbolMode.MIXED):
        logger.debug(f"Requested {count} symbols but emoji pool has {len(EMOJIS)}; glyphs may repeat.")

    shuffled_emojis = list(EMOJIS)
    rng.shuffle(shuffled_emojis)
    symbols = []
    for i in range(count):
        current_mode = mode
        if current_mode is SymbolMode.MIXED:
            current_mode = rng.choice(_CONCRETE_MODES)

        if current_mode is SymbolMode.WORDS:
            token = generate_word(rng)
        elif current_mode is SymbolMode.VORONOI:
            token = generate_voronoi(rng)
        else:
            token = shuffled_emojis[i % len(shuffled_emojis)]
        symbols.append(Symbol(id=i, kind=current_mode, token=token))
    return symbols
