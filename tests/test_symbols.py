"""
Tests for puzzle.symbols module.
"""

import random

from rft_architect.puzzle.common import SymbolMode, EMOJIS, NONSENSE_CONSONANTS, NONSENSE_VOWELS
from rft_architect.puzzle.symbols import generate_symbols, generate_word, generate_voronoi


def test_emoji_symbols_are_unique_within_pool():
    symbols = generate_symbols(len(EMOJIS), SymbolMode.EMOJI, random.Random(0))
    assert [s.id for s in symbols] == list(range(len(EMOJIS)))
    assert len({s.token for s in symbols}) == len(EMOJIS)


def test_emoji_tokens_repeat_past_pool_but_ids_do_not():
    symbols = generate_symbols(len(EMOJIS) + 5, SymbolMode.EMOJI, random.Random(1))
    assert len({s.id for s in symbols}) == len(symbols)
    assert symbols[len(EMOJIS)].token == symbols[0].token


def test_word_shape():
    rng = random.Random(2)
    for _ in range(100):
        word = generate_word(rng)
        assert len(word) == 4
        assert word[0] in NONSENSE_CONSONANTS and word[2] in NONSENSE_CONSONANTS
        assert word[1] in NONSENSE_VOWELS and word[3] in NONSENSE_VOWELS


def test_voronoi_shape():
    rng = random.Random(3)
    for _ in range(50):
        hue, points = generate_voronoi(rng)
        assert 0 <= hue < 360
        assert 5 <= len(points) <= 8
        assert all(0 <= x <= 100 and 0 <= y <= 100 for x, y in points)


def test_mixed_mode_resolves_each_symbol():
    symbols = generate_symbols(60, SymbolMode.MIXED, random.Random(4))
    kinds = {s.kind for s in symbols}
    assert SymbolMode.MIXED not in kinds
    assert kinds == {SymbolMode.EMOJI, SymbolMode.WORDS, SymbolMode.VORONOI}
