"""
Tests for the per-frame generators and puzzle.generator.PuzzleGenerator.
"""

import random

import pytest

from rft_architect.puzzle.cipher import CipherContext, generate_cipher_map
from rft_architect.puzzle.common import (RftMode, SymbolMode, SpatialQueryType, ConfigurationError,
                                         RelationKeyword as K, LOCAL_BEARINGS)
from rft_architect.puzzle.generator import PuzzleGenerator
from rft_architect.puzzle.generators import pick_distinct_pair
from rft_architect.puzzle.generators.distinction_gen import (chain_values, distinction_answer,
                                                             generate_distinction_round_internal)
from rft_architect.puzzle.generators.hierarchy_gen import generate_hierarchy_round_internal
from rft_architect.puzzle.generators.linear_gen import generate_linear_round_internal
from rft_architect.puzzle.generators.spatial_gen import (choose_query_type, simulate_walk, _standard_query,
                                                         generate_spatial_round_internal)
from rft_architect.puzzle.geometry import DIRECTION_VECTORS
from rft_architect.puzzle.puzzle_types import Position, MovementInstruction
from rft_architect.puzzle.symbols import generate_symbols

ALL_MODES = list(RftMode)


def _symbols(count, seed=0):
    return generate_symbols(count, SymbolMode.EMOJI, random.Random(seed))


def _plain():
    return CipherContext(None, enabled=False)


def test_pick_distinct_pair():
    rng = random.Random(1)
    for _ in range(500):
        a, b = pick_distinct_pair(3, rng)
        assert a != b
        assert 0 <= a < 3 and 0 <= b < 3
    with pytest.raises(ValueError):
        pick_distinct_pair(1, rng)


def test_chain_values_scenario():
    """Start 1 with links [SAME, DIFFERENT] gives [1, 1, 0]; item0 DIFFERENT item2 is YES."""
    values = chain_values(1, [K.SAME, K.DIFFERENT])
    assert values == [1, 1, 0]
    assert distinction_answer(values, 0, 2, K.DIFFERENT) is True
    assert distinction_answer(values, 0, 1, K.SAME) is True


def test_distinction_answers_match_values():
    rng = random.Random(11)
    for seed in range(200):
        symbols = _symbols(5, seed)
        round_state = generate_distinction_round_internal(symbols, _plain(), False, rng)
        links = [p.keyword for p in round_state.premises]
        query = round_state.query
        assert query.subject.id != query.object.id
        for start in (0, 1):
            values = chain_values(start, links)
            same = values[query.subject.id] == values[query.object.id]
            expected = same if query.keyword is K.SAME else not same
            assert round_state.expected_answer == expected


def test_hierarchy_answers_follow_chain_order():
    rng = random.Random(12)
    for seed in range(200):
        round_state = generate_hierarchy_round_internal(_symbols(4, seed), _plain(), False, rng)
        assert all(p.keyword is K.CONTAINS for p in round_state.premises)
        a, b = round_state.query.subject.id, round_state.query.object.id
        assert a != b
        if round_state.query.keyword is K.INSIDE:
            assert round_state.expected_answer == (a > b)
        else:
            assert round_state.expected_answer == (a < b)


def test_hierarchy_night_negates():
    rng = random.Random(13)
    round_state = generate_hierarchy_round_internal(_symbols(3), _plain(), True, rng)
    a, b = round_state.query.subject.id, round_state.query.object.id
    truth = (a > b) if round_state.query.keyword is K.INSIDE else (a < b)
    assert round_state.expected_answer == (not truth)


def test_linear_premises_agree_with_item_order():
    """Whichever label a link uses, the lesser item has the lower index."""
    rng = random.Random(14)
    for seed in range(100):
        round_state = generate_linear_round_internal(_symbols(6, seed), _plain(), False, rng)
        for premise in round_state.premises:
            if premise.keyword is K.GREATER:
                assert premise.subject.id == premise.object.id + 1
            else:
                assert premise.keyword is K.LESS
                assert premise.subject.id + 1 == premise.object.id
        a, b = round_state.query.subject.id, round_state.query.object.id
        expected = (a > b) if round_state.query.keyword is K.GREATER else (a < b)
        assert round_state.expected_answer == expected


def test_spatial_walk_uses_unit_steps():
    rng = random.Random(15)
    symbols = _symbols(6)
    round_state = generate_spatial_round_internal(symbols, _plain(), False, rng, is_3d=True)
    assert round_state.mode is RftMode.SPATIAL_3D
    assert round_state.positions[0] == Position(0, 0, 0)
    for premise in round_state.premises:
        here = round_state.positions[premise.subject.id]
        there = round_state.positions[premise.object.id]
        assert there.delta_to(here) == DIRECTION_VECTORS[premise.keyword]


def test_positions_are_read_only():
    round_state = generate_spatial_round_internal(_symbols(3), _plain(), False, random.Random(0))
    with pytest.raises(TypeError):
        round_state.positions[0] = Position(5, 5)


def test_choose_query_type():
    rng = random.Random(16)
    assert choose_query_type(False, False, False, rng) is SpatialQueryType.STANDARD
    assert choose_query_type(True, False, True, rng) is SpatialQueryType.STANDARD
    assert choose_query_type(True, True, True, rng) is SpatialQueryType.DEICTIC
    seen = {choose_query_type(False, True, True, rng) for _ in range(100)}
    assert seen == {SpatialQueryType.DEICTIC, SpatialQueryType.MOVEMENT}


def test_deictic_round_shape():
    rng = random.Random(17)
    for seed in range(50):
        round_state = generate_spatial_round_internal(_symbols(4, seed), _plain(), False, rng,
                                                      enable_deictic=True)
        query = round_state.query
        assert round_state.spatial_query_type is SpatialQueryType.DEICTIC
        assert "DEICTIC" in round_state.modifiers
        assert query.facing is not None
        assert query.keyword in LOCAL_BEARINGS
        assert query.subject.id != query.object.id


def test_movement_round_shape():
    rng = random.Random(18)
    for seed in range(50):
        round_state = generate_spatial_round_internal(_symbols(4, seed), _plain(), False, rng,
                                                      enable_movement=True)
        query = round_state.query
        assert round_state.spatial_query_type is SpatialQueryType.MOVEMENT
        assert query.object is None
        assert query.instructions[0].action is K.START
        assert query.instructions[1].action is K.FACE
        moves = query.instructions[2:]
        assert 2 <= len(moves) <= 3
        assert all(m.action in (K.WALK, K.TURN) for m in moves)


def test_simulate_walk():
    moves = [
        MovementInstruction(K.WALK, 1, "WALK"),
        MovementInstruction(K.TURN, K.RIGHT, "TURN", "RIGHT"),
        MovementInstruction(K.WALK, 1, "WALK"),
    ]
    final, heading = simulate_walk(Position(0, 0), K.NORTH, moves)
    assert final == Position(1, 1)
    assert heading is K.EAST


def test_spatial_true_false_balance():
    """The query is sampled 50/50 between the true relation and a decoy."""
    rng = random.Random(19)
    answers = [generate_spatial_round_internal(_symbols(3, s), _plain(), False, rng,
                                               enable_deictic=True).expected_answer
               for s in range(1000)]
    assert 0.35 < sum(answers) / len(answers) < 0.6


@pytest.mark.parametrize("mode", ALL_MODES)
def test_generated_rounds_verify(mode):
    """Every generated round's answer is entailed by its premises."""
    generator = PuzzleGenerator(rng=random.Random(20))
    for i in range(40):
        round_state = generator.generate_round(mode, 2 + i % 4, SymbolMode.MIXED,
                                               is_night=bool(i % 2),
                                               enable_deictic=i % 3 == 1,
                                               enable_movement=i % 3 == 2)
        assert round_state.is_verified
        assert round_state.depth == 2 + i % 4
        assert len(round_state.symbols) == round_state.depth + 1


def test_generator_modifier_tags_and_used_keys():
    rng = random.Random(21)
    generator = PuzzleGenerator(rng=rng)
    cipher_map = generate_cipher_map(rng)
    round_state = generator.generate_round(RftMode.HIERARCHY, 3, SymbolMode.WORDS,
                                           cipher_map=cipher_map, cipher_enabled=True,
                                           is_night=True, key_changed=True)
    assert "KEY_CHANGE" in round_state.modifiers
    assert "TRANSFORM" in round_state.modifiers
    assert K.CONTAINS in round_state.used_cipher_keys
    assert all(p.token == cipher_map.get(K.CONTAINS) for p in round_state.premises)


def test_generator_rejects_bad_requests():
    generator = PuzzleGenerator(rng=random.Random(22))
    with pytest.raises(ConfigurationError):
        generator.choose_mode({mode: False for mode in RftMode})
    with pytest.raises(ConfigurationError):
        generator.generate_round(RftMode.LINEAR, 0, SymbolMode.EMOJI)


def test_choose_mode_only_picks_enabled():
    generator = PuzzleGenerator(rng=random.Random(23))
    active = {RftMode.LINEAR: False, RftMode.SPATIAL_3D: True, RftMode.HIERARCHY: True}
    picks = {generator.choose_mode(active) for _ in range(100)}
    assert picks == {RftMode.SPATIAL_3D, RftMode.HIERARCHY}


def _north_step_answers(is_night):
    """(subject id, asked keyword, answer) for item1 one step NORTH of item0."""
    symbols = _symbols(2)
    positions = [Position(0, 0), Position(0, 1)]
    rng = random.Random(24)
    return {
        (q.subject.id, q.keyword, q.expected)
        for q in (_standard_query(symbols, positions, _plain(), is_night, False, rng) for _ in range(300))
    }


def test_north_step_by_day():
    seen = _north_step_answers(is_night=False)
    assert (1, K.NORTH, True) in seen
    assert (1, K.SOUTH, False) in seen
    assert (0, K.SOUTH, True) in seen
    assert (1, K.NORTH, False) not in seen
    assert (1, K.SOUTH, True) not in seen
    assert {answer for subject, keyword, answer in seen if subject == 1 and keyword in (K.EAST, K.WEST)} == {False}


def test_north_step_at_night():
    """Night flips the relation: item1 now counts as SOUTH of item0."""
    seen = _north_step_answers(is_night=True)
    assert (1, K.SOUTH, True) in seen
    assert (1, K.NORTH, False) in seen
    assert (0, K.NORTH, True) in seen
    assert (1, K.NORTH, True) not in seen
    assert (1, K.SOUTH, False) not in seen


def test_deictic_pair_avoids_shared_cell():
    """Observer and target sit on different cells whenever the walk allows it."""
    rng = random.Random(25)
    for seed in range(300):
        round_state = generate_spatial_round_internal(_symbols(3, seed), _plain(), False, rng,
                                                      enable_deictic=True)
        observer = round_state.positions[round_state.query.object.id]
        target = round_state.positions[round_state.query.subject.id]
        assert (observer.x, observer.y) != (target.x, target.y)
