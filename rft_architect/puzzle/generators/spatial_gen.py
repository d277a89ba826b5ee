from typing import Dict, List, Tuple
import random
import logging

from ..common import (RftMode, RelationKeyword, SpatialQueryType, HEADINGS, LOCAL_BEARINGS,
                      CARDINALS_2D, CARDINALS_3D)
from ..cipher import CipherContext
from ..geometry import local_bearing, world_relation, turn, step, DIRECTION_VECTORS
from ..puzzle_types import Symbol, Position, Premise, Query, RoundState, MovementInstruction
from ..transform import invert_relation
from . import pick_distinct_pair

logger = logging.getLogger(__name__)

MAX_TARGET_REROLLS = 50


def choose_query_type(is_3d: bool, enable_deictic: bool, enable_movement: bool,
                      rng: random.Random) -> SpatialQueryType:
    """
    Any enabled perspective modifier replaces plain queries entirely.
    Movement needs a flat map, so it is never offered in 3D.
    """
    available = []
    if enable_deictic:
        available.append(SpatialQueryType.DEICTIC)
    if enable_movement and not is_3d:
        available.append(SpatialQueryType.MOVEMENT)
    if not available:
        return SpatialQueryType.STANDARD
    return rng.choice(available)


def build_walk(symbols: List[Symbol], cipher: CipherContext, is_3d: bool,
               rng: random.Random) -> Tuple[List[Position], List[Premise]]:
    """Unit-step lattice walk from the origin, one premise per step."""
    directions = CARDINALS_3D if is_3d else CARDINALS_2D
    positions = [Position(0, 0, 0)]
    premises = []
    for i in range(len(symbols) - 1):
        direction = rng.choice(directions)
        positions.append(positions[-1].offset(*DIRECTION_VECTORS[direction]))
        premises.append(Premise(symbols[i + 1], direction, symbols[i], cipher.term(direction)))
    return positions, premises


def sample_bearing_query(effective: RelationKeyword, rng: random.Random) -> Tuple[RelationKeyword, bool]:
    """
    Half the time ask the effective bearing, otherwise one of the other bearings.
    A coincident target has no bearing to ask about, so it always gets a decoy.
    """
    if effective in LOCAL_BEARINGS and rng.random() < 0.5:
        return effective, True
    decoys = [b for b in LOCAL_BEARINGS if b is not effective]
    return rng.choice(decoys), False


def _standard_query(symbols, positions, cipher, is_night, is_3d, rng) -> Query:
    idx_a, idx_b = pick_distinct_pair(len(symbols), rng)
    true_parts = world_relation(*positions[idx_a].delta_to(positions[idx_b]), is_3d=is_3d)
    effective_parts = invert_relation(true_parts) if is_night else true_parts
    all_dirs = CARDINALS_3D if is_3d else CARDINALS_2D

    if effective_parts and rng.random() < 0.5:
        asked = rng.choice(effective_parts)
        answer = True
    else:
        # One direction per axis at most, so the complement is never empty
        asked = rng.choice([d for d in all_dirs if d not in effective_parts])
        answer = False
    logger.debug(f"Standard spatial: B={idx_b} relative to A={idx_a} is {true_parts} "
                 f"(effective {effective_parts}); asking {asked.value} -> {answer}")
    return Query(symbols[idx_b], asked, symbols[idx_a], answer, cipher.term(asked))


def _same_cell(a: Position, b: Position) -> bool:
    """Bearings ignore z, so a vertical-only offset counts as the same cell."""
    return a.x == b.x and a.y == b.y


def _deictic_query(symbols, positions, cipher, is_night, rng) -> Query:
    idx_me, idx_target = pick_distinct_pair(len(symbols), rng)
    attempts = 0
    while _same_cell(positions[idx_me], positions[idx_target]) and attempts < MAX_TARGET_REROLLS:
        idx_me, idx_target = pick_distinct_pair(len(symbols), rng)
        attempts += 1
    if _same_cell(positions[idx_me], positions[idx_target]):
        logger.debug(f"Deictic pair reroll exhausted after {attempts} attempts; accepting coincident pair.")
    facing = rng.choice(HEADINGS)
    dx, dy, _ = positions[idx_me].delta_to(positions[idx_target])
    true_rel = local_bearing(dx, dy, facing)
    effective = invert_relation(true_rel) if is_night else true_rel
    asked, answer = sample_bearing_query(effective, rng)
    logger.debug(f"Deictic: observer {idx_me} facing {facing.value}, target {idx_target} is "
                 f"{true_rel.value} (effective {effective.value}); asking {asked.value} -> {answer}")
    return Query(symbols[idx_target], asked, symbols[idx_me], answer, cipher.term(asked),
                 facing=facing, facing_token=cipher.term(facing))


def simulate_walk(start: Position, heading: RelationKeyword,
                  instructions: List[MovementInstruction]) -> Tuple[Position, RelationKeyword]:
    """Path integration over WALK/TURN instructions; START and FACE are already applied."""
    current = start
    for instruction in instructions:
        if instruction.action is RelationKeyword.WALK:
            for _ in range(instruction.argument):
                current = current.offset(*step(heading))
        elif instruction.action is RelationKeyword.TURN:
            heading = turn(heading, instruction.argument)
    return current, heading


def _movement_query(symbols, positions, cipher, is_night, rng) -> Query:
    start_idx = rng.randrange(len(symbols))
    heading = rng.choice(HEADINGS)
    instructions = [
        MovementInstruction(RelationKeyword.START, symbols[start_idx], cipher.term(RelationKeyword.START)),
        MovementInstruction(RelationKeyword.FACE, heading, cipher.term(RelationKeyword.FACE),
                            cipher.term(heading)),
    ]
    moves = []
    for _ in range(2 + rng.randrange(2)):
        if rng.random() < 0.5:
            moves.append(MovementInstruction(RelationKeyword.WALK, 1, cipher.term(RelationKeyword.WALK)))
        else:
            direction = RelationKeyword.RIGHT if rng.random() < 0.5 else RelationKeyword.LEFT
            moves.append(MovementInstruction(RelationKeyword.TURN, direction,
                                             cipher.term(RelationKeyword.TURN), cipher.term(direction)))
    final_pos, final_heading = simulate_walk(positions[start_idx], heading, moves)
    instructions.extend(moves)

    target_idx = rng.randrange(len(symbols))
    attempts = 0
    while ((target_idx == start_idx or positions[target_idx] == final_pos)
           and attempts < MAX_TARGET_REROLLS):
        target_idx = rng.randrange(len(symbols))
        attempts += 1
    if target_idx == start_idx or positions[target_idx] == final_pos:
        logger.debug(f"Movement target reroll exhausted after {attempts} attempts; accepting item {target_idx}.")

    dx, dy, _ = final_pos.delta_to(positions[target_idx])
    true_rel = local_bearing(dx, dy, final_heading)
    effective = invert_relation(true_rel) if is_night else true_rel
    asked, answer = sample_bearing_query(effective, rng)
    logger.debug(f"Movement: start {start_idx}, end {tuple(final_pos)} facing {final_heading.value}, "
                 f"target {target_idx} is {true_rel.value}; asking {asked.value} -> {answer}")
    return Query(symbols[target_idx], asked, None, answer, cipher.term(asked), instructions=instructions)


def generate_spatial_round_internal(symbols: List[Symbol], cipher: CipherContext,
                                    is_night: bool, rng: random.Random, is_3d: bool = False,
                                    enable_deictic: bool = False, enable_movement: bool = False,
                                    **kwargs) -> RoundState:
    """2D/3D lattice walk with a standard, deictic or movement query."""
    positions, premises = build_walk(symbols, cipher, is_3d, rng)
    query_type = choose_query_type(is_3d, enable_deictic, enable_movement, rng)

    modifiers = []
    if query_type is SpatialQueryType.DEICTIC:
        modifiers.append("DEICTIC")
        query = _deictic_query(symbols, positions, cipher, is_night, rng)
    elif query_type is SpatialQueryType.MOVEMENT:
        modifiers.append("MOVEMENT")
        query = _movement_query(symbols, positions, cipher, is_night, rng)
    else:
        query = _standard_query(symbols, positions, cipher, is_night, is_3d, rng)

    position_map: Dict[int, Position] = {s.id: p for s, p in zip(symbols, positions)}
    mode = RftMode.SPATIAL_3D if is_3d else RftMode.SPATIAL_2D
    return RoundState(mode, symbols, premises, query, modifiers=modifiers, positions=position_map,
                      is_night=is_night, spatial_query_type=query_type)
