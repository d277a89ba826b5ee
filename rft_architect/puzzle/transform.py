"""Context inversion ("night mode")."""
from typing import Tuple, Union
import random
import logging

from .common import RelationKeyword

logger = logging.getLogger(__name__)

NIGHT_PROBABILITY = 0.5

_OPPOSITES = {
    RelationKeyword.NORTH: RelationKeyword.SOUTH,
    RelationKeyword.SOUTH: RelationKeyword.NORTH,
    RelationKeyword.EAST: RelationKeyword.WEST,
    RelationKeyword.WEST: RelationKeyword.EAST,
    RelationKeyword.ABOVE: RelationKeyword.BELOW,
    RelationKeyword.BELOW: RelationKeyword.ABOVE,
    RelationKeyword.LEFT: RelationKeyword.RIGHT,
    RelationKeyword.RIGHT: RelationKeyword.LEFT,
    RelationKeyword.FRONT: RelationKeyword.BEHIND,
    RelationKeyword.BEHIND: RelationKeyword.FRONT,
    RelationKeyword.SAME_LOCATION: RelationKeyword.SAME_LOCATION,
}

Relation = Union[RelationKeyword, Tuple[RelationKeyword, ...]]


def invert_relation(relation: Relation) -> Relation:
    """
    Flips every directional component of a spatial relation. Multi-axis
    relations are tuples and are inverted part by part; the empty tuple and
    SAME_LOCATION stay as they are. Non-directional keywords are returned
    unchanged.
    """
    if isinstance(relation, tuple):
        return tuple(_OPPOSITES.get(part, part) for part in relation)
    return _OPPOSITES.get(relation, relation)


def apply_night_to_answer(answer: bool, is_night: bool) -> bool:
    """Non-spatial frames have no direction to flip, so night negates the truth value."""
    return (not answer) if is_night else answer


def draw_night(enabled: bool, rng: random.Random) -> bool:
    if not enabled:
        return False
    is_night = rng.random() < NIGHT_PROBABILITY
    logger.debug(f"Night mode draw: {is_night}")
    return is_night
