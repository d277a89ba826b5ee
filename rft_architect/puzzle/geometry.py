"""
Lattice geometry shared by the spatial generator.

Conventions: +y is NORTH, +x is EAST, +z is ABOVE. Local frames put the
observer's facing on +y (FRONT) and their right hand on +x (RIGHT).
"""
from typing import Tuple, List
import logging

from .common import RelationKeyword, HEADINGS

logger = logging.getLogger(__name__)

# Unit step for each direction keyword
DIRECTION_VECTORS = {
    RelationKeyword.NORTH: (0, 1, 0),
    RelationKeyword.SOUTH: (0, -1, 0),
    RelationKeyword.EAST: (1, 0, 0),
    RelationKeyword.WEST: (-1, 0, 0),
    RelationKeyword.ABOVE: (0, 0, 1),
    RelationKeyword.BELOW: (0, 0, -1),
}


def rotate_to_local(dx: int, dy: int, facing: RelationKeyword) -> Tuple[int, int]:
    """Rotates a world displacement into the frame of an observer facing `facing`."""
    if facing is RelationKeyword.NORTH:
        return dx, dy
    if facing is RelationKeyword.EAST:
        return -dy, dx
    if facing is RelationKeyword.SOUTH:
        return -dx, -dy
    if facing is RelationKeyword.WEST:
        return dy, -dx
    raise ValueError(f"Facing must be a cardinal heading, got {facing}")


def classify_local(local_x: int, local_y: int) -> RelationKeyword:
    """Forward-dominant bearing: diagonals resolve to FRONT/BEHIND before LEFT/RIGHT."""
    if local_y > 0 and abs(local_x) <= local_y:
        return RelationKeyword.FRONT
    if local_y < 0 and abs(local_x) <= abs(local_y):
        return RelationKeyword.BEHIND
    if local_x > 0:
        return RelationKeyword.RIGHT
    if local_x < 0:
        return RelationKeyword.LEFT
    return RelationKeyword.SAME_LOCATION


def local_bearing(dx: int, dy: int, facing: RelationKeyword) -> RelationKeyword:
    local_x, local_y = rotate_to_local(dx, dy, facing)
    return classify_local(local_x, local_y)


def world_relation(dx: int, dy: int, dz: int, is_3d: bool) -> Tuple[RelationKeyword, ...]:
    """
    Direction parts of a displacement, vertical first, then north/south, then
    east/west. An empty tuple means SAME LOCATION.
    """
    parts: List[RelationKeyword] = []
    if is_3d:
        if dz > 0:
            parts.append(RelationKeyword.ABOVE)
        elif dz < 0:
            parts.append(RelationKeyword.BELOW)
    if dy > 0:
        parts.append(RelationKeyword.NORTH)
    elif dy < 0:
        parts.append(RelationKeyword.SOUTH)
    if dx > 0:
        parts.append(RelationKeyword.EAST)
    elif dx < 0:
        parts.append(RelationKeyword.WEST)
    return tuple(parts)


def turn(heading: RelationKeyword, direction: RelationKeyword) -> RelationKeyword:
    """Quarter turn of a cardinal heading; RIGHT is clockwise."""
    idx = HEADINGS.index(heading)
    if direction is RelationKeyword.RIGHT:
        return HEADINGS[(idx + 1) % 4]
    if direction is RelationKeyword.LEFT:
        return HEADINGS[(idx + 3) % 4]
    raise ValueError(f"Turn direction must be LEFT or RIGHT, got {direction}")


def step(heading: RelationKeyword) -> Tuple[int, int, int]:
    return DIRECTION_VECTORS[heading]
