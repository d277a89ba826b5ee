from types import MappingProxyType
from typing import Dict, List, Optional, NamedTuple, Tuple, Union, Mapping
import logging

from .common import RftMode, SymbolMode, RelationKeyword, SpatialQueryType

logger = logging.getLogger(__name__)


class Symbol(NamedTuple):
    """Opaque display token for one puzzle item. Carries no logical meaning."""
    id: int
    kind: SymbolMode
    # Emoji glyph, CVCV nonsense word, or (hue, ((x, y), ...)) polygon description
    token: Union[str, Tuple[int, Tuple[Tuple[float, float], ...]]]


class Position(NamedTuple):
    x: int
    y: int
    z: int = 0

    def offset(self, dx: int, dy: int, dz: int = 0) -> "Position":
        return Position(self.x + dx, self.y + dy, self.z + dz)

    def delta_to(self, other: "Position") -> Tuple[int, int, int]:
        """Signed per-axis displacement from this position to `other`."""
        return other.x - self.x, other.y - self.y, other.z - self.z


class Premise(NamedTuple):
    """`subject <keyword> object`, with the display token already substituted."""
    subject: Symbol
    keyword: RelationKeyword
    object: Symbol
    token: str


class MovementInstruction(NamedTuple):
    action: RelationKeyword  # START, FACE, WALK or TURN
    argument: Union[Symbol, RelationKeyword, int]
    action_token: str
    argument_token: Optional[str] = None


class Query:
    """The yes/no question for a round and its ground truth."""
    def __init__(self, subject: Symbol, keyword: RelationKeyword, object: Optional[Symbol],
                 expected: bool, token: str,
                 facing: Optional[RelationKeyword] = None,
                 facing_token: Optional[str] = None,
                 instructions: Optional[List[MovementInstruction]] = None):
        self.subject = subject
        self.keyword = keyword
        self.object = object  # None for movement rounds, where the walker is the observer
        self.expected = expected
        self.token = token
        self.facing = facing  # Observer facing, deictic rounds only
        self.facing_token = facing_token
        self.instructions = instructions if instructions is not None else []

    def __repr__(self) -> str:
        object_id = self.object.id if self.object is not None else "you"
        return (f"Query({self.subject.id} {self.keyword.value} {object_id} -> "
                f"{'YES' if self.expected else 'NO'})")


class RoundState:
    """Everything the presentation layer needs to show one generated round."""
    def __init__(self, mode: RftMode, symbols: List[Symbol], premises: List[Premise],
                 query: Query, modifiers: Optional[List[str]] = None,
                 positions: Optional[Dict[int, Position]] = None,
                 is_night: bool = False,
                 used_cipher_keys: Optional[List[RelationKeyword]] = None,
                 spatial_query_type: Optional[SpatialQueryType] = None,
                 is_verified: bool = False):
        self.mode = mode
        self.symbols = symbols
        self.premises = premises
        self.query = query
        self.modifiers = modifiers if modifiers is not None else []
        # Read-only view for rendering; keyed by symbol id
        self.positions: Optional[Mapping[int, Position]] = (
            MappingProxyType(dict(positions)) if positions is not None else None)
        self.is_night = is_night
        self.used_cipher_keys = used_cipher_keys if used_cipher_keys is not None else []
        self.spatial_query_type = spatial_query_type
        self.is_verified = is_verified

    @property
    def expected_answer(self) -> bool:
        return self.query.expected

    @property
    def depth(self) -> int:
        return len(self.premises)

    def check_answer(self, user_answer: Optional[bool]) -> bool:
        """A missing answer (timeout) is never correct."""
        is_correct = user_answer is not None and user_answer == self.query.expected
        logger.debug(f"Answer check: user={user_answer}, expected={self.query.expected} -> {is_correct}")
        return is_correct
