from enum import Enum, auto


class ConfigurationError(ValueError):
    """Raised when the game settings cannot produce a playable round."""


class RftMode(Enum):
    LINEAR = auto()
    DISTINCTION = auto()
    SPATIAL_2D = auto()
    SPATIAL_3D = auto()
    HIERARCHY = auto()


class SymbolMode(Enum):
    EMOJI = auto()
    WORDS = auto()
    VORONOI = auto()
    MIXED = auto()


class SpatialQueryType(Enum):
    STANDARD = auto()
    DEICTIC = auto()
    MOVEMENT = auto()


class RelationKeyword(Enum):
    # Magnitude / identity / containment
    GREATER = "GREATER"
    LESS = "LESS"
    SAME = "SAME"
    DIFFERENT = "DIFFERENT"
    CONTAINS = "CONTAINS"
    INSIDE = "INSIDE"
    # Cardinal and vertical directions
    NORTH = "NORTH"
    SOUTH = "SOUTH"
    EAST = "EAST"
    WEST = "WEST"
    ABOVE = "ABOVE"
    BELOW = "BELOW"
    # Local bearings
    LEFT = "LEFT"
    RIGHT = "RIGHT"
    FRONT = "FRONT"
    BEHIND = "BEHIND"
    # Movement instructions
    START = "START"
    FACE = "FACE"
    WALK = "WALK"
    TURN = "TURN"
    # Outcome value only, never enciphered
    SAME_LOCATION = "SAME LOCATION"


# Keywords that take part in the cipher, in the order they are zipped
# against the shuffled code pool.
CIPHER_KEYWORDS = tuple(k for k in RelationKeyword if k is not RelationKeyword.SAME_LOCATION)

# --- Constants ---
EMOJIS = ["🚀", "💎", "🔥", "🌊", "⚡", "🍄", "👁️", "🎲", "🧬", "🔮",
          "⚓", "🪐", "🌋", "🦠", "🌌", "💊", "🧿", "🧩", "🧸", "💣"]
NONSENSE_CONSONANTS = "BCDFGHJKLMNPQRSTVWXYZ"
NONSENSE_VOWELS = "AEIOU"
CIPHER_WORDS = [
    "ZAX", "JOP", "KIV", "LUZ", "MEC", "VEX", "QOD", "WIB", "HAF", "GUK",
    "YIN", "BEX", "DUB", "ROZ", "NIX", "POK", "VOM", "JEX", "KAZ", "QUZ",
    "YEP", "WUX", "FIP", "GOZ",
]

# Headings in clockwise order; index arithmetic mod 4 turns the walker.
HEADINGS = [RelationKeyword.NORTH, RelationKeyword.EAST, RelationKeyword.SOUTH, RelationKeyword.WEST]
LOCAL_BEARINGS = [RelationKeyword.FRONT, RelationKeyword.BEHIND, RelationKeyword.LEFT, RelationKeyword.RIGHT]
CARDINALS_2D = [RelationKeyword.NORTH, RelationKeyword.SOUTH, RelationKeyword.EAST, RelationKeyword.WEST]
CARDINALS_3D = CARDINALS_2D + [RelationKeyword.ABOVE, RelationKeyword.BELOW]

INTERFERENCE_COLORS = ["red", "blue", "green", "yellow"]
