# Make 'puzzle' a package
# Expose the generation entry points for easier top-level imports
from .common import RftMode, SymbolMode, RelationKeyword, SpatialQueryType, ConfigurationError
from .puzzle_types import Symbol, Position, Premise, Query, RoundState, MovementInstruction
from .cipher import CipherMap, generate_cipher_map
from .generator import PuzzleGenerator
from .verifier import RoundVerifier
