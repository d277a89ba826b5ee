from typing import Dict, List, Optional, Callable
import random
import logging

from .common import RftMode, SymbolMode, ConfigurationError
from .cipher import CipherMap, CipherContext
from .puzzle_types import RoundState
from .symbols import generate_symbols
from .verifier import RoundVerifier
from .generators import linear_gen, distinction_gen, hierarchy_gen, spatial_gen

logger = logging.getLogger(__name__)


class PuzzleGenerator:
    """Builds verified relational rounds for any enabled frame."""

    def __init__(self, rng: Optional[random.Random] = None, verify: bool = True):
        self.rng = rng if rng is not None else random.Random()
        self.verify = verify
        # Map frames to their generation functions; both spatial frames share one
        self._generation_function_map: Dict[RftMode, Callable[..., RoundState]] = {
            RftMode.LINEAR: linear_gen.generate_linear_round_internal,
            RftMode.DISTINCTION: distinction_gen.generate_distinction_round_internal,
            RftMode.HIERARCHY: hierarchy_gen.generate_hierarchy_round_internal,
            RftMode.SPATIAL_2D: spatial_gen.generate_spatial_round_internal,
            RftMode.SPATIAL_3D: spatial_gen.generate_spatial_round_internal,
        }

    def choose_mode(self, active_modes: Dict[RftMode, bool]) -> RftMode:
        """Uniform choice among enabled frames."""
        enabled = [mode for mode in RftMode if active_modes.get(mode)]
        if not enabled:
            logger.error("Round requested with no relational frame enabled.")
            raise ConfigurationError("Enable at least one relational frame before starting a round.")
        return self.rng.choice(enabled)

    def generate_round(self, mode: RftMode, num_premises: int, symbol_mode: SymbolMode,
                       cipher_map: Optional[CipherMap] = None, cipher_enabled: bool = False,
                       is_night: bool = False, key_changed: bool = False,
                       enable_deictic: bool = False, enable_movement: bool = False) -> RoundState:
        """
        Generates one round of `num_premises` links for `mode`.

        The premise list is shuffled before it is returned, so the chain order
        is never visible to the player.
        """
        if num_premises < 1:
            raise ConfigurationError(f"A round needs at least one premise, got {num_premises}.")
        if mode not in self._generation_function_map:
            raise ConfigurationError(f"No generator registered for frame {mode}.")

        symbols = generate_symbols(num_premises + 1, symbol_mode, self.rng)
        cipher = CipherContext(cipher_map, cipher_enabled)
        generator_func = self._generation_function_map[mode]
        round_state = generator_func(
            symbols=symbols, cipher=cipher, is_night=is_night, rng=self.rng,
            is_3d=mode is RftMode.SPATIAL_3D,
            enable_deictic=enable_deictic, enable_movement=enable_movement,
        )
        round_state.used_cipher_keys = cipher.used_keys

        modifiers: List[str] = list(round_state.modifiers)
        if key_changed:
            modifiers.append("KEY_CHANGE")
        if is_night:
            modifiers.append("TRANSFORM")
        round_state.modifiers = modifiers

        if self.verify:
            result = RoundVerifier(round_state).verify()
            round_state.is_verified = bool(result)
            if result is False:
                # Generation is constructive, so this points at a generator defect
                logger.error(f"Generated {mode.name} round failed verification: {round_state.query}")

        self.rng.shuffle(round_state.premises)
        logger.info(f"Generated {mode.name} round: {num_premises} premises, modifiers={modifiers}, "
                    f"verified={round_state.is_verified}")
        return round_state
