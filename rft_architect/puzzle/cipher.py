from typing import Dict, List, Optional, Tuple, Iterable
import random
import logging

from .common import RelationKeyword, CIPHER_KEYWORDS, CIPHER_WORDS

logger = logging.getLogger(__name__)

# Chance that an established key is replaced at the start of a later round
KEY_CHANGE_PROBABILITY = 0.15


class CipherMap:
    """Session-scoped bijection from relation keywords to nonsense codes."""
    def __init__(self, mapping: Dict[RelationKeyword, str]):
        self._mapping = dict(mapping)

    def __contains__(self, keyword: RelationKeyword) -> bool:
        return keyword in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)

    def __bool__(self) -> bool:
        return bool(self._mapping)

    def get(self, keyword: RelationKeyword) -> Optional[str]:
        return self._mapping.get(keyword)

    def term(self, keyword: RelationKeyword) -> str:
        """Code for `keyword`, or the canonical keyword itself if it has none."""
        return self._mapping.get(keyword, keyword.value)

    def items(self):
        return self._mapping.items()

    def legend(self, used_keys: Iterable[RelationKeyword]) -> List[Tuple[RelationKeyword, str]]:
        """Only the mappings a round actually referenced, in canonical keyword order."""
        used = set(used_keys)
        return [(k, code) for k, code in self._mapping.items() if k in used]


def generate_cipher_map(rng: random.Random) -> CipherMap:
    """Shuffles the code pool and zips it against the fixed keyword list."""
    shuffled_words = list(CIPHER_WORDS)
    rng.shuffle(shuffled_words)
    mapping = {keyword: shuffled_words[i] for i, keyword in enumerate(CIPHER_KEYWORDS)}
    logger.debug(f"Generated cipher map with {len(mapping)} keys.")
    return CipherMap(mapping)


def should_regenerate(cipher_enabled: bool, current_map: Optional[CipherMap],
                      questions_attempted: int, rng: random.Random) -> Tuple[bool, bool]:
    """
    Decides whether a round needs a new cipher map.

    Returns (regenerate, key_changed). A missing map is filled silently; an
    established map is swapped with KEY_CHANGE_PROBABILITY once at least one
    question has been attempted, and that swap is reported as a key change.
    """
    if not cipher_enabled:
        return False, False
    if not current_map:
        return True, False
    if questions_attempted > 0 and rng.random() < KEY_CHANGE_PROBABILITY:
        return True, True
    return False, False


class CipherContext:
    """Per-round view of the cipher that remembers which keywords were shown."""
    def __init__(self, cipher_map: Optional[CipherMap], enabled: bool):
        self.cipher_map = cipher_map
        self.enabled = enabled
        self._used: List[RelationKeyword] = []

    def term(self, keyword: RelationKeyword) -> str:
        if self.enabled and self.cipher_map is not None and keyword in self.cipher_map:
            if keyword not in self._used:
                self._used.append(keyword)
            return self.cipher_map.term(keyword)
        return keyword.value

    @property
    def used_keys(self) -> List[RelationKeyword]:
        return list(self._used)
