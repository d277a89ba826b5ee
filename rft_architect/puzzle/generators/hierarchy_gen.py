from typing import List
import random
import logging

from ..common import RftMode, RelationKeyword
from ..cipher import CipherContext
from ..puzzle_types import Symbol, Premise, Query, RoundState
from ..transform import apply_night_to_answer
from . import pick_distinct_pair

logger = logging.getLogger(__name__)


def generate_hierarchy_round_internal(symbols: List[Symbol], cipher: CipherContext,
                                      is_night: bool, rng: random.Random, **kwargs) -> RoundState:
    """Strict containment chain: every item CONTAINS the next one."""
    keyword = RelationKeyword.CONTAINS
    premises = [Premise(symbols[i], keyword, symbols[i + 1], cipher.term(keyword))
                for i in range(len(symbols) - 1)]

    idx_a, idx_b = pick_distinct_pair(len(symbols), rng)
    if rng.random() < 0.5:
        q_keyword = RelationKeyword.INSIDE
        answer = idx_a > idx_b
    else:
        q_keyword = RelationKeyword.CONTAINS
        answer = idx_a < idx_b
    answer = apply_night_to_answer(answer, is_night)

    query = Query(symbols[idx_a], q_keyword, symbols[idx_b], answer, cipher.term(q_keyword))
    logger.debug(f"Hierarchy round: depth {len(premises)}, query {idx_a} {q_keyword.value} {idx_b} -> {answer}")
    return RoundState(RftMode.HIERARCHY, symbols, premises, query, is_night=is_night)
