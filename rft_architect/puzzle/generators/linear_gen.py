from typing import List
import random
import logging

from ..common import RftMode, RelationKeyword
from ..cipher import CipherContext
from ..puzzle_types import Symbol, Premise, Query, RoundState
from ..transform import apply_night_to_answer
from . import pick_distinct_pair

logger = logging.getLogger(__name__)


def generate_linear_round_internal(symbols: List[Symbol], cipher: CipherContext,
                                   is_night: bool, rng: random.Random, **kwargs) -> RoundState:
    """
    Magnitude chain. Item order is the ground truth: a lower index is the
    lesser item. Each link draws GREATER or LESS at random and states it with
    the operands ordered to match, so both wordings describe the same chain.
    """
    num_links = len(symbols) - 1
    premises = []
    for i in range(num_links):
        lesser, greater = symbols[i], symbols[i + 1]
        if rng.random() < 0.5:
            keyword = RelationKeyword.GREATER
            premises.append(Premise(greater, keyword, lesser, cipher.term(keyword)))
        else:
            keyword = RelationKeyword.LESS
            premises.append(Premise(lesser, keyword, greater, cipher.term(keyword)))

    idx_a, idx_b = pick_distinct_pair(len(symbols), rng)
    q_keyword = rng.choice([RelationKeyword.GREATER, RelationKeyword.LESS])
    if q_keyword is RelationKeyword.GREATER:
        answer = idx_a > idx_b
    else:
        answer = idx_a < idx_b
    answer = apply_night_to_answer(answer, is_night)

    query = Query(symbols[idx_a], q_keyword, symbols[idx_b], answer, cipher.term(q_keyword))
    logger.debug(f"Linear round: {num_links} links, query {idx_a} {q_keyword.value} {idx_b} -> {answer}")
    return RoundState(RftMode.LINEAR, symbols, premises, query, is_night=is_night)
