from typing import List
import random
import logging

from ..common import RftMode, RelationKeyword
from ..cipher import CipherContext
from ..puzzle_types import Symbol, Premise, Query, RoundState
from ..transform import apply_night_to_answer
from . import pick_distinct_pair

logger = logging.getLogger(__name__)


def chain_values(start_value: int, links: List[RelationKeyword]) -> List[int]:
    """Binary value per item: SAME keeps the previous value, DIFFERENT flips it."""
    values = [start_value]
    for link in links:
        values.append(values[-1] if link is RelationKeyword.SAME else 1 - values[-1])
    return values


def distinction_answer(values: List[int], idx_a: int, idx_b: int, keyword: RelationKeyword) -> bool:
    if keyword is RelationKeyword.SAME:
        return values[idx_a] == values[idx_b]
    return values[idx_a] != values[idx_b]


def generate_distinction_round_internal(symbols: List[Symbol], cipher: CipherContext,
                                        is_night: bool, rng: random.Random, **kwargs) -> RoundState:
    """Identity chain of SAME/DIFFERENT links over hidden binary values."""
    num_links = len(symbols) - 1
    start_value = 1 if rng.random() < 0.5 else 0
    links = [RelationKeyword.SAME if rng.random() < 0.5 else RelationKeyword.DIFFERENT
             for _ in range(num_links)]
    values = chain_values(start_value, links)
    premises = [Premise(symbols[i], link, symbols[i + 1], cipher.term(link))
                for i, link in enumerate(links)]

    idx_a, idx_b = pick_distinct_pair(len(symbols), rng)
    q_keyword = rng.choice([RelationKeyword.SAME, RelationKeyword.DIFFERENT])
    answer = apply_night_to_answer(distinction_answer(values, idx_a, idx_b, q_keyword), is_night)

    query = Query(symbols[idx_a], q_keyword, symbols[idx_b], answer, cipher.term(q_keyword))
    logger.debug(f"Distinction round: values={values}, query {idx_a} {q_keyword.value} {idx_b} -> {answer}")
    return RoundState(RftMode.DISTINCTION, symbols, premises, query, is_night=is_night)
