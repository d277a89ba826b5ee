"""Fixed-template wording for rounds. Plain text only; styling belongs to the UI."""
from typing import List, Optional
import logging

from .common import RelationKeyword, SymbolMode, RftMode, SpatialQueryType
from .puzzle_types import Symbol, Premise, Query, RoundState, MovementInstruction

logger = logging.getLogger(__name__)

# Connective wording around a plain (non-enciphered) keyword
_PREMISE_TEMPLATES = {
    RelationKeyword.GREATER: "{a} is {t} than {b}",
    RelationKeyword.LESS: "{a} is {t} than {b}",
    RelationKeyword.SAME: "{a} is the {t} as {b}",
    RelationKeyword.DIFFERENT: "{a} is {t} from {b}",
    RelationKeyword.CONTAINS: "{a} {t} {b}",
    RelationKeyword.INSIDE: "{a} is {t} {b}",
    RelationKeyword.ABOVE: "{a} is {t} {b}",
    RelationKeyword.BELOW: "{a} is {t} {b}",
}
_DIRECTION_TEMPLATE = "{a} is {t} of {b}"
_CIPHER_TEMPLATE = "{a} {t} {b}"


def symbol_label(symbol: Symbol) -> str:
    if symbol.kind is SymbolMode.VORONOI:
        hue, points = symbol.token
        return f"<shape h{hue}/{len(points)}>"
    return str(symbol.token)


def _is_enciphered(keyword: RelationKeyword, token: str) -> bool:
    return token != keyword.value


def render_relation(a: str, keyword: RelationKeyword, b: str, token: str) -> str:
    if _is_enciphered(keyword, token):
        return _CIPHER_TEMPLATE.format(a=a, t=token, b=b)
    template = _PREMISE_TEMPLATES.get(keyword, _DIRECTION_TEMPLATE)
    return template.format(a=a, t=token, b=b)


def render_premise(premise: Premise) -> str:
    return render_relation(symbol_label(premise.subject), premise.keyword,
                           symbol_label(premise.object), premise.token) + "."


def render_instruction(instruction: MovementInstruction) -> str:
    if instruction.action is RelationKeyword.START:
        return f"{instruction.action_token} {symbol_label(instruction.argument)}."
    if instruction.action is RelationKeyword.WALK:
        return f"{instruction.action_token} {instruction.argument}."
    return f"{instruction.action_token} {instruction.argument_token}."


def render_query(round_state: RoundState) -> str:
    query: Query = round_state.query
    a = symbol_label(query.subject)

    if round_state.spatial_query_type is SpatialQueryType.MOVEMENT:
        steps = " ".join(render_instruction(i) for i in query.instructions)
        return f"{steps} Is {a} to your {query.token}?"
    if round_state.spatial_query_type is SpatialQueryType.DEICTIC:
        return (f"You are at {symbol_label(query.object)} facing {query.facing_token}. "
                f"Is {a} to your {query.token}?")

    b = symbol_label(query.object)
    if round_state.mode is RftMode.HIERARCHY and query.keyword is RelationKeyword.CONTAINS:
        return f"Does {a} {query.token} {b}?"
    relation = render_relation(a, query.keyword, b, query.token)
    # "X is ..." -> "Is X ..."
    if relation.startswith(f"{a} is "):
        relation = f"Is {a} " + relation[len(a) + 4:]
    else:
        relation = "Is " + relation
    return relation + "?"


def render_premises(round_state: RoundState) -> List[str]:
    return [render_premise(p) for p in round_state.premises]


def feedback_message(user_answer: Optional[bool], correct: bool, is_night: bool) -> str:
    if user_answer is None:
        return "TIMEOUT"
    if correct:
        return "INVERSION SUCCESSFUL" if is_night else "VERIFIED"
    return "FAILED TO INVERT" if is_night else "COLLAPSE"
