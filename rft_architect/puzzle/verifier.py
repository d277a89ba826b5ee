from typing import Dict, Any, Optional
import logging

from constraint import Problem, FunctionConstraint

from .common import RftMode, RelationKeyword, SpatialQueryType
from .geometry import DIRECTION_VECTORS, local_bearing, world_relation
from .generators.spatial_gen import simulate_walk
from .puzzle_types import RoundState, Position
from .transform import invert_relation

logger = logging.getLogger(__name__)


class RoundVerifier:
    """
    Checks that a round's expected answer follows from its premises alone.

    The premises are posed as a CSP (python-constraint); the round is verified
    when the query evaluates to the expected answer in every solution. Spatial
    steps are unit lattice steps, so spatial rounds have exactly one solution
    once the first symbol is anchored at the origin.
    """
    MAX_VERIFY_SYMBOLS = 12  # Larger chains are skipped; search cost grows with domain size

    def __init__(self, round_state: RoundState):
        self.round_state = round_state
        self.num_symbols = len(round_state.symbols)

    def verify(self) -> Optional[bool]:
        """True/False for checked rounds, None when the round is too large to check."""
        if self.num_symbols > self.MAX_VERIFY_SYMBOLS:
            logger.debug(f"Skipping verification for {self.num_symbols} symbols (limit {self.MAX_VERIFY_SYMBOLS}).")
            return None

        mode = self.round_state.mode
        if mode in (RftMode.SPATIAL_2D, RftMode.SPATIAL_3D):
            problem = self._build_spatial_problem(mode is RftMode.SPATIAL_3D)
            evaluate = self._evaluate_spatial
        else:
            problem = self._build_ordinal_problem(mode)
            evaluate = self._evaluate_ordinal

        solution_count = 0
        for solution in problem.getSolutions():
            solution_count += 1
            truth = evaluate(solution)
            if truth != self.round_state.query.expected:
                logger.warning(f"Round {mode.name} not derivable: solution {solution} gives {truth}, "
                               f"expected {self.round_state.query.expected}.")
                return False
        if solution_count == 0:
            logger.warning(f"Round {mode.name} premises are contradictory.")
            return False
        logger.debug(f"Round {mode.name} verified across {solution_count} solution(s).")
        return True

    # --- Linear / Distinction / Hierarchy ---

    def _build_ordinal_problem(self, mode: RftMode) -> Problem:
        problem = Problem()
        if mode is RftMode.DISTINCTION:
            domain = [0, 1]
        else:
            domain = list(range(self.num_symbols))
        for symbol in self.round_state.symbols:
            problem.addVariable(f"v{symbol.id}", domain)

        for premise in self.round_state.premises:
            vars_ = [f"v{premise.subject.id}", f"v{premise.object.id}"]
            keyword = premise.keyword
            if keyword is RelationKeyword.GREATER:
                problem.addConstraint(FunctionConstraint(lambda a, b: a > b), vars_)
            elif keyword is RelationKeyword.LESS:
                problem.addConstraint(FunctionConstraint(lambda a, b: a < b), vars_)
            elif keyword is RelationKeyword.SAME:
                problem.addConstraint(FunctionConstraint(lambda a, b: a == b), vars_)
            elif keyword is RelationKeyword.DIFFERENT:
                problem.addConstraint(FunctionConstraint(lambda a, b: a != b), vars_)
            elif keyword is RelationKeyword.CONTAINS:
                # Outer containers sit on lower levels
                problem.addConstraint(FunctionConstraint(lambda a, b: a < b), vars_)
            else:
                raise ValueError(f"Unexpected premise keyword {keyword} for {mode.name}")
        return problem

    def _evaluate_ordinal(self, solution: Dict[str, Any]) -> bool:
        query = self.round_state.query
        a = solution[f"v{query.subject.id}"]
        b = solution[f"v{query.object.id}"]
        truth = {
            RelationKeyword.GREATER: a > b,
            RelationKeyword.LESS: a < b,
            RelationKeyword.SAME: a == b,
            RelationKeyword.DIFFERENT: a != b,
            RelationKeyword.CONTAINS: a < b,
            RelationKeyword.INSIDE: a > b,
        }[query.keyword]
        return (not truth) if self.round_state.is_night else truth

    # --- Spatial ---

    def _build_spatial_problem(self, is_3d: bool) -> Problem:
        problem = Problem()
        span = list(range(-(self.num_symbols - 1), self.num_symbols))
        anchor_id = self.round_state.symbols[0].id
        for symbol in self.round_state.symbols:
            for axis in ("x", "y", "z"):
                if symbol.id == anchor_id or (axis == "z" and not is_3d):
                    domain = [0]
                else:
                    domain = span
                problem.addVariable(f"{axis}{symbol.id}", domain)

        for premise in self.round_state.premises:
            vector = DIRECTION_VECTORS[premise.keyword]
            for axis, delta in zip(("x", "y", "z"), vector):
                problem.addConstraint(
                    FunctionConstraint(lambda s, o, delta=delta: s == o + delta),
                    [f"{axis}{premise.subject.id}", f"{axis}{premise.object.id}"])
        return problem

    @staticmethod
    def _position(solution: Dict[str, Any], symbol_id: int) -> Position:
        return Position(solution[f"x{symbol_id}"], solution[f"y{symbol_id}"], solution[f"z{symbol_id}"])

    def _evaluate_spatial(self, solution: Dict[str, Any]) -> bool:
        round_state = self.round_state
        query = round_state.query
        target = self._position(solution, query.subject.id)

        if round_state.spatial_query_type is SpatialQueryType.MOVEMENT:
            start_instr, face_instr = query.instructions[0], query.instructions[1]
            start = self._position(solution, start_instr.argument.id)
            final_pos, final_heading = simulate_walk(start, face_instr.argument, query.instructions[2:])
            dx, dy, _ = final_pos.delta_to(target)
            relation = local_bearing(dx, dy, final_heading)
        elif round_state.spatial_query_type is SpatialQueryType.DEICTIC:
            observer = self._position(solution, query.object.id)
            dx, dy, _ = observer.delta_to(target)
            relation = local_bearing(dx, dy, query.facing)
        else:
            anchor = self._position(solution, query.object.id)
            parts = world_relation(*anchor.delta_to(target), is_3d=round_state.mode is RftMode.SPATIAL_3D)
            effective = invert_relation(parts) if round_state.is_night else parts
            return query.keyword in effective

        effective = invert_relation(relation) if round_state.is_night else relation
        return query.keyword is effective
