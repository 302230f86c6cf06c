"""Court-number assignment balancing how often each player uses each court."""

import logging
import random
from itertools import permutations
from typing import List, Sequence

from ortools.sat.python import cp_model

from dink_shuffle.fairness import FairnessState
from dink_shuffle.models import Player, RotationStrategy

logger = logging.getLogger(__name__)


class CourtRotationOptimizer:
    """Assign a round's court groups to court numbers 1..k"""

    def __init__(
        self,
        fairness: FairnessState,
        rng: random.Random,
        strategy: RotationStrategy = RotationStrategy.AUTO,
        exhaustive_limit: int = 8,
        solver_time_limit: float = 10.0,
    ):
        self.fairness = fairness
        self.rng = rng
        self.strategy = RotationStrategy(strategy)
        self.exhaustive_limit = exhaustive_limit
        self.solver_time_limit = solver_time_limit

    def cost_matrix(self, groups: Sequence[Sequence[Player]]) -> List[List[int]]:
        """cost[g][c]: prior visits of group g's players to court number c + 1"""
        k = len(groups)
        return [
            [
                sum(self.fairness.court_count(p.id, court) for p in group)
                for court in range(1, k + 1)
            ]
            for group in groups
        ]

    def assign(self, groups: Sequence[Sequence[Player]]) -> List[int]:
        """Court number for every group, in group order"""
        if not groups:
            return []
        matrix = self.cost_matrix(groups)

        if self.strategy == RotationStrategy.SOLVER:
            assignment = self._solve_with_cp_sat(matrix)
        elif len(groups) <= self.exhaustive_limit:
            assignment = self._exhaustive(matrix)
        else:
            assignment = self._greedy(matrix)

        logger.debug(
            f"Court rotation ({self.strategy.value}, {len(groups)} courts): "
            f"cost {self.total_cost(matrix, assignment)}"
        )
        return assignment

    @staticmethod
    def total_cost(matrix: List[List[int]], assignment: List[int]) -> int:
        return sum(matrix[g][court - 1] for g, court in enumerate(assignment))

    def _exhaustive(self, matrix: List[List[int]]) -> List[int]:
        """Try every arrangement; the optimum is drawn uniformly among equal costs.

        The n-th tie seen replaces the incumbent with probability 1/n.
        """
        k = len(matrix)
        best = None
        best_cost = None
        ties = 0
        for perm in permutations(range(k)):
            cost = sum(matrix[g][perm[g]] for g in range(k))
            if best_cost is None or cost < best_cost:
                best, best_cost = perm, cost
                ties = 1
            elif cost == best_cost:
                ties += 1
                if self.rng.randrange(ties) == 0:
                    best = perm
        return [c + 1 for c in best]

    def _greedy(self, matrix: List[List[int]]) -> List[int]:
        """Fill court numbers in order with the cheapest remaining group"""
        k = len(matrix)
        remaining = list(range(k))
        assignment = [0] * k
        for court in range(k):
            lowest = min(matrix[g][court] for g in remaining)
            tied = [g for g in remaining if matrix[g][court] == lowest]
            group = self.rng.choice(tied)
            assignment[group] = court + 1
            remaining.remove(group)
        return assignment

    def _solve_with_cp_sat(self, matrix: List[List[int]]) -> List[int]:
        """Exact assignment with OR-Tools CP-SAT"""
        k = len(matrix)
        model = cp_model.CpModel()

        # x[g][c] is true when group g plays on court number c + 1
        x = [
            [model.NewBoolVar(f"group_{g}_court_{c + 1}") for c in range(k)]
            for g in range(k)
        ]
        for g in range(k):
            model.AddExactlyOne(x[g])
        for c in range(k):
            model.AddExactlyOne([x[g][c] for g in range(k)])

        model.Minimize(
            sum(matrix[g][c] * x[g][c] for g in range(k) for c in range(k))
        )

        solver = cp_model.CpSolver()
        solver.parameters.max_time_in_seconds = self.solver_time_limit
        solver.parameters.num_workers = 1
        solver.parameters.random_seed = self.rng.randrange(1 << 30)
        status = solver.Solve(model)

        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            logger.warning(
                f"⚠️  CP-SAT court rotation failed with status "
                f"{solver.StatusName(status)}, using greedy assignment"
            )
            return self._greedy(matrix)

        assignment = [0] * k
        for g in range(k):
            for c in range(k):
                if solver.Value(x[g][c]):
                    assignment[g] = c + 1
        return assignment
