"""Unit tests for the court-rotation optimizer."""

import random
import unittest
from collections import Counter

from dink_shuffle.fairness import FairnessState
from dink_shuffle.models import RotationStrategy
from dink_shuffle.rotation import CourtRotationOptimizer

from tests.helpers import make_players


class TestCourtRotation(unittest.TestCase):
    """Test exhaustive, greedy and CP-SAT court assignment"""

    def setUp(self):
        self.fairness = FairnessState()
        self.players = make_players(6)
        p = self.players
        self.groups = [[p[0], p[1]], [p[2], p[3]], [p[4], p[5]]]

        # cost rows: g0 [2, 2, 0], g1 [1, 0, 2], g2 [0, 0, 0]
        # the only zero-cost arrangement is g0 -> 3, g1 -> 2, g2 -> 1
        for court in (1, 1, 2, 2):
            self.fairness.record_court("p0", court)
        self.fairness.record_court("p2", 1)
        self.fairness.record_court("p3", 3)
        self.fairness.record_court("p3", 3)

    def test_cost_matrix(self):
        optimizer = CourtRotationOptimizer(self.fairness, random.Random(0))
        self.assertEqual(
            optimizer.cost_matrix(self.groups), [[2, 2, 0], [1, 0, 2], [0, 0, 0]]
        )

    def test_exhaustive_finds_optimum(self):
        optimizer = CourtRotationOptimizer(self.fairness, random.Random(0))
        self.assertEqual(optimizer.assign(self.groups), [3, 2, 1])

    def test_solver_finds_optimum(self):
        """CP-SAT strategy returns the same unique optimum"""
        optimizer = CourtRotationOptimizer(
            self.fairness, random.Random(0), strategy=RotationStrategy.SOLVER
        )
        self.assertEqual(optimizer.assign(self.groups), [3, 2, 1])

    def test_greedy_fallback_above_limit(self):
        """Greedy fills court 1 with the cheapest group, then court 2, then court 3"""
        optimizer = CourtRotationOptimizer(
            self.fairness, random.Random(0), exhaustive_limit=2
        )
        # court 1: g2 is the only zero; court 2: g1 is the only zero left; g0 gets 3
        self.assertEqual(optimizer.assign(self.groups), [3, 2, 1])

    def test_assignment_is_a_permutation(self):
        """With no history every arrangement ties; any permutation of 1..k is fine"""
        players = make_players(16)
        groups = [players[i:i + 2] for i in range(0, 16, 2)]
        for strategy, limit in (
            (RotationStrategy.AUTO, 8),
            (RotationStrategy.AUTO, 3),
            (RotationStrategy.SOLVER, 8),
        ):
            optimizer = CourtRotationOptimizer(
                FairnessState(), random.Random(1), strategy=strategy, exhaustive_limit=limit
            )
            self.assertEqual(sorted(optimizer.assign(groups)), list(range(1, 9)))

    def test_exhaustive_ties_are_uniform(self):
        """Every tied arrangement is about equally likely, not just the last ones"""
        optimizer = CourtRotationOptimizer(FairnessState(), random.Random(3))
        matrix = [[0, 0, 0], [0, 0, 0], [0, 0, 0]]
        counts = Counter(tuple(optimizer._exhaustive(matrix)) for _ in range(600))
        self.assertEqual(len(counts), 6)
        for assignment, count in counts.items():
            self.assertGreater(count, 50, assignment)
            self.assertLess(count, 150, assignment)

    def test_empty_round(self):
        optimizer = CourtRotationOptimizer(self.fairness, random.Random(0))
        self.assertEqual(optimizer.assign([]), [])

    def test_total_cost(self):
        matrix = [[2, 2, 0], [1, 0, 2], [0, 0, 0]]
        self.assertEqual(CourtRotationOptimizer.total_cost(matrix, [3, 2, 1]), 0)
        self.assertEqual(CourtRotationOptimizer.total_cost(matrix, [1, 2, 3]), 2)


if __name__ == "__main__":
    unittest.main()
