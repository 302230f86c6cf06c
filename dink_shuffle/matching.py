"""Greedy construction plus bounded swap improvement for singles, doubles and mixed doubles."""

import logging
import random
from itertools import combinations, permutations
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from dink_shuffle.fairness import FairnessState
from dink_shuffle.models import Gender, GameType, PairingMode, Player

logger = logging.getLogger(__name__)

Team = Tuple[Player, ...]
Matchup = Tuple[Team, Team]  # the two facing sides of one court

# 4+4 splits of eight players: bit patterns with four bits set and player 0
# always in the first group, so each split is listed once (C(7,3) = 35)
SPLIT_MASKS = tuple(m for m in range(1 << 8) if bin(m).count("1") == 4 and m & 1)

# The 3 ways to split four players into two pairs
PAIR_SPLITS = (((0, 1), (2, 3)), ((0, 2), (1, 3)), ((0, 3), (1, 2)))

# Every assignment of 4 females to 4 males (4! = 24)
FEMALE_PERMUTATIONS = tuple(permutations(range(4)))


class BaseMatcher:
    """Shared greedy claim and sweep bookkeeping"""

    def __init__(
        self, fairness: FairnessState, rng: random.Random, max_sweeps: int = 50
    ):
        self.fairness = fairness
        self.rng = rng
        self.max_sweeps = max_sweeps
        self.last_sweeps = 0  # sweeps used by the latest build

    def build(self, active: Sequence[Player], num_courts: int) -> List[Matchup]:
        raise NotImplementedError("Subclasses must implement build")

    @staticmethod
    def _greedy_claim(
        candidates: Sequence[tuple],
        cost: Callable[[tuple], int],
        members: Callable[[tuple], Sequence[Player]],
        limit: int,
    ) -> List[tuple]:
        """Accept the cheapest candidates whose players are all still free.

        The sort is stable, so equal costs keep the (already randomized)
        candidate order.
        """
        ranked = sorted(candidates, key=cost)
        used = set()
        chosen = []
        for candidate in ranked:
            if len(chosen) >= limit:
                break
            ids = [p.id for p in members(candidate)]
            if any(pid in used for pid in ids):
                continue
            chosen.append(candidate)
            used.update(ids)
        return chosen

    def court_cost(self, matchup: Matchup) -> int:
        """Partner repeats within each side plus opponent repeats across the net"""
        left, right = matchup
        return (
            self.fairness.partner_cost(left)
            + self.fairness.partner_cost(right)
            + self.fairness.opponent_cost(left, right)
        )


class SinglesMatcher(BaseMatcher):
    """1v1 courts minimizing repeated opponents"""

    def build(self, active: Sequence[Player], num_courts: int) -> List[Matchup]:
        players = list(active)
        self.rng.shuffle(players)

        pairs = self._greedy_claim(
            list(combinations(players, 2)),
            cost=self._pair_cost,
            members=lambda pair: pair,
            limit=num_courts,
        )
        pairs = self._improve(pairs)
        return [((a,), (b,)) for a, b in pairs]

    def _pair_cost(self, pair: Tuple[Player, Player]) -> int:
        return self.fairness.opponents.get(pair[0].id, pair[1].id)

    def _improve(self, pairs: List[Tuple[Player, Player]]) -> List[Tuple[Player, Player]]:
        """2-opt over every pair of courts until a sweep changes nothing"""
        pairs = list(pairs)
        self.last_sweeps = 0
        for _ in range(self.max_sweeps):
            self.last_sweeps += 1
            improved = False
            for i, j in combinations(range(len(pairs)), 2):
                (a, b), (c, d) = pairs[i], pairs[j]
                best = None
                best_cost = self._pair_cost((a, b)) + self._pair_cost((c, d))
                for option in (((a, c), (b, d)), ((a, d), (b, c))):
                    option_cost = self._pair_cost(option[0]) + self._pair_cost(option[1])
                    if option_cost < best_cost:
                        best, best_cost = option, option_cost
                if best is not None:
                    pairs[i], pairs[j] = best
                    improved = True
            if not improved:
                break
        logger.debug(f"Singles swap improvement stopped after {self.last_sweeps} sweeps")
        return pairs


class DoublesMatcher(BaseMatcher):
    """2v2 courts with unconstrained partners"""

    def build(self, active: Sequence[Player], num_courts: int) -> List[Matchup]:
        teams = self._form_teams(active, num_courts)
        matchups = self._pair_teams(teams, num_courts)
        return self._improve(matchups)

    def _form_teams(self, active: Sequence[Player], num_courts: int) -> List[Team]:
        """Stage A: partner pairs, least-repeated partnerships first"""
        players = list(active)
        self.rng.shuffle(players)
        return self._greedy_claim(
            list(combinations(players, 2)),
            cost=self.fairness.partner_cost,
            members=lambda team: team,
            limit=2 * num_courts,
        )

    def _pair_teams(self, teams: List[Team], num_courts: int) -> List[Matchup]:
        """Stage B: team against team, least-repeated opponents first"""
        return self._greedy_claim(
            list(combinations(teams, 2)),
            cost=lambda m: self.fairness.opponent_cost(m[0], m[1]),
            members=lambda m: m[0] + m[1],
            limit=num_courts,
        )

    def _improve(self, matchups: List[Matchup]) -> List[Matchup]:
        """Stage C: re-optimize every pair of courts jointly"""
        matchups = list(matchups)
        self.last_sweeps = 0
        for _ in range(self.max_sweeps):
            self.last_sweeps += 1
            improved = False
            for i, j in combinations(range(len(matchups)), 2):
                better = self._best_regroup(matchups[i], matchups[j])
                if better is not None:
                    matchups[i], matchups[j] = better
                    improved = True
            if not improved:
                break
        logger.debug(f"Court regrouping stopped after {self.last_sweeps} sweeps")
        return matchups

    def _best_regroup(
        self, first: Matchup, second: Matchup
    ) -> Optional[Tuple[Matchup, Matchup]]:
        """Cheapest regrouping of two courts, if strictly cheaper than now"""
        best = None
        best_cost = self.court_cost(first) + self.court_cost(second)
        for candidate in self.regroup_candidates(first, second):
            total = self.court_cost(candidate[0]) + self.court_cost(candidate[1])
            if total < best_cost:
                best, best_cost = candidate, total
        return best

    def regroup_candidates(
        self, first: Matchup, second: Matchup
    ) -> Iterator[Tuple[Matchup, Matchup]]:
        """All 35 ways to re-split two courts' eight players into two fours"""
        eight = first[0] + first[1] + second[0] + second[1]
        for mask in SPLIT_MASKS:
            group_a = [eight[k] for k in range(8) if mask >> k & 1]
            group_b = [eight[k] for k in range(8) if not mask >> k & 1]
            yield self._best_split(group_a), self._best_split(group_b)

    def _best_split(self, four: Sequence[Player]) -> Matchup:
        """Cheapest of the 3 ways to divide four players into two teams"""
        best = None
        best_cost = None
        for (a, b), (c, d) in PAIR_SPLITS:
            matchup = ((four[a], four[b]), (four[c], four[d]))
            cost = self.court_cost(matchup)
            if best_cost is None or cost < best_cost:
                best, best_cost = matchup, cost
        return best


class MixedDoublesMatcher(DoublesMatcher):
    """2v2 courts where every team is one male and one female.

    Teams are always stored as (male, female).
    """

    def _form_teams(self, active: Sequence[Player], num_courts: int) -> List[Team]:
        males = [p for p in active if p.gender == Gender.MALE]
        females = [p for p in active if p.gender == Gender.FEMALE]
        self.rng.shuffle(males)
        self.rng.shuffle(females)
        return self._greedy_claim(
            [(m, f) for m in males for f in females],
            cost=self.fairness.partner_cost,
            members=lambda team: team,
            limit=2 * num_courts,
        )

    def regroup_candidates(
        self, first: Matchup, second: Matchup
    ) -> Iterator[Tuple[Matchup, Matchup]]:
        """24 female permutations times 3 team splits, all gender-balanced"""
        teams = [first[0], first[1], second[0], second[1]]
        males = [team[0] for team in teams]
        females = [team[1] for team in teams]
        for perm in FEMALE_PERMUTATIONS:
            regrouped = [(males[k], females[perm[k]]) for k in range(4)]
            for (a, b), (c, d) in PAIR_SPLITS:
                yield (regrouped[a], regrouped[b]), (regrouped[c], regrouped[d])


def matcher_for(
    game_type, pairing_mode, fairness: FairnessState, rng: random.Random, max_sweeps: int
) -> BaseMatcher:
    """Pick the matcher class for a game type and pairing mode"""
    if GameType(game_type) == GameType.SINGLES:
        return SinglesMatcher(fairness, rng, max_sweeps)
    if pairing_mode is not None and PairingMode(pairing_mode) == PairingMode.MIXED:
        return MixedDoublesMatcher(fairness, rng, max_sweeps)
    return DoublesMatcher(fairness, rng, max_sweeps)
