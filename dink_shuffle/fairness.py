"""Fairness counters threaded through every round of one shuffle."""

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from dink_shuffle.models import Player, Round


class PairCounter:
    """Symmetric sparse counter of how often two players met.

    Keys are normalized so ``get(a, b) == get(b, a)`` always holds.
    """

    def __init__(self):
        self._counts: Dict[Tuple[str, str], int] = {}

    @staticmethod
    def _key(a: str, b: str) -> Tuple[str, str]:
        return (a, b) if a <= b else (b, a)

    def get(self, a: str, b: str) -> int:
        if a == b:
            return 0
        return self._counts.get(self._key(a, b), 0)

    def increment(self, a: str, b: str) -> int:
        if a == b:
            raise ValueError(f"Cannot pair player {a} with themselves")
        key = self._key(a, b)
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]

    def counts_for(self, player_id: str) -> Dict[str, int]:
        """All non-zero counts of one player, keyed by the other player"""
        row = {}
        for (a, b), count in self._counts.items():
            if a == player_id:
                row[b] = count
            elif b == player_id:
                row[a] = count
        return row

    def pairs(self) -> Iterator[Tuple[str, str, int]]:
        for (a, b), count in self._counts.items():
            yield a, b, count

    def __len__(self):
        return len(self._counts)


class FairnessState:
    """Sit-out, partner, opponent and court occupancy tallies for one session"""

    def __init__(self):
        self.sit_outs: Dict[str, int] = defaultdict(int)
        self.partners = PairCounter()
        self.opponents = PairCounter()
        self.courts: Dict[str, Dict[int, int]] = defaultdict(lambda: defaultdict(int))
        self.rounds_recorded = 0

    def sit_out_count(self, player_id: str) -> int:
        return self.sit_outs.get(player_id, 0)

    def record_sit_out(self, player_id: str) -> None:
        self.sit_outs[player_id] += 1

    def court_count(self, player_id: str, court_number: int) -> int:
        row = self.courts.get(player_id)
        if row is None:
            return 0
        return row.get(court_number, 0)

    def record_court(self, player_id: str, court_number: int) -> None:
        self.courts[player_id][court_number] += 1

    def partner_cost(self, team: Sequence[Player]) -> int:
        """Times the members of a team already partnered each other"""
        cost = 0
        for i in range(len(team)):
            for j in range(i + 1, len(team)):
                cost += self.partners.get(team[i].id, team[j].id)
        return cost

    def opponent_cost(self, side_a: Iterable[Player], side_b: Iterable[Player]) -> int:
        """Times players of one side already faced players of the other"""
        side_b = list(side_b)
        return sum(self.opponents.get(a.id, b.id) for a in side_a for b in side_b)

    def record_round(self, round_: Round) -> None:
        """Commit partner, opponent and court counts of a finalized round"""
        for court in round_.courts:
            left, right = court.sides()
            for side in (left, right):
                if len(side) == 2:
                    self.partners.increment(side[0].id, side[1].id)
            for a in left:
                for b in right:
                    self.opponents.increment(a.id, b.id)
            for player in court.players:
                self.record_court(player.id, court.court_number)
        self.rounds_recorded += 1

    def sit_out_spread(self, player_ids: Iterable[str]) -> int:
        counts: List[int] = [self.sit_out_count(pid) for pid in player_ids]
        if not counts:
            return 0
        return max(counts) - min(counts)
