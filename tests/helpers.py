"""Shared roster builders for the test suite."""

from typing import List

from dink_shuffle.models import Gender, Player


def make_players(count: int, prefix: str = "p", gender: Gender = Gender.MALE) -> List[Player]:
    return [Player(id=f"{prefix}{i}", name=f"{prefix.upper()}{i}", gender=gender) for i in range(count)]


def make_mixed_roster(males: int, females: int) -> List[Player]:
    return make_players(males, "m", Gender.MALE) + make_players(females, "f", Gender.FEMALE)


def round_signature(rounds):
    """Comparable snapshot of a round list: ids, court numbers, teams, sit-outs"""
    snapshot = []
    for round_ in rounds:
        courts = []
        for court in round_.courts:
            left, right = court.sides()
            courts.append(
                (
                    court.id,
                    court.court_number,
                    tuple(p.id for p in left),
                    tuple(p.id for p in right),
                )
            )
        snapshot.append((round_.id, round_.round_number, tuple(courts), tuple(p.id for p in round_.sit_outs)))
    return snapshot
