"""Constraint validation for generated mixer rounds."""

from collections import Counter, defaultdict
from typing import Dict, List, Sequence, Tuple

from dink_shuffle.fairness import FairnessState
from dink_shuffle.models import (
    GameType,
    Gender,
    Player,
    Round,
    ShuffleConfig,
    ShuffleResult,
)


class ConstraintValidator:
    """Helper class to validate shuffle constraints"""

    @staticmethod
    def validate_sit_out_fairness(
        rounds: List[Round], players: Sequence[Player], per_gender: bool = False
    ) -> Tuple[bool, List[str]]:
        """Validate that sit-out counts never drift more than one apart"""
        violations = []
        if per_gender:
            pools = [
                [p for p in players if p.gender == Gender.MALE],
                [p for p in players if p.gender == Gender.FEMALE],
            ]
        else:
            pools = [list(players)]

        sit_counts: Dict[str, int] = defaultdict(int)
        for round_ in rounds:
            for player in round_.sit_outs:
                sit_counts[player.id] += 1

            for pool in pools:
                if not pool:
                    continue
                counts = [sit_counts[p.id] for p in pool]
                spread = max(counts) - min(counts)
                if spread > 1:
                    violations.append(
                        f"Round {round_.round_number}: sit-out counts spread by {spread} "
                        f"(min {min(counts)}, max {max(counts)})"
                    )

        return len(violations) == 0, violations

    @staticmethod
    def validate_counter_symmetry(fairness: FairnessState) -> Tuple[bool, List[str]]:
        """Validate that partner and opponent counts read the same both ways"""
        violations = []
        for label, counter in (("partner", fairness.partners), ("opponent", fairness.opponents)):
            for a, b, count in counter.pairs():
                if counter.get(a, b) != counter.get(b, a) or counter.get(a, b) != count:
                    violations.append(
                        f"Asymmetric {label} count for {a}/{b}: "
                        f"{counter.get(a, b)} vs {counter.get(b, a)}"
                    )
        return len(violations) == 0, violations

    @staticmethod
    def validate_court_structure(
        rounds: List[Round], game_type: GameType
    ) -> Tuple[bool, List[str]]:
        """Validate player counts, teams and court numbering of every court"""
        violations = []
        doubles = GameType(game_type) == GameType.DOUBLES
        expected = 4 if doubles else 2

        for round_ in rounds:
            numbers = sorted(court.court_number for court in round_.courts)
            if numbers != list(range(1, len(round_.courts) + 1)):
                violations.append(
                    f"Round {round_.round_number}: court numbers {numbers} are not 1..{len(numbers)}"
                )

            for court in round_.courts:
                ids = court.player_ids
                if len(ids) != expected or len(set(ids)) != expected:
                    violations.append(
                        f"Round {round_.round_number} court {court.court_number}: "
                        f"expected {expected} distinct players, found {ids}"
                    )
                    continue

                if doubles:
                    if court.team1 is None or court.team2 is None:
                        violations.append(
                            f"Round {round_.round_number} court {court.court_number}: missing teams"
                        )
                        continue
                    team_ids = [p.id for p in court.team1] + [p.id for p in court.team2]
                    if len(court.team1) != 2 or len(court.team2) != 2 or sorted(team_ids) != sorted(ids):
                        violations.append(
                            f"Round {round_.round_number} court {court.court_number}: "
                            f"teams do not split the players 2/2"
                        )
                elif court.team1 is not None or court.team2 is not None:
                    violations.append(
                        f"Round {round_.round_number} court {court.court_number}: singles court has teams"
                    )

        return len(violations) == 0, violations

    @staticmethod
    def validate_no_double_booking(
        rounds: List[Round], players: Sequence[Player]
    ) -> Tuple[bool, List[str]]:
        """Validate that every player is on exactly one court or resting each round"""
        violations = []
        roster_ids = {p.id for p in players}

        for round_ in rounds:
            seen = Counter(p.id for p in round_.active_players())
            seen.update(p.id for p in round_.sit_outs)

            for pid, count in seen.items():
                if count > 1:
                    violations.append(
                        f"Round {round_.round_number}: player {pid} appears {count} times"
                    )
                if pid not in roster_ids:
                    violations.append(
                        f"Round {round_.round_number}: unknown player {pid}"
                    )
            missing = roster_ids - set(seen)
            if missing:
                violations.append(
                    f"Round {round_.round_number}: players missing: {', '.join(sorted(missing))}"
                )

        return len(violations) == 0, violations

    @staticmethod
    def validate_mixed_teams(rounds: List[Round]) -> Tuple[bool, List[str]]:
        """Validate that every team is one male and one female"""
        violations = []
        for round_ in rounds:
            for court in round_.courts:
                for team in (court.team1, court.team2):
                    genders = sorted(p.gender.value for p in team or ())
                    if genders != ["female", "male"]:
                        violations.append(
                            f"Round {round_.round_number} court {court.court_number}: "
                            f"team {[p.name for p in team or ()]} is not mixed"
                        )
        return len(violations) == 0, violations

    @staticmethod
    def validate_all_constraints(
        result: ShuffleResult, players: Sequence[Player], config: ShuffleConfig
    ) -> Tuple[bool, List[str]]:
        """Validate all constraints at once"""
        all_violations = []

        fairness_valid, fairness_violations = ConstraintValidator.validate_sit_out_fairness(
            result.rounds, players, per_gender=config.is_mixed
        )
        structure_valid, structure_violations = ConstraintValidator.validate_court_structure(
            result.rounds, config.game_type
        )
        booking_valid, booking_violations = ConstraintValidator.validate_no_double_booking(
            result.rounds, players
        )
        symmetry_valid, symmetry_violations = True, []
        if result.fairness is not None:
            symmetry_valid, symmetry_violations = ConstraintValidator.validate_counter_symmetry(
                result.fairness
            )
        mixed_valid, mixed_violations = True, []
        if config.is_mixed:
            mixed_valid, mixed_violations = ConstraintValidator.validate_mixed_teams(
                result.rounds
            )

        # Collect all violations
        all_violations.extend(fairness_violations)
        all_violations.extend(structure_violations)
        all_violations.extend(booking_violations)
        all_violations.extend(symmetry_violations)
        all_violations.extend(mixed_violations)

        overall_valid = (
            fairness_valid
            and structure_valid
            and booking_valid
            and symmetry_valid
            and mixed_valid
        )

        return overall_valid, all_violations
