"""Round orchestration: sit-outs, matching and court rotation for every round."""

import logging
import random
import time as time_module
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from dink_shuffle.fairness import FairnessState
from dink_shuffle.matching import BaseMatcher, Matchup, matcher_for
from dink_shuffle.models import (
    Court,
    GameType,
    Gender,
    Player,
    RosterValidationError,
    Round,
    ShuffleConfig,
    ShuffleErrorCode,
    ShuffleResult,
)
from dink_shuffle.rotation import CourtRotationOptimizer
from dink_shuffle.sitouts import SitOutSelector

logger = logging.getLogger(__name__)


class ShuffleEngine:
    """Main engine generating every round of a mixer session"""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng if rng is not None else random.Random()

    def shuffle(
        self,
        players: Sequence[Player],
        config: ShuffleConfig,
        fairness: Optional[FairnessState] = None,
    ) -> ShuffleResult:
        """Generate all rounds, or none plus an error when the roster can't play.

        Pass the ``fairness`` of an earlier result to keep partner, opponent,
        sit-out and court history across re-shuffles; by default every call
        starts from a fresh state.
        """
        start_time = time_module.time()
        roster = list(players)
        logger.info(
            f"Starting shuffle: {len(roster)} players, {config.mode_label}, "
            f"{config.num_rounds} rounds on {config.num_courts} courts"
        )

        try:
            self._validate_roster(roster, config)
        except RosterValidationError as e:
            logger.error(f"❌ Cannot shuffle: {e}")
            return ShuffleResult(
                success=False,
                rounds=[],
                generation_time=time_module.time() - start_time,
                error=e.to_error(),
            )

        if fairness is None:
            fairness = FairnessState()
        matcher = matcher_for(
            config.game_type, config.pairing_mode, fairness, self.rng, config.max_sweeps
        )
        selector = SitOutSelector(fairness, self.rng)
        rotation = CourtRotationOptimizer(
            fairness,
            self.rng,
            strategy=config.rotation_strategy,
            exhaustive_limit=config.exhaustive_rotation_limit,
        )

        warnings = self._capacity_warnings(roster, config)
        for warning in warnings:
            logger.warning(f"⚠️  {warning}")

        rounds: List[Round] = []
        for index in range(config.num_rounds):
            round_ = self._build_round(index, roster, config, selector, matcher, rotation)
            fairness.record_round(round_)
            rounds.append(round_)
            logger.debug(
                f"Round {round_.round_number}: {len(round_.courts)} courts, "
                f"{len(round_.sit_outs)} sitting out"
            )

        generation_time = time_module.time() - start_time
        logger.info(
            f"✅ Generated {len(rounds)} rounds in {generation_time:.2f} seconds"
        )
        return ShuffleResult(
            success=True,
            rounds=rounds,
            generation_time=generation_time,
            fairness=fairness,
            warnings=warnings,
        )

    def _validate_roster(self, roster: List[Player], config: ShuffleConfig):
        """Reject rosters that cannot fill a single court"""
        if not roster:
            raise RosterValidationError(
                ShuffleErrorCode.EMPTY_ROSTER, "No players in session"
            )

        duplicates = [pid for pid, n in Counter(p.id for p in roster).items() if n > 1]
        if duplicates:
            raise RosterValidationError(
                ShuffleErrorCode.DUPLICATE_PLAYER,
                f"Duplicate player ids: {', '.join(sorted(duplicates))}",
            )

        min_players = config.players_per_court
        if len(roster) < min_players:
            raise RosterValidationError(
                ShuffleErrorCode.INSUFFICIENT_PLAYERS,
                f"Need at least {min_players} players for {config.game_type.value}",
            )

        if config.is_mixed:
            males, females = self._split_by_gender(roster)
            if len(males) < 2 or len(females) < 2:
                raise RosterValidationError(
                    ShuffleErrorCode.INSUFFICIENT_GENDER_BALANCE,
                    "Mixed doubles requires at least 2 males and 2 females",
                )

    @staticmethod
    def _split_by_gender(players: Sequence[Player]) -> Tuple[List[Player], List[Player]]:
        males = [p for p in players if p.gender == Gender.MALE]
        females = [p for p in players if p.gender == Gender.FEMALE]
        return males, females

    def playable_courts(self, roster: Sequence[Player], config: ShuffleConfig) -> int:
        """Courts that can be filled each round with this roster"""
        if config.is_mixed:
            males, females = self._split_by_gender(roster)
            return min(config.num_courts, len(males) // 2, len(females) // 2)
        return min(config.num_courts, len(roster) // config.players_per_court)

    def _capacity_warnings(self, roster: List[Player], config: ShuffleConfig) -> List[str]:
        warnings = []
        courts = self.playable_courts(roster, config)
        if courts < config.num_courts:
            warnings.append(
                f"Only {courts} of {config.num_courts} courts can be filled each round"
            )
        resting = len(roster) - courts * config.players_per_court
        if resting > 0:
            warnings.append(f"{resting} players sit out every round")
        return warnings

    def _build_round(
        self,
        index: int,
        roster: List[Player],
        config: ShuffleConfig,
        selector: SitOutSelector,
        matcher: BaseMatcher,
        rotation: CourtRotationOptimizer,
    ) -> Round:
        """Pick who plays, match them up and give each court a number"""
        num_courts = self.playable_courts(roster, config)

        if config.is_mixed:
            # each gender pool rests independently so the active set stays balanced
            males, females = self._split_by_gender(roster)
            active_males, _ = selector.select(males, 2 * num_courts)
            active_females, _ = selector.select(females, 2 * num_courts)
            active = active_males + active_females
        else:
            active, _ = selector.select(roster, num_courts * config.players_per_court)

        matchups = matcher.build(active, num_courts) if num_courts else []
        court_numbers = rotation.assign([left + right for left, right in matchups])

        courts = [
            self._make_court(index, number, matchup, config)
            for number, matchup in sorted(zip(court_numbers, matchups), key=lambda x: x[0])
        ]
        playing = {pid for court in courts for pid in court.player_ids}
        sit_outs = [p for p in roster if p.id not in playing]

        return Round(
            id=f"round-{index}",
            round_number=index + 1,
            courts=courts,
            sit_outs=sit_outs,
        )

    @staticmethod
    def _make_court(
        round_index: int, court_number: int, matchup: Matchup, config: ShuffleConfig
    ) -> Court:
        left, right = matchup
        court = Court(
            id=f"r{round_index}c{court_number - 1}",
            court_number=court_number,
            players=list(left) + list(right),
        )
        if config.game_type == GameType.DOUBLES:
            court.team1 = tuple(left)
            court.team2 = tuple(right)
        return court

    def print_shuffle_summary(self, result: ShuffleResult, config: ShuffleConfig):
        """Print a formatted summary of every round"""
        if not result.success:
            print(f"❌ Shuffle failed: {result.error_message}")
            return

        print(f"\n🏸 Mixer Rounds: {config.mode_label}")
        print("=" * 80)
        print(f"📊 Summary:")
        print(f"   • Rounds: {len(result.rounds)}")
        print(f"   • Courts per round: {len(result.rounds[0].courts) if result.rounds else 0}")
        print(f"   • Generation time: {result.generation_time:.2f} seconds")

        if result.warnings:
            print(f"\n⚠️  Warnings:")
            for warning in result.warnings:
                print(f"   • {warning}")

        for round_ in result.rounds:
            print(f"\n📅 ROUND {round_.round_number}:")
            print("-" * 60)
            for court in round_.courts:
                print(f"   {court}")
            if round_.sit_outs:
                print(f"   Sitting out: {', '.join(p.name for p in round_.sit_outs)}")


def shuffle(
    players: Sequence[Player],
    game_type,
    pairing_mode=None,
    num_rounds: int = 1,
    num_courts: int = 1,
    rng: Optional[random.Random] = None,
    fairness: Optional[FairnessState] = None,
    **options,
) -> ShuffleResult:
    """Generate mixer rounds for a roster.

    Roster problems come back as ``result.error``; malformed configuration
    values (unknown game type, fewer than one round or court) raise ValueError.
    Extra ``options`` are passed to ShuffleConfig (``rotation_strategy``,
    ``max_sweeps``, ``exhaustive_rotation_limit``).
    """
    config = ShuffleConfig(
        game_type=game_type,
        pairing_mode=pairing_mode,
        num_rounds=num_rounds,
        num_courts=num_courts,
        **options,
    )
    return ShuffleEngine(rng).shuffle(players, config, fairness=fairness)
