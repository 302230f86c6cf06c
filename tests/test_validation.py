"""Unit tests for the constraint validator."""

import unittest

from dink_shuffle.fairness import FairnessState
from dink_shuffle.models import Court, GameType, Round
from dink_shuffle.validation import ConstraintValidator

from tests.helpers import make_mixed_roster, make_players


class TestConstraintValidation(unittest.TestCase):
    """Test that hand-built bad rounds are reported"""

    def setUp(self):
        self.players = make_players(6)
        self.a, self.b, self.c, self.d, self.e, self.f = self.players

    def doubles_court(self, number, players):
        return Court(
            id=f"r0c{number - 1}",
            court_number=number,
            players=list(players),
            team1=tuple(players[:2]),
            team2=tuple(players[2:]),
        )

    def test_sit_out_spread_violation(self):
        """The same player resting twice while others never rest"""
        rounds = [
            Round(id=f"round-{i}", round_number=i + 1, courts=[], sit_outs=[self.a])
            for i in range(2)
        ]
        valid, violations = ConstraintValidator.validate_sit_out_fairness(
            rounds, self.players
        )
        self.assertFalse(valid)
        self.assertEqual(len(violations), 1)
        self.assertIn("Round 2", violations[0])

    def test_per_gender_sit_outs(self):
        """Men and women are measured in separate pools"""
        roster = make_mixed_roster(2, 4)
        women = roster[2:]
        rounds = [
            Round(id=f"round-{i}", round_number=i + 1, courts=[], sit_outs=women[:2])
            for i in range(2)
        ]
        valid, _ = ConstraintValidator.validate_sit_out_fairness(
            rounds, roster, per_gender=True
        )
        self.assertFalse(valid)

    def test_court_numbers_must_be_contiguous(self):
        rounds = [
            Round(
                id="round-0",
                round_number=1,
                courts=[self.doubles_court(2, [self.a, self.b, self.c, self.d])],
                sit_outs=[self.e, self.f],
            )
        ]
        valid, violations = ConstraintValidator.validate_court_structure(
            rounds, GameType.DOUBLES
        )
        self.assertFalse(valid)
        self.assertIn("not 1..1", violations[0])

    def test_duplicate_player_on_court(self):
        court = Court(id="r0c0", court_number=1, players=[self.a, self.a])
        valid, _ = ConstraintValidator.validate_court_structure(
            [Round(id="round-0", round_number=1, courts=[court])], "singles"
        )
        self.assertFalse(valid)

    def test_doubles_court_needs_teams(self):
        court = Court(id="r0c0", court_number=1, players=[self.a, self.b, self.c, self.d])
        valid, violations = ConstraintValidator.validate_court_structure(
            [Round(id="round-0", round_number=1, courts=[court])], GameType.DOUBLES
        )
        self.assertFalse(valid)
        self.assertIn("missing teams", violations[0])

    def test_singles_court_with_teams(self):
        court = Court(
            id="r0c0",
            court_number=1,
            players=[self.a, self.b],
            team1=(self.a,),
            team2=(self.b,),
        )
        valid, _ = ConstraintValidator.validate_court_structure(
            [Round(id="round-0", round_number=1, courts=[court])], GameType.SINGLES
        )
        self.assertFalse(valid)

    def test_double_booking(self):
        """A player on a court and on the bench in the same round"""
        rounds = [
            Round(
                id="round-0",
                round_number=1,
                courts=[self.doubles_court(1, [self.a, self.b, self.c, self.d])],
                sit_outs=[self.a, self.e, self.f],
            )
        ]
        valid, violations = ConstraintValidator.validate_no_double_booking(
            rounds, self.players
        )
        self.assertFalse(valid)
        self.assertIn("p0 appears 2 times", violations[0])

    def test_missing_player(self):
        rounds = [
            Round(
                id="round-0",
                round_number=1,
                courts=[self.doubles_court(1, [self.a, self.b, self.c, self.d])],
                sit_outs=[self.e],
            )
        ]
        valid, violations = ConstraintValidator.validate_no_double_booking(
            rounds, self.players
        )
        self.assertFalse(valid)
        self.assertIn("p5", violations[0])

    def test_mixed_teams(self):
        roster = make_mixed_roster(2, 2)
        m0, m1, f0, f1 = roster
        same_gender = self.doubles_court(1, [m0, m1, f0, f1])
        valid, violations = ConstraintValidator.validate_mixed_teams(
            [Round(id="round-0", round_number=1, courts=[same_gender])]
        )
        self.assertFalse(valid)
        self.assertEqual(len(violations), 2)

        balanced = self.doubles_court(1, [m0, f0, m1, f1])
        valid, _ = ConstraintValidator.validate_mixed_teams(
            [Round(id="round-0", round_number=1, courts=[balanced])]
        )
        self.assertTrue(valid)

    def test_counter_symmetry_of_recorded_rounds(self):
        fairness = FairnessState()
        fairness.record_round(
            Round(
                id="round-0",
                round_number=1,
                courts=[self.doubles_court(1, [self.a, self.b, self.c, self.d])],
            )
        )
        valid, violations = ConstraintValidator.validate_counter_symmetry(fairness)
        self.assertTrue(valid, violations)


if __name__ == "__main__":
    unittest.main()
