"""Tests for example sessions, session files and exports."""

import csv
import io
import json
import os
import random
import tempfile
import unittest
from contextlib import redirect_stdout

from dink_shuffle.cli import (
    create_example_session,
    export_csv,
    generate_mock_players,
    load_session,
    main,
    serialize_session,
)
from dink_shuffle.models import Gender, PairingMode
from dink_shuffle.scheduling import shuffle

from tests.helpers import make_players


class TestMockPlayers(unittest.TestCase):
    """Test demo roster generation"""

    def test_default_roster(self):
        players = generate_mock_players()
        self.assertEqual(len(players), 12)
        self.assertEqual(sum(p.gender == Gender.MALE for p in players), 6)
        self.assertEqual(players[0].id, "m0")
        self.assertEqual(players[6].id, "f0")
        self.assertEqual(len({p.id for p in players}), 12)

    def test_names_run_out(self):
        """At most ten players of each gender"""
        players = generate_mock_players(count=30, male_count=15)
        self.assertEqual(len(players), 20)

    def test_example_session(self):
        config, players = create_example_session()
        self.assertEqual(config.pairing_mode, PairingMode.MIXED)
        self.assertEqual(len(players), 14)


class TestSessionFiles(unittest.TestCase):
    """Test saving, loading and exporting sessions"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def path(self, name):
        return os.path.join(self.tmp.name, name)

    def test_session_roundtrip(self):
        config, players = create_example_session()
        with open(self.path("session.json"), "w", encoding="utf-8") as f:
            json.dump(serialize_session(config, players, seed=5), f)

        loaded_config, loaded_players, seed = load_session(self.path("session.json"))
        self.assertEqual(seed, 5)
        self.assertEqual(loaded_config, config)
        self.assertEqual([p.to_dict() for p in loaded_players], [p.to_dict() for p in players])

    def test_export_csv(self):
        result = shuffle(make_players(5), "singles", None, 2, 2, rng=random.Random(0))
        export_csv(result, self.path("rounds.csv"))

        with open(self.path("rounds.csv"), newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        self.assertEqual(rows[0], ["round", "court", "side_1", "side_2"])
        # two courts and one resting player per round
        self.assertEqual(len(rows), 1 + 2 * 3)
        resting = [row for row in rows[1:] if row[1] == "sit out"]
        self.assertEqual(len(resting), 2)

    def test_main_with_config_file(self):
        """A saved session shuffles from the command line and exports every round"""
        with redirect_stdout(io.StringIO()):
            main(["--save-example", self.path("session.json")])
            main(
                [
                    "--config",
                    self.path("session.json"),
                    "--seed",
                    "3",
                    "--export-json",
                    self.path("rounds.json"),
                ]
            )

        with open(self.path("rounds.json"), encoding="utf-8") as f:
            rounds = json.load(f)
        self.assertEqual(len(rounds), 6)
        for round_ in rounds:
            self.assertEqual(len(round_["courts"]), 3)
            self.assertEqual(len(round_["sit_outs"]), 2)
            for court in round_["courts"]:
                self.assertEqual(len(court["team1"]), 2)
                self.assertEqual(len(court["team2"]), 2)

    def test_main_rejects_malformed_players(self):
        """Player entries that are not objects are reported, not raised"""
        with open(self.path("session.json"), "w", encoding="utf-8") as f:
            json.dump(
                {
                    "players": ["Amy", "Ben"],
                    "game_type": "singles",
                    "num_rounds": 1,
                    "num_courts": 1,
                },
                f,
            )
        output = io.StringIO()
        with redirect_stdout(output):
            main(["--config", self.path("session.json")])
        self.assertIn("Error loading session", output.getvalue())

    def test_main_rejects_missing_file(self):
        output = io.StringIO()
        with redirect_stdout(output):
            main(["--config", self.path("missing.json")])
        self.assertIn("Error loading session", output.getvalue())


if __name__ == "__main__":
    unittest.main()
