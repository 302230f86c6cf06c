"""Command line interface and example sessions."""

import argparse
import csv
import json
import logging
import random
from typing import Any, Dict, List, Optional, Tuple

from dink_shuffle.models import (
    GameType,
    Gender,
    PairingMode,
    Player,
    Round,
    ShuffleConfig,
    ShuffleResult,
)
from dink_shuffle.scheduling import ShuffleEngine
from dink_shuffle.validation import ConstraintValidator

MALE_NAMES = ["Alex", "Ben", "Chris", "Dan", "Eric", "Frank", "George", "Henry", "Ivan", "Jack"]
FEMALE_NAMES = ["Amy", "Beth", "Cathy", "Diana", "Emma", "Fiona", "Grace", "Helen", "Ivy", "Julia"]


def run_all_tests():
    """Run all unit tests with proper import handling"""
    import os
    import sys
    import unittest

    # Add project root to path
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)

    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), top_level_dir=project_root)
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)
    return result.wasSuccessful()


# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def generate_mock_players(count: int = 12, male_count: int = 6) -> List[Player]:
    """Build a demo roster: ``male_count`` men, the rest women (at most 10 of each)"""
    players = []
    for i in range(min(male_count, len(MALE_NAMES))):
        players.append(Player(id=f"m{i}", name=MALE_NAMES[i], gender=Gender.MALE))

    female_count = count - male_count
    for i in range(min(female_count, len(FEMALE_NAMES))):
        players.append(Player(id=f"f{i}", name=FEMALE_NAMES[i], gender=Gender.FEMALE))

    return players


def create_example_session() -> Tuple[ShuffleConfig, List[Player]]:
    """Mixed doubles on 3 courts with one extra player of each gender"""
    config = ShuffleConfig(
        game_type=GameType.DOUBLES,
        pairing_mode=PairingMode.MIXED,
        num_rounds=6,
        num_courts=3,
    )
    return config, generate_mock_players(count=14, male_count=7)


def load_session(path: str) -> Tuple[ShuffleConfig, List[Player], Optional[int]]:
    """Read a JSON session file: players plus shuffle settings"""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    players = [Player.from_dict(p) for p in data["players"]]
    config = ShuffleConfig(
        game_type=data["game_type"],
        pairing_mode=data.get("pairing_mode"),
        num_rounds=int(data["num_rounds"]),
        num_courts=int(data["num_courts"]),
        rotation_strategy=data.get("rotation_strategy", "auto"),
    )
    return config, players, data.get("seed")


def serialize_session(
    config: ShuffleConfig, players: List[Player], seed: Optional[int] = None
) -> Dict[str, Any]:
    """Session settings in the format ``load_session`` reads"""
    data = {
        "game_type": config.game_type.value,
        "pairing_mode": config.pairing_mode.value if config.pairing_mode else None,
        "num_rounds": config.num_rounds,
        "num_courts": config.num_courts,
        "rotation_strategy": config.rotation_strategy.value,
        "players": [p.to_dict() for p in players],
    }
    if seed is not None:
        data["seed"] = seed
    return data


def serialize_round(round_: Round) -> Dict[str, Any]:
    courts = []
    for court in round_.courts:
        entry = {
            "id": court.id,
            "court_number": court.court_number,
            "players": court.player_ids,
            "status": court.status.value,
        }
        if court.is_doubles:
            entry["team1"] = [p.id for p in court.team1]
            entry["team2"] = [p.id for p in court.team2]
        courts.append(entry)
    return {
        "id": round_.id,
        "round_number": round_.round_number,
        "courts": courts,
        "sit_outs": [p.id for p in round_.sit_outs],
    }


def export_json(result: ShuffleResult, path: str):
    with open(path, "w", encoding="utf-8") as f:
        json.dump([serialize_round(r) for r in result.rounds], f, indent=2, ensure_ascii=False)


def export_csv(result: ShuffleResult, path: str):
    """One row per court and one row per resting player"""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["round", "court", "side_1", "side_2"])
        for round_ in result.rounds:
            for court in round_.courts:
                left, right = court.sides()
                writer.writerow(
                    [
                        round_.round_number,
                        court.court_number,
                        " & ".join(p.name for p in left),
                        " & ".join(p.name for p in right),
                    ]
                )
            for player in round_.sit_outs:
                writer.writerow([round_.round_number, "sit out", player.name, ""])


def report_validation(
    result: ShuffleResult, players: List[Player], config: ShuffleConfig
) -> bool:
    """Print PASSED/FAILED for every constraint check"""
    checks = [
        (
            "Sit-out fairness",
            ConstraintValidator.validate_sit_out_fairness(
                result.rounds, players, per_gender=config.is_mixed
            ),
        ),
        (
            "Court structure",
            ConstraintValidator.validate_court_structure(result.rounds, config.game_type),
        ),
        (
            "No double booking",
            ConstraintValidator.validate_no_double_booking(result.rounds, players),
        ),
        (
            "Counter symmetry",
            ConstraintValidator.validate_counter_symmetry(result.fairness),
        ),
    ]
    if config.is_mixed:
        checks.append(
            ("Mixed teams", ConstraintValidator.validate_mixed_teams(result.rounds))
        )

    all_valid = True
    for label, (valid, violations) in checks:
        print(f"✅ {label}: {'PASSED' if valid else 'FAILED'}")
        if not valid:
            all_valid = False
            for violation in violations[:3]:
                print(f"   ❌ {violation}")

    print(
        f"\n🎯 Overall validation: {'✅ ALL CONSTRAINTS SATISFIED' if all_valid else '❌ CONSTRAINT VIOLATIONS FOUND'}"
    )
    return all_valid


def main(argv: Optional[List[str]] = None):
    """Main command line interface"""
    parser = argparse.ArgumentParser(description="Dink Shuffle mixer round generator")
    parser.add_argument("--test", action="store_true", help="Run unit tests")
    parser.add_argument(
        "--run-example", action="store_true", help="Shuffle an example mixed doubles session"
    )
    parser.add_argument("--config", type=str, help="JSON session file")
    parser.add_argument("--save-example", type=str, help="Save example session to file")
    parser.add_argument("--export-csv", type=str, help="Export rounds to CSV file")
    parser.add_argument("--export-json", type=str, help="Export rounds to JSON file")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible rounds")
    parser.add_argument("--verbose", action="store_true", help="Log every round")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger("dink_shuffle").setLevel(logging.DEBUG)

    if args.test:
        print("🧪 Running unit tests...")
        run_all_tests()
        return

    if args.save_example:
        config, players = create_example_session()
        with open(args.save_example, "w", encoding="utf-8") as f:
            json.dump(serialize_session(config, players, args.seed), f, indent=2, ensure_ascii=False)
        print(f"📁 Example session saved to {args.save_example}")
        return

    seed = args.seed
    if args.config:
        try:
            config, players, file_seed = load_session(args.config)
        except (OSError, KeyError, TypeError, ValueError) as e:
            print(f"❌ Error loading session: {e}")
            return
        if seed is None:
            seed = file_seed
        print(f"📁 Loaded session from {args.config}")
    elif args.run_example:
        config, players = create_example_session()
        print(f"🎯 Using example session: {len(players)} players, {config.mode_label}")
    else:
        print("❌ Please specify --config, --run-example or --save-example")
        parser.print_help()
        return

    engine = ShuffleEngine(random.Random(seed))
    print(f"\n🚀 Shuffling {config.num_rounds} rounds...")
    result = engine.shuffle(players, config)

    engine.print_shuffle_summary(result, config)

    if not result.success:
        return

    print(f"\n🔍 Validating round constraints...")
    report_validation(result, players, config)

    if args.export_csv:
        export_csv(result, args.export_csv)
        print(f"💾 Rounds exported to {args.export_csv}")
    if args.export_json:
        export_json(result, args.export_json)
        print(f"💾 Rounds exported to {args.export_json}")
