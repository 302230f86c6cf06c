"""Data models for mixer round shuffling."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Gender(str, Enum):
    """Closed set of player genders used by the mixed pairing mode"""

    MALE = "male"
    FEMALE = "female"

    @classmethod
    def parse(cls, value: Any) -> "Gender":
        """Normalize a free-form gender value, rejecting anything unknown"""
        if isinstance(value, Gender):
            return value
        normalized = str(value).strip().lower()
        aliases = {"m": "male", "f": "female"}
        normalized = aliases.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown gender: {value!r}") from None


class GameType(str, Enum):
    SINGLES = "singles"
    DOUBLES = "doubles"


class PairingMode(str, Enum):
    RANDOM = "random"
    MIXED = "mixed"


class CourtStatus(str, Enum):
    PENDING = "pending"
    PLAYING = "playing"
    COMPLETED = "completed"


class RotationStrategy(str, Enum):
    AUTO = "auto"  # exhaustive up to the limit, greedy above it
    SOLVER = "solver"  # OR-Tools CP-SAT at any size


class ShuffleErrorCode(str, Enum):
    EMPTY_ROSTER = "empty_roster"
    INSUFFICIENT_PLAYERS = "insufficient_players"
    INSUFFICIENT_GENDER_BALANCE = "insufficient_gender_balance"
    DUPLICATE_PLAYER = "duplicate_player"


@dataclass(frozen=True, eq=False)
class Player:
    """A roster entry; identity is the id"""

    id: str
    name: str
    gender: Gender

    def __post_init__(self):
        # frozen dataclass, so normalize through object.__setattr__
        object.__setattr__(self, "id", str(self.id))
        object.__setattr__(self, "gender", Gender.parse(self.gender))

    def __eq__(self, other):
        if not isinstance(other, Player):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(id=data["id"], name=data["name"], gender=data["gender"])

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name, "gender": self.gender.value}

    def __str__(self):
        return self.name


@dataclass
class Score:
    """Score of a court; written by score entry, never by the shuffle"""

    team1: Optional[int] = None
    team2: Optional[int] = None
    last_updated_by: Optional[str] = None
    last_updated_at: Optional[datetime] = None

    @property
    def is_set(self) -> bool:
        return self.team1 is not None and self.team2 is not None


@dataclass
class Court:
    """One court of a round: 2 players for singles, 2 teams of 2 for doubles"""

    id: str
    court_number: int
    players: List[Player]
    team1: Optional[Tuple[Player, Player]] = None
    team2: Optional[Tuple[Player, Player]] = None
    status: CourtStatus = CourtStatus.PENDING
    score: Score = field(default_factory=Score)

    @property
    def is_doubles(self) -> bool:
        return self.team1 is not None

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    def sides(self) -> Tuple[Tuple[Player, ...], Tuple[Player, ...]]:
        """The two facing sides: teams for doubles, single players for singles"""
        if self.is_doubles:
            return self.team1, self.team2
        return (self.players[0],), (self.players[1],)

    def advance_status(self) -> CourtStatus:
        """Cycle pending -> playing -> completed -> pending"""
        order = [CourtStatus.PENDING, CourtStatus.PLAYING, CourtStatus.COMPLETED]
        self.status = order[(order.index(self.status) + 1) % len(order)]
        return self.status

    def record_score(
        self, team1: int, team2: int, updated_by: Optional[str] = None
    ) -> Score:
        """Store a score entry and mark the court completed"""
        if team1 < 0 or team2 < 0:
            raise ValueError("Scores must be non-negative")
        self.score = Score(
            team1=team1,
            team2=team2,
            last_updated_by=updated_by,
            last_updated_at=datetime.now(timezone.utc),
        )
        self.status = CourtStatus.COMPLETED
        return self.score

    def __str__(self):
        left, right = self.sides()
        left_str = " & ".join(p.name for p in left)
        right_str = " & ".join(p.name for p in right)
        return f"Court {self.court_number}: {left_str} vs {right_str}"


@dataclass
class Round:
    """A round of play: its courts plus the players resting"""

    id: str
    round_number: int
    courts: List[Court]
    sit_outs: List[Player] = field(default_factory=list)

    def active_players(self) -> List[Player]:
        return [p for court in self.courts for p in court.players]

    def court_by_number(self, court_number: int) -> Optional[Court]:
        for court in self.courts:
            if court.court_number == court_number:
                return court
        return None


@dataclass
class ShuffleConfig:
    """Shuffle configuration parameters"""

    game_type: GameType
    num_rounds: int
    num_courts: int
    pairing_mode: Optional[PairingMode] = None
    rotation_strategy: RotationStrategy = RotationStrategy.AUTO
    max_sweeps: int = 50  # bound on swap-improvement passes
    exhaustive_rotation_limit: int = 8  # 8! = 40,320 arrangements

    def __post_init__(self):
        """Validate configuration after initialization"""
        self.game_type = GameType(self.game_type)
        if self.game_type == GameType.SINGLES:
            self.pairing_mode = None
        elif self.pairing_mode is None:
            self.pairing_mode = PairingMode.RANDOM
        else:
            self.pairing_mode = PairingMode(self.pairing_mode)
        self.rotation_strategy = RotationStrategy(self.rotation_strategy)

        if self.num_rounds < 1:
            raise ValueError("Number of rounds must be at least 1")
        if self.num_courts < 1:
            raise ValueError("Number of courts must be at least 1")
        if self.max_sweeps < 0:
            raise ValueError("Max sweeps cannot be negative")
        if self.exhaustive_rotation_limit < 1:
            raise ValueError("Exhaustive rotation limit must be positive")

    @property
    def players_per_court(self) -> int:
        return 2 if self.game_type == GameType.SINGLES else 4

    @property
    def is_mixed(self) -> bool:
        return self.pairing_mode == PairingMode.MIXED

    @property
    def mode_label(self) -> str:
        if self.game_type == GameType.SINGLES:
            return "singles"
        return f"{self.pairing_mode.value} doubles"


@dataclass(frozen=True)
class ShuffleError:
    """Input validation failure returned by the shuffle"""

    code: ShuffleErrorCode
    message: str

    def __str__(self):
        return self.message


class RosterValidationError(ValueError):
    """Raised inside the engine when the roster cannot be shuffled"""

    def __init__(self, code: ShuffleErrorCode, message: str):
        super().__init__(message)
        self.code = code

    def to_error(self) -> ShuffleError:
        return ShuffleError(code=self.code, message=str(self))


@dataclass
class ShuffleResult:
    """Result of a shuffle: every requested round, or none plus an error"""

    success: bool
    rounds: List[Round]
    generation_time: float  # seconds
    error: Optional[ShuffleError] = None
    fairness: Any = None  # FairnessState the rounds were built with
    warnings: List[str] = field(default_factory=list)

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None
