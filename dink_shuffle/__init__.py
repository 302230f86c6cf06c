"""Fair multi-round court assignment for racquet-sport mixers."""

from dink_shuffle.fairness import FairnessState, PairCounter
from dink_shuffle.models import (
    Court,
    CourtStatus,
    GameType,
    Gender,
    PairingMode,
    Player,
    RotationStrategy,
    Round,
    ShuffleConfig,
    ShuffleError,
    ShuffleErrorCode,
    ShuffleResult,
)
from dink_shuffle.scheduling import ShuffleEngine, shuffle

__version__ = "0.1.0"
