"""Sit-out selection keeping rest counts within one of each other."""

import logging
import random
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from dink_shuffle.fairness import FairnessState
from dink_shuffle.models import Player

logger = logging.getLogger(__name__)


class SitOutSelector:
    """Choose who plays and who rests in a round"""

    def __init__(self, fairness: FairnessState, rng: random.Random):
        self.fairness = fairness
        self.rng = rng

    def select(
        self, pool: Sequence[Player], slots: int
    ) -> Tuple[List[Player], List[Player]]:
        """Split the pool into (active, sit_outs) and count the sit-outs.

        Players who have rested more are picked first; ties are shuffled.
        Both returned lists keep the roster order of ``pool``.
        """
        if len(pool) <= slots:
            return list(pool), []

        groups: Dict[int, List[Player]] = defaultdict(list)
        for player in pool:
            groups[self.fairness.sit_out_count(player.id)].append(player)

        chosen = set()
        for count in sorted(groups, reverse=True):
            group = groups[count][:]
            self.rng.shuffle(group)
            for player in group:
                if len(chosen) == slots:
                    break
                chosen.add(player.id)
            if len(chosen) == slots:
                break

        active = [p for p in pool if p.id in chosen]
        sit_outs = [p for p in pool if p.id not in chosen]
        for player in sit_outs:
            self.fairness.record_sit_out(player.id)

        logger.debug(
            f"Selected {len(active)} active, {len(sit_outs)} resting: "
            f"{', '.join(p.name for p in sit_outs)}"
        )
        return active, sit_outs
