"""
Cartesian enumeration of win/draw/loss for a set of teams, bounded by a ceiling.

Up to `ceiling` teams every combination is produced (3**k). Above it a
deterministic sample of distinct combinations is drawn, or the request is
refused when the sample size is 0.
"""
from __future__ import annotations

import logging
from typing import Sequence

from tournament_engine.scenarios.rng import SeededRNG
from tournament_engine.scenarios.schemas import (
    OUTCOME_ORDER,
    Capped,
    Combination,
    Complete,
    Refused,
)

logger = logging.getLogger(__name__)


def decode_index(index: int, width: int) -> Combination:
    """Combination at position `index` of itertools.product(OUTCOME_ORDER, repeat=width)."""
    digits: list[int] = []
    for _ in range(width):
        index, digit = divmod(index, 3)
        digits.append(digit)
    return tuple(OUTCOME_ORDER[d] for d in reversed(digits))


def enumerate_combinations(
    team_ids: Sequence[str],
    ceiling: int = 10,
    sample_size: int = 2000,
    seed: int | None = 1337,
) -> Complete | Capped | Refused:
    ids = tuple(team_ids)
    total = 3 ** len(ids)
    if len(ids) <= ceiling:
        return Complete(team_ids=ids, total=total)

    if sample_size <= 0:
        logger.warning(
            "Refusing to enumerate %d combinations for %d teams (ceiling %d)",
            total, len(ids), ceiling,
        )
        return Refused(team_ids=ids, total_estimate=total)

    k = min(sample_size, total)
    rng = SeededRNG(seed)
    indices = sorted(rng.sample(range(total), k))
    logger.warning(
        "Capping scenario enumeration: %d teams exceed ceiling %d, sampling %d of %d combinations",
        len(ids), ceiling, k, total,
    )
    return Capped(
        team_ids=ids,
        sample=tuple(decode_index(i, len(ids)) for i in indices),
        total_estimate=total,
    )
