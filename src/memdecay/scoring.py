"""Time-weighted scoring.

final_score = semantic_score + (1 - decay_rate) ** hours_passed + bonus

hours_passed is measured from the document's last access, so documents that
keep being retrieved stay fresh while neglected ones decay toward their
semantic score alone.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from memdecay.exceptions import InvalidConfiguration


def hours_passed(now: datetime, last_accessed_at: datetime) -> float:
    """Hours between last access and now, never negative."""
    return max(0.0, (now - last_accessed_at).total_seconds() / 3600)


def decay_term(decay_rate: float, hours: float) -> float:
    """
    Recency weight in [0, 1].

    Zero elapsed time always yields 1.0, including decay_rate == 1 (0 ** 0 is
    taken as 1). decay_rate == 0 never decays; decay_rate == 1 forgets as soon
    as any time has passed.
    """
    if hours <= 0.0:
        return 1.0
    if decay_rate <= 0.0:
        return 1.0
    if decay_rate >= 1.0:
        return 0.0
    return (1.0 - decay_rate) ** hours


def metadata_bonus(metadata: Mapping[str, Any], other_score_keys: Sequence[str], default_salience: float) -> float:
    """Sum the numeric metadata values named by other_score_keys."""
    bonus = 0.0
    for key in other_score_keys:
        value = metadata.get(key, default_salience)
        if value is None:
            value = default_salience
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidConfiguration(f"Metadata key {key!r} must hold a finite number to be used as a score, got {value!r}")
        bonus += value
    return bonus


def combined_score(semantic_score: float, decay: float, bonus: float) -> float:
    return semantic_score + decay + bonus
