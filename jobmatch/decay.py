"""Time decay and engagement bonuses for implicit-feedback events.

Recent behavior should count more than old behavior. An event's weight decays
exponentially with its age::

    weight = base_weight * exp(-lambda * age_in_days)

With ``lambda = 0.05`` an event loses half its weight after about two weeks.
Scroll depth and dwell time on a detail page add a small bonus on top of the
action's base score before decay is applied.
"""
from __future__ import annotations

import math
import time

from jobmatch.models import ACTION_SCORES, BehaviorEvent

SECONDS_PER_DAY = 60 * 60 * 24
DEFAULT_LAMBDA = 0.05

RECOMMENDED_LAMBDA: dict[str, float] = {
    "very_slow": 0.01,  # ~70 days to half weight
    "slow": 0.03,
    "moderate": 0.05,  # ~14 days
    "fast": 0.1,  # ~7 days
    "very_fast": 0.2,
}

# (threshold, bonus) pairs, highest threshold first
SCROLL_DEPTH_BONUS: list[tuple[float, float]] = [(100, 1.0), (75, 0.75), (50, 0.5)]
DWELL_TIME_BONUS: list[tuple[float, float]] = [(120, 1.5), (60, 1.0), (30, 0.5)]


def time_decay(base_weight: float, lam: float, days: float) -> float:
    if days < 0:
        raise ValueError("Elapsed time must be non-negative")
    return base_weight * math.exp(-lam * days)


def decay_from_timestamp(
    base_weight: float,
    event_ts: float,
    now: float | None = None,
    lam: float = DEFAULT_LAMBDA,
) -> float:
    """Decay by the age of an epoch-seconds timestamp; future events count as new."""
    now = time.time() if now is None else now
    days = max(0.0, now - event_ts) / SECONDS_PER_DAY
    return time_decay(base_weight, lam, days)


def _tier_bonus(value: float, tiers: list[tuple[float, float]]) -> float:
    for threshold, bonus in tiers:
        if value >= threshold:
            return bonus
    return 0.0


def scroll_depth_weight(percentage: float) -> float:
    return _tier_bonus(percentage, SCROLL_DEPTH_BONUS)


def dwell_time_weight(seconds: float) -> float:
    return _tier_bonus(seconds, DWELL_TIME_BONUS)


def behavior_score(
    event: BehaviorEvent,
    now: float | None = None,
    lam: float = DEFAULT_LAMBDA,
) -> float:
    base = float(ACTION_SCORES.get(event.action, event.score))
    if event.scroll_depth is not None:
        base += scroll_depth_weight(event.scroll_depth)
    if event.dwell_time is not None:
        base += dwell_time_weight(event.dwell_time)
    return decay_from_timestamp(base, event.timestamp, now, lam)


def lambda_for_target(target_days: float, target_ratio: float = 0.5) -> float:
    """Lambda under which a weight falls to *target_ratio* after *target_days*."""
    if not 0 < target_ratio < 1:
        raise ValueError("target_ratio must be between 0 and 1")
    if target_days <= 0:
        raise ValueError("target_days must be positive")
    return -math.log(target_ratio) / target_days


def resolve_lambda(
    value: float | str | None = None, half_life_days: float | None = None
) -> float | None:
    """Decay rate from settings: a number, a preset name, or a half-life in days.

    Returns None when decay is switched off.
    """
    if isinstance(value, str):
        try:
            return RECOMMENDED_LAMBDA[value]
        except KeyError:
            raise ValueError(
                f"Unknown decay preset {value!r}; choose one of {', '.join(RECOMMENDED_LAMBDA)}"
            ) from None
    if value is not None:
        if value < 0:
            raise ValueError("decay_lambda must be non-negative")
        return float(value)
    if half_life_days is not None:
        return lambda_for_target(half_life_days)
    return None
