"""
Progression Formulas

Pure calculation functions for the leveling curve and quest progress.

- Pure functions only (no side effects)
- No database or config access; callers pass tunables in
- Deterministic and testable

Usage
-----
    from hunter.modules.progression.formulas import experience_threshold

    threshold = experience_threshold(2)  # 300
"""

from __future__ import annotations

from typing import List, Tuple

from hunter.core.exceptions import ConfigurationError

DEFAULT_THRESHOLD_BASE = 100
DEFAULT_THRESHOLD_PER_LEVEL = 100


def experience_threshold(
    level: int,
    base: int = DEFAULT_THRESHOLD_BASE,
    per_level: int = DEFAULT_THRESHOLD_PER_LEVEL,
) -> int:
    """
    Level experience required to advance out of ``level``.

    Formula: ``base + per_level * level``. The threshold for level 1 at
    account creation is seeded separately (100 by default).

    Example:
        >>> experience_threshold(2)
        300
        >>> experience_threshold(3)
        400
    """
    return base + per_level * level


def resolve_level_ups(
    level: int,
    level_experience: int,
    experience_to_next_level: int,
    base: int = DEFAULT_THRESHOLD_BASE,
    per_level: int = DEFAULT_THRESHOLD_PER_LEVEL,
) -> Tuple[int, int, int, List[Tuple[int, int]]]:
    """
    Apply level-ups until ``level_experience < experience_to_next_level``.

    Each step increments the level, subtracts the old threshold (excess
    experience carries over) and recomputes the threshold for the new level.

    Returns:
        ``(level, level_experience, experience_to_next_level, steps)`` where
        ``steps`` lists ``(new_level, consumed_threshold)`` per level gained.

    Example:
        >>> resolve_level_ups(1, 250, 100)
        (2, 150, 300, [(2, 100)])
        >>> resolve_level_ups(1, 400, 100)
        (3, 0, 400, [(2, 100), (3, 300)])
    """
    if experience_to_next_level <= 0:
        raise ConfigurationError(
            "progression.initial_experience_to_next_level",
            f"experience_to_next_level must be positive, got {experience_to_next_level}",
        )

    steps: List[Tuple[int, int]] = []
    while level_experience >= experience_to_next_level:
        consumed = experience_to_next_level
        level += 1
        level_experience -= consumed
        experience_to_next_level = experience_threshold(level, base, per_level)
        if experience_to_next_level <= 0:
            raise ConfigurationError(
                "progression.threshold_base",
                f"threshold for level {level} must be positive, got {experience_to_next_level}",
            )
        steps.append((level, consumed))

    return level, level_experience, experience_to_next_level, steps


def clamp_progress(current: int, delta: int, required: int) -> int:
    """
    Advance objective progress without overshooting ``required``.

    Example:
        >>> clamp_progress(2, 5, 3)
        3
    """
    return min(current + delta, required)
