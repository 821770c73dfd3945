"""Closed-form shiny odds estimates for a hunt configuration."""

from __future__ import annotations

from shinyhunt.backend.models import HuntMethod, HuntSettings, OddsResult

BASE_RATE_DENOMINATOR = 4096
MISS_PROBABILITY = (BASE_RATE_DENOMINATOR - 1) / BASE_RATE_DENOMINATOR

SHINY_CHARM_ROLLS = 2
SPARKLING_POWER_ROLLS = 3
# Highest threshold first; only the first match applies.
OUTBREAK_ROLL_THRESHOLDS: tuple[tuple[int, int], ...] = ((60, 2), (30, 1))

MASUDA_ONE_IN = 683
MASUDA_WITH_CHARM_ONE_IN = 512


def estimate(settings: HuntSettings) -> OddsResult:
    """Estimate the per-attempt odds for ``settings``."""
    if settings.method == HuntMethod.MASUDA:
        return _estimate_masuda(settings)
    return _estimate_rolls(settings)


def count_rolls(settings: HuntSettings) -> int:
    rolls = 1
    if settings.shiny_charm_active:
        rolls += SHINY_CHARM_ROLLS
    if settings.sparkling_power_active:
        rolls += SPARKLING_POWER_ROLLS
    if settings.method == HuntMethod.OUTBREAK:
        rolls += _outbreak_bonus(settings.outbreak_defeat_count)
    return rolls


def probability_for_rolls(rolls: int) -> float:
    """Chance that at least one of ``rolls`` independent 1/4096 draws hits."""
    return 1.0 - MISS_PROBABILITY**rolls


def chance_within(probability: float, attempts: int) -> float:
    """Cumulative chance of at least one success within ``attempts`` tries."""
    if attempts <= 0:
        return 0.0
    return 1.0 - (1.0 - probability) ** attempts


def _outbreak_bonus(defeat_count: int) -> int:
    for threshold, bonus in OUTBREAK_ROLL_THRESHOLDS:
        if defeat_count >= threshold:
            return bonus
    return 0


def _estimate_masuda(settings: HuntSettings) -> OddsResult:
    if settings.shiny_charm_active:
        one_in = MASUDA_WITH_CHARM_ONE_IN
        explanation = f"Masuda method with Shiny Charm: about 1/{one_in}."
    else:
        one_in = MASUDA_ONE_IN
        explanation = f"Masuda method without Shiny Charm: about 1/{one_in}."
    return OddsResult(
        one_in=float(one_in),
        probability=1.0 / one_in,
        expected_attempts=float(one_in),
        explanation=explanation,
    )


def _estimate_rolls(settings: HuntSettings) -> OddsResult:
    rolls = count_rolls(settings)
    probability = probability_for_rolls(rolls)
    one_in = 1.0 / probability
    return OddsResult(
        one_in=one_in,
        probability=probability,
        expected_attempts=one_in,
        explanation=(
            f"{rolls} roll(s) against 1/{BASE_RATE_DENOMINATOR}. "
            f"Approximation: 1 - ({BASE_RATE_DENOMINATOR - 1}/{BASE_RATE_DENOMINATOR})^{rolls}, "
            "not an exact simulation of the game."
        ),
        rolls=rolls,
    )
