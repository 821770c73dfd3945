import pytest

from shinyhunt.backend.engine import chance_within, count_rolls, estimate, probability_for_rolls
from shinyhunt.backend.models import HuntMethod, HuntSettings


def test_probability_for_rolls_strictly_increases_within_unit_interval() -> None:
    probabilities = [probability_for_rolls(rolls) for rolls in range(1, 9)]

    assert all(0.0 < value < 1.0 for value in probabilities)
    assert all(lower < higher for lower, higher in zip(probabilities, probabilities[1:]))


def test_masuda_uses_fixed_lookup_constants() -> None:
    with_charm = estimate(HuntSettings(method=HuntMethod.MASUDA, shiny_charm_active=True))
    without_charm = estimate(HuntSettings(method=HuntMethod.MASUDA, shiny_charm_active=False))

    assert with_charm.one_in == 512
    assert with_charm.probability == pytest.approx(1 / 512)
    assert with_charm.expected_attempts == 512
    assert with_charm.rolls is None
    assert without_charm.one_in == 683
    assert without_charm.expected_attempts == 683


def test_masuda_ignores_sparkling_power_and_outbreak_defeats() -> None:
    plain = estimate(HuntSettings(method=HuntMethod.MASUDA))
    boosted = estimate(
        HuntSettings(method=HuntMethod.MASUDA, sparkling_power_active=True, outbreak_defeat_count=60)
    )

    assert plain == boosted


def test_wild_without_bonuses_is_base_rate() -> None:
    result = estimate(HuntSettings(method=HuntMethod.WILD))

    assert result.rolls == 1
    assert result.one_in == pytest.approx(4096)
    assert result.expected_attempts == result.one_in
    assert "approximation" in result.explanation.lower()


def test_wild_with_charm_and_sparkling_power_uses_six_rolls() -> None:
    settings = HuntSettings(method=HuntMethod.WILD, shiny_charm_active=True, sparkling_power_active=True)

    result = estimate(settings)

    assert count_rolls(settings) == 6
    assert result.rolls == 6
    assert result.probability == pytest.approx(1 - (4095 / 4096) ** 6)
    assert result.one_in == pytest.approx(1 / result.probability)


def test_wild_ignores_outbreak_defeat_count() -> None:
    assert count_rolls(HuntSettings(method=HuntMethod.WILD, outbreak_defeat_count=60)) == 1


def test_sparkling_power_applies_to_outbreaks() -> None:
    assert count_rolls(HuntSettings(method=HuntMethod.OUTBREAK, sparkling_power_active=True)) == 4


@pytest.mark.parametrize(
    "defeats, expected_rolls",
    [
        (0, 1),
        (29, 1),
        (30, 2),
        (59, 2),
        (60, 3),
        (90, 3),
    ],
)
def test_outbreak_defeat_thresholds(defeats: int, expected_rolls: int) -> None:
    settings = HuntSettings(method=HuntMethod.OUTBREAK, outbreak_defeat_count=defeats)

    assert count_rolls(settings) == expected_rolls
    assert estimate(settings).rolls == expected_rolls


def test_outbreak_thresholds_order_probabilities() -> None:
    def probability(defeats: int) -> float:
        return estimate(HuntSettings(method=HuntMethod.OUTBREAK, outbreak_defeat_count=defeats)).probability

    assert probability(30) == probability(59)
    assert probability(30) > probability(29)
    assert probability(60) == probability(90)
    assert probability(60) > probability(59)


def test_all_bonuses_give_eight_rolls() -> None:
    settings = HuntSettings(
        method=HuntMethod.OUTBREAK,
        shiny_charm_active=True,
        sparkling_power_active=True,
        outbreak_defeat_count=60,
    )

    assert count_rolls(settings) == 8


def test_chance_within_accumulates_attempts() -> None:
    probability = 1 / 4096

    assert chance_within(probability, 0) == 0.0
    assert chance_within(probability, -3) == 0.0
    assert chance_within(probability, 1) == pytest.approx(probability)
    assert chance_within(probability, 4096) == pytest.approx(1 - (4095 / 4096) ** 4096)
    assert chance_within(probability, 100) < chance_within(probability, 200)
