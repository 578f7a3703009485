import pytest

from idle_miner.domain.errors import InsufficientFundsError
from idle_miner.domain.prestige import (
    can_prestige,
    multiplier_for,
    prestige,
    prestige_points_for,
)


def test_can_prestige_at_threshold(make_player):
    assert not can_prestige(make_player(coins=999_999))
    assert can_prestige(make_player(coins=1_000_000))


@pytest.mark.parametrize(
    "coins, points",
    [
        (0, 0),
        (999_999, 0),
        (1_000_000, 0),
        (5_000_000, 0),
        (9_999_999, 0),
        (10_000_000, 1),
        (15_000_000, 1),
        (1_000_000_000, 3),
        (10**30, 24),
    ],
)
def test_prestige_points_for(coins, points):
    assert prestige_points_for(coins) == points


def test_prestige_resets_progress_and_adds_points(make_player):
    player = make_player(
        coins=15_000_000,
        coin_fraction=0.4,
        total_earned=20_000_000,
        assets={"gpu_miner": 40},
        upgrades={"better_cooling": 1},
        achievements=["gpu_miner_10"],
        prestige_points=2,
        income_multiplier=1.2,
    )

    reset = prestige(player)

    assert reset.prestige_points == 3
    assert reset.income_multiplier == pytest.approx(1.3)
    assert reset.coins == 0
    assert reset.coin_fraction == 0.0
    assert reset.assets == {}
    assert reset.upgrades == {}
    assert reset.achievements == ["gpu_miner_10"]
    assert reset.total_earned == 20_000_000
    assert reset.player_id == player.player_id


def test_prestige_when_not_eligible_is_an_error(make_player):
    player = make_player(coins=10)
    with pytest.raises(InsufficientFundsError):
        prestige(player)


def test_prestige_never_lowers_multiplier(make_player):
    player = make_player(coins=2_000_000, income_multiplier=2.0)
    reset = prestige(player)
    assert reset.prestige_points == 0
    assert reset.income_multiplier == 2.0


def test_multiplier_for():
    assert multiplier_for(0) == 1.0
    assert multiplier_for(5) == pytest.approx(1.5)
