import math

import pytest

from idle_miner.domain.errors import (
    InsufficientFundsError,
    InvariantViolation,
    ValidationError,
)
from idle_miner.domain.ledger import credit, debit, purchase_asset, purchase_upgrade


def test_credit_adds_whole_coins_and_carries_fraction(make_player):
    player = credit(make_player(coins=10), 2.75)
    assert player.coins == 12
    assert player.coin_fraction == pytest.approx(0.75)
    assert player.total_earned == 2


@pytest.mark.parametrize("amount", [-1.0, math.nan, math.inf])
def test_credit_rejects_invalid_amounts(make_player, amount):
    with pytest.raises(InvariantViolation):
        credit(make_player(), amount)


def test_debit_rejects_overdraft(make_player):
    player = make_player(coins=5)
    with pytest.raises(InsufficientFundsError) as excinfo:
        debit(player, 6)
    assert excinfo.value.required == 6
    assert excinfo.value.available == 5
    assert player.coins == 5


def test_purchase_asset_charges_current_price(make_player):
    player, cost = purchase_asset(make_player(coins=100), "gpu_miner")
    assert cost == 15
    assert player.coins == 85
    assert player.assets == {"gpu_miner": 1}

    player, cost = purchase_asset(player, "gpu_miner")
    assert cost == 17
    assert player.coins == 68
    assert player.assets == {"gpu_miner": 2}


def test_purchase_asset_without_funds_changes_nothing(make_player):
    player = make_player(coins=14)
    with pytest.raises(InsufficientFundsError):
        purchase_asset(player, "gpu_miner")
    assert player.coins == 14
    assert player.assets == {}


def test_purchase_unknown_asset(make_player):
    with pytest.raises(ValidationError):
        purchase_asset(make_player(coins=10**9), "moon_base")


def test_one_time_upgrade_only_once(make_player):
    player, cost = purchase_upgrade(make_player(coins=20_000), "better_cooling")
    assert cost == 5_000
    assert player.upgrades == {"better_cooling": 1}
    with pytest.raises(ValidationError):
        purchase_upgrade(player, "better_cooling")


def test_repeatable_upgrade_stacks(make_player):
    player, first = purchase_upgrade(make_player(coins=3_000), "faster_internet")
    player, second = purchase_upgrade(player, "faster_internet")
    assert (first, second) == (1_000, 2_000)
    assert player.upgrades == {"faster_internet": 2}
    assert player.coins == 0
