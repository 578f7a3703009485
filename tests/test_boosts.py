from datetime import timedelta

import pytest

from idle_miner.domain.boosts import boost_multiplier, grant_boost, sweep_expired
from idle_miner.domain.errors import ValidationError


def test_grant_boost_sets_expiry(make_player, now):
    player = grant_boost(make_player(), 2.0, 3600, now)
    assert len(player.boosts) == 1
    assert player.boosts[0].expires_at == now + timedelta(hours=1)


def test_boost_multipliers_stack(make_player, now):
    player = grant_boost(make_player(), 2.0, 60, now)
    player = grant_boost(player, 1.5, 120, now)
    assert boost_multiplier(player) == pytest.approx(3.0)
    assert boost_multiplier(make_player()) == 1.0


def test_sweep_drops_expired_boosts(make_player, now):
    player = grant_boost(make_player(), 2.0, 60, now)
    player = grant_boost(player, 3.0, 120, now)

    swept = sweep_expired(player, now + timedelta(seconds=60))

    assert [boost.multiplier for boost in swept.boosts] == [3.0]


def test_sweep_without_expired_boosts_returns_same_player(make_player, now):
    player = grant_boost(make_player(), 2.0, 60, now)
    assert sweep_expired(player, now) is player


@pytest.mark.parametrize("multiplier, duration", [(0.0, 60), (-1.0, 60), (2.0, 0)])
def test_invalid_boosts_are_rejected(make_player, now, multiplier, duration):
    with pytest.raises(ValidationError):
        grant_boost(make_player(), multiplier, duration, now)
