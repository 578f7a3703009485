import asyncio
import math

import numpy as np
import pytest
from uuid6 import uuid7

from idle_miner.domain.errors import (
    InsufficientFundsError,
    PlayerNotFoundError,
    StaleStateError,
)
from idle_miner.services.game import MAX_WRITE_ATTEMPTS, GameService


def make_service(repository, clock, **kwargs):
    return GameService(repository, clock=clock, rng=np.random.default_rng(42), **kwargs)


def set_player(repository, player_id, **fields):
    repository.players[player_id] = repository.players[player_id].model_copy(update=fields)


def test_init_creates_player_once(repository, clock):
    service = make_service(repository, clock)

    first = asyncio.run(service.init("tg-1", "alice"))
    second = asyncio.run(service.init("tg-1"))

    assert first.player_id == second.player_id
    assert first.username == "alice"
    assert second.username == "alice"
    assert first.coins == "0"
    assert first.rank == "Novice Miner"
    assert len(repository.players) == 1


def test_init_refreshes_username(repository, clock):
    service = make_service(repository, clock)
    asyncio.run(service.init("tg-1", "alice"))
    view = asyncio.run(service.init("tg-1", "alice2"))
    assert view.username == "alice2"


def test_sync_credits_offline_income(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    set_player(repository, view.player_id, assets={"gpu_miner": 10})

    clock.advance(3600)
    synced = asyncio.run(service.sync(view.player_id))

    assert synced.coins == "1800"
    assert synced.offline_earnings == "1800"
    assert synced.income_per_second == pytest.approx(0.5)
    assert "earned_1000" in synced.new_achievements
    assert repository.players[view.player_id].last_income_tick_at == clock.now


def test_purchase_asset(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    set_player(repository, view.player_id, coins=100)

    bought = asyncio.run(service.purchase_asset(view.player_id, "gpu_miner"))

    gpu = next(asset for asset in bought.assets if asset.asset_type == "gpu_miner")
    assert bought.coins == "85"
    assert gpu.count == 1
    assert gpu.cost == "17"
    assert repository.players[view.player_id].assets == {"gpu_miner": 1}


def test_purchase_without_funds_writes_nothing(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    saves = repository.saves

    with pytest.raises(InsufficientFundsError):
        asyncio.run(service.purchase_upgrade(view.player_id, "quantum_mining"))

    assert repository.saves == saves
    assert repository.players[view.player_id].upgrades == {}


def test_click_credits_click_power(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))

    clicked = asyncio.run(service.click(view.player_id))

    stored = repository.players[view.player_id]
    assert clicked.coins == "0"
    assert stored.coin_fraction == pytest.approx(0.001 * math.sqrt(1000.0))


def test_prestige_through_service(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    set_player(repository, view.player_id, coins=15_000_000, assets={"gpu_miner": 3})

    reset = asyncio.run(service.prestige(view.player_id))

    assert reset.coins == "0"
    assert reset.prestige_points == 1
    assert reset.income_multiplier == pytest.approx(1.1)
    assert "prestige_1" in reset.new_achievements
    assert all(asset.count == 0 for asset in reset.assets)


def test_prestige_not_eligible(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    with pytest.raises(InsufficientFundsError):
        asyncio.run(service.prestige(view.player_id))


def test_expired_boosts_are_swept_before_income(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    boosted = asyncio.run(service.grant_boost(view.player_id, 2.0, 60))
    assert len(boosted.boosts) == 1

    clock.advance(61)
    synced = asyncio.run(service.sync(view.player_id))
    assert synced.boosts == []


def test_unknown_player(repository, clock):
    service = make_service(repository, clock)
    with pytest.raises(PlayerNotFoundError):
        asyncio.run(service.sync(uuid7()))


def test_lost_write_is_retried(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    set_player(repository, view.player_id, coins=100)

    original_save = repository.save_player
    calls = []

    async def racing_save(player):
        calls.append(player)
        if len(calls) == 1:
            # Another request bought something in between.
            set_player(repository, view.player_id, version=player.version + 1)
        return await original_save(player)

    repository.save_player = racing_save
    bought = asyncio.run(service.purchase_asset(view.player_id, "gpu_miner"))

    assert len(calls) == 2
    assert bought.coins == "85"


def test_gives_up_after_max_attempts(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))

    async def always_stale(player):
        raise StaleStateError("stale")

    repository.save_player = always_stale
    with pytest.raises(StaleStateError):
        asyncio.run(service.sync(view.player_id))
    assert MAX_WRITE_ATTEMPTS == 3


def test_step_network_advances_and_notifies(repository, clock):
    published = []

    async def listener(network):
        published.append(network)

    service = make_service(repository, clock, on_network_step=listener)

    first = asyncio.run(service.step_network())
    clock.advance(600)
    second = asyncio.run(service.step_network())

    assert (first.work_height, second.work_height) == (1, 2)
    assert [network.work_height for network in published] == [1, 2]
    assert repository.network.version == 2
    assert service.sync_manager.steps_applied == 2


def test_concurrent_steps_are_serialized(repository, clock):
    service = make_service(repository, clock)

    async def step_many():
        return await asyncio.gather(*(service.step_network() for _ in range(5)))

    views = asyncio.run(step_many())

    assert sorted(view.work_height for view in views) == [1, 2, 3, 4, 5]
    assert repository.network.work_height == 5


def test_stale_network_step_is_rejected(repository, clock):
    service = make_service(repository, clock)
    original_load = repository.load_network_state

    async def stale_load():
        network = await original_load()
        return network.model_copy(update={"version": network.version - 1})

    repository.load_network_state = stale_load
    with pytest.raises(StaleStateError):
        asyncio.run(service.step_network())
    assert repository.network.work_height == 0


def test_remove_expired_boosts(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    asyncio.run(service.grant_boost(view.player_id, 2.0, 30))
    clock.advance(31)
    assert asyncio.run(service.remove_expired_boosts()) == 1


def test_click_right_after_sync_reports_no_offline_earnings(repository, clock):
    service = make_service(repository, clock)
    view = asyncio.run(service.init("tg-1"))
    set_player(repository, view.player_id, assets={"gpu_miner": 10})

    clock.advance(3600)
    synced = asyncio.run(service.sync(view.player_id))
    clicked = asyncio.run(service.click(view.player_id))

    assert synced.offline_earnings == "1800"
    assert clicked.offline_earnings == "0"
