"""Income rate and click reward.

Income is expressed in coins per second. Both paths share the same multiplier
chain: market price, prestige multiplier, prestige bonus and active boosts.
"""

import logging
import math
from dataclasses import dataclass

from idle_miner.domain.boosts import boost_multiplier
from idle_miner.domain.catalog import (
    BASE_CLICK,
    CLICK_UPGRADE,
    HALVING_INTERVAL,
    INITIAL_BLOCK_REWARD,
    PRESTIGE_BONUS_RATE,
    upgrade_spec,
)
from idle_miner.domain.production import capacity, fee_income, staking_income
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema


@dataclass(frozen=True)
class IncomeBreakdown:
    mining: float
    fees: float
    staking: float
    total: float


def block_reward(work_height: int) -> float:
    """Reward of one block after applying the halving schedule."""
    halvings = work_height // HALVING_INTERVAL
    return INITIAL_BLOCK_REWARD / 2**halvings


def player_multiplier(player: PlayerSchema) -> float:
    """income_multiplier * (1 + prestige_points * bonus rate) * boosts."""
    prestige_bonus = 1.0 + player.prestige_points * PRESTIGE_BONUS_RATE
    return player.income_multiplier * prestige_bonus * boost_multiplier(player)


def mining_income(player: PlayerSchema, network: NetworkStateSchema) -> float:
    """Expected block reward share of the player's capacity.

    Returns 0 when the observed network capacity is zero, which is reachable
    on a freshly seeded network.
    """
    if network.observed_capacity <= 0:
        return 0.0
    share = capacity(player) / network.observed_capacity
    return block_reward(network.work_height) * share


def income_breakdown(player: PlayerSchema, network: NetworkStateSchema) -> IncomeBreakdown:
    """Income per second split by source.

    The mining, fees and staking parts are raw; `total` applies the market
    price and the player multiplier to their sum.
    """
    mining = mining_income(player, network)
    fees = fee_income(player, network)
    staking = staking_income(player, network)
    total = (mining + fees + staking) * network.market_price * player_multiplier(player)
    return IncomeBreakdown(mining=mining, fees=fees, staking=staking, total=max(0.0, total))


def income(player: PlayerSchema, network: NetworkStateSchema) -> float:
    """Coins per second the player earns at the current network state.

    Args:
        player (PlayerSchema): Player snapshot
        network (NetworkStateSchema): Shared network snapshot

    Returns:
        float: Non-negative income rate
    """
    breakdown = income_breakdown(player, network)
    logging.debug(
        f"income: player={player.player_id} mining={breakdown.mining} "
        f"fees={breakdown.fees} staking={breakdown.staking} total={breakdown.total}"
    )
    return breakdown.total


def click_power(player: PlayerSchema, network: NetworkStateSchema) -> float:
    """Coins credited for one manual click.

    The base grows with sqrt(global capacity / difficulty). The click upgrade
    applies its full effect per level; production upgrades only contribute
    sqrt(effect) per level so clicks scale sub-linearly with them.
    """
    if network.difficulty <= 0 or network.global_capacity <= 0:
        return 0.0
    power = BASE_CLICK * math.sqrt(network.global_capacity / network.difficulty)
    for upgrade_type, level in player.upgrades.items():
        effect = upgrade_spec(upgrade_type).effect
        if upgrade_type == CLICK_UPGRADE:
            power *= effect**level
        else:
            power *= math.sqrt(effect) ** level
    value = power * player_multiplier(player) * network.market_price
    logging.debug(f"click_power: player={player.player_id} base={power} value={value}")
    return value
