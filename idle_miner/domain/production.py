"""What a player's assets produce before the network and multipliers apply."""

import logging

from idle_miner.domain.catalog import (
    ASSETS,
    CLICK_UPGRADE,
    FEE_SCALE,
    STAKE_FRACTION,
    asset_spec,
    upgrade_spec,
)
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema


def upgrade_capacity_multiplier(player: PlayerSchema) -> float:
    """Product of effect ** level over every owned non-click upgrade."""
    multiplier = 1.0
    for upgrade_type, level in player.upgrades.items():
        if upgrade_type == CLICK_UPGRADE:
            continue
        multiplier *= upgrade_spec(upgrade_type).effect**level
    return multiplier


def capacity(player: PlayerSchema) -> float:
    """Hash rate of the player: base capacity of every asset, times upgrades.

    Click upgrades are left out; they only act on the click reward.
    """
    base = 0.0
    for asset_type, count in player.assets.items():
        base += asset_spec(asset_type).base_capacity * count
    total = base * upgrade_capacity_multiplier(player)
    logging.debug(f"capacity: player={player.player_id} base={base} total={total}")
    return total


def fee_income(player: PlayerSchema, network: NetworkStateSchema) -> float:
    """Transaction fees earned by fee-generating assets from the pending work pool."""
    fees = 0.0
    for asset_type, count in player.assets.items():
        spec = asset_spec(asset_type)
        if spec.fee_rate:
            fees += spec.fee_rate * count * network.pending_work_pool * FEE_SCALE
    return fees


def staking_income(player: PlayerSchema, network: NetworkStateSchema) -> float:
    """Staking reward of the staking-capable asset on a fixed share of the balance.

    The network is accepted for symmetry with the other income sources.
    """
    income = 0.0
    for asset_type, spec in ASSETS.items():
        if not spec.staking_rate:
            continue
        count = player.assets.get(asset_type, 0)
        income += spec.staking_rate * count * player.coins * STAKE_FRACTION
    return income
