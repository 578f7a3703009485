"""Balance changes: credits, debits and purchases.

Coins are whole integers. Fractional income is carried in `coin_fraction`
until it adds up to a whole coin.
"""

import logging
import math

from idle_miner.domain.catalog import asset_spec, upgrade_spec
from idle_miner.domain.cost_model import asset_cost, upgrade_cost
from idle_miner.domain.errors import (
    InsufficientFundsError,
    InvariantViolation,
    ValidationError,
)
from idle_miner.models.schema_models import PlayerSchema


def credit(player: PlayerSchema, amount: float) -> PlayerSchema:
    """Add earnings to the balance and the lifetime total.

    Args:
        player (PlayerSchema): Player to credit
        amount (float): Non-negative amount of coins, may be fractional

    Raises:
        InvariantViolation: amount is negative or not a finite number

    Returns:
        PlayerSchema: Credited copy of the player
    """
    if not math.isfinite(amount) or amount < 0:
        raise InvariantViolation(f"Cannot credit {amount} coins")
    carried = player.coin_fraction + amount
    whole = math.floor(carried)
    return player.model_copy(
        update={
            "coins": player.coins + whole,
            "coin_fraction": carried - whole,
            "total_earned": player.total_earned + whole,
        }
    )


def debit(player: PlayerSchema, cost: int) -> PlayerSchema:
    """Remove `cost` coins, rejecting the change if the balance is short."""
    if cost < 0:
        raise InvariantViolation(f"Cannot debit a negative cost: {cost}")
    if player.coins < cost:
        raise InsufficientFundsError(cost, player.coins)
    return player.model_copy(update={"coins": player.coins - cost})


def purchase_asset(player: PlayerSchema, asset_type: str) -> tuple[PlayerSchema, int]:
    """Buy one unit of an asset at its current price.

    Returns:
        tuple[PlayerSchema, int]: Updated player and the price paid
    """
    asset_spec(asset_type)
    owned = player.assets.get(asset_type, 0)
    cost = asset_cost(asset_type, owned)
    paid = debit(player, cost)
    assets = dict(paid.assets)
    assets[asset_type] = owned + 1
    logging.debug(f"purchase_asset: {player.player_id} {asset_type} #{owned + 1} for {cost}")
    return paid.model_copy(update={"assets": assets}), cost


def purchase_upgrade(player: PlayerSchema, upgrade_type: str) -> tuple[PlayerSchema, int]:
    """Buy the next level of an upgrade.

    Raises:
        ValidationError: the upgrade is one-time and already owned
        InsufficientFundsError: the balance does not cover the price
    """
    spec = upgrade_spec(upgrade_type)
    level = player.upgrades.get(upgrade_type, 0)
    if not spec.repeatable and level > 0:
        raise ValidationError(f"Upgrade {upgrade_type!r} is already owned")
    cost = upgrade_cost(upgrade_type, level)
    paid = debit(player, cost)
    upgrades = dict(paid.upgrades)
    upgrades[upgrade_type] = level + 1
    logging.debug(f"purchase_upgrade: {player.player_id} {upgrade_type} L{level + 1} for {cost}")
    return paid.model_copy(update={"upgrades": upgrades}), cost
