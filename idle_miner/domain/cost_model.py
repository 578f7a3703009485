"""Purchase prices of assets and upgrades.

Prices are whole coins. Nothing here mutates a player; affordability is the
caller's `coins >= cost` check (see `ledger`).
"""

import logging
import math

from idle_miner.domain.catalog import (
    ASSET_GROWTH_FACTOR,
    REPEATABLE_UPGRADE_GROWTH,
    asset_spec,
    upgrade_spec,
)
from idle_miner.domain.errors import ValidationError


def _check_count(owned_count: int) -> None:
    if owned_count < 0:
        raise ValidationError(f"Owned count must not be negative: {owned_count}")


def asset_cost(asset_type: str, owned_count: int) -> int:
    """Price of the next unit of an asset.

    Args:
        asset_type (str): Asset identifier from the catalog
        owned_count (int): Units the player already owns

    Returns:
        int: floor(base_cost * 1.15 ** owned_count)
    """
    _check_count(owned_count)
    spec = asset_spec(asset_type)
    cost = math.floor(spec.base_cost * ASSET_GROWTH_FACTOR**owned_count)
    logging.debug(f"asset_cost: {asset_type} owned={owned_count} cost={cost}")
    return cost


def upgrade_cost(upgrade_type: str, owned_level: int = 0) -> int:
    """Price of the next level of an upgrade.

    One-time upgrades always cost their base price. Repeatable upgrades double
    with every level already owned.
    """
    _check_count(owned_level)
    spec = upgrade_spec(upgrade_type)
    if not spec.repeatable:
        return spec.base_cost
    return spec.base_cost * REPEATABLE_UPGRADE_GROWTH**owned_level
