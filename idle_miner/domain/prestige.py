"""Prestige: trade transient progress for a permanent income multiplier."""

import logging

from idle_miner.domain.catalog import PRESTIGE_MULTIPLIER_RATE, PRESTIGE_THRESHOLD
from idle_miner.domain.errors import InsufficientFundsError
from idle_miner.models.schema_models import PlayerSchema


def can_prestige(player: PlayerSchema) -> bool:
    return player.coins >= PRESTIGE_THRESHOLD


def prestige_points_for(coins: int) -> int:
    """Points a reset with `coins` in the balance would award.

    floor(log10(coins / threshold)), never negative.
    """
    ratio = coins // PRESTIGE_THRESHOLD
    if ratio < 1:
        return 0
    # floor(log10(x)) == digits(floor(x)) - 1 for x >= 1, exact for any int size
    return len(str(ratio)) - 1


def multiplier_for(prestige_points: int) -> float:
    return 1.0 + prestige_points * PRESTIGE_MULTIPLIER_RATE


def prestige(player: PlayerSchema) -> PlayerSchema:
    """Reset coins, assets, upgrades and boosts in exchange for prestige points.

    Raises:
        InsufficientFundsError: the player is below the prestige threshold

    Returns:
        PlayerSchema: Reset player. Achievements, lifetime earnings and
        identity are kept.
    """
    if not can_prestige(player):
        raise InsufficientFundsError(PRESTIGE_THRESHOLD, player.coins)

    gained = prestige_points_for(player.coins)
    points = player.prestige_points + gained
    logging.info(f"Prestige: player={player.player_id} coins={player.coins} gained={gained}")
    return player.model_copy(
        update={
            "coins": 0,
            "coin_fraction": 0.0,
            "assets": {},
            "upgrades": {},
            "boosts": [],
            "prestige_points": points,
            "income_multiplier": max(player.income_multiplier, multiplier_for(points)),
        }
    )
