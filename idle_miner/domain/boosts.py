"""Time-limited income/click multipliers."""

import logging
from datetime import datetime, timedelta

from idle_miner.domain.errors import ValidationError
from idle_miner.models.schema_models import BoostSchema, PlayerSchema


def grant_boost(
    player: PlayerSchema, multiplier: float, duration_seconds: float, now: datetime
) -> PlayerSchema:
    if multiplier <= 0:
        raise ValidationError(f"Boost multiplier must be positive: {multiplier}")
    if duration_seconds <= 0:
        raise ValidationError(f"Boost duration must be positive: {duration_seconds}")
    boost = BoostSchema(
        multiplier=multiplier, expires_at=now + timedelta(seconds=duration_seconds)
    )
    return player.model_copy(update={"boosts": [*player.boosts, boost]})


def sweep_expired(player: PlayerSchema, now: datetime) -> PlayerSchema:
    """Drop every boost whose expiry is at or before `now`."""
    active = [boost for boost in player.boosts if boost.expires_at > now]
    if len(active) == len(player.boosts):
        return player
    logging.debug(
        f"Removed {len(player.boosts) - len(active)} expired boosts for {player.player_id}"
    )
    return player.model_copy(update={"boosts": active})


def boost_multiplier(player: PlayerSchema) -> float:
    """Product of the multipliers of every boost held; 1.0 with none."""
    multiplier = 1.0
    for boost in player.boosts:
        multiplier *= boost.multiplier
    return multiplier
