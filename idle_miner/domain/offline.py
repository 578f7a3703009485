"""Lump-sum credit for time elapsed since the player's last income tick."""

import logging
from datetime import datetime

from idle_miner.domain.catalog import MIN_CATCHUP_SECONDS
from idle_miner.domain.income import income
from idle_miner.domain.ledger import credit
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema


def elapsed_seconds(
    player: PlayerSchema, now: datetime, max_elapsed: float | None = None
) -> float:
    """Seconds since the last income tick, clamped to [0, max_elapsed]."""
    elapsed = max(0.0, (now - player.last_income_tick_at).total_seconds())
    if max_elapsed is not None:
        elapsed = min(elapsed, max_elapsed)
    return elapsed


def catchup(
    player: PlayerSchema,
    network: NetworkStateSchema,
    now: datetime,
    *,
    max_elapsed: float | None = None,
) -> tuple[PlayerSchema, int]:
    """Credit income for the whole absence in one step.

    The rate is taken once at the current state, so the cost does not depend
    on how long the player was away. Windows shorter than MIN_CATCHUP_SECONDS
    are left to accumulate: nothing is credited, the tick is not moved and
    offline_earnings is reset so an earlier lump sum is not reported twice.

    Args:
        player (PlayerSchema): Player snapshot
        network (NetworkStateSchema): Shared network snapshot
        now (datetime): Current time
        max_elapsed (float | None, optional): Cap on the credited window in seconds.
            Defaults to None (uncapped).

    Returns:
        tuple[PlayerSchema, int]: Updated player and whole coins credited
    """
    elapsed = elapsed_seconds(player, now, max_elapsed)
    if elapsed < MIN_CATCHUP_SECONDS:
        if player.offline_earnings:
            player = player.model_copy(update={"offline_earnings": 0})
        return player, 0

    rate = income(player, network)
    credited = credit(player, rate * elapsed)
    earnings = credited.coins - player.coins
    logging.debug(
        f"catchup: player={player.player_id} elapsed={elapsed}s rate={rate} earnings={earnings}"
    )
    return (
        credited.model_copy(update={"last_income_tick_at": now, "offline_earnings": earnings}),
        earnings,
    )
