"""Milestone badges.

Each achievement is an id plus a predicate over the player snapshot. Granting
is append-only and idempotent: ids already held are never added twice and
never removed.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from idle_miner.domain.catalog import ASSETS
from idle_miner.models.schema_models import PlayerSchema

ASSET_COUNT_MILESTONES = (10, 50, 100)
EARNINGS_MILESTONES = (1_000, 1_000_000, 1_000_000_000)
UPGRADE_COUNT_MILESTONES = (5, 10)
PRESTIGE_MILESTONES = (1, 5, 10)


@dataclass(frozen=True)
class Achievement:
    achievement_id: str
    predicate: Callable[[PlayerSchema], bool]


def _asset_count_at_least(asset_type: str, count: int) -> Callable[[PlayerSchema], bool]:
    return lambda player: player.assets.get(asset_type, 0) >= count


def _build_table() -> List[Achievement]:
    table: List[Achievement] = []
    for asset_type in ASSETS:
        for count in ASSET_COUNT_MILESTONES:
            table.append(
                Achievement(f"{asset_type}_{count}", _asset_count_at_least(asset_type, count))
            )
    for amount in EARNINGS_MILESTONES:
        table.append(
            Achievement(f"earned_{amount}", lambda player, amount=amount: player.total_earned >= amount)
        )
    for count in UPGRADE_COUNT_MILESTONES:
        table.append(
            Achievement(
                f"upgrades_{count}",
                lambda player, count=count: sum(player.upgrades.values()) >= count,
            )
        )
    for points in PRESTIGE_MILESTONES:
        table.append(
            Achievement(
                f"prestige_{points}",
                lambda player, points=points: player.prestige_points >= points,
            )
        )
    return table


ACHIEVEMENTS: List[Achievement] = _build_table()


def check_and_grant(player: PlayerSchema) -> tuple[PlayerSchema, List[str]]:
    """Append every newly satisfied achievement.

    Returns:
        tuple[PlayerSchema, List[str]]: Updated player and the ids granted by
        this call (empty when nothing changed)
    """
    held = set(player.achievements)
    granted = [
        achievement.achievement_id
        for achievement in ACHIEVEMENTS
        if achievement.achievement_id not in held and achievement.predicate(player)
    ]
    if not granted:
        return player, []
    logging.info(f"Achievements unlocked for {player.player_id}: {granted}")
    return player.model_copy(update={"achievements": [*player.achievements, *granted]}), granted
