from typing import List

from idle_miner.domain.catalog import ASSETS, UPGRADES, rank_for
from idle_miner.domain.cost_model import asset_cost, upgrade_cost
from idle_miner.domain.income import block_reward, click_power, income
from idle_miner.domain.prestige import can_prestige, prestige_points_for
from idle_miner.models.dc_models import (
    AssetViewModel,
    NetworkViewModel,
    PlayerViewModel,
    UpgradeViewModel,
)
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema


class DataConverter:
    """This class is used to convert snapshots into the views sent to clients."""

    def convert_player_to_view(
        self,
        player: PlayerSchema,
        network: NetworkStateSchema,
        new_achievements: List[str] | None = None,
    ) -> PlayerViewModel:
        """Convert the PlayerSchema to the PlayerViewModel to send client

        Args:
            player (PlayerSchema): The saved player snapshot
            network (NetworkStateSchema): The network snapshot the player was computed against
            new_achievements (List[str] | None): Achievements unlocked by this command

        Returns:
            PlayerViewModel: Player state with derived income, click power, prices and flags
        """
        assets = []
        for asset_type, spec in ASSETS.items():
            count = player.assets.get(asset_type, 0)
            cost = asset_cost(asset_type, count)
            assets.append(
                AssetViewModel(
                    asset_type=asset_type,
                    name=spec.name,
                    count=count,
                    cost=str(cost),
                    affordable=player.coins >= cost,
                )
            )

        upgrades = []
        for upgrade_type, spec in UPGRADES.items():
            level = player.upgrades.get(upgrade_type, 0)
            cost = upgrade_cost(upgrade_type, level)
            available = spec.repeatable or level == 0
            upgrades.append(
                UpgradeViewModel(
                    upgrade_type=upgrade_type,
                    name=spec.name,
                    level=level,
                    effect=spec.effect,
                    repeatable=spec.repeatable,
                    cost=str(cost),
                    available=available,
                    affordable=available and player.coins >= cost,
                )
            )

        return PlayerViewModel(
            player_id=player.player_id,
            username=player.username,
            coins=str(player.coins),
            total_earned=str(player.total_earned),
            prestige_points=player.prestige_points,
            income_multiplier=player.income_multiplier,
            income_per_second=income(player, network),
            click_power=click_power(player, network),
            offline_earnings=str(player.offline_earnings),
            rank=rank_for(player.total_earned),
            can_prestige=can_prestige(player),
            prestige_points_available=prestige_points_for(player.coins),
            assets=assets,
            upgrades=upgrades,
            boosts=player.boosts,
            achievements=player.achievements,
            new_achievements=new_achievements or [],
            last_active_at=player.last_active_at,
        )

    def convert_network_to_view(self, network: NetworkStateSchema) -> NetworkViewModel:
        return NetworkViewModel(
            work_height=network.work_height,
            difficulty=network.difficulty,
            global_capacity=network.global_capacity,
            observed_capacity=network.observed_capacity,
            pending_work_pool=network.pending_work_pool,
            market_price=network.market_price,
            block_reward=block_reward(network.work_height),
            last_step_at=network.last_step_at,
        )
