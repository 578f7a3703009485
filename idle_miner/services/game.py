"""Command handlers of the game.

Each player command runs the same read-compute-write cycle:

1. load the player and the shared network state,
2. drop expired boosts and credit the income earned since the last tick,
3. apply the command through the domain rules,
4. grant achievements, stamp activity,
5. save with a version check, retrying the whole cycle if another write won.

Domain errors (unknown type, insufficient funds, ...) are raised to the caller
unchanged and nothing is written.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable
from uuid import UUID

import numpy as np
from uuid6 import uuid7

from idle_miner.converter import DataConverter
from idle_miner.domain import achievements, boosts, ledger, offline
from idle_miner.domain import network as network_rules
from idle_miner.domain import prestige as prestige_rules
from idle_miner.domain.errors import StaleStateError
from idle_miner.domain.income import click_power
from idle_miner.models.dc_models import NetworkViewModel, PlayerViewModel
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema
from idle_miner.network_sync_manager import NetworkSyncManager

MAX_WRITE_ATTEMPTS = 3

PlayerCommand = Callable[[PlayerSchema, NetworkStateSchema, datetime], PlayerSchema]
NetworkListener = Callable[[NetworkStateSchema], Awaitable[None]]


class GameService:
    def __init__(
        self,
        repository,
        clock: Callable[[], datetime] = datetime.now,
        rng: np.random.Generator | None = None,
        *,
        max_offline_seconds: float | None = None,
        sync_manager: NetworkSyncManager | None = None,
        on_network_step: NetworkListener | None = None,
    ):
        """
        Args:
            repository: Store exposing load/save of players and the network state
            clock (Callable[[], datetime]): Source of the current time
            rng (np.random.Generator | None): Random source of the network simulation
            max_offline_seconds (float | None): Cap on offline catch-up, None for uncapped
            sync_manager (NetworkSyncManager | None): Lock serializing network steps
            on_network_step (NetworkListener | None): Awaited with each saved network state
        """
        self.repository = repository
        self.clock = clock
        self.rng = rng if rng is not None else np.random.default_rng()
        self.max_offline_seconds = max_offline_seconds
        self.sync_manager = sync_manager if sync_manager is not None else NetworkSyncManager()
        self.on_network_step = on_network_step
        self.converter = DataConverter()

    async def _run_player_command(self, player_id: UUID, command: PlayerCommand) -> PlayerViewModel:
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            player = await self.repository.load_player(player_id)
            network = await self.repository.load_network_state()
            now = self.clock()

            player = boosts.sweep_expired(player, now)
            player, earnings = offline.catchup(
                player, network, now, max_elapsed=self.max_offline_seconds
            )
            player = command(player, network, now)
            player, granted = achievements.check_and_grant(player)
            player = player.model_copy(update={"last_active_at": now})

            try:
                saved = await self.repository.save_player(player)
            except StaleStateError:
                logging.warning(
                    f"Player {player_id} changed concurrently (attempt {attempt}/{MAX_WRITE_ATTEMPTS})"
                )
                continue
            if earnings:
                logging.debug(f"Credited {earnings} offline coins to {player_id}")
            return self.converter.convert_player_to_view(saved, network, granted)
        raise StaleStateError(f"Player {player_id} kept changing after {MAX_WRITE_ATTEMPTS} attempts")

    async def init(self, external_id: str, username: str | None = None) -> PlayerViewModel:
        """Find or create the player of an external identity, then sync it

        Args:
            external_id (str): Identity assigned by the login provider
            username (str | None): Display name, refreshed when given

        Returns:
            PlayerViewModel: The player after offline catch-up
        """
        player = await self.repository.find_player(external_id)
        if player is None:
            now = self.clock()
            player = await self.repository.create_player(
                PlayerSchema(
                    player_id=uuid7(),
                    external_id=external_id,
                    username=username,
                    last_active_at=now,
                    last_income_tick_at=now,
                )
            )
            logging.info(f"Created player {player.player_id} for {external_id}")

        def rename(player: PlayerSchema, network: NetworkStateSchema, now: datetime) -> PlayerSchema:
            if username is None or username == player.username:
                return player
            return player.model_copy(update={"username": username})

        return await self._run_player_command(player.player_id, rename)

    async def sync(self, player_id: UUID) -> PlayerViewModel:
        return await self._run_player_command(player_id, lambda player, network, now: player)

    async def purchase_asset(self, player_id: UUID, asset_type: str) -> PlayerViewModel:
        def buy(player: PlayerSchema, network: NetworkStateSchema, now: datetime) -> PlayerSchema:
            player, cost = ledger.purchase_asset(player, asset_type)
            logging.info(f"Player {player_id} bought {asset_type} for {cost}")
            return player

        return await self._run_player_command(player_id, buy)

    async def purchase_upgrade(self, player_id: UUID, upgrade_type: str) -> PlayerViewModel:
        def buy(player: PlayerSchema, network: NetworkStateSchema, now: datetime) -> PlayerSchema:
            player, cost = ledger.purchase_upgrade(player, upgrade_type)
            logging.info(f"Player {player_id} bought upgrade {upgrade_type} for {cost}")
            return player

        return await self._run_player_command(player_id, buy)

    async def click(self, player_id: UUID) -> PlayerViewModel:
        """Mine manually: credit one click reward."""

        def mine(player: PlayerSchema, network: NetworkStateSchema, now: datetime) -> PlayerSchema:
            return ledger.credit(player, click_power(player, network))

        return await self._run_player_command(player_id, mine)

    async def prestige(self, player_id: UUID) -> PlayerViewModel:
        def reset(player: PlayerSchema, network: NetworkStateSchema, now: datetime) -> PlayerSchema:
            return prestige_rules.prestige(player)

        return await self._run_player_command(player_id, reset)

    async def grant_boost(
        self, player_id: UUID, multiplier: float, duration_seconds: float
    ) -> PlayerViewModel:
        def grant(player: PlayerSchema, network: NetworkStateSchema, now: datetime) -> PlayerSchema:
            return boosts.grant_boost(player, multiplier, duration_seconds, now)

        return await self._run_player_command(player_id, grant)

    async def network(self) -> NetworkViewModel:
        network = await self.repository.load_network_state()
        return self.converter.convert_network_to_view(network)

    async def ensure_network_state(self) -> NetworkStateSchema:
        """Seed the shared network state on first start; keep an existing one."""
        created = await self.repository.create_network_state(
            network_rules.initial_network_state(self.clock())
        )
        if created:
            logging.info("Seeded network state")
        return await self.repository.load_network_state()

    async def step_network(self) -> NetworkViewModel:
        """Advance the shared network by one step.

        Steps in this process are serialized by the sync manager. A step that
        loses the version check against another process raises StaleStateError
        and is not retried.
        """
        async with self.sync_manager:
            state = await self.repository.load_network_state()
            stepped = network_rules.step(state, self.clock(), self.rng)
            saved = await self.repository.save_network_state(stepped)
        logging.info(f"Network stepped to height {saved.work_height}")
        if self.on_network_step is not None:
            await self.on_network_step(saved)
        return self.converter.convert_network_to_view(saved)

    async def remove_expired_boosts(self) -> int:
        removed = await self.repository.delete_expired_boosts(self.clock())
        logging.info(f"Removed {removed} expired boosts")
        return removed

