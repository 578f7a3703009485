"""DB service layer for the economy.

- Command handlers never touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- Writes are compare-and-swap on the record version; a lost race raises
  StaleStateError and leaves the stored record untouched.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from idle_miner.crud import CreateData, DeleteData, ReadData, UpdateData
from idle_miner.domain.errors import PlayerNotFoundError, StaleStateError
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema


class GameRepository:
    def __init__(self, Session: async_sessionmaker):
        self.Session: async_sessionmaker = Session

    async def load_player(self, player_id: UUID) -> PlayerSchema:
        async with self.Session() as session:
            player = await ReadData.read_player_data(player_id, session)
        if player is None:
            raise PlayerNotFoundError(f"Player {player_id} not found")
        return player

    async def find_player(self, external_id: str) -> PlayerSchema | None:
        async with self.Session() as session:
            return await ReadData.read_player_by_external_id(external_id, session)

    async def create_player(self, player: PlayerSchema) -> PlayerSchema:
        """Insert a baseline player. If the external id was taken concurrently, return that player."""
        try:
            async with self.Session() as session:
                async with session.begin():
                    await CreateData.add_player_data(player, session)
        except IntegrityError:
            logging.info(f"Player {player.external_id} created concurrently, reusing it")
            existing = await self.find_player(player.external_id)
            if existing is None:
                raise RuntimeError("Failed to create player data")
            return existing
        return player

    async def save_player(self, player: PlayerSchema) -> PlayerSchema:
        """Persist `player` if nobody else wrote it since it was loaded.

        Returns:
            PlayerSchema: The saved snapshot with its new version
        """
        async with self.Session() as session:
            async with session.begin():
                saved = await UpdateData.update_player_data_no_commit(player, session)
        if not saved:
            raise StaleStateError(f"Player {player.player_id} changed since version {player.version}")
        return player.model_copy(update={"version": player.version + 1})

    async def load_network_state(self) -> NetworkStateSchema:
        async with self.Session() as session:
            network = await ReadData.read_network_state_data(session)
        if network is None:
            raise RuntimeError("Network state has not been created")
        return network

    async def create_network_state(self, network: NetworkStateSchema) -> bool:
        async with self.Session() as session:
            return await CreateData.create_network_state_data(network, session)

    async def save_network_state(self, network: NetworkStateSchema) -> NetworkStateSchema:
        async with self.Session() as session:
            async with session.begin():
                saved = await UpdateData.update_network_state_data_no_commit(network, session)
        if not saved:
            raise StaleStateError(f"Network state changed since version {network.version}")
        return network.model_copy(update={"version": network.version + 1})

    async def delete_expired_boosts(self, now: datetime) -> int:
        async with self.Session() as session:
            return await DeleteData.delete_expired_boosts(now, session)
