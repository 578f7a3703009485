from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from datetime import datetime
from uuid import UUID
import logging

from idle_miner.models.schema_models import (
    BoostSchema,
    NetworkStateSchema,
    PlayerSchema,
)
from idle_miner.models.schemas import (
    Achievement,
    AssetHolding,
    Boost,
    NetworkState,
    OwnedUpgrade,
    Player,
)


def convert_player_to_schema(player: Player) -> PlayerSchema:
    """Flatten a Player row and its child rows into the snapshot the domain uses

    Args:
        player (Player): Player row with assets, upgrades, boosts and achievements loaded

    Returns:
        PlayerSchema: Snapshot of the player
    """
    return PlayerSchema(
        player_id=player.player_id,
        external_id=player.external_id,
        username=player.username,
        coins=int(player.coins),
        coin_fraction=player.coin_fraction,
        total_earned=int(player.total_earned),
        prestige_points=player.prestige_points,
        income_multiplier=player.income_multiplier,
        offline_earnings=int(player.offline_earnings),
        assets={holding.asset_type: holding.count for holding in player.assets},
        upgrades={owned.upgrade_type: owned.level for owned in player.upgrades},
        boosts=[BoostSchema.model_validate(boost) for boost in player.boosts],
        achievements=[achievement.achievement_id for achievement in player.achievements],
        last_active_at=player.last_active_at,
        last_income_tick_at=player.last_income_tick_at,
        version=player.version,
    )


class CreateData:
    @staticmethod
    async def add_player_data(player: PlayerSchema, session: AsyncSession):
        """Add a new player row without committing. Use inside session.begin().

        Args:
            player (PlayerSchema): Baseline player record
        """
        session.add(
            Player(
                player_id=player.player_id,
                external_id=player.external_id,
                username=player.username,
                coins=player.coins,
                coin_fraction=player.coin_fraction,
                total_earned=player.total_earned,
                prestige_points=player.prestige_points,
                income_multiplier=player.income_multiplier,
                offline_earnings=player.offline_earnings,
                last_active_at=player.last_active_at,
                last_income_tick_at=player.last_income_tick_at,
                version=player.version,
            )
        )
        await session.flush()

    @staticmethod
    async def create_network_state_data(network: NetworkStateSchema, session: AsyncSession) -> bool:
        """Insert the network state row if it does not exist yet

        Args:
            network (NetworkStateSchema): Seed network state

        Returns:
            bool: True if a row was inserted, False if one already existed
        """
        async with session:
            try:
                existing = await session.get(NetworkState, network.network_state_id)
                if existing is not None:
                    return False
                session.add(NetworkState(**network.model_dump()))
                await session.commit()
                return True
            except Exception as e:
                logging.error(f"Failed to create network state data: {e}")
                await session.rollback()
                raise


class ReadData:
    @staticmethod
    async def read_player_data(player_id: UUID, session: AsyncSession) -> PlayerSchema | None:
        """Read a player with every owned asset, upgrade, boost and achievement

        Args:
            player_id (UUID): To identify the player

        Returns:
            PlayerSchema | None: Player snapshot, None if no such player
        """
        stmt = select(Player).where(Player.player_id == player_id)
        result = await session.execute(stmt)
        player = result.scalars().first()
        if player is None:
            return None
        return convert_player_to_schema(player)

    @staticmethod
    async def read_player_by_external_id(external_id: str, session: AsyncSession) -> PlayerSchema | None:
        stmt = select(Player).where(Player.external_id == external_id)
        result = await session.execute(stmt)
        player = result.scalars().first()
        if player is None:
            return None
        return convert_player_to_schema(player)

    @staticmethod
    async def read_network_state_data(session: AsyncSession, network_state_id: int = 1) -> NetworkStateSchema | None:
        network = await session.get(NetworkState, network_state_id)
        if network is None:
            return None
        return NetworkStateSchema.model_validate(network)


class UpdateData:
    @staticmethod
    async def update_player_data_no_commit(player: PlayerSchema, session: AsyncSession) -> bool:
        """Write a player snapshot if the stored version still matches.

        NOTE: Does not commit; call inside session.begin().

        Args:
            player (PlayerSchema): Snapshot computed from the row at `player.version`

        Returns:
            bool: False if another writer saved first (nothing is written)
        """
        stmt = (
            update(Player)
            .where(Player.player_id == player.player_id, Player.version == player.version)
            .values(
                username=player.username,
                coins=player.coins,
                coin_fraction=player.coin_fraction,
                total_earned=player.total_earned,
                prestige_points=player.prestige_points,
                income_multiplier=player.income_multiplier,
                offline_earnings=player.offline_earnings,
                last_active_at=player.last_active_at,
                last_income_tick_at=player.last_income_tick_at,
                version=player.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        if result.rowcount == 0:
            return False

        await session.execute(delete(AssetHolding).where(AssetHolding.player_id == player.player_id))
        await session.execute(delete(OwnedUpgrade).where(OwnedUpgrade.player_id == player.player_id))
        await session.execute(delete(Boost).where(Boost.player_id == player.player_id))
        for asset_type, count in player.assets.items():
            session.add(AssetHolding(player_id=player.player_id, asset_type=asset_type, count=count))
        for upgrade_type, level in player.upgrades.items():
            session.add(OwnedUpgrade(player_id=player.player_id, upgrade_type=upgrade_type, level=level))
        for boost in player.boosts:
            session.add(Boost(player_id=player.player_id, multiplier=boost.multiplier, expires_at=boost.expires_at))

        # Achievements are append-only: insert only the ids not stored yet.
        stmt = select(Achievement.achievement_id).where(Achievement.player_id == player.player_id)
        stored = set((await session.execute(stmt)).scalars().all())
        for achievement_id in player.achievements:
            if achievement_id not in stored:
                session.add(Achievement(player_id=player.player_id, achievement_id=achievement_id))
        await session.flush()
        return True

    @staticmethod
    async def update_network_state_data_no_commit(network: NetworkStateSchema, session: AsyncSession) -> bool:
        """Compare-and-swap the network state on its version.

        NOTE: Does not commit; call inside session.begin().

        Returns:
            bool: False if the stored version moved on since `network` was read
        """
        values = network.model_dump(exclude={"network_state_id", "version"})
        stmt = (
            update(NetworkState)
            .where(
                NetworkState.network_state_id == network.network_state_id,
                NetworkState.version == network.version,
            )
            .values(**values, version=network.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount == 1


class DeleteData:
    @staticmethod
    async def delete_expired_boosts(now: datetime, session: AsyncSession) -> int:
        """Delete every boost that expired at or before `now`

        Returns:
            int: Number of deleted boosts
        """
        async with session:
            try:
                result = await session.execute(delete(Boost).where(Boost.expires_at <= now))
                await session.commit()
                return result.rowcount
            except Exception as e:
                logging.error(f"Failed to delete expired boosts: {e}")
                await session.rollback()
                raise
