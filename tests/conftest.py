from datetime import datetime, timedelta
from uuid import UUID

import pytest
from uuid6 import uuid7

from idle_miner.domain.errors import PlayerNotFoundError, StaleStateError
from idle_miner.domain.network import initial_network_state
from idle_miner.models.schema_models import NetworkStateSchema, PlayerSchema

NOW = datetime(2026, 1, 1, 12, 0, 0)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class InMemoryRepository:
    """Dict-backed store with the same compare-and-swap semantics as the SQL one."""

    def __init__(self, network: NetworkStateSchema):
        self.players: dict[UUID, PlayerSchema] = {}
        self.network = network
        self.saves = 0

    async def load_player(self, player_id: UUID) -> PlayerSchema:
        if player_id not in self.players:
            raise PlayerNotFoundError(f"Player {player_id} not found")
        return self.players[player_id]

    async def find_player(self, external_id: str) -> PlayerSchema | None:
        for player in self.players.values():
            if player.external_id == external_id:
                return player
        return None

    async def create_player(self, player: PlayerSchema) -> PlayerSchema:
        self.players[player.player_id] = player
        return player

    async def save_player(self, player: PlayerSchema) -> PlayerSchema:
        stored = self.players[player.player_id]
        if stored.version != player.version:
            raise StaleStateError("stale player")
        saved = player.model_copy(update={"version": player.version + 1})
        self.players[player.player_id] = saved
        self.saves += 1
        return saved

    async def load_network_state(self) -> NetworkStateSchema:
        return self.network

    async def create_network_state(self, network: NetworkStateSchema) -> bool:
        return False

    async def save_network_state(self, network: NetworkStateSchema) -> NetworkStateSchema:
        if network.version != self.network.version:
            raise StaleStateError("stale network")
        self.network = network.model_copy(update={"version": network.version + 1})
        return self.network

    async def delete_expired_boosts(self, now: datetime) -> int:
        removed = 0
        for player_id, player in self.players.items():
            active = [boost for boost in player.boosts if boost.expires_at > now]
            removed += len(player.boosts) - len(active)
            self.players[player_id] = player.model_copy(update={"boosts": active})
        return removed


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def network() -> NetworkStateSchema:
    return initial_network_state(NOW)


@pytest.fixture
def make_player():
    def _make_player(**fields) -> PlayerSchema:
        values = dict(
            player_id=uuid7(),
            external_id=f"tg-{uuid7()}",
            last_active_at=NOW,
            last_income_tick_at=NOW,
        )
        values.update(fields)
        return PlayerSchema(**values)

    return _make_player


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def repository(network) -> InMemoryRepository:
    return InMemoryRepository(network)
