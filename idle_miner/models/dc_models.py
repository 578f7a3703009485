from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List

from idle_miner.domain.catalog import AssetType, UpgradeType
from idle_miner.models.schema_models import BoostSchema


class InitModel(BaseModel):
    external_id: str = Field(min_length=1)
    username: str | None = None


class PlayerIdModel(BaseModel):
    player_id: UUID


class PurchaseAssetModel(BaseModel):
    player_id: UUID
    asset_type: AssetType


class PurchaseUpgradeModel(BaseModel):
    player_id: UUID
    upgrade_type: UpgradeType


class BoostModel(BaseModel):
    player_id: UUID
    multiplier: float = Field(gt=0)
    duration_seconds: float = Field(gt=0)


class AssetViewModel(BaseModel):
    asset_type: str
    name: str
    count: int
    cost: str  # coins are sent as strings; JSON numbers lose precision in clients
    affordable: bool


class UpgradeViewModel(BaseModel):
    upgrade_type: str
    name: str
    level: int
    effect: float
    repeatable: bool
    cost: str
    available: bool  # False once a one-time upgrade is owned
    affordable: bool


class PlayerViewModel(BaseModel):
    player_id: UUID
    username: str | None
    coins: str
    total_earned: str
    prestige_points: int
    income_multiplier: float
    income_per_second: float
    click_power: float
    offline_earnings: str
    rank: str
    can_prestige: bool
    prestige_points_available: int
    assets: List[AssetViewModel]
    upgrades: List[UpgradeViewModel]
    boosts: List[BoostSchema]
    achievements: List[str]
    new_achievements: List[str] = Field(default_factory=list)
    last_active_at: datetime


class NetworkViewModel(BaseModel):
    work_height: int
    difficulty: float
    global_capacity: float
    observed_capacity: float
    pending_work_pool: int
    market_price: float
    block_reward: float
    last_step_at: datetime
