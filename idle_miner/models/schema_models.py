from pydantic import BaseModel, Field
from typing import Dict, List
from uuid import UUID
from datetime import datetime


class BoostSchema(BaseModel):
    multiplier: float
    expires_at: datetime

    class Config:
        from_attributes = True


class PlayerSchema(BaseModel):
    player_id: UUID
    external_id: str
    username: str | None = None
    coins: int = 0
    coin_fraction: float = 0.0
    total_earned: int = 0
    prestige_points: int = 0
    income_multiplier: float = 1.0
    assets: Dict[str, int] = Field(default_factory=dict)
    upgrades: Dict[str, int] = Field(default_factory=dict)
    boosts: List[BoostSchema] = Field(default_factory=list)
    achievements: List[str] = Field(default_factory=list)
    last_active_at: datetime
    last_income_tick_at: datetime
    offline_earnings: int = 0
    version: int = 0

    class Config:
        from_attributes = True


class NetworkStateSchema(BaseModel):
    network_state_id: int = 1
    work_height: int
    difficulty: float
    global_capacity: float
    observed_capacity: float
    pending_work_pool: int
    market_price: float
    last_step_at: datetime
    epoch_started_at: datetime
    version: int = 0

    class Config:
        from_attributes = True
