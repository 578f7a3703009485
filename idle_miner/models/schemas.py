from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import Integer, String, Uuid, Float, DateTime, Numeric, TypeDecorator
from uuid6 import uuid7
from datetime import datetime
from decimal import Decimal


class Coins(TypeDecorator):
    """Whole coin amount stored without rounding.

    NUMERIC(78, 0) on PostgreSQL holds any 256-bit value. SQLite stores NUMERIC
    as a float, so there the amount is kept as a decimal string.
    """

    impl = Numeric(precision=78, scale=0)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(String())
        return dialect.type_descriptor(self.impl)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return str(int(value))
        return Decimal(int(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)


COIN_TYPE = Coins()


class Base(DeclarativeBase):
    pass


class Player(Base):
    __tablename__ = "player"
    player_id = Column(Uuid, primary_key=True, default=uuid7)
    external_id = Column(String, unique=True, nullable=False)
    username = Column(String, nullable=True)
    coins = Column(COIN_TYPE, default=0, nullable=False)
    coin_fraction = Column(Float, default=0.0, nullable=False)
    total_earned = Column(COIN_TYPE, default=0, nullable=False)
    prestige_points = Column(Integer, default=0, nullable=False)
    income_multiplier = Column(Float, default=1.0, nullable=False)
    offline_earnings = Column(COIN_TYPE, default=0, nullable=False)
    last_active_at = Column(DateTime, default=datetime.now)
    last_income_tick_at = Column(DateTime, default=datetime.now)
    created_at = Column(DateTime, default=datetime.now)
    version = Column(Integer, default=0, nullable=False)

    assets = relationship(
        "AssetHolding",
        back_populates="player",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    upgrades = relationship(
        "OwnedUpgrade",
        back_populates="player",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    boosts = relationship(
        "Boost",
        back_populates="player",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    achievements = relationship(
        "Achievement",
        back_populates="player",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Achievement.unlocked_at",
    )


class AssetHolding(Base):
    __tablename__ = "asset_holding"
    __table_args__ = (UniqueConstraint("player_id", "asset_type"),)
    asset_holding_id = Column(Uuid, primary_key=True, default=uuid7)
    player_id = Column(Uuid, ForeignKey("player.player_id", ondelete="CASCADE"))
    asset_type = Column(String, nullable=False)
    count = Column(Integer, default=0, nullable=False)

    player = relationship("Player", back_populates="assets")


class OwnedUpgrade(Base):
    __tablename__ = "owned_upgrade"
    __table_args__ = (UniqueConstraint("player_id", "upgrade_type"),)
    owned_upgrade_id = Column(Uuid, primary_key=True, default=uuid7)
    player_id = Column(Uuid, ForeignKey("player.player_id", ondelete="CASCADE"))
    upgrade_type = Column(String, nullable=False)
    level = Column(Integer, default=1, nullable=False)

    player = relationship("Player", back_populates="upgrades")


class Boost(Base):
    __tablename__ = "boost"
    boost_id = Column(Uuid, primary_key=True, default=uuid7)
    player_id = Column(Uuid, ForeignKey("player.player_id", ondelete="CASCADE"))
    multiplier = Column(Float, nullable=False)
    expires_at = Column(DateTime, nullable=False, index=True)

    player = relationship("Player", back_populates="boosts")


class Achievement(Base):
    __tablename__ = "achievement"
    __table_args__ = (UniqueConstraint("player_id", "achievement_id"),)
    achievement_row_id = Column(Uuid, primary_key=True, default=uuid7)
    player_id = Column(Uuid, ForeignKey("player.player_id", ondelete="CASCADE"))
    achievement_id = Column(String, nullable=False)
    unlocked_at = Column(DateTime, default=datetime.now)

    player = relationship("Player", back_populates="achievements")


class NetworkState(Base):
    __tablename__ = "network_state"
    network_state_id = Column(Integer, primary_key=True, default=1)
    work_height = Column(Integer, default=0, nullable=False)
    difficulty = Column(Float, nullable=False)
    global_capacity = Column(Float, nullable=False)
    observed_capacity = Column(Float, nullable=False)
    pending_work_pool = Column(Integer, default=0, nullable=False)
    market_price = Column(Float, nullable=False)
    last_step_at = Column(DateTime, default=datetime.now)
    epoch_started_at = Column(DateTime, default=datetime.now)
    version = Column(Integer, default=0, nullable=False)
