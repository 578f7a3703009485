from apscheduler.schedulers.asyncio import AsyncIOScheduler
import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

import numpy as np
from redis.asyncio import Redis

from idle_miner.db import Session, engine
from idle_miner.domain.errors import StaleStateError
from idle_miner.load_secrets import (
    boost_sweep_minutes,
    max_offline_seconds,
    network_seed,
    network_step_seconds,
    redis_host,
    redis_port,
)
from idle_miner.models.schemas import Base
from idle_miner.network_sync_manager import NetworkSyncManager
from idle_miner.redis_subscriber import NetworkPublisher
from idle_miner.routers import game
from idle_miner.services.game import GameService
from idle_miner.services.repository import GameRepository

scheduler = AsyncIOScheduler()
logging.basicConfig(level=logging.INFO)


async def scheduled_network_step(service: GameService):
    """Advance the network from the scheduler. A step lost to another process is skipped."""
    try:
        await service.step_network()
    except StaleStateError as e:
        logging.warning(f"Skipped scheduled network step: {e}")


@asynccontextmanager
async def lifespan(app):
    """Create tables and the network state, then start the periodic jobs.
    This function is called to start the server.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    redis = Redis(host=redis_host, port=redis_port, decode_responses=True, health_check_interval=30)
    service = GameService(
        GameRepository(Session),
        rng=np.random.default_rng(network_seed),
        max_offline_seconds=max_offline_seconds,
        sync_manager=NetworkSyncManager(),
        on_network_step=NetworkPublisher(redis),
    )
    await service.ensure_network_state()
    app.state.game_service = service
    app.state.redis = redis

    scheduler.add_job(
        scheduled_network_step,
        "interval",
        seconds=network_step_seconds,
        args=[service],
        max_instances=1,
    )
    # Expired boosts no longer count toward income; this only reclaims rows.
    scheduler.add_job(
        service.remove_expired_boosts,
        "interval",
        minutes=boost_sweep_minutes,
    )
    scheduler.start()
    try:
        yield
    finally:
        scheduler.shutdown()
        await redis.aclose()
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(game.game_router)
