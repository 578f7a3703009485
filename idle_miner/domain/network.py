"""Shared network simulation.

A single NetworkState record is advanced one discrete step at a time. Each step
depends only on the previous state, so steps must be applied strictly in order;
serializing concurrent callers is the service layer's job.
"""

import logging
from datetime import datetime

import numpy as np

from idle_miner.domain.catalog import (
    CAPACITY_GROWTH_FACTOR,
    DIFFICULTY_ADJUSTMENT_INTERVAL,
    INITIAL_DIFFICULTY,
    INITIAL_GLOBAL_CAPACITY,
    INITIAL_MARKET_PRICE,
    MARKET_PRICE_CHANGE_BOUND,
    MIN_MARKET_PRICE,
    OBSERVED_CAPACITY_SPREAD,
    TARGET_STEP_SECONDS,
    WORK_POOL_DRAIN,
)
from idle_miner.models.schema_models import NetworkStateSchema


def initial_network_state(now: datetime) -> NetworkStateSchema:
    """Build the seed record the network starts from."""
    return NetworkStateSchema(
        work_height=0,
        difficulty=INITIAL_DIFFICULTY,
        global_capacity=INITIAL_GLOBAL_CAPACITY,
        observed_capacity=INITIAL_GLOBAL_CAPACITY,
        pending_work_pool=0,
        market_price=INITIAL_MARKET_PRICE,
        last_step_at=now,
        epoch_started_at=now,
    )


def adjust_difficulty(
    difficulty: float, expected_seconds: float, actual_seconds: float
) -> float:
    """Retarget difficulty from observed vs. expected epoch duration.

    Args:
        difficulty (float): Difficulty of the epoch that just ended
        expected_seconds (float): interval * target step period
        actual_seconds (float): Wall time the epoch actually took

    Returns:
        float: New difficulty, never below INITIAL_DIFFICULTY. A zero or
        negative actual duration leaves the difficulty unchanged.
    """
    if actual_seconds <= 0:
        logging.warning(
            f"Skip difficulty adjustment: non-positive epoch duration {actual_seconds}"
        )
        return difficulty
    return max(INITIAL_DIFFICULTY, difficulty * (expected_seconds / actual_seconds))


def step(
    state: NetworkStateSchema,
    now: datetime,
    rng: np.random.Generator,
    *,
    adjustment_interval: int = DIFFICULTY_ADJUSTMENT_INTERVAL,
    target_step_seconds: float = TARGET_STEP_SECONDS,
) -> NetworkStateSchema:
    """Advance the network by exactly one step.

    Args:
        state (NetworkStateSchema): The latest network snapshot
        now (datetime): Time of this step
        rng (np.random.Generator): Random source; seed it for reproducible runs

    Returns:
        NetworkStateSchema: The next snapshot. `state` is left untouched.
    """
    work_height = state.work_height + 1

    difficulty = state.difficulty
    epoch_started_at = state.epoch_started_at
    if work_height % adjustment_interval == 0:
        expected = adjustment_interval * target_step_seconds
        actual = (now - state.epoch_started_at).total_seconds()
        difficulty = adjust_difficulty(state.difficulty, expected, actual)
        epoch_started_at = now
        logging.info(
            f"Difficulty retarget at height {work_height}: {state.difficulty} -> {difficulty}"
        )

    global_capacity = state.global_capacity * CAPACITY_GROWTH_FACTOR
    observed_capacity = global_capacity * rng.uniform(
        1.0 - OBSERVED_CAPACITY_SPREAD, 1.0 + OBSERVED_CAPACITY_SPREAD
    )

    pending_work_pool = max(
        0,
        state.pending_work_pool
        - WORK_POOL_DRAIN
        + int(rng.integers(0, 2 * WORK_POOL_DRAIN)),
    )

    price_change = rng.uniform(-MARKET_PRICE_CHANGE_BOUND, MARKET_PRICE_CHANGE_BOUND)
    market_price = max(MIN_MARKET_PRICE, state.market_price * (1.0 + price_change))

    return state.model_copy(
        update={
            "work_height": work_height,
            "difficulty": difficulty,
            "global_capacity": global_capacity,
            "observed_capacity": float(observed_capacity),
            "pending_work_pool": pending_work_pool,
            "market_price": float(market_price),
            "last_step_at": now,
            "epoch_started_at": epoch_started_at,
        }
    )
