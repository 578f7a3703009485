"""Asset, upgrade and rank tables plus the economy constants.

Every formula in the domain package reads its numbers from here, so that the
balance of the game can be tuned in one place.
"""

from dataclasses import dataclass
from enum import Enum

from idle_miner.domain.errors import ValidationError

# ==============================================================================
# ==== Economy constants =======================================================
# ==============================================================================

ASSET_GROWTH_FACTOR = 1.15
REPEATABLE_UPGRADE_GROWTH = 2

PRESTIGE_THRESHOLD = 1_000_000
PRESTIGE_MULTIPLIER_RATE = 0.1  # income_multiplier per prestige point
PRESTIGE_BONUS_RATE = 0.02  # extra income per prestige point

INITIAL_BLOCK_REWARD = 50.0
HALVING_INTERVAL = 210_000

FEE_SCALE = 0.0001
STAKE_FRACTION = 0.1  # share of the balance treated as staked
BASE_CLICK = 0.001

MIN_CATCHUP_SECONDS = 1.0

# ==== Network =================================================================
INITIAL_DIFFICULTY = 1.0
INITIAL_GLOBAL_CAPACITY = 1000.0
INITIAL_MARKET_PRICE = 1.0
TARGET_STEP_SECONDS = 600
DIFFICULTY_ADJUSTMENT_INTERVAL = 2016
CAPACITY_GROWTH_FACTOR = 1.0001
OBSERVED_CAPACITY_SPREAD = 0.1  # observed = global * U(1 - spread, 1 + spread)
WORK_POOL_DRAIN = 1000
MARKET_PRICE_CHANGE_BOUND = 0.01
MIN_MARKET_PRICE = 0.01


class AssetType(str, Enum):
    gpu_miner = "gpu_miner"
    asic_farm = "asic_farm"
    mining_pool = "mining_pool"
    crypto_exchange = "crypto_exchange"
    nft_marketplace = "nft_marketplace"
    defi_platform = "defi_platform"


class UpgradeType(str, Enum):
    faster_internet = "faster_internet"
    better_cooling = "better_cooling"
    ai_optimization = "ai_optimization"
    quantum_mining = "quantum_mining"
    click_upgrade = "click_upgrade"


CLICK_UPGRADE = UpgradeType.click_upgrade.value


@dataclass(frozen=True)
class AssetSpec:
    name: str
    base_cost: int
    base_capacity: float = 0.0
    fee_rate: float = 0.0
    staking_rate: float = 0.0


@dataclass(frozen=True)
class UpgradeSpec:
    name: str
    base_cost: int
    effect: float
    repeatable: bool = False


ASSETS: dict[str, AssetSpec] = {
    AssetType.gpu_miner.value: AssetSpec("GPU Miner", 15, base_capacity=1.0),
    AssetType.asic_farm.value: AssetSpec("ASIC Farm", 100, base_capacity=10.0),
    AssetType.mining_pool.value: AssetSpec("Mining Pool", 1_100, base_capacity=100.0),
    AssetType.crypto_exchange.value: AssetSpec("Crypto Exchange", 12_000, fee_rate=0.001),
    AssetType.nft_marketplace.value: AssetSpec("NFT Marketplace", 130_000, fee_rate=0.025),
    AssetType.defi_platform.value: AssetSpec("DeFi Platform", 1_400_000, staking_rate=0.0001),
}

UPGRADES: dict[str, UpgradeSpec] = {
    UpgradeType.faster_internet.value: UpgradeSpec("Faster Internet", 1_000, 1.05, repeatable=True),
    UpgradeType.better_cooling.value: UpgradeSpec("Better Cooling", 5_000, 1.07),
    UpgradeType.ai_optimization.value: UpgradeSpec("AI Optimization", 20_000, 1.1),
    UpgradeType.quantum_mining.value: UpgradeSpec("Quantum Mining", 1_000_000, 2.0),
    UpgradeType.click_upgrade.value: UpgradeSpec("Click Power", 500, 1.25, repeatable=True),
}

RANKS: list[tuple[str, float]] = [
    ("Novice Miner", 0),
    ("Blockchain Pioneer", 1e5),
    ("Crypto Enthusiast", 1e7),
    ("Mining Magnate", 1e9),
    ("Blockchain Tycoon", 1e11),
    ("Crypto Whale", 1e13),
    ("Digital Asset Mogul", 1e15),
    ("Crypto Overlord", 1e17),
]


def asset_spec(asset_type: str) -> AssetSpec:
    """Look up an asset definition, raising ValidationError for unknown types."""
    try:
        return ASSETS[asset_type]
    except KeyError:
        raise ValidationError(f"Unknown asset type: {asset_type!r}") from None


def upgrade_spec(upgrade_type: str) -> UpgradeSpec:
    """Look up an upgrade definition, raising ValidationError for unknown types."""
    try:
        return UPGRADES[upgrade_type]
    except KeyError:
        raise ValidationError(f"Unknown upgrade type: {upgrade_type!r}") from None


def rank_for(total_earned: int) -> str:
    """Return the highest rank whose threshold the lifetime earnings reach."""
    for name, threshold in reversed(RANKS):
        if total_earned >= threshold:
            return name
    return RANKS[0][0]
