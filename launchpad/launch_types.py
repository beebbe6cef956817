"""
Launchpad SDK - Data Types

Token records, launch parameters and per-trader volume.

All amounts are integers. Asset units and currency are both scaled by 1e18,
prices are fixed-point currency-per-unit with the same 1e18 scale.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict
import hashlib
import json
import time

SCALE = 10 ** 18


class LaunchState(Enum):
    """Launch state: ACTIVE trades on the curve, COMPLETED has migrated."""
    ACTIVE = "active"
    COMPLETED = "completed"


class TradeDirection(Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class LaunchParams:
    """
    Curve parameters shared by every launch of one engine.

    Percentages are whole numbers applied with truncating integer division:
      - reserve_percent: minted at launch and held for migration
      - bonding_percent: sold through the curve (bonding_max)
      - creator_cap_percent: share of bonding_max the creator may buy
      - unlock_percent: share of max_supply the creator must buy to unlock
    """
    max_supply: int = 1_000_000_000 * SCALE
    initial_price: int = 153_300_000_000_000       # 0.0001533 currency/unit
    step_size: int = 10_000_000 * SCALE
    fee_percent: int = 1
    reserve_percent: int = 30
    bonding_percent: int = 70
    creator_cap_percent: int = 20
    unlock_percent: int = 2

    def __post_init__(self):
        if self.max_supply <= 0:
            raise ValueError("max_supply must be positive")
        if self.initial_price <= 0:
            raise ValueError("initial_price must be positive")
        if self.step_size <= 0:
            raise ValueError("step_size must be positive")
        if not 0 <= self.fee_percent < 100:
            raise ValueError(f"fee_percent out of range: {self.fee_percent}")

    @property
    def bonding_max(self) -> int:
        return self.max_supply * self.bonding_percent // 100

    @property
    def reserve_amount(self) -> int:
        return self.max_supply * self.reserve_percent // 100

    @property
    def creator_cap(self) -> int:
        return self.bonding_max * self.creator_cap_percent // 100

    @property
    def unlock_threshold(self) -> int:
        return self.max_supply * self.unlock_percent // 100

    def to_dict(self) -> dict:
        return {
            "max_supply": self.max_supply,
            "initial_price": self.initial_price,
            "step_size": self.step_size,
            "fee_percent": self.fee_percent,
            "reserve_percent": self.reserve_percent,
            "bonding_percent": self.bonding_percent,
            "creator_cap_percent": self.creator_cap_percent,
            "unlock_percent": self.unlock_percent,
            "bonding_max": self.bonding_max,
            "creator_cap": self.creator_cap,
            "unlock_threshold": self.unlock_threshold,
        }

    @classmethod
    def from_config(cls, curve: Dict[str, Any]) -> "LaunchParams":
        """Build from the `curve` section of the config (values may be strings)."""
        defaults = cls()
        kwargs = {}
        for name in ("max_supply", "initial_price", "step_size", "fee_percent",
                     "reserve_percent", "bonding_percent",
                     "creator_cap_percent", "unlock_percent"):
            kwargs[name] = int(curve.get(name, getattr(defaults, name)))
        return cls(**kwargs)


@dataclass
class TokenRecord:
    """
    One launched asset.

    Structure:
      - asset_id: Ledger address of the asset ("0x" + 40 hex)
      - name, symbol, metadata: Display data (metadata is opaque)
      - creator: Identity that launched the asset
      - held_reserve: Units held by the engine for migration
      - max_supply: Fixed total supply for this launch
      - current_supply: Units sold through the curve
      - completed: One-way, set when the launch migrates
      - unlocked: One-way, set once the creator bought the unlock share
      - creator_purchased: Cumulative units bought by the creator
      - final_price: Curve price captured at completion (0 while active)
    """
    asset_id: str
    name: str
    symbol: str
    metadata: str
    creator: str
    held_reserve: int
    max_supply: int
    current_supply: int = 0
    completed: bool = False
    unlocked: bool = False
    creator_purchased: int = 0
    final_price: int = 0
    creation_timestamp: int = field(default_factory=lambda: int(time.time()))

    @property
    def state(self) -> LaunchState:
        return LaunchState.COMPLETED if self.completed else LaunchState.ACTIVE

    def copy(self) -> "TokenRecord":
        return replace(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "asset_id": self.asset_id,
            "name": self.name,
            "symbol": self.symbol,
            "metadata": self.metadata,
            "creator": self.creator,
            "held_reserve": self.held_reserve,
            "max_supply": self.max_supply,
            "current_supply": self.current_supply,
            "completed": self.completed,
            "unlocked": self.unlocked,
            "creator_purchased": self.creator_purchased,
            "final_price": self.final_price,
            "creation_timestamp": self.creation_timestamp,
            "state": self.state.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TokenRecord":
        """Create TokenRecord from dictionary (amounts may be strings)."""
        return cls(
            asset_id=data["asset_id"],
            name=data["name"],
            symbol=data["symbol"],
            metadata=data.get("metadata", ""),
            creator=data["creator"],
            held_reserve=int(data["held_reserve"]),
            max_supply=int(data["max_supply"]),
            current_supply=int(data.get("current_supply", 0)),
            completed=bool(data.get("completed", False)),
            unlocked=bool(data.get("unlocked", False)),
            creator_purchased=int(data.get("creator_purchased", 0)),
            final_price=int(data.get("final_price", 0)),
            creation_timestamp=int(data.get("creation_timestamp", time.time())),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class UserVolume:
    """Cumulative currency a trader has spent buying and received selling."""
    buy_volume: int = 0
    sell_volume: int = 0

    def to_dict(self) -> dict:
        return {"buy_volume": self.buy_volume, "sell_volume": self.sell_volume}


def compute_asset_id(name: str, symbol: str, creator: str, nonce: int) -> str:
    """Compute a deterministic ledger address for a new launch."""
    data = f"{name}:{symbol}:{creator}:{nonce}"
    return "0x" + hashlib.sha256(data.encode()).hexdigest()[:40]
