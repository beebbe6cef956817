"""
Launchpad SDK

Bonding-curve launchpad: anyone launches a fungible asset, trades it
against a quadratic price curve, and once enough supply is sold the
launch completes and its reserve plus collected currency migrate into a
constant-product liquidity venue.

Architecture:
  - BondingCurveEngine is the only entry point for mutations
  - Every mutation is one atomic unit under a non-reentrant lock
  - Ledgers, currency bank and venues are in-process by default; the
    RouterVenue migrates to a Uniswap-V2-style router on an EVM chain

Launch lifecycle:
  - Created:   reserve (30%) minted to custody, creator-only trading
  - Unlocked:  creator bought 2% of max supply, anyone may trade
  - Completed: supply reached 70% of max, liquidity migrated, trading closed

Usage:
    from launchpad import BondingCurveEngine, CurrencyBank, InMemoryVenue

    bank = CurrencyBank()
    engine = BondingCurveEngine(bank=bank, authority="0xowner")
    engine.set_venue(InMemoryVenue(engine.registry.ledger,
                                   depositor=engine.address), caller="0xowner")

    bank.fund("0xcreator", 10**22)
    asset_id = engine.create_token("Doge", "DOGE", "", caller="0xcreator")
    units = engine.buy(asset_id, 1533 * 10**18, 0, caller="0xcreator")
"""

from .launch_types import (
    SCALE,
    LaunchParams,
    LaunchState,
    TokenRecord,
    TradeDirection,
    UserVolume,
)
from .errors import LaunchpadError, ERRORS_BY_CODE
from .curve import price, fee_of, quote_buy, quote_sell, price_table, format_amount
from .ledger import AssetLedger, CurrencyBank
from .events import Event, EventLog
from .engine import BondingCurveEngine
from .venue import LiquidityVenue, InMemoryVenue, RouterVenue
from .client import LaunchpadClient, APIError
from .config import DEFAULT_CONFIG, load_config

__version__ = "0.1.0"
__all__ = [
    # Types
    "SCALE", "LaunchParams", "LaunchState", "TokenRecord", "TradeDirection",
    "UserVolume",
    # Errors
    "LaunchpadError", "ERRORS_BY_CODE", "APIError",
    # Curve
    "price", "fee_of", "quote_buy", "quote_sell", "price_table", "format_amount",
    # Core
    "BondingCurveEngine", "AssetLedger", "CurrencyBank", "Event", "EventLog",
    "LiquidityVenue", "InMemoryVenue", "RouterVenue",
    # Client / config
    "LaunchpadClient", "DEFAULT_CONFIG", "load_config",
]
