"""
Launchpad SDK - Liquidity Migrator

Hands a completed launch's held reserve and the engine's currency balance
to the liquidity venue in one all-or-nothing leg: desired and minimum
amounts are identical, so the venue either takes everything or fails.

Exactly `held_reserve` units are migrated. Any other balance the engine
holds of the asset is left untouched (nothing is burned first).
"""

import logging
import time
from typing import Callable, Optional

from .errors import NoLiquidityAvailable, VenueNotConfigured
from .launch_types import TokenRecord
from .ledger import CurrencyBank
from .registry import TokenRegistry
from .venue import LiquidityResult, LiquidityVenue

log = logging.getLogger(__name__)

DEADLINE_SECONDS = 300


class LiquidityMigrator:

    def __init__(self, registry: TokenRegistry, bank: CurrencyBank,
                 custody: str, venue: Optional[LiquidityVenue] = None,
                 clock: Callable[[], float] = time.time):
        self.registry = registry
        self.bank = bank
        self.custody = custody
        self.venue = venue
        self.clock = clock

    def migrate(self, record: TokenRecord, recipient: str) -> LiquidityResult:
        """
        Move reserve + currency into the venue and zero the held reserve.

        Args:
            record: Launch being completed (mutated in place)
            recipient: Receiver of the issued liquidity

        Returns:
            (units_used, currency_used, liquidity_issued) from the venue

        Raises:
            NoLiquidityAvailable: no reserve or no currency to migrate
            VenueNotConfigured: no venue set
            LiquidityVenueError, TransferRejected: venue or transfer failure
        """
        units = record.held_reserve
        currency = self.bank.balance_of(self.custody)
        if units <= 0 or currency <= 0:
            raise NoLiquidityAvailable(
                f"Nothing to migrate for {record.symbol}: "
                f"{units} units, {currency} currency")
        if self.venue is None:
            raise VenueNotConfigured("No liquidity venue configured")

        ledger = self.registry.ledger(record.asset_id)
        ledger.approve(self.venue.address, units, sender=self.custody)
        self.bank.send(self.custody, self.venue.address, currency)

        deadline = int(self.clock()) + DEADLINE_SECONDS
        result = self.venue.add_liquidity(
            record.asset_id, units, units, currency, recipient, deadline, currency)

        record.held_reserve = 0
        log.info(f"Migrated {record.symbol}: {units} units + {currency} currency "
                 f"-> {self.venue.address}")
        return result
