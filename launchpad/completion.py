"""
Launchpad SDK - Completion Coordinator

ACTIVE -> COMPLETED, one way. Triggered automatically by the buy that
brings supply to bonding_max, or manually by the authority. Migration runs
inside the same atomic unit, so a failed migration undoes the trigger too.
"""

import logging

from . import events as ev
from .curve import price
from .errors import AlreadyCompleted
from .events import EventLog
from .launch_types import LaunchParams, TokenRecord
from .migrator import LiquidityMigrator

log = logging.getLogger(__name__)


class CompletionCoordinator:

    def __init__(self, params: LaunchParams, migrator: LiquidityMigrator,
                 events: EventLog):
        self.params = params
        self.migrator = migrator
        self.events = events

    def should_complete(self, record: TokenRecord) -> bool:
        return not record.completed and record.current_supply >= self.params.bonding_max

    def complete(self, record: TokenRecord, recipient: str) -> None:
        """Flip to COMPLETED, capture the final price, and migrate."""
        if record.completed:
            raise AlreadyCompleted(f"{record.symbol} already completed")

        record.completed = True
        record.final_price = price(record.current_supply, self.params)
        units, currency, liquidity = self.migrator.migrate(record, recipient)

        self.events.emit(ev.COMPLETED,
                         asset_id=record.asset_id,
                         final_supply=record.current_supply,
                         final_price=record.final_price)
        self.events.emit(ev.LIQUIDITY_ADDED,
                         asset_id=record.asset_id,
                         units=units,
                         currency=currency,
                         liquidity=liquidity,
                         recipient=recipient)
        log.info(f"Completed {record.symbol} at supply {record.current_supply}, "
                 f"final price {record.final_price}")
