"""
Launchpad SDK - Bonding Curve Engine

Entry point for every operation on the launchpad. Each mutating call runs
as one atomic unit under the engine's execution lock (see guard.py):
either all of its effects land, including a completion-triggered
migration, or none do.
"""

import logging
import time
from typing import Callable, List, Optional

from . import events as ev
from .completion import CompletionCoordinator
from .curve import BuyQuote, SellQuote, fee_of, price, quote_buy, quote_sell
from .errors import (
    InsufficientCirculatingSupply,
    LaunchCompleted,
    NoReserveToWithdraw,
    SlippageExceeded,
    SupplyCapExceeded,
    UnauthorizedCaller,
    ZeroSellAmount,
    ZeroTokensComputed,
    ZeroValueSent,
)
from .events import EventLog
from .gate import LockGate
from .guard import AtomicUnit, ExecutionLock, Journaled
from .launch_types import SCALE, LaunchParams, TokenRecord, TradeDirection, UserVolume
from .ledger import CurrencyBank
from .migrator import LiquidityMigrator
from .registry import TokenRegistry
from .treasury import FeeTreasury, VolumeLedger
from .venue import LiquidityVenue

log = logging.getLogger(__name__)


class BondingCurveEngine(Journaled):
    """
    Bonding-curve launchpad.

    Usage:
        bank = CurrencyBank()
        engine = BondingCurveEngine(bank=bank, authority="0xowner",
                                    fee_recipient="0xfees")
        asset_id = engine.create_token("Doge", "DOGE", "", caller="0xcreator")
        units = engine.buy(asset_id, 1533 * 10**18, 0, caller="0xcreator")
        engine.sell(asset_id, units // 2, caller="0xcreator")
    """

    def __init__(self, params: Optional[LaunchParams] = None,
                 bank: Optional[CurrencyBank] = None,
                 address: str = "launchpad",
                 authority: str = "",
                 fee_recipient: str = "",
                 venue: Optional[LiquidityVenue] = None,
                 clock: Callable[[], float] = time.time):
        """
        Initialize the engine.

        Args:
            params: Curve parameters (defaults: 1B supply, 0.0001533 start price)
            bank: Currency bank (a fresh one if omitted)
            address: Custody identity holding reserves and collected currency
            authority: Identity allowed to run privileged operations
            fee_recipient: Receiver of trade fees (defaults to authority)
            venue: Liquidity venue for completed launches
            clock: Time source
        """
        self.params = params or LaunchParams()
        self.bank = bank or CurrencyBank()
        self.address = address
        self.authority = authority
        self.clock = clock

        self.registry = TokenRegistry(self.params, custody=address, clock=clock)
        self.gate = LockGate(self.params)
        self.treasury = FeeTreasury(self.bank, source=address,
                                    recipient=fee_recipient or authority)
        self.volumes = VolumeLedger()
        self.events = EventLog(clock=clock)
        self.migrator = LiquidityMigrator(self.registry, self.bank, address,
                                          venue=venue, clock=clock)
        self.coordinator = CompletionCoordinator(self.params, self.migrator, self.events)

        self.lock = ExecutionLock()
        self._unit = AtomicUnit(self.lock)

    # ═══════════════════════════════════════════════════════════════════════
    # ATOMIC UNITS
    # ═══════════════════════════════════════════════════════════════════════

    def snapshot(self):
        return self.authority, self.migrator.venue

    def restore(self, snapshot) -> None:
        self.authority, self.migrator.venue = snapshot

    def _participants(self) -> List[Journaled]:
        participants = [self, self.registry, self.bank, self.treasury,
                        self.volumes, self.events]
        if isinstance(self.migrator.venue, Journaled):
            participants.append(self.migrator.venue)
        return participants

    def _atomic(self, operation: str):
        return self._unit.run(operation, self._participants())

    def _only_authority(self, caller: str) -> None:
        if not self.authority or caller != self.authority:
            raise UnauthorizedCaller(f"{caller} is not the authority")

    # ═══════════════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def venue(self) -> Optional[LiquidityVenue]:
        return self.migrator.venue

    @property
    def fee_recipient(self) -> str:
        return self.treasury.recipient

    def get_token_info(self, asset_id: str) -> TokenRecord:
        return self.registry.get_token_info(asset_id)

    def get_all_tokens(self) -> List[str]:
        return self.registry.get_all_tokens()

    def current_price(self, asset_id: str) -> int:
        return price(self.registry.get(asset_id).current_supply, self.params)

    def currency_balance(self) -> int:
        """Currency held by the engine (shared by every launch)."""
        return self.bank.balance_of(self.address)

    def quote_buy(self, asset_id: str, currency_in: int) -> BuyQuote:
        record = self.registry.get(asset_id)
        return quote_buy(currency_in, record.current_supply, self.params)

    def quote_sell(self, asset_id: str, units_in: int) -> SellQuote:
        record = self.registry.get(asset_id)
        return quote_sell(units_in, record.current_supply,
                          available=self.currency_balance(), params=self.params)

    def volume(self, address: str) -> UserVolume:
        return self.volumes.volume(address)

    def status(self) -> dict:
        return {
            "address": self.address,
            "authority": self.authority,
            "fee_recipient": self.fee_recipient,
            "venue": self.venue.address if self.venue else None,
            "locked": self.lock.locked,
            "tokens": len(self.registry.records),
            "currency_balance": self.currency_balance(),
            "fees_collected": self.treasury.total_collected,
            "params": self.params.to_dict(),
        }

    # ═══════════════════════════════════════════════════════════════════════
    # LAUNCH
    # ═══════════════════════════════════════════════════════════════════════

    def create_token(self, name: str, symbol: str, metadata: str,
                     caller: str) -> str:
        """
        Launch a new asset with `caller` as its creator.

        Returns:
            The new asset id

        Raises:
            EmptyName, EmptySymbol
        """
        with self._atomic("create_token"):
            record = self.registry.create_token(name, symbol, metadata, caller)
            self.events.emit(ev.LAUNCH_CREATED,
                             asset_id=record.asset_id,
                             name=record.name,
                             symbol=record.symbol,
                             metadata=record.metadata,
                             creator=record.creator)
        return record.asset_id

    # ═══════════════════════════════════════════════════════════════════════
    # ACCOUNTS
    # ═══════════════════════════════════════════════════════════════════════

    def fund(self, address: str, amount: int) -> int:
        """
        Credit currency to `address` from outside the system (faucet).

        Returns:
            The address's new currency balance
        """
        with self._atomic("fund"):
            self.bank.fund(address, amount)
            balance = self.bank.balance_of(address)
        return balance

    def approve(self, asset_id: str, amount: int, caller: str) -> int:
        """
        Set the engine's allowance over `caller`'s units of `asset_id`.

        A sell burns through this allowance.

        Returns:
            The approved amount
        """
        with self._atomic("approve"):
            self.registry.ledger(asset_id).approve(self.address, amount, sender=caller)
        return amount

    # ═══════════════════════════════════════════════════════════════════════
    # TRADING
    # ═══════════════════════════════════════════════════════════════════════

    def buy(self, asset_id: str, currency_in: int, min_units_out: int,
            caller: str) -> int:
        """
        Buy units at the current curve price.

        Args:
            asset_id: Launch to buy
            currency_in: Currency the caller pays (pulled from their balance)
            min_units_out: Slippage floor
            caller: Buyer identity

        Returns:
            Units minted to the caller

        Raises:
            LaunchCompleted, ZeroValueSent, TokenLocked, CreatorCapExceeded,
            ZeroTokensComputed, SlippageExceeded, SupplyCapExceeded,
            TransferRejected, and any migration failure when this buy
            completes the launch
        """
        with self._atomic("buy"):
            record = self.registry.get(asset_id)
            if record.completed:
                raise LaunchCompleted(f"{record.symbol} has completed")
            if currency_in <= 0:
                raise ZeroValueSent("Buy requires currency")
            self.gate.check_access(record, caller)

            spot = price(record.current_supply, self.params)
            units_out = currency_in * SCALE // spot
            self.gate.check(record, caller, units_out)
            if units_out == 0:
                raise ZeroTokensComputed(f"{currency_in} buys 0 units at price {spot}")
            if units_out < min_units_out:
                raise SlippageExceeded(f"{units_out} units < minimum {min_units_out}")
            if record.current_supply + units_out > self.params.bonding_max:
                raise SupplyCapExceeded(
                    f"{record.current_supply} + {units_out} exceeds {self.params.bonding_max}")

            self.bank.send(caller, self.address, currency_in)
            record.current_supply += units_out
            if self.gate.record_purchase(record, caller, units_out):
                self.events.emit(ev.UNLOCKED,
                                 asset_id=asset_id,
                                 creator=record.creator,
                                 cumulative_purchased=record.creator_purchased)
                log.info(f"{record.symbol} unlocked at {record.creator_purchased} creator units")

            fee = fee_of(currency_in, self.params)
            self.treasury.forward(asset_id, fee)
            self.registry.ledger(asset_id).mint(caller, units_out, sender=self.address)
            self.events.emit(ev.TRADED,
                             asset_id=asset_id,
                             trader=caller,
                             currency_amount=currency_in,
                             units_amount=units_out,
                             new_price=price(record.current_supply, self.params),
                             direction=TradeDirection.BUY.value)

            if self.coordinator.should_complete(record):
                self.coordinator.complete(record, recipient=self.authority)

            self.volumes.record_buy(asset_id, caller, currency_in, currency_in - fee)
        return units_out

    def sell(self, asset_id: str, units_in: int, caller: str) -> int:
        """
        Sell units back to the curve.

        The caller must have approved the engine on the asset ledger for at
        least `units_in`, since the units are burned on their behalf.

        Returns:
            Currency owed for the units before the fee (the seller receives
            this minus the fee)

        Raises:
            LaunchCompleted, ZeroSellAmount, InsufficientCirculatingSupply,
            InsufficientAllowance, InsufficientBalance, TransferRejected
        """
        with self._atomic("sell"):
            record = self.registry.get(asset_id)
            if record.completed:
                raise LaunchCompleted(f"{record.symbol} has completed")
            if units_in <= 0:
                raise ZeroSellAmount("Sell requires units")

            spot = price(record.current_supply, self.params)
            currency_out = min(units_in * spot // SCALE, self.currency_balance())
            if record.current_supply <= units_in:
                raise InsufficientCirculatingSupply(
                    f"Cannot sell {units_in} of {record.current_supply} circulating")

            record.current_supply -= units_in
            self.registry.ledger(asset_id).burn_from(caller, units_in, sender=self.address)

            fee = fee_of(currency_out, self.params)
            net = currency_out - fee
            self.bank.send(self.address, caller, net)
            self.treasury.forward(asset_id, fee)
            self.volumes.record_sell(asset_id, caller, net)
            self.events.emit(ev.TRADED,
                             asset_id=asset_id,
                             trader=caller,
                             currency_amount=currency_out,
                             units_amount=units_in,
                             new_price=price(record.current_supply, self.params),
                             direction=TradeDirection.SELL.value)
        return currency_out

    # ═══════════════════════════════════════════════════════════════════════
    # PRIVILEGED
    # ═══════════════════════════════════════════════════════════════════════

    def complete(self, asset_id: str, caller: str) -> None:
        """Force completion and migration before the supply threshold."""
        with self._atomic("complete"):
            self._only_authority(caller)
            record = self.registry.get(asset_id)
            self.coordinator.complete(record, recipient=self.authority)

    def approve_reserve(self, asset_id: str, spender: str, caller: str) -> int:
        """
        Let `spender` move the held reserve out of custody.

        Returns:
            Approved amount
        """
        with self._atomic("approve_reserve"):
            self._only_authority(caller)
            record = self.registry.get(asset_id)
            if record.held_reserve == 0:
                raise NoReserveToWithdraw(f"{record.symbol} has no held reserve")
            self.registry.ledger(asset_id).approve(
                spender, record.held_reserve, sender=self.address)
            self.events.emit(ev.RESERVE_APPROVED,
                             asset_id=asset_id,
                             spender=spender,
                             amount=record.held_reserve)
        return record.held_reserve

    def withdraw_reserve(self, asset_id: str, caller: str) -> int:
        """
        Transfer the held reserve to the authority and zero it.

        Returns:
            Withdrawn amount

        Raises:
            UnauthorizedCaller, NoReserveToWithdraw, InsufficientBalance
        """
        with self._atomic("withdraw_reserve"):
            self._only_authority(caller)
            record = self.registry.get(asset_id)
            amount = record.held_reserve
            if amount == 0:
                raise NoReserveToWithdraw(f"{record.symbol} has no held reserve")
            self.registry.ledger(asset_id).transfer(self.authority, amount, sender=self.address)
            record.held_reserve = 0
            self.events.emit(ev.RESERVE_WITHDRAWN,
                             asset_id=asset_id,
                             authority=self.authority,
                             amount=amount)
            log.info(f"Withdrew {amount} {record.symbol} reserve to {self.authority}")
        return amount

    def transfer_authority(self, new_authority: str, caller: str) -> None:
        with self._atomic("transfer_authority"):
            self._only_authority(caller)
            if not new_authority:
                raise ValueError("New authority must not be empty")
            previous, self.authority = self.authority, new_authority
            self.events.emit(ev.AUTHORITY_TRANSFERRED,
                             previous=previous,
                             authority=new_authority)

    def set_venue(self, venue: Optional[LiquidityVenue], caller: str) -> None:
        with self._atomic("set_venue"):
            self._only_authority(caller)
            self.migrator.venue = venue

    def set_fee_recipient(self, recipient: str, caller: str) -> None:
        with self._atomic("set_fee_recipient"):
            self._only_authority(caller)
            if not recipient:
                raise ValueError("Fee recipient must not be empty")
            self.treasury.recipient = recipient
