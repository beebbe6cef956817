"""Selling back to the curve."""

import pytest

from launchpad import events as ev
from launchpad.errors import (
    InsufficientAllowance,
    InsufficientCirculatingSupply,
    TransferRejected,
    ZeroSellAmount,
)

from conftest import ALICE, CREATOR, FEES, STARTING_BALANCE, approve


class TestSell:

    def test_sell_pays_net_of_fee(self, engine, unlocked):
        engine.buy(unlocked, 10_000, 0, caller=ALICE)
        approve(engine, unlocked, ALICE, 5_000)

        currency_out = engine.sell(unlocked, 5_000, caller=ALICE)

        assert currency_out == 5_000
        assert engine.bank.balance_of(ALICE) == STARTING_BALANCE - 10_000 + 4_950
        assert engine.registry.ledger(unlocked).balance_of(ALICE) == 5_000
        assert engine.get_token_info(unlocked).current_supply == 25_000
        assert engine.volume(ALICE).sell_volume == 4_950
        assert engine.treasury.collected(unlocked) == 200 + 100 + 50

    def test_sell_emits_trade(self, engine, unlocked):
        approve(engine, unlocked, CREATOR, 1_000)
        engine.sell(unlocked, 1_000, caller=CREATOR)

        event = engine.events.last(ev.TRADED)
        assert event.data["direction"] == "sell"
        assert event.data["currency_amount"] == 1_000
        assert event.data["units_amount"] == 1_000

    def test_payout_capped_by_engine_balance(self, engine, unlocked):
        approve(engine, unlocked, CREATOR, 19_999)

        currency_out = engine.sell(unlocked, 19_999, caller=CREATOR)

        assert currency_out == 19_800
        assert engine.currency_balance() == 0
        assert engine.bank.balance_of(CREATOR) == STARTING_BALANCE - 20_000 + 19_602
        assert engine.bank.balance_of(FEES) == 200 + 198
        assert engine.get_token_info(unlocked).current_supply == 1

    def test_unit_burned_supply_shrinks(self, engine, unlocked):
        ledger = engine.registry.ledger(unlocked)
        before = ledger.total_supply
        approve(engine, unlocked, CREATOR, 500)
        engine.sell(unlocked, 500, caller=CREATOR)
        assert ledger.total_supply == before - 500


class TestSellRejections:

    def test_zero_amount(self, engine, unlocked):
        with pytest.raises(ZeroSellAmount):
            engine.sell(unlocked, 0, caller=CREATOR)

    def test_cannot_sell_entire_supply(self, engine, unlocked):
        approve(engine, unlocked, CREATOR, 20_000)
        with pytest.raises(InsufficientCirculatingSupply):
            engine.sell(unlocked, 20_000, caller=CREATOR)
        assert engine.get_token_info(unlocked).current_supply == 20_000

    def test_requires_allowance(self, engine, unlocked):
        engine.buy(unlocked, 1_000, 0, caller=ALICE)

        with pytest.raises(InsufficientAllowance):
            engine.sell(unlocked, 500, caller=ALICE)

        assert engine.get_token_info(unlocked).current_supply == 21_000
        assert engine.registry.ledger(unlocked).balance_of(ALICE) == 1_000

    def test_seller_refusal_rolls_back(self, engine, unlocked):
        engine.buy(unlocked, 10_000, 0, caller=ALICE)
        approve(engine, unlocked, ALICE, 5_000)
        engine.bank.set_receive_hook(ALICE, lambda sender, amount: False)
        balance = engine.bank.balance_of(ALICE)

        with pytest.raises(TransferRejected):
            engine.sell(unlocked, 5_000, caller=ALICE)

        ledger = engine.registry.ledger(unlocked)
        assert ledger.balance_of(ALICE) == 10_000
        assert ledger.allowance(ALICE, engine.address) == 5_000
        assert engine.bank.balance_of(ALICE) == balance
        assert engine.get_token_info(unlocked).current_supply == 30_000
        assert engine.volume(ALICE).sell_volume == 0
