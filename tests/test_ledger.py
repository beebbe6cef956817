"""Asset ledger, currency bank, fee treasury, volume ledger."""

import pytest

from launchpad.errors import (
    InsufficientAllowance,
    InsufficientBalance,
    ReentrantCallRejected,
    TransferRejected,
    UnauthorizedCaller,
)
from launchpad.ledger import AssetLedger, CurrencyBank
from launchpad.treasury import FeeTreasury, VolumeLedger


@pytest.fixture
def ledger():
    ledger = AssetLedger("0xasset", "Doge", "DOGE", minter="launchpad")
    ledger.mint("0xalice", 1_000, sender="launchpad")
    return ledger


class TestAssetLedger:

    def test_only_minter_mints(self, ledger):
        with pytest.raises(UnauthorizedCaller):
            ledger.mint("0xalice", 1, sender="0xalice")
        assert ledger.total_supply == 1_000

    def test_transfer(self, ledger):
        assert ledger.transfer("0xbob", 400, sender="0xalice") is True
        assert ledger.balance_of("0xalice") == 600
        assert ledger.balance_of("0xbob") == 400

    def test_transfer_insufficient(self, ledger):
        with pytest.raises(InsufficientBalance):
            ledger.transfer("0xbob", 1_001, sender="0xalice")

    def test_transfer_from_spends_allowance(self, ledger):
        ledger.approve("0xspender", 500, sender="0xalice")
        ledger.transfer_from("0xalice", "0xbob", 300, sender="0xspender")
        assert ledger.allowance("0xalice", "0xspender") == 200
        with pytest.raises(InsufficientAllowance):
            ledger.transfer_from("0xalice", "0xbob", 201, sender="0xspender")

    def test_burn_from(self, ledger):
        ledger.approve("launchpad", 1_000, sender="0xalice")
        ledger.burn_from("0xalice", 250, sender="launchpad")
        assert ledger.balance_of("0xalice") == 750
        assert ledger.total_supply == 750

    def test_amount_validation(self, ledger):
        with pytest.raises(ValueError):
            ledger.transfer("0xbob", -1, sender="0xalice")
        with pytest.raises(TypeError):
            ledger.transfer("0xbob", 1.5, sender="0xalice")
        with pytest.raises(TypeError):
            ledger.transfer("0xbob", True, sender="0xalice")

    def test_snapshot_restore(self, ledger):
        snap = ledger.snapshot()
        ledger.transfer("0xbob", 400, sender="0xalice")
        ledger.restore(snap)
        assert ledger.balance_of("0xalice") == 1_000
        assert ledger.balance_of("0xbob") == 0


class TestCurrencyBank:

    def test_send(self):
        bank = CurrencyBank()
        bank.fund("0xa", 100)
        bank.send("0xa", "0xb", 40)
        assert (bank.balance_of("0xa"), bank.balance_of("0xb")) == (60, 40)

    def test_send_insufficient(self):
        bank = CurrencyBank()
        with pytest.raises(InsufficientBalance):
            bank.send("0xa", "0xb", 1)

    def test_hook_refusal(self):
        bank = CurrencyBank()
        bank.fund("0xa", 100)
        bank.set_receive_hook("0xb", lambda sender, amount: False)
        with pytest.raises(TransferRejected):
            bank.send("0xa", "0xb", 40)

    def test_hook_error_is_chained(self):
        bank = CurrencyBank()
        bank.fund("0xa", 100)

        def hook(sender, amount):
            raise ReentrantCallRejected("nested")

        bank.set_receive_hook("0xb", hook)
        with pytest.raises(TransferRejected) as excinfo:
            bank.send("0xa", "0xb", 40)
        assert isinstance(excinfo.value.__cause__, ReentrantCallRejected)

    def test_unexpected_hook_error_becomes_rejection(self):
        bank = CurrencyBank()
        bank.fund("0xa", 100)

        def hook(sender, amount):
            raise RuntimeError("contract reverted")

        bank.set_receive_hook("0xb", hook)
        with pytest.raises(TransferRejected) as excinfo:
            bank.send("0xa", "0xb", 40)
        assert isinstance(excinfo.value.__cause__, RuntimeError)

    def test_hook_sees_sender_and_amount(self):
        bank = CurrencyBank()
        bank.fund("0xa", 100)
        calls = []
        bank.set_receive_hook("0xb", lambda sender, amount: calls.append((sender, amount)))
        bank.send("0xa", "0xb", 40)
        assert calls == [("0xa", 40)]


class TestFeeTreasury:

    def test_forward(self):
        bank = CurrencyBank()
        bank.fund("launchpad", 1_000)
        treasury = FeeTreasury(bank, source="launchpad", recipient="0xfees")

        treasury.forward("0xasset", 0)
        assert bank.balance_of("0xfees") == 0

        treasury.forward("0xasset", 10)
        treasury.forward("0xother", 5)
        assert bank.balance_of("0xfees") == 15
        assert treasury.total_collected == 15
        assert treasury.collected("0xasset") == 10


class TestVolumeLedger:

    def test_records(self):
        volumes = VolumeLedger()
        volumes.record_buy("0xa", "0xalice", 1_000, 990)
        volumes.record_buy("0xa", "0xbob", 500, 495)
        volumes.record_buy("0xa", "0xalice", 100, 99)
        volumes.record_sell("0xa", "0xalice", 200)

        assert volumes.volume("0xalice").to_dict() == {"buy_volume": 1_100, "sell_volume": 200}
        assert volumes.volume("0xnobody").buy_volume == 0
        assert volumes.total_value_traded["0xa"] == 990 + 495 + 99 + 200
        assert volumes.trade_count["0xa"] == 4
        assert volumes.holder_list("0xa") == ["0xalice", "0xbob"]

    def test_restore(self):
        volumes = VolumeLedger()
        volumes.record_buy("0xa", "0xalice", 1_000, 990)
        snap = volumes.snapshot()
        volumes.record_buy("0xa", "0xalice", 1_000, 990)
        volumes.restore(snap)
        assert volumes.volume("0xalice").buy_volume == 1_000
        assert volumes.trade_count["0xa"] == 1
