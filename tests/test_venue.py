"""Liquidity venues: in-memory pools and the web3 router."""

import math
from unittest.mock import MagicMock, patch

import pytest

from launchpad.errors import LiquidityVenueError
from launchpad.ledger import AssetLedger
from launchpad.venue import MINIMUM_LIQUIDITY, InMemoryVenue, RouterVenue

from conftest import NOW

ASSET = "0x" + "ab" * 20
ROUTER = "0x" + "22" * 20
RECIPIENT = "0x" + "33" * 20


@pytest.fixture
def ledger():
    ledger = AssetLedger(ASSET, "Doge", "DOGE", minter="launchpad")
    ledger.mint("launchpad", 10_000_000, sender="launchpad")
    ledger.approve("venue", 10_000_000, sender="launchpad")
    return ledger


@pytest.fixture
def memory_venue(ledger):
    return InMemoryVenue(lambda asset_id: ledger, depositor="launchpad",
                         clock=lambda: NOW)


class TestInMemoryVenue:

    def test_first_deposit(self, memory_venue, ledger):
        units, currency, liquidity = memory_venue.add_liquidity(
            ASSET, 300_000, 300_000, 693_000, RECIPIENT, NOW + 300, 693_000)

        assert (units, currency) == (300_000, 693_000)
        assert liquidity == math.isqrt(300_000 * 693_000) - MINIMUM_LIQUIDITY
        assert memory_venue.pool(ASSET).liquidity == liquidity + MINIMUM_LIQUIDITY
        assert ledger.balance_of("venue") == 300_000

    def test_second_deposit_matches_ratio(self, memory_venue):
        memory_venue.add_liquidity(ASSET, 1_000_000, 0, 0, RECIPIENT, NOW, 2_000_000)
        units, currency, _ = memory_venue.add_liquidity(
            ASSET, 500_000, 0, 0, RECIPIENT, NOW, 2_000_000)
        assert (units, currency) == (500_000, 1_000_000)

    def test_all_or_nothing_minimums(self, memory_venue):
        memory_venue.add_liquidity(ASSET, 1_000_000, 0, 0, RECIPIENT, NOW, 2_000_000)
        with pytest.raises(LiquidityVenueError):
            memory_venue.add_liquidity(ASSET, 500_000, 0, 2_000_000, RECIPIENT, NOW, 2_000_000)

    def test_deadline(self, memory_venue):
        with pytest.raises(LiquidityVenueError, match="Deadline"):
            memory_venue.add_liquidity(ASSET, 1_000, 1_000, 1_000, RECIPIENT, NOW - 1, 1_000)

    def test_pull_without_allowance(self, ledger):
        venue = InMemoryVenue(lambda asset_id: ledger, depositor="launchpad",
                              address="other-venue", clock=lambda: NOW)
        with pytest.raises(LiquidityVenueError):
            venue.add_liquidity(ASSET, 300_000, 300_000, 693_000, RECIPIENT, NOW, 693_000)
        assert venue.pool(ASSET).units == 0

    def test_fail_reason(self, memory_venue):
        memory_venue.fail_reason = "paused"
        with pytest.raises(LiquidityVenueError, match="paused"):
            memory_venue.add_liquidity(ASSET, 1_000, 1_000, 1_000, RECIPIENT, NOW, 1_000)


@pytest.fixture
def w3():
    w3 = MagicMock()
    w3.eth.gas_price = 1_000_000_000
    w3.eth.chain_id = 84532
    w3.eth.get_code.return_value = bytes.fromhex("6080604052")
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("12" * 32)
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1}
    fn = w3.eth.contract.return_value.functions.addLiquidityETH.return_value
    fn.call.return_value = [300_000, 693_000, 455_000]
    fn.build_transaction.return_value = {"to": ROUTER}
    return w3


@pytest.fixture
def router_venue(w3):
    with patch("launchpad.venue.Account") as account_cls:
        account_cls.from_key.return_value.address = "0x" + "44" * 20
        yield RouterVenue(w3, ROUTER, "0x" + "11" * 32)


class TestRouterVenue:

    def test_add_liquidity(self, router_venue, w3):
        result = router_venue.add_liquidity(
            ASSET, 300_000, 300_000, 693_000, RECIPIENT, NOW, 693_000)

        assert result == (300_000, 693_000, 455_000)
        fn = w3.eth.contract.return_value.functions.addLiquidityETH.return_value
        tx = fn.build_transaction.call_args[0][0]
        assert tx["value"] == 693_000
        assert tx["nonce"] == 7
        assert tx["chainId"] == 84532
        w3.eth.wait_for_transaction_receipt.assert_called_once()

    def test_reverted_receipt(self, router_venue, w3):
        w3.eth.wait_for_transaction_receipt.return_value = {"status": 0}
        with pytest.raises(LiquidityVenueError, match="reverted"):
            router_venue.add_liquidity(ASSET, 1, 1, 1, RECIPIENT, NOW, 1)

    def test_simulation_failure(self, router_venue, w3):
        fn = w3.eth.contract.return_value.functions.addLiquidityETH.return_value
        fn.call.side_effect = Exception("execution reverted: INSUFFICIENT_A_AMOUNT")
        with pytest.raises(LiquidityVenueError, match="INSUFFICIENT_A_AMOUNT"):
            router_venue.add_liquidity(ASSET, 1, 1, 1, RECIPIENT, NOW, 1)
        w3.eth.send_raw_transaction.assert_not_called()

    def test_token_without_contract(self, router_venue, w3):
        w3.eth.get_code.return_value = b""
        with pytest.raises(LiquidityVenueError, match="No token contract"):
            router_venue.add_liquidity(ASSET, 1, 1, 1, RECIPIENT, NOW, 1)
        fn = w3.eth.contract.return_value.functions.addLiquidityETH.return_value
        fn.call.assert_not_called()
        w3.eth.send_raw_transaction.assert_not_called()

    def test_token_lookup_failure(self, router_venue, w3):
        w3.eth.get_code.side_effect = ConnectionError("rpc down")
        with pytest.raises(LiquidityVenueError, match="rpc down"):
            router_venue.add_liquidity(ASSET, 1, 1, 1, RECIPIENT, NOW, 1)
        w3.eth.send_raw_transaction.assert_not_called()
