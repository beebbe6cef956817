"""
Shared fixtures.

SMALL_PARAMS keeps the numbers readable: step_size is so large that the
price stays flat at 1.0 for the whole launch, so 1 currency buys 1 unit.

    max_supply 1_000_000   bonding_max 700_000   reserve 300_000
    creator_cap 140_000    unlock_threshold 20_000   fee 1%
"""

import pytest

from launchpad.engine import BondingCurveEngine
from launchpad.launch_types import SCALE, LaunchParams
from launchpad.ledger import CurrencyBank
from launchpad.venue import InMemoryVenue

SMALL_PARAMS = LaunchParams(max_supply=1_000_000, initial_price=SCALE, step_size=10 ** 30)

OWNER = "0xowner"
FEES = "0xfees"
CREATOR = "0xcreator"
ALICE = "0xalice"
BOB = "0xbob"

NOW = 1_700_000_000
STARTING_BALANCE = 10_000_000


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def bank():
    bank = CurrencyBank()
    for address in (CREATOR, ALICE, BOB):
        bank.fund(address, STARTING_BALANCE)
    return bank


@pytest.fixture
def engine(bank, clock):
    engine = BondingCurveEngine(params=SMALL_PARAMS, bank=bank, authority=OWNER,
                                fee_recipient=FEES, clock=clock)
    venue = InMemoryVenue(engine.registry.ledger, depositor=engine.address, clock=clock)
    engine.set_venue(venue, caller=OWNER)
    return engine


@pytest.fixture
def venue(engine):
    return engine.venue


@pytest.fixture
def asset(engine):
    return engine.create_token("Doge", "DOGE", "ipfs://doge", caller=CREATOR)


@pytest.fixture
def unlocked(engine, asset):
    """Creator bought exactly the unlock threshold (20_000 units)."""
    engine.buy(asset, 20_000, 0, caller=CREATOR)
    return asset


def approve(engine, asset_id, owner, amount):
    engine.registry.ledger(asset_id).approve(engine.address, amount, sender=owner)
