"""
Launchpad SDK - Liquidity Venues

Where a completed launch's reserve and collected currency end up.

  - InMemoryVenue: constant-product pool book kept in process (tests, demos)
  - RouterVenue:   Uniswap-V2-style router on an EVM chain via web3

Both expose:

    add_liquidity(asset_id, units_desired, units_min, currency_min,
                  recipient, deadline, currency_value)
        -> (units_used, currency_used, liquidity_issued)

and raise LiquidityVenueError for any venue-side failure.
"""

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from eth_account import Account
from web3 import Web3

from .errors import LaunchpadError, LiquidityVenueError
from .guard import Journaled
from .ledger import AssetLedger

log = logging.getLogger(__name__)

MINIMUM_LIQUIDITY = 1000

# Uniswap V2 router, addLiquidityETH only
ROUTER_ABI = [
    {
        "inputs": [
            {"name": "token", "type": "address"},
            {"name": "amountTokenDesired", "type": "uint256"},
            {"name": "amountTokenMin", "type": "uint256"},
            {"name": "amountETHMin", "type": "uint256"},
            {"name": "to", "type": "address"},
            {"name": "deadline", "type": "uint256"}
        ],
        "name": "addLiquidityETH",
        "outputs": [
            {"name": "amountToken", "type": "uint256"},
            {"name": "amountETH", "type": "uint256"},
            {"name": "liquidity", "type": "uint256"}
        ],
        "stateMutability": "payable",
        "type": "function"
    }
]

LiquidityResult = Tuple[int, int, int]


class LiquidityVenue:
    """Venue contract. `address` is the spender the migrator approves."""
    address: str = ""

    def add_liquidity(self, asset_id: str, units_desired: int, units_min: int,
                      currency_min: int, recipient: str, deadline: int,
                      currency_value: int) -> LiquidityResult:
        raise NotImplementedError


# ═══════════════════════════════════════════════════════════════════════════
# IN-MEMORY POOLS
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class Pool:
    units: int = 0
    currency: int = 0
    liquidity: int = 0

    def to_dict(self) -> dict:
        return {"units": self.units, "currency": self.currency,
                "liquidity": self.liquidity}


class InMemoryVenue(LiquidityVenue, Journaled):
    """
    Pool book keyed by asset id. Units are pulled from `depositor` with
    transfer_from, so the depositor must approve this venue first. Currency
    is expected to have been sent to `address` before the call.

    Set `fail_reason` to make every call fail.
    """

    def __init__(self, ledger_for: Callable[[str], AssetLedger],
                 depositor: str, address: str = "venue",
                 clock: Callable[[], float] = time.time):
        self.address = address
        self.depositor = depositor
        self.ledger_for = ledger_for
        self.clock = clock
        self.pools: Dict[str, Pool] = {}
        self.lp_balances: Dict[Tuple[str, str], int] = {}
        self.fail_reason: Optional[str] = None

    def snapshot(self):
        return ({aid: Pool(p.units, p.currency, p.liquidity) for aid, p in self.pools.items()},
                dict(self.lp_balances))

    def restore(self, snapshot) -> None:
        pools, lp_balances = snapshot
        self.pools = {aid: Pool(p.units, p.currency, p.liquidity) for aid, p in pools.items()}
        self.lp_balances = dict(lp_balances)

    def add_liquidity(self, asset_id: str, units_desired: int, units_min: int,
                      currency_min: int, recipient: str, deadline: int,
                      currency_value: int) -> LiquidityResult:
        if self.fail_reason:
            raise LiquidityVenueError(self.fail_reason)
        if deadline < int(self.clock()):
            raise LiquidityVenueError("Deadline expired")

        pool = self.pools.get(asset_id) or Pool()
        first_deposit = pool.liquidity == 0
        if first_deposit:
            units_used, currency_used = units_desired, currency_value
            minted = math.isqrt(units_used * currency_used) - MINIMUM_LIQUIDITY
        else:
            # Match the pool ratio, limited by whichever side runs out first
            currency_optimal = units_desired * pool.currency // pool.units
            if currency_optimal <= currency_value:
                units_used, currency_used = units_desired, currency_optimal
            else:
                units_used = currency_value * pool.units // pool.currency
                currency_used = currency_value
            minted = min(units_used * pool.liquidity // pool.units,
                         currency_used * pool.liquidity // pool.currency)

        if units_used < units_min:
            raise LiquidityVenueError(f"Insufficient token amount: {units_used} < {units_min}")
        if currency_used < currency_min:
            raise LiquidityVenueError(f"Insufficient currency amount: {currency_used} < {currency_min}")
        if minted <= 0:
            raise LiquidityVenueError("Insufficient liquidity minted")

        try:
            self.ledger_for(asset_id).transfer_from(
                self.depositor, self.address, units_used, sender=self.address)
        except LaunchpadError as e:
            raise LiquidityVenueError(f"Token pull failed: {e}") from e

        pool.units += units_used
        pool.currency += currency_used
        pool.liquidity += minted + (MINIMUM_LIQUIDITY if first_deposit else 0)
        self.pools[asset_id] = pool
        key = (asset_id, recipient)
        self.lp_balances[key] = self.lp_balances.get(key, 0) + minted
        log.info(f"Pool {asset_id}: +{units_used} units +{currency_used} currency, "
                 f"{minted} LP to {recipient}")
        return units_used, currency_used, minted

    def pool(self, asset_id: str) -> Pool:
        return self.pools.get(asset_id, Pool())


# ═══════════════════════════════════════════════════════════════════════════
# ON-CHAIN ROUTER
# ═══════════════════════════════════════════════════════════════════════════

class RouterVenue(LiquidityVenue):
    """
    Uniswap-V2-style router reached through web3.

    The asset id must be the address of a deployed ERC-20 that the signer
    holds and has approved the router on. The in-memory ledger only tracks
    the units; it does not move them on-chain. A token address with no
    contract code is refused before anything is sent.

    The call is simulated first to read the amounts the router will use,
    then signed and sent with `currency_value` attached. A reverted receipt
    is a failure like any other.

    Usage:
        w3 = Web3(Web3.HTTPProvider("https://sepolia.base.org"))
        venue = RouterVenue(w3, "0x4752...", private_key)
        venue.add_liquidity(asset_id, units, units, value, owner, deadline, value)
    """

    def __init__(self, w3: Web3, router_address: str, private_key: str,
                 gas_limit: int = 500000, receipt_timeout: int = 120):
        self.w3 = w3
        self.address = Web3.to_checksum_address(router_address)
        self.router = w3.eth.contract(address=self.address, abi=ROUTER_ABI)
        self.account = Account.from_key(private_key)
        self.gas_limit = gas_limit
        self.receipt_timeout = receipt_timeout

    def add_liquidity(self, asset_id: str, units_desired: int, units_min: int,
                      currency_min: int, recipient: str, deadline: int,
                      currency_value: int) -> LiquidityResult:
        token = Web3.to_checksum_address(asset_id)
        try:
            code = self.w3.eth.get_code(token)
        except Exception as e:
            raise LiquidityVenueError(f"Token lookup failed: {e}") from e
        if len(code) == 0:
            raise LiquidityVenueError(f"No token contract at {token}")

        fn = self.router.functions.addLiquidityETH(
            token,
            units_desired,
            units_min,
            currency_min,
            Web3.to_checksum_address(recipient),
            deadline
        )
        sender = self.account.address
        try:
            amounts = fn.call({"from": sender, "value": currency_value})
            tx = fn.build_transaction({
                "from": sender,
                "value": currency_value,
                "gas": self.gas_limit,
                "gasPrice": self.w3.eth.gas_price,
                "nonce": self.w3.eth.get_transaction_count(sender),
                "chainId": self.w3.eth.chain_id,
            })
            signed = self.account.sign_transaction(tx)
            tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            log.info(f"addLiquidityETH TX sent: {tx_hash.hex()}")
            receipt = self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout)
        except Exception as e:
            raise LiquidityVenueError(f"addLiquidityETH failed: {e}") from e

        if receipt["status"] != 1:
            raise LiquidityVenueError(f"addLiquidityETH reverted: {tx_hash.hex()}")

        units_used, currency_used, liquidity = (int(a) for a in amounts)
        return units_used, currency_used, liquidity
