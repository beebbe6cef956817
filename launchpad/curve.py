"""
Launchpad SDK - Bonding Curve Math

Quadratic price curve over circulating supply:

    price(s) = initial_price * (1 + (s / step_size)^2)

Computed in 1e18 fixed point with truncating division at every step, in
this order:

    ratio   = s * SCALE // step_size
    squared = ratio * ratio // SCALE
    price   = initial_price * (SCALE + squared) // SCALE

Buys and sells are priced at a single point (the pre-trade supply), not by
integrating over the curve.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .launch_types import LaunchParams, SCALE

DEFAULT_PARAMS = LaunchParams()


# ═══════════════════════════════════════════════════════════════════════════════
# PRICE FUNCTION
# ═══════════════════════════════════════════════════════════════════════════════

def price(supply: int, params: LaunchParams = DEFAULT_PARAMS) -> int:
    """
    Unit price at a given circulating supply.

    Args:
        supply: Circulating units (1e18 scaled)
        params: Curve parameters

    Returns:
        Price in currency per unit (1e18 fixed point)

    Examples:
        >>> price(0) == DEFAULT_PARAMS.initial_price
        True
        >>> price(10_000_000 * SCALE) == 2 * DEFAULT_PARAMS.initial_price
        True
    """
    if supply < 0:
        raise ValueError(f"Supply must be non-negative, got {supply}")
    if supply == 0:
        return params.initial_price

    ratio = supply * SCALE // params.step_size
    squared = ratio * ratio // SCALE
    return params.initial_price * (SCALE + squared) // SCALE


def fee_of(amount: int, params: LaunchParams = DEFAULT_PARAMS) -> int:
    """Protocol fee taken from a currency amount (truncating)."""
    return amount * params.fee_percent // 100


# ═══════════════════════════════════════════════════════════════════════════════
# QUOTES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BuyQuote:
    currency_in: int
    units_out: int
    price: int          # Pre-trade price the buy is filled at
    fee: int
    new_price: int      # Price after the buy lands

    def to_dict(self) -> dict:
        return {
            "currency_in": self.currency_in,
            "units_out": self.units_out,
            "price": self.price,
            "fee": self.fee,
            "new_price": self.new_price,
        }


@dataclass(frozen=True)
class SellQuote:
    units_in: int
    gross: int          # Currency owed before the fee, capped by the balance
    fee: int
    net: int            # Currency paid to the seller
    price: int
    new_price: int

    def to_dict(self) -> dict:
        return {
            "units_in": self.units_in,
            "gross": self.gross,
            "fee": self.fee,
            "net": self.net,
            "price": self.price,
            "new_price": self.new_price,
        }


def units_for_currency(currency_in: int, supply: int,
                       params: LaunchParams = DEFAULT_PARAMS) -> int:
    """Units a buy of `currency_in` receives at `supply`."""
    return currency_in * SCALE // price(supply, params)


def currency_for_units(units_in: int, supply: int,
                       params: LaunchParams = DEFAULT_PARAMS) -> int:
    """Currency owed for selling `units_in` at `supply`, before any cap."""
    return units_in * price(supply, params) // SCALE


def quote_buy(currency_in: int, supply: int,
              params: LaunchParams = DEFAULT_PARAMS) -> BuyQuote:
    """
    Preview a buy without touching state.

    The fee does not reduce the units received; it is taken from the
    currency the engine keeps.
    """
    p = price(supply, params)
    units_out = currency_in * SCALE // p
    return BuyQuote(
        currency_in=currency_in,
        units_out=units_out,
        price=p,
        fee=fee_of(currency_in, params),
        new_price=price(supply + units_out, params),
    )


def quote_sell(units_in: int, supply: int, available: Optional[int] = None,
               params: LaunchParams = DEFAULT_PARAMS) -> SellQuote:
    """
    Preview a sell without touching state.

    Args:
        units_in: Units to sell
        supply: Circulating supply before the sell
        available: Currency the engine holds (None = uncapped)
        params: Curve parameters
    """
    p = price(supply, params)
    gross = units_in * p // SCALE
    if available is not None:
        gross = min(gross, available)
    fee = fee_of(gross, params)
    new_supply = max(supply - units_in, 0)
    return SellQuote(
        units_in=units_in,
        gross=gross,
        fee=fee,
        net=gross - fee,
        price=p,
        new_price=price(new_supply, params),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════════

def price_table(params: LaunchParams = DEFAULT_PARAMS,
                points: int = 8) -> List[Tuple[int, int]]:
    """Evenly spaced (supply, price) samples from 0 to bonding_max."""
    if points < 2:
        raise ValueError("Need at least 2 points")
    step = params.bonding_max // (points - 1)
    return [(i * step, price(i * step, params)) for i in range(points)]


def format_amount(amount: int, decimals: int = 18, places: int = 6) -> str:
    """Format a scaled integer amount for display."""
    whole, frac = divmod(amount, 10 ** decimals)
    frac_str = str(frac).rjust(decimals, "0")[:places].rstrip("0")
    return f"{whole:,}.{frac_str}" if frac_str else f"{whole:,}"
