"""
Launchpad SDK - Fee Treasury & Volume Ledger

Fee forwarding and trading statistics. Neither affects control flow except
that a fee send can fail, which aborts the trade.
"""

from typing import Dict, List

from .guard import Journaled
from .launch_types import UserVolume
from .ledger import CurrencyBank


class FeeTreasury(Journaled):
    """Forwards trade fees from the engine to the fee recipient."""

    def __init__(self, bank: CurrencyBank, source: str, recipient: str):
        self.bank = bank
        self.source = source
        self.recipient = recipient
        self.total_collected = 0
        self.collected_by_asset: Dict[str, int] = {}

    def snapshot(self):
        return self.recipient, self.total_collected, dict(self.collected_by_asset)

    def restore(self, snapshot) -> None:
        self.recipient, self.total_collected, collected = snapshot
        self.collected_by_asset = dict(collected)

    def forward(self, asset_id: str, fee: int) -> None:
        """Send `fee` to the recipient. Raises TransferRejected on failure."""
        if fee == 0:
            return
        self.bank.send(self.source, self.recipient, fee)
        self.total_collected += fee
        self.collected_by_asset[asset_id] = self.collected_by_asset.get(asset_id, 0) + fee

    def collected(self, asset_id: str) -> int:
        return self.collected_by_asset.get(asset_id, 0)


class VolumeLedger(Journaled):
    """
    Aggregate counters:
      - per trader: currency spent buying / received selling
      - per asset: total value traded (net of fees), trade count, holders
    """

    def __init__(self):
        self.users: Dict[str, UserVolume] = {}
        self.total_value_traded: Dict[str, int] = {}
        self.trade_count: Dict[str, int] = {}
        self.holders: Dict[str, Dict[str, None]] = {}

    def snapshot(self):
        return (
            {addr: UserVolume(v.buy_volume, v.sell_volume) for addr, v in self.users.items()},
            dict(self.total_value_traded),
            dict(self.trade_count),
            {asset: dict(h) for asset, h in self.holders.items()},
        )

    def restore(self, snapshot) -> None:
        users, traded, counts, holders = snapshot
        self.users = {addr: UserVolume(v.buy_volume, v.sell_volume) for addr, v in users.items()}
        self.total_value_traded = dict(traded)
        self.trade_count = dict(counts)
        self.holders = {asset: dict(h) for asset, h in holders.items()}

    def record_buy(self, asset_id: str, buyer: str, currency_in: int, net: int) -> None:
        self._user(buyer).buy_volume += currency_in
        self._bump(asset_id, net)
        self.holders.setdefault(asset_id, {})[buyer] = None

    def record_sell(self, asset_id: str, seller: str, currency_out: int) -> None:
        self._user(seller).sell_volume += currency_out
        self._bump(asset_id, currency_out)

    def volume(self, address: str) -> UserVolume:
        return self.users.get(address, UserVolume())

    def holder_list(self, asset_id: str) -> List[str]:
        """Addresses that bought the asset, in first-buy order."""
        return list(self.holders.get(asset_id, {}))

    def _user(self, address: str) -> UserVolume:
        if address not in self.users:
            self.users[address] = UserVolume()
        return self.users[address]

    def _bump(self, asset_id: str, value: int) -> None:
        self.total_value_traded[asset_id] = self.total_value_traded.get(asset_id, 0) + value
        self.trade_count[asset_id] = self.trade_count.get(asset_id, 0) + 1
