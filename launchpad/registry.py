"""
Launchpad SDK - Token Registry

Catalog of launched assets. Each launch gets its own AssetLedger whose only
minter is the registry's custody address; the held reserve is minted to that
custody at creation.
"""

import json
import logging
import time
from typing import Callable, Dict, List, Optional

from .errors import EmptyName, EmptySymbol, InvalidAssetReference
from .guard import Journaled
from .launch_types import LaunchParams, LaunchState, TokenRecord, compute_asset_id
from .ledger import AssetLedger

log = logging.getLogger(__name__)


class TokenRegistry(Journaled):
    """
    Launched assets, keyed by asset id, enumerated in creation order.

    Usage:
        registry = TokenRegistry(params, custody="launchpad")
        record = registry.create_token("Doge", "DOGE", "ipfs://..", "0xabc")
        registry.get_token_info(record.asset_id)
        registry.get_all_tokens()
    """

    def __init__(self, params: LaunchParams, custody: str,
                 clock: Callable[[], float] = time.time):
        self.params = params
        self.custody = custody
        self.clock = clock
        self.records: Dict[str, TokenRecord] = {}
        self.ledgers: Dict[str, AssetLedger] = {}
        self._nonce = 0

    # ── Journaled ──────────────────────────────────────────────────────────

    def snapshot(self):
        return (
            self._nonce,
            {aid: r.copy() for aid, r in self.records.items()},
            {aid: (ledger, ledger.snapshot()) for aid, ledger in self.ledgers.items()},
        )

    def restore(self, snapshot) -> None:
        self._nonce, records, ledgers = snapshot
        self.records = {aid: r.copy() for aid, r in records.items()}
        self.ledgers = {}
        for aid, (ledger, snap) in ledgers.items():
            ledger.restore(snap)
            self.ledgers[aid] = ledger

    # ── Launch ─────────────────────────────────────────────────────────────

    def create_token(self, name: str, symbol: str, metadata: str,
                     creator: str) -> TokenRecord:
        """
        Launch a new asset.

        Args:
            name: Display name (non-empty)
            symbol: Ticker (non-empty)
            metadata: Opaque string (may be empty)
            creator: Launching identity

        Returns:
            The new TokenRecord

        Raises:
            EmptyName, EmptySymbol: validation failed; nothing is created
        """
        if not name or not name.strip():
            raise EmptyName("Token name must not be empty")
        if not symbol or not symbol.strip():
            raise EmptySymbol("Token symbol must not be empty")

        self._nonce += 1
        asset_id = compute_asset_id(name, symbol, creator, self._nonce)
        while asset_id in self.records:
            self._nonce += 1
            asset_id = compute_asset_id(name, symbol, creator, self._nonce)

        ledger = AssetLedger(asset_id, name, symbol, minter=self.custody)
        reserve = self.params.reserve_amount
        ledger.mint(self.custody, reserve, sender=self.custody)

        record = TokenRecord(
            asset_id=asset_id,
            name=name,
            symbol=symbol,
            metadata=metadata or "",
            creator=creator,
            held_reserve=reserve,
            max_supply=self.params.max_supply,
            creation_timestamp=int(self.clock()),
        )
        self.ledgers[asset_id] = ledger
        self.records[asset_id] = record
        log.info(f"Launched {symbol} ({asset_id}) by {creator}")
        return record

    # ── Lookups ────────────────────────────────────────────────────────────

    def get(self, asset_id: str) -> TokenRecord:
        """Live record; raises InvalidAssetReference for unknown ids."""
        record = self.records.get(asset_id)
        if record is None:
            raise InvalidAssetReference(f"Unknown asset: {asset_id}")
        return record

    def ledger(self, asset_id: str) -> AssetLedger:
        self.get(asset_id)
        return self.ledgers[asset_id]

    def get_token_info(self, asset_id: str) -> TokenRecord:
        """Read-only copy of a record."""
        return self.get(asset_id).copy()

    def get_all_tokens(self) -> List[str]:
        """Asset ids in creation order."""
        return list(self.records)

    def list_tokens(self, creator: str = "",
                    state: Optional[LaunchState] = None) -> List[TokenRecord]:
        """
        Records with optional filtering, in creation order.

        Args:
            creator: Filter by creator
            state: Filter by ACTIVE / COMPLETED
        """
        result = []
        for record in self.records.values():
            if creator and record.creator != creator:
                continue
            if state and record.state != state:
                continue
            result.append(record.copy())
        return result

    def export_tokens(self) -> str:
        """Export all records as JSON."""
        return json.dumps({
            "version": "1.0",
            "timestamp": int(time.time()),
            "tokens": [r.to_dict() for r in self.records.values()],
        }, indent=2, default=str)
