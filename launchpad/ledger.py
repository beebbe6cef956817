"""
Launchpad SDK - Ledgers

In-memory fungible asset ledger (one per launch) and the native currency
bank. The engine only calls these; hosts with a real chain behind them can
swap in their own implementations with the same methods.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from .errors import (
    InsufficientAllowance,
    InsufficientBalance,
    TransferRejected,
    UnauthorizedCaller,
)
from .guard import Journaled

log = logging.getLogger(__name__)

# (sender, amount) -> accept?
ReceiveHook = Callable[[str, int], bool]


class AssetLedger(Journaled):
    """
    ERC-20-like ledger for one launched asset.

    Minting authority belongs to a single minter fixed at construction and
    cannot be revoked or transferred.
    """

    def __init__(self, address: str, name: str, symbol: str, minter: str):
        self.address = address
        self.name = name
        self.symbol = symbol
        self.minter = minter
        self.total_supply = 0
        self.balances: Dict[str, int] = {}
        self.allowances: Dict[Tuple[str, str], int] = {}

    # ── Journaled ──────────────────────────────────────────────────────────

    def snapshot(self):
        return self.total_supply, dict(self.balances), dict(self.allowances)

    def restore(self, snapshot) -> None:
        self.total_supply, balances, allowances = snapshot
        self.balances = dict(balances)
        self.allowances = dict(allowances)

    # ── Views ──────────────────────────────────────────────────────────────

    def balance_of(self, address: str) -> int:
        return self.balances.get(address, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self.allowances.get((owner, spender), 0)

    # ── Mutations ──────────────────────────────────────────────────────────

    def mint(self, to: str, amount: int, sender: str) -> None:
        if sender != self.minter:
            raise UnauthorizedCaller(f"{sender} may not mint {self.symbol}")
        _require_amount(amount)
        self.balances[to] = self.balance_of(to) + amount
        self.total_supply += amount

    def approve(self, spender: str, amount: int, sender: str) -> bool:
        _require_amount(amount)
        self.allowances[(sender, spender)] = amount
        return True

    def transfer(self, to: str, amount: int, sender: str) -> bool:
        self._move(sender, to, amount)
        return True

    def transfer_from(self, owner: str, to: str, amount: int,
                      sender: str) -> bool:
        self._spend_allowance(owner, sender, amount)
        self._move(owner, to, amount)
        return True

    def burn_from(self, owner: str, amount: int, sender: str) -> None:
        """Burn `amount` of `owner`'s units using `sender`'s allowance."""
        self._spend_allowance(owner, sender, amount)
        balance = self.balance_of(owner)
        if balance < amount:
            raise InsufficientBalance(
                f"{owner} holds {balance} {self.symbol}, needs {amount}")
        self.balances[owner] = balance - amount
        self.total_supply -= amount

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        _require_amount(amount)
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowance(
                f"{spender} allowed {allowed} of {owner}'s {self.symbol}, needs {amount}")
        self.allowances[(owner, spender)] = allowed - amount

    def _move(self, owner: str, to: str, amount: int) -> None:
        _require_amount(amount)
        balance = self.balance_of(owner)
        if balance < amount:
            raise InsufficientBalance(
                f"{owner} holds {balance} {self.symbol}, needs {amount}")
        self.balances[owner] = balance - amount
        self.balances[to] = self.balance_of(to) + amount


class CurrencyBank(Journaled):
    """
    Native currency balances.

    A recipient may register a receive hook, which runs on every incoming
    send (it can execute arbitrary code, including calls back into the
    engine). A hook that returns False or raises makes the send fail with
    TransferRejected.
    """

    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.hooks: Dict[str, ReceiveHook] = {}

    def snapshot(self):
        return dict(self.balances)

    def restore(self, snapshot) -> None:
        self.balances = dict(snapshot)

    def balance_of(self, address: str) -> int:
        return self.balances.get(address, 0)

    def fund(self, address: str, amount: int) -> None:
        """Credit currency from outside the system (faucet / deposits)."""
        _require_amount(amount)
        self.balances[address] = self.balance_of(address) + amount

    def set_receive_hook(self, address: str, hook: Optional[ReceiveHook]) -> None:
        if hook is None:
            self.hooks.pop(address, None)
        else:
            self.hooks[address] = hook

    def send(self, sender: str, to: str, amount: int) -> None:
        """
        Move currency and run the recipient's hook.

        Raises:
            InsufficientBalance: sender cannot cover the amount
            TransferRejected: recipient hook refused or raised
        """
        _require_amount(amount)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalance(f"{sender} holds {balance}, needs {amount}")
        self.balances[sender] = balance - amount
        self.balances[to] = self.balance_of(to) + amount

        hook = self.hooks.get(to)
        if hook is None:
            return
        try:
            accepted = hook(sender, amount)
        except Exception as e:
            log.warning(f"Receive hook of {to} failed: {e}")
            raise TransferRejected(f"{to} failed on receive: {e}") from e
        if accepted is False:
            log.warning(f"{to} refused {amount} from {sender}")
            raise TransferRejected(f"{to} refused {amount} from {sender}")


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"Amount must be integer, got {type(amount).__name__}")
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")
