"""
Launchpad SDK - Lock Gate

Who may buy:
  - until the launch is unlocked, only its creator
  - the creator never beyond creator_cap cumulative units

The launch unlocks (permanently) once the creator's cumulative purchase
reaches unlock_threshold.
"""

from .errors import CreatorCapExceeded, TokenLocked
from .launch_types import LaunchParams, TokenRecord


class LockGate:

    def __init__(self, params: LaunchParams):
        self.params = params

    def check(self, record: TokenRecord, caller: str, units: int) -> None:
        """
        Raise if `caller` may not buy `units` of the launch.

        Raises:
            TokenLocked: launch still locked and caller is not the creator
            CreatorCapExceeded: creator would pass the cap (never partially filled)
        """
        is_creator = caller == record.creator
        if not record.unlocked and not is_creator:
            raise TokenLocked(f"{record.symbol} is locked until its creator buys in")
        if is_creator and record.creator_purchased + units > self.params.creator_cap:
            raise CreatorCapExceeded(
                f"Creator purchase {record.creator_purchased} + {units} "
                f"exceeds cap {self.params.creator_cap}")

    def check_access(self, record: TokenRecord, caller: str) -> None:
        """Lock check alone, usable before the buy size is known."""
        if not record.unlocked and caller != record.creator:
            raise TokenLocked(f"{record.symbol} is locked until its creator buys in")

    def record_purchase(self, record: TokenRecord, caller: str, units: int) -> bool:
        """
        Book a successful buy.

        Returns:
            True if this purchase unlocked the launch
        """
        if caller != record.creator:
            return False
        record.creator_purchased += units
        if not record.unlocked and record.creator_purchased >= self.params.unlock_threshold:
            record.unlocked = True
            return True
        return False
