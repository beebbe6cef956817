"""
Launchpad SDK - Errors

Every failure aborts the operation that raised it. The engine rolls back
all state touched by that operation before the exception reaches the caller.
"""


class LaunchpadError(Exception):
    """Base error. `code` is the stable identifier exposed over the API."""
    code = "LaunchpadError"

    def __init__(self, message: str = ""):
        self.message = message or self.code
        super().__init__(f"{self.code}: {self.message}")


# ═══════════════════════════════════════════════════════════════════════════
# REGISTRY
# ═══════════════════════════════════════════════════════════════════════════

class EmptyName(LaunchpadError):
    code = "EmptyName"


class EmptySymbol(LaunchpadError):
    code = "EmptySymbol"


class InvalidAssetReference(LaunchpadError):
    code = "InvalidAssetReference"


# ═══════════════════════════════════════════════════════════════════════════
# TRADING
# ═══════════════════════════════════════════════════════════════════════════

class LaunchCompleted(LaunchpadError):
    code = "LaunchCompleted"


class ZeroValueSent(LaunchpadError):
    code = "ZeroValueSent"


class ZeroTokensComputed(LaunchpadError):
    code = "ZeroTokensComputed"


class SlippageExceeded(LaunchpadError):
    code = "SlippageExceeded"


class SupplyCapExceeded(LaunchpadError):
    code = "SupplyCapExceeded"


class ZeroSellAmount(LaunchpadError):
    code = "ZeroSellAmount"


class InsufficientCirculatingSupply(LaunchpadError):
    code = "InsufficientCirculatingSupply"


class CreatorCapExceeded(LaunchpadError):
    code = "CreatorCapExceeded"


class TokenLocked(LaunchpadError):
    code = "TokenLocked"


# ═══════════════════════════════════════════════════════════════════════════
# AUTHORITY / EXECUTION
# ═══════════════════════════════════════════════════════════════════════════

class UnauthorizedCaller(LaunchpadError):
    code = "UnauthorizedCaller"


class ReentrantCallRejected(LaunchpadError):
    code = "ReentrantCallRejected"


class TransferRejected(LaunchpadError):
    """A currency send or asset transfer failed."""
    code = "TransferRejected"


class InsufficientBalance(TransferRejected):
    code = "InsufficientBalance"


class InsufficientAllowance(TransferRejected):
    code = "InsufficientAllowance"


# ═══════════════════════════════════════════════════════════════════════════
# COMPLETION / MIGRATION
# ═══════════════════════════════════════════════════════════════════════════

class AlreadyCompleted(LaunchpadError):
    code = "AlreadyCompleted"


class NoLiquidityAvailable(LaunchpadError):
    code = "NoLiquidityAvailable"


class VenueNotConfigured(LaunchpadError):
    code = "VenueNotConfigured"


class LiquidityVenueError(LaunchpadError):
    """Opaque failure reported by the liquidity venue."""
    code = "LiquidityVenueError"


class NoReserveToWithdraw(LaunchpadError):
    code = "NoReserveToWithdraw"


ERRORS_BY_CODE = {
    cls.code: cls for cls in [
        EmptyName, EmptySymbol, InvalidAssetReference,
        LaunchCompleted, ZeroValueSent, ZeroTokensComputed, SlippageExceeded,
        SupplyCapExceeded, ZeroSellAmount, InsufficientCirculatingSupply,
        CreatorCapExceeded, TokenLocked,
        UnauthorizedCaller, ReentrantCallRejected, TransferRejected,
        InsufficientBalance, InsufficientAllowance,
        AlreadyCompleted, NoLiquidityAvailable, VenueNotConfigured,
        LiquidityVenueError, NoReserveToWithdraw,
    ]
}
