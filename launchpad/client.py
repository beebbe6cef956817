"""
Launchpad SDK - API Client

HTTP client for a running launchpad server (see server.py).
"""

import requests
from typing import Any, Dict, List, Optional

from .errors import ERRORS_BY_CODE, LaunchpadError


class APIError(LaunchpadError):
    """Request failed outside the engine (transport, bad request, unknown code)."""
    code = "APIError"

    def __init__(self, code: str, message: str):
        self.code = code
        super().__init__(message)


class LaunchpadClient:
    """
    REST client for the launchpad API.

    Engine failures come back as the matching LaunchpadError subclass, so
    `except SlippageExceeded` works the same remotely as in process.

    Usage:
        api = LaunchpadClient("http://127.0.0.1:8080")
        asset_id = api.create_token("Doge", "DOGE", "", caller="0xcreator")["asset_id"]
        api.buy(asset_id, 20_000 * 10**18, 0, caller="0xcreator")
    """

    def __init__(self, api_url: str = "http://127.0.0.1:8080", timeout: int = 30):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, path: str, params: dict = None,
                 json: dict = None) -> Any:
        """Make API call."""
        try:
            response = self.session.request(
                method,
                f"{self.api_url}{path}",
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise APIError("ConnectionFailed", f"Connection failed: {e}")

        try:
            result = response.json()
        except ValueError:
            try:
                response.raise_for_status()
            except requests.exceptions.HTTPError as e:
                raise APIError("HTTPError", f"HTTP error from {path}: {e}")
            raise APIError("BadResponse", f"Non-JSON response from {path}")

        if response.status_code >= 400:
            code = result.get("error", "APIError")
            message = result.get("message", "")
            error_cls = ERRORS_BY_CODE.get(code)
            if error_cls is not None:
                raise error_cls(message)
            raise APIError(code, message)

        return result

    @staticmethod
    def _str_amounts(data: Dict[str, Any]) -> Dict[str, Any]:
        return {k: str(v) if isinstance(v, int) and not isinstance(v, bool) else v
                for k, v in data.items()}

    # ═══════════════════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════════════════

    def status(self) -> dict:
        return self._request("GET", "/api/status")

    def tokens(self) -> List[dict]:
        """All launches in creation order."""
        return self._request("GET", "/api/tokens")["tokens"]

    def token(self, asset_id: str) -> dict:
        return self._request("GET", f"/api/tokens/{asset_id}")

    def quote(self, asset_id: str, side: str, amount: int) -> dict:
        """
        Preview a trade.

        Args:
            asset_id: Launch to quote
            side: "buy" (amount = currency) or "sell" (amount = units)
            amount: Scaled integer amount
        """
        return self._request("GET", f"/api/tokens/{asset_id}/quote",
                             params={"side": side, "amount": str(amount)})

    def events(self, kind: str = "", asset_id: str = "", since: int = 0) -> List[dict]:
        params = {"since": since}
        if kind:
            params["kind"] = kind
        if asset_id:
            params["asset_id"] = asset_id
        return self._request("GET", "/api/events", params=params)["events"]

    def volume(self, address: str) -> dict:
        return self._request("GET", f"/api/volume/{address}")

    def balance(self, address: str, asset_id: Optional[str] = None) -> dict:
        params = {"asset_id": asset_id} if asset_id else None
        return self._request("GET", f"/api/balance/{address}", params=params)

    # ═══════════════════════════════════════════════════════════════════════
    # MUTATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def create_token(self, name: str, symbol: str, metadata: str, caller: str) -> dict:
        return self._request("POST", "/api/tokens", json={
            "name": name, "symbol": symbol, "metadata": metadata, "caller": caller})

    def buy(self, asset_id: str, currency_in: int, min_units_out: int,
            caller: str) -> int:
        """Buy units; returns the units received."""
        result = self._request("POST", f"/api/tokens/{asset_id}/buy",
                               json=self._str_amounts({
                                   "currency_in": currency_in,
                                   "min_units_out": min_units_out,
                                   "caller": caller}))
        return int(result["units_out"])

    def approve(self, asset_id: str, amount: int, caller: str) -> dict:
        """Allow the engine to burn `amount` of caller's units on sell."""
        return self._request("POST", f"/api/tokens/{asset_id}/approve",
                             json=self._str_amounts({"amount": amount, "caller": caller}))

    def sell(self, asset_id: str, units_in: int, caller: str) -> int:
        """Sell units; returns currency owed before the fee."""
        result = self._request("POST", f"/api/tokens/{asset_id}/sell",
                               json=self._str_amounts({"units_in": units_in,
                                                       "caller": caller}))
        return int(result["currency_out"])

    def complete(self, asset_id: str, caller: str) -> dict:
        return self._request("POST", f"/api/tokens/{asset_id}/complete",
                             json={"caller": caller})

    def withdraw_reserve(self, asset_id: str, caller: str) -> int:
        result = self._request("POST", f"/api/tokens/{asset_id}/withdraw-reserve",
                               json={"caller": caller})
        return int(result["amount"])

    def fund(self, address: str, amount: int) -> int:
        """Faucet credit; returns the new currency balance."""
        result = self._request("POST", "/api/fund",
                               json={"address": address, "amount": str(amount)})
        return int(result["currency"])
