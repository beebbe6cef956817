"""
Launchpad SDK Server - REST API for the launchpad frontend

Endpoints:
  GET  /api/status                         - Engine status and curve params
  GET  /api/tokens                         - All launches (creation order)
  POST /api/tokens                         - Launch {name, symbol, metadata, caller}
  GET  /api/tokens/<id>                    - One launch + price, holders, volume
  GET  /api/tokens/<id>/quote              - ?side=buy|sell&amount=N
  POST /api/tokens/<id>/buy                - {caller, currency_in, min_units_out}
  POST /api/tokens/<id>/sell               - {caller, units_in}
  POST /api/tokens/<id>/approve            - {caller, amount} lets the engine burn on sell
  POST /api/tokens/<id>/complete           - {caller} (authority)
  POST /api/tokens/<id>/withdraw-reserve   - {caller} (authority)
  GET  /api/events                         - ?kind=&asset_id=&since=
  GET  /api/volume/<address>               - Trader volume
  GET  /api/balance/<address>              - Currency (and ?asset_id= units) balance
  POST /api/fund                           - {address, amount} (faucet, if enabled)

Amounts travel as decimal strings; JavaScript cannot hold 1e27 in a number.
"""

import logging
import threading
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from web3 import Web3

from .config import load_config
from .engine import BondingCurveEngine
from .errors import (
    InvalidAssetReference,
    LaunchpadError,
    ReentrantCallRejected,
    UnauthorizedCaller,
)
from .launch_types import LaunchParams
from .ledger import CurrencyBank
from .venue import InMemoryVenue, RouterVenue

log = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    UnauthorizedCaller: 403,
    InvalidAssetReference: 404,
    ReentrantCallRejected: 409,
}


# =============================================================================
# ENGINE FACTORY
# =============================================================================

def engine_from_config(config: Dict[str, Any],
                       bank: Optional[CurrencyBank] = None) -> BondingCurveEngine:
    """
    Build an engine and its venue from a config dict (see config.py).

    The `router` venue kind is only for hosts whose asset ids are deployed
    ERC-20 contracts held by the signing key; RouterVenue refuses any
    asset address without contract code.
    """
    engine_cfg = config["engine"]
    engine = BondingCurveEngine(
        params=LaunchParams.from_config(config["curve"]),
        bank=bank,
        address=engine_cfg["address"],
        authority=engine_cfg["authority"],
        fee_recipient=engine_cfg["fee_recipient"],
    )

    venue_cfg = config["venue"]
    kind = venue_cfg.get("kind", "memory")
    if kind == "memory":
        engine.migrator.venue = InMemoryVenue(
            engine.registry.ledger, depositor=engine.address,
            address=venue_cfg.get("address", "venue"))
    elif kind == "router":
        w3 = Web3(Web3.HTTPProvider(venue_cfg["rpc_url"]))
        engine.migrator.venue = RouterVenue(
            w3, venue_cfg["router"], venue_cfg["private_key"],
            gas_limit=int(venue_cfg.get("gas_limit", 500000)))
    elif kind != "none":
        raise ValueError(f"Unknown venue kind: {kind}")

    log.info(f"Engine ready: authority={engine.authority or '-'} venue={kind}")
    return engine


# =============================================================================
# HELPERS
# =============================================================================

def encode(value: Any) -> Any:
    """Recursively turn integers into decimal strings for JSON."""
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        return {k: encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    return value


def _amount(data: dict, key: str, default: Optional[int] = None) -> int:
    raw = data.get(key, default)
    if raw is None:
        raise ValueError(f"Missing field: {key}")
    amount = int(raw)
    if amount < 0:
        raise ValueError(f"{key} must be non-negative")
    return amount


def _field(data: dict, key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise ValueError(f"Missing field: {key}")
    return value


class SerializedApp:
    """
    WSGI middleware running one request at a time.

    The engine's execution lock rejects overlapping calls instead of
    waiting, and its reads see in-flight state. Under a threaded WSGI
    server every request therefore queues here, so a read or faucet call
    never lands in the middle of a buy (or a slow migration).
    """

    def __init__(self, wsgi_app):
        self.wsgi_app = wsgi_app
        self.lock = threading.Lock()

    def __call__(self, environ, start_response):
        with self.lock:
            # materialize the body so the engine is idle once the lock drops
            result = self.wsgi_app(environ, start_response)
            try:
                return list(result)
            finally:
                if hasattr(result, "close"):
                    result.close()


# =============================================================================
# FLASK APP
# =============================================================================

def create_app(engine: Optional[BondingCurveEngine] = None,
               config: Optional[Dict[str, Any]] = None) -> Flask:
    config = config or load_config()
    engine = engine or engine_from_config(config)
    faucet = bool(config["server"].get("faucet", True))

    app = Flask(__name__)
    CORS(app)  # Allow cross-origin for the frontend
    app.wsgi_app = SerializedApp(app.wsgi_app)
    app.config["ENGINE"] = engine

    @app.errorhandler(LaunchpadError)
    def handle_launchpad_error(e: LaunchpadError):
        status = next((code for cls, code in STATUS_BY_ERROR.items()
                       if isinstance(e, cls)), 400)
        log.warning(f"{request.method} {request.path} -> {e.code}: {e.message}")
        return jsonify({"error": e.code, "message": e.message}), status

    @app.errorhandler(ValueError)
    def handle_bad_request(e: ValueError):
        return jsonify({"error": "BadRequest", "message": str(e)}), 400

    def body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object body")
        return data

    # ── Reads ──────────────────────────────────────────────────────────────

    @app.route("/api/status")
    def api_status():
        return jsonify(encode(engine.status()))

    @app.route("/api/tokens", methods=["GET"])
    def api_tokens():
        tokens = []
        for asset_id in engine.get_all_tokens():
            info = engine.get_token_info(asset_id).to_dict()
            info["price"] = engine.current_price(asset_id)
            tokens.append(info)
        return jsonify(encode({"tokens": tokens, "count": len(tokens)}))

    @app.route("/api/tokens/<asset_id>", methods=["GET"])
    def api_token(asset_id: str):
        info = engine.get_token_info(asset_id).to_dict()
        info["price"] = engine.current_price(asset_id)
        info["holders"] = engine.volumes.holder_list(asset_id)
        info["total_value_traded"] = engine.volumes.total_value_traded.get(asset_id, 0)
        info["trade_count"] = engine.volumes.trade_count.get(asset_id, 0)
        info["fees_collected"] = engine.treasury.collected(asset_id)
        return jsonify(encode(info))

    @app.route("/api/tokens/<asset_id>/quote", methods=["GET"])
    def api_quote(asset_id: str):
        side = request.args.get("side", "buy")
        amount = _amount(request.args, "amount")
        if side == "buy":
            quote = engine.quote_buy(asset_id, amount)
        elif side == "sell":
            quote = engine.quote_sell(asset_id, amount)
        else:
            raise ValueError(f"Unknown side: {side}")
        return jsonify(encode({"side": side, **quote.to_dict()}))

    @app.route("/api/events")
    def api_events():
        events = engine.events.list(
            kind=request.args.get("kind", ""),
            asset_id=request.args.get("asset_id", ""),
            since=int(request.args.get("since", 0)),
        )
        return jsonify(encode({"events": [e.to_dict() for e in events]}))

    @app.route("/api/volume/<address>")
    def api_volume(address: str):
        return jsonify(encode({"address": address, **engine.volume(address).to_dict()}))

    @app.route("/api/balance/<address>")
    def api_balance(address: str):
        result = {"address": address, "currency": engine.bank.balance_of(address)}
        asset_id = request.args.get("asset_id")
        if asset_id:
            result["units"] = engine.registry.ledger(asset_id).balance_of(address)
        return jsonify(encode(result))

    # ── Mutations ──────────────────────────────────────────────────────────

    @app.route("/api/tokens", methods=["POST"])
    def api_create_token():
        data = body()
        asset_id = engine.create_token(
            data.get("name", ""), data.get("symbol", ""),
            data.get("metadata", ""), _field(data, "caller"))
        return jsonify(encode(engine.get_token_info(asset_id).to_dict())), 201

    @app.route("/api/tokens/<asset_id>/buy", methods=["POST"])
    def api_buy(asset_id: str):
        data = body()
        units = engine.buy(asset_id, _amount(data, "currency_in"),
                           _amount(data, "min_units_out", 0), _field(data, "caller"))
        return jsonify(encode({"asset_id": asset_id, "units_out": units,
                               "price": engine.current_price(asset_id)}))

    @app.route("/api/tokens/<asset_id>/sell", methods=["POST"])
    def api_sell(asset_id: str):
        data = body()
        currency = engine.sell(asset_id, _amount(data, "units_in"), _field(data, "caller"))
        return jsonify(encode({"asset_id": asset_id, "currency_out": currency,
                               "price": engine.current_price(asset_id)}))

    @app.route("/api/tokens/<asset_id>/approve", methods=["POST"])
    def api_approve(asset_id: str):
        data = body()
        caller = _field(data, "caller")
        amount = _amount(data, "amount")
        engine.approve(asset_id, amount, caller)
        return jsonify(encode({"asset_id": asset_id, "owner": caller,
                               "spender": engine.address, "amount": amount}))

    @app.route("/api/tokens/<asset_id>/complete", methods=["POST"])
    def api_complete(asset_id: str):
        engine.complete(asset_id, _field(body(), "caller"))
        return jsonify(encode(engine.get_token_info(asset_id).to_dict()))

    @app.route("/api/tokens/<asset_id>/withdraw-reserve", methods=["POST"])
    def api_withdraw_reserve(asset_id: str):
        amount = engine.withdraw_reserve(asset_id, _field(body(), "caller"))
        return jsonify(encode({"asset_id": asset_id, "amount": amount}))

    @app.route("/api/fund", methods=["POST"])
    def api_fund():
        if not faucet:
            return jsonify({"error": "FaucetDisabled", "message": "Faucet is disabled"}), 403
        data = body()
        address = _field(data, "address")
        amount = _amount(data, "amount")
        balance = engine.fund(address, amount)
        return jsonify(encode({"address": address, "currency": balance}))

    return app


def serve(config: Dict[str, Any]) -> None:
    app = create_app(config=config)
    server_cfg = config["server"]
    log.info(f"Launchpad API on http://{server_cfg['host']}:{server_cfg['port']}")
    app.run(host=server_cfg["host"], port=int(server_cfg["port"]), threaded=False)
