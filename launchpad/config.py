"""
Launchpad SDK - Configuration

Defaults, overlaid by an optional JSON config file, overlaid by
LAUNCHPAD_* environment variables:

    LAUNCHPAD_HOST, LAUNCHPAD_PORT        server bind address
    LAUNCHPAD_API_URL                     client base URL
    LAUNCHPAD_AUTHORITY                   privileged identity
    LAUNCHPAD_FEE_RECIPIENT               fee receiver
    LAUNCHPAD_VENUE                       "memory", "router" or "none"
    LAUNCHPAD_RPC_URL                     EVM RPC for the router venue
    LAUNCHPAD_ROUTER                      router contract address
    LAUNCHPAD_PRIVATE_KEY                 signer for the router venue
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "server": {
        "host": "127.0.0.1",
        "port": 8080,
        "faucet": True              # POST /api/fund mints test currency
    },
    "client": {
        "api_url": "http://127.0.0.1:8080",
        "timeout": 30
    },
    "engine": {
        "address": "launchpad",
        "authority": "",
        "fee_recipient": ""
    },
    # Amounts are strings so JSON files can carry 1e27-sized integers
    "curve": {
        "max_supply": str(1_000_000_000 * 10 ** 18),
        "initial_price": str(153_300_000_000_000),
        "step_size": str(10_000_000 * 10 ** 18),
        "fee_percent": 1,
        "reserve_percent": 30,
        "bonding_percent": 70,
        "creator_cap_percent": 20,
        "unlock_percent": 2
    },
    "venue": {
        "kind": "memory",           # memory | router | none
        "address": "venue",
        "rpc_url": "https://sepolia.base.org",
        "router": "",
        "private_key": "",          # NEVER commit
        "gas_limit": 500000
    }
}

ENV_OVERRIDES = {
    "LAUNCHPAD_HOST": ("server", "host", str),
    "LAUNCHPAD_PORT": ("server", "port", int),
    "LAUNCHPAD_API_URL": ("client", "api_url", str),
    "LAUNCHPAD_AUTHORITY": ("engine", "authority", str),
    "LAUNCHPAD_FEE_RECIPIENT": ("engine", "fee_recipient", str),
    "LAUNCHPAD_VENUE": ("venue", "kind", str),
    "LAUNCHPAD_RPC_URL": ("venue", "rpc_url", str),
    "LAUNCHPAD_ROUTER": ("venue", "router", str),
    "LAUNCHPAD_PRIVATE_KEY": ("venue", "private_key", str),
}


def load_config(path: Optional[str] = None,
                env: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """
    Build the effective config.

    Args:
        path: JSON config file (missing file = defaults only)
        env: Environment mapping (defaults to os.environ)

    Returns:
        Nested config dict
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if path:
        config_path = Path(path)
        if config_path.exists():
            _merge(config, json.loads(config_path.read_text()))
            log.info(f"Loaded config from {config_path}")
        else:
            log.warning(f"Config file {config_path} not found, using defaults")

    env = os.environ if env is None else env
    for var, (section, key, cast) in ENV_OVERRIDES.items():
        if env.get(var):
            config[section][key] = cast(env[var])

    return config


def save_default_config(path: str) -> None:
    Path(path).write_text(json.dumps(DEFAULT_CONFIG, indent=2))


def _merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> None:
    for key, value in overlay.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
