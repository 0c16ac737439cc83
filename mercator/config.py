"""
Configuration: shipped defaults and named bridgehubs from data/networks.yaml,
optionally overlaid with a user YAML file named by MERCATOR_CONFIG, plus the
validators the CLI uses for addresses and RPC URLs.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml
from eth_utils import to_normalized_address

from .errors import ValidationError

RPC_URL_ENV = "MERCATOR_RPC_URL"
CONFIG_ENV = "MERCATOR_CONFIG"
FALLBACK_TIMEOUT_SECS = 15

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r") as f:
            data = yaml.safe_load(f)
    except OSError as err:
        raise ValidationError(f"cannot read config file {path}: {err.strerror or err}") from None
    except yaml.YAMLError as err:
        mark = getattr(err, "problem_mark", None)
        where = f" (line {mark.line + 1})" if mark is not None else ""
        problem = getattr(err, "problem", None) or "not valid YAML"
        raise ValidationError(f"invalid config file {path}{where}: {problem}") from None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"invalid config file {path}: expected a mapping at the top level")
    return data


def _shipped_cfg() -> Dict[str, Any]:
    # shipped file lives next to this module
    this_dir = Path(__file__).resolve().parent
    return _read_yaml(this_dir / "data" / "networks.yaml")


def load_network_cfg(user_path: Optional[str] = None) -> Dict[str, Any]:
    """Shipped config with the user file (argument, else $MERCATOR_CONFIG) merged on top.

    Raises ValidationError for a missing, unreadable or malformed user file.
    """
    cfg = _shipped_cfg()

    user_path = user_path or os.getenv(CONFIG_ENV)
    if user_path:
        path = Path(user_path).expanduser()
        if not path.is_file():
            raise ValidationError(f"config file not found: {path}")
        user = _read_yaml(path)
        for section in ("defaults", "bridgehubs"):
            overlay = user.get(section) or {}
            if not isinstance(overlay, dict):
                raise ValidationError(f"invalid config file {path}: '{section}' must be a mapping")
            merged = dict(cfg.get(section) or {})
            merged.update(overlay)
            cfg[section] = merged
    return cfg


# shipped file only; the CLI applies the MERCATOR_CONFIG overlay at startup
NETWORK_CFG = _shipped_cfg()
DEFAULTS = NETWORK_CFG.get("defaults") or {}
BRIDGEHUBS = NETWORK_CFG.get("bridgehubs") or {}


def parse_address(value: str) -> str:
    """Accept a 0x-prefixed 20-byte hex address in any case; return it lowercased."""
    value = str(value).strip()
    if not ADDRESS_RE.fullmatch(value):
        raise ValidationError("address must be 0x-prefixed and 20 bytes long")
    return to_normalized_address(value)


def parse_rpc_url(value: str) -> str:
    value = str(value).strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"invalid rpc url: {value!r} (expected http:// or https://)")
    return value


def parse_chain_id(value: Any) -> int:
    raw = str(value).strip()
    try:
        chain_id = int(raw, 16) if raw.lower().startswith("0x") else int(raw, 10)
    except ValueError:
        raise ValidationError(f"invalid chain id: {value!r}") from None
    if chain_id < 0 or chain_id >= 1 << 64:
        raise ValidationError(f"chain id {chain_id} does not fit into u64")
    return chain_id


def resolve_bridgehub(value: str, bridgehubs: Optional[Dict[str, str]] = None) -> str:
    """Network name from the config (case-insensitive) or a literal address."""
    bridgehubs = BRIDGEHUBS if bridgehubs is None else bridgehubs
    key = str(value).strip()
    named = {str(k).lower(): v for k, v in bridgehubs.items()}
    if key.lower() in named:
        return parse_address(named[key.lower()])
    try:
        return parse_address(key)
    except ValidationError:
        known = ", ".join(sorted(named)) or "none configured"
        raise ValidationError(
            f"bridgehub must be an address or a known network ({known}): {value!r}"
        ) from None


def resolve_rpc_url(explicit: Optional[str] = None, defaults: Optional[Dict[str, Any]] = None) -> str:
    defaults = DEFAULTS if defaults is None else defaults
    url = explicit or os.getenv(RPC_URL_ENV) or defaults.get("rpc_url")
    if not url:
        raise ValidationError(
            f"an RPC URL is required: pass --rpc-url or set {RPC_URL_ENV}"
        )
    return parse_rpc_url(url)


def default_timeout_secs(defaults: Optional[Dict[str, Any]] = None) -> float:
    defaults = DEFAULTS if defaults is None else defaults
    value = defaults.get("timeout_secs") or FALLBACK_TIMEOUT_SECS
    return float(value)
