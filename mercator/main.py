"""
mercator: map a Bridgehub's chain and chain type manager topology.

Usage:
    mercator scan    --rpc-url URL --bridgehub ADDR|NETWORK [--json] [--verbose]
    mercator inspect --rpc-url URL --bridgehub ADDR|NETWORK --chain-id N [--deep] [--json] [--verbose]

--rpc-url may be omitted when MERCATOR_RPC_URL is set. Exit status is 0
whenever a result is printed, warnings included, and 1 on a fatal error.
"""

import argparse
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from .config import (
    NETWORK_CFG,
    RPC_URL_ENV,
    default_timeout_secs,
    load_network_cfg,
    parse_chain_id,
    parse_rpc_url,
    resolve_bridgehub,
    resolve_rpc_url,
)
from .errors import MercatorError, ValidationError
from .render import render_inspection, render_json, render_snapshot
from .rpc import HttpRpcClient, RpcClient
from .scanner import inspect_bridgehub_chain, scan_bridgehub_topology


def die(msg: str, code: int = 1):
    print(f"[ERROR] {msg}", file=sys.stderr)
    sys.exit(code)


def _argtype(parse: Callable):
    # argparse only turns ArgumentTypeError into a clean usage error
    def _wrapped(value):
        try:
            return parse(value)
        except ValidationError as e:
            raise argparse.ArgumentTypeError(str(e))
    _wrapped.__name__ = parse.__name__
    return _wrapped


def _positive_float(value: str) -> float:
    try:
        out = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid timeout: {value!r}")
    if out <= 0:
        raise argparse.ArgumentTypeError("timeout must be positive")
    return out


def _add_common(p: argparse.ArgumentParser, cfg: Dict[str, Any]) -> None:
    defaults = cfg.get("defaults") or {}
    bridgehubs = cfg.get("bridgehubs") or {}

    def bridgehub(value):
        return resolve_bridgehub(value, bridgehubs)

    p.add_argument("--rpc-url", type=_argtype(parse_rpc_url), default=None,
                   help=f"Ethereum JSON-RPC URL (default: ${RPC_URL_ENV})")
    p.add_argument("--bridgehub", type=_argtype(bridgehub), required=True,
                   help="Bridgehub address or a network name from networks.yaml")
    p.add_argument("--timeout-secs", type=_positive_float, default=default_timeout_secs(defaults),
                   help="HTTP timeout per RPC call")
    p.add_argument("--json", action="store_true", help="Print the result as JSON")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Debug logging on stderr and warnings inside the report")


def build_parser(cfg: Optional[Dict[str, Any]] = None) -> argparse.ArgumentParser:
    cfg = NETWORK_CFG if cfg is None else cfg
    ap = argparse.ArgumentParser(
        prog="mercator",
        description="Map zkSync topology from a Bridgehub root contract",
    )
    sub = ap.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan a Bridgehub and print CTMs and chain relationships")
    _add_common(scan, cfg)

    inspect = sub.add_parser("inspect", help="Resolve one chain's contracts, admin and protocol version")
    _add_common(inspect, cfg)
    inspect.add_argument("--chain-id", type=_argtype(parse_chain_id), required=True,
                         help="Chain id (decimal or 0x-hex)")
    inspect.add_argument("--deep", action="store_true",
                         help="Also resolve the validator timelock and the chain admin's owner")
    return ap


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main(
    argv: Optional[List[str]] = None,
    client_factory: Callable[[str, float], RpcClient] = HttpRpcClient,
) -> int:
    try:
        cfg = load_network_cfg()
    except ValidationError as e:
        die(str(e))

    ap = build_parser(cfg)
    args = ap.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        rpc_url = resolve_rpc_url(args.rpc_url, cfg.get("defaults") or {})
    except ValidationError as e:
        ap.error(str(e))

    client = client_factory(rpc_url, args.timeout_secs)

    try:
        if args.command == "scan":
            result = scan_bridgehub_topology(client, args.bridgehub)
        else:
            result = inspect_bridgehub_chain(client, args.bridgehub, args.chain_id, deep=args.deep)
    except MercatorError as e:
        die(str(e))

    if args.json:
        print(render_json(result))
    elif args.command == "scan":
        print(render_snapshot(result, show_warnings=args.verbose))
    else:
        print(render_inspection(result, show_warnings=args.verbose))

    # without --verbose the report omits warnings; they go to stderr instead
    if not args.verbose:
        for w in result.warnings:
            print(f"[WARN] {w}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
