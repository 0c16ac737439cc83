"""mercator: map a Bridgehub's chains, chain type managers and per-chain contracts over eth_call."""
__version__ = "0.1.0"

__all__ = [
    "abi_codec",
    "bridgehub",
    "config",
    "errors",
    "model",
    "outcome",
    "render",
    "rpc",
    "scanner",
]
