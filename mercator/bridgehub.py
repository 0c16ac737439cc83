"""
Typed accessors for the Bridgehub, chain type manager (CTM), per-chain
contract and chain admin.

Each accessor performs exactly one eth_call (or, for the protocol version
helpers, an ordered list of them) and either returns a decoded value or
raises a TransportError / ProtocolError / DecodeError.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from .abi_codec import (
    decode_address,
    decode_packed_semver,
    decode_uint256,
    decode_uint32_triple,
    decode_uint64_array,
    encode_call,
    format_semver,
    function_selector,
)
from .outcome import first_success
from .rpc import RpcClient

logger = logging.getLogger(__name__)

# Canonical signatures of every function mercator reads.
SIGNATURES: Dict[str, str] = {
    # bridgehub
    "get_all_chain_ids": "getAllZKChainChainIDs()",
    "chain_type_manager": "chainTypeManager(uint256)",
    "get_chain_contract": "getZKChain(uint256)",
    # chain type manager
    "protocol_version": "protocolVersion()",
    "semver_protocol_version": "getSemverProtocolVersion()",
    "chain_admin": "getChainAdmin(uint256)",
    "chain_protocol_version": "getProtocolVersion(uint256)",
    "validator_timelock": "validatorTimelock()",
    # chain contract
    "verifier": "getVerifier()",
    # chain admin
    "owner": "owner()",
}

SELECTORS: Dict[str, bytes] = {name: function_selector(sig) for name, sig in SIGNATURES.items()}


# ----------------------------- calldata -----------------------------

def encode_get_all_chain_ids_calldata() -> str:
    return encode_call(SELECTORS["get_all_chain_ids"])


def encode_chain_type_manager_calldata(chain_id: int) -> str:
    return encode_call(SELECTORS["chain_type_manager"], [chain_id])


def encode_get_chain_contract_calldata(chain_id: int) -> str:
    return encode_call(SELECTORS["get_chain_contract"], [chain_id])


def encode_protocol_version_calldata() -> str:
    return encode_call(SELECTORS["protocol_version"])


def encode_semver_protocol_version_calldata() -> str:
    return encode_call(SELECTORS["semver_protocol_version"])


def encode_chain_admin_calldata(chain_id: int) -> str:
    return encode_call(SELECTORS["chain_admin"], [chain_id])


def encode_chain_protocol_version_calldata(chain_id: int) -> str:
    return encode_call(SELECTORS["chain_protocol_version"], [chain_id])


def encode_validator_timelock_calldata() -> str:
    return encode_call(SELECTORS["validator_timelock"])


def encode_verifier_calldata() -> str:
    return encode_call(SELECTORS["verifier"])


def encode_owner_calldata() -> str:
    return encode_call(SELECTORS["owner"])


# ----------------------------- accessors -----------------------------

def _call(client: RpcClient, to: str, calldata: str) -> str:
    logger.debug("call %s data=%s", to, calldata)
    return client.eth_call(to, calldata)


def get_all_chain_ids(client: RpcClient, bridgehub: str) -> List[int]:
    response = _call(client, bridgehub, encode_get_all_chain_ids_calldata())
    return decode_uint64_array(response)


def get_chain_type_manager(client: RpcClient, bridgehub: str, chain_id: int) -> str:
    response = _call(client, bridgehub, encode_chain_type_manager_calldata(chain_id))
    return decode_address(response)


def get_chain_contract(client: RpcClient, bridgehub: str, chain_id: int) -> str:
    response = _call(client, bridgehub, encode_get_chain_contract_calldata(chain_id))
    return decode_address(response)


def get_chain_verifier(client: RpcClient, chain_contract: str) -> str:
    response = _call(client, chain_contract, encode_verifier_calldata())
    return decode_address(response)


def get_ctm_chain_admin(client: RpcClient, ctm: str, chain_id: int) -> str:
    response = _call(client, ctm, encode_chain_admin_calldata(chain_id))
    return decode_address(response)


def get_ctm_validator_timelock(client: RpcClient, ctm: str) -> str:
    response = _call(client, ctm, encode_validator_timelock_calldata())
    return decode_address(response)


def get_admin_owner(client: RpcClient, admin: str) -> str:
    response = _call(client, admin, encode_owner_calldata())
    return decode_address(response)


def get_ctm_semver_components(client: RpcClient, ctm: str) -> Tuple[int, int, int]:
    response = _call(client, ctm, encode_semver_protocol_version_calldata())
    return decode_uint32_triple(response)


def get_ctm_packed_protocol_version(client: RpcClient, ctm: str) -> Tuple[int, int, int]:
    response = _call(client, ctm, encode_protocol_version_calldata())
    return decode_packed_semver(decode_uint256(response))


def get_ctm_chain_packed_protocol_version(
    client: RpcClient, ctm: str, chain_id: int
) -> Tuple[int, int, int]:
    response = _call(client, ctm, encode_chain_protocol_version_calldata(chain_id))
    return decode_packed_semver(decode_uint256(response))


# ----------------------------- protocol version -----------------------------

def resolve_ctm_protocol_version(client: RpcClient, ctm: str) -> str:
    """CTM-wide protocol version as "major.minor.patch".

    Tries getSemverProtocolVersion() first and falls back to unpacking
    protocolVersion(). If both fail, the semver accessor's error is raised.
    """
    outcome = first_success([
        lambda: get_ctm_semver_components(client, ctm),
        lambda: get_ctm_packed_protocol_version(client, ctm),
    ])
    if not outcome.ok:
        raise outcome.error
    return format_semver(outcome.value)


def resolve_chain_protocol_version(client: RpcClient, ctm: str, chain_id: int) -> str:
    """Protocol version a CTM records for one chain.

    Primary: getProtocolVersion(chainId). Fallbacks: the CTM-wide semver and
    packed accessors. The per-chain error is the one raised when all fail.
    """
    outcome = first_success([
        lambda: get_ctm_chain_packed_protocol_version(client, ctm, chain_id),
        lambda: get_ctm_semver_components(client, ctm),
        lambda: get_ctm_packed_protocol_version(client, ctm),
    ])
    if not outcome.ok:
        raise outcome.error
    return format_semver(outcome.value)
