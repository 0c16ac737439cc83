"""
Topology scan and single-chain inspection.

Both walks are sequential and best-effort: every per-item call is wrapped in
`attempt`, failures become warning strings on the result, and processing
continues. The only fatal step is the initial chain id enumeration of a scan.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from . import bridgehub as bh
from .abi_codec import is_zero_address
from .errors import MercatorError
from .model import ChainCtm, ChainInspection, ChainSummary, CtmSummary, TopologySnapshot
from .outcome import Outcome, attempt
from .rpc import RpcClient

logger = logging.getLogger(__name__)


def _warn(warnings: List[str], message: str) -> None:
    logger.debug("warning: %s", message)
    warnings.append(message)


def _zero_ctm_warning(chain_id: int) -> str:
    return f"zero ctm for chain {chain_id}: chainTypeManager returned the zero address"


def scan_bridgehub_topology(client: RpcClient, bridgehub: str) -> TopologySnapshot:
    """Enumerate every chain on a bridgehub, map chains to CTMs and version each CTM.

    Raises whatever the chain id enumeration raises; nothing after it is fatal.
    """
    try:
        chain_ids = bh.get_all_chain_ids(client, bridgehub)
    except MercatorError as err:
        # the caller reports the error itself
        logger.debug("bridgehub %s: chain id enumeration failed: %s", bridgehub, err)
        raise
    logger.debug("bridgehub %s lists %d chains", bridgehub, len(chain_ids))

    warnings: List[str] = []
    chain_ctms: List[ChainCtm] = []

    for chain_id in chain_ids:
        outcome = attempt(bh.get_chain_type_manager, client, bridgehub, chain_id)
        if not outcome.ok:
            _warn(warnings, f"failed to resolve chainTypeManager for chain {chain_id}: {outcome.error}")
            continue
        if is_zero_address(outcome.value):
            _warn(warnings, _zero_ctm_warning(chain_id))
            continue
        chain_ctms.append(ChainCtm(chain_id=chain_id, ctm=outcome.value))

    ctms: List[CtmSummary] = []
    for ctm in sorted({m.ctm for m in chain_ctms}):
        outcome = attempt(bh.resolve_ctm_protocol_version, client, ctm)
        if not outcome.ok:
            _warn(warnings, f"failed to resolve protocol semver for ctm {ctm}: {outcome.error}")
        ctms.append(CtmSummary(address=ctm, protocol_version=outcome.value))

    return TopologySnapshot(
        bridgehub=bridgehub,
        chain_ids=tuple(chain_ids),
        chain_ctms=tuple(chain_ctms),
        ctms=tuple(ctms),
        warnings=tuple(warnings),
    )


def _address_or_none(
    outcome: Outcome, warnings: List[str], what: str, chain_id: int
) -> Optional[str]:
    # zero means "not set" here; only call failures are reported
    if not outcome.ok:
        _warn(warnings, f"failed to resolve {what} for chain {chain_id}: {outcome.error}")
        return None
    if is_zero_address(outcome.value):
        return None
    return outcome.value


def inspect_bridgehub_chain(
    client: RpcClient, bridgehub: str, chain_id: int, deep: bool = False
) -> ChainInspection:
    """Resolve CTM, chain contract, verifier, admin and protocol version for one chain.

    A step whose prerequisite is unresolved is skipped without a warning.
    A zero address leaves its field unset without a warning, except for the CTM:
    a zero CTM adds the same warning a scan does.
    With `deep`, also resolve the CTM's validator timelock and the admin's owner.
    Never raises for RPC or decode failures.
    """
    warnings: List[str] = []

    ctm_outcome = attempt(bh.get_chain_type_manager, client, bridgehub, chain_id)
    if ctm_outcome.ok and is_zero_address(ctm_outcome.value):
        _warn(warnings, _zero_ctm_warning(chain_id))
        ctm = None
    else:
        ctm = _address_or_none(ctm_outcome, warnings, "chainTypeManager", chain_id)

    chain_contract = _address_or_none(
        attempt(bh.get_chain_contract, client, bridgehub, chain_id),
        warnings, "getZKChain", chain_id,
    )

    verifier = None
    if chain_contract is not None:
        verifier = _address_or_none(
            attempt(bh.get_chain_verifier, client, chain_contract),
            warnings, "getVerifier", chain_id,
        )

    admin = None
    protocol_version = None
    validator_timelock = None
    if ctm is not None:
        admin = _address_or_none(
            attempt(bh.get_ctm_chain_admin, client, ctm, chain_id),
            warnings, "getChainAdmin", chain_id,
        )

        outcome = attempt(bh.resolve_chain_protocol_version, client, ctm, chain_id)
        if outcome.ok:
            protocol_version = outcome.value
        else:
            _warn(warnings, f"failed to resolve getProtocolVersion for chain {chain_id}: {outcome.error}")

        if deep:
            validator_timelock = _address_or_none(
                attempt(bh.get_ctm_validator_timelock, client, ctm),
                warnings, "validatorTimelock", chain_id,
            )

    admin_owner = None
    if deep and admin is not None:
        admin_owner = _address_or_none(
            attempt(bh.get_admin_owner, client, admin),
            warnings, "owner of chain admin", chain_id,
        )

    return ChainInspection(
        bridgehub=bridgehub,
        chain=ChainSummary(
            chain_id=chain_id,
            ctm=ctm,
            chain_contract=chain_contract,
            verifier=verifier,
            admin=admin,
            admin_owner=admin_owner,
            validator_timelock=validator_timelock,
            protocol_version=protocol_version,
        ),
        warnings=tuple(warnings),
    )
