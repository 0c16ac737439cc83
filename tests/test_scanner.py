from __future__ import annotations

import pytest

from mercator import bridgehub as bh
from mercator.errors import DecodeError, ProtocolError, TransportError
from mercator.model import ChainCtm, ChainSummary, CtmSummary
from mercator.scanner import inspect_bridgehub_chain, scan_bridgehub_topology

from ._rpc_helpers import (
    ADMIN,
    BRIDGEHUB,
    CHAIN_CONTRACT,
    CTM_A,
    CTM_B,
    VERIFIER,
    ZERO,
    address_response,
    array_response,
    packed_semver,
    uint_response,
    word,
)


def _script_topology(rpc, chain_ctms):
    rpc.with_response(bh.encode_get_all_chain_ids_calldata(), array_response([cid for cid, _ in chain_ctms]))
    for chain_id, ctm in chain_ctms:
        response = ctm if isinstance(ctm, Exception) else address_response(ctm)
        rpc.with_response(bh.encode_chain_type_manager_calldata(chain_id), response)
    return rpc


# ── scan ─────────────────────────────────────────────────────────────────

def test_scan_collects_and_dedupes_ctms(rpc):
    _script_topology(rpc, [(324, CTM_A), (325, CTM_A)])
    rpc.with_response(bh.encode_semver_protocol_version_calldata(), ProtocolError("execution reverted"))
    rpc.with_response(bh.encode_protocol_version_calldata(), uint_response(7))

    snapshot = scan_bridgehub_topology(rpc, BRIDGEHUB)

    assert snapshot.bridgehub == BRIDGEHUB
    assert snapshot.chain_ids == (324, 325)
    assert snapshot.chain_ctms == (ChainCtm(324, CTM_A), ChainCtm(325, CTM_A))
    assert snapshot.ctms == (CtmSummary(CTM_A, "0.0.7"),)
    assert snapshot.warnings == ()


def test_scan_n_chains_k_ctms_sorted(rpc):
    # CTM_B is seen first but summaries are sorted by address
    _script_topology(rpc, [(326, CTM_B), (324, CTM_A), (325, CTM_B)])
    rpc.with_response(bh.encode_semver_protocol_version_calldata(), "0x" + word(0) + word(28) + word(0), to=CTM_A)
    rpc.with_response(bh.encode_semver_protocol_version_calldata(), ProtocolError("reverted"), to=CTM_B)
    rpc.with_response(bh.encode_protocol_version_calldata(), uint_response(packed_semver(0, 26, 0)), to=CTM_B)

    snapshot = scan_bridgehub_topology(rpc, BRIDGEHUB)

    assert snapshot.chain_ids == (326, 324, 325)
    assert len(snapshot.chain_ctms) == 3
    assert [c.address for c in snapshot.ctms] == [CTM_A, CTM_B]
    assert [c.protocol_version for c in snapshot.ctms] == ["0.28.0", "0.26.0"]
    assert snapshot.warnings == ()


def test_scan_single_chain_failure_is_a_warning(rpc):
    _script_topology(rpc, [(324, CTM_A), (325, TransportError("timed out")), (326, CTM_A)])
    rpc.with_response(bh.encode_protocol_version_calldata(), uint_response(packed_semver(0, 0, 42)))
    rpc.with_response(bh.encode_semver_protocol_version_calldata(), ProtocolError("reverted"))

    snapshot = scan_bridgehub_topology(rpc, BRIDGEHUB)

    assert len(snapshot.chain_ids) == 3
    assert [m.chain_id for m in snapshot.chain_ctms] == [324, 326]
    assert len(snapshot.warnings) == 1
    assert "chain 325" in snapshot.warnings[0]
    assert "timed out" in snapshot.warnings[0]
    assert snapshot.ctms == (CtmSummary(CTM_A, "0.0.42"),)


def test_scan_zero_ctm_is_warned_and_never_mapped(rpc):
    _script_topology(rpc, [(324, ZERO), (325, CTM_A)])
    rpc.with_response(bh.encode_protocol_version_calldata(), uint_response(1))
    rpc.with_response(bh.encode_semver_protocol_version_calldata(), ProtocolError("reverted"))

    snapshot = scan_bridgehub_topology(rpc, BRIDGEHUB)

    assert snapshot.chain_ids == (324, 325)
    assert snapshot.chain_ctms == (ChainCtm(325, CTM_A),)
    assert ZERO not in [c.address for c in snapshot.ctms]
    assert snapshot.warnings == ("zero ctm for chain 324: chainTypeManager returned the zero address",)


def test_scan_keeps_ctm_without_version_and_orders_warnings(rpc):
    _script_topology(rpc, [(324, CTM_B), (325, DecodeError("bad word")), (326, CTM_A)])
    # no version accessor is scripted for either CTM

    snapshot = scan_bridgehub_topology(rpc, BRIDGEHUB)

    assert snapshot.ctms == (CtmSummary(CTM_A, None), CtmSummary(CTM_B, None))
    assert len(snapshot.warnings) == 3
    assert "chain 325" in snapshot.warnings[0]
    assert CTM_A in snapshot.warnings[1]
    assert CTM_B in snapshot.warnings[2]
    # primary (semver) error is the one reported
    assert "0xf5c1182c" in snapshot.warnings[1]


def test_scan_processes_chains_in_list_order_then_ctms_ascending(rpc):
    _script_topology(rpc, [(9, CTM_B), (3, CTM_A)])
    rpc.with_response(bh.encode_semver_protocol_version_calldata(), "0x" + "00" * 96)

    scan_bridgehub_topology(rpc, BRIDGEHUB)

    targets = [to for to, _ in rpc.calls]
    assert targets == [BRIDGEHUB, BRIDGEHUB, BRIDGEHUB, CTM_A, CTM_B]
    assert rpc.calls[1][1] == bh.encode_chain_type_manager_calldata(9)


@pytest.mark.parametrize(
    "response, error",
    [
        (TransportError("connection refused"), TransportError),
        (ProtocolError("execution reverted"), ProtocolError),
        ("0x1234", DecodeError),
    ],
)
def test_scan_chain_id_enumeration_is_fatal(rpc, response, error):
    rpc.with_response(bh.encode_get_all_chain_ids_calldata(), response)
    with pytest.raises(error):
        scan_bridgehub_topology(rpc, BRIDGEHUB)
    assert len(rpc.calls) == 1


def test_scan_empty_bridgehub(rpc):
    rpc.with_response(bh.encode_get_all_chain_ids_calldata(), array_response([]))
    snapshot = scan_bridgehub_topology(rpc, BRIDGEHUB)
    assert snapshot.chain_ids == ()
    assert snapshot.chain_ctms == ()
    assert snapshot.ctms == ()
    assert snapshot.warnings == ()


# ── inspect ──────────────────────────────────────────────────────────────

def _script_chain_324(rpc):
    rpc.with_response(bh.encode_chain_type_manager_calldata(324), address_response(CTM_A))
    rpc.with_response(bh.encode_get_chain_contract_calldata(324), address_response(CHAIN_CONTRACT))
    rpc.with_response(bh.encode_verifier_calldata(), address_response(VERIFIER))
    rpc.with_response(bh.encode_chain_admin_calldata(324), address_response(ADMIN))
    rpc.with_response(bh.encode_chain_protocol_version_calldata(324), uint_response(packed_semver(0, 0, 42)))
    return rpc


def test_inspect_resolves_every_field(rpc):
    _script_chain_324(rpc)

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 324)

    assert inspection.bridgehub == BRIDGEHUB
    assert inspection.chain == ChainSummary(
        chain_id=324,
        ctm=CTM_A,
        chain_contract=CHAIN_CONTRACT,
        verifier=VERIFIER,
        admin=ADMIN,
        protocol_version="0.0.42",
    )
    assert inspection.warnings == ()


def test_inspect_deep_resolves_timelock_and_admin_owner(rpc):
    _script_chain_324(rpc)
    timelock = "0x" + "12" * 20
    owner = "0x" + "34" * 20
    rpc.with_response(bh.encode_validator_timelock_calldata(), address_response(timelock), to=CTM_A)
    rpc.with_response(bh.encode_owner_calldata(), address_response(owner), to=ADMIN)

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 324, deep=True)

    assert inspection.chain.validator_timelock == timelock
    assert inspection.chain.admin_owner == owner
    assert inspection.warnings == ()


def test_inspect_without_deep_skips_extra_calls(rpc):
    _script_chain_324(rpc)
    inspect_bridgehub_chain(rpc, BRIDGEHUB, 324)
    called = {data for _, data in rpc.calls}
    assert bh.encode_validator_timelock_calldata() not in called
    assert bh.encode_owner_calldata() not in called


def test_inspect_ctm_failure_skips_dependent_steps(rpc):
    _script_chain_324(rpc)
    rpc.with_response(bh.encode_chain_type_manager_calldata(324), TransportError("timed out"))

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 324, deep=True)

    chain = inspection.chain
    assert chain.ctm is None
    assert chain.admin is None
    assert chain.protocol_version is None
    assert chain.validator_timelock is None
    assert chain.admin_owner is None
    # independent branch still resolves
    assert chain.chain_contract == CHAIN_CONTRACT
    assert chain.verifier == VERIFIER
    assert len(inspection.warnings) == 1
    assert inspection.warnings[0].startswith("failed to resolve chainTypeManager for chain 324")


def test_inspect_zero_chain_contract_is_silent(rpc):
    _script_chain_324(rpc)
    rpc.with_response(bh.encode_get_chain_contract_calldata(324), address_response(ZERO))

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 324)

    assert inspection.chain.chain_contract is None
    assert inspection.chain.verifier is None
    assert inspection.warnings == ()
    assert bh.encode_verifier_calldata() not in {data for _, data in rpc.calls}


def test_inspect_zero_verifier_and_admin_are_silent(rpc):
    _script_chain_324(rpc)
    rpc.with_response(bh.encode_verifier_calldata(), address_response(ZERO))
    rpc.with_response(bh.encode_chain_admin_calldata(324), address_response(ZERO))

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 324)

    assert inspection.chain.verifier is None
    assert inspection.chain.admin is None
    assert inspection.chain.protocol_version == "0.0.42"
    assert inspection.warnings == ()


def test_inspect_zero_ctm_warns_unlike_other_zero_addresses(rpc):
    # a zero CTM is the one zero address reported as a warning, same text as a scan
    _script_chain_324(rpc)
    rpc.with_response(bh.encode_chain_type_manager_calldata(324), address_response(ZERO))

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 324)

    assert inspection.chain.ctm is None
    assert inspection.chain.admin is None
    assert inspection.warnings == ("zero ctm for chain 324: chainTypeManager returned the zero address",)


def test_inspect_collects_warnings_in_step_order(rpc):
    rpc.with_response(bh.encode_chain_type_manager_calldata(7), address_response(CTM_A))
    rpc.with_response(bh.encode_get_chain_contract_calldata(7), address_response(CHAIN_CONTRACT))
    # verifier, admin and every protocol version accessor are left unscripted

    inspection = inspect_bridgehub_chain(rpc, BRIDGEHUB, 7)

    assert inspection.chain.ctm == CTM_A
    assert inspection.chain.chain_contract == CHAIN_CONTRACT
    assert [w.split(" for chain")[0] for w in inspection.warnings] == [
        "failed to resolve getVerifier",
        "failed to resolve getChainAdmin",
        "failed to resolve getProtocolVersion",
    ]
    # the per-chain accessor's error is the one reported
    assert bh.encode_chain_protocol_version_calldata(7) in inspection.warnings[2]
