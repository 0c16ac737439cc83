# mercator/render.py
import json
from typing import List, Optional, Union

from .model import ChainInspection, TopologySnapshot


def _warnings_block(warnings, show_warnings: bool) -> List[str]:
    if not show_warnings:
        return []
    lines = ["", "Warnings"]
    if warnings:
        lines.extend(f"  - {w}" for w in warnings)
    else:
        lines.append("  - none")
    return lines


def render_snapshot(snapshot: TopologySnapshot, show_warnings: bool = False) -> str:
    lines = [
        f"Bridgehub: {snapshot.bridgehub}",
        f"Chains discovered: {len(snapshot.chain_ids)}",
        f"CTMs discovered: {len(snapshot.ctms)}",
        "",
        "CTMs",
    ]
    if not snapshot.ctms:
        lines.append("  - none resolved")
    for ctm in snapshot.ctms:
        version = ctm.protocol_version or "unknown"
        lines.append(f"  - {ctm.address} (protocol {version})")

    lines.append("")
    lines.append("Chain -> CTM")
    if not snapshot.chain_ctms:
        lines.append("  - no chain mappings resolved")
    for entry in snapshot.chain_ctms:
        lines.append(f"  - {entry.chain_id} -> {entry.ctm}")

    mapped = {m.chain_id for m in snapshot.chain_ctms}
    unmapped = [cid for cid in snapshot.chain_ids if cid not in mapped]
    if unmapped:
        lines.append("")
        lines.append(f"Unmapped chains: {', '.join(str(cid) for cid in unmapped)}")

    lines.extend(_warnings_block(snapshot.warnings, show_warnings))
    return "\n".join(lines)


def _field(value: Optional[str]) -> str:
    return value if value is not None else "-"


def render_inspection(inspection: ChainInspection, show_warnings: bool = False) -> str:
    chain = inspection.chain
    rows = [
        ("Chain ID", str(chain.chain_id)),
        ("CTM", _field(chain.ctm)),
        ("Chain contract", _field(chain.chain_contract)),
        ("Verifier", _field(chain.verifier)),
        ("Admin", _field(chain.admin)),
        ("Protocol version", _field(chain.protocol_version)),
    ]
    if chain.validator_timelock is not None:
        rows.append(("Validator timelock", chain.validator_timelock))
    if chain.admin_owner is not None:
        rows.append(("Admin owner", chain.admin_owner))

    width = max(len(label) for label, _ in rows)
    lines = [f"Bridgehub: {inspection.bridgehub}", ""]
    lines.extend(f"{label + ':':<{width + 1}} {value}" for label, value in rows)
    lines.extend(_warnings_block(inspection.warnings, show_warnings))
    return "\n".join(lines)


def render_json(result: Union[TopologySnapshot, ChainInspection]) -> str:
    return json.dumps(result.to_dict(), indent=2)
