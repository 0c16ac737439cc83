# mercator/model.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class ChainCtm:
    chain_id: int
    ctm: str


@dataclass(frozen=True)
class CtmSummary:
    address: str
    protocol_version: Optional[str] = None


@dataclass(frozen=True)
class ChainSummary:
    """Everything resolved for one chain; each field is None when unresolved or not applicable."""
    chain_id: int
    ctm: Optional[str] = None
    chain_contract: Optional[str] = None
    verifier: Optional[str] = None
    admin: Optional[str] = None
    admin_owner: Optional[str] = None
    validator_timelock: Optional[str] = None
    protocol_version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TopologySnapshot:
    bridgehub: str
    chain_ids: Tuple[int, ...] = ()
    chain_ctms: Tuple[ChainCtm, ...] = ()
    ctms: Tuple[CtmSummary, ...] = ()
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bridgehub": self.bridgehub,
            "chain_ids": list(self.chain_ids),
            "chain_ctms": [asdict(m) for m in self.chain_ctms],
            "ctms": [asdict(c) for c in self.ctms],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class ChainInspection:
    bridgehub: str
    chain: ChainSummary
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bridgehub": self.bridgehub,
            "chain": self.chain.to_dict(),
            "warnings": list(self.warnings),
        }
