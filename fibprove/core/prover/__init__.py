"""ZK proving backends and backend selection"""
from fibprove.core.prover.backend import (
    ProofMode,
    ProvingKey,
    VerifyingKey,
    ProofArtifact,
    ProofRequestId,
    ProverBackend,
    derive_keys,
    seal_proof,
)
from fibprove.core.prover.local import CpuProver
from fibprove.core.prover.network import NetworkProver
from fibprove.core.prover.selector import (
    BackendKind,
    BackendSelection,
    select_backend,
)

__all__ = [
    "ProofMode",
    "ProvingKey",
    "VerifyingKey",
    "ProofArtifact",
    "ProofRequestId",
    "ProverBackend",
    "derive_keys",
    "seal_proof",
    "CpuProver",
    "NetworkProver",
    "BackendKind",
    "BackendSelection",
    "select_backend",
]
