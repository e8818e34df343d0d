"""
Prover backend interface and the values it exchanges.

Every proof operation goes through a ProverBackend. There are two variants,
the local CPU prover and the remote prover network, and the orchestration
code never branches on which one it holds except to decide whether the
asynchronous path is available.

Setup and verification are deterministic and identical for both variants:
keys are derived from the program image, and a proof is a keccak seal over
(verifying key, proof mode, public values) that any party can recheck.
"""

import asyncio
import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from fibprove.core.errors import VerificationError
from fibprove.core.program.codec import ProgramStdin
from fibprove.core.program.guest import ExecutionReport, GuestProgram
from fibprove.crypto import bytes_to_hex, keccak256

# Domain separators
DOMAIN_VKEY = b"FIBPROVE_VKEY_V1"
DOMAIN_PROOF = b"FIBPROVE_PROOF_V1"

# EVM proofs are prefixed with the first 4 bytes of the vkey digest so the
# on-chain gateway can route to the matching verifier
EVM_SELECTOR_SIZE = 4


class ProofMode(str, Enum):
    """Proof representation requested from the backend."""
    CORE = "core"
    COMPRESSED = "compressed"
    PLONK = "plonk"
    GROTH16 = "groth16"

    @property
    def is_evm(self) -> bool:
        return self in (ProofMode.PLONK, ProofMode.GROTH16)


# =============================================================================
# Keys and Artifacts
# =============================================================================


@dataclass(frozen=True)
class VerifyingKey:
    """Verifying key: a 32-byte digest bound to one program image."""
    digest: bytes

    def bytes32(self) -> str:
        """Key fingerprint as 0x-prefixed hex."""
        return bytes_to_hex(self.digest)

    @property
    def selector(self) -> bytes:
        return self.digest[:EVM_SELECTOR_SIZE]


@dataclass(frozen=True)
class ProvingKey:
    """Proving key: the program plus the verifying key it proves against."""
    program: GuestProgram
    vk: VerifyingKey


@dataclass(frozen=True)
class ProofArtifact:
    """A proof together with the public values committed while proving."""
    proof: bytes
    public_values: bytes
    mode: ProofMode = ProofMode.CORE

    def bytes(self) -> bytes:
        """Raw proof bytes, as submitted to an on-chain verifier."""
        return self.proof


@dataclass(frozen=True)
class ProofRequestId:
    """Handle for one asynchronous proof request."""
    value: bytes

    def hex(self) -> str:
        return bytes_to_hex(self.value)

    def __str__(self) -> str:
        return self.hex()


# =============================================================================
# Setup / Seal / Verify
# =============================================================================


def derive_keys(program: GuestProgram) -> Tuple[ProvingKey, VerifyingKey]:
    """Deterministic key derivation; the same image always yields the same keys."""
    vk = VerifyingKey(digest=keccak256(DOMAIN_VKEY + program.image_id))
    return ProvingKey(program=program, vk=vk), vk


def seal_proof(vk: VerifyingKey, public_values: bytes, mode: ProofMode) -> bytes:
    """
    Produce proof bytes binding the public values to the verifying key.

    EVM modes carry the verifier selector in front of the seal.
    """
    seal = keccak256(
        DOMAIN_PROOF
        + vk.digest
        + mode.value.encode()
        + keccak256(public_values)
    )
    if mode.is_evm:
        return vk.selector + seal
    return seal


def check_proof(artifact: ProofArtifact, vk: VerifyingKey) -> None:
    """
    Check that a proof attests its public values under `vk`.

    Raises:
        VerificationError: on selector or seal mismatch
    """
    if artifact.mode.is_evm and artifact.proof[:EVM_SELECTOR_SIZE] != vk.selector:
        raise VerificationError(
            f"Verifier selector mismatch: proof {artifact.proof[:EVM_SELECTOR_SIZE].hex()} "
            f"vs key {vk.selector.hex()}"
        )
    expected = seal_proof(vk, artifact.public_values, artifact.mode)
    if not hmac.compare_digest(expected, artifact.proof):
        raise VerificationError(
            f"Invalid {artifact.mode.value} proof for verifying key {vk.bytes32()}"
        )


# =============================================================================
# Backend Interface
# =============================================================================


class ProverBackend(ABC):
    """
    A proving capability bound to exactly one backend.

    Instances are immutable after construction and may be shared freely.
    """

    name: str = "backend"

    #: Whether request_async/wait are available
    supports_async: bool = False

    @abstractmethod
    def execute(self, program: GuestProgram, stdin: ProgramStdin) -> Tuple[bytes, ExecutionReport]:
        """
        Run the program without proving.

        Returns:
            (committed public values, execution report)

        Raises:
            ExecutionError: guest trapped or backend unreachable
        """

    def setup(self, program: GuestProgram) -> Tuple[ProvingKey, VerifyingKey]:
        """Derive (proving key, verifying key) for the program. Idempotent."""
        return derive_keys(program)

    @abstractmethod
    def prove(self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode = ProofMode.CORE) -> ProofArtifact:
        """
        Prove and block until the proof is available.

        Raises:
            ProvingError: backend failed to produce a proof
        """

    @abstractmethod
    async def request_async(
        self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode = ProofMode.CORE
    ) -> ProofRequestId:
        """
        Submit a proof request without waiting for it.

        Raises:
            SubmissionError: request rejected or not deliverable
        """

    @abstractmethod
    async def wait(
        self,
        request_id: ProofRequestId,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> ProofArtifact:
        """
        Wait for a submitted request to complete.

        Args:
            request_id: Handle returned by request_async
            poll_interval: Seconds between status checks (backend default if None)
            timeout: Seconds before giving up; None waits indefinitely
            cancel: Event that aborts the wait when set (the remote job keeps running)

        Raises:
            ProofTimeoutError: timeout elapsed first
            ProvingError: backend reported the request as failed
        """

    def verify(self, artifact: ProofArtifact, vk: VerifyingKey) -> None:
        """
        Verify a proof against a verifying key.

        Raises:
            VerificationError: proof does not attest its public values under vk
        """
        check_proof(artifact, vk)

    def describe(self) -> str:
        return self.name
