"""
Proof orchestration workflows.

Three entry points, all issued against a single ProverBackend:

- execute_program: run without proving, decode and cross-check outputs
- prove_sync:      setup -> prove (blocking) -> verify
- prove_async:     setup -> submit -> wait -> verify

Verification always follows a successful proof and never starts before the
artifact has been fully received.
"""

import asyncio
from dataclasses import dataclass
from typing import Callable, Optional

from fibprove.core.errors import ConsistencyError
from fibprove.core.program.codec import PublicValues, decode_public_values, encode_input
from fibprove.core.program.fibonacci import FIBONACCI_PROGRAM, fibonacci
from fibprove.core.program.guest import ExecutionReport, GuestProgram
from fibprove.core.prover.backend import (
    ProofArtifact,
    ProofMode,
    ProofRequestId,
    ProverBackend,
    VerifyingKey,
)
from fibprove.utils.logger import get_logger

logger = get_logger("workflow")


@dataclass(frozen=True)
class ExecutionResult:
    values: PublicValues
    report: ExecutionReport


@dataclass(frozen=True)
class ProvenProgram:
    """A verified proof and the key it was verified against."""
    artifact: ProofArtifact
    vk: VerifyingKey
    request_id: Optional[ProofRequestId] = None

    @property
    def values(self) -> PublicValues:
        return decode_public_values(self.artifact.public_values)


def check_consistency(values: PublicValues, n: Optional[int] = None) -> None:
    """
    Recompute (a, b) for n and compare with the decoded outputs.

    When `n` is given the committed input must also match it.

    Raises:
        ConsistencyError: the backend miscomputed the guest program
    """
    if n is not None and values.n != n:
        raise ConsistencyError(f"Backend committed n={values.n} for requested n={n}")
    expected_a, expected_b = fibonacci(values.n)
    if (values.a, values.b) != (expected_a, expected_b):
        raise ConsistencyError(
            f"fibonacci({values.n}) mismatch: backend returned a={values.a}, b={values.b}; "
            f"expected a={expected_a}, b={expected_b}"
        )


def execute_program(
    backend: ProverBackend,
    n: int,
    program: GuestProgram = FIBONACCI_PROGRAM,
) -> ExecutionResult:
    """
    Execute the program for `n` without producing a proof.

    Raises:
        ExecutionError: guest trapped or backend unreachable
        DecodeError: committed outputs have the wrong layout
        ConsistencyError: outputs disagree with the reference values
    """
    stdin = encode_input(n)
    output, report = backend.execute(program, stdin)
    values = decode_public_values(output)
    check_consistency(values, n)
    logger.info(f"Executed {program.name} for n={n} in {report.total_instruction_count} cycles")
    return ExecutionResult(values=values, report=report)


def prove_sync(
    backend: ProverBackend,
    n: int,
    program: GuestProgram = FIBONACCI_PROGRAM,
    mode: ProofMode = ProofMode.CORE,
) -> ProvenProgram:
    """
    Generate and verify a proof, blocking until it is produced.

    Raises:
        ProvingError: backend failed to produce a proof
        VerificationError: proof failed verification
    """
    pk, vk = backend.setup(program)
    artifact = backend.prove(pk, encode_input(n), mode)
    backend.verify(artifact, vk)
    logger.info(f"Verified {mode.value} proof for n={n} against {vk.bytes32()}")
    return ProvenProgram(artifact=artifact, vk=vk)


async def prove_async(
    backend: ProverBackend,
    n: int,
    program: GuestProgram = FIBONACCI_PROGRAM,
    mode: ProofMode = ProofMode.CORE,
    poll_interval: Optional[float] = None,
    timeout: Optional[float] = None,
    cancel: Optional[asyncio.Event] = None,
    on_submitted: Optional[Callable[[ProofRequestId], None]] = None,
) -> ProvenProgram:
    """
    Submit a proof request, wait for it, then verify.

    Args:
        backend: Backend supporting asynchronous requests
        n: Program input
        program: Guest program to prove
        mode: Proof representation
        poll_interval: Seconds between status checks (backend default if None)
        timeout: Seconds to wait; None waits indefinitely
        cancel: Event aborting the wait; the remote job is left running
        on_submitted: Called with the request id as soon as it is known

    Raises:
        SubmissionError: request rejected
        ProofTimeoutError: timeout elapsed before fulfillment
        ProvingError: backend reported the request as failed
        VerificationError: proof failed verification
    """
    pk, vk = backend.setup(program)
    request_id = await backend.request_async(pk, encode_input(n), mode)
    if on_submitted is not None:
        on_submitted(request_id)

    artifact = await backend.wait(request_id, poll_interval=poll_interval, timeout=timeout, cancel=cancel)
    backend.verify(artifact, vk)
    logger.info(f"Verified {mode.value} proof for request {request_id}")
    return ProvenProgram(artifact=artifact, vk=vk, request_id=request_id)
