"""
Local CPU prover.

Runs the guest in-process and seals the committed public values. Useful for
development and testing without access to the prover network; asynchronous
requests are not supported because there is no remote job to track.
"""

import asyncio
import time
from typing import Optional, Tuple

from fibprove.core.errors import ExecutionError, ProvingError, SubmissionError
from fibprove.core.program.codec import ProgramStdin
from fibprove.core.program.guest import DEFAULT_MAX_CYCLES, ExecutionReport, GuestProgram, run_guest
from fibprove.core.prover.backend import (
    ProofArtifact,
    ProofMode,
    ProofRequestId,
    ProverBackend,
    ProvingKey,
    seal_proof,
)
from fibprove.utils.logger import get_logger

logger = get_logger("prover.cpu")


class CpuProver(ProverBackend):
    """Local prover backend."""

    name = "cpu"
    supports_async = False

    def __init__(self, max_cycles: int = DEFAULT_MAX_CYCLES):
        """
        Initialize CPU prover.

        Args:
            max_cycles: Cycle budget after which the guest traps
        """
        self.max_cycles = max_cycles

    def execute(self, program: GuestProgram, stdin: ProgramStdin) -> Tuple[bytes, ExecutionReport]:
        return run_guest(program, stdin, max_cycles=self.max_cycles)

    def prove(self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode = ProofMode.CORE) -> ProofArtifact:
        start_time = time.time()
        try:
            public_values, report = run_guest(pk.program, stdin, max_cycles=self.max_cycles)
        except ExecutionError as e:
            raise ProvingError(f"Proving failed during execution: {e}") from e

        artifact = ProofArtifact(
            proof=seal_proof(pk.vk, public_values, mode),
            public_values=public_values,
            mode=mode,
        )

        proving_time_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"{mode.value} proof generated for {pk.program.name} "
            f"({report.total_instruction_count} cycles) in {proving_time_ms}ms"
        )
        return artifact

    async def request_async(
        self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode = ProofMode.CORE
    ) -> ProofRequestId:
        raise SubmissionError("Asynchronous proof requests require the network prover")

    async def wait(
        self,
        request_id: ProofRequestId,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> ProofArtifact:
        raise ProvingError(f"Unknown proof request {request_id}: the CPU prover has no remote jobs")
