"""
Guest program model and the local execution runtime.

A GuestProgram is the opaque unit being proven: it has an image (the bytes
the prover keys are derived from and that are shipped to the remote
network) and an entrypoint run by the local runtime.

The runtime only models what orchestration needs: ordered stdin reads,
committed public values, and a cycle count.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from fibprove.core.errors import ExecutionError
from fibprove.core.program.codec import ProgramStdin, decode_input_u32
from fibprove.crypto import keccak256
from fibprove.utils.logger import get_logger

logger = get_logger("runtime")

# Fixed cost charged for each syscall (stdin read, commit)
SYSCALL_CYCLES = 50

DEFAULT_MAX_CYCLES = 100_000_000


@dataclass(frozen=True)
class GuestProgram:
    """A guest program identified by name and version."""
    name: str
    version: str
    entrypoint: Callable[["GuestEnv"], None] = field(compare=False, repr=False)

    @property
    def image(self) -> bytes:
        """Program image bytes (identity of the compiled guest)."""
        return f"{self.name}@{self.version}".encode()

    @property
    def image_id(self) -> bytes:
        return keccak256(self.image)


@dataclass
class ExecutionReport:
    """Resource usage of one guest execution."""
    total_instruction_count: int = 0
    total_syscall_count: int = 0
    cycle_tracker: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_instruction_count": self.total_instruction_count,
            "total_syscall_count": self.total_syscall_count,
            "cycle_tracker": dict(self.cycle_tracker),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExecutionReport":
        return cls(
            total_instruction_count=int(data.get("total_instruction_count", 0)),
            total_syscall_count=int(data.get("total_syscall_count", 0)),
            cycle_tracker={k: int(v) for k, v in data.get("cycle_tracker", {}).items()},
        )


class GuestEnv:
    """Environment passed to a guest entrypoint."""

    def __init__(self, stdin: ProgramStdin, max_cycles: int = DEFAULT_MAX_CYCLES):
        self._stdin: List[bytes] = list(stdin.buffer)
        self._cursor = 0
        self._committed = bytearray()
        self._committed_any = False
        self.max_cycles = max_cycles
        self.report = ExecutionReport()

    def step(self, cycles: int = 1, label: Optional[str] = None) -> None:
        """Charge cycles to the execution; traps when over budget."""
        self.report.total_instruction_count += cycles
        if label:
            self.report.cycle_tracker[label] = self.report.cycle_tracker.get(label, 0) + cycles
        if self.report.total_instruction_count > self.max_cycles:
            raise ExecutionError(f"Cycle limit exceeded ({self.max_cycles})")

    def _syscall(self) -> None:
        self.report.total_syscall_count += 1
        self.step(SYSCALL_CYCLES)

    def read_slice(self) -> bytes:
        self._syscall()
        if self._cursor >= len(self._stdin):
            raise ExecutionError("Guest read past end of stdin")
        item = self._stdin[self._cursor]
        self._cursor += 1
        return item

    def read_u32(self) -> int:
        return decode_input_u32(self.read_slice())

    def commit_slice(self, data: bytes) -> None:
        self._syscall()
        self._committed.extend(data)
        self._committed_any = True

    @property
    def public_values(self) -> bytes:
        return bytes(self._committed)


def run_guest(
    program: GuestProgram,
    stdin: ProgramStdin,
    max_cycles: int = DEFAULT_MAX_CYCLES,
) -> Tuple[bytes, ExecutionReport]:
    """
    Run a guest program to completion.

    Returns:
        (committed public values, execution report)

    Raises:
        ExecutionError: if the guest traps or commits nothing
    """
    env = GuestEnv(stdin, max_cycles=max_cycles)
    try:
        program.entrypoint(env)
    except ExecutionError:
        raise
    except Exception as e:
        raise ExecutionError(f"Guest program {program.name} trapped: {e}") from e

    if not env._committed_any:
        raise ExecutionError(f"Guest program {program.name} committed no public values")

    logger.debug(
        f"{program.name} executed in {env.report.total_instruction_count} cycles "
        f"({env.report.total_syscall_count} syscalls)"
    )
    return env.public_values, env.report
