"""
Error taxonomy for proof orchestration.

Every failure below is fatal to a run: nothing in the core catches one of
these and falls back to another behavior. Retrying is left to the operator.
"""


class FibProveError(Exception):
    """Base class for all orchestration failures."""


class UsageError(FibProveError):
    """Conflicting or missing invocation mode flags."""


class DecodeError(FibProveError, ValueError):
    """Committed public values do not match the expected ABI layout."""


class ExecutionError(FibProveError):
    """Guest program trapped or the backend could not execute it."""


class ProvingError(FibProveError):
    """Backend failed to produce a proof."""


class SubmissionError(FibProveError):
    """Asynchronous proof request was rejected or could not be sent."""


class VerificationError(FibProveError):
    """Proof does not attest the claimed public values under the given key."""


class ProofTimeoutError(FibProveError, TimeoutError):
    """Waiting for an asynchronous proof exceeded its timeout."""

    def __init__(self, request_id: str, timeout: float):
        super().__init__(f"Proof request {request_id} not fulfilled within {timeout}s")
        self.request_id = request_id
        self.timeout = timeout


class ConsistencyError(FibProveError):
    """Decoded outputs disagree with locally recomputed reference values."""


class FixtureWriteError(FibProveError, OSError):
    """Fixture file could not be persisted."""
