"""
Prover client selection.

Resolves which backend a run uses from configuration alone:

1. Asynchronous proving forces the network backend.
2. An explicit network mode selects the network backend.
3. Otherwise the requested backend ("network" or anything else -> CPU).

Missing optional configuration never fails the run: an unset network mode
falls back to the reserved tier, and missing credentials only produce an
advisory, since some requesters are exempt from authentication.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fibprove.core.config import CREDENTIAL_VARS, NetworkMode, ProverConfig
from fibprove.core.prover.backend import ProverBackend
from fibprove.core.prover.local import CpuProver
from fibprove.core.prover.network import NetworkProver
from fibprove.utils.logger import get_logger

logger = get_logger("selector")

NETWORK_BACKEND = "network"


class BackendKind(Enum):
    LOCAL = "local"
    REMOTE = "remote"


@dataclass(frozen=True)
class BackendSelection:
    """The bound backend for this run and how it was chosen."""
    backend: ProverBackend
    kind: BackendKind
    network_mode: Optional[NetworkMode] = None

    @property
    def is_remote(self) -> bool:
        return self.kind is BackendKind.REMOTE


def check_credentials(config: ProverConfig) -> bool:
    """
    Report on network authentication. Advisory only.

    Returns:
        True if a requester key is configured
    """
    if config.has_credentials:
        logger.info(f"Network authentication: {config.credential_source} is set")
        return True

    logger.warning(f"Neither {' nor '.join(CREDENTIAL_VARS)} is set.")
    logger.warning("Network proving may fail for non-exempt clients.")
    logger.warning(
        f"Set {CREDENTIAL_VARS[0]} (or {CREDENTIAL_VARS[1]}) to your requester "
        f"private key (hex) for authentication."
    )
    return False


def resolve_network_mode(config: ProverConfig, network_mode: Optional[NetworkMode]) -> NetworkMode:
    if network_mode is not None:
        return network_mode
    if config.network_mode is not None:
        return config.network_mode
    logger.warning(f"No network mode specified, defaulting to {NetworkMode.RESERVED.value}")
    return NetworkMode.RESERVED


def select_backend(
    config: ProverConfig,
    backend: Optional[str] = None,
    network_mode: Optional[NetworkMode] = None,
    async_prove: bool = False,
) -> BackendSelection:
    """
    Choose and build the prover backend for this run.

    Args:
        config: Process configuration
        backend: Explicit backend request; None uses config.prover_mode
        network_mode: Explicit network tier (implies the network backend)
        async_prove: Caller wants asynchronous proving (forces the network backend)

    Returns:
        BackendSelection with exactly one bound backend
    """
    requested = (backend or config.prover_mode or "").strip().lower()
    logger.info(f"Using prover mode: {requested or 'cpu'}")

    remote = async_prove or network_mode is not None or requested == NETWORK_BACKEND
    if not remote:
        return BackendSelection(backend=CpuProver(), kind=BackendKind.LOCAL)

    mode = resolve_network_mode(config, network_mode)
    if async_prove:
        logger.info(f"Using network prover with mode: {mode.value} (required for async proving)")
    else:
        logger.info(f"Using network prover with mode: {mode.value}")

    check_credentials(config)

    prover = NetworkProver(
        network_mode=mode,
        rpc_url=config.rpc_url,
        private_key=config.private_key,
        poll_interval=config.poll_interval,
    )
    return BackendSelection(backend=prover, kind=BackendKind.REMOTE, network_mode=mode)
