"""
Prover configuration for fibprove.

Environment is read exactly once (at process start) into a ProverConfig
value that is then passed to every stage. Core code never touches
os.environ on its own.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from fibprove.utils.logger import get_logger

logger = get_logger("config")


# =============================================================================
# Environment Variables
# =============================================================================

ENV_PROVER = "MONEROCHAN_PROVER"
ENV_NETWORK_MODE = "MONEROCHAN_NETWORK_MODE"
ENV_NETWORK_RPC_URL = "MONEROCHAN_NETWORK_RPC_URL"
ENV_NETWORK_PRIVATE_KEY = "MONEROCHAN_NETWORK_PRIVATE_KEY"
ENV_BASE_PRIVATE_KEY = "BASE_PRIVATE_KEY"
ENV_FIXTURES_DIR = "FIBPROVE_FIXTURES_DIR"
ENV_POLL_INTERVAL = "FIBPROVE_POLL_INTERVAL"

# Accepted credential variables, in order of precedence
CREDENTIAL_VARS = (ENV_NETWORK_PRIVATE_KEY, ENV_BASE_PRIVATE_KEY)

DEFAULT_PROVER = "cpu"
DEFAULT_FIXTURES_DIR = Path("contracts/src/fixtures")
DEFAULT_POLL_INTERVAL = 2.0


class NetworkMode(str, Enum):
    """Deployment tier of the remote prover network."""
    MAINNET = "mainnet"
    RESERVED = "reserved"

    @property
    def default_rpc_url(self) -> str:
        return DEFAULT_RPC_URLS[self]


DEFAULT_RPC_URLS = {
    NetworkMode.MAINNET: "https://rpc.mainnet.monerochan.network",
    NetworkMode.RESERVED: "https://rpc.reserved.monerochan.network",
}


@dataclass(frozen=True)
class ProverConfig:
    """Process-wide configuration, resolved once"""

    prover_mode: str = DEFAULT_PROVER           # "cpu" or "network"
    network_mode: Optional[NetworkMode] = None  # None -> selector default
    rpc_url: Optional[str] = None               # None -> per-mode default
    private_key: Optional[str] = None           # hex secp256k1 requester key
    credential_source: Optional[str] = None     # env var the key came from
    fixtures_dir: Path = DEFAULT_FIXTURES_DIR
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @property
    def has_credentials(self) -> bool:
        return self.private_key is not None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProverConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Returns:
            ProverConfig instance
        """
        env = os.environ if environ is None else environ

        network_mode = None
        raw_mode = env.get(ENV_NETWORK_MODE)
        if raw_mode:
            try:
                network_mode = NetworkMode(raw_mode.strip().lower())
            except ValueError:
                logger.warning(f"Ignoring unknown {ENV_NETWORK_MODE}={raw_mode!r}")

        private_key = None
        credential_source = None
        for var in CREDENTIAL_VARS:
            if env.get(var):
                private_key = env[var]
                credential_source = var
                break

        poll_interval = DEFAULT_POLL_INTERVAL
        if env.get(ENV_POLL_INTERVAL):
            poll_interval = float(env[ENV_POLL_INTERVAL])

        return cls(
            prover_mode=env.get(ENV_PROVER, DEFAULT_PROVER).strip().lower(),
            network_mode=network_mode,
            rpc_url=env.get(ENV_NETWORK_RPC_URL) or None,
            private_key=private_key,
            credential_source=credential_source,
            fixtures_dir=Path(env.get(ENV_FIXTURES_DIR) or DEFAULT_FIXTURES_DIR),
            poll_interval=poll_interval,
        )
