"""
Unit tests for configuration and prover client selection.
"""

import logging
from pathlib import Path

import pytest

from fibprove.core.config import (
    DEFAULT_FIXTURES_DIR,
    DEFAULT_POLL_INTERVAL,
    NetworkMode,
    ProverConfig,
)
from fibprove.core.prover import BackendKind, CpuProver, NetworkProver, select_backend


@pytest.fixture
def log(caplog):
    caplog.set_level(logging.INFO, logger="fibprove")
    return caplog


# =============================================================================
# ProverConfig Tests
# =============================================================================


class TestProverConfig:
    """Tests for ProverConfig.from_env."""

    def test_defaults(self):
        config = ProverConfig.from_env({})
        assert config.prover_mode == "cpu"
        assert config.network_mode is None
        assert config.private_key is None
        assert config.fixtures_dir == DEFAULT_FIXTURES_DIR
        assert config.poll_interval == DEFAULT_POLL_INTERVAL

    def test_reads_environment(self):
        config = ProverConfig.from_env({
            "MONEROCHAN_PROVER": "Network",
            "MONEROCHAN_NETWORK_MODE": "mainnet",
            "MONEROCHAN_NETWORK_RPC_URL": "https://rpc.example",
            "FIBPROVE_FIXTURES_DIR": "out/fixtures",
            "FIBPROVE_POLL_INTERVAL": "0.5",
        })
        assert config.prover_mode == "network"
        assert config.network_mode is NetworkMode.MAINNET
        assert config.rpc_url == "https://rpc.example"
        assert config.fixtures_dir == Path("out/fixtures")
        assert config.poll_interval == 0.5

    def test_primary_credential_preferred(self):
        config = ProverConfig.from_env({
            "MONEROCHAN_NETWORK_PRIVATE_KEY": "0x01",
            "BASE_PRIVATE_KEY": "0x02",
        })
        assert config.private_key == "0x01"
        assert config.credential_source == "MONEROCHAN_NETWORK_PRIVATE_KEY"

    def test_fallback_credential(self):
        config = ProverConfig.from_env({"BASE_PRIVATE_KEY": "0x02"})
        assert config.has_credentials
        assert config.credential_source == "BASE_PRIVATE_KEY"

    def test_unknown_network_mode_ignored(self, log):
        config = ProverConfig.from_env({"MONEROCHAN_NETWORK_MODE": "devnet"})
        assert config.network_mode is None
        assert "devnet" in log.text


# =============================================================================
# Selection Tests
# =============================================================================


class TestSelectBackend:
    """Tests for select_backend."""

    def test_default_is_local(self):
        selection = select_backend(ProverConfig())
        assert selection.kind is BackendKind.LOCAL
        assert isinstance(selection.backend, CpuProver)
        assert selection.network_mode is None

    def test_unknown_backend_is_local(self):
        selection = select_backend(ProverConfig(prover_mode="gpu"))
        assert selection.kind is BackendKind.LOCAL

    def test_network_from_config(self):
        selection = select_backend(ProverConfig(prover_mode="network", network_mode=NetworkMode.MAINNET))
        assert selection.is_remote
        assert isinstance(selection.backend, NetworkProver)
        assert selection.network_mode is NetworkMode.MAINNET

    def test_explicit_backend_overrides_config(self):
        selection = select_backend(ProverConfig(prover_mode="network"), backend="cpu")
        assert selection.kind is BackendKind.LOCAL

    def test_explicit_network_mode_selects_remote(self):
        selection = select_backend(ProverConfig(), network_mode=NetworkMode.MAINNET)
        assert selection.is_remote
        assert selection.network_mode is NetworkMode.MAINNET

    def test_async_forces_remote(self, log):
        selection = select_backend(ProverConfig(prover_mode="cpu"), async_prove=True)
        assert selection.is_remote
        assert selection.backend.supports_async
        assert "required for async proving" in log.text

    def test_missing_network_mode_defaults_to_reserved(self, log):
        selection = select_backend(ProverConfig(prover_mode="network"))
        assert selection.network_mode is NetworkMode.RESERVED
        assert any(
            r.levelno == logging.WARNING and "defaulting to reserved" in r.getMessage()
            for r in log.records
        )

    def test_explicit_mode_beats_config_mode(self):
        config = ProverConfig(prover_mode="network", network_mode=NetworkMode.RESERVED)
        selection = select_backend(config, network_mode=NetworkMode.MAINNET)
        assert selection.network_mode is NetworkMode.MAINNET

    def test_missing_credentials_is_advisory(self, log):
        selection = select_backend(ProverConfig(prover_mode="network"))
        assert selection.is_remote
        assert "Network proving may fail for non-exempt clients." in log.text

    def test_credentials_reported(self, log):
        config = ProverConfig(
            prover_mode="network",
            private_key="0x" + "00" * 31 + "01",
            credential_source="BASE_PRIVATE_KEY",
        )
        selection = select_backend(config)
        assert selection.backend.requester is not None
        assert "BASE_PRIVATE_KEY is set" in log.text
        assert "non-exempt" not in log.text

    def test_local_skips_credential_check(self, log):
        select_backend(ProverConfig())
        assert "non-exempt" not in log.text

    def test_config_passed_to_network_prover(self):
        config = ProverConfig(prover_mode="network", rpc_url="https://rpc.example/", poll_interval=0.25)
        backend = select_backend(config).backend
        assert backend.rpc_url == "https://rpc.example"
        assert backend.poll_interval == 0.25
