"""
fibprove CLI - execute, prove and generate EVM fixtures for the Fibonacci program

Main entry point for all CLI commands. Results go to stdout; diagnostics
(backend selection, credential advisories, request status) go to stderr.
"""

import asyncio
import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from fibprove import __version__
from fibprove.core.config import NetworkMode, ProverConfig
from fibprove.core.program.codec import U32_MAX
from fibprove.core.prover.backend import ProofMode
from fibprove.utils.logger import setup_logging

USAGE_ERROR_EXIT = 1

NETWORK_MODES = [mode.value for mode in NetworkMode]
EVM_SYSTEMS = [ProofMode.GROTH16.value, ProofMode.PLONK.value]


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, debug):
    """Proof orchestration for the Fibonacci guest program"""
    setup_logging(level=logging.DEBUG if debug else logging.INFO)

    # Environment is read once here and passed down from this point on
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", ProverConfig.from_env())


# =============================================================================
# Run Command
# =============================================================================


@cli.command("run")
@click.option("--execute", is_flag=True, help="Execute the program without proving")
@click.option("--prove", is_flag=True, help="Generate and verify a proof")
@click.option("--async-prove", is_flag=True, help="Submit a proof request to the network and wait for it")
@click.option("--n", default=10, type=click.IntRange(0, U32_MAX), show_default=True, help="Program input")
@click.option("--network-mode", type=click.Choice(NETWORK_MODES), default=None, help="Prover network tier")
@click.option("--poll-interval", type=click.FloatRange(min=0), default=None, help="Seconds between status checks")
@click.option("--timeout", type=click.FloatRange(min=0), default=None, help="Seconds to wait for an async proof")
@click.pass_context
def run(ctx, execute, prove, async_prove, n, network_mode, poll_interval, timeout):
    """Execute or prove the Fibonacci program"""
    from fibprove.core.prover.selector import select_backend
    from fibprove.core.workflow import execute_program, prove_async, prove_sync

    if sum((execute, prove, async_prove)) != 1:
        click.echo("Error: You must specify either --execute, --prove, or --async-prove", err=True)
        ctx.exit(USAGE_ERROR_EXIT)

    config = ctx.obj["config"]
    selection = select_backend(
        config,
        network_mode=NetworkMode(network_mode) if network_mode else None,
        async_prove=async_prove,
    )
    backend = selection.backend

    click.echo(f"n: {n}")

    if execute:
        result = execute_program(backend, n)
        click.echo("Program executed successfully.")
        click.echo(f"n: {result.values.n}")
        click.echo(f"a: {result.values.a}")
        click.echo(f"b: {result.values.b}")
        click.echo("Values are correct!")
        click.echo(f"Number of cycles: {result.report.total_instruction_count}")
        return

    if async_prove:
        click.echo("Submitting proof request to network...")

        def on_submitted(request_id):
            click.echo(f"Proof request submitted. Request ID: {request_id.hex()}")
            click.echo("Waiting for proof to complete...")

        proven = asyncio.run(
            prove_async(
                backend,
                n,
                poll_interval=poll_interval,
                timeout=timeout,
                on_submitted=on_submitted,
            )
        )
    else:
        proven = prove_sync(backend, n)

    click.echo("Successfully generated proof!")
    click.echo("Successfully verified proof!")
    click.echo(f"Verification Key: {proven.vk.bytes32()}")


# =============================================================================
# EVM Fixture Command
# =============================================================================


@cli.command("evm")
@click.option("--n", default=20, type=click.IntRange(0, U32_MAX), show_default=True, help="Program input")
@click.option("--system", type=click.Choice(EVM_SYSTEMS), default=ProofMode.GROTH16.value, show_default=True,
              help="EVM proof system")
@click.option("--fixtures-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Fixture output directory")
@click.pass_context
def evm(ctx, n, system, fixtures_dir):
    """Generate an EVM-compatible proof and write its fixture"""
    from fibprove.core.fixture import build_fixture, create_proof_fixture
    from fibprove.core.prover.selector import select_backend
    from fibprove.core.workflow import prove_sync

    config = ctx.obj["config"]
    mode = ProofMode(system)
    backend = select_backend(config).backend

    click.echo(f"n: {n}")
    click.echo(f"Proof System: {mode.value}")

    proven = prove_sync(backend, n, mode=mode)
    fixture = build_fixture(proven.artifact, proven.vk)

    click.echo(f"Verification Key: {fixture.vkey}")
    click.echo(f"Public Values: {fixture.public_values}")
    click.echo(f"Proof Bytes: {fixture.proof}")

    path = create_proof_fixture(proven.artifact, proven.vk, mode, fixtures_dir or config.fixtures_dir)
    click.echo(f"Fixture: {path}")


# =============================================================================
# Verifying Key Command
# =============================================================================


@cli.command("vkey")
def vkey():
    """Print the verifying key fingerprint of the Fibonacci program"""
    from fibprove.core.program.fibonacci import FIBONACCI_PROGRAM
    from fibprove.core.prover.local import CpuProver

    _, vk = CpuProver().setup(FIBONACCI_PROGRAM)
    click.echo(vk.bytes32())


if __name__ == "__main__":
    cli()
