"""
EVM proof fixtures.

A fixture bundles a proof, its public values and the verifying key
fingerprint in the JSON shape the on-chain verifier tests load:

    {"a": ..., "b": ..., "n": ..., "vkey": "0x..", "publicValues": "0x..", "proof": "0x.."}

One file per proof system, `<fixtures_dir>/<system>-fixture.json`. Writing
again for the same system replaces the previous file.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from fibprove.core.errors import FixtureWriteError
from fibprove.core.program.codec import decode_public_values
from fibprove.core.prover.backend import ProofArtifact, ProofMode, VerifyingKey
from fibprove.crypto import bytes_to_hex
from fibprove.utils.logger import get_logger

logger = get_logger("fixture")


class ProofFixture(BaseModel):
    """Fixture record consumed by the verifier contract tests."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    a: int
    b: int
    n: int
    vkey: str
    public_values: str
    proof: str

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


def build_fixture(artifact: ProofArtifact, vk: VerifyingKey) -> ProofFixture:
    """Decode the artifact's public values and hex-encode the blobs."""
    values = decode_public_values(artifact.public_values)
    return ProofFixture(
        a=values.a,
        b=values.b,
        n=values.n,
        vkey=vk.bytes32(),
        public_values=bytes_to_hex(artifact.public_values),
        proof=bytes_to_hex(artifact.bytes()),
    )


def fixture_path(fixtures_dir: Path, system: ProofMode) -> Path:
    return Path(fixtures_dir) / f"{system.value.lower()}-fixture.json"


def create_proof_fixture(
    artifact: ProofArtifact,
    vk: VerifyingKey,
    system: ProofMode,
    fixtures_dir: Path,
) -> Path:
    """
    Write the fixture for `system`, replacing any previous one.

    Returns:
        Path of the written fixture

    Raises:
        DecodeError: artifact public values are malformed
        FixtureWriteError: directory or file could not be written
    """
    fixture = build_fixture(artifact, vk)
    path = fixture_path(fixtures_dir, system)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(fixture.to_json())
    except OSError as e:
        raise FixtureWriteError(f"Failed to write fixture {path}: {e}") from e

    logger.info(f"Fixture written to {path}")
    return path
