"""
Shared fixtures: an in-memory prover network served through httpx.MockTransport.
"""

import json
import secrets
from typing import Dict, List, Optional

import httpx
import pytest

from fibprove.core.config import NetworkMode, ProverConfig
from fibprove.core.program.codec import ProgramStdin, PublicValues
from fibprove.core.program.fibonacci import FIBONACCI_PROGRAM
from fibprove.core.program.guest import run_guest
from fibprove.core.prover.backend import ProofMode, VerifyingKey, seal_proof
from fibprove.core.prover.network import NetworkProver
from fibprove.crypto import hex_to_bytes

TEST_RPC_URL = "https://rpc.test.invalid"


class FakeProverNetwork:
    """
    Minimal prover network.

    Proof requests stay pending for `pending_polls` status checks, then are
    fulfilled with a proof sealed under the submitted verifying key.
    """

    def __init__(self, pending_polls: int = 1):
        self.pending_polls = pending_polls
        self.jobs: Dict[str, dict] = {}
        self.requests: List[httpx.Request] = []
        self.reject_submissions = False
        self.unfulfillable_reason: Optional[str] = None
        self.corrupt_outputs = False
        self.seal_vkey: Optional[bytes] = None  # override the key proofs are sealed with
        self.programs = {FIBONACCI_PROGRAM.image.hex(): FIBONACCI_PROGRAM}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def _run(self, body: dict) -> bytes:
        program = self.programs[body["program"]]
        stdin = ProgramStdin()
        for item in body["stdin"]:
            stdin.write_slice(bytes.fromhex(item))
        public_values, self.last_report = run_guest(program, stdin)
        if self.corrupt_outputs:
            values = PublicValues.from_bytes(public_values)
            public_values = PublicValues(n=values.n, a=values.a, b=(values.b + 1) % 2**32).to_bytes()
        return public_values

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path == "/v1/execute":
            body = json.loads(request.content)
            public_values = self._run(body)
            return httpx.Response(200, json={
                "public_values": public_values.hex(),
                "report": self.last_report.to_dict(),
            })

        if request.method == "POST" and path == "/v1/proofs":
            if self.reject_submissions:
                return httpx.Response(400, json={"error": "invalid request"})
            body = json.loads(request.content)
            request_id = "0x" + secrets.token_hex(32)
            self.jobs[request_id] = {"body": body, "polls": 0}
            return httpx.Response(200, json={"request_id": request_id})

        if request.method == "GET" and path.startswith("/v1/proofs/"):
            request_id = path.rsplit("/", 1)[-1]
            job = self.jobs.get(request_id)
            if job is None:
                return httpx.Response(404, json={"error": "unknown request"})
            job["polls"] += 1
            if job["polls"] <= self.pending_polls:
                return httpx.Response(200, json={"status": "pending"})
            if self.unfulfillable_reason is not None:
                return httpx.Response(200, json={"status": "unfulfillable", "error": self.unfulfillable_reason})
            body = job["body"]
            mode = ProofMode(body["mode"])
            vk = VerifyingKey(self.seal_vkey or hex_to_bytes(body["vkey"]))
            public_values = self._run(body)
            return httpx.Response(200, json={
                "status": "fulfilled",
                "mode": mode.value,
                "proof": seal_proof(vk, public_values, mode).hex(),
                "public_values": public_values.hex(),
            })

        return httpx.Response(404)


@pytest.fixture
def fake_network():
    return FakeProverNetwork()


@pytest.fixture
def network_prover(fake_network):
    """Network prover wired to the fake network, polling without delay."""
    return NetworkProver(
        network_mode=NetworkMode.RESERVED,
        rpc_url=TEST_RPC_URL,
        poll_interval=0,
        transport=fake_network.transport,
    )


@pytest.fixture
def cpu_config(tmp_path):
    return ProverConfig(prover_mode="cpu", fixtures_dir=tmp_path / "fixtures")
