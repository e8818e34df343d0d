"""
Remote prover network client.

Talks JSON over HTTP to the prover network RPC:

    POST /v1/execute             {program, stdin}               -> {public_values, report}
    POST /v1/proofs              {program, vkey, stdin, mode}   -> {request_id}
    GET  /v1/proofs/{request_id}                                -> {status, proof?, public_values?, mode?, error?}

Status is one of "pending", "fulfilled" or "unfulfillable". When a requester
key is configured every call is signed (X-Requester / X-Signature); without
one, calls go out unsigned and only exempt requesters will be served.

Synchronous proving submits and then polls with blocking sleeps. The
asynchronous path polls with asyncio.sleep so only the calling task is
suspended. Abandoning a wait never cancels the remote job.
"""

import asyncio
import json
import time
from typing import Any, Dict, Optional, Tuple, Type

import httpx

from fibprove.core.config import DEFAULT_POLL_INTERVAL, NetworkMode
from fibprove.core.errors import (
    ExecutionError,
    FibProveError,
    ProofTimeoutError,
    ProvingError,
    SubmissionError,
)
from fibprove.core.program.codec import ProgramStdin
from fibprove.core.program.guest import ExecutionReport, GuestProgram
from fibprove.core.prover.backend import (
    ProofArtifact,
    ProofMode,
    ProofRequestId,
    ProverBackend,
    ProvingKey,
)
from fibprove.crypto import (
    address_from_public_key,
    bytes_to_hex,
    hex_to_bytes,
    keccak256,
    private_key_to_public_key,
    sign,
)
from fibprove.utils.logger import get_logger

logger = get_logger("prover.network")

STATUS_PENDING = "pending"
STATUS_FULFILLED = "fulfilled"
STATUS_UNFULFILLABLE = "unfulfillable"

DEFAULT_REQUEST_TIMEOUT = 30.0


class NetworkProver(ProverBackend):
    """Prover backend delegating to the remote prover network."""

    name = "network"
    supports_async = True

    def __init__(
        self,
        network_mode: NetworkMode = NetworkMode.RESERVED,
        rpc_url: Optional[str] = None,
        private_key: Optional[str] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Optional[Any] = None,
    ):
        """
        Initialize network prover.

        Args:
            network_mode: Deployment tier to talk to
            rpc_url: RPC base URL (defaults to the tier's public endpoint)
            private_key: Hex secp256k1 requester key, or None for unsigned calls
            poll_interval: Default seconds between status checks
            request_timeout: Per-HTTP-call timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.network_mode = network_mode
        self.rpc_url = (rpc_url or network_mode.default_rpc_url).rstrip("/")
        self.poll_interval = poll_interval
        self.request_timeout = request_timeout
        self._transport = transport

        self._private_key: Optional[bytes] = None
        self.requester: Optional[str] = None
        if private_key:
            self._private_key = hex_to_bytes(private_key.strip())
            self.requester = address_from_public_key(private_key_to_public_key(self._private_key))

    def describe(self) -> str:
        return f"network ({self.network_mode.value}, {self.rpc_url})"

    # =========================================================================
    # HTTP plumbing
    # =========================================================================

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.rpc_url,
            timeout=self.request_timeout,
            transport=self._transport,
        )

    def _async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.rpc_url,
            timeout=self.request_timeout,
            transport=self._transport,
        )

    def _headers(self, signed_payload: bytes) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._private_key is not None:
            signature = sign(keccak256(signed_payload), self._private_key)
            headers["X-Requester"] = self.requester
            headers["X-Signature"] = bytes_to_hex(signature)
        return headers

    def _encode(self, body: dict) -> bytes:
        return json.dumps(body, sort_keys=True).encode()

    @staticmethod
    def _status_path(request_id: ProofRequestId) -> str:
        return f"/v1/proofs/{request_id.hex()}"

    @staticmethod
    def _describe_failure(e: httpx.HTTPError) -> str:
        if isinstance(e, httpx.HTTPStatusError):
            return f"HTTP {e.response.status_code}: {e.response.text}"
        return f"{type(e).__name__}: {e}"

    @staticmethod
    def _json_object(response: httpx.Response, error_cls: Type[FibProveError], what: str) -> dict:
        """Decode a response body that must be a JSON object."""
        try:
            data = response.json()
        except ValueError as e:
            raise error_cls(f"Malformed {what} response: body is not JSON ({e})") from e
        if not isinstance(data, dict):
            raise error_cls(f"Malformed {what} response: expected a JSON object, got {type(data).__name__}")
        return data

    # =========================================================================
    # Request / response shapes
    # =========================================================================

    def _proof_request(self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode) -> dict:
        return {
            "program": pk.program.image.hex(),
            "vkey": pk.vk.bytes32(),
            "stdin": stdin.to_hex(),
            "mode": mode.value,
        }

    @staticmethod
    def _parse_request_id(data: dict) -> ProofRequestId:
        try:
            return ProofRequestId(hex_to_bytes(data["request_id"]))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SubmissionError(f"Malformed submission response: {data!r}") from e

    @staticmethod
    def _parse_status(request_id: ProofRequestId, data: dict) -> Optional[ProofArtifact]:
        """Return the artifact once fulfilled, None while pending."""
        status = data.get("status")
        if status == STATUS_PENDING:
            return None
        if status == STATUS_FULFILLED:
            try:
                return ProofArtifact(
                    proof=hex_to_bytes(data["proof"]),
                    public_values=hex_to_bytes(data["public_values"]),
                    mode=ProofMode(data.get("mode", ProofMode.CORE.value)),
                )
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise ProvingError(f"Malformed proof for request {request_id}: {e}") from e
        if status == STATUS_UNFULFILLABLE:
            reason = data.get("error") or "no reason given"
            raise ProvingError(f"Proof request {request_id} is unfulfillable: {reason}")
        raise ProvingError(f"Unknown status {status!r} for proof request {request_id}")

    # =========================================================================
    # ProverBackend
    # =========================================================================

    def execute(self, program: GuestProgram, stdin: ProgramStdin) -> Tuple[bytes, ExecutionReport]:
        payload = self._encode({"program": program.image.hex(), "stdin": stdin.to_hex()})
        try:
            with self._client() as client:
                response = client.post("/v1/execute", content=payload, headers=self._headers(payload))
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise ExecutionError(f"Remote execution failed: {self._describe_failure(e)}") from e
        data = self._json_object(response, ExecutionError, "execution")

        if "error" in data:
            raise ExecutionError(f"Guest program {program.name} trapped: {data['error']}")
        try:
            public_values = hex_to_bytes(data["public_values"])
            report = ExecutionReport.from_dict(data.get("report", {}))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ExecutionError(f"Malformed execution response: {data!r}") from e
        return public_values, report

    def prove(self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode = ProofMode.CORE) -> ProofArtifact:
        payload = self._encode(self._proof_request(pk, stdin, mode))
        with self._client() as client:
            try:
                response = client.post("/v1/proofs", content=payload, headers=self._headers(payload))
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ProvingError(f"Proof request rejected: {self._describe_failure(e)}") from e

            try:
                request_id = self._parse_request_id(self._json_object(response, SubmissionError, "submission"))
            except SubmissionError as e:
                raise ProvingError(str(e)) from e
            logger.info(f"Proof request {request_id} submitted, waiting for fulfillment")

            path = self._status_path(request_id)
            while True:
                try:
                    response = client.get(path, headers=self._headers(path.encode()))
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    raise ProvingError(
                        f"Status check for {request_id} failed: {self._describe_failure(e)}"
                    ) from e

                artifact = self._parse_status(request_id, self._json_object(response, ProvingError, "status"))
                if artifact is not None:
                    logger.info(f"Proof request {request_id} fulfilled")
                    return artifact
                time.sleep(self.poll_interval)

    async def request_async(
        self, pk: ProvingKey, stdin: ProgramStdin, mode: ProofMode = ProofMode.CORE
    ) -> ProofRequestId:
        payload = self._encode(self._proof_request(pk, stdin, mode))
        try:
            async with self._async_client() as client:
                response = await client.post("/v1/proofs", content=payload, headers=self._headers(payload))
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise SubmissionError(f"Proof request rejected: {self._describe_failure(e)}") from e

        data = self._json_object(response, SubmissionError, "submission")
        request_id = self._parse_request_id(data)
        logger.info(f"Proof request submitted: {request_id}")
        return request_id

    async def wait(
        self,
        request_id: ProofRequestId,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> ProofArtifact:
        interval = self.poll_interval if poll_interval is None else poll_interval
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        path = self._status_path(request_id)

        async with self._async_client() as client:
            while True:
                if cancel is not None and cancel.is_set():
                    raise asyncio.CancelledError(f"Wait for {request_id} cancelled")

                try:
                    response = await client.get(path, headers=self._headers(path.encode()))
                    response.raise_for_status()
                except httpx.HTTPError as e:
                    raise ProvingError(
                        f"Status check for {request_id} failed: {self._describe_failure(e)}"
                    ) from e

                artifact = self._parse_status(request_id, self._json_object(response, ProvingError, "status"))
                if artifact is not None:
                    logger.info(f"Proof request {request_id} fulfilled")
                    return artifact

                delay = interval
                if deadline is not None:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        raise ProofTimeoutError(request_id.hex(), timeout)
                    delay = min(interval, remaining)

                logger.debug(f"Proof request {request_id} pending, next check in {delay:.1f}s")
                if cancel is None:
                    await asyncio.sleep(delay)
                else:
                    try:
                        await asyncio.wait_for(cancel.wait(), timeout=delay)
                    except asyncio.TimeoutError:
                        pass
