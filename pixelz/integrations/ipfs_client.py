"""
IPFS Client

This module provides the content store used for NFT assets and metadata.
It talks to an IPFS node through the node's HTTP RPC API (/api/v0).

Adds always use CID version 1 with sha2-256 so that storing the same bytes
under the same name twice yields the same address.
"""

import base64
import json
import logging
import posixpath
from typing import Any, Dict, List, Optional

import httpx

from ..exceptions import ContentStoreError, MalformedDataError, NotFoundError
from ..utils.uri_utils import strip_ipfs_uri_prefix

logger = logging.getLogger(__name__)

# ipfs add parameters for deterministic CIDs
IPFS_ADD_OPTIONS = {
    "cid-version": "1",
    "hash": "sha2-256",
    "wrap-with-directory": "true",
    "pin": "true",
}

_NOT_FOUND_MARKERS = ("not found", "no link named", "no such file")


class IPFSClient:
    """Client for storing and fetching content through an IPFS node."""

    def __init__(
        self,
        api_url: str = "http://localhost:5001",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize IPFS client.

        Args:
            api_url: Base URL of the node's RPC API
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used in place of the network
        """
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.api_url}/api/v0",
            timeout=self.timeout,
            transport=self.transport,
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json().get("Message", response.text)
        except ValueError:
            return response.text

    def _raise_for_status(self, operation: str, address: str, response: httpx.Response) -> None:
        if response.is_success:
            return
        message = self._error_message(response)
        if any(marker in message.lower() for marker in _NOT_FOUND_MARKERS):
            raise NotFoundError(address, f"content not found: {address} ({message})")
        raise ContentStoreError(operation, response.status_code, message)

    @staticmethod
    def _parse_ndjson(text: str) -> List[Dict[str, Any]]:
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    async def store(self, data: bytes, path_hint: str = "asset.bin") -> str:
        """
        Store raw bytes on IPFS.

        The data is added inside a wrapping directory under the basename of
        path_hint, so the returned address keeps the file name.

        Args:
            data: Raw bytes to store
            path_hint: Logical path; only its basename is kept

        Returns:
            Content address of the form "<directory-cid>/<basename>"
        """
        basename = posixpath.basename(path_hint) or "asset.bin"
        files = {"file": (basename, data, "application/octet-stream")}

        async with self._client() as client:
            response = await client.post("/add", params=IPFS_ADD_OPTIONS, files=files)
        self._raise_for_status("add", basename, response)

        entries = self._parse_ndjson(response.text)
        if not entries:
            raise ContentStoreError("add", response.status_code, "empty response from node")
        wrapper = next((e for e in entries if e.get("Name") == ""), entries[-1])
        address = f"{wrapper['Hash']}/{basename}"
        logger.debug(f"IPFSClient: stored {len(data)} bytes at {address}")
        return address

    async def store_json(self, obj: Any, path_hint: str = "metadata.json") -> str:
        """Serialise obj as JSON and store it."""
        return await self.store(json.dumps(obj).encode("utf-8"), path_hint)

    async def fetch(self, cid_or_uri: str) -> bytes:
        """
        Fetch previously stored bytes.

        Args:
            cid_or_uri: Content address, with or without the ipfs:// scheme

        Raises:
            NotFoundError: if the node does not know the address
        """
        address = strip_ipfs_uri_prefix(cid_or_uri)
        async with self._client() as client:
            response = await client.post("/cat", params={"arg": address})
        self._raise_for_status("cat", address, response)
        return response.content

    async def fetch_string(self, cid_or_uri: str) -> str:
        data = await self.fetch(cid_or_uri)
        return data.decode("utf-8")

    async def fetch_base64(self, cid_or_uri: str) -> str:
        data = await self.fetch(cid_or_uri)
        return base64.b64encode(data).decode("ascii")

    async def fetch_json(self, cid_or_uri: str) -> Any:
        """
        Fetch and parse JSON content.

        Raises:
            MalformedDataError: if the content is not valid JSON
        """
        data = await self.fetch(cid_or_uri)
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedDataError(strip_ipfs_uri_prefix(cid_or_uri), e) from e

    # --- Pinning

    async def pin(self, cid: str, service: Optional[str] = None) -> None:
        """
        Pin a CID, on the local node or on a remote pinning service.

        Remote pins that already exist on the service are left alone.
        """
        if service is None:
            async with self._client() as client:
                response = await client.post("/pin/add", params={"arg": cid})
            self._raise_for_status("pin/add", cid, response)
            logger.info(f"IPFSClient: pinned {cid} on local node")
            return

        if await self.is_pinned_remote(cid, service):
            logger.info(f"IPFSClient: {cid} already pinned on {service}")
            return

        async with self._client() as client:
            response = await client.post(
                "/pin/remote/add",
                params={"arg": cid, "service": service, "background": "false"},
            )
        self._raise_for_status("pin/remote/add", cid, response)
        logger.info(f"IPFSClient: pinned {cid} on remote service {service}")

    async def is_pinned_remote(self, cid: str, service: str) -> bool:
        params = [
            ("service", service),
            ("cid", cid),
            ("status", "queued"),
            ("status", "pinning"),
            ("status", "pinned"),
        ]
        async with self._client() as client:
            response = await client.post("/pin/remote/ls", params=params)
        self._raise_for_status("pin/remote/ls", cid, response)
        return len(self._parse_ndjson(response.text)) > 0

    async def ensure_pinning_service(self, name: str, endpoint: str, key: str) -> None:
        """Register a remote pinning service on the node unless it already exists."""
        async with self._client() as client:
            response = await client.post("/pin/remote/service/ls")
            self._raise_for_status("pin/remote/service/ls", name, response)
            services = response.json().get("RemoteServices") or []
            if any(s.get("Service") == name for s in services):
                logger.debug(f"IPFSClient: pinning service {name} already configured")
                return

            response = await client.post(
                "/pin/remote/service/add",
                params=[("arg", name), ("arg", endpoint), ("arg", key)],
            )
            self._raise_for_status("pin/remote/service/add", name, response)
        logger.info(f"IPFSClient: added pinning service {name} ({endpoint})")
