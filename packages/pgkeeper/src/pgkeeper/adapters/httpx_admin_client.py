"""HTTPX-based client for the pgkeeper administrative HTTP API.

Mirrors the ClusterAdmin operations so the command line can drive a remote
admin endpoint served by pgkeeper_fastapi.
"""

from __future__ import annotations

from typing import Any

import httpx

from pgkeeper.domain.exceptions import AdminClientError, UnknownSignalError
from pgkeeper.domain.node import Node, NodeRole, SyncState


class HTTPXAdminClient:
    """Calls the administrative API over HTTP.

    Transport failures and unexpected responses raise AdminClientError; a
    rejected notification raises UnknownSignalError like the local use case.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the admin API (e.g., "http://db1:8008").
            timeout: Request timeout in seconds. Defaults to 10.0.
            client: Optional httpx.Client for dependency injection (testing).
                   If not provided, a new client is created per request.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    def add_node(self, name: str, target: str) -> bool:
        """Register a node."""
        body = self._request(
            "POST", "/nodes", json={"name": name, "connection_target": target}
        )
        return bool(body["ok"])

    def remove_node(self, name: str) -> bool:
        """Remove a node by name."""
        return bool(self._request("DELETE", f"/nodes/{name}")["ok"])

    def remove_node_by_sequence(self, sequence_number: int) -> bool:
        """Remove a node by sequence number."""
        return bool(
            self._request("DELETE", f"/nodes/by-sequence/{sequence_number}")["ok"]
        )

    def list_nodes(self) -> tuple[Node, ...]:
        """Return the registry ordered by sequence number."""
        body = self._request("GET", "/nodes")
        return tuple(
            Node(
                name=item["name"],
                connection_target=item["connection_target"],
                role=NodeRole(item["role"]),
                sync_state=SyncState(item["sync_state"]),
                sequence_number=int(item["sequence_number"]),
                is_self=bool(item.get("is_self", False)),
            )
            for item in body["nodes"]
        )

    def probe_node(self, target: str) -> bool:
        """Probe ``target`` from the admin endpoint's host."""
        return bool(
            self._request("POST", "/probe", json={"connection_target": target})["ok"]
        )

    def notify_coordinator(self, signal_name: str) -> bool:
        """Deliver a named notification to the coordinator.

        Raises:
            UnknownSignalError: If the endpoint rejects ``signal_name``.
        """
        try:
            body = self._request("POST", "/notify", json={"signal_name": signal_name})
        except AdminClientError as e:
            if e.status_code == 400:
                raise UnknownSignalError(signal_name) from e
            raise
        return bool(body["ok"])

    def _request(
        self, method: str, path: str, json: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            if self._client is not None:
                response = self._client.request(
                    method, url, json=json, timeout=self._timeout
                )
            else:
                with httpx.Client() as client:
                    response = client.request(
                        method, url, json=json, timeout=self._timeout
                    )
        except httpx.RequestError as e:
            raise AdminClientError(f"{method} {url} failed: {e}") from e

        if response.status_code >= 400:
            raise AdminClientError(
                f"{method} {url} returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as e:
            raise AdminClientError(f"{method} {url} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise AdminClientError(f"{method} {url} returned unexpected body")
        return body
