"""FastAPI routes for pgkeeper cluster administration."""

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from pgkeeper.domain.exceptions import UnknownSignalError
from pgkeeper.domain.node import Node
from pgkeeper.usecases.cluster_admin import ClusterAdmin


class AddNodeRequest(BaseModel):
    name: str
    connection_target: str


class ProbeRequest(BaseModel):
    connection_target: str


class NotifyRequest(BaseModel):
    signal_name: str


def _node_to_dict(node: Node) -> dict[str, Any]:
    return {
        "name": node.name,
        "connection_target": node.connection_target,
        "role": node.role.value,
        "sync_state": node.sync_state.value,
        "sequence_number": node.sequence_number,
        "is_self": node.is_self,
    }


def create_admin_router(admin: ClusterAdmin) -> APIRouter:
    """Create FastAPI router exposing the ClusterAdmin operations.

    Mutations answer ``{"ok": bool}``; a False result (unreachable node,
    duplicate name, missing row, no running coordinator) is a normal
    response, not an HTTP error. Only an unrecognized notification name is
    rejected with 400.

    Args:
        admin: ClusterAdmin use case instance

    Returns:
        APIRouter configured with /nodes, /probe and /notify endpoints
    """
    router = APIRouter()

    @router.get("/nodes")
    def list_nodes() -> dict[str, Any]:
        """List registered nodes ordered by sequence number."""
        return {"nodes": [_node_to_dict(node) for node in admin.list_nodes()]}

    @router.post("/nodes")
    def add_node(request: AddNodeRequest) -> dict[str, Any]:
        """Register a reachable node."""
        return {"ok": admin.add_node(request.name, request.connection_target)}

    @router.delete("/nodes/by-sequence/{sequence_number}")
    def remove_node_by_sequence(sequence_number: int) -> dict[str, Any]:
        """Remove the node with ``sequence_number``."""
        return {"ok": admin.remove_node_by_sequence(sequence_number)}

    @router.delete("/nodes/{name}")
    def remove_node(name: str) -> dict[str, Any]:
        """Remove the node named ``name``."""
        return {"ok": admin.remove_node(name)}

    @router.post("/probe")
    def probe_node(request: ProbeRequest) -> dict[str, Any]:
        """Probe a connection target directly, bypassing the registry."""
        return {"ok": admin.probe_node(request.connection_target)}

    @router.post("/notify")
    def notify_coordinator(request: NotifyRequest) -> dict[str, Any]:
        """Deliver a named notification to the running coordinator."""
        try:
            delivered = admin.notify_coordinator(request.signal_name)
        except UnknownSignalError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"ok": delivered}

    return router
