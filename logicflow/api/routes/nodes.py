"""
Node Type API Routes.

Endpoints for listing registered node types and their ports.
"""

from fastapi import APIRouter, HTTPException

from logicflow.api.schemas import ErrorResponse, NodeTypeInfo, NodeTypeListResponse
from logicflow.tools.registry import node_registry


router = APIRouter(prefix="/nodes", tags=["Nodes"])


@router.get("/", response_model=NodeTypeListResponse)
async def list_node_types() -> NodeTypeListResponse:
    """
    List all registered node types.

    Event types can start flows; all others are building blocks.
    """
    node_types = [NodeTypeInfo(**info) for info in node_registry.list_types()]
    return NodeTypeListResponse(node_types=node_types, total=len(node_types))


@router.get(
    "/{type_name}",
    response_model=NodeTypeInfo,
    responses={404: {"model": ErrorResponse}},
)
async def get_node_type(type_name: str) -> NodeTypeInfo:
    """Get information about a specific node type."""
    cls = node_registry.get(type_name)
    if cls is None:
        raise HTTPException(status_code=404, detail=f"Node type '{type_name}' not found")
    return NodeTypeInfo(type=type_name, is_event=cls.is_event, **cls.metadata.to_dict())
