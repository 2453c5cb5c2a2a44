"""
Flow API Routes.

Endpoints for creating, editing, running and persisting logic flows.
"""

from pathlib import Path
from typing import Dict, List
from fastapi import APIRouter, HTTPException, status
import logging

from logicflow.api.schemas import (
    ConstInputRequest,
    EditResponse,
    EnableRequest,
    ErrorResponse,
    FlowCreateRequest,
    FlowInfoResponse,
    FlowListResponse,
    FlowSummary,
    JsonValue,
    LoadRequest,
    NextNodeRequest,
    NodeCreateRequest,
    ReferenceInputRequest,
    RenameRequest,
    RunRequest,
    RunResponse,
    SaveRequest,
    SaveResponse,
    StartNodeRequest,
)
from logicflow.config import settings
from logicflow.engine.context import ExecutionContext
from logicflow.engine.errors import UnknownNodeTypeError
from logicflow.engine.values import Value, auto_cast
from logicflow.storage.memory import flow_file_name, flow_storage
from logicflow.tools.manager import FlowManager
from logicflow.tools.serializer import load_file, save_file, to_document


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flows", tags=["Flows"])


# ============================================================
# Helpers
# ============================================================

async def _get_manager(name: str) -> FlowManager:
    manager = await flow_storage.get(name)
    if manager is None:
        raise HTTPException(status_code=404, detail=f"Flow '{name}' not found")
    return manager


def _summary(manager: FlowManager) -> FlowSummary:
    start = manager.flow.start_node
    return FlowSummary(
        name=manager.name,
        node_count=len(manager.flow),
        start_node=start.name if start else None,
        start_type=start.type_name if start else None,
        enabled=manager.enabled,
        can_undo=manager.can_undo(),
        can_redo=manager.can_redo(),
    )


def _info(manager: FlowManager) -> FlowInfoResponse:
    return FlowInfoResponse(
        **_summary(manager).model_dump(),
        rendered=manager.flow.render(),
        document=to_document(manager.flow).model_dump(by_alias=True, exclude_none=True),
    )


def _edit_response(manager: FlowManager, applied: bool, node_id=None) -> EditResponse:
    return EditResponse(applied=applied, node_id=node_id, flow=_summary(manager))


def _node_type_error(e: UnknownNodeTypeError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


def to_value(value: JsonValue, cast: bool) -> Value:
    """Convert a JSON payload value, optionally parsing text like flow files do."""
    if cast and isinstance(value, str):
        return auto_cast(value)
    return value


def to_values(values: List[JsonValue], cast: bool) -> List[Value]:
    return [to_value(v, cast) for v in values]


def to_variables(variables: Dict[str, JsonValue], cast: bool) -> Dict[str, Value]:
    return {name: to_value(v, cast) for name, v in variables.items()}


def run_response(context: ExecutionContext) -> RunResponse:
    return RunResponse(**context.to_dict(), rendered=context.render())


# ============================================================
# Flow CRUD Endpoints
# ============================================================

@router.post(
    "/",
    response_model=FlowInfoResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Start node type is not an event"},
        404: {"model": ErrorResponse, "description": "Node type not found"},
        409: {"model": ErrorResponse, "description": "Flow already exists"},
    }
)
async def create_flow(request: FlowCreateRequest) -> FlowInfoResponse:
    """Create a new flow containing only its start event node."""
    if await flow_storage.exists(request.name):
        raise HTTPException(status_code=409, detail=f"Flow '{request.name}' already exists")
    try:
        manager = FlowManager.create(request.name, request.event_type, request.event_name)
    except UnknownNodeTypeError as e:
        raise _node_type_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    await flow_storage.save(manager)
    logger.info(f"Created flow: {request.name}")
    return _info(manager)


@router.get("/", response_model=FlowListResponse)
async def list_flows() -> FlowListResponse:
    """List all flows."""
    managers = await flow_storage.list_all()
    flows = [_summary(m) for m in sorted(managers, key=lambda m: m.name)]
    return FlowListResponse(flows=flows, total=len(flows))


@router.post(
    "/load",
    response_model=FlowInfoResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "File could not be loaded"},
        404: {"model": ErrorResponse, "description": "Node type not found"},
    }
)
async def load_flow(request: LoadRequest) -> FlowInfoResponse:
    """Load a flow file from the flow directory, replacing a flow of the same name."""
    path = Path(settings.FLOW_DIRECTORY) / Path(request.file).name
    try:
        flow = load_file(path)
    except UnknownNodeTypeError as e:
        raise _node_type_error(e)
    if flow is None:
        raise HTTPException(status_code=400, detail=f"Could not load flow from '{path.name}'")

    manager = await flow_storage.save(FlowManager(flow))
    logger.info(f"Loaded flow '{flow.name}' from {path}")
    return _info(manager)


@router.get(
    "/{name}",
    response_model=FlowInfoResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_flow(name: str) -> FlowInfoResponse:
    """Get a flow with its rendering and file document."""
    return _info(await _get_manager(name))


@router.delete(
    "/{name}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_flow(name: str):
    """Delete a flow."""
    deleted = await flow_storage.delete(name)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Flow '{name}' not found")
    logger.info(f"Deleted flow: {name}")


# ============================================================
# Editing Endpoints
# ============================================================

@router.post(
    "/{name}/nodes",
    response_model=EditResponse,
    responses={404: {"model": ErrorResponse}},
)
async def create_node(name: str, request: NodeCreateRequest) -> EditResponse:
    """Add an unconnected node."""
    manager = await _get_manager(name)
    try:
        node_id = manager.create_node(request.type, request.name)
    except UnknownNodeTypeError as e:
        raise _node_type_error(e)
    return _edit_response(manager, node_id is not None, node_id)


@router.delete("/{name}/nodes/{node}", response_model=EditResponse)
async def remove_node(name: str, node: str) -> EditResponse:
    """Remove a node. The start node cannot be removed."""
    manager = await _get_manager(name)
    return _edit_response(manager, manager.remove_node(node))


@router.post("/{name}/nodes/{node}/rename", response_model=EditResponse)
async def rename_node(name: str, node: str, request: RenameRequest) -> EditResponse:
    manager = await _get_manager(name)
    return _edit_response(manager, manager.rename_node(node, request.new_name))


@router.put(
    "/{name}/start",
    response_model=EditResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def replace_start_node(name: str, request: StartNodeRequest) -> EditResponse:
    """Replace the start node with a new event node."""
    manager = await _get_manager(name)
    try:
        applied = manager.replace_event_node(request.type, request.name)
    except UnknownNodeTypeError as e:
        raise _node_type_error(e)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _edit_response(manager, applied)


@router.put("/{name}/nodes/{node}/inputs/{index}/const", response_model=EditResponse)
async def set_const_input(name: str, node: str, index: int, request: ConstInputRequest) -> EditResponse:
    manager = await _get_manager(name)
    value = to_value(request.value, request.auto_cast)
    return _edit_response(manager, manager.set_const_input(node, index, value))


@router.put("/{name}/nodes/{node}/inputs/{index}/reference", response_model=EditResponse)
async def set_reference_input(
    name: str, node: str, index: int, request: ReferenceInputRequest
) -> EditResponse:
    manager = await _get_manager(name)
    applied = manager.set_reference_input(node, index, request.source, request.index)
    return _edit_response(manager, applied)


@router.delete("/{name}/nodes/{node}/inputs/{index}", response_model=EditResponse)
async def disconnect_input(name: str, node: str, index: int) -> EditResponse:
    manager = await _get_manager(name)
    return _edit_response(manager, manager.disconnect_input(node, index))


@router.put("/{name}/nodes/{node}/next/{index}", response_model=EditResponse)
async def set_next_node(name: str, node: str, index: int, request: NextNodeRequest) -> EditResponse:
    manager = await _get_manager(name)
    return _edit_response(manager, manager.set_next_node(node, index, request.target))


@router.delete("/{name}/nodes/{node}/next/{index}", response_model=EditResponse)
async def disconnect_next_node(name: str, node: str, index: int) -> EditResponse:
    manager = await _get_manager(name)
    return _edit_response(manager, manager.disconnect_next_node(node, index))


@router.post("/{name}/undo", response_model=EditResponse)
async def undo(name: str) -> EditResponse:
    manager = await _get_manager(name)
    return _edit_response(manager, manager.undo())


@router.post("/{name}/redo", response_model=EditResponse)
async def redo(name: str) -> EditResponse:
    manager = await _get_manager(name)
    return _edit_response(manager, manager.redo())


@router.put("/{name}/enabled", response_model=FlowSummary)
async def set_enabled(name: str, request: EnableRequest) -> FlowSummary:
    """Allow or stop automatic runs of the flow on events."""
    manager = await _get_manager(name)
    manager.enabled = request.enabled
    logger.info(f"Flow '{name}' {'enabled' if request.enabled else 'disabled'}")
    return _summary(manager)


# ============================================================
# Execution and Persistence Endpoints
# ============================================================

@router.post(
    "/{name}/run",
    response_model=RunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def run_flow(name: str, request: RunRequest) -> RunResponse:
    """
    Run a flow once.

    A failing run still returns 200; its status is ``failed`` and the
    error and trace up to the failure are included.
    """
    manager = await _get_manager(name)
    context = manager.run(
        to_values(request.start_outputs, request.auto_cast),
        to_variables(request.variables, request.auto_cast),
        max_steps=request.max_steps,
    )
    return run_response(context)


@router.post(
    "/{name}/save",
    response_model=SaveResponse,
    responses={404: {"model": ErrorResponse}},
)
async def save_flow(name: str, request: SaveRequest) -> SaveResponse:
    """Write a flow to the flow directory."""
    manager = await _get_manager(name)
    path = Path(settings.FLOW_DIRECTORY) / flow_file_name(manager.name)
    saved = save_file(manager.flow, path, replace=request.replace)
    return SaveResponse(saved=saved, path=str(path))
