"""
Run API Routes.

Endpoints for inspecting run history and raising events.
"""

from typing import Optional
from fastapi import APIRouter, HTTPException
import logging

from logicflow.api.routes.flows import run_response, to_values, to_variables
from logicflow.api.schemas import ErrorResponse, EventRequest, RunListResponse, RunResponse
from logicflow.storage.memory import flow_storage


logger = logging.getLogger(__name__)

router = APIRouter(tags=["Runs"])


@router.get("/runs/", response_model=RunListResponse)
async def list_runs(flow: Optional[str] = None) -> RunListResponse:
    """List retained runs, oldest first, optionally for one flow."""
    history = flow_storage.history
    contexts = history.list_by_flow(flow) if flow else history.list_all()
    runs = [run_response(c) for c in contexts]
    return RunListResponse(runs=runs, total=len(runs))


@router.get(
    "/runs/{run_id}",
    response_model=RunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_run(run_id: str) -> RunResponse:
    """Get one retained run with its trace."""
    context = flow_storage.history.get(run_id)
    if context is None:
        raise HTTPException(status_code=404, detail=f"Run '{run_id}' not found")
    return run_response(context)


@router.post("/events/{event_type}", response_model=RunListResponse)
async def raise_event(event_type: str, request: EventRequest) -> RunListResponse:
    """Run every enabled flow whose start node has the given event type."""
    contexts = await flow_storage.dispatch_event(
        event_type,
        to_values(request.outputs, request.auto_cast),
        to_variables(request.variables, request.auto_cast),
    )
    runs = [run_response(c) for c in contexts]
    return RunListResponse(runs=runs, total=len(runs))
