"""
Pydantic Schemas for API Request/Response Models.

These schemas define the structure of data flowing through the API,
providing automatic validation and documentation.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field

from logicflow.engine.context import ExecutionStatus


JsonValue = Union[bool, float, str, None]


# ============================================================
# Flow Schemas
# ============================================================

class FlowCreateRequest(BaseModel):
    """Request to create a new flow with a start event node."""
    name: str = Field(..., min_length=1, description="Unique flow name")
    event_type: str = Field("TriggerNode", description="Type of the start event node")
    event_name: str = Field("start", description="Name of the start event node")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "welcome",
                "event_type": "TriggerNode",
                "event_name": "start"
            }
        }


class FlowSummary(BaseModel):
    """Short description of a stored flow."""
    name: str
    node_count: int
    start_node: Optional[str] = Field(None, description="Name of the start node")
    start_type: Optional[str] = Field(None, description="Type of the start node")
    enabled: bool = Field(..., description="Whether events run this flow automatically")
    can_undo: bool
    can_redo: bool


class FlowInfoResponse(FlowSummary):
    """Full description of a flow."""
    rendered: str = Field(..., description="Text rendering of the flow's wiring")
    document: Dict[str, Any] = Field(..., description="The flow in file format")


class FlowListResponse(BaseModel):
    """Response listing all flows."""
    flows: List[FlowSummary]
    total: int


# ============================================================
# Edit Schemas
# ============================================================

class NodeCreateRequest(BaseModel):
    """Request to add a node."""
    type: str = Field(..., description="Registered node type")
    name: str = Field(..., min_length=1, description="Unique node name within the flow")

    class Config:
        json_schema_extra = {
            "example": {"type": "BinaryArithmeticNode", "name": "add"}
        }


class RenameRequest(BaseModel):
    new_name: str = Field(..., min_length=1)


class StartNodeRequest(BaseModel):
    """Request to replace the start node."""
    type: str = Field(..., description="Registered event node type")
    name: str = Field(..., min_length=1)


class ConstInputRequest(BaseModel):
    """Request to set an input to a constant."""
    value: JsonValue = Field(None, description="Constant value")
    auto_cast: bool = Field(
        False,
        description="Parse text values the way flow files are parsed, e.g. '(1, 2, 3)' as a vector"
    )

    class Config:
        json_schema_extra = {
            "example": {"value": "(0, 64, 0)", "auto_cast": True}
        }


class ReferenceInputRequest(BaseModel):
    """Request to connect an input to another node's output."""
    source: str = Field(..., description="Name of the node providing the value")
    index: int = Field(0, ge=0, description="Output index on the source node")


class NextNodeRequest(BaseModel):
    """Request to connect a branch to a node."""
    target: str = Field(..., description="Name of the successor node")


class EnableRequest(BaseModel):
    enabled: bool


class EditResponse(BaseModel):
    """Outcome of an edit."""
    applied: bool = Field(..., description="False if the edit changed nothing")
    node_id: Optional[int] = Field(None, description="Id of a newly created node")
    flow: FlowSummary


# ============================================================
# Run Schemas
# ============================================================

class RunRequest(BaseModel):
    """Request to run a flow."""
    start_outputs: List[JsonValue] = Field(
        default_factory=list,
        description="Values for the start node's outputs (event payload)"
    )
    variables: Dict[str, JsonValue] = Field(default_factory=dict, description="Initial variables")
    max_steps: Optional[int] = Field(None, ge=0, description="Step ceiling for this run")
    auto_cast: bool = Field(False, description="Parse text values the way flow files are parsed")

    class Config:
        json_schema_extra = {
            "example": {
                "start_outputs": ["console", 3.0],
                "variables": {},
                "max_steps": 100
            }
        }


class NodeStatusEntry(BaseModel):
    """State of one node after one step of a run."""
    node_id: int
    node_name: str
    executed: bool
    inputs: List[Any]
    outputs: List[Any]
    branch_index: Optional[int]
    next_node_id: int


class MessageEntry(BaseModel):
    receiver: str
    channel: str
    text: str
    node_name: str
    created_at: str


class ErrorInfo(BaseModel):
    kind: str
    message: str
    cause: Optional[str] = None


class RunResponse(BaseModel):
    """A finished run."""
    run_id: str = Field(..., description="Unique identifier for this run")
    flow_name: str
    status: ExecutionStatus
    step_count: int
    max_steps: int
    variables: Dict[str, Any]
    trace: List[NodeStatusEntry]
    messages: List[MessageEntry]
    error: Optional[ErrorInfo] = None
    started_at: Optional[str]
    completed_at: Optional[str]
    duration_ms: Optional[float]
    rendered: Optional[str] = Field(None, description="Text rendering of the trace")


class RunListResponse(BaseModel):
    """Response listing runs."""
    runs: List[RunResponse]
    total: int


class EventRequest(BaseModel):
    """An event raised by the host."""
    outputs: List[JsonValue] = Field(default_factory=list, description="Event payload")
    variables: Dict[str, JsonValue] = Field(default_factory=dict)
    auto_cast: bool = False


# ============================================================
# Persistence Schemas
# ============================================================

class SaveRequest(BaseModel):
    replace: bool = Field(True, description="Overwrite an existing file atomically")


class SaveResponse(BaseModel):
    saved: bool
    path: str


class LoadRequest(BaseModel):
    file: str = Field(..., description="File name inside the flow directory")


# ============================================================
# Node Type Schemas
# ============================================================

class PortInfoSchema(BaseModel):
    name: str
    description: str
    data_type: str


class NodeTypeInfo(BaseModel):
    """Information about a registered node type."""
    type: str
    is_event: bool
    display_name: str
    description: str
    inputs: List[PortInfoSchema]
    outputs: List[PortInfoSchema]
    branches: List[PortInfoSchema]


class NodeTypeListResponse(BaseModel):
    """Response listing all registered node types."""
    node_types: List[NodeTypeInfo]
    total: int


# ============================================================
# Error Schemas
# ============================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
