"""
Engine package - Core logic-flow data model and interpreter.
"""

from logicflow.engine.values import Value, Vec2, Vec3
from logicflow.engine.errors import (
    LogicError,
    DanglingReferenceError,
    NotExecutedError,
    DeadLoopError,
    NodeFaultError,
    MissingStartNodeError,
    UnknownNodeTypeError,
)
from logicflow.engine.reference import DataReference, ReferenceType
from logicflow.engine.metadata import NodeMetadata, PortInfo
from logicflow.engine.status import NodeStatus
from logicflow.engine.node import FlowNode, EventNode
from logicflow.engine.flow import LogicFlow
from logicflow.engine.context import ExecutionContext, ExecutionStatus, Message

__all__ = [
    "Value",
    "Vec2",
    "Vec3",
    "LogicError",
    "DanglingReferenceError",
    "NotExecutedError",
    "DeadLoopError",
    "NodeFaultError",
    "MissingStartNodeError",
    "UnknownNodeTypeError",
    "DataReference",
    "ReferenceType",
    "NodeMetadata",
    "PortInfo",
    "NodeStatus",
    "FlowNode",
    "EventNode",
    "LogicFlow",
    "ExecutionContext",
    "ExecutionStatus",
    "Message",
]
