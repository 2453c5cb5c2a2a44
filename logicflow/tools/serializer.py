"""
Flow serializer.

Converts LogicFlows to and from their JSON document form and reads and
writes flow files. Documents are pydantic models; reading is lenient
about missing or surplus fields (with warnings) but strict about node
ids and types, so a file either loads as a whole or not at all.
"""

from pathlib import Path
from typing import Any, List, Optional, Union
import logging
import os

from pydantic import BaseModel, Field, ValidationError

from logicflow import __version__
from logicflow.config import settings
from logicflow.engine.flow import LogicFlow
from logicflow.engine.node import FlowNode
from logicflow.engine.reference import DataReference, ReferenceType
from logicflow.engine.values import auto_cast, format_value
from logicflow.tools.registry import NodeRegistry, node_registry


logger = logging.getLogger(__name__)


# ============================================================
# Document Models
# ============================================================

class InputDocument(BaseModel):
    """One input entry: a constant or a reference to a node output."""
    type: str = Field(ReferenceType.CONSTANT.value, description="'const' or 'reference'")
    value: Optional[Any] = Field(None, description="Stringified constant value")
    id: Optional[int] = Field(None, description="Referenced node id")
    index: Optional[int] = Field(None, description="Referenced output index")


class NodeDocument(BaseModel):
    """One node entry."""
    id: int = Field(..., ge=0, description="Node id, unique within the flow")
    type: str = Field(..., min_length=1, description="Registered node type key")
    name: str = Field("unnamed", description="Display name")
    inputs: List[InputDocument] = Field(default_factory=list)
    next_nodes: List[int] = Field(default_factory=list, alias="nextNodes")

    class Config:
        populate_by_name = True


class FlowDocument(BaseModel):
    """Root object of a flow file."""
    name: str = Field("unnamed", description="Flow name")
    version: str = Field(settings.FORMAT_VERSION, description="File format version")
    engine: str = Field(__version__, description="Version of the engine that wrote the file")
    start_node_id: int = Field(-1, alias="startNodeId")
    nodes: List[NodeDocument] = Field(default_factory=list)

    class Config:
        populate_by_name = True


# ============================================================
# Flow <-> Document
# ============================================================

def _input_to_document(reference: DataReference) -> InputDocument:
    if reference.is_constant:
        return InputDocument(type=ReferenceType.CONSTANT.value, value=format_value(reference.value))
    return InputDocument(
        type=ReferenceType.NODE_OUTPUT.value,
        id=reference.node_id,
        index=reference.index,
    )


def to_document(flow: LogicFlow) -> FlowDocument:
    """Build the document of a flow, nodes in LogicFlow.sorted_nodes order."""
    return FlowDocument(
        name=flow.name,
        start_node_id=flow.start_node_id,
        nodes=[
            NodeDocument(
                id=node.id,
                type=node.type_name,
                name=node.name,
                inputs=[_input_to_document(reference) for reference in node.inputs],
                next_nodes=list(node.next_node_ids),
            )
            for node in flow.sorted_nodes()
        ],
    )


def _input_from_document(document: InputDocument, node: FlowNode, index: int) -> DataReference:
    if document.type == ReferenceType.CONSTANT.value:
        value = document.value
        if value is not None and not isinstance(value, str):
            value = format_value(value)
        return DataReference.constant(auto_cast(value))
    if document.type == ReferenceType.NODE_OUTPUT.value:
        if document.id is None:
            logger.warning(f"Node '{node.name}' input {index}: reference without id, disconnected")
            return DataReference.empty()
        if document.index is None:
            logger.warning(f"Node '{node.name}' input {index}: reference without index, using 0")
        return DataReference.node_output(document.id, document.index or 0)
    logger.warning(f"Node '{node.name}' input {index}: unknown input type '{document.type}', disconnected")
    return DataReference.empty()


def _node_from_document(document: NodeDocument, registry: NodeRegistry) -> FlowNode:
    node = registry.create(document.type, document.id, document.name)
    if "name" not in document.model_fields_set:
        logger.warning(f"Node #{document.id} has no name, using '{document.name}'")

    if len(document.inputs) < node.input_count:
        logger.warning(
            f"Node '{node.name}' has {len(document.inputs)} inputs, expected {node.input_count}; "
            f"missing inputs are disconnected"
        )
    elif len(document.inputs) > node.input_count:
        logger.warning(
            f"Node '{node.name}' has {len(document.inputs)} inputs, expected {node.input_count}; "
            f"extra inputs are ignored"
        )
    for index, entry in enumerate(document.inputs[:node.input_count]):
        node.inputs[index] = _input_from_document(entry, node, index)

    if len(document.next_nodes) < node.branch_count:
        logger.warning(
            f"Node '{node.name}' has {len(document.next_nodes)} branches, expected {node.branch_count}; "
            f"missing branches are disconnected"
        )
    elif len(document.next_nodes) > node.branch_count:
        logger.warning(
            f"Node '{node.name}' has {len(document.next_nodes)} branches, expected {node.branch_count}; "
            f"extra branches are ignored"
        )
    for index, next_id in enumerate(document.next_nodes[:node.branch_count]):
        node.next_node_ids[index] = next_id if next_id >= 0 else -1

    return node


def from_document(document: FlowDocument, registry: Optional[NodeRegistry] = None) -> LogicFlow:
    """
    Rebuild a flow from its document.

    Raises:
        UnknownNodeTypeError: If a node type is not registered
        ValueError: If two nodes share an id
    """
    registry = registry or node_registry
    if document.version != settings.FORMAT_VERSION:
        logger.warning(
            f"Flow '{document.name}' was written with format version {document.version}, "
            f"expected {settings.FORMAT_VERSION}"
        )
    if "start_node_id" not in document.model_fields_set:
        logger.warning(f"Flow '{document.name}' has no startNodeId")

    flow = LogicFlow(document.name)
    for entry in document.nodes:
        if entry.id in flow:
            raise ValueError(f"Duplicate node id {entry.id} in flow '{document.name}'")
        flow.add_node(_node_from_document(entry, registry))
    flow.set_start_node_id(document.start_node_id)
    return flow


# ============================================================
# Text and Files
# ============================================================

def dumps(flow: LogicFlow) -> str:
    """Serialize a flow to JSON text."""
    return to_document(flow).model_dump_json(by_alias=True, exclude_none=True, indent=2)


def loads(text: Union[str, bytes], registry: Optional[NodeRegistry] = None) -> LogicFlow:
    """
    Parse JSON text into a flow.

    Raises:
        ValidationError: If the text is not a valid flow document
        UnknownNodeTypeError: If a node type is not registered
    """
    return from_document(FlowDocument.model_validate_json(text), registry)


def save_file(flow: LogicFlow, path: Union[str, Path], replace: bool = False) -> bool:
    """
    Write a flow to a file.

    With ``replace`` the file is written to a sibling ``.tmp`` file and
    moved over the target, so readers see either the old or the new file
    and never a partial one. Without it the file is only created if it
    does not exist yet.

    Args:
        flow: The flow to save
        path: Target file
        replace: Overwrite an existing file atomically

    Returns:
        True if the file was written
    """
    path = Path(path)
    text = dumps(flow)

    if not replace:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "x", encoding="utf-8") as f:
                f.write(text)
        except FileExistsError:
            logger.warning(f"Not saving flow '{flow.name}': {path} already exists")
            return False
        except OSError as e:
            logger.error(f"Failed to save flow '{flow.name}' to {path}: {e}")
            _remove_quietly(path)
            return False
        logger.info(f"Saved flow '{flow.name}' to {path}")
        return True

    tmp_path = path.with_name(path.name + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        logger.error(f"Failed to save flow '{flow.name}' to {path}: {e}")
        _remove_quietly(tmp_path)
        return False
    logger.info(f"Saved flow '{flow.name}' to {path}")
    return True


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        logger.warning(f"Could not remove {path}: {e}")


def load_file(path: Union[str, Path], registry: Optional[NodeRegistry] = None) -> Optional[LogicFlow]:
    """
    Read a flow file.

    Returns:
        The flow, or None if the file is missing, unreadable or malformed

    Raises:
        UnknownNodeTypeError: If a node type is not registered
    """
    path = Path(path)
    if not path.is_file():
        logger.error(f"Flow file {path} does not exist")
        return None
    try:
        text = path.read_text(encoding="utf-8")
        return loads(text, registry)
    except (OSError, ValidationError, ValueError) as e:
        logger.error(f"Failed to load flow from {path}: {e}")
        return None
