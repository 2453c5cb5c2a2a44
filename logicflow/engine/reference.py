"""
Data references.

A DataReference is what a node input holds: either a constant value or
a pointer to an output slot of another node in the same flow.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from logicflow.engine.errors import DanglingReferenceError
from logicflow.engine.values import Value, format_value

if TYPE_CHECKING:
    from logicflow.engine.context import ExecutionContext
    from logicflow.engine.flow import LogicFlow


class ReferenceType(str, Enum):
    """Kinds of data reference, named as they appear in flow files."""
    CONSTANT = "const"
    NODE_OUTPUT = "reference"


@dataclass
class DataReference:
    """
    A resolvable input source.

    Attributes:
        type: Constant or node output
        value: The constant value (constants only)
        node_id: Target node id (node outputs only)
        index: Target output slot (node outputs only)
    """
    type: ReferenceType = ReferenceType.CONSTANT
    value: Value = None
    node_id: int = -1
    index: int = 0

    @classmethod
    def constant(cls, value: Value) -> "DataReference":
        return cls(ReferenceType.CONSTANT, value=value)

    @classmethod
    def node_output(cls, node_id: int, index: int) -> "DataReference":
        return cls(ReferenceType.NODE_OUTPUT, node_id=node_id, index=index)

    @classmethod
    def empty(cls) -> "DataReference":
        """A disconnected input: a constant holding nothing."""
        return cls()

    @property
    def is_constant(self) -> bool:
        return self.type is ReferenceType.CONSTANT

    def resolve(self, context: "ExecutionContext") -> Value:
        """
        Resolve the reference within one execution context.

        Raises:
            DanglingReferenceError: If the target node is not in the flow
            NotExecutedError: If the target node has not run in this context
        """
        if self.is_constant:
            return self.value
        node = context.flow.get_node(self.node_id)
        if node is None:
            raise DanglingReferenceError(
                f"Reference to node #{self.node_id} which does not exist"
            )
        return node.get_output(context, self.index)

    def copy(self) -> "DataReference":
        # Constant values are shared, not duplicated
        return DataReference(self.type, self.value, self.node_id, self.index)

    def render(self, flow: Optional["LogicFlow"] = None) -> str:
        """Describe where this reference reads from."""
        if self.is_constant:
            return format_value(self.value)
        node = flow.get_node(self.node_id) if flow is not None else None
        if node is None:
            return f"from #{self.node_id}[{self.index}] (missing)"
        return f"from [{node.name}].{node.output_name(self.index)}"

    def to_dict(self):
        if self.is_constant:
            return {"type": self.type.value, "value": format_value(self.value)}
        return {"type": self.type.value, "id": self.node_id, "index": self.index}
