"""
Flow nodes.

A node is one unit of computation in a logic flow. It has a fixed number
of inputs (DataReferences), outputs (written into its NodeStatus when it
runs) and branches (successor node ids). Concrete node types subclass
FlowNode, describe their ports with NodeMetadata and override
``on_execute`` and, when they branch, ``select_branch``.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional
import logging

from logicflow.engine.errors import LogicError, NodeFaultError, NotExecutedError, DanglingReferenceError
from logicflow.engine.metadata import NodeMetadata
from logicflow.engine.reference import DataReference
from logicflow.engine.status import NodeStatus
from logicflow.engine.values import Value

if TYPE_CHECKING:
    from logicflow.engine.context import ExecutionContext
    from logicflow.engine.flow import LogicFlow
    from logicflow.tools.registry import NodeRegistry


logger = logging.getLogger(__name__)


class FlowNode:
    """
    Base class of every node type.

    Attributes:
        id: Node id, unique within its flow
        name: User-editable display name
        inputs: One DataReference per input port
        next_node_ids: One successor id per branch, -1 for none

    Class attributes:
        type_name: Registry key, set when the class is registered
        metadata: Port layout shared by all nodes of the type
        is_event: Whether the node can start a flow
    """

    type_name: str = "FlowNode"
    metadata: NodeMetadata = NodeMetadata("Node")
    is_event: bool = False
    registry: Optional["NodeRegistry"] = None

    def __init__(self, node_id: int, name: str):
        self.id = node_id
        self.name = name
        self.inputs: List[DataReference] = [DataReference.empty() for _ in range(self.input_count)]
        self.next_node_ids: List[int] = [-1] * self.branch_count

    # --------------------------------------------------------
    # Shape
    # --------------------------------------------------------

    @property
    def input_count(self) -> int:
        return self.metadata.input_count

    @property
    def output_count(self) -> int:
        return self.metadata.output_count

    @property
    def branch_count(self) -> int:
        return self.metadata.branch_count

    def input_name(self, index: int) -> str:
        if 0 <= index < self.input_count:
            return self.metadata.inputs[index].name
        return str(index)

    def output_name(self, index: int) -> str:
        if 0 <= index < self.output_count:
            return self.metadata.outputs[index].name
        return str(index)

    def branch_name(self, index: int) -> str:
        if 0 <= index < self.branch_count:
            return self.metadata.branches[index].name
        return str(index)

    # --------------------------------------------------------
    # Execution
    # --------------------------------------------------------

    def execute(self, context: "ExecutionContext") -> Optional["FlowNode"]:
        """
        Run this node in the given context.

        Resolves every input in order, runs the type-specific computation,
        marks the node executed and records the successor taken.

        Args:
            context: The execution context owning this node's status

        Returns:
            The successor node, or None when the run should stop

        Raises:
            LogicError: On unresolved inputs or a failing computation
        """
        status = context.get_status(self.id)
        inputs = self.resolve_inputs(context)
        status.inputs = inputs

        try:
            self.on_execute(context, status, inputs)
            branch = self.select_branch(context, status, inputs) if self.branch_count else None
        except LogicError:
            raise
        except Exception as e:
            raise NodeFaultError(f"Node '{self.name}' failed: {e}", e) from e

        status.executed = True
        next_id = -1
        if branch is not None:
            if not 0 <= branch < self.branch_count:
                raise NodeFaultError(
                    f"Node '{self.name}' selected branch {branch} but has {self.branch_count}"
                )
            next_id = self.next_node_ids[branch]
        status.branch_index = branch
        status.next_node_id = next_id

        if next_id < 0:
            return None
        next_node = context.flow.get_node(next_id)
        if next_node is None:
            logger.warning(f"Node '{self.name}' points at missing successor #{next_id}, stopping")
        return next_node

    def resolve_inputs(self, context: "ExecutionContext") -> List[Value]:
        """Resolve all inputs in declared order, failing on the first bad one."""
        return [reference.resolve(context) for reference in self.inputs]

    def on_execute(self, context: "ExecutionContext", status: NodeStatus, inputs: List[Value]) -> None:
        """Type-specific computation. Writes outputs through ``status``."""

    def select_branch(self, context: "ExecutionContext", status: NodeStatus, inputs: List[Value]) -> int:
        """Index of the branch to follow. Plain nodes always take branch 0."""
        return 0

    def get_output(self, context: "ExecutionContext", index: int) -> Value:
        """
        Read one of this node's outputs in the given context.

        Raises:
            NotExecutedError: If the node has not run in this context
            DanglingReferenceError: If the output index does not exist
        """
        status = context.get_status(self.id)
        if not status.executed:
            raise NotExecutedError(f"Node '{self.name}' has not been executed yet")
        if not 0 <= index < self.output_count:
            raise DanglingReferenceError(
                f"Node '{self.name}' has no output #{index}"
            )
        return status.outputs[index]

    def create_status(self) -> NodeStatus:
        return NodeStatus(node_id=self.id, node_name=self.name, output_count=self.output_count)

    # --------------------------------------------------------
    # Structure
    # --------------------------------------------------------

    def copy(self) -> "FlowNode":
        """Structural copy made through the node registry."""
        if self.registry is None:
            raise LookupError(f"Node type '{self.type_name}' is not registered")
        node = self.registry.create(self.type_name, self.id, self.name)
        node.inputs = [reference.copy() for reference in self.inputs]
        node.next_node_ids = list(self.next_node_ids)
        return node

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type_name,
            "name": self.name,
            "inputs": [reference.to_dict() for reference in self.inputs],
            "nextNodes": list(self.next_node_ids),
        }

    def render(self, flow: "LogicFlow") -> str:
        """Static description of this node's wiring."""
        lines = [f"[{self.name}] {self.metadata.display_name} #{self.id}"]
        for index, reference in enumerate(self.inputs):
            lines.append(f"  in  {self.input_name(index)}: {reference.render(flow)}")
        for index in range(self.output_count):
            lines.append(f"  out {self.output_name(index)}")
        for index, next_id in enumerate(self.next_node_ids):
            if next_id < 0:
                target = "(none)"
            else:
                next_node = flow.get_node(next_id)
                target = f"[{next_node.name}]" if next_node else f"#{next_id} (missing)"
            label = "connect" if self.branch_count == 1 else self.branch_name(index)
            lines.append(f"  {label} -> {target}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, name={self.name!r})"


class EventNode(FlowNode):
    """
    A node that starts a flow.

    Its outputs are supplied by the triggering event before the run
    starts; it computes nothing and always follows its first branch.
    """

    is_event = True

    def on_execute(self, context: "ExecutionContext", status: NodeStatus, inputs: List[Value]) -> None:
        pass

    def select_branch(self, context: "ExecutionContext", status: NodeStatus, inputs: List[Value]) -> int:
        return 0
