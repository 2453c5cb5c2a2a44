"""
Per-run node state.

Every ExecutionContext owns one NodeStatus per node. Nothing here is
ever stored on the node itself or persisted with the flow.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from logicflow.engine.values import Value, format_value, to_json_value

if TYPE_CHECKING:
    from logicflow.engine.flow import LogicFlow


@dataclass
class NodeStatus:
    """
    Runtime state of one node within one execution context.

    Attributes:
        node_id: Id of the node this status belongs to
        node_name: Name of the node when the run started
        executed: Whether the node has run in this context
        inputs: Resolved input values of the last execution
        outputs: Output slots written by the node
        branch_index: Branch chosen by the last execution
        next_node_id: Successor id taken, -1 for none
    """
    node_id: int
    node_name: str
    output_count: int
    executed: bool = False
    inputs: List[Value] = field(default_factory=list)
    outputs: List[Value] = field(default_factory=list)
    branch_index: Optional[int] = None
    next_node_id: int = -1

    def __post_init__(self):
        if not self.outputs:
            self.outputs = [None] * self.output_count

    def reset(self) -> None:
        self.executed = False
        self.inputs = []
        self.outputs = [None] * self.output_count
        self.branch_index = None
        self.next_node_id = -1

    def set_output(self, index: int, value: Value) -> None:
        """Write an output slot; raises IndexError outside the node's outputs."""
        if not 0 <= index < self.output_count:
            raise IndexError(f"Output index {index} out of range for node '{self.node_name}'")
        self.outputs[index] = value

    def copy(self) -> "NodeStatus":
        return NodeStatus(
            node_id=self.node_id,
            node_name=self.node_name,
            output_count=self.output_count,
            executed=self.executed,
            inputs=list(self.inputs),
            outputs=list(self.outputs),
            branch_index=self.branch_index,
            next_node_id=self.next_node_id,
        )

    def render(self, step: int, flow: "LogicFlow") -> str:
        """Describe what the node saw and did during one step of a run."""
        node = flow.get_node(self.node_id)
        input_parts = []
        for index, value in enumerate(self.inputs):
            label = node.input_name(index) if node else str(index)
            input_parts.append(f"{label}={format_value(value)}")
        output_parts = []
        for index, value in enumerate(self.outputs):
            label = node.output_name(index) if node else str(index)
            output_parts.append(f"{label}={format_value(value)}")

        if self.next_node_id < 0:
            next_text = "end"
        else:
            next_node = flow.get_node(self.next_node_id)
            next_text = f"[{next_node.name}]" if next_node else f"#{self.next_node_id} (missing)"

        line = f"#{step} [{self.node_name}]"
        if input_parts:
            line += f" in: {', '.join(input_parts)}"
        if output_parts:
            line += f" out: {', '.join(output_parts)}"
        return f"{line} -> {next_text}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "node_name": self.node_name,
            "executed": self.executed,
            "inputs": [to_json_value(v) for v in self.inputs],
            "outputs": [to_json_value(v) for v in self.outputs],
            "branch_index": self.branch_index,
            "next_node_id": self.next_node_id,
        }
