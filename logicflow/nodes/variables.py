"""
Variable nodes: read and write the run's variable table.
"""

from typing import List

from logicflow.engine.errors import NodeFaultError
from logicflow.engine.metadata import NodeMetadata
from logicflow.engine.node import FlowNode
from logicflow.engine.values import Value, as_string
from logicflow.tools.registry import register_node


def _variable_name(node: FlowNode, value: Value) -> str:
    name = as_string(value).strip()
    if not name:
        raise NodeFaultError(f"Node '{node.name}' has no variable name")
    return name


@register_node("GetVariableNode")
class GetVariableNode(FlowNode):
    metadata = (
        NodeMetadata.builder("Get variable", "Reads a variable of the current run")
        .input("name", "Variable name", "text")
        .output("value", "Current value, null if unset", "any")
        .branch("next", "Runs after the read")
        .build()
    )

    def on_execute(self, context, status, inputs: List[Value]) -> None:
        status.set_output(0, context.get_variable(_variable_name(self, inputs[0])))


@register_node("SetVariableNode")
class SetVariableNode(FlowNode):
    metadata = (
        NodeMetadata.builder("Set variable", "Writes a variable of the current run")
        .input("name", "Variable name", "text")
        .input("value", "New value", "any")
        .output("previous", "Value before the write, null if unset", "any")
        .branch("next", "Runs after the write")
        .build()
    )

    def on_execute(self, context, status, inputs: List[Value]) -> None:
        name, value = inputs
        status.set_output(0, context.set_variable(_variable_name(self, name), value))
