"""
Control-flow nodes.
"""

from typing import List

from logicflow.engine.errors import NodeFaultError
from logicflow.engine.metadata import NodeMetadata
from logicflow.engine.node import FlowNode
from logicflow.engine.values import Value, as_boolean, format_value
from logicflow.tools.registry import register_node


@register_node("IfConditionNode")
class IfConditionNode(FlowNode):
    """Follows its first branch when the condition holds, the second otherwise."""

    metadata = (
        NodeMetadata.builder("If", "Chooses a branch from a boolean condition")
        .input("condition", "Value deciding the branch", "boolean")
        .branch("true", "Taken when the condition is true")
        .branch("false", "Taken when the condition is false")
        .build()
    )

    def select_branch(self, context, status, inputs: List[Value]) -> int:
        condition = as_boolean(inputs[0])
        if condition is None:
            raise NodeFaultError(
                f"Condition of node '{self.name}' is not a boolean: {format_value(inputs[0])}"
            )
        return 0 if condition else 1
