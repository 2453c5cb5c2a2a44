"""
Shared fixtures for the LogicFlow tests.
"""

import pytest

# Import built-in nodes to register them
import logicflow.nodes  # noqa: F401
from logicflow.engine.flow import LogicFlow
from logicflow.engine.reference import DataReference
from logicflow.tools.registry import node_registry


@pytest.fixture
def addition_flow() -> LogicFlow:
    """
    Start node E (id 1) followed by addition node A (id 2).

    A adds E's first output and the constant 1.0.
    """
    flow = LogicFlow("addition")
    start = node_registry.create("TriggerNode", 1, "E")
    add = node_registry.create("AdditionNode", 2, "A")
    add.inputs[0] = DataReference.node_output(1, 0)
    add.inputs[1] = DataReference.constant(1.0)
    start.next_node_ids[0] = add.id
    flow.add_node(start)
    flow.add_node(add)
    flow.set_start_node_id(start.id)
    return flow
