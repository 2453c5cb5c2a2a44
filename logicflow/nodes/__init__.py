"""
Nodes package - Built-in node types.

Importing this package registers every built-in type in the global
node registry.
"""

from logicflow.nodes.events import (
    DummyNode,
    TriggerNode,
    EntityDamageEventNode,
    EntityDeathEventNode,
    ProjectileHitEntityEventNode,
)
from logicflow.nodes.arithmetic import AdditionNode, BinaryArithmeticNode, UnaryArithmeticNode
from logicflow.nodes.control import IfConditionNode
from logicflow.nodes.variables import GetVariableNode, SetVariableNode
from logicflow.nodes.messaging import BroadcastMessageNode

__all__ = [
    "DummyNode",
    "TriggerNode",
    "EntityDamageEventNode",
    "EntityDeathEventNode",
    "ProjectileHitEntityEventNode",
    "AdditionNode",
    "BinaryArithmeticNode",
    "UnaryArithmeticNode",
    "IfConditionNode",
    "GetVariableNode",
    "SetVariableNode",
    "BroadcastMessageNode",
]
