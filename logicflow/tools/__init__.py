"""
Tools package - Node registry, editing and serialization of flows.
"""

from logicflow.tools.registry import NodeRegistry, node_registry, register_node, create_node

__all__ = [
    "NodeRegistry",
    "node_registry",
    "register_node",
    "create_node",
]
