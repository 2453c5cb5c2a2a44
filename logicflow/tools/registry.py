"""
Node Type Registry.

The node registry maps stable type keys (the ``type`` field of flow
files) to FlowNode subclasses. Every node is created through it, which
is how the serializer and FlowNode.copy rebuild the right concrete type
without knowing about it.
"""

from typing import Any, Callable, Dict, Iterator, List, Optional, Type
import logging

from logicflow.engine.errors import UnknownNodeTypeError
from logicflow.engine.node import FlowNode


logger = logging.getLogger(__name__)


class NodeRegistry:
    """
    Registry of node types.

    Usage:
        registry = NodeRegistry()

        @registry.register("AdditionNode")
        class AdditionNode(FlowNode):
            metadata = ...

        node = registry.create("AdditionNode", 2, "add")
    """

    def __init__(self):
        self._types: Dict[str, Type[FlowNode]] = {}

    def register(self, name: Optional[str] = None) -> Callable:
        """
        Decorator to register a FlowNode subclass.

        Args:
            name: Type key (defaults to the class name)

        Returns:
            Decorator returning the class unchanged apart from its
            ``type_name`` and ``registry`` attributes
        """
        def decorator(cls: Type[FlowNode]) -> Type[FlowNode]:
            self.add(cls, name)
            return cls

        return decorator

    def add(self, cls: Type[FlowNode], name: Optional[str] = None) -> None:
        """Register a node class directly (non-decorator version)."""
        type_name = name or cls.__name__
        if type_name in self._types and self._types[type_name] is not cls:
            logger.warning(f"Replacing node type: {type_name}")
        cls.type_name = type_name
        cls.registry = self
        self._types[type_name] = cls
        logger.debug(f"Registered node type: {type_name}")

    def get(self, name: str) -> Optional[Type[FlowNode]]:
        """Get a node class by type key."""
        return self._types.get(name)

    def create(self, name: str, node_id: int, node_name: str) -> FlowNode:
        """
        Create a node of a registered type.

        Args:
            name: Type key
            node_id: Id of the new node
            node_name: Display name of the new node

        Returns:
            The new node

        Raises:
            UnknownNodeTypeError: If the type key is not registered
        """
        cls = self.get(name)
        if cls is None:
            raise UnknownNodeTypeError(name)
        return cls(node_id, node_name)

    def is_event(self, name: str) -> bool:
        cls = self.get(name)
        return cls is not None and cls.is_event

    def remove(self, name: str) -> bool:
        """Remove a node type from the registry."""
        if name in self._types:
            del self._types[name]
            return True
        return False

    def node_types(self) -> List[str]:
        return [name for name, cls in self._types.items() if not cls.is_event]

    def event_types(self) -> List[str]:
        return [name for name, cls in self._types.items() if cls.is_event]

    def list_types(self) -> List[Dict[str, Any]]:
        """List all registered node types with their metadata."""
        return [
            {"type": name, "is_event": cls.is_event, **cls.metadata.to_dict()}
            for name, cls in self._types.items()
        ]

    def has(self, name: str) -> bool:
        return name in self._types

    def __contains__(self, name: str) -> bool:
        return self.has(name)

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)


# Global node registry instance
node_registry = NodeRegistry()


def register_node(name: Optional[str] = None) -> Callable:
    """
    Convenience decorator to register a node type in the global registry.

    Usage:
        @register_node("DummyNode")
        class DummyNode(EventNode):
            metadata = NodeMetadata.builder("Dummy event").branch("next").build()
    """
    return node_registry.register(name)


def create_node(name: str, node_id: int, node_name: str) -> FlowNode:
    """Create a node through the global registry."""
    return node_registry.create(name, node_id, node_name)
