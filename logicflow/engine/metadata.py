"""
Node metadata: the immutable port layout of a node type.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class PortInfo:
    """Name, description and value-kind hint of one port or branch."""
    name: str
    description: str = ""
    data_type: str = "any"

    def to_dict(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "description": self.description,
            "data_type": self.data_type,
        }


@dataclass(frozen=True)
class NodeMetadata:
    """
    Shape descriptor of a node type.

    The number of inputs, outputs and branches of every node of a type is
    the length of the corresponding tuple here and never changes.

    Usage:
        metadata = (
            NodeMetadata.builder("Addition", "Adds two numbers")
            .input("a", "First operand", "number")
            .input("b", "Second operand", "number")
            .output("sum", "a + b", "number")
            .branch("next", "Runs after the addition")
            .build()
        )
    """
    display_name: str
    description: str = ""
    inputs: Tuple[PortInfo, ...] = ()
    outputs: Tuple[PortInfo, ...] = ()
    branches: Tuple[PortInfo, ...] = ()

    @property
    def input_count(self) -> int:
        return len(self.inputs)

    @property
    def output_count(self) -> int:
        return len(self.outputs)

    @property
    def branch_count(self) -> int:
        return len(self.branches)

    @staticmethod
    def builder(display_name: str, description: str = "") -> "NodeMetadataBuilder":
        return NodeMetadataBuilder(display_name, description)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_name": self.display_name,
            "description": self.description,
            "inputs": [port.to_dict() for port in self.inputs],
            "outputs": [port.to_dict() for port in self.outputs],
            "branches": [port.to_dict() for port in self.branches],
        }


class NodeMetadataBuilder:
    """Fluent builder for :class:`NodeMetadata`."""

    def __init__(self, display_name: str, description: str = ""):
        self._display_name = display_name
        self._description = description
        self._inputs: List[PortInfo] = []
        self._outputs: List[PortInfo] = []
        self._branches: List[PortInfo] = []

    def input(self, name: str, description: str = "", data_type: str = "any") -> "NodeMetadataBuilder":
        self._inputs.append(PortInfo(name, description, data_type))
        return self

    def output(self, name: str, description: str = "", data_type: str = "any") -> "NodeMetadataBuilder":
        self._outputs.append(PortInfo(name, description, data_type))
        return self

    def branch(self, name: str, description: str = "") -> "NodeMetadataBuilder":
        self._branches.append(PortInfo(name, description, "branch"))
        return self

    def build(self) -> NodeMetadata:
        return NodeMetadata(
            display_name=self._display_name,
            description=self._description,
            inputs=tuple(self._inputs),
            outputs=tuple(self._outputs),
            branches=tuple(self._branches),
        )
