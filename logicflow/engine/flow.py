"""
Logic flow definition.

A LogicFlow is an id-keyed store of nodes plus the id of the event node
that starts it. All links between nodes (input references, successors,
the start pointer) are plain ids looked up in this store.
"""

from typing import Any, Dict, Iterator, List, Optional, Set
import logging

from logicflow.engine.node import FlowNode


logger = logging.getLogger(__name__)


class LogicFlow:
    """
    A persistent node graph.

    Node ids come from a per-flow counter that only moves forward, so an
    id is never handed out twice by the same flow.

    Usage:
        flow = LogicFlow("greeting")
        start = registry.create("TriggerNode", flow.generate_id(), "start")
        flow.add_node(start)
        flow.set_start_node_id(start.id)
    """

    def __init__(self, name: str):
        self.name = name
        self.nodes: Dict[int, FlowNode] = {}
        self.start_node_id: int = -1
        self._id_counter: int = 0

    @property
    def id_counter(self) -> int:
        return self._id_counter

    def generate_id(self) -> int:
        """Reserve the next unused node id."""
        self._id_counter += 1
        return self._id_counter

    def add_node(self, node: FlowNode) -> None:
        self.nodes[node.id] = node
        if node.id > self._id_counter:
            self._id_counter = node.id

    def remove_node(self, node_id: int) -> Optional[FlowNode]:
        return self.nodes.pop(node_id, None)

    def get_node(self, node_id: int) -> Optional[FlowNode]:
        return self.nodes.get(node_id)

    def get_node_by_name(self, name: str) -> Optional[FlowNode]:
        """First node with the given name, by ascending id."""
        for node_id in sorted(self.nodes):
            if self.nodes[node_id].name == name:
                return self.nodes[node_id]
        return None

    @property
    def start_node(self) -> Optional[FlowNode]:
        return self.nodes.get(self.start_node_id)

    def set_start_node_id(self, node_id: int) -> None:
        if node_id not in self.nodes:
            logger.warning(f"Flow '{self.name}': start node #{node_id} is not in the flow")
        self.start_node_id = node_id

    def copy(self) -> "LogicFlow":
        """Structural copy; every node is re-created through the registry."""
        flow = LogicFlow(self.name)
        for node in self.nodes.values():
            flow.add_node(node.copy())
        flow.start_node_id = self.start_node_id
        flow._id_counter = self._id_counter
        return flow

    def sorted_nodes(self) -> List[FlowNode]:
        """
        Nodes in a stable, reading-friendly order.

        Depth-first from the start node following branches in order, then
        from every node nothing points at, then whatever is left, by id.
        """
        in_degree = {node_id: 0 for node_id in self.nodes}
        for node in self.nodes.values():
            for next_id in node.next_node_ids:
                if next_id in in_degree:
                    in_degree[next_id] += 1

        ordered: List[FlowNode] = []
        seen: Set[int] = set()

        def walk(root_id: int) -> None:
            stack = [root_id]
            while stack:
                node_id = stack.pop()
                if node_id in seen or node_id not in self.nodes:
                    continue
                seen.add(node_id)
                node = self.nodes[node_id]
                ordered.append(node)
                for next_id in reversed(node.next_node_ids):
                    if next_id >= 0 and next_id not in seen:
                        stack.append(next_id)

        walk(self.start_node_id)
        for node_id in sorted(self.nodes):
            if in_degree[node_id] == 0:
                walk(node_id)
        for node_id in sorted(self.nodes):
            walk(node_id)
        return ordered

    def to_dict(self) -> Dict[str, Any]:
        """Structural snapshot, keyed the same way as the file format."""
        return {
            "name": self.name,
            "startNodeId": self.start_node_id,
            "nodes": [node.to_dict() for node in self.sorted_nodes()],
        }

    def render(self) -> str:
        """Static description of the whole flow."""
        lines = [f"Flow '{self.name}' ({len(self.nodes)} nodes)"]
        for node in self.sorted_nodes():
            lines.append(node.render(self))
        return "\n".join(lines)

    def __contains__(self, node_id: int) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[FlowNode]:
        return iter(self.nodes.values())

    def __repr__(self) -> str:
        return f"LogicFlow(name={self.name!r}, nodes={len(self.nodes)}, start={self.start_node_id})"
