"""
Flow Manager.

The FlowManager is the editing facade of one logic flow. Every edit
addresses nodes by name, is applied to the live flow, and is recorded
as an EditPath on the undo stack. It is also the entry point for running
the flow and recording the run in the history.
"""

from collections import deque
from typing import Callable, Deque, Dict, List, Optional
import logging

from logicflow.config import settings
from logicflow.engine.context import ExecutionContext, Message
from logicflow.engine.errors import LogicError, UnknownNodeTypeError
from logicflow.engine.flow import LogicFlow
from logicflow.engine.node import FlowNode
from logicflow.engine.reference import DataReference
from logicflow.engine.values import Value
from logicflow.storage.memory import RunHistory
from logicflow.tools import edits
from logicflow.tools.edits import EditPath
from logicflow.tools.registry import NodeRegistry, node_registry


logger = logging.getLogger(__name__)


class FlowManager:
    """
    Editing facade with undo/redo for one LogicFlow.

    Every applied edit clears the redo stack and disables automatic
    execution until ``enabled`` is set again. Edits naming nodes or ports
    that do not exist change nothing, record nothing and return False.

    Usage:
        manager = FlowManager.create("greeting", "TriggerNode", "start")
        manager.create_node("BroadcastMessageNode", "say")
        manager.set_next_node("start", 0, "say")
        manager.set_const_input("say", 2, "hello")
        error = manager.execute()
    """

    def __init__(
        self,
        flow: LogicFlow,
        registry: Optional[NodeRegistry] = None,
        history: Optional[RunHistory] = None,
    ):
        self.flow = flow
        self.registry = registry or node_registry
        self.history = history if history is not None else RunHistory()
        self._enabled = False
        self._undo_path: Deque[EditPath] = deque()
        self._redo_path: Deque[EditPath] = deque()

    @classmethod
    def create(
        cls,
        name: str,
        event_type: str,
        event_name: str,
        registry: Optional[NodeRegistry] = None,
        history: Optional[RunHistory] = None,
    ) -> "FlowManager":
        """
        Create a manager for a new flow with a start event node.

        Raises:
            UnknownNodeTypeError: If the event type is not registered
            ValueError: If the type is registered but not an event node
        """
        registry = registry or node_registry
        _require_event_type(registry, event_type)
        flow = LogicFlow(name)
        start = registry.create(event_type, flow.generate_id(), event_name)
        flow.add_node(start)
        flow.set_start_node_id(start.id)
        return cls(flow, registry, history)

    # ============================================================
    # State
    # ============================================================

    @property
    def name(self) -> str:
        return self.flow.name

    @property
    def start_type(self) -> Optional[str]:
        start = self.flow.start_node
        return start.type_name if start else None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    def can_undo(self) -> bool:
        return len(self._undo_path) > 0

    def can_redo(self) -> bool:
        return len(self._redo_path) > 0

    def undo_descriptions(self) -> List[str]:
        return [path.description for path in self._undo_path]

    def redo_descriptions(self) -> List[str]:
        return [path.description for path in self._redo_path]

    def _apply(self, path: EditPath) -> bool:
        path.apply(self.flow)
        self._undo_path.append(path)
        self._redo_path.clear()
        self._enabled = False
        logger.debug(f"Flow '{self.name}': {path.description}")
        return True

    def _skip(self, reason: str) -> bool:
        logger.info(f"Flow '{self.name}': {reason}, nothing changed")
        return False

    # ============================================================
    # Edits
    # ============================================================

    def create_node(self, type_name: str, name: str) -> Optional[int]:
        """
        Add a new, unconnected node.

        Returns:
            The new node's id, or None if the name is already taken

        Raises:
            UnknownNodeTypeError: If the type is not registered
        """
        if self.flow.get_node_by_name(name) is not None:
            self._skip(f"node '{name}' already exists")
            return None
        node = self.registry.create(type_name, self.flow.generate_id(), name)
        self._apply(EditPath(
            f"create {type_name} '{name}'",
            edits.add_node(node),
            edits.remove_node(node.id),
        ))
        return node.id

    def remove_node(self, name: str) -> bool:
        """Remove a node. The start node can only be replaced, not removed."""
        node = self.flow.get_node_by_name(name)
        if node is None:
            return self._skip(f"no node '{name}'")
        if node.id == self.flow.start_node_id:
            return self._skip(f"'{name}' is the start node")
        return self._apply(EditPath(
            f"remove '{name}'",
            edits.remove_node(node.id),
            edits.add_node(node),
        ))

    def rename_node(self, name: str, new_name: str) -> bool:
        node = self.flow.get_node_by_name(name)
        if node is None:
            return self._skip(f"no node '{name}'")
        if name == new_name or self.flow.get_node_by_name(new_name) is not None:
            return self._skip(f"name '{new_name}' is already taken")
        return self._apply(EditPath(
            f"rename '{name}' to '{new_name}'",
            edits.rename_node(node.id, new_name),
            edits.rename_node(node.id, name),
        ))

    def replace_event_node(self, type_name: str, name: str) -> bool:
        """
        Swap the start node for a new event node.

        The new node gets a fresh id and takes over the old start node's
        successors; references to the old start node's outputs are left
        as they are.

        Raises:
            UnknownNodeTypeError: If the type is not registered
            ValueError: If the type is not an event node
        """
        _require_event_type(self.registry, type_name)
        old = self.flow.start_node
        existing = self.flow.get_node_by_name(name)
        if existing is not None and (old is None or existing.id != old.id):
            return self._skip(f"node '{name}' already exists")

        new = self.registry.create(type_name, self.flow.generate_id(), name)
        if old is None:
            return self._apply(EditPath(
                f"set start node {type_name} '{name}'",
                edits.chain(edits.add_node(new), edits.set_start(new.id)),
                edits.chain(edits.set_start(self.flow.start_node_id), edits.remove_node(new.id)),
            ))

        for index in range(min(new.branch_count, old.branch_count)):
            new.next_node_ids[index] = old.next_node_ids[index]
        return self._apply(EditPath(
            f"replace start node '{old.name}' with {type_name} '{name}'",
            edits.chain(edits.add_node(new), edits.set_start(new.id), edits.remove_node(old.id)),
            edits.chain(edits.add_node(old), edits.set_start(old.id), edits.remove_node(new.id)),
        ))

    def set_const_input(self, name: str, index: int, value: Value) -> bool:
        node = self.flow.get_node_by_name(name)
        if node is None:
            return self._skip(f"no node '{name}'")
        if not 0 <= index < node.input_count:
            return self._skip(f"'{name}' has no input {index}")
        return self._set_input(node, index, DataReference.constant(value))

    def set_reference_input(self, name: str, index: int, source_name: str, source_index: int) -> bool:
        """Connect an input to an output of another node, both given by name."""
        node = self.flow.get_node_by_name(name)
        source = self.flow.get_node_by_name(source_name)
        if node is None or source is None:
            return self._skip(f"no node '{name if node is None else source_name}'")
        if not 0 <= index < node.input_count:
            return self._skip(f"'{name}' has no input {index}")
        if not 0 <= source_index < source.output_count:
            return self._skip(f"'{source_name}' has no output {source_index}")
        return self._set_input(node, index, DataReference.node_output(source.id, source_index))

    def disconnect_input(self, name: str, index: int) -> bool:
        node = self.flow.get_node_by_name(name)
        if node is None:
            return self._skip(f"no node '{name}'")
        if not 0 <= index < node.input_count:
            return self._skip(f"'{name}' has no input {index}")
        return self._set_input(node, index, DataReference.empty())

    def _set_input(self, node: FlowNode, index: int, reference: DataReference) -> bool:
        return self._apply(EditPath(
            f"set input {index} of '{node.name}' to {reference.render(self.flow)}",
            edits.set_input(node.id, index, reference),
            edits.set_input(node.id, index, node.inputs[index]),
        ))

    def set_next_node(self, name: str, index: int, next_name: str) -> bool:
        """Point one branch of a node at another node."""
        node = self.flow.get_node_by_name(name)
        next_node = self.flow.get_node_by_name(next_name)
        if node is None or next_node is None:
            return self._skip(f"no node '{name if node is None else next_name}'")
        if not 0 <= index < node.branch_count:
            return self._skip(f"'{name}' has no branch {index}")
        return self._set_next(node, index, next_node.id)

    def disconnect_next_node(self, name: str, index: int) -> bool:
        node = self.flow.get_node_by_name(name)
        if node is None:
            return self._skip(f"no node '{name}'")
        if not 0 <= index < node.branch_count:
            return self._skip(f"'{name}' has no branch {index}")
        return self._set_next(node, index, -1)

    def _set_next(self, node: FlowNode, index: int, next_id: int) -> bool:
        return self._apply(EditPath(
            f"set branch {index} of '{node.name}' to #{next_id}",
            edits.set_next(node.id, index, next_id),
            edits.set_next(node.id, index, node.next_node_ids[index]),
        ))

    # ============================================================
    # Undo / Redo
    # ============================================================

    def undo(self) -> bool:
        """Revert the last edit. Returns False if there is nothing to undo."""
        if not self._undo_path:
            return False
        path = self._undo_path.pop()
        path.revert(self.flow)
        self._redo_path.append(path)
        self._enabled = False
        logger.debug(f"Flow '{self.name}': undo {path.description}")
        return True

    def redo(self) -> bool:
        """Re-apply the last undone edit. Returns False if there is nothing to redo."""
        if not self._redo_path:
            return False
        path = self._redo_path.pop()
        path.apply(self.flow)
        self._undo_path.append(path)
        self._enabled = False
        logger.debug(f"Flow '{self.name}': redo {path.description}")
        return True

    # ============================================================
    # Execution
    # ============================================================

    def run(
        self,
        start_outputs: Optional[List[Value]] = None,
        variables: Optional[Dict[str, Value]] = None,
        max_steps: Optional[int] = None,
        on_message: Optional[Callable[[Message], None]] = None,
    ) -> ExecutionContext:
        """
        Run the flow in a fresh context and record it in the history.

        Args:
            start_outputs: Event payload for the start node outputs
            variables: Initial variables
            max_steps: Step ceiling (defaults to settings.MAX_FLOW_LENGTH)
            on_message: Callback for messages emitted during the run

        Returns:
            The finished execution context
        """
        context = ExecutionContext(
            self.flow,
            max_steps=settings.MAX_FLOW_LENGTH if max_steps is None else max_steps,
            on_message=on_message,
        )
        context.execute(start_outputs, variables)
        self.history.add(context)
        return context

    def execute(
        self,
        start_outputs: Optional[List[Value]] = None,
        variables: Optional[Dict[str, Value]] = None,
        max_steps: Optional[int] = None,
        on_message: Optional[Callable[[Message], None]] = None,
    ) -> Optional[LogicError]:
        """Run the flow and return the error that terminated it, if any."""
        return self.run(start_outputs, variables, max_steps, on_message).error

    def __repr__(self) -> str:
        return f"FlowManager(flow={self.flow!r}, enabled={self._enabled})"


def _require_event_type(registry: NodeRegistry, type_name: str) -> None:
    if not registry.has(type_name):
        raise UnknownNodeTypeError(type_name)
    if not registry.is_event(type_name):
        raise ValueError(f"Node type '{type_name}' is not an event node")
