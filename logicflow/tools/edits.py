"""
Reversible flow edits.

An EditPath pairs a forward and an inverse function over a LogicFlow.
Both are built from the small functions below with ``functools.partial``
so that they only hold ids and snapshot copies, never live nodes, and
look nodes up by id in whatever flow they are applied to.
"""

from dataclasses import dataclass
from functools import partial
from typing import Callable, Sequence

from logicflow.engine.flow import LogicFlow
from logicflow.engine.node import FlowNode
from logicflow.engine.reference import DataReference


FlowEdit = Callable[[LogicFlow], None]


@dataclass(frozen=True)
class EditPath:
    """
    A reversible structural edit.

    Attributes:
        description: What the edit did, for logs and listings
        forward: Applies the edit
        inverse: Reverts the edit
    """
    description: str
    forward: FlowEdit
    inverse: FlowEdit

    def apply(self, flow: LogicFlow) -> None:
        self.forward(flow)

    def revert(self, flow: LogicFlow) -> None:
        self.inverse(flow)


def _add_node(snapshot: FlowNode, flow: LogicFlow) -> None:
    flow.add_node(snapshot.copy())


def _remove_node(node_id: int, flow: LogicFlow) -> None:
    flow.remove_node(node_id)


def _rename_node(node_id: int, name: str, flow: LogicFlow) -> None:
    node = flow.get_node(node_id)
    if node is not None:
        node.name = name


def _set_input(node_id: int, index: int, reference: DataReference, flow: LogicFlow) -> None:
    node = flow.get_node(node_id)
    if node is not None:
        node.inputs[index] = reference.copy()


def _set_next(node_id: int, index: int, next_id: int, flow: LogicFlow) -> None:
    node = flow.get_node(node_id)
    if node is not None:
        node.next_node_ids[index] = next_id


def _set_start(node_id: int, flow: LogicFlow) -> None:
    flow.set_start_node_id(node_id)


def _chain(steps: Sequence[FlowEdit], flow: LogicFlow) -> None:
    for step in steps:
        step(flow)


def add_node(snapshot: FlowNode) -> FlowEdit:
    return partial(_add_node, snapshot.copy())


def remove_node(node_id: int) -> FlowEdit:
    return partial(_remove_node, node_id)


def rename_node(node_id: int, name: str) -> FlowEdit:
    return partial(_rename_node, node_id, name)


def set_input(node_id: int, index: int, reference: DataReference) -> FlowEdit:
    return partial(_set_input, node_id, index, reference.copy())


def set_next(node_id: int, index: int, next_id: int) -> FlowEdit:
    return partial(_set_next, node_id, index, next_id)


def set_start(node_id: int) -> FlowEdit:
    return partial(_set_start, node_id)


def chain(*steps: FlowEdit) -> FlowEdit:
    """Apply several edits in order as one."""
    return partial(_chain, tuple(steps))
