"""
Flow Execution Context.

An ExecutionContext is one run of a logic flow. It owns a private
NodeStatus per node, the variable table and the step counter, drives the
walk from the start node to the end of the chain, and is kept afterwards
as a read-only record of what happened.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
import logging
import time
import uuid

from logicflow.config import settings
from logicflow.engine.errors import (
    DeadLoopError,
    LogicError,
    MissingStartNodeError,
    NodeFaultError,
)
from logicflow.engine.flow import LogicFlow
from logicflow.engine.status import NodeStatus
from logicflow.engine.values import Value, to_json_value


logger = logging.getLogger(__name__)


class ExecutionStatus(str, Enum):
    """Status of a flow execution."""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class Message:
    """A message emitted by a node during a run."""
    receiver: str
    channel: str
    text: str
    node_name: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "receiver": self.receiver,
            "channel": self.channel,
            "text": self.text,
            "node_name": self.node_name,
            "created_at": self.created_at.isoformat(),
        }


class ExecutionContext:
    """
    One independent run of a logic flow.

    The context works on its own copy of the flow taken at creation, so
    later edits to the original never change what a retained context
    shows.

    Usage:
        context = ExecutionContext(flow, max_steps=100)
        error = context.execute(start_outputs=[5.0])
        print(context.render())
    """

    def __init__(
        self,
        flow: LogicFlow,
        max_steps: Optional[int] = None,
        on_message: Optional[Callable[[Message], None]] = None,
    ):
        """
        Initialize the context.

        Args:
            flow: The flow to run
            max_steps: Step ceiling (defaults to settings.MAX_FLOW_LENGTH)
            on_message: Optional callback for messages emitted by nodes
        """
        self.flow = flow.copy()
        self.run_id = str(uuid.uuid4())
        self.max_steps = settings.MAX_FLOW_LENGTH if max_steps is None else max_steps
        self.on_message = on_message

        self.statuses: Dict[int, NodeStatus] = {
            node.id: node.create_status() for node in self.flow
        }
        self.variables: Dict[str, Value] = {}
        self.step_count = 0
        self.executed_sequence: List[NodeStatus] = []
        self.messages: List[Message] = []
        self.error: Optional[LogicError] = None
        self.status = ExecutionStatus.PENDING
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None
        self.duration_ms: Optional[float] = None

    @property
    def flow_name(self) -> str:
        return self.flow.name

    def get_status(self, node_id: int) -> NodeStatus:
        return self.statuses[node_id]

    def reset(self) -> None:
        """Forget everything from a previous run of this context."""
        for status in self.statuses.values():
            status.reset()
        self.variables.clear()
        self.step_count = 0
        self.executed_sequence = []
        self.messages = []
        self.error = None

    def execute(
        self,
        start_outputs: Optional[List[Value]] = None,
        variables: Optional[Dict[str, Value]] = None,
    ) -> Optional[LogicError]:
        """
        Run the flow from its start node.

        Args:
            start_outputs: Values for the start node's outputs (event payload)
            variables: Initial variable bindings

        Returns:
            The error that terminated the run, or None on success
        """
        self.reset()
        self.status = ExecutionStatus.RUNNING
        self.started_at = datetime.now()
        start_time = time.time()

        try:
            self._run(start_outputs or [], variables or {})
        except LogicError as e:
            self.error = e
        except Exception as e:
            self.error = NodeFaultError(f"Unexpected failure: {e}", e)

        self.completed_at = datetime.now()
        self.duration_ms = (time.time() - start_time) * 1000
        if self.error is None:
            self.status = ExecutionStatus.COMPLETED
            logger.info(f"Flow '{self.flow_name}' completed in {self.step_count} steps")
        else:
            self.status = ExecutionStatus.FAILED
            logger.warning(f"Flow '{self.flow_name}' terminated with exception: {self.error}")
        return self.error

    def _run(self, start_outputs: List[Value], variables: Dict[str, Value]) -> None:
        start = self.flow.start_node
        if start is None:
            raise MissingStartNodeError(f"Flow '{self.flow_name}' has no start node")

        start_status = self.get_status(start.id)
        for index, value in enumerate(start_outputs[:start.output_count]):
            start_status.set_output(index, value)
        self.variables.update(variables)

        current = start
        while current is not None:
            if self.step_count > self.max_steps:
                raise DeadLoopError(
                    f"Flow '{self.flow_name}' exceeded {self.max_steps} steps, possible dead loop"
                )
            logger.debug(f"Executing node: {current.name} (step {self.step_count + 1})")
            next_node = current.execute(self)
            self.step_count += 1
            self.executed_sequence.append(self.get_status(current.id).copy())
            current = next_node

    # --------------------------------------------------------
    # Side channels
    # --------------------------------------------------------

    def get_variable(self, name: str) -> Value:
        return self.variables.get(name)

    def set_variable(self, name: str, value: Value) -> Value:
        """Bind a variable and return its previous value."""
        previous = self.variables.get(name)
        self.variables[name] = value
        return previous

    def emit(self, message: Message) -> None:
        """Record a message and hand it to the host callback, if any."""
        self.messages.append(message)
        if self.on_message:
            try:
                self.on_message(message)
            except Exception as e:
                logger.warning(f"Message callback failed: {e}")

    # --------------------------------------------------------
    # Inspection
    # --------------------------------------------------------

    @property
    def succeeded(self) -> bool:
        return self.status == ExecutionStatus.COMPLETED

    def render(self) -> str:
        """Per-step trace of the run, ending with the error if it failed."""
        lines = [f"Flow '{self.flow_name}' run {self.run_id} ({self.status.value}, {self.step_count} steps)"]
        for step, status in enumerate(self.executed_sequence, start=1):
            lines.append(status.render(step, self.flow))
        if self.error is not None:
            lines.append(f"Error: {self.error}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "flow_name": self.flow_name,
            "status": self.status.value,
            "step_count": self.step_count,
            "max_steps": self.max_steps,
            "variables": {k: to_json_value(v) for k, v in self.variables.items()},
            "trace": [status.to_dict() for status in self.executed_sequence],
            "messages": [message.to_dict() for message in self.messages],
            "error": self.error.to_dict() if self.error else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
        }
