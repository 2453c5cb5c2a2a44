"""
In-Memory Storage for LogicFlow.

Holds the flow managers of a running service, the bounded history of
finished executions, and loading/saving of the flow directory.
"""

from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, Any, Deque, Dict, Iterator, List, Optional, Union
import asyncio
import logging
import re

from logicflow.config import settings
from logicflow.engine.context import ExecutionContext
from logicflow.engine.errors import UnknownNodeTypeError
from logicflow.engine.values import Value
from logicflow.tools.serializer import load_file, save_file

if TYPE_CHECKING:
    from logicflow.tools.manager import FlowManager


logger = logging.getLogger(__name__)


class RunHistory:
    """
    Bounded list of finished execution contexts, oldest first.

    Adding a run beyond ``max_size`` drops the oldest one.
    Not meant for concurrent mutation; one owner adds runs.
    """

    def __init__(self, max_size: Optional[int] = None):
        self.max_size = settings.MAX_FLOW_HISTORY_SIZE if max_size is None else max_size
        self._runs: Deque[ExecutionContext] = deque(maxlen=self.max_size)

    def add(self, context: ExecutionContext) -> None:
        self._runs.append(context)

    def get(self, run_id: str) -> Optional[ExecutionContext]:
        """Get a run by ID."""
        for context in self._runs:
            if context.run_id == run_id:
                return context
        return None

    def latest(self) -> Optional[ExecutionContext]:
        return self._runs[-1] if self._runs else None

    def list_all(self) -> List[ExecutionContext]:
        return list(self._runs)

    def list_by_flow(self, flow_name: str) -> List[ExecutionContext]:
        """List all runs of a specific flow."""
        return [c for c in self._runs if c.flow_name == flow_name]

    def clear(self) -> None:
        self._runs.clear()

    def __len__(self) -> int:
        return len(self._runs)

    def __iter__(self) -> Iterator[ExecutionContext]:
        return iter(self._runs)


def flow_file_name(flow_name: str) -> str:
    """File name a flow is stored under inside the flow directory."""
    return re.sub(r"[^A-Za-z0-9_.-]", "_", flow_name) + ".json"


class FlowStorage:
    """
    Async-safe in-memory storage for flow managers.

    Flows are stored by name. Every stored manager records its runs in
    the storage's shared RunHistory.
    """

    def __init__(self, history: Optional[RunHistory] = None):
        self._flows: Dict[str, "FlowManager"] = {}
        self._lock = asyncio.Lock()
        self.history = history if history is not None else RunHistory()

    async def save(self, manager: "FlowManager") -> "FlowManager":
        """
        Store a flow manager under its flow's name, replacing any other.

        Args:
            manager: The manager to store

        Returns:
            The stored manager
        """
        async with self._lock:
            manager.history = self.history
            self._flows[manager.name] = manager
            return manager

    async def get(self, name: str) -> Optional["FlowManager"]:
        """Get a flow manager by flow name."""
        async with self._lock:
            return self._flows.get(name)

    async def delete(self, name: str) -> bool:
        """Delete a flow."""
        async with self._lock:
            if name in self._flows:
                del self._flows[name]
                return True
            return False

    async def list_all(self) -> List["FlowManager"]:
        """List all stored flow managers."""
        async with self._lock:
            return list(self._flows.values())

    async def exists(self, name: str) -> bool:
        async with self._lock:
            return name in self._flows

    async def dispatch_event(
        self,
        event_type: str,
        outputs: Optional[List[Value]] = None,
        variables: Optional[Dict[str, Value]] = None,
    ) -> List[ExecutionContext]:
        """
        Run every enabled flow started by the given event type.

        Args:
            event_type: Type key of the event node
            outputs: Event payload for the start node outputs
            variables: Initial variables for each run

        Returns:
            The execution contexts of the runs, in flow-name order
        """
        async with self._lock:
            targets = [
                self._flows[name] for name in sorted(self._flows)
                if self._flows[name].enabled and self._flows[name].start_type == event_type
            ]
        contexts = [manager.run(outputs, variables) for manager in targets]
        logger.info(f"Event '{event_type}' dispatched to {len(contexts)} flows")
        return contexts

    async def load_directory(self, directory: Optional[Union[str, Path]] = None) -> int:
        """
        Load every ``*.json`` flow file of a directory.

        Files that fail to load are logged and skipped.

        Returns:
            Number of flows loaded
        """
        from logicflow.tools.manager import FlowManager

        directory = Path(directory or settings.FLOW_DIRECTORY)
        if not directory.is_dir():
            logger.info(f"Flow directory {directory} does not exist, nothing to load")
            return 0

        loaded = 0
        for path in sorted(directory.glob("*.json")):
            try:
                flow = load_file(path)
            except UnknownNodeTypeError as e:
                logger.error(f"Skipping {path}: {e}")
                continue
            if flow is None:
                continue
            await self.save(FlowManager(flow, history=self.history))
            loaded += 1
        logger.info(f"Loaded {loaded} flows from {directory}")
        return loaded

    async def save_all(self, directory: Optional[Union[str, Path]] = None) -> int:
        """
        Atomically write every stored flow to a directory.

        Returns:
            Number of flows written
        """
        directory = Path(directory or settings.FLOW_DIRECTORY)
        saved = 0
        for manager in await self.list_all():
            if save_file(manager.flow, directory / flow_file_name(manager.name), replace=True):
                saved += 1
        return saved

    def summary(self) -> Dict[str, Any]:
        return {"flows_count": len(self._flows), "runs_count": len(self.history)}

    def __len__(self) -> int:
        return len(self._flows)


# Global storage instance
flow_storage = FlowStorage()
