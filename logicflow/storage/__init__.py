"""
Storage package - In-memory storage for flows and run history.
"""

from logicflow.storage.memory import (
    FlowStorage,
    RunHistory,
    flow_storage,
)

__all__ = [
    "FlowStorage",
    "RunHistory",
    "flow_storage",
]
