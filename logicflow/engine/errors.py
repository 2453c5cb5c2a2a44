"""
Error types raised while running or building logic flows.
"""

from typing import Optional


class LogicError(Exception):
    """
    A failure that aborts one flow execution.

    Attributes:
        message: Human-readable cause
        cause: Optional low-level exception that triggered this error
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def to_dict(self):
        return {
            "kind": type(self).__name__,
            "message": self.message,
            "cause": repr(self.cause) if self.cause is not None else None,
        }

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} ({self.cause})"
        return self.message


class DanglingReferenceError(LogicError):
    """A reference points at a node id that is not in the flow."""


class NotExecutedError(LogicError):
    """A reference points at a node that has not run in this context."""


class DeadLoopError(LogicError):
    """The step ceiling of a run was exceeded."""


class NodeFaultError(LogicError):
    """A node's own computation failed."""


class MissingStartNodeError(LogicError):
    """The flow has no start node to execute."""


class UnknownNodeTypeError(KeyError):
    """A node type key is not registered."""

    def __init__(self, type_name: str):
        super().__init__(type_name)
        self.type_name = type_name

    def __str__(self) -> str:
        return f"Node type '{self.type_name}' not found in registry"
